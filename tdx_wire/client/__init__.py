"""Session helper over an injected transport."""

from .session import Session, Transport

__all__ = ['Session', 'Transport']
