"""Configuration management for tdx-wire."""

from .schema import (
    TdxConfig,
    CodecConfig,
    SessionConfig,
    LoggingConfig,
    load_config,
    generate_default_config,
)

__all__ = [
    'TdxConfig',
    'CodecConfig',
    'SessionConfig',
    'LoggingConfig',
    'load_config',
    'generate_default_config',
]
