"""
Configuration schema for tdx-wire.

Supports:
- YAML file loading
- Environment variable substitution (${VAR_NAME})
- Validation with error messages

Example config (tdx.yml):
    version: 1

    codec:
      initial_msg_id: 1
      text_errors: replace
      on_unknown_type: raise

    session:
      kline_page_size: 800
      check_msg_id: true

    logging:
      level: ${TDX_LOG_LEVEL}
"""

import logging
import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import yaml

from ..codec.text import TEXT_ERROR_POLICIES


UNKNOWN_TYPE_POLICIES = ('raise', 'skip')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${VAR_NAME} with environment variable values.

    Example:
        ${TDX_LOG_LEVEL} → os.environ.get('TDX_LOG_LEVEL')
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'

        def replace(match):
            env_value = os.environ.get(match.group(1))
            if env_value is None:
                return match.group(0)  # Keep original if not found
            return env_value

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]

    return value


@dataclass
class CodecConfig:
    """Codec behaviour."""
    initial_msg_id: int = 1
    text_errors: str = 'replace'
    on_unknown_type: str = 'raise'


@dataclass
class SessionConfig:
    """Paging and response checks used by Session."""
    kline_page_size: int = 800
    trade_page_size: int = 1800
    history_trade_page_size: int = 2000
    check_msg_id: bool = True


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = 'WARNING'

    @property
    def level_number(self) -> int:
        return getattr(logging, str(self.level).upper(), logging.WARNING)


@dataclass
class TdxConfig:
    """Root configuration."""

    version: int = 1
    codec: CodecConfig = field(default_factory=CodecConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path) -> 'TdxConfig':
        """Load from YAML file with env var substitution."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        data = _substitute_env_vars(data)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'TdxConfig':
        """Create from dictionary."""
        return cls(
            version=data.get('version', 1),
            codec=CodecConfig(**(data.get('codec') or {})),
            session=SessionConfig(**(data.get('session') or {})),
            logging=LoggingConfig(**(data.get('logging') or {})),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Convert to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate config. Returns list of errors (empty if valid)."""
        errors = []

        msg_id = self.codec.initial_msg_id
        if not isinstance(msg_id, int) or not 0 <= msg_id <= 0xFFFFFFFF:
            errors.append(f"Invalid initial_msg_id: {msg_id}")

        if self.codec.text_errors not in TEXT_ERROR_POLICIES:
            errors.append(f"Invalid text_errors policy: {self.codec.text_errors}")

        if self.codec.on_unknown_type not in UNKNOWN_TYPE_POLICIES:
            errors.append(f"Invalid on_unknown_type policy: {self.codec.on_unknown_type}")

        limits = {
            'kline_page_size': 800,
            'trade_page_size': 0xFFFF,
            'history_trade_page_size': 0xFFFF,
        }
        for name, maximum in limits.items():
            value = getattr(self.session, name)
            if not isinstance(value, int) or not 0 < value <= maximum:
                errors.append(f"Invalid {name}: {value} (1..{maximum})")

        if str(self.logging.level).upper() not in LOG_LEVELS:
            errors.append(f"Invalid logging level: {self.logging.level}")

        return errors


def load_config(path: Optional[Path] = None) -> TdxConfig:
    """Load config from file or return defaults."""
    if path and Path(path).exists():
        return TdxConfig.load(path)

    search_paths = [
        Path('./tdx.yml'),
        Path('./tdx.yaml'),
        Path.home() / '.tdx' / 'config.yml',
    ]

    for p in search_paths:
        if p.exists():
            return TdxConfig.load(p)

    return TdxConfig()


def generate_default_config() -> str:
    """Generate default config as YAML."""
    return """# tdx-wire Configuration
version: 1

codec:
  initial_msg_id: 1
  text_errors: replace      # replace | strict
  on_unknown_type: raise    # raise | skip

session:
  kline_page_size: 800
  trade_page_size: 1800
  history_trade_page_size: 2000
  check_msg_id: true

logging:
  level: WARNING
"""
