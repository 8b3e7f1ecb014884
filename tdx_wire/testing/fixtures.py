"""
Captured request/response fixtures.

One JSON record per message kind:

    {
      "name": "...", "type": "TypeConnect", "type_value": "0x000D",
      "description": "...",
      "request": "0C 01 00 00 00 01 03 00 03 00 0D 00 01",
      "request_data": "01",
      "response": "B1 CB 74 00 ...",
      "response_data": "...",
      "params": {...},
      "notes": "..."
    }

Hex strings may contain spaces. A response or response_data containing
``[`` is an elided capture (e.g. "[... 3000 bytes ...]") and is treated
as absent.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..formats.message_types import MessageType


ELISION_MARKER = '['


def decode_hex(text: Optional[str]) -> Optional[bytes]:
    """Hex string to bytes, ignoring whitespace. Elided or empty values give None."""
    if text is None or ELISION_MARKER in text:
        return None
    cleaned = ''.join(text.split())
    if not cleaned:
        return None
    return bytes.fromhex(cleaned)


@dataclass
class FixtureRecord:
    """One captured exchange."""
    name: str
    type_name: str
    type_value: str
    description: str
    request: str
    response: str
    request_description: Optional[str] = None
    request_data: Optional[str] = None
    response_description: Optional[str] = None
    response_data: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'FixtureRecord':
        return cls(
            name=data.get('name', ''),
            type_name=data.get('type', ''),
            type_value=data.get('type_value', ''),
            description=data.get('description', ''),
            request=data.get('request', ''),
            response=data.get('response', ''),
            request_description=data.get('request_description'),
            request_data=data.get('request_data'),
            response_description=data.get('response_description'),
            response_data=data.get('response_data'),
            params=data.get('params') or {},
            notes=data.get('notes'),
        )

    @classmethod
    def load(cls, path: Path) -> 'FixtureRecord':
        with open(path, encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict:
        data = {
            'name': self.name,
            'type': self.type_name,
            'type_value': self.type_value,
            'description': self.description,
            'request': self.request,
            'response': self.response,
            'params': self.params,
        }
        for key in ('request_description', 'request_data', 'response_description',
                    'response_data', 'notes'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @property
    def msg_type(self) -> int:
        return int(self.type_value, 16)

    @property
    def kind(self) -> Optional[MessageType]:
        return MessageType.lookup(self.msg_type)

    def request_bytes(self) -> bytes:
        data = decode_hex(self.request)
        if data is None:
            raise ValueError(f"Fixture {self.name!r} has no request frame")
        return data

    def response_bytes(self) -> Optional[bytes]:
        return decode_hex(self.response)

    def request_data_bytes(self) -> Optional[bytes]:
        return decode_hex(self.request_data)

    def response_data_bytes(self) -> Optional[bytes]:
        return decode_hex(self.response_data)


def load_fixtures(directory: Path) -> List[FixtureRecord]:
    """Load every ``*.json`` fixture in a directory, sorted by file name."""
    return [FixtureRecord.load(p) for p in sorted(Path(directory).glob('*.json'))]
