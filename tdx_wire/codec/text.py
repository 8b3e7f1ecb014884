"""
Legacy text conversion.

Instrument names and server banners are GBK byte runs padded with NULs.
This is the only place raw legacy bytes are turned into ``str``.
"""

from ..core.errors import EncodingError


TEXT_ENCODING = 'gbk'

# 'replace' substitutes U+FFFD for unmappable runs, 'strict' raises
TEXT_ERROR_POLICIES = ('replace', 'strict')


def decode_text(raw: bytes, errors: str = 'replace') -> str:
    """Decode a GBK byte run, trimming trailing NUL padding."""
    if errors not in TEXT_ERROR_POLICIES:
        raise ValueError(f"Unknown text error policy: {errors!r}")

    try:
        text = bytes(raw).decode(TEXT_ENCODING, errors=errors)
    except UnicodeDecodeError as e:
        raise EncodingError(
            e.reason,
            {'start': e.start, 'end': e.end, 'bytes': bytes(raw).hex()},
        ) from e

    return text.rstrip('\x00')


def encode_text(text: str, width: int = 0) -> bytes:
    """Encode ``text`` as GBK, NUL-padded to ``width`` when given."""
    try:
        raw = text.encode(TEXT_ENCODING)
    except UnicodeEncodeError as e:
        raise EncodingError(e.reason, {'text': text}) from e

    if width:
        if len(raw) > width:
            raise EncodingError("text wider than field", {'text': text, 'width': width})
        raw = raw.ljust(width, b'\x00')
    return raw
