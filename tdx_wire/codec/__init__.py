"""
Low-level field codecs.

The TdxCodec facade lives in ``tdx_wire.codec.facade`` and is re-exported
from the top-level package.
"""

from .varint import decode_varint, encode_varint, varint_size
from .volume import decode_packed_float, encode_packed_float, PACKED_FLOAT_SIZE
from .text import decode_text, encode_text, TEXT_ERROR_POLICIES
from .reader import PayloadReader

__all__ = [
    'decode_varint',
    'encode_varint',
    'varint_size',
    'decode_packed_float',
    'encode_packed_float',
    'PACKED_FLOAT_SIZE',
    'decode_text',
    'encode_text',
    'TEXT_ERROR_POLICIES',
    'PayloadReader',
]
