"""
Request and response frames.

Request layout (12-byte header):
    Byte 0:      prefix     0x0C
    Bytes 1-4:   msg_id     u32  Sequencer-assigned request id
    Byte 5:      control    u8   Normally 0x01
    Bytes 6-7:   length     u16  len(payload) + 2
    Bytes 8-9:   length     u16  Repeated, always equal to the first
    Bytes 10-11: type       u16  MessageType code
    Bytes 12-:   payload

Response layout (16-byte header):
    Bytes 0-3:   prefix     B1 CB 74 00 (0x0074CBB1 little-endian)
    Byte 4:      control    u8   0x1C success, 0x0C error
    Bytes 5-8:   msg_id     u32  Echoes the request
    Byte 9:      reserved   u8
    Bytes 10-11: type       u16  Echoes the request type
    Bytes 12-13: zip_len    u16  Payload bytes on the wire
    Bytes 14-15: raw_len    u16  Payload bytes after decompression
    Bytes 16-:   payload    zip_len bytes

All multi-byte fields are little-endian.
"""

import logging
import struct
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.errors import (
    BadPrefix,
    FieldOutOfRange,
    FrameTooShort,
    FrameTruncated,
    LengthFieldMismatch,
)
from .compression import compress as deflate, reverse
from .message_types import (
    CONTROL_REQUEST,
    CONTROL_SUCCESS,
    CONTROL_SUCCESS_BIT,
    MessageType,
    REQUEST_PREFIX,
    RESPONSE_PREFIX,
    RESPONSE_PREFIX_LE,
)

logger = logging.getLogger(__name__)


REQUEST_HEADER_SIZE = 12
RESPONSE_HEADER_SIZE = 16

# Largest payload whose length + 2 still fits the u16 length field
MAX_PAYLOAD_SIZE = 0xFFFF - 2


@dataclass(frozen=True)
class RequestFrame:
    """Parsed request frame."""

    msg_id: int
    msg_type: int
    payload: bytes = b''
    control: int = CONTROL_REQUEST

    # B=prefix, I=msg_id, B=control, H=length, H=length, H=type
    FORMAT = '<BIBHHH'

    @property
    def length(self) -> int:
        return len(self.payload) + 2

    @property
    def kind(self) -> Optional[MessageType]:
        return MessageType.lookup(self.msg_type)

    def encode(self) -> bytes:
        """Encode frame to bytes."""
        return build_request(self.msg_type, self.payload, self.msg_id, self.control)


@dataclass(frozen=True)
class ResponseFrame:
    """Parsed response frame. ``payload`` is still compressed if it was on the wire."""

    control: int
    msg_id: int
    reserved: int
    msg_type: int
    zip_length: int
    raw_length: int
    payload: bytes
    prefix: int = RESPONSE_PREFIX_LE

    # 4s=prefix, B=control, I=msg_id, B=reserved, H=type, H=zip_len, H=raw_len
    FORMAT = '<4sBIBHHH'

    @property
    def kind(self) -> Optional[MessageType]:
        """MessageType for the type field, None if the type is unknown."""
        return MessageType.lookup(self.msg_type)

    @property
    def is_success(self) -> bool:
        return self.control & CONTROL_SUCCESS_BIT == CONTROL_SUCCESS_BIT

    @property
    def is_compressed(self) -> bool:
        return self.zip_length != self.raw_length

    @property
    def frame_size(self) -> int:
        return RESPONSE_HEADER_SIZE + self.zip_length

    def data(self) -> bytes:
        """Payload with compression reversed."""
        return reverse(self.payload, self.zip_length, self.raw_length)

    def encode(self) -> bytes:
        """Encode frame to bytes exactly as parsed."""
        header = struct.pack(
            self.FORMAT,
            RESPONSE_PREFIX,
            self.control,
            self.msg_id,
            self.reserved,
            self.msg_type,
            self.zip_length,
            self.raw_length,
        )
        return header + self.payload


def _check_range(name: str, value: int, maximum: int) -> None:
    if not 0 <= value <= maximum:
        raise FieldOutOfRange(name, {'field': name, 'value': value, 'max': maximum})


def build_request(
    msg_type: int,
    payload: bytes,
    msg_id: int,
    control: int = CONTROL_REQUEST,
) -> bytes:
    """
    Build a request frame.

    Args:
        msg_type: MessageType code
        payload: Type-specific payload, copied verbatim
        msg_id: Request id (u32)
        control: Control byte, 0x01 for every known request

    Returns:
        Frame bytes ready to send
    """
    payload = bytes(payload)
    _check_range('msg_id', msg_id, 0xFFFFFFFF)
    _check_range('msg_type', int(msg_type), 0xFFFF)
    _check_range('control', control, 0xFF)
    _check_range('payload_length', len(payload), MAX_PAYLOAD_SIZE)

    length = len(payload) + 2
    header = struct.pack(
        RequestFrame.FORMAT,
        REQUEST_PREFIX,
        msg_id,
        control,
        length,
        length,
        int(msg_type),
    )

    logger.debug(
        "request %s id=%d len=%d",
        MessageType.label(int(msg_type)), msg_id, len(payload),
    )
    return header + payload


def parse_request(data: bytes) -> RequestFrame:
    """Parse a request frame (fixtures, captures)."""
    if len(data) < REQUEST_HEADER_SIZE:
        raise FrameTooShort(
            context={'size': len(data), 'minimum': REQUEST_HEADER_SIZE},
        )

    prefix, msg_id, control, length1, length2, msg_type = struct.unpack_from(
        RequestFrame.FORMAT, data, 0
    )

    if prefix != REQUEST_PREFIX:
        raise BadPrefix(context={'prefix': f'0x{prefix:02X}'})

    if length1 != length2:
        raise LengthFieldMismatch(context={'length1': length1, 'length2': length2})

    if length1 < 2:
        raise FrameTruncated("length field below 2", {'length': length1})

    payload_size = length1 - 2
    available = len(data) - REQUEST_HEADER_SIZE
    if available != payload_size:
        raise FrameTruncated(
            context={'declared': payload_size, 'available': available},
        )

    return RequestFrame(
        msg_id=msg_id,
        msg_type=msg_type,
        payload=bytes(data[REQUEST_HEADER_SIZE:]),
        control=control,
    )


def build_response(
    msg_type: int,
    payload: bytes,
    msg_id: int,
    compress: bool = False,
    control: int = CONTROL_SUCCESS,
    reserved: int = 0,
) -> bytes:
    """
    Build a response frame as a server would send it.

    With ``compress`` the payload is deflated and zip_len/raw_len differ.
    Used by tests and stub transports.
    """
    raw = bytes(payload)
    body = deflate(raw) if compress else raw

    _check_range('raw_length', len(raw), 0xFFFF)
    _check_range('zip_length', len(body), 0xFFFF)

    return ResponseFrame(
        control=control,
        msg_id=msg_id,
        reserved=reserved,
        msg_type=int(msg_type),
        zip_length=len(body),
        raw_length=len(raw),
        payload=body,
    ).encode()


def _parse_header(data: bytes, offset: int = 0) -> Tuple:
    prefix, control, msg_id, reserved, msg_type, zip_length, raw_length = (
        struct.unpack_from(ResponseFrame.FORMAT, data, offset)
    )
    if prefix != RESPONSE_PREFIX:
        raise BadPrefix(context={'prefix': prefix.hex()})
    return control, msg_id, reserved, msg_type, zip_length, raw_length


def parse_response(data: bytes) -> ResponseFrame:
    """
    Parse one complete response frame.

    Does not decompress or interpret the payload, and accepts unknown
    message types so callers can decide what to do with them.

    Raises:
        FrameTooShort: fewer than 16 bytes
        BadPrefix: prefix is not B1 CB 74 00
        FrameTruncated: bytes after the header are not exactly zip_len
    """
    if len(data) < RESPONSE_HEADER_SIZE:
        raise FrameTooShort(
            context={'size': len(data), 'minimum': RESPONSE_HEADER_SIZE},
        )

    control, msg_id, reserved, msg_type, zip_length, raw_length = _parse_header(data)

    available = len(data) - RESPONSE_HEADER_SIZE
    if available != zip_length:
        raise FrameTruncated(
            context={'zip_length': zip_length, 'available': available},
        )

    frame = ResponseFrame(
        control=control,
        msg_id=msg_id,
        reserved=reserved,
        msg_type=msg_type,
        zip_length=zip_length,
        raw_length=raw_length,
        payload=bytes(data[RESPONSE_HEADER_SIZE:]),
    )

    logger.debug(
        "response %s id=%d control=0x%02X zip=%d raw=%d",
        MessageType.label(msg_type), msg_id, control, zip_length, raw_length,
    )
    return frame


def split_frames(buffer: bytes) -> Tuple[List[ResponseFrame], bytes]:
    """
    Cut a receive buffer into complete response frames.

    Bytes before a response prefix are skipped, which resynchronises a
    stream after garbage. An incomplete trailing frame is returned as the
    remainder so the caller can prepend it to the next read.

    Returns:
        (frames, remainder)
    """
    buffer = bytes(buffer)
    frames = []
    offset = 0
    size = len(buffer)

    while True:
        start = buffer.find(RESPONSE_PREFIX, offset)
        if start < 0:
            # Keep a possible partial prefix at the tail
            tail = buffer[offset:]
            keep = 0
            for n in range(len(RESPONSE_PREFIX) - 1, 0, -1):
                if tail.endswith(RESPONSE_PREFIX[:n]):
                    keep = n
                    break
            if len(tail) > keep:
                logger.debug("skipped %d bytes without response prefix", len(tail) - keep)
            return frames, tail[len(tail) - keep:] if keep else b''

        if start > offset:
            logger.debug("skipped %d bytes before response prefix", start - offset)

        if start + RESPONSE_HEADER_SIZE > size:
            return frames, buffer[start:]

        _, _, _, _, zip_length, _ = _parse_header(buffer, start)
        end = start + RESPONSE_HEADER_SIZE + zip_length
        if end > size:
            return frames, buffer[start:]

        frames.append(parse_response(buffer[start:end]))
        offset = end
