"""Error taxonomy for tdx-wire."""

from .errors import (
    ErrorCode,
    ERROR_METADATA,
    TdxError,
    FrameError,
    BadPrefix,
    FrameTooShort,
    FrameTruncated,
    LengthFieldMismatch,
    CompressionError,
    DecompressionError,
    DecompressionLengthMismatch,
    UnknownMessageType,
    PayloadError,
    PayloadTruncated,
    FieldOutOfRange,
    EncodingError,
    TruncatedInput,
    RequestError,
    InvalidCode,
    InvalidParameter,
    SessionError,
    ResponseMismatch,
    ResponseError,
)

__all__ = [
    'ErrorCode',
    'ERROR_METADATA',
    'TdxError',
    # Frame
    'FrameError',
    'BadPrefix',
    'FrameTooShort',
    'FrameTruncated',
    'LengthFieldMismatch',
    # Compression
    'CompressionError',
    'DecompressionError',
    'DecompressionLengthMismatch',
    # Dispatch
    'UnknownMessageType',
    # Payload
    'PayloadError',
    'PayloadTruncated',
    'FieldOutOfRange',
    'EncodingError',
    'TruncatedInput',
    # Request
    'RequestError',
    'InvalidCode',
    'InvalidParameter',
    # Session
    'SessionError',
    'ResponseMismatch',
    'ResponseError',
]
