"""
Error codes and exceptions for tdx-wire.

Structured error codes for machine-parseable failure reports.

Format: E{category}{number}
- E1xxx: Frame errors
- E2xxx: Compression errors
- E3xxx: Dispatch errors
- E4xxx: Payload errors
- E5xxx: Request errors
- E6xxx: Session errors

Every failure is recoverable per call. Frame errors abort the whole
response; payload errors carry the field and record index that failed.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Structured error codes."""

    # E1xxx: Frame errors
    E1001_BAD_PREFIX = "E1001"
    E1002_FRAME_TOO_SHORT = "E1002"
    E1003_FRAME_TRUNCATED = "E1003"
    E1004_LENGTH_FIELD_MISMATCH = "E1004"

    # E2xxx: Compression errors
    E2001_DECOMPRESSION_FAILED = "E2001"
    E2002_DECOMPRESSION_LENGTH_MISMATCH = "E2002"

    # E3xxx: Dispatch errors
    E3001_UNKNOWN_MESSAGE_TYPE = "E3001"

    # E4xxx: Payload errors
    E4001_PAYLOAD_TRUNCATED = "E4001"
    E4002_FIELD_OUT_OF_RANGE = "E4002"
    E4003_ENCODING_ERROR = "E4003"
    E4004_TRUNCATED_INPUT = "E4004"

    # E5xxx: Request errors
    E5001_INVALID_CODE = "E5001"
    E5002_INVALID_PARAMETER = "E5002"

    # E6xxx: Session errors
    E6001_RESPONSE_MISMATCH = "E6001"
    E6002_RESPONSE_ERROR = "E6002"


# Error code metadata
ERROR_METADATA = {
    ErrorCode.E1001_BAD_PREFIX: {
        'severity': 'error',
        'message': 'Response frame prefix does not match',
        'recoverable': True,
    },
    ErrorCode.E1002_FRAME_TOO_SHORT: {
        'severity': 'error',
        'message': 'Frame shorter than its fixed header',
        'recoverable': True,
    },
    ErrorCode.E1003_FRAME_TRUNCATED: {
        'severity': 'error',
        'message': 'Frame body length disagrees with its header',
        'recoverable': True,
    },
    ErrorCode.E1004_LENGTH_FIELD_MISMATCH: {
        'severity': 'error',
        'message': 'Request length fields disagree',
        'recoverable': True,
    },
    ErrorCode.E2001_DECOMPRESSION_FAILED: {
        'severity': 'error',
        'message': 'Malformed compressed payload',
        'recoverable': True,
    },
    ErrorCode.E2002_DECOMPRESSION_LENGTH_MISMATCH: {
        'severity': 'error',
        'message': 'Decompressed size differs from declared raw length',
        'recoverable': True,
    },
    ErrorCode.E3001_UNKNOWN_MESSAGE_TYPE: {
        'severity': 'warning',
        'message': 'No codec registered for message type',
        'recoverable': True,
    },
    ErrorCode.E4001_PAYLOAD_TRUNCATED: {
        'severity': 'error',
        'message': 'Payload ends before the declared records',
        'recoverable': True,
    },
    ErrorCode.E4002_FIELD_OUT_OF_RANGE: {
        'severity': 'error',
        'message': 'Decoded value outside its numeric range',
        'recoverable': True,
    },
    ErrorCode.E4003_ENCODING_ERROR: {
        'severity': 'error',
        'message': 'Text bytes have no valid mapping',
        'recoverable': True,
    },
    ErrorCode.E4004_TRUNCATED_INPUT: {
        'severity': 'error',
        'message': 'Varint runs past the end of the buffer',
        'recoverable': True,
    },
    ErrorCode.E5001_INVALID_CODE: {
        'severity': 'error',
        'message': 'Invalid instrument code',
        'recoverable': True,
    },
    ErrorCode.E5002_INVALID_PARAMETER: {
        'severity': 'error',
        'message': 'Invalid request parameter',
        'recoverable': True,
    },
    ErrorCode.E6001_RESPONSE_MISMATCH: {
        'severity': 'error',
        'message': 'Response does not answer the request',
        'recoverable': True,
    },
    ErrorCode.E6002_RESPONSE_ERROR: {
        'severity': 'error',
        'message': 'Server flagged the response as an error',
        'recoverable': True,
    },
}


class TdxError(Exception):
    """
    Base exception for all codec failures.

    Example:
        raise PayloadTruncated(
            context={'field': 'close', 'record_index': 3, 'offset': 120},
        )
    """

    code: ErrorCode = ErrorCode.E4001_PAYLOAD_TRUNCATED

    def __init__(self, detail: Optional[str] = None, context: Optional[dict] = None):
        self.detail = detail
        self.context = dict(context or {})
        super().__init__(self.message)

    @property
    def severity(self) -> str:
        return ERROR_METADATA.get(self.code, {}).get('severity', 'error')

    @property
    def message(self) -> str:
        base_msg = ERROR_METADATA.get(self.code, {}).get('message', 'Unknown error')
        if self.detail:
            base_msg = f"{base_msg}: {self.detail}"
        if self.context:
            return f"{base_msg} {self.context}"
        return base_msg

    @property
    def recoverable(self) -> bool:
        return ERROR_METADATA.get(self.code, {}).get('recoverable', False)

    def with_context(self, **context) -> 'TdxError':
        """Attach context without overwriting keys set closer to the failure."""
        for key, value in context.items():
            self.context.setdefault(key, value)
        self.args = (self.message,)
        return self

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'error': type(self).__name__,
            'severity': self.severity,
            'message': self.message,
            'recoverable': self.recoverable,
            'context': self.context,
        }


# =============================================================================
# FRAME ERRORS
# =============================================================================

class FrameError(TdxError):
    """A frame cannot be trusted; the whole response is discarded."""


class BadPrefix(FrameError):
    code = ErrorCode.E1001_BAD_PREFIX


class FrameTooShort(FrameError):
    code = ErrorCode.E1002_FRAME_TOO_SHORT


class FrameTruncated(FrameError):
    code = ErrorCode.E1003_FRAME_TRUNCATED


class LengthFieldMismatch(FrameError):
    code = ErrorCode.E1004_LENGTH_FIELD_MISMATCH


# =============================================================================
# COMPRESSION ERRORS
# =============================================================================

class CompressionError(TdxError):
    """Compressed payload could not be reversed."""


class DecompressionError(CompressionError):
    code = ErrorCode.E2001_DECOMPRESSION_FAILED


class DecompressionLengthMismatch(CompressionError):
    code = ErrorCode.E2002_DECOMPRESSION_LENGTH_MISMATCH


# =============================================================================
# DISPATCH ERRORS
# =============================================================================

class UnknownMessageType(TdxError):
    """Raised for type codes with no registered codec. Callers skip or log."""

    code = ErrorCode.E3001_UNKNOWN_MESSAGE_TYPE

    def __init__(self, msg_type: int, context: Optional[dict] = None):
        self.msg_type = msg_type
        super().__init__(f"0x{msg_type:04X}", context)


# =============================================================================
# PAYLOAD ERRORS
# =============================================================================

class PayloadError(TdxError):
    """A payload field failed to decode."""


class PayloadTruncated(PayloadError):
    code = ErrorCode.E4001_PAYLOAD_TRUNCATED


class FieldOutOfRange(PayloadError):
    code = ErrorCode.E4002_FIELD_OUT_OF_RANGE


class EncodingError(PayloadError):
    code = ErrorCode.E4003_ENCODING_ERROR


class TruncatedInput(PayloadError):
    code = ErrorCode.E4004_TRUNCATED_INPUT


# =============================================================================
# REQUEST ERRORS
# =============================================================================

class RequestError(TdxError):
    """Request parameters cannot be encoded."""


class InvalidCode(RequestError):
    code = ErrorCode.E5001_INVALID_CODE


class InvalidParameter(RequestError):
    code = ErrorCode.E5002_INVALID_PARAMETER


# =============================================================================
# SESSION ERRORS
# =============================================================================

class SessionError(TdxError):
    """A request/response exchange went wrong."""


class ResponseMismatch(SessionError):
    code = ErrorCode.E6001_RESPONSE_MISMATCH


class ResponseError(SessionError):
    code = ErrorCode.E6002_RESPONSE_ERROR
