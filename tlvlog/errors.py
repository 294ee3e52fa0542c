"""Logger health states and the exceptions raised by the TLV codec."""

import errno
from enum import Enum


class LogError(Enum):
    """Reason a logger can no longer write records."""

    HEALTHY = "healthy"
    CLOSED = "closed"
    OPEN_FAILED = "open_failed"
    PERMISSION_DENIED = "permission_denied"
    DISK_FAILURE = "disk_failure"
    UNAVAILABLE = "unavailable"
    CLOSE_FAILED = "close_failed"
    UNKNOWN = "unknown"


_ERRNO_STATES = {
    errno.EACCES: LogError.PERMISSION_DENIED,
    errno.EPERM: LogError.PERMISSION_DENIED,
    errno.EROFS: LogError.PERMISSION_DENIED,
    errno.ENOSPC: LogError.DISK_FAILURE,
    errno.EDQUOT: LogError.DISK_FAILURE,
    errno.EIO: LogError.DISK_FAILURE,
    errno.EFBIG: LogError.DISK_FAILURE,
    errno.EPIPE: LogError.UNAVAILABLE,
    errno.EBADF: LogError.UNAVAILABLE,
    errno.ENXIO: LogError.UNAVAILABLE,
    errno.ECONNRESET: LogError.UNAVAILABLE,
}


def classify_os_error(exc: BaseException | None) -> LogError:
    """Map a sink exception onto a LogError state."""
    if exc is None:
        return LogError.UNKNOWN
    if isinstance(exc, OSError):
        return _ERRNO_STATES.get(exc.errno, LogError.UNKNOWN)
    if isinstance(exc, ValueError):
        # io raises ValueError for operations on a closed file
        return LogError.CLOSED
    return LogError.UNKNOWN


class TLVError(Exception):
    """Base class for TLV codec failures."""


class SinkWriteFailed(TLVError):
    """The underlying sink rejected a write."""


class DecodeError(TLVError):
    """A record could not be decoded.

    ``offset`` is the byte position, relative to the start of the buffer
    being decoded, at which the fault was detected.
    """

    def __init__(self, message: str, offset: int = 0):
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self):
        return f"{self.message} (offset {self.offset})"


class InvalidLengthEncoding(DecodeError):
    """Long-form length with zero octets or more than 64 bits."""


class TruncatedInput(DecodeError):
    """Fewer length octets remain than the length header announces."""


class UnexpectedTag(DecodeError):
    """A field carries a tag that is not valid at its position."""


class TruncatedRecord(DecodeError):
    """Fewer value bytes are available than the record declares."""


class TrailingGarbage(DecodeError):
    """Nested field lengths do not sum to the declared record length."""


class InvalidLevel(DecodeError):
    """The level octet is outside the severity enumeration."""
