"""Primitive TLV field writers.

Every field is ``[tag:1][length:BER][value]``. Fields go to any object
with a ``write(bytes)`` method. The ``put_*`` functions raise
SinkWriteFailed when the sink rejects a write; the ``write_*`` variants
return False instead.
"""

import functools
import logging
import struct
from enum import IntEnum

from tlvlog.errors import SinkWriteFailed
from tlvlog.varint import encode_length, length_octets

logger = logging.getLogger(__name__)

TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"

TIMESTAMP_FORMAT = "!Q"  # 8-byte uint64 big-endian
LEVEL_FORMAT = "!B"      # 1-byte uint8
TIMESTAMP_SIZE = struct.calcsize(TIMESTAMP_FORMAT)
LEVEL_SIZE = struct.calcsize(LEVEL_FORMAT)

# tag + length + value for the two fixed-width fields
TIMESTAMP_FIELD_SIZE = 1 + 1 + TIMESTAMP_SIZE
LEVEL_FIELD_SIZE = 1 + 1 + LEVEL_SIZE


class Tag(IntEnum):
    """Field tags. Values are part of the wire format."""

    LOG_ENTRY = 0x01
    TIMESTAMP = 0x02
    LEVEL = 0x04
    STRING = 0x08


def encode_text(value) -> bytes:
    """Return the raw bytes of a text field.

    ``str`` is encoded as UTF-8 (lone surrogates from undecodable input
    map back to their original bytes); ``bytes`` pass through untouched.
    """
    if isinstance(value, str):
        return value.encode(TEXT_ENCODING, TEXT_ERRORS)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"Text field must be str or bytes, got {type(value).__name__}")


def decode_text(raw: bytes) -> str:
    return bytes(raw).decode(TEXT_ENCODING, TEXT_ERRORS)


def string_field_size(raw: bytes) -> int:
    """Bytes a String field holding *raw* occupies on the wire."""
    return 1 + length_octets(len(raw)) + len(raw)


def _emit(sink, data: bytes) -> None:
    try:
        written = sink.write(data)
    except (OSError, ValueError) as exc:
        raise SinkWriteFailed(f"Write of {len(data)} bytes failed: {exc}") from exc
    # Raw (unbuffered) streams may accept fewer bytes than offered
    if isinstance(written, int) and written != len(data):
        raise SinkWriteFailed(f"Short write: {written} of {len(data)} bytes")


def put_tag(sink, tag: int) -> None:
    _emit(sink, bytes((Tag(tag),)))


def put_length(sink, length: int) -> None:
    _emit(sink, encode_length(length))


def put_header(sink, tag: int, length: int) -> None:
    """Write a tag and its length octets."""
    octets = encode_length(length)
    put_tag(sink, tag)
    _emit(sink, octets)


def put_timestamp(sink, t: int) -> None:
    """Write a Timestamp field: epoch seconds as a big-endian uint64."""
    try:
        value = struct.pack(TIMESTAMP_FORMAT, t)
    except struct.error as exc:
        raise ValueError(f"Timestamp {t!r} does not fit in uint64") from exc
    put_header(sink, Tag.TIMESTAMP, TIMESTAMP_SIZE)
    _emit(sink, value)


def put_loglevel(sink, level: int) -> None:
    """Write a Level field holding the numeric severity."""
    try:
        value = struct.pack(LEVEL_FORMAT, level)
    except struct.error as exc:
        raise ValueError(f"Level {level!r} does not fit in uint8") from exc
    put_header(sink, Tag.LEVEL, LEVEL_SIZE)
    _emit(sink, value)


def put_string(sink, s) -> None:
    """Write a String field. The length is the byte count, not characters."""
    raw = encode_text(s)
    put_header(sink, Tag.STRING, len(raw))
    _emit(sink, raw)


def _reports_failure(put):
    @functools.wraps(put)
    def write(sink, *args) -> bool:
        try:
            put(sink, *args)
        except SinkWriteFailed as exc:
            logger.debug("%s: %s", put.__name__, exc)
            return False
        return True
    return write


write_tag = _reports_failure(put_tag)
write_length = _reports_failure(put_length)
write_header = _reports_failure(put_header)
write_timestamp = _reports_failure(put_timestamp)
write_loglevel = _reports_failure(put_loglevel)
write_string = _reports_failure(put_string)
