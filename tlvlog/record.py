"""Log record encoder and decoder.

A record is one LogEntry field whose value is the concatenation of:

  Timestamp, Level, String(actor), String(event), [String(key), String(value)]*

Records are written back-to-back with no file header or separator; each
is delimited only by its own declared length.
"""

from __future__ import annotations

import io
import logging
import struct
import time
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterator, Mapping

from tlvlog.errors import (
    DecodeError,
    InvalidLengthEncoding,
    InvalidLevel,
    SinkWriteFailed,
    TrailingGarbage,
    TruncatedInput,
    TruncatedRecord,
    UnexpectedTag,
)
from tlvlog.levels import Level
from tlvlog.tlv import (
    LEVEL_FIELD_SIZE,
    LEVEL_FORMAT,
    LEVEL_SIZE,
    TIMESTAMP_FIELD_SIZE,
    TIMESTAMP_FORMAT,
    TIMESTAMP_SIZE,
    Tag,
    decode_text,
    encode_text,
    put_header,
    put_loglevel,
    put_string,
    put_timestamp,
    string_field_size,
)
from tlvlog.varint import LONG_FORM_FLAG, MAX_LENGTH_OCTETS, SHORT_FORM_MAX, decode_length

logger = logging.getLogger(__name__)

# Largest single read() issued by read_exact
READ_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class LogRecord:
    timestamp: int
    level: Level
    actor: str
    event: str
    attrs: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "level": self.level.name,
            "actor": self.actor,
            "event": self.event,
            "attrs": dict(self.attrs),
        }


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode_attrs(attrs: Mapping | None) -> list[tuple[bytes, bytes]]:
    """Encode attribute pairs, ordered by the key's encoded bytes.

    Keys must stay distinct once encoded (``"a"`` and ``b"a"`` collide).
    """
    if not attrs:
        return []
    encoded = {}
    for k, v in attrs.items():
        key = encode_text(k)
        if key in encoded:
            raise ValueError(f"Attribute key {k!r} collides with another key once encoded")
        encoded[key] = encode_text(v)
    return sorted(encoded.items())


def _value_length(actor: bytes, event: bytes, pairs: list[tuple[bytes, bytes]]) -> int:
    length = TIMESTAMP_FIELD_SIZE + LEVEL_FIELD_SIZE
    length += string_field_size(actor) + string_field_size(event)
    for key, value in pairs:
        length += string_field_size(key) + string_field_size(value)
    return length


def record_length(actor, event, attrs: Mapping | None = None) -> int:
    """Byte length of a record's value, i.e. everything after its header."""
    return _value_length(encode_text(actor), encode_text(event), _encode_attrs(attrs))


def encode_record(
    sink,
    level: int,
    actor,
    event,
    attrs: Mapping | None = None,
    time_func: Callable[[], float] = time.time,
) -> bool:
    """Write one complete log record to *sink*.

    The outer length is computed before anything is written because the
    sink may be a forward-only stream. On the first failed write the
    remaining fields are skipped and False is returned; bytes already
    written are left in place.

    Args:
        sink: Object with a ``write(bytes)`` method.
        level: Numeric severity (see :class:`Level`).
        actor: Component emitting the event.
        event: What happened.
        attrs: Optional string key/value pairs.
        time_func: Wall-clock source, seconds since the epoch.

    Returns:
        True if every field was written.

    Raises:
        ValueError: If level or timestamp are out of range, or two
            attribute keys encode to the same bytes.
        TypeError: If a text field is neither str nor bytes.
    """
    level = int(level)
    if not 0 <= level <= 0xFF:
        raise ValueError(f"Level {level} does not fit in uint8")
    actor_raw = encode_text(actor)
    event_raw = encode_text(event)
    pairs = _encode_attrs(attrs)
    length = _value_length(actor_raw, event_raw, pairs)
    logger.debug("record length: %d", length)

    t = int(time_func())
    if not 0 <= t < 1 << 64:
        raise ValueError(f"Timestamp {t} does not fit in uint64")
    try:
        put_header(sink, Tag.LOG_ENTRY, length)
        put_timestamp(sink, t)
        put_loglevel(sink, level)
        put_string(sink, actor_raw)
        put_string(sink, event_raw)
        for key, value in pairs:
            put_string(sink, key)
            put_string(sink, value)
    except SinkWriteFailed as exc:
        logger.debug("Record write failed: %s", exc)
        return False
    return True


def encode_record_bytes(
    level: int,
    actor,
    event,
    attrs: Mapping | None = None,
    time_func: Callable[[], float] = time.time,
) -> bytes:
    """Encode a record into a new bytes object."""
    buf = io.BytesIO()
    encode_record(buf, level, actor, event, attrs, time_func=time_func)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _read_field(data: bytes, offset: int, end: int) -> tuple[int, bytes, int]:
    """Read one nested field that must lie entirely within [offset, end)."""
    if offset + 2 > end:
        raise TrailingGarbage("Field header crosses record boundary", offset)
    tag = data[offset]
    try:
        length, value_start = decode_length(data, offset + 1)
    except TruncatedInput:
        raise TrailingGarbage("Length octets cross record boundary", offset) from None
    if value_start > end:
        raise TrailingGarbage("Length octets cross record boundary", offset)
    value_end = value_start + length
    if value_end > end:
        raise TrailingGarbage(
            f"Field of {length} bytes overruns record by {value_end - end}", offset
        )
    return tag, bytes(data[value_start:value_end]), value_end


def _expect(tag: int, wanted: Tag, offset: int) -> None:
    if tag != wanted:
        raise UnexpectedTag(f"Expected {wanted.name} tag, got 0x{tag:02X}", offset)


def _read_fixed(data: bytes, pos: int, end: int, wanted: Tag, size: int) -> tuple[bytes, int]:
    if pos >= end:
        raise UnexpectedTag(f"Record ends before {wanted.name} field", pos)
    tag, value, next_pos = _read_field(data, pos, end)
    _expect(tag, wanted, pos)
    if len(value) != size:
        raise InvalidLengthEncoding(
            f"{wanted.name} field of {len(value)} bytes, expected {size}", pos
        )
    return value, next_pos


def decode_record(data: bytes, offset: int = 0) -> tuple[LogRecord, int]:
    """Decode the record starting at *offset*.

    Returns:
        Tuple of (record, offset just past the record).

    Raises:
        DecodeError: One of its subclasses, with the offset of the fault.
    """
    if offset >= len(data):
        raise TruncatedInput("Missing record tag", offset)
    _expect(data[offset], Tag.LOG_ENTRY, offset)
    length, start = decode_length(data, offset + 1)
    end = start + length
    if end > len(data):
        raise TruncatedRecord(
            f"Record declares {length} bytes, {len(data) - start} available", offset
        )

    value, pos = _read_fixed(data, start, end, Tag.TIMESTAMP, TIMESTAMP_SIZE)
    (timestamp,) = struct.unpack(TIMESTAMP_FORMAT, value)

    level_pos = pos
    value, pos = _read_fixed(data, pos, end, Tag.LEVEL, LEVEL_SIZE)
    (raw_level,) = struct.unpack(LEVEL_FORMAT, value)
    try:
        level = Level(raw_level)
    except ValueError:
        raise InvalidLevel(f"Unknown level {raw_level}", level_pos) from None

    strings = []
    while pos < end:
        tag, value, next_pos = _read_field(data, pos, end)
        _expect(tag, Tag.STRING, pos)
        strings.append(decode_text(value))
        pos = next_pos

    if len(strings) < 2:
        raise TruncatedRecord("Record is missing actor or event", offset)
    actor, event, rest = strings[0], strings[1], strings[2:]
    if len(rest) % 2:
        raise TruncatedRecord("Attribute key without a value", offset)
    attrs = dict(zip(rest[0::2], rest[1::2]))

    return LogRecord(timestamp, level, actor, event, attrs), end


def iter_records(data: bytes) -> Iterator[LogRecord]:
    """Yield every record in *data*, which must hold whole records only."""
    offset = 0
    while offset < len(data):
        record, offset = decode_record(data, offset)
        yield record


def read_exact(stream: BinaryIO, n: int) -> bytes:
    """Read up to n bytes, looping over short reads.

    Returns fewer than n bytes only if the stream ends first.
    """
    data = bytearray()
    while len(data) < n:
        chunk = stream.read(min(n - len(data), READ_CHUNK_SIZE))
        if not chunk:
            break
        data += chunk
    return bytes(data)


def read_raw_record(stream: BinaryIO, position: int = 0) -> bytes | None:
    """Read the bytes of the next whole record from *stream*.

    Returns None at a clean end of stream. *position* is the stream's
    offset, used only to report errors.
    """
    tag = stream.read(1)
    if not tag:
        return None
    _expect(tag[0], Tag.LOG_ENTRY, position)

    first = read_exact(stream, 1)
    if not first:
        raise TruncatedInput("Missing length octet", position + 1)
    header = tag + first
    if first[0] & LONG_FORM_FLAG:
        n = first[0] & SHORT_FORM_MAX
        if n == 0 or n > MAX_LENGTH_OCTETS:
            raise InvalidLengthEncoding(f"Long-form length with {n} octets", position + 1)
        octets = read_exact(stream, n)
        if len(octets) < n:
            raise TruncatedInput(
                f"Length needs {n} octets, {len(octets)} available", position + 1
            )
        header += octets

    length, _ = decode_length(header, 1)
    value = read_exact(stream, length)
    if len(value) < length:
        raise TruncatedRecord(
            f"Record declares {length} bytes, {len(value)} available", position
        )
    return header + value


def read_records(stream: BinaryIO) -> Iterator[LogRecord]:
    """Yield records from a binary stream until end of stream.

    Error offsets count from where the stream was positioned when
    iteration started.
    """
    position = 0
    while True:
        raw = read_raw_record(stream, position)
        if raw is None:
            return
        try:
            record, _ = decode_record(raw)
        except DecodeError as exc:
            exc.offset += position
            raise
        yield record
        position += len(raw)
