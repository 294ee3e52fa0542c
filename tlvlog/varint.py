"""BER definite-form length octets.

Short form (length <= 0x7F) is a single octet holding the length.
Long form is one octet ``0x80 | n`` followed by ``n`` big-endian octets
of the length with leading zero octets stripped:

  0      -> 00
  127    -> 7F
  128    -> 81 80
  256    -> 82 01 00
  2^64-1 -> 88 FF FF FF FF FF FF FF FF
"""

from tlvlog.errors import InvalidLengthEncoding, TruncatedInput

SHORT_FORM_MAX = 0x7F
LONG_FORM_FLAG = 0x80
MAX_LENGTH_OCTETS = 8
MAX_LENGTH = (1 << (8 * MAX_LENGTH_OCTETS)) - 1


def _check_length(length: int) -> None:
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f"Length must be an int, got {type(length).__name__}")
    if length < 0 or length > MAX_LENGTH:
        raise ValueError(f"Length {length} outside 0..{MAX_LENGTH}")


def length_octets(length: int) -> int:
    """Number of octets encode_length() emits for *length*."""
    _check_length(length)
    if length <= SHORT_FORM_MAX:
        return 1
    return 1 + (length.bit_length() + 7) // 8


def encode_length(length: int) -> bytes:
    """Encode *length* as BER definite-form length octets.

    Raises:
        ValueError: If length is negative or does not fit in 64 bits.
    """
    _check_length(length)
    if length <= SHORT_FORM_MAX:
        return bytes((length,))
    n = (length.bit_length() + 7) // 8
    return bytes((LONG_FORM_FLAG | n,)) + length.to_bytes(n, "big")


def decode_length(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode length octets starting at *offset*.

    Returns:
        Tuple of (length, offset just past the length octets).

    Raises:
        TruncatedInput: If the buffer ends inside the length octets.
        InvalidLengthEncoding: If the long form announces 0 or more than
            8 octets.
    """
    if offset >= len(data):
        raise TruncatedInput("Missing length octet", offset)
    first = data[offset]
    if not first & LONG_FORM_FLAG:
        return first, offset + 1

    n = first & SHORT_FORM_MAX
    if n == 0 or n > MAX_LENGTH_OCTETS:
        raise InvalidLengthEncoding(f"Long-form length with {n} octets", offset)
    start = offset + 1
    end = start + n
    if end > len(data):
        raise TruncatedInput(
            f"Length needs {n} octets, {len(data) - start} available", offset
        )
    return int.from_bytes(data[start:end], "big"), end
