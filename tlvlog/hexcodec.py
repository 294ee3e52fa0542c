"""Uppercase hex rendering of raw bytes, for inspecting encoded records."""

import binascii


def hex_encode(data) -> str:
    """Return *data* as uppercase hex, two characters per byte."""
    if isinstance(data, str):
        data = data.encode("utf-8", "surrogateescape")
    return binascii.hexlify(bytes(data)).decode("ascii").upper()


def hex_decode(text: str) -> bytes:
    """Inverse of hex_encode; accepts either case.

    Raises:
        ValueError: If text has odd length or non-hex characters.
    """
    try:
        return binascii.unhexlify(text)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Invalid hex string: {exc}") from exc
