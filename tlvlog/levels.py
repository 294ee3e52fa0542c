"""Severity levels and their fixed display names."""

from enum import IntEnum
from types import MappingProxyType


class Level(IntEnum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    CRITICAL = 4
    FATAL = 5


DEFAULT_LEVEL = Level.INFO

LEVEL_NAMES = MappingProxyType({
    Level.DEBUG: "DEBUG",
    Level.INFO: "INFO",
    Level.WARN: "WARNING",
    Level.ERROR: "ERROR",
    Level.CRITICAL: "CRITICAL",
    Level.FATAL: "FATAL",
})

_NAME_TO_LEVEL = {name: level for level, name in LEVEL_NAMES.items()}
_NAME_TO_LEVEL["WARN"] = Level.WARN


def parse_level(value) -> Level:
    """Coerce a Level, an int, or a case-insensitive name into a Level.

    Raises:
        ValueError: If the value does not name a known level.
    """
    if isinstance(value, Level):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return Level(value)
        except ValueError:
            raise ValueError(f"Unknown log level: {value}") from None
    if isinstance(value, str):
        name = value.strip().upper()
        if name.isdigit():
            return parse_level(int(name))
        if name in _NAME_TO_LEVEL:
            return _NAME_TO_LEVEL[name]
    raise ValueError(f"Unknown log level: {value!r}")
