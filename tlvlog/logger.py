"""Logger facade shared by every backend.

All severity methods funnel into :meth:`Logger.log`, which drops records
below the minimum level before the backend sees them.
"""

import logging
import sys
import threading

from tlvlog.errors import LogError
from tlvlog.levels import DEFAULT_LEVEL, Level, parse_level

logger = logging.getLogger(__name__)


class Logger:
    """Base class for structured loggers.

    Subclasses implement ``_write`` (and usually ``close``); they report
    sink problems by calling ``_set_error``.
    """

    def __init__(self, level=DEFAULT_LEVEL):
        self._level = parse_level(level)
        self._err = LogError.HEALTHY
        self._lock = threading.Lock()

    @property
    def level(self) -> Level:
        return self._level

    @level.setter
    def level(self, value):
        self._level = parse_level(value)

    @property
    def status(self) -> LogError:
        return self._err

    def good(self) -> bool:
        return self._err is LogError.HEALTHY

    def _set_error(self, state: LogError):
        if state is not self._err:
            if state is LogError.HEALTHY:
                logger.info("%s recovered", type(self).__name__)
            else:
                logger.warning("%s is now %s", type(self).__name__, state.value)
        self._err = state

    def log(self, level, actor, event, attrs=None) -> None:
        level = parse_level(level)
        if level < self._level:
            return
        with self._lock:
            self._write(level, actor, event, attrs or {})

    def _write(self, level: Level, actor, event, attrs) -> None:
        raise NotImplementedError

    def debug(self, actor, event, attrs=None) -> None:
        self.log(Level.DEBUG, actor, event, attrs)

    def info(self, actor, event, attrs=None) -> None:
        self.log(Level.INFO, actor, event, attrs)

    def warn(self, actor, event, attrs=None) -> None:
        self.log(Level.WARN, actor, event, attrs)

    def error(self, actor, event, attrs=None) -> None:
        self.log(Level.ERROR, actor, event, attrs)

    def critical(self, actor, event, attrs=None) -> None:
        self.log(Level.CRITICAL, actor, event, attrs)

    def fatal(self, actor, event, attrs=None, exit_code: int = 1) -> None:
        """Log at FATAL, then exit the process with *exit_code*."""
        self.log(Level.FATAL, actor, event, attrs)
        sys.exit(exit_code)

    def fatal_noexit(self, actor, event, attrs=None) -> None:
        """Log at FATAL and leave exiting to the caller."""
        self.log(Level.FATAL, actor, event, attrs)

    def close(self) -> None:
        self._set_error(LogError.CLOSED)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
