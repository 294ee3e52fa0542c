"""Binary log backend: TLV records appended to one or two files."""

import logging
import os
import time

from tlvlog.errors import LogError, classify_os_error
from tlvlog.levels import DEFAULT_LEVEL, Level
from tlvlog.logger import Logger
from tlvlog.record import encode_record

logger = logging.getLogger(__name__)


class FileSink:
    """Binary append-only file that remembers the last exception it raised."""

    def __init__(self, path: str, truncate: bool = False):
        self.path = path
        self.last_error: BaseException | None = None
        self._file = open(path, "wb" if truncate else "ab")

    @property
    def closed(self) -> bool:
        return self._file.closed

    def write(self, data: bytes) -> int:
        try:
            return self._file.write(data)
        except (OSError, ValueError) as exc:
            self.last_error = exc
            raise

    def flush(self):
        try:
            self._file.flush()
        except (OSError, ValueError) as exc:
            self.last_error = exc
            raise

    def close(self):
        self._file.close()


def _open_sink(path: str, truncate: bool) -> FileSink:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return FileSink(path, truncate)


class BinLogger(Logger):
    """Writes DEBUG and INFO records to *logfile* and the rest to *errfile*.

    When no errfile is given every record goes to logfile. Files are
    opened for append unless *truncate* is set.
    """

    def __init__(
        self,
        logfile: str,
        errfile: str | None = None,
        truncate: bool = False,
        level=DEFAULT_LEVEL,
        time_func=time.time,
    ):
        super().__init__(level)
        self._time_func = time_func
        self._outs: FileSink | None = None
        self._errs: FileSink | None = None
        try:
            self._outs = _open_sink(logfile, truncate)
            self._errs = _open_sink(errfile, truncate) if errfile else self._outs
        except OSError as exc:
            logger.error("Could not open binary log: %s", exc)
            if self._outs is not None:
                self._outs.close()
                self._outs = None
            state = classify_os_error(exc)
            if state is not LogError.PERMISSION_DENIED:
                state = LogError.OPEN_FAILED
            self._set_error(state)

    def _sink_for(self, level: Level) -> FileSink | None:
        return self._outs if level < Level.WARN else self._errs

    def _write(self, level, actor, event, attrs):
        sink = self._sink_for(level)
        if sink is None:
            return
        sink.last_error = None
        ok = encode_record(sink, level, actor, event, attrs, time_func=self._time_func)
        if ok:
            try:
                sink.flush()
            except (OSError, ValueError):
                ok = False
        self._set_error(LogError.HEALTHY if ok else classify_os_error(sink.last_error))

    def close(self) -> None:
        with self._lock:
            self._close_sinks()

    def _close_sinks(self):
        if self._outs is None:
            return
        sinks = [self._outs]
        if self._errs is not self._outs:
            sinks.append(self._errs)
        self._outs = self._errs = None
        for sink in sinks:
            try:
                sink.close()
            except OSError as exc:
                logger.error("Failed to close %s: %s", sink.path, exc)
                self._set_error(LogError.CLOSE_FAILED)
                return
        self._set_error(LogError.CLOSED)


def open_binlogfile(logfile: str, errfile: str | None = None, truncate: bool = False) -> BinLogger:
    return BinLogger(logfile, errfile, truncate)
