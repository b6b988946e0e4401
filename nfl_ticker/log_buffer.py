"""Recent poller log lines kept in memory for the /api/logs endpoint.

Records logged with ``extra={"cycle": n, "event_kind": "data"}`` keep those
fields, so a reader can follow one fetch cycle or only the failed ones.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional

PACKAGE_LOGGER = "nfl_ticker"


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    levelno: int
    logger: str
    message: str
    cycle: Optional[int] = None
    event_kind: Optional[str] = None


def parse_level(name: str) -> int:
    """Return the numeric level for a name like ``"warning"``; ValueError if unknown."""
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {name!r}")
    return level


class BufferHandler(logging.Handler):
    def __init__(self, maxlen: int = 500) -> None:
        super().__init__(level=logging.DEBUG)
        self._buffer: deque[LogEntry] = deque(maxlen=maxlen)
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            cycle = getattr(record, "cycle", None)
            self._buffer.append(
                LogEntry(
                    timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                    level=record.levelname,
                    levelno=record.levelno,
                    logger=record.name,
                    message=self.format(record),
                    cycle=cycle if isinstance(cycle, int) else None,
                    event_kind=getattr(record, "event_kind", None),
                )
            )
        except Exception:
            self.handleError(record)

    def entries(
        self,
        limit: int = 100,
        *,
        min_level: int = logging.NOTSET,
        cycle: int | None = None,
    ) -> list[dict]:
        """Newest first, at most *limit* entries at or above *min_level*."""
        if limit <= 0:
            return []
        selected: list[dict] = []
        for entry in reversed(self._buffer):
            if entry.levelno < min_level:
                continue
            if cycle is not None and entry.cycle != cycle:
                continue
            selected.append(asdict(entry))
            if len(selected) >= limit:
                break
        return selected

    def clear(self) -> None:
        self._buffer.clear()


def attach(handler: BufferHandler, logger_name: str = PACKAGE_LOGGER) -> BufferHandler:
    """Route the package's records (DEBUG and up) into *handler*; idempotent."""
    lg = logging.getLogger(logger_name)
    if handler not in lg.handlers:
        lg.addHandler(handler)
    if lg.level == logging.NOTSET or lg.level > logging.DEBUG:
        lg.setLevel(logging.DEBUG)
    return handler
