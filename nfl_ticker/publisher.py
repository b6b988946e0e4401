"""Events handed from the poller to the presentation layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Union

from nfl_ticker.errors import ScoreboardError
from nfl_ticker.ingestion.schema import Schedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorDetail:
    kind: str
    message: str
    status_code: Optional[int] = None

    @classmethod
    def from_exception(cls, exc: ScoreboardError) -> "ErrorDetail":
        return cls(kind=exc.kind, message=exc.message, status_code=exc.status_code)


@dataclass(frozen=True)
class DataEvent:
    schedule: Schedule


@dataclass(frozen=True)
class ErrorEvent:
    detail: ErrorDetail


PollEvent = Union[DataEvent, ErrorEvent]


class Publisher(Protocol):
    def publish(self, event: PollEvent) -> None: ...


class CallbackPublisher:
    """Adapts a plain callable to the Publisher protocol."""

    def __init__(self, callback: Callable[[PollEvent], None]) -> None:
        self._callback = callback

    def publish(self, event: PollEvent) -> None:
        self._callback(event)


class LatestValuePublisher:
    """Keeps only the most recent schedule and error for readers to poll."""

    def __init__(self) -> None:
        self.schedule: Schedule | None = None
        self.error: ErrorDetail | None = None
        self.updated_at_utc: datetime | None = None
        self.events_seen = 0

    @property
    def loaded(self) -> bool:
        return self.schedule is not None

    def publish(self, event: PollEvent) -> None:
        self.events_seen += 1
        if isinstance(event, DataEvent):
            self.schedule = event.schedule
            self.error = None
        elif isinstance(event, ErrorEvent):
            self.error = event.detail
        else:
            logger.warning("Unrecognized poll event %r ignored", event)
            return
        self.updated_at_utc = datetime.now(timezone.utc)

    def snapshot(self) -> dict:
        return {
            "loaded": self.loaded,
            "error": (
                {
                    "kind": self.error.kind,
                    "message": self.error.message,
                    "status_code": self.error.status_code,
                }
                if self.error
                else None
            ),
            "schedule": self.schedule.model_dump(mode="json") if self.schedule else None,
            "updated_at": self.updated_at_utc.isoformat() if self.updated_at_utc else None,
        }
