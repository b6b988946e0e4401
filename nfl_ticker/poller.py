"""Self-rescheduling scoreboard poller with live/standard cadence."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from typing import Any, Callable, Optional

from nfl_ticker.errors import MalformedResponseError, ScoreboardError
from nfl_ticker.ingestion.espn_client import fetch_scoreboard
from nfl_ticker.ingestion.espn_parser import build_schedule
from nfl_ticker.ingestion.schema import Schedule
from nfl_ticker.publisher import DataEvent, ErrorDetail, ErrorEvent, PollEvent, Publisher
from nfl_ticker.settings import PollerConfig

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PollPhase(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ARMED = "armed"
    STOPPED = "stopped"


@dataclass
class PollState:
    config: PollerConfig
    phase: PollPhase = PollPhase.IDLE
    schedule: Optional[Schedule] = None
    error: Optional[ErrorDetail] = None
    next_delay: Optional[float] = None
    timer: Optional[asyncio.TimerHandle] = None
    cycles: int = 0
    failures: int = 0
    last_attempt_utc: Optional[datetime] = None
    last_success_utc: Optional[datetime] = None


class Poller:
    """Runs one fetch cycle at a time and arms a single timer for the next.

    The next delay is ``update_interval_live`` when the last schedule had a
    live game, else ``update_interval``. Failures are published and polling
    continues at the last computed delay, with no retry cap or backoff.
    """

    def __init__(
        self,
        config: PollerConfig,
        publisher: Publisher,
        *,
        fetch: Callable[[], Any] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.state = PollState(config=config)
        self._publisher = publisher
        self._fetch = fetch or partial(fetch_scoreboard, timeout=config.request_timeout)
        self._clock = clock
        self._alive = False
        # Bumped on every start/stop; a cycle holding an old token is stale.
        self._token = 0
        # Every cycle task not yet finished, including stale ones left by a
        # stop()/start() pair while a fetch was still in its worker thread.
        self._tasks: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._alive

    @property
    def busy(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        """Trigger the first cycle immediately. Must be called inside a running loop."""
        if self._alive:
            logger.warning("Poller already running; start ignored")
            return
        self._alive = True
        self._token += 1
        logger.info(
            "Poller started: interval=%ss live_interval=%ss",
            self.state.config.update_interval,
            self.state.config.update_interval_live,
        )
        self._spawn_cycle(self._token)

    def stop(self) -> None:
        """Cancel the pending timer; an in-flight cycle finishes without effect."""
        self._alive = False
        self._token += 1
        if self.state.timer is not None:
            self.state.timer.cancel()
            self.state.timer = None
        self.state.phase = PollPhase.STOPPED
        logger.info("Poller stopped after %s cycle(s)", self.state.cycles)

    async def close(self) -> None:
        """Stop and wait for every cycle still in flight."""
        self.stop()
        pending = [task for task in self._tasks if not task.done()]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _is_current(self, token: int | None) -> bool:
        if token is None:
            return True
        return self._alive and token == self._token

    def _spawn_cycle(self, token: int) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._cycle_and_rearm(token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _cycle_and_rearm(self, token: int) -> None:
        delay = await self.run_cycle(token)
        if delay is None:
            return
        self._arm(delay, token)

    def _arm(self, delay: float, token: int) -> None:
        loop = asyncio.get_running_loop()
        self.state.timer = loop.call_later(delay, self._on_timer, token)
        self.state.phase = PollPhase.ARMED
        logger.debug("Next fetch in %ss", delay)

    def _on_timer(self, token: int) -> None:
        self.state.timer = None
        if not self._is_current(token):
            return
        self._spawn_cycle(token)

    async def _fetch_and_build(self):
        payload = await asyncio.to_thread(self._fetch)
        return build_schedule(payload)

    async def run_cycle(self, token: int | None = None) -> float | None:
        """Run one fetch cycle and return the delay before the next one.

        Returns None when the poller was stopped while the fetch was in
        flight; nothing is published in that case.
        """

        self.state.phase = PollPhase.FETCHING
        self.state.cycles += 1
        self.state.last_attempt_utc = self._clock()

        result = None
        event: PollEvent
        try:
            result = await self._fetch_and_build()
        except ScoreboardError as exc:
            event = ErrorEvent(ErrorDetail.from_exception(exc))
        except Exception as exc:
            logger.exception("Unexpected failure in fetch cycle #%d", self.state.cycles)
            event = ErrorEvent(
                ErrorDetail(
                    kind=MalformedResponseError.kind,
                    message=f"{type(exc).__name__}: {str(exc).strip() or '(no message)'}",
                )
            )
        else:
            event = DataEvent(result.schedule)

        if not self._is_current(token):
            logger.info("Poller stopped during fetch cycle #%d; result discarded", self.state.cycles)
            return None

        cycle = self.state.cycles
        if result is not None:
            self.state.schedule = result.schedule
            self.state.error = None
            self.state.last_success_utc = self._clock()
            self.state.next_delay = (
                self.state.config.update_interval_live
                if result.any_live
                else self.state.config.update_interval
            )
        else:
            self.state.failures += 1
            self.state.error = event.detail
            logger.error(
                "Fetch cycle #%d failed kind=%s status=%s: %s",
                cycle,
                event.detail.kind,
                event.detail.status_code,
                event.detail.message,
                extra={"cycle": cycle, "event_kind": "error"},
            )

        self._publish(event)
        self.state.phase = PollPhase.IDLE
        delay = self.state.next_delay
        if delay is None:
            delay = self.state.config.update_interval
        if result is not None:
            logger.info(
                "Fetch cycle #%d published %d game(s) live=%s next_in=%ss",
                cycle,
                len(result.schedule.games),
                result.any_live,
                delay,
                extra={"cycle": cycle, "event_kind": "data"},
            )
        return delay

    def _publish(self, event: PollEvent) -> None:
        try:
            self._publisher.publish(event)
        except Exception:
            logger.exception("Publisher raised while handling %s", type(event).__name__)
