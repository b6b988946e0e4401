"""Host-facing entry point: routes notifications to a Poller instance."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from nfl_ticker.poller import Poller
from nfl_ticker.publisher import Publisher
from nfl_ticker.settings import PollerConfig, config_from_payload

logger = logging.getLogger(__name__)

SET_CONFIG = "SET_CONFIG"


class ScoreboardHelper:
    def __init__(
        self,
        publisher: Publisher,
        poller_factory: Callable[[PollerConfig, Publisher], Poller] = Poller,
    ) -> None:
        self.publisher = publisher
        self._poller_factory = poller_factory
        self.poller: Poller | None = None
        # Stopped pollers whose last fetch may still be running.
        self._retired: list[Poller] = []

    def notification_received(self, notification: str, payload: Any = None) -> None:
        if notification == SET_CONFIG:
            if not isinstance(payload, Mapping):
                logger.error("%s payload must be a mapping, got %s", SET_CONFIG, type(payload).__name__)
                return
            try:
                config = config_from_payload(payload)
            except ValueError as exc:
                logger.error("Invalid %s payload: %s", SET_CONFIG, exc)
                return
            self.configure(config)
            return
        logger.warning("Unrecognized notification %r ignored", notification)

    def configure(self, config: PollerConfig) -> Poller:
        """Replace any running poller with one for *config* and start it."""
        if self.poller is not None:
            logger.info("Reconfiguring poller")
            self.poller.stop()
            self._retired = [p for p in self._retired if p.busy]
            if self.poller.busy:
                self._retired.append(self.poller)
        self.poller = self._poller_factory(config, self.publisher)
        self.poller.start()
        return self.poller

    async def reconfigure(self, config: PollerConfig) -> Poller:
        """Like configure(), but waits for the previous poller to wind down first."""
        previous, self.poller = self.poller, None
        if previous is not None:
            logger.info("Reconfiguring poller")
            await previous.close()
        return self.configure(config)

    async def shutdown(self) -> None:
        pollers = self._retired
        if self.poller is not None:
            pollers = [self.poller, *pollers]
        self.poller = None
        self._retired = []
        for poller in pollers:
            await poller.close()
