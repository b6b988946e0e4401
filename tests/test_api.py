from __future__ import annotations

import logging
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient

from nfl_ticker import main
from nfl_ticker.ingestion.schema import Game, Schedule, ScheduleDetails
from nfl_ticker.ingestion.status import CanonicalStatus
from nfl_ticker.log_buffer import BufferHandler
from nfl_ticker.publisher import DataEvent, ErrorDetail, ErrorEvent, LatestValuePublisher


def _schedule() -> Schedule:
    return Schedule(
        games=(
            Game(
                home="KC",
                home_score=14,
                away="BAL",
                away_score=10,
                status=CanonicalStatus.QUARTER_2,
                start_time=datetime(2026, 9, 14, 17, 0, tzinfo=timezone.utc),
                remaining_time="7:32",
                possession="KC",
            ),
        ),
        details=ScheduleDetails(week=1, year=2026, type="REG", type_name="Regular-Season"),
    )


class ScheduleApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.publisher = LatestValuePublisher()
        patcher = patch.object(main, "publisher", self.publisher)
        patcher.start()
        self.addCleanup(patcher.stop)
        # Not used as a context manager, so startup hooks (and the poller) never run.
        self.client = TestClient(main.app)

    def test_schedule_before_first_fetch_is_loading(self) -> None:
        body = self.client.get("/api/schedule").json()

        self.assertFalse(body["loaded"])
        self.assertIsNone(body["schedule"])
        self.assertIsNone(body["error"])

    def test_schedule_after_data_event(self) -> None:
        self.publisher.publish(DataEvent(_schedule()))

        body = self.client.get("/api/schedule").json()

        self.assertTrue(body["loaded"])
        game = body["schedule"]["games"][0]
        self.assertEqual("2", game["status"])
        self.assertEqual("KC", game["possession"])
        self.assertEqual("REG", body["schedule"]["details"]["type"])

    def test_error_keeps_last_schedule(self) -> None:
        self.publisher.publish(DataEvent(_schedule()))
        self.publisher.publish(
            ErrorEvent(ErrorDetail(kind="upstream_status", message="ESPN returned 500", status_code=500))
        )

        body = self.client.get("/api/schedule").json()

        self.assertTrue(body["loaded"])
        self.assertEqual(500, body["error"]["status_code"])
        self.assertEqual(1, len(body["schedule"]["games"]))

    def test_health(self) -> None:
        self.assertEqual({"status": "ok"}, self.client.get("/health").json())

    def test_logs_endpoint_returns_entries(self) -> None:
        body = self.client.get("/api/logs", params={"limit": 5}).json()

        self.assertIsInstance(body["entries"], list)


class LogsApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.buffer = BufferHandler(maxlen=50)
        patcher = patch.object(main, "log_buffer", self.buffer)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.logger = logging.getLogger("nfl_ticker.tests.api")
        self.logger.propagate = False
        self.logger.setLevel(logging.DEBUG)
        self.logger.addHandler(self.buffer)
        self.addCleanup(self.logger.removeHandler, self.buffer)
        self.client = TestClient(main.app)

    def test_level_filter(self) -> None:
        self.logger.info("Fetch cycle #1 published", extra={"cycle": 1, "event_kind": "data"})
        self.logger.error("Fetch cycle #2 failed", extra={"cycle": 2, "event_kind": "error"})

        body = self.client.get("/api/logs", params={"level": "warning"}).json()

        self.assertEqual(1, len(body["entries"]))
        self.assertEqual("error", body["entries"][0]["event_kind"])
        self.assertEqual(2, body["entries"][0]["cycle"])

    def test_cycle_filter(self) -> None:
        self.logger.info("first", extra={"cycle": 1, "event_kind": "data"})
        self.logger.info("second", extra={"cycle": 2, "event_kind": "data"})

        body = self.client.get("/api/logs", params={"cycle": 1}).json()

        self.assertEqual(["first"], [e["message"] for e in body["entries"]])

    def test_unknown_level_is_bad_request(self) -> None:
        response = self.client.get("/api/logs", params={"level": "chatty"})

        self.assertEqual(400, response.status_code)


if __name__ == "__main__":
    unittest.main()
