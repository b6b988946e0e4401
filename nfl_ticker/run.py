"""CLI entrypoint: fetch the scoreboard once or keep polling."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys

import uvicorn

from nfl_ticker.errors import ScoreboardError
from nfl_ticker.ingestion.espn_client import build_scoreboard_url, fetch_scoreboard
from nfl_ticker.ingestion.espn_parser import build_schedule
from nfl_ticker.poller import Poller
from nfl_ticker.publisher import CallbackPublisher, DataEvent, PollEvent
from nfl_ticker.settings import PollerConfig, load_settings, settings_env

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Poll the ESPN NFL scoreboard and emit normalized schedules.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch a single schedule, print it as JSON and exit.",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the schedule API with uvicorn instead of logging to the console.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for --serve.")
    parser.add_argument("--port", type=int, default=8000, help="Port for --serve.")
    parser.add_argument(
        "--interval",
        type=float,
        help="Standard polling interval in seconds (overrides NFL_UPDATE_INTERVAL_SECONDS).",
    )
    parser.add_argument(
        "--live-interval",
        type=float,
        help="Polling interval in seconds while a game is live.",
    )
    return parser.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> PollerConfig:
    base = load_settings()
    return PollerConfig(
        update_interval=args.interval if args.interval is not None else base.update_interval,
        update_interval_live=(
            args.live_interval if args.live_interval is not None else base.update_interval_live
        ),
        request_timeout=base.request_timeout,
    )


def _log_event(event: PollEvent) -> None:
    if isinstance(event, DataEvent):
        details = event.schedule.details
        logger.info(
            "Schedule: %s games week=%s year=%s type=%s",
            len(event.schedule.games),
            details.week,
            details.year,
            details.type,
        )
        for game in event.schedule.games:
            status = getattr(game.status, "value", game.status)
            logger.info(
                "  %s %s - %s %s [%s] %s",
                game.away,
                game.away_score,
                game.home_score,
                game.home,
                status,
                game.remaining_time or game.start_time.isoformat(),
            )
    else:
        logger.error(
            "Error: kind=%s status=%s message=%s",
            event.detail.kind,
            event.detail.status_code,
            event.detail.message,
        )


def run_once(config: PollerConfig) -> int:
    try:
        payload = fetch_scoreboard(build_scoreboard_url(), timeout=config.request_timeout)
        result = build_schedule(payload)
    except ScoreboardError as exc:
        logger.error("Fetch failed kind=%s status=%s: %s", exc.kind, exc.status_code, exc)
        return 1
    output = result.schedule.model_dump(mode="json")
    output["any_live"] = result.any_live
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


async def _run_forever(config: PollerConfig) -> None:
    poller = Poller(config, CallbackPublisher(_log_event))
    poller.start()
    try:
        await asyncio.Event().wait()
    finally:
        await poller.close()


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args(argv)
    try:
        config = _resolve_config(args)
    except ValueError as exc:
        raise SystemExit(str(exc))

    if args.once:
        sys.exit(run_once(config))

    if args.serve:
        # The app reads its intervals from the environment at startup.
        os.environ.update(settings_env(config))
        uvicorn.run("nfl_ticker.main:app", host=args.host, port=args.port)
        return

    try:
        asyncio.run(_run_forever(config))
    except KeyboardInterrupt:
        logger.info("Poller interrupted.")


if __name__ == "__main__":
    main()
