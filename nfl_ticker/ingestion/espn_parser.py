"""Parser for ESPN NFL scoreboard payloads."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from nfl_ticker.errors import MalformedEventError, MalformedResponseError
from nfl_ticker.ingestion.schema import (
    BuildResult,
    Game,
    RawCompetitor,
    RawEvent,
    RawScoreboard,
    Schedule,
    ScheduleDetails,
)
from nfl_ticker.ingestion.status import classify_status, is_live

logger = logging.getLogger(__name__)

# ESPN abbreviation -> abbreviation consumers match against.
TEAM_ALIASES: dict[str, str] = {
    "WSH": "WAS",
    "LAR": "LA",
}

SEASON_TYPES: dict[int, str] = {
    1: "PRE",
    2: "REG",
    3: "POST",
    4: "OFF",
}

SEASON_TYPE_NAMES: dict[str, str] = {
    "PRE": "Pre-Season",
    "REG": "Regular-Season",
    "POST": "Post-Season",
    "OFF": "Off-Season",
}


def _safe_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_start_time(value: str | None) -> datetime | None:
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def alias_team_code(code: str | None) -> str | None:
    if code is None:
        return None
    return TEAM_ALIASES.get(code, code)


def _team_code(competitor: RawCompetitor) -> str | None:
    return alias_team_code(competitor.team.abbreviation if competitor.team else None)


def _team_logo(competitor: RawCompetitor) -> str | None:
    return competitor.team.logo if competitor.team else None


def normalize_event(event: dict[str, Any] | RawEvent) -> Game:
    """Map one ESPN event to a canonical Game.

    Raises MalformedEventError when the event lacks competitor data or a
    usable start time.
    """

    if isinstance(event, RawEvent):
        raw = event
    else:
        try:
            raw = RawEvent.model_validate(event)
        except ValidationError as exc:
            event_id = event.get("id") if isinstance(event, dict) else None
            raise MalformedEventError(
                f"event does not match scoreboard shape: {exc.error_count()} error(s)",
                event_id=str(event_id) if event_id is not None else None,
            ) from exc

    competition = raw.competitions[0] if raw.competitions else None
    competitors = competition.competitors if competition else None
    if not competitors or len(competitors) < 2:
        raise MalformedEventError("event has no home/away competitors", event_id=raw.id)
    home, away = competitors[0], competitors[1]

    start_time = _parse_start_time(raw.date)
    if start_time is None:
        raise MalformedEventError(f"event has invalid start time {raw.date!r}", event_id=raw.id)

    status = raw.status
    state = status.state if status else None
    ongoing = state not in ("pre", "post")
    remaining_time = status.displayClock if (status and ongoing) else None

    possession = None
    possession_id = competition.situation.possession if competition.situation else None
    if possession_id is not None:
        for competitor in competitors:
            if competitor.id == possession_id:
                possession = _team_code(competitor)
                break

    return Game(
        home=_team_code(home),
        home_score=_safe_int(home.score),
        away=_team_code(away),
        away_score=_safe_int(away.score),
        status=classify_status(
            state,
            status.name if status else None,
            status.period if status else None,
        ),
        start_time=start_time,
        remaining_time=remaining_time,
        possession=possession,
        home_logo=_team_logo(home),
        away_logo=_team_logo(away),
    )


def _parse_details(scoreboard: RawScoreboard) -> ScheduleDetails:
    season_type = SEASON_TYPES.get(scoreboard.season.type) if scoreboard.season else None
    return ScheduleDetails(
        week=scoreboard.week.number if scoreboard.week else None,
        year=scoreboard.season.year if scoreboard.season else None,
        type=season_type,
        type_name=SEASON_TYPE_NAMES.get(season_type) if season_type else None,
    )


def build_schedule(payload: Any) -> BuildResult:
    """Build one Schedule snapshot from a scoreboard response body."""

    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"scoreboard body must be a JSON object, got {type(payload).__name__}"
        )
    try:
        scoreboard = RawScoreboard.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"scoreboard events must be a list: {exc.error_count()} error(s)"
        ) from exc

    games: list[Game] = []
    skipped = 0
    for index, event in enumerate(scoreboard.events or []):
        try:
            games.append(normalize_event(event))
        except MalformedEventError as exc:
            skipped += 1
            logger.warning(
                "Skipping malformed event index=%s id=%s: %s",
                index,
                exc.event_id,
                exc,
            )

    # sorted() is stable; equal start times keep encounter order.
    games = sorted(games, key=lambda game: game.start_time)
    any_live = any(is_live(game.status) for game in games)

    details = _parse_details(scoreboard)
    logger.info(
        "Parsed %s games (skipped=%s live=%s) week=%s year=%s type=%s",
        len(games),
        skipped,
        any_live,
        details.week,
        details.year,
        details.type,
    )
    return BuildResult(
        schedule=Schedule(games=tuple(games), details=details),
        any_live=any_live,
    )
