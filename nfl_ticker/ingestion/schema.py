"""Data contracts for the ESPN scoreboard: raw input shapes and canonical output."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, ValidatorFunctionWrapHandler, field_validator

from nfl_ticker.ingestion.status import CanonicalStatus


class _RawModel(BaseModel):
    # Every raw field is optional; unknown keys are dropped and a value of
    # the wrong type reads as absent.
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @field_validator("*", mode="wrap")
    @classmethod
    def none_if_invalid(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class RawStatusType(_RawModel):
    state: Optional[str] = None
    name: Optional[str] = None


class RawStatus(_RawModel):
    type: Optional[RawStatusType] = None
    period: Optional[int] = None
    displayClock: Optional[str] = None

    @property
    def state(self) -> str | None:
        return self.type.state if self.type else None

    @property
    def name(self) -> str | None:
        return self.type.name if self.type else None


class RawTeam(_RawModel):
    abbreviation: Optional[str] = None
    logo: Optional[str] = None


class RawCompetitor(_RawModel):
    id: Optional[str] = None
    homeAway: Optional[str] = None
    score: Optional[str] = None
    team: Optional[RawTeam] = None


class RawSituation(_RawModel):
    possession: Optional[str] = None


class RawCompetition(_RawModel):
    competitors: Optional[list[RawCompetitor]] = None
    situation: Optional[RawSituation] = None


class RawEvent(_RawModel):
    """One untrusted scoreboard event."""

    id: Optional[str] = None
    date: Optional[str] = None
    status: Optional[RawStatus] = None
    competitions: Optional[list[RawCompetition]] = None


class RawSeason(_RawModel):
    year: Optional[int] = None
    type: Optional[int] = None


class RawWeek(_RawModel):
    number: Optional[int] = None


class RawScoreboard(BaseModel):
    """Document-level shape; events stay raw so each one is validated alone.

    Season and week metadata degrade to None; a non-list events value fails.
    """

    model_config = ConfigDict(extra="ignore")

    season: Optional[RawSeason] = None
    week: Optional[RawWeek] = None
    events: Optional[list[Any]] = None

    @field_validator("season", "week", mode="wrap")
    @classmethod
    def none_if_invalid(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class Game(BaseModel):
    """
    Canonical, immutable representation of one game.
    """

    model_config = ConfigDict(frozen=True)

    home: Optional[str] = None
    home_score: Optional[int] = None
    away: Optional[str] = None
    away_score: Optional[int] = None
    # Raw period int only for a state none of the canonical rules cover.
    status: Union[CanonicalStatus, int, None] = None
    start_time: datetime
    remaining_time: Optional[str] = None
    possession: Optional[str] = None
    home_logo: Optional[str] = None
    away_logo: Optional[str] = None


class ScheduleDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    week: Optional[int] = None
    year: Optional[int] = None
    type: Optional[str] = None
    type_name: Optional[str] = None


class Schedule(BaseModel):
    model_config = ConfigDict(frozen=True)

    games: tuple[Game, ...] = ()
    details: ScheduleDetails = ScheduleDetails()


class BuildResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    schedule: Schedule
    any_live: bool = False
