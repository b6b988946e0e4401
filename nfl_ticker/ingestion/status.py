"""Canonical game status classification for ESPN event status objects."""

from __future__ import annotations

from enum import Enum


class CanonicalStatus(str, Enum):
    UPCOMING = "P"
    QUARTER_1 = "1"
    QUARTER_2 = "2"
    QUARTER_3 = "3"
    QUARTER_4 = "4"
    HALFTIME = "H"
    OVERTIME = "OT"
    FINAL = "F"
    FINAL_OVERTIME = "FO"
    POSTPONED = "PP"


QUARTERS: dict[int, CanonicalStatus] = {
    1: CanonicalStatus.QUARTER_1,
    2: CanonicalStatus.QUARTER_2,
    3: CanonicalStatus.QUARTER_3,
    4: CanonicalStatus.QUARTER_4,
}

LIVE_STATUSES = frozenset(
    {
        CanonicalStatus.QUARTER_1,
        CanonicalStatus.QUARTER_2,
        CanonicalStatus.QUARTER_3,
        CanonicalStatus.QUARTER_4,
        CanonicalStatus.HALFTIME,
        CanonicalStatus.OVERTIME,
    }
)

HALFTIME_NAME = "STATUS_HALFTIME"
POSTPONED_NAME = "STATUS_POSTPONED"
REGULATION_PERIODS = 4


def classify_status(
    state: str | None,
    name: str | None,
    period: int | None,
) -> CanonicalStatus | int | None:
    """Map ESPN status fields to a canonical status.

    First match wins: pre, halftime, postponed, post, overtime, quarter.
    A period outside 1-4 that matches nothing else is returned unchanged.
    """

    if state == "pre":
        return CanonicalStatus.UPCOMING
    if name == HALFTIME_NAME:
        return CanonicalStatus.HALFTIME
    if name == POSTPONED_NAME:
        return CanonicalStatus.POSTPONED
    if state == "post":
        if period is not None and period > REGULATION_PERIODS:
            return CanonicalStatus.FINAL_OVERTIME
        return CanonicalStatus.FINAL
    if period is not None and period > REGULATION_PERIODS:
        return CanonicalStatus.OVERTIME
    return QUARTERS.get(period, period) if period is not None else None


def is_live(status: CanonicalStatus | int | None) -> bool:
    return status in LIVE_STATUSES
