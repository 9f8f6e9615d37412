from __future__ import annotations

import os
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from errors import ConfigurationError

# All day keys are computed in this zone, never in the host's local time.
TRIVIA_TIMEZONE = os.getenv("TRIVIA_TIMEZONE", "UTC")

# "since_launch": continuous count from TRIVIA_LAUNCH_DATE (day 1).
# "day_of_year":  1..366, resets every 1 January.
SINCE_LAUNCH = "since_launch"
DAY_OF_YEAR = "day_of_year"
QUESTION_NUMBER_POLICY = os.getenv("QUESTION_NUMBER_POLICY", SINCE_LAUNCH)
TRIVIA_LAUNCH_DATE = os.getenv("TRIVIA_LAUNCH_DATE", "2025-01-01")


def reference_zone(name: Optional[str] = None) -> tzinfo:
    name = name or TRIVIA_TIMEZONE
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown TRIVIA_TIMEZONE {name!r}") from e


def launch_date(raw: Optional[str] = None) -> date:
    raw = raw or TRIVIA_LAUNCH_DATE
    try:
        return date.fromisoformat(raw)
    except ValueError as e:
        raise ConfigurationError(f"TRIVIA_LAUNCH_DATE must be YYYY-MM-DD, got {raw!r}") from e


class Clock:
    """Wall clock reduced to day keys in a single reference zone."""

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or reference_zone()

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def yesterday(self) -> date:
        return self.today() - timedelta(days=1)


class FixedClock(Clock):
    """Clock pinned to one day key; advance() moves it forward."""

    def __init__(self, day: date, tz: Optional[tzinfo] = None):
        super().__init__(tz or UTC)
        self.day = day

    def now(self) -> datetime:
        return datetime(self.day.year, self.day.month, self.day.day, 12, tzinfo=self.tz)

    def advance(self, days: int = 1) -> date:
        self.day = self.day + timedelta(days=days)
        return self.day


def check_settings() -> None:
    """Raise ConfigurationError now for a bad zone, launch date or policy."""
    zone = reference_zone()
    launch_date()
    question_number(Clock(zone).today())


def question_number(
    day: date,
    policy: Optional[str] = None,
    launch: Optional[date] = None,
) -> int:
    policy = policy or QUESTION_NUMBER_POLICY
    if policy == DAY_OF_YEAR:
        return day.timetuple().tm_yday
    if policy == SINCE_LAUNCH:
        launch = launch or launch_date()
        # proleptic ordinals: no discontinuity at year or leap-day boundaries
        return day.toordinal() - launch.toordinal() + 1
    raise ConfigurationError(f"Unknown QUESTION_NUMBER_POLICY {policy!r}")
