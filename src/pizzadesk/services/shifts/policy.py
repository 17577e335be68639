"""Operational-day (shift) window policies.

A policy maps a reporting date ``D`` to an absolute ``[start, end)`` interval.
Every window opens on ``D`` at ``policy.start`` and closes at ``policy.end``,
on ``D`` itself when ``end > start`` and on ``D + 1`` otherwise. Three named
policies are supported:

* ``calendar``        ``[D 00:00, D+1 00:00)``
* ``calendar_grace``  ``[D cutoff, D+1 cutoff)``: records created after
  midnight but before the cutoff still belong to the previous day.
* ``night_shift``     ``[D 18:00, D+1 02:30)`` with configurable bounds.
  Moments between two night shifts belong to no reporting date.

``resolve`` and ``classify`` never read the clock. Callers that need "today"
take a single ``now`` snapshot and pass it to ``current_reference_date``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

from ...models.domain import ShiftWindow

CALENDAR = "calendar"
CALENDAR_GRACE = "calendar_grace"
NIGHT_SHIFT = "night_shift"


@dataclass(frozen=True, slots=True)
class ShiftPolicy:
    name: str
    start: time
    end: time

    @property
    def crosses_midnight(self) -> bool:
        return self.end <= self.start

    @property
    def is_contiguous(self) -> bool:
        """True when consecutive windows tile the timeline without gaps."""
        return self.start == self.end

    @classmethod
    def calendar(cls) -> "ShiftPolicy":
        return cls(name=CALENDAR, start=time(0, 0), end=time(0, 0))

    @classmethod
    def calendar_grace(cls, cutoff: time = time(2, 30)) -> "ShiftPolicy":
        return cls(name=CALENDAR_GRACE, start=cutoff, end=cutoff)

    @classmethod
    def night_shift(cls, start: time = time(18, 0), end: time = time(2, 30)) -> "ShiftPolicy":
        return cls(name=NIGHT_SHIFT, start=start, end=end)


def parse_clock(value: str) -> time:
    hours, _, minutes = value.partition(":")
    return time(int(hours), int(minutes or 0))


@lru_cache(maxsize=8)
def get_timezone(name: str) -> tzinfo:
    return ZoneInfo(name)


def policy_from_settings(config=None) -> ShiftPolicy:
    """Build the active policy from application settings."""
    if config is None:
        from ...config import settings as config

    if config.shift_policy == CALENDAR:
        return ShiftPolicy.calendar()
    if config.shift_policy == CALENDAR_GRACE:
        return ShiftPolicy.calendar_grace(parse_clock(config.grace_cutoff))
    return ShiftPolicy.night_shift(parse_clock(config.shift_start), parse_clock(config.shift_end))


def resolve(reference_date: date, policy: ShiftPolicy, tz: tzinfo) -> ShiftWindow:
    start = datetime.combine(reference_date, policy.start, tzinfo=tz)
    end_date = reference_date + timedelta(days=1) if policy.crosses_midnight else reference_date
    end = datetime.combine(end_date, policy.end, tzinfo=tz)
    return ShiftWindow(start=start, end=end, reference_date=reference_date)


def _localize(moment: datetime, tz: tzinfo) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def classify(moment: datetime, policy: ShiftPolicy, tz: tzinfo) -> date | None:
    """Reporting date whose window contains ``moment``, or None between shifts."""
    local = _localize(moment, tz)
    # Windows are at most one day long and open on their reference date,
    # so only the local date and the day before can contain the moment.
    for candidate in (local.date(), local.date() - timedelta(days=1)):
        if resolve(candidate, policy, tz).contains(local):
            return candidate
    return None


def current_reference_date(policy: ShiftPolicy, tz: tzinfo, now: datetime) -> date:
    """Default reporting date for an operator looking at the screen at ``now``."""
    local_now = _localize(now, tz)
    return classify(local_now, policy, tz) or local_now.date()


def belongs_to_today(moment: datetime, policy: ShiftPolicy, tz: tzinfo, now: datetime) -> bool:
    return classify(moment, policy, tz) == current_reference_date(policy, tz, now)


def minutes_since(moment: datetime, now: datetime) -> int:
    elapsed = (now - moment).total_seconds()
    return max(int(elapsed // 60), 0)
