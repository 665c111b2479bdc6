"""Jobs: a callable bound to a repeat interval and its due-time state.

A job is built fluently and finalized by binding a callable::

    scheduler.every(10).minutes().do(refresh_cache)
    scheduler.every(1).day().at("18:30").do(send_report, "daily")
    scheduler.every(2).weeks().monday().at("09:00").do(rotate_keys)

The scheduler owns where a job sits in its registry and when it is invoked;
the job owns its own time arithmetic (``initialize``, ``should_run``, ``run``).
All timestamps are timezone-aware and expressed in the job's location.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, time, timedelta, tzinfo
from typing import Any, Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import InvalidTimeFormatError, JobConfigurationError
from .models.job import JobInfo, TimeUnit

logger = logging.getLogger(__name__)

_UNIT_SECONDS = {
    TimeUnit.SECONDS: 1,
    TimeUnit.MINUTES: 60,
    TimeUnit.HOURS: 60 * 60,
    TimeUnit.DAYS: 24 * 60 * 60,
    TimeUnit.WEEKS: 7 * 24 * 60 * 60,
}

_TIME_OF_DAY = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")


def resolve_location(location: tzinfo | str | None) -> tzinfo | None:
    """Turn a zone name or tzinfo into a tzinfo; None means local time.

    Raises:
        JobConfigurationError: If the zone name is unknown.
    """
    if location is None or isinstance(location, tzinfo):
        return location
    if location.lower() == "local":
        return None
    try:
        return ZoneInfo(location)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise JobConfigurationError(f"Unknown time zone: {location!r}") from e


def parse_time_of_day(value: str | time) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a time.

    Raises:
        InvalidTimeFormatError: If the string is not a valid time of day.
    """
    if isinstance(value, time):
        return value.replace(microsecond=0, tzinfo=None)
    match = _TIME_OF_DAY.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidTimeFormatError(f"Invalid time of day {value!r}, expected HH:MM[:SS]")
    hour, minute, second = match.groups()
    return time(int(hour), int(minute), int(second or 0))


class Job:
    """A periodic unit of work.

    Attributes:
        interval: Repeat period counted in ``unit``.
        unit: Time unit of the interval.
        name: Registry name when registered with ``every_with_name``.
        at_time: Time of day for daily and weekly jobs.
        start_day: Weekday (0=Monday) for weekly jobs.
        enabled: Paused jobs are never due.
        last_run: Time of the last run, or the anchor before the first run.
        next_run: Time the job is next due; None until initialized.
    """

    def __init__(self, interval: int, location: tzinfo | str | None = None) -> None:
        self.interval = interval
        self.unit = TimeUnit.SECONDS
        self.name: str | None = None
        self.at_time: time | None = None
        self.start_day: int | None = None
        self.enabled = True
        self.last_run: datetime | None = None
        self.next_run: datetime | None = None
        self._location = resolve_location(location)
        self._task: Callable[..., Any] | None = None
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return (
            f"<Job{label} every {self.interval} {self.unit.value}"
            f" task={self.task_name} next_run={self.next_run}>"
        )

    # ---- builder ----

    def _set_unit(self, unit: TimeUnit) -> Job:
        self.unit = unit
        return self

    def second(self) -> Job:
        return self._set_unit(TimeUnit.SECONDS)

    def seconds(self) -> Job:
        return self._set_unit(TimeUnit.SECONDS)

    def minute(self) -> Job:
        return self._set_unit(TimeUnit.MINUTES)

    def minutes(self) -> Job:
        return self._set_unit(TimeUnit.MINUTES)

    def hour(self) -> Job:
        return self._set_unit(TimeUnit.HOURS)

    def hours(self) -> Job:
        return self._set_unit(TimeUnit.HOURS)

    def day(self) -> Job:
        return self._set_unit(TimeUnit.DAYS)

    def days(self) -> Job:
        return self._set_unit(TimeUnit.DAYS)

    def week(self) -> Job:
        return self._set_unit(TimeUnit.WEEKS)

    def weeks(self) -> Job:
        return self._set_unit(TimeUnit.WEEKS)

    def weekday(self, day: int) -> Job:
        """Run on the given weekday (0=Monday ... 6=Sunday), every ``interval`` weeks."""
        if not isinstance(day, int) or not 0 <= day <= 6:
            raise JobConfigurationError(f"Weekday must be between 0 and 6, got {day!r}")
        self.start_day = day
        return self._set_unit(TimeUnit.WEEKS)

    def monday(self) -> Job:
        return self.weekday(0)

    def tuesday(self) -> Job:
        return self.weekday(1)

    def wednesday(self) -> Job:
        return self.weekday(2)

    def thursday(self) -> Job:
        return self.weekday(3)

    def friday(self) -> Job:
        return self.weekday(4)

    def saturday(self) -> Job:
        return self.weekday(5)

    def sunday(self) -> Job:
        return self.weekday(6)

    def at(self, value: str | time) -> Job:
        """Run at a time of day. Sub-day units are promoted to days."""
        self.at_time = parse_time_of_day(value)
        if self.unit not in (TimeUnit.DAYS, TimeUnit.WEEKS):
            self.unit = TimeUnit.DAYS
        return self

    def location(self, location: tzinfo | str | None) -> Job:
        """Bind the time zone used for time-of-day computations."""
        self._location = resolve_location(location)
        return self

    def do(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Job:
        """Bind the callable and its arguments; returns the job handle."""
        if not callable(func):
            raise JobConfigurationError(f"Job task must be callable, got {func!r}")
        self._task = func
        self._args = args
        self._kwargs = kwargs
        return self

    # ---- state ----

    @property
    def timezone(self) -> tzinfo | None:
        return self._location

    @property
    def task_name(self) -> str | None:
        if self._task is None:
            return None
        return getattr(self._task, "__qualname__", repr(self._task))

    @property
    def has_task(self) -> bool:
        return self._task is not None

    @property
    def period(self) -> timedelta:
        return timedelta(seconds=self.interval * _UNIT_SECONDS[self.unit])

    def is_initialized(self) -> bool:
        return self.next_run is not None

    def pause(self) -> None:
        self.enabled = False

    def resume(self) -> None:
        self.enabled = True

    def update_interval(self, interval: int) -> None:
        """Change the repeat period; the pending next_run is left as is."""
        self.interval = interval

    def _localize(self, now: datetime) -> datetime:
        # naive datetimes are read as local time
        return now.astimezone(self._location)

    def _now(self) -> datetime:
        return datetime.now(self._location).astimezone(self._location)

    def _first_occurrence(self, now: datetime) -> datetime | None:
        if self.unit == TimeUnit.DAYS and self.at_time is not None:
            candidate = now.replace(
                hour=self.at_time.hour,
                minute=self.at_time.minute,
                second=self.at_time.second,
                microsecond=0,
            )
            if candidate < now:
                candidate += timedelta(days=1)
            return candidate

        if self.unit == TimeUnit.WEEKS and self.start_day is not None:
            at = self.at_time or time(0)
            candidate = now.replace(
                hour=at.hour, minute=at.minute, second=at.second, microsecond=0
            ) + timedelta(days=(self.start_day - now.weekday()) % 7)
            if candidate < now:
                candidate += timedelta(weeks=1)
            return candidate

        return None

    def initialize(self, now: datetime) -> None:
        """Anchor last_run/next_run to ``now``."""
        now = self._localize(now)
        first = self._first_occurrence(now)
        if first is None:
            self.last_run = now
            self.next_run = now + self.period
        else:
            self.next_run = first
            self.last_run = first - self.period

    def should_run(self, now: datetime) -> bool:
        """True when the job is enabled, bound, initialized and due."""
        return (
            self.enabled
            and self._task is not None
            and self.next_run is not None
            and now >= self.next_run
        )

    def _advance(self, now: datetime) -> datetime:
        period = self.period
        if self.next_run is None or period <= timedelta(0):
            return now + period

        upcoming = self.next_run + period
        if upcoming <= now:
            # skip missed windows rather than backfilling them
            missed = (now - self.next_run) // period
            upcoming = self.next_run + (missed + 1) * period
        return upcoming

    def run(self, now: datetime | None = None) -> Any:
        """Invoke the bound callable and move the schedule forward.

        Exceptions raised by the callable propagate to the caller.
        """
        now = self._localize(now) if now is not None else self._now()
        if not self.is_initialized():
            self.initialize(now)

        self.next_run = self._advance(now)
        self.last_run = now

        if self._task is None:
            logger.debug(f"{self!r} has no task bound, nothing to run")
            return None
        return self._task(*self._args, **self._kwargs)

    def info(self) -> JobInfo:
        """Return a snapshot of this job."""
        return JobInfo(
            name=self.name,
            interval=self.interval,
            unit=self.unit,
            weekday=self.start_day,
            at=self.at_time,
            enabled=self.enabled,
            task=self.task_name,
            last_run=self.last_run,
            next_run=self.next_run,
        )
