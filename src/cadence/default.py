"""Process-wide default scheduler and module-level shortcuts.

The default instance is built on first use from ``get_settings()`` and then
behaves like any other :class:`Scheduler`. Applications that can pass a
scheduler around explicitly should prefer doing so.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, tzinfo

from .job import Job
from .scheduler import Scheduler

_default_scheduler: Scheduler | None = None
_default_lock = threading.Lock()


def get_default_scheduler() -> Scheduler:
    """Get the shared scheduler instance (singleton pattern)."""
    global _default_scheduler
    if _default_scheduler is None:
        with _default_lock:
            if _default_scheduler is None:
                _default_scheduler = Scheduler()
    return _default_scheduler


def reset_default_scheduler() -> None:
    """Stop and drop the shared instance (useful for testing)."""
    global _default_scheduler
    with _default_lock:
        scheduler, _default_scheduler = _default_scheduler, None
    if scheduler is not None:
        scheduler.stop()


def every(interval: int) -> Job:
    return get_default_scheduler().every(interval)


def every_with_name(interval: int, name: str) -> Job:
    return get_default_scheduler().every_with_name(interval, name)


def emergency() -> Job:
    return get_default_scheduler().emergency()


def run_pending() -> None:
    """Run the jobs that are due now.

    Missed runs are not made up: a job registered every minute but polled
    once an hour runs once an hour.
    """
    get_default_scheduler().run_pending()


def run_all() -> None:
    get_default_scheduler().run_all()


def run_all_with_delay(delay: float | timedelta) -> None:
    """Run every job, pausing between them to spread the load."""
    get_default_scheduler().run_all_with_delay(delay)


def start() -> None:
    get_default_scheduler().start()


def stop() -> None:
    get_default_scheduler().stop()


def is_running() -> bool:
    return get_default_scheduler().is_running()


def clear() -> None:
    get_default_scheduler().clear()


def remove(job: Job) -> bool:
    return get_default_scheduler().remove(job)


def remove_with_name(name: str) -> bool:
    return get_default_scheduler().remove_with_name(name)


def update_interval_with_name(name: str, interval: int) -> bool:
    return get_default_scheduler().update_interval_with_name(name, interval)


def pause_with_name(name: str) -> bool:
    return get_default_scheduler().pause_with_name(name)


def pause_all() -> None:
    get_default_scheduler().pause_all()


def resume_with_name(name: str) -> bool:
    return get_default_scheduler().resume_with_name(name)


def resume_all() -> None:
    get_default_scheduler().resume_all()


def location(tz: tzinfo | str | None) -> None:
    get_default_scheduler().location(tz)


def next_run() -> tuple[Job | None, datetime | None]:
    return get_default_scheduler().next_run()
