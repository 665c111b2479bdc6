"""Cadence - in-process periodic job scheduling with a background tick loop."""

from importlib.metadata import PackageNotFoundError, version

from .default import (
    clear,
    emergency,
    every,
    every_with_name,
    get_default_scheduler,
    is_running,
    location,
    next_run,
    pause_all,
    pause_with_name,
    remove,
    remove_with_name,
    reset_default_scheduler,
    resume_all,
    resume_with_name,
    run_all,
    run_all_with_delay,
    run_pending,
    start,
    stop,
    update_interval_with_name,
)
from .exceptions import (
    InvalidTimeFormatError,
    JobConfigurationError,
    SchedulerError,
    SchedulerStartError,
)
from .job import Job
from .models.job import JobInfo, SchedulerStatus, TimeUnit
from .scheduler import Scheduler

try:
    __version__ = version("cadence")
except PackageNotFoundError:
    __version__ = "0.0.0"  # Fallback for development

__all__ = [
    "InvalidTimeFormatError",
    "Job",
    "JobConfigurationError",
    "JobInfo",
    "Scheduler",
    "SchedulerError",
    "SchedulerStartError",
    "SchedulerStatus",
    "TimeUnit",
    "clear",
    "emergency",
    "every",
    "every_with_name",
    "get_default_scheduler",
    "is_running",
    "location",
    "next_run",
    "pause_all",
    "pause_with_name",
    "remove",
    "remove_with_name",
    "reset_default_scheduler",
    "resume_all",
    "resume_with_name",
    "run_all",
    "run_all_with_delay",
    "run_pending",
    "start",
    "stop",
    "update_interval_with_name",
]
