"""Pydantic models describing jobs and scheduler state."""

from datetime import datetime, time
from enum import Enum

from pydantic import BaseModel, Field


class TimeUnit(str, Enum):
    """Unit a job's interval is counted in."""

    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"


class JobInfo(BaseModel):
    """Point-in-time snapshot of a registered job."""

    name: str | None = Field(None, description="Registry name, if registered by name")
    interval: int = Field(..., description="Repeat period, counted in unit")
    unit: TimeUnit = Field(..., description="Time unit of the interval")
    weekday: int | None = Field(None, ge=0, le=6, description="Weekday (0=Monday) for weekly jobs")
    at: time | None = Field(None, description="Time of day for daily and weekly jobs")
    enabled: bool = Field(..., description="Whether the job may run")
    task: str | None = Field(None, description="Qualified name of the bound callable")
    last_run: datetime | None = Field(None, description="Last (or anchor) run time")
    next_run: datetime | None = Field(None, description="Next due time")


class SchedulerStatus(BaseModel):
    """Scheduler status summary."""

    running: bool = Field(..., description="Whether the execution loop is ticking")
    total_jobs: int = Field(..., description="Jobs in the registry")
    named_jobs: int = Field(..., description="Jobs addressable by name")
    paused_jobs: int = Field(..., description="Registered jobs currently disabled")
    pending_emergencies: int = Field(..., description="Emergency jobs awaiting the next tick")
    next_run_time: datetime | None = Field(None, description="Soonest due time, if any")
