"""Exception hierarchy for the cadence scheduler."""


class SchedulerError(Exception):
    """Base class for scheduler errors."""

    pass


class JobConfigurationError(SchedulerError, ValueError):
    """Raised when a job is configured with an unusable value."""

    pass


class InvalidTimeFormatError(JobConfigurationError):
    """Raised when a time of day string cannot be parsed."""

    pass


class SchedulerStartError(SchedulerError, RuntimeError):
    """Raised when the execution loop does not confirm its first tick in time."""

    pass
