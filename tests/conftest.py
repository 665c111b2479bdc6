"""Shared test fixtures and configuration."""

import logging
import os
import time
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from cadence.config import SchedulerConfig, reload_settings
from cadence.default import reset_default_scheduler
from cadence.scheduler import Scheduler

# Monday
START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Fixture providing a fake clock frozen at START."""
    return FakeClock(START)


@pytest.fixture
def scheduler_config():
    """Fixture providing a fast-ticking UTC configuration."""
    return SchedulerConfig(tick_interval=0.02, timezone="UTC")


@pytest.fixture
def scheduler(scheduler_config, clock):
    """Scheduler driven by the fake clock; ticked manually with run_pending()."""
    s = Scheduler(config=scheduler_config, clock=clock)
    yield s
    s.stop()


@pytest.fixture
def live_scheduler(scheduler_config):
    """Scheduler on the wall clock, for tests that run the background loop."""
    s = Scheduler(config=scheduler_config)
    yield s
    s.stop()


@pytest.fixture
def env_clean():
    """Fixture to clear environment variables and reload settings."""
    with patch.dict(os.environ, {}, clear=True):
        reload_settings()
        yield
    reload_settings()


@pytest.fixture
def env_fast_ticks():
    """Fixture to configure a fast default scheduler through the environment."""
    env = {"SCHEDULER_TICK_INTERVAL": "0.02", "SCHEDULER_TIMEZONE": "UTC"}
    with patch.dict(os.environ, env, clear=True):
        reload_settings()
        reset_default_scheduler()
        yield
        reset_default_scheduler()
    reload_settings()


@pytest.fixture
def scratch_logging():
    """Context manager giving setup_logging() a throwaway root handler list."""

    @contextmanager
    def scratch():
        root = logging.getLogger()
        cadence = logging.getLogger("cadence")
        root_level, cadence_level = root.level, cadence.level
        with patch.object(root, "handlers", []):
            try:
                yield root
            finally:
                for handler in root.handlers:
                    handler.close()
        root.setLevel(root_level)
        cadence.setLevel(cadence_level)

    return scratch


@pytest.fixture
def wait_for():
    """Fixture returning a poller for conditions set by the loop thread."""

    def poll(predicate, timeout: float = 3.0, interval: float = 0.01) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return poll
