"""In-process periodic job scheduler.

The scheduler keeps its jobs in a registry ordered by interval, with a name
index for name-addressed operations, and drives them from one background
thread that ticks on a fixed period. On every tick it drains the emergency
queue, orders the registry by due time and runs each due job in turn.

All shared state is guarded by one reentrant lock, which the execution loop
also holds while job bodies run (unless ``release_lock_during_run`` is set),
so a slow job delays registry operations and the next tick.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable

from .config import SchedulerConfig, get_settings
from .exceptions import SchedulerStartError
from .job import Job, resolve_location
from .logging_config import log_with_context
from .models.job import SchedulerStatus

logger = logging.getLogger(__name__)

# Uninitialized jobs sort ahead of everything else
_UNSET = datetime.min.replace(tzinfo=timezone.utc)


def _due_key(job: Job) -> datetime:
    return job.next_run if job.next_run is not None else _UNSET


class Scheduler:
    """A registry of jobs plus the loop that runs them.

    Attributes:
        config: Loop configuration (tick interval, default zone, lock policy).
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            config: Scheduler configuration. Defaults to ``get_settings().scheduler``.
            clock: Callable returning the current time. Defaults to the
                wall clock in the scheduler's location.
        """
        self.config = config if config is not None else get_settings().scheduler
        self._clock = clock

        self._jobs: list[Job] = []
        self._named: dict[str, Job] = {}
        self._emergencies: list[Job] = []
        self._location: tzinfo | None = resolve_location(self.config.timezone)

        self._lock = threading.RLock()
        self._lifecycle_lock = threading.Lock()
        self._running = False
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None

        logger.debug(
            f"Scheduler initialized (tick={self.config.tick_interval}s, "
            f"timezone={self.config.timezone or 'local'}, "
            f"release_lock_during_run={self.config.release_lock_during_run})"
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __repr__(self) -> str:
        return f"<Scheduler jobs={len(self)} running={self.is_running()}>"

    def _now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(self._location).astimezone(self._location)

    # ============= Registry =============

    def _insert(self, job: Job) -> None:
        """Append ``job`` and restore interval order with a stable insertion sort."""
        self._jobs.append(job)
        for i in range(1, len(self._jobs)):
            current = self._jobs[i]
            j = i - 1
            while j >= 0 and self._jobs[j].interval > current.interval:
                self._jobs[j + 1] = self._jobs[j]
                j -= 1
            self._jobs[j + 1] = current

    def _discard(self, job: Job) -> bool:
        """Remove ``job`` by identity, keeping the name index in step."""
        for i, registered in enumerate(self._jobs):
            if registered is job:
                del self._jobs[i]
                if job.name is not None and self._named.get(job.name) is job:
                    del self._named[job.name]
                return True
        return False

    def every(self, interval: int) -> Job:
        """Create a job repeating every ``interval`` units and register it."""
        with self._lock:
            job = Job(interval, self._location)
            self._insert(job)
        logger.debug(f"Registered job every {interval} (total={len(self)})")
        return job

    def every_with_name(self, interval: int, name: str) -> Job:
        """Create and register a named job, replacing any job already using ``name``."""
        with self._lock:
            previous = self._named.get(name)
            if previous is not None:
                self._discard(previous)
                logger.debug(f"Replacing job named {name!r}")

            job = Job(interval, self._location)
            job.name = name
            self._named[name] = job
            self._insert(job)
        logger.debug(f"Registered job {name!r} every {interval}")
        return job

    def remove(self, job: Job) -> bool:
        """Remove a job by handle. Returns True if it was registered."""
        with self._lock:
            removed = self._discard(job)
        if removed:
            logger.debug(f"Removed {job!r}")
        return removed

    def remove_with_name(self, name: str) -> bool:
        """Remove the job registered under ``name``. Returns True if found."""
        with self._lock:
            job = self._named.get(name)
            if job is None:
                return False
            self._named.pop(name)
            self._discard(job)
        logger.debug(f"Removed job {name!r}")
        return True

    def update_interval_with_name(self, name: str, interval: int) -> bool:
        """Change the interval of a named job. Returns True if found.

        The registry is not re-sorted; interval order is restored by the
        next insertion.
        """
        with self._lock:
            job = self._named.get(name)
            if job is None:
                return False
            job.update_interval(interval)
        logger.debug(f"Job {name!r} interval updated to {interval}")
        return True

    def pause_with_name(self, name: str) -> bool:
        """Disable a named job. Returns True if found."""
        with self._lock:
            job = self._named.get(name)
            if job is None:
                return False
            job.pause()
        return True

    def resume_with_name(self, name: str) -> bool:
        """Enable a named job. Returns True if found."""
        with self._lock:
            job = self._named.get(name)
            if job is None:
                return False
            job.resume()
        return True

    def pause_all(self) -> None:
        """Disable every registered job."""
        with self._lock:
            for job in self._jobs:
                job.pause()

    def resume_all(self) -> None:
        """Enable every registered job."""
        with self._lock:
            for job in self._jobs:
                job.resume()

    def clear(self) -> None:
        """Remove all jobs and names at once."""
        with self._lock:
            self._jobs = []
            self._named = {}
        logger.debug("Registry cleared")

    def jobs(self) -> list[Job]:
        """Registered jobs in storage (interval) order."""
        with self._lock:
            return list(self._jobs)

    def get_job(self, name: str) -> Job | None:
        with self._lock:
            return self._named.get(name)

    def location(self, location: tzinfo | str | None) -> None:
        """Set the location given to jobs created from now on (None = local)."""
        resolved = resolve_location(location)
        with self._lock:
            self._location = resolved

    # ============= Emergency queue =============

    def emergency(self) -> Job:
        """Create a one-off job that runs on the next tick, then is discarded."""
        with self._lock:
            # the interval is never consulted, emergencies skip the due check
            job = Job(0, self._location)
            self._emergencies.append(job)
        logger.debug("Queued emergency job")
        return job

    def pending_emergencies(self) -> int:
        with self._lock:
            return len(self._emergencies)

    def _take_emergencies(self) -> list[Job]:
        # the whole queue is drained; an unbound job runs as a no-op
        queued, self._emergencies = self._emergencies, []
        return queued

    # ============= Next run =============

    def _due_order(self) -> list[Job]:
        return sorted(self._jobs, key=_due_key)

    def next_run(self) -> tuple[Job | None, datetime | None]:
        """Return the soonest-due job and its due time, or ``(None, None)``."""
        with self._lock:
            if not self._jobs:
                return None, None
            job = self._due_order()[0]
            return job, job.next_run

    # ============= Execution =============

    def _execute(self, emergencies: list[Job], ordered: list[Job], now: datetime) -> None:
        for job in emergencies:
            log_with_context(logger, logging.DEBUG, "Running emergency job", task=job.task_name)
            job.run(now)

        for job in ordered:
            if not job.is_initialized():
                job.initialize(now)
            if job.should_run(now):
                log_with_context(
                    logger, logging.DEBUG, "Running job",
                    job=job.name, task=job.task_name, due=str(job.next_run),
                )
                job.run(now)

    def _run_pending(self, now: datetime) -> None:
        with self._lock:
            emergencies = self._take_emergencies()
            ordered = self._due_order()
            if not self.config.release_lock_during_run:
                self._execute(emergencies, ordered, now)
                return
        self._execute(emergencies, ordered, now)

    def run_pending(self) -> None:
        """Run emergency jobs and every job that is due now.

        Missed windows are not backfilled: a job due several times since the
        last call runs once.
        """
        self._run_pending(self._now())

    def run_all(self) -> None:
        """Run every registered job immediately, regardless of due time."""
        self.run_all_with_delay(0)

    def run_all_with_delay(self, delay: float | timedelta) -> None:
        """Run every registered job in due order, sleeping ``delay`` between jobs."""
        seconds = delay.total_seconds() if isinstance(delay, timedelta) else float(delay)
        with self._lock:
            now = self._now()
            for job in self._due_order():
                if not job.is_initialized():
                    job.initialize(now)
                job.run(self._now())
                if seconds > 0:
                    time.sleep(seconds)

    # ============= Lifecycle =============

    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def _loop(self, started: threading.Event, stop: threading.Event) -> None:
        tick = self.config.tick_interval
        deadline = time.monotonic() + tick
        try:
            while not stop.wait(max(0.0, deadline - time.monotonic())):
                # fixed period; an overrunning tick delays the next one without catch-up
                deadline = max(deadline + tick, time.monotonic())
                now = self._now()
                if stop.is_set():
                    break
                with self._lock:
                    if not self._running:
                        # anchor every job to the first tick so they stay in phase with the loop
                        for job in self._jobs:
                            if not job.is_initialized():
                                job.initialize(now)
                        self._running = True
                        started.set()
                self._run_pending(now)
        except Exception:
            logger.exception("Job raised, execution loop terminated")
            raise
        finally:
            with self._lock:
                self._running = False
            logger.info("Execution loop stopped")

    def start(self) -> None:
        """Start the execution loop.

        Blocks until the loop's first tick has initialized every job. Does
        nothing if the loop is already running.

        Raises:
            SchedulerStartError: If ``start_timeout`` elapses first, or the
                loop dies before confirming.
        """
        if self._thread is threading.current_thread():
            return

        with self._lifecycle_lock:
            previous = self._thread
            if previous is not None and previous.is_alive():
                if self._stop_event is not None and not self._stop_event.is_set():
                    return
                # the previous loop was told to stop and is finishing its tick
                previous.join()

            started = threading.Event()
            stop = threading.Event()
            thread = threading.Thread(
                target=self._loop,
                args=(started, stop),
                name="cadence-scheduler",
                daemon=True,
            )
            self._stop_event = stop
            self._thread = thread
            thread.start()

            timeout = self.config.start_timeout
            deadline = None if timeout is None else time.monotonic() + timeout
            while not started.wait(self.config.tick_interval):
                if not thread.is_alive():
                    raise SchedulerStartError("Execution loop exited before its first tick")
                if deadline is not None and time.monotonic() >= deadline:
                    stop.set()
                    raise SchedulerStartError(
                        f"Execution loop did not confirm its first tick within {timeout}s"
                    )

        logger.info(f"Scheduler started with {len(self)} jobs")

    def stop(self) -> None:
        """Stop the execution loop and wait until it has exited.

        Does nothing if the loop is not running. Called from a job body on the
        loop thread, it only signals the loop, which exits after the tick.
        """
        if self._thread is threading.current_thread():
            if self._stop_event is not None:
                self._stop_event.set()
            logger.info("Stop requested from within a job")
            return

        with self._lifecycle_lock:
            if not self.is_running():
                return
            stop, thread = self._stop_event, self._thread
            if stop is None or thread is None:
                return

            stop.set()
            thread.join()

        logger.info("Scheduler stopped")

    def get_status(self) -> SchedulerStatus:
        """Get a summary of the scheduler state."""
        with self._lock:
            _, upcoming = self.next_run()
            return SchedulerStatus(
                running=self._running,
                total_jobs=len(self._jobs),
                named_jobs=len(self._named),
                paused_jobs=sum(1 for job in self._jobs if not job.enabled),
                pending_emergencies=len(self._emergencies),
                next_run_time=upcoming,
            )
