#!/usr/bin/env python3
"""
Basic Usage Example

This example registers a few jobs on the default scheduler, starts the
background loop, lets it tick for a while and stops it again.

Usage:
    python examples/basic_usage.py [seconds]
"""

import logging
import sys
import time
from datetime import datetime

import cadence
from cadence.config import get_settings
from cadence.logging_config import setup_logging

logger = logging.getLogger("basic_usage")


def task():
    logger.info("I am running task.")


def task_with_params(a: int, b: str) -> None:
    logger.info(f"{a} {b} {datetime.now():%Y-%m-%d %H:%M:%S.%f}")


def main(run_for: float = 5.0) -> None:
    setup_logging(get_settings().logging)

    # jobs with and without params
    cadence.every(1).second().do(task_with_params, 1, "hello")
    removed = cadence.every(1).second().do(task)
    cadence.every(2).seconds().do(task)
    cadence.every_with_name(1, "report").day().at("18:30").do(task)

    cadence.remove(removed)

    # one-off job for the first tick
    cadence.emergency().do(task_with_params, 0, "emergency")

    cadence.start()
    job, when = cadence.next_run()
    logger.info(f"Next run: {job!r} at {when}")

    time.sleep(run_for)
    cadence.stop()
    logger.info(f"Status: {cadence.get_default_scheduler().get_status().model_dump_json()}")


if __name__ == "__main__":
    main(float(sys.argv[1]) if len(sys.argv) > 1 else 5.0)
