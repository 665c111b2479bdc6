"""Smoke test that the example script runs end to end."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).parent.parent.parent


@pytest.mark.smoke
def test_basic_usage_example(env_fast_ticks):
    env = {**os.environ, "PYTHONPATH": str(ROOT_DIR / "src"), "SCHEDULER_TICK_INTERVAL": "0.05"}
    result = subprocess.run(
        [sys.executable, str(ROOT_DIR / "examples" / "basic_usage.py"), "0.5"],
        capture_output=True,
        text=True,
        timeout=30,
        env=env,
    )

    assert result.returncode == 0, f"Example failed: {result.stderr}"
    assert "emergency" in result.stderr
    assert "Status:" in result.stderr
