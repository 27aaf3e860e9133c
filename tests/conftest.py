"""Pytest fixtures for pidmark tests."""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

_TEST_BASE_DIR = Path(tempfile.mkdtemp(prefix="pidmark-tests-"))
os.environ["PIDMARK_RUNTIME_DIR"] = str(_TEST_BASE_DIR / "run")
os.environ["PIDMARK_CONFIG"] = str(_TEST_BASE_DIR / "config" / "config.toml")


settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture(scope="session")
def dead_pid() -> int:
    """Pid of a child process that has exited and been reaped."""
    proc = subprocess.Popen([sys.executable, "-c", "pass"])
    proc.wait()
    return proc.pid


@pytest.fixture
def only_self_alive():
    """Probe that treats only the test process as running."""
    own_pid = os.getpid()
    return lambda pid: pid == own_pid


@pytest.fixture
def pidpath(tmp_path: Path) -> Path:
    return tmp_path / "test.pid"
