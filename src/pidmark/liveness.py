"""Cross-platform process liveness checks.

Processes owned by another user are reported as *not* running: both
``EPERM`` from ``kill(pid, 0)`` and psutil's ``AccessDenied`` map to
``False``. Unexpected probe errors map to ``True`` so a live process is never
declared dead by accident.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol

import psutil

logger = logging.getLogger(__name__)


class LivenessProbe(Protocol):
    def __call__(self, pid: int) -> bool: ...


class SignalProbe:
    """Probe with the null signal, for POSIX systems."""

    def __call__(self, pid: int) -> bool:
        if pid <= 0:
            return False
        try:
            os.kill(pid, 0)
        except (OverflowError, ValueError):
            # pid is out of range for pid_t
            return False
        except ProcessLookupError:
            return False
        except ChildProcessError:
            return False
        except PermissionError:
            logger.debug("Process %s exists but is not signalable; treating as stopped", pid)
            return False
        except OSError as exc:
            logger.debug("Unexpected error probing process %s: %s", pid, exc)
            return True
        return True


class PsutilProbe:
    """Probe through a process handle, for platforms without kill(pid, 0)."""

    def __call__(self, pid: int) -> bool:
        if pid <= 0:
            return False
        try:
            process = psutil.Process(pid)
            if not process.is_running():
                return False
            return process.status() != psutil.STATUS_ZOMBIE
        except (OverflowError, ValueError):
            return False
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied:
            logger.debug("Process %s exists but cannot be queried; treating as stopped", pid)
            return False
        except (psutil.Error, OSError) as exc:
            logger.debug("Unexpected error probing process %s: %s", pid, exc)
            return True


def default_probe() -> LivenessProbe:
    """Return the liveness probe for the current platform."""
    if os.name == "posix":
        return SignalProbe()
    return PsutilProbe()


def probe_running(pid: int) -> bool:
    """Return whether *pid* appears to refer to a live process."""
    return default_probe()(pid)


__all__ = ["LivenessProbe", "PsutilProbe", "SignalProbe", "default_probe", "probe_running"]
