"""Errors raised by pidfile operations.

A missing marker is reported with the built-in ``FileNotFoundError`` and
other filesystem failures with their original ``OSError`` subclass; only the
policy refusals below are specific to this package.
"""

from __future__ import annotations

import os


class PidfileError(Exception):
    """Base class for pidfile policy errors."""

    def __init__(self, message: str, *, path: str | os.PathLike[str]) -> None:
        super().__init__(message)
        self.path = os.fspath(path)


class PidfileInvalidError(PidfileError, ValueError):
    """The pidfile exists but does not contain a decimal process id."""

    def __init__(self, path: str | os.PathLike[str], content: str) -> None:
        super().__init__(f"pidfile {os.fspath(path)} has invalid contents", path=path)
        self.content = content


class ProcessRunningError(PidfileError):
    """The pidfile records a process that is still running."""

    def __init__(self, path: str | os.PathLike[str], pid: int) -> None:
        super().__init__(f"process {pid} from {os.fspath(path)} is running", path=path)
        self.pid = pid


class PidfileStaleError(PidfileError):
    """The pidfile records a dead process and overwriting was not allowed."""

    def __init__(self, path: str | os.PathLike[str], pid: int) -> None:
        super().__init__(
            f"pidfile {os.fspath(path)} exists but process {pid} is not running",
            path=path,
        )
        self.pid = pid


__all__ = [
    "PidfileError",
    "PidfileInvalidError",
    "PidfileStaleError",
    "ProcessRunningError",
]
