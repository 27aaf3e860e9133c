"""Pidfile reading, liveness queries and guarded writes.

A pidfile holds the decimal id of a running process followed by a newline.
``write_pid`` refuses to replace the marker of a live process, and replaces
the marker of a dead one only when asked to.

No lock is held between the liveness check and the write, so two writers
racing on the same path can both pass the check; the last rename wins. Use
``locked_write_pid`` when writers need to be serialized.

Writes go to a temp file that is renamed over the target. A pidfile that is
a symlink is written through: the file it points to is replaced and the link
is kept.
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

from filelock import FileLock

from pidmark.errors import PidfileInvalidError, PidfileStaleError, ProcessRunningError
from pidmark.liveness import default_probe

if TYPE_CHECKING:
    from pidmark.liveness import LivenessProbe

logger = logging.getLogger(__name__)

StrPath: TypeAlias = str | os.PathLike[str]

PIDFILE_MODE = 0o644
DEFAULT_LOCK_TIMEOUT_SECONDS = 5.0

_PID_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_PID_MIN = -(2**63)
_PID_MAX = 2**63 - 1


class PidfileState(StrEnum):
    ABSENT = "absent"
    RUNNING = "running"
    STALE = "stale"
    INVALID = "invalid"


@dataclass(frozen=True, slots=True)
class PidfileStatus:
    """Classification of a pidfile at one point in time."""

    state: PidfileState
    pid: int | None = None


def read_pid(path: StrPath) -> int:
    """Return the process id recorded in *path*.

    Raises:
        FileNotFoundError: The pidfile does not exist.
        PidfileInvalidError: The content is not a decimal 64-bit integer.
    """
    content = Path(path).read_text(encoding="utf-8", errors="replace")
    stripped = content.strip()
    if _PID_RE.fullmatch(stripped) is None:
        raise PidfileInvalidError(path, content)
    try:
        pid = int(stripped)
    except ValueError:
        # more digits than int() will convert
        raise PidfileInvalidError(path, content) from None
    if not _PID_MIN <= pid <= _PID_MAX:
        raise PidfileInvalidError(path, content)
    return pid


def is_running(path: StrPath, *, probe: LivenessProbe | None = None) -> bool:
    """Return True if *path* records a live process; a missing file is False."""
    try:
        pid = read_pid(path)
    except FileNotFoundError:
        return False
    return (probe or default_probe())(pid)


def status(path: StrPath, *, probe: LivenessProbe | None = None) -> PidfileStatus:
    try:
        pid = read_pid(path)
    except FileNotFoundError:
        return PidfileStatus(PidfileState.ABSENT)
    except PidfileInvalidError:
        return PidfileStatus(PidfileState.INVALID)
    if (probe or default_probe())(pid):
        return PidfileStatus(PidfileState.RUNNING, pid)
    return PidfileStatus(PidfileState.STALE, pid)


def _check_previous(path: StrPath, *, allow_overwrite: bool, probe: LivenessProbe) -> None:
    try:
        previous = read_pid(path)
    except FileNotFoundError:
        return
    if probe(previous):
        raise ProcessRunningError(path, previous)
    if not allow_overwrite:
        raise PidfileStaleError(path, previous)
    logger.debug("Replacing stale pidfile %s (pid=%s)", os.fspath(path), previous)


def _replace_contents(path: Path, content: str) -> None:
    if path.is_symlink():
        path = path.resolve()
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        tmp_path.chmod(PIDFILE_MODE)
        tmp_path.replace(path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise


def write_pid(
    path: StrPath,
    pid: int,
    *,
    allow_overwrite: bool = False,
    probe: LivenessProbe | None = None,
) -> None:
    """Record *pid* in *path* unless another live process already holds it.

    The parent directory must already exist; filesystem errors are raised
    unchanged.

    Raises:
        ProcessRunningError: The recorded process is alive (even when
            *allow_overwrite* is set).
        PidfileStaleError: The recorded process is dead and *allow_overwrite*
            is not set.
        PidfileInvalidError: The existing file cannot be parsed.
    """
    _check_previous(path, allow_overwrite=allow_overwrite, probe=probe or default_probe())
    _replace_contents(Path(path), f"{pid}\n")
    logger.debug("Wrote pidfile %s (pid=%s)", os.fspath(path), pid)


def write_for_self(path: StrPath, *, probe: LivenessProbe | None = None) -> None:
    """Record the current process in *path*, refusing stale markers."""
    write_pid(path, os.getpid(), allow_overwrite=False, probe=probe)


def locked_write_pid(
    path: StrPath,
    pid: int,
    *,
    allow_overwrite: bool = False,
    timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    probe: LivenessProbe | None = None,
) -> None:
    """Like ``write_pid`` but serialized through an advisory ``<path>.lock``.

    Raises ``filelock.Timeout`` if the lock is not acquired within *timeout*.
    """
    target = Path(path)
    # filelock would create a missing parent directory for the lock file
    os.stat(target.parent)
    lock = FileLock(str(target.with_name(f"{target.name}.lock")), timeout=timeout)
    with lock:
        write_pid(target, pid, allow_overwrite=allow_overwrite, probe=probe)


def remove(path: StrPath) -> None:
    """Delete *path*; a missing file is not an error."""
    Path(path).unlink(missing_ok=True)


class PidFile:
    """A pidfile bound to one path, usable as a single-instance guard.

    Usage:
        with PidFile(get_runtime_dir() / "worker.pid"):
            serve_forever()

    ``release()`` only removes the file if this handle wrote it and it still
    records the same pid.
    """

    def __init__(
        self,
        path: StrPath,
        *,
        pid: int | None = None,
        allow_overwrite: bool = False,
        probe: LivenessProbe | None = None,
    ) -> None:
        self._path = Path(path)
        self._pid = pid
        self._allow_overwrite = allow_overwrite
        self._probe = probe
        self._written_pid: int | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_held(self) -> bool:
        """Return True if this handle wrote the pidfile and has not released it."""
        return self._written_pid is not None

    def read(self) -> int:
        return read_pid(self._path)

    def is_running(self) -> bool:
        return is_running(self._path, probe=self._probe)

    def status(self) -> PidfileStatus:
        return status(self._path, probe=self._probe)

    def acquire(self) -> None:
        if self._written_pid is not None:
            return
        pid = self._pid if self._pid is not None else os.getpid()
        write_pid(self._path, pid, allow_overwrite=self._allow_overwrite, probe=self._probe)
        self._written_pid = pid

    def release(self) -> None:
        if self._written_pid is None:
            return
        written, self._written_pid = self._written_pid, None
        with contextlib.suppress(FileNotFoundError, PidfileInvalidError):
            if read_pid(self._path) != written:
                logger.debug("Pidfile %s was replaced; leaving it in place", self._path)
                return
            remove(self._path)

    def __enter__(self) -> PidFile:
        self.acquire()
        return self

    def __exit__(self, *args: object) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"PidFile({os.fspath(self._path)!r})"


__all__ = [
    "DEFAULT_LOCK_TIMEOUT_SECONDS",
    "PIDFILE_MODE",
    "PidFile",
    "PidfileState",
    "PidfileStatus",
    "is_running",
    "locked_write_pid",
    "read_pid",
    "remove",
    "status",
    "write_for_self",
    "write_pid",
]
