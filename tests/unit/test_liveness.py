from __future__ import annotations

import errno
import os

import psutil
import pytest

import pidmark.liveness as liveness
from pidmark.liveness import PsutilProbe, SignalProbe, default_probe, probe_running


def _raising(exc: BaseException):
    def _kill(_pid: int, _sig: int) -> None:
        raise exc

    return _kill


def test_probe_running_non_positive_returns_false() -> None:
    assert probe_running(0) is False
    assert probe_running(-1) is False


def test_probe_running_current_process_is_true() -> None:
    assert probe_running(os.getpid()) is True


def test_probe_running_reaped_child_is_false(dead_pid: int) -> None:
    assert probe_running(dead_pid) is False


def test_default_probe_selects_platform(monkeypatch) -> None:
    with monkeypatch.context() as m:
        m.setattr(liveness.os, "name", "posix", raising=False)
        assert isinstance(default_probe(), SignalProbe)
    with monkeypatch.context() as m:
        m.setattr(liveness.os, "name", "nt", raising=False)
        assert isinstance(default_probe(), PsutilProbe)


@pytest.mark.skipif(os.name != "posix", reason="kill(pid, 0) probe")
class TestSignalProbe:
    def test_current_process_is_running(self) -> None:
        assert SignalProbe()(os.getpid()) is True

    def test_out_of_range_pid_is_not_running(self) -> None:
        assert SignalProbe()(2**80) is False

    def test_null_signal_is_sent(self, monkeypatch) -> None:
        calls: list[tuple[int, int]] = []
        monkeypatch.setattr(liveness.os, "kill", lambda pid, sig: calls.append((pid, sig)))

        assert SignalProbe()(4321) is True
        assert calls == [(4321, 0)]

    @pytest.mark.parametrize(
        "exc",
        [
            ProcessLookupError(errno.ESRCH, "No such process"),
            ChildProcessError(errno.ECHILD, "No child processes"),
            OverflowError("signed integer is greater than maximum"),
        ],
    )
    def test_missing_process_is_not_running(self, monkeypatch, exc: BaseException) -> None:
        monkeypatch.setattr(liveness.os, "kill", _raising(exc))

        assert SignalProbe()(4321) is False

    def test_permission_error_means_not_running(self, monkeypatch) -> None:
        monkeypatch.setattr(
            liveness.os, "kill", _raising(PermissionError(errno.EPERM, "Operation not permitted"))
        )

        assert SignalProbe()(4321) is False

    def test_unexpected_os_error_means_running(self, monkeypatch) -> None:
        monkeypatch.setattr(liveness.os, "kill", _raising(OSError(errno.EIO, "I/O error")))

        assert SignalProbe()(4321) is True


class _FakeProcess:
    def __init__(self, *, running: bool = True, status: str = psutil.STATUS_SLEEPING) -> None:
        self._running = running
        self._status = status

    def is_running(self) -> bool:
        return self._running

    def status(self) -> str:
        return self._status


class TestPsutilProbe:
    def test_current_process_is_running(self) -> None:
        assert PsutilProbe()(os.getpid()) is True

    def test_reaped_child_is_not_running(self, dead_pid: int) -> None:
        assert PsutilProbe()(dead_pid) is False

    def test_non_positive_pid_is_not_running(self) -> None:
        assert PsutilProbe()(0) is False

    @pytest.mark.parametrize(
        ("process", "expected"),
        [
            (_FakeProcess(), True),
            (_FakeProcess(running=False), False),
            (_FakeProcess(status=psutil.STATUS_ZOMBIE), False),
        ],
    )
    def test_process_state(self, monkeypatch, process: _FakeProcess, expected: bool) -> None:
        monkeypatch.setattr(liveness.psutil, "Process", lambda _pid: process)

        assert PsutilProbe()(4321) is expected

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (psutil.NoSuchProcess(4321), False),
            (psutil.ZombieProcess(4321), False),
            (psutil.AccessDenied(4321), False),
            (psutil.Error(), True),
            (OSError(errno.EIO, "I/O error"), True),
        ],
    )
    def test_errors(self, monkeypatch, exc: BaseException, expected: bool) -> None:
        def _raise(_pid: int) -> None:
            raise exc

        monkeypatch.setattr(liveness.psutil, "Process", _raise)

        assert PsutilProbe()(4321) is expected
