"""pidmark: pidfiles that record which process instance is alive."""

from pidmark.errors import (
    PidfileError,
    PidfileInvalidError,
    PidfileStaleError,
    ProcessRunningError,
)
from pidmark.liveness import (
    LivenessProbe,
    PsutilProbe,
    SignalProbe,
    default_probe,
    probe_running,
)
from pidmark.pidfile import (
    PidFile,
    PidfileState,
    PidfileStatus,
    is_running,
    locked_write_pid,
    read_pid,
    remove,
    status,
    write_for_self,
    write_pid,
)

__all__ = [
    "LivenessProbe",
    "PidFile",
    "PidfileError",
    "PidfileInvalidError",
    "PidfileStaleError",
    "PidfileState",
    "PidfileStatus",
    "ProcessRunningError",
    "PsutilProbe",
    "SignalProbe",
    "default_probe",
    "is_running",
    "locked_write_pid",
    "probe_running",
    "read_pid",
    "remove",
    "status",
    "write_for_self",
    "write_pid",
]
