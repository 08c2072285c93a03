"""Run state shown by the status view.

A display mirror of the supervisor's lifecycle. Whether a process is
actually running is decided by the supervisor's active-process slot,
never by this record.
"""

from dataclasses import dataclass, field
from enum import Enum


class RunStatus(str, Enum):
    """Outcome of the most recent hook run."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RunState:
    """Status plus the hooks reported as failed."""

    status: RunStatus = RunStatus.IDLE
    failed_hooks: list[str] = field(default_factory=list)

    def mark_running(self) -> None:
        self.status = RunStatus.RUNNING
        self.failed_hooks = []

    def mark_succeeded(self) -> None:
        self.status = RunStatus.SUCCEEDED
        self.failed_hooks = []

    def mark_failed(self, failed_hooks: list[str]) -> None:
        self.status = RunStatus.FAILED
        self.failed_hooks = list(failed_hooks)

    def reset(self) -> None:
        """Back to idle, as after an explicit kill."""
        self.status = RunStatus.IDLE
        self.failed_hooks = []

    def snapshot(self) -> "RunState":
        """Independent copy for readers."""
        return RunState(status=self.status, failed_hooks=list(self.failed_hooks))
