"""Exceptions raised by the process supervisor.

Parse failures never surface here; they degrade to empty results.
Lifecycle failures are reported through these distinct types so that
callers can tell them apart.
"""


class SupervisorError(Exception):
    """Base class for supervisor lifecycle errors."""


class ToolUnavailableError(SupervisorError):
    """The executable or its hook config could not be found."""

    def __init__(self, executable: str, reason: str):
        self.executable = executable
        self.reason = reason
        super().__init__(f"{executable} is unavailable: {reason}")


class RunAbortedError(SupervisorError):
    """A run was already active and the caller chose not to replace it."""


class ProcessSpawnError(SupervisorError):
    """The subprocess could not be started."""

    def __init__(self, command: list[str], cause: OSError):
        self.command = command
        self.cause = cause
        super().__init__(f"Failed to start {command[0]}: {cause}")


class NoActiveProcessError(SupervisorError):
    """kill() was requested while nothing was running."""

    def __init__(self):
        super().__init__("Nothing to kill: no pre-commit process is running")
