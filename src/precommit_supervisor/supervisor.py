"""Process supervisor for pre-commit runs.

Owns at most one pre-commit subprocess at a time. Output is read by a
reader task into a bounded queue and drained, in order, by a single
consumer task that feeds the OutputBuffer; the exit event is queued
after the last chunk, so termination is always handled after all
output has been seen.

All methods run on one asyncio event loop. Launching awaits (the
conflict prompt, the spawn), so launches are serialized by a lock: a
second start waits for the first to own the slot, then meets the
conflict prompt like any other. Output and exit events from any
process other than the current one are dropped.
"""

import asyncio
import contextlib
import inspect
import os
import signal
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path

from .classifier import FailureClassifier, classify_failures
from .config import ALL_FILES_ARGS, SupervisorConfig
from .environment import Environment, find_config_file
from .errors import (
    NoActiveProcessError,
    ProcessSpawnError,
    RunAbortedError,
    ToolUnavailableError,
)
from .hooks import read_hook_ids
from .logging import get_logger
from .output import OutputBuffer
from .state import RunState

logger = get_logger("supervisor")

IS_UNIX = sys.platform != "win32"

# Bytes requested per read from the subprocess pipe
CHUNK_SIZE = 4096
# Chunks buffered between the reader and the consumer
OUTPUT_QUEUE_SIZE = 64


class RunKind(str, Enum):
    """What the active process is doing."""

    HOOKS = "hooks"
    INSTALL = "install"
    AUTOUPDATE = "autoupdate"


@dataclass
class ProcessExited:
    """Queue item marking the end of a process's output."""

    returncode: int


@dataclass
class ActiveProcess:
    """The one live subprocess and what it was launched with."""

    process: asyncio.subprocess.Process
    command: list[str]
    kind: RunKind
    done: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def pid(self) -> int:
        return self.process.pid


def kill_process_group(process: asyncio.subprocess.Process) -> None:
    """Forcibly terminate a process and its children."""
    if IS_UNIX:
        # Spawned with start_new_session, so the group id equals the pid
        with contextlib.suppress(ProcessLookupError, PermissionError):
            os.killpg(process.pid, signal.SIGKILL)
            return
    with contextlib.suppress(ProcessLookupError):
        process.kill()


class ProcessSupervisor:
    """Runs pre-commit exclusively and tracks the outcome.

    Args:
        config: Supervisor configuration.
        environment: Collaborators from the embedding (defaults suit a console).
        classifier: Failed-hook matcher (default: pattern on status lines).
        buffer: Output buffer to write into (default: a new one).
    """

    def __init__(
        self,
        config: SupervisorConfig | None = None,
        environment: Environment | None = None,
        classifier: FailureClassifier | None = None,
        buffer: OutputBuffer | None = None,
    ):
        self.config = config or SupervisorConfig()
        self.environment = environment or Environment(
            find_config_file=partial(find_config_file, filename=self.config.config_filename)
        )
        self.classifier = classifier
        self.buffer = buffer or OutputBuffer()
        self.state = RunState()
        self.last_exit_code: int | None = None
        self._active: ActiveProcess | None = None
        self._launch_lock = asyncio.Lock()
        self._background: set[asyncio.Task] = set()

    # === Queries ===

    @property
    def is_running(self) -> bool:
        return self._active is not None

    @property
    def active(self) -> ActiveProcess | None:
        return self._active

    def project_root(self) -> Path:
        if self.config.project_root is not None:
            return self.config.project_root
        return self.environment.project_root()

    def config_file(self) -> Path | None:
        return self.environment.find_config_file(self.project_root())

    def is_available(self) -> bool:
        """Whether pre-commit is on PATH and a hook config exists."""
        return (
            self.environment.executable_resolvable(self.config.executable)
            and self.config_file() is not None
        )

    def current_state(self) -> RunState:
        return self.state.snapshot()

    def list_task_identifiers(self) -> list[str]:
        """Hook ids from the config file, read fresh on every call."""
        config_file = self.config_file()
        if config_file is None:
            logger.warning("No hook config found", root=str(self.project_root()))
            return []
        return read_hook_ids(config_file)

    def build_command(
        self,
        args: Sequence[str] = (),
        hook_id: str | None = None,
        subcommand: str | None = None,
    ) -> list[str]:
        """Full argv for one invocation; empty parts are skipped."""
        parts = [
            self.config.executable,
            subcommand or self.config.subcommand,
            self.config.color_flag,
            hook_id or "",
        ]
        command = [p for p in parts if p]
        if subcommand is None:
            command.extend(self.config.extra_args)
        command.extend(args)
        return command

    # === Operations ===

    async def start(self, args: Sequence[str] = (), hook_id: str | None = None) -> None:
        """Start a hook run, optionally limited to one hook.

        Raises:
            ToolUnavailableError: pre-commit or its config is missing.
            RunAbortedError: A run is active and the user chose to keep it.
            ProcessSpawnError: The subprocess could not be started.
        """
        command = self.build_command(args, hook_id)
        await self._launch(command, RunKind.HOOKS)

    async def start_all(self) -> None:
        await self.start(ALL_FILES_ARGS)

    async def start_single_task(self, hook_id: str) -> None:
        await self.start(ALL_FILES_ARGS, hook_id=hook_id)

    async def install(self) -> None:
        """Install pre-commit's git hook scripts."""
        await self._launch(self.build_command(subcommand="install"), RunKind.INSTALL)

    async def autoupdate(self) -> None:
        """Update hook repositories to their latest revisions."""
        await self._launch(self.build_command(subcommand="autoupdate"), RunKind.AUTOUPDATE)

    def kill(self) -> None:
        """Forcibly stop the active run and reset state to idle.

        Raises:
            NoActiveProcessError: Nothing is running.
        """
        active = self._active
        if active is None:
            raise NoActiveProcessError()

        logger.info("Killing pre-commit", pid=active.pid, command=" ".join(active.command))
        kill_process_group(active.process)
        self._active = None
        self.buffer.close()
        self.state.reset()
        active.done.set()
        self.environment.notify_status_observers()

    async def wait(self) -> None:
        """Return once the active run (if any) has terminated or been killed."""
        active = self._active
        if active is not None:
            await active.done.wait()

    # === Lifecycle ===

    async def _launch(self, command: list[str], kind: RunKind) -> None:
        async with self._launch_lock:
            self._ensure_available()
            if self._active is not None:
                await self._replace_active()

            cwd = self.project_root()
            try:
                process = await asyncio.create_subprocess_exec(
                    *command,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.STDOUT,
                    stdin=asyncio.subprocess.DEVNULL,
                    cwd=str(cwd),
                    start_new_session=IS_UNIX,
                )
            except OSError as e:
                logger.error("Failed to start pre-commit", command=" ".join(command), error=str(e))
                raise ProcessSpawnError(command, e) from e

            # No await from here on: the new run takes the slot atomically
            active = ActiveProcess(process=process, command=command, kind=kind)
            self.buffer.clear()
            self._active = active
            if kind is RunKind.HOOKS:
                self.state.mark_running()
            logger.info(
                "Started pre-commit", pid=process.pid, cwd=str(cwd), command=" ".join(command)
            )

            self._spawn_pump(active)
            self.environment.notify_status_observers()

    def _ensure_available(self) -> None:
        if not self.environment.executable_resolvable(self.config.executable):
            raise ToolUnavailableError(self.config.executable, "executable not found on PATH")
        if self.config_file() is None:
            raise ToolUnavailableError(
                self.config.executable,
                f"no {self.config.config_filename} in {self.project_root()}",
            )

    async def _replace_active(self) -> None:
        """Ask whether to kill the active run; abort the new one if not."""
        assert self._active is not None
        answer = self.environment.prompt_yes_no(
            f"{self.config.executable} is already running. Kill it and start a new run?"
        )
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            raise RunAbortedError(f"{self.config.executable} is already running")
        # The run may have finished while the question was open
        if self._active is not None:
            self.kill()

    def _spawn_pump(self, active: ActiveProcess) -> None:
        queue: asyncio.Queue[bytes | ProcessExited] = asyncio.Queue(maxsize=OUTPUT_QUEUE_SIZE)
        for coro in (self._read_output(active, queue), self._consume_output(active, queue)):
            task = asyncio.create_task(coro)
            self._background.add(task)
            task.add_done_callback(self._pump_done)

    def _pump_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Output pump failed", task=task.get_name(), error=repr(error))

    async def _read_output(
        self, active: ActiveProcess, queue: "asyncio.Queue[bytes | ProcessExited]"
    ) -> None:
        stdout = active.process.stdout
        assert stdout is not None
        while chunk := await stdout.read(CHUNK_SIZE):
            await queue.put(chunk)
        returncode = await active.process.wait()
        await queue.put(ProcessExited(returncode))

    async def _consume_output(
        self, active: ActiveProcess, queue: "asyncio.Queue[bytes | ProcessExited]"
    ) -> None:
        while True:
            item = await queue.get()
            if isinstance(item, ProcessExited):
                self.on_termination(active, item.returncode)
                return
            # A failing chunk must not stop the drain
            try:
                self.on_output_arrival(active, item)
            except Exception as e:
                logger.warning("Failed to handle output chunk", pid=active.pid, error=str(e))

    def on_output_arrival(self, active: ActiveProcess, chunk: bytes) -> None:
        """Append one chunk of output from active."""
        if active is not self._active:
            logger.debug("Dropping output from superseded process", pid=active.pid)
            return
        self.buffer.append(chunk)

    def on_termination(self, active: ActiveProcess, exit_code: int) -> None:
        """Classify the finished run and publish the outcome."""
        if active is not self._active:
            logger.debug("Ignoring exit of superseded process", pid=active.pid, exit_code=exit_code)
            return

        self.buffer.close()
        self._active = None
        self.last_exit_code = exit_code
        logger.info(
            "pre-commit exited", pid=active.pid, exit_code=exit_code, kind=active.kind.value
        )

        if active.kind is RunKind.HOOKS:
            self._record_hook_outcome(exit_code)
        elif exit_code == 0:
            self.environment.notify_user(f"pre-commit {active.kind.value} succeeded")
        else:
            self.environment.notify_user(
                f"pre-commit {active.kind.value} failed (exit code {exit_code})", "error"
            )

        active.done.set()
        self.environment.notify_status_observers()

    def _record_hook_outcome(self, exit_code: int) -> None:
        if exit_code == 0:
            self.state.mark_succeeded()
            self.environment.notify_user("pre-commit passed")
            return

        failed = classify_failures(self.buffer.plain_text, self.classifier)
        self.state.mark_failed(failed)
        logger.info("Hooks failed", failed_hooks=failed)
        noun = "hook" if len(failed) == 1 else "hooks"
        self.environment.notify_user(f"pre-commit failed: {len(failed)} {noun} failed", "error")
        if self.config.show_output_on_failure:
            self.environment.raise_output()
