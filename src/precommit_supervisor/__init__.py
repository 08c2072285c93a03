"""
precommit-supervisor: run pre-commit with live output and failure tracking.

Usage as library:
    from precommit_supervisor import ProcessSupervisor, SupervisorConfig

    supervisor = ProcessSupervisor(SupervisorConfig())
    await supervisor.start_all()
    await supervisor.wait()
    supervisor.current_state()    # RunState(status=..., failed_hooks=[...])

Usage as CLI:
    precommit-supervisor run              # Run hooks on staged files
    precommit-supervisor run --all-files  # Run hooks on every file
    precommit-supervisor hooks            # List hook ids
    precommit-supervisor tui              # Interactive dashboard
"""

from importlib.metadata import PackageNotFoundError, version

from .ansi import AnsiRenderer, OscStripper, strip_ansi, strip_osc
from .classifier import FailureClassifier, PatternFailureClassifier, classify_failures
from .config import SupervisorConfig, build_config, load_config_from_yaml
from .environment import (
    Environment,
    executable_resolvable,
    find_config_file,
    find_project_root,
)
from .errors import (
    NoActiveProcessError,
    ProcessSpawnError,
    RunAbortedError,
    SupervisorError,
    ToolUnavailableError,
)
from .hooks import parse_hook_ids, read_hook_ids
from .logging import get_logger, setup_logging
from .output import OutputBuffer
from .state import RunState, RunStatus
from .supervisor import ActiveProcess, ProcessSupervisor, RunKind

try:
    __version__ = version("precommit-supervisor")
except PackageNotFoundError:
    __version__ = "0.0.0.dev"  # Fallback for development without install
__all__ = [
    # Supervisor
    "ActiveProcess",
    "ProcessSupervisor",
    "RunKind",
    "RunState",
    "RunStatus",
    "OutputBuffer",
    # Config
    "SupervisorConfig",
    "build_config",
    "load_config_from_yaml",
    "Environment",
    "executable_resolvable",
    "find_config_file",
    "find_project_root",
    # Hooks and classification
    "parse_hook_ids",
    "read_hook_ids",
    "FailureClassifier",
    "PatternFailureClassifier",
    "classify_failures",
    # Escape handling
    "AnsiRenderer",
    "OscStripper",
    "strip_ansi",
    "strip_osc",
    # Errors
    "SupervisorError",
    "ToolUnavailableError",
    "RunAbortedError",
    "ProcessSpawnError",
    "NoActiveProcessError",
    # Logging
    "get_logger",
    "setup_logging",
]
