"""Collaborators supplied by the embedding environment.

The supervisor never looks up the project root, prompts the user or
refreshes a status view itself; it calls the functions held in an
Environment. Defaults here suit a plain console session.
"""

import shutil
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from .config import HOOKS_CONFIG_FILENAME
from .logging import get_logger

logger = get_logger("environment")


def find_project_root(start: Path | None = None) -> Path | None:
    """Nearest ancestor of start (default: cwd) that contains .git.

    Walks the filesystem only, so it is cheap enough for every UI refresh.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if (directory / ".git").exists():
            return directory
    return None


def find_config_file(root: Path, filename: str = HOOKS_CONFIG_FILENAME) -> Path | None:
    """Path of the hook config in root, or None if it does not exist."""
    path = root / filename
    return path if path.is_file() else None


def executable_resolvable(name: str) -> bool:
    """PATH-style lookup of an executable."""
    return shutil.which(name) is not None


def _log_notification(message: str, severity: str = "information") -> None:
    if severity == "error":
        logger.error(message)
    elif severity == "warning":
        logger.warning(message)
    else:
        logger.info(message)


def _decline(message: str) -> bool:
    logger.info("No prompt available, declining", question=message)
    return False


def _noop() -> None:
    return None


@dataclass
class Environment:
    """Functions the supervisor calls out to.

    Attributes:
        resolve_project_root: Directory the tool runs in (None = cwd).
        find_config_file: Locates the hook config inside a root.
        executable_resolvable: Whether an executable is on PATH.
        notify_status_observers: Called after every RunState change.
        prompt_yes_no: Asks "kill the active run?"; may return an awaitable.
        notify_user: Surfaces a message with a severity
            ("information", "warning" or "error").
        raise_output: Brings the output display into view.
    """

    resolve_project_root: Callable[[], Path | None] = find_project_root
    find_config_file: Callable[[Path], Path | None] = find_config_file
    executable_resolvable: Callable[[str], bool] = executable_resolvable
    notify_status_observers: Callable[[], None] = _noop
    prompt_yes_no: Callable[[str], bool | Awaitable[bool]] = _decline
    notify_user: Callable[..., None] = _log_notification
    raise_output: Callable[[], None] = _noop

    def project_root(self) -> Path:
        """Resolved project root, falling back to the working directory."""
        return self.resolve_project_root() or Path.cwd()
