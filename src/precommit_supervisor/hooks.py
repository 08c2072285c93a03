"""Hook id extraction from .pre-commit-config.yaml.

The result feeds interactive completion, so none of these functions
raise: a malformed document yields an empty list and a warning.
"""

from pathlib import Path

import yaml

from .logging import get_logger

logger = get_logger("hooks")


def parse_hook_ids(text: str) -> list[str]:
    """Extract ``repos[].hooks[].id`` values in document order.

    Duplicates are preserved. Entries of the wrong shape are skipped.

    Args:
        text: Content of a pre-commit config document.

    Returns:
        Ordered list of hook ids (possibly empty).
    """
    try:
        data = yaml.safe_load(text)
    except (yaml.YAMLError, ValueError, RecursionError) as e:
        logger.warning("Could not parse hook config", error=str(e))
        return []

    if not isinstance(data, dict):
        return []
    repos = data.get("repos")
    if not isinstance(repos, list):
        return []

    hook_ids: list[str] = []
    for repo in repos:
        if not isinstance(repo, dict):
            continue
        hooks = repo.get("hooks")
        if not isinstance(hooks, list):
            continue
        for hook in hooks:
            if not isinstance(hook, dict):
                continue
            hook_id = hook.get("id")
            if hook_id is None or isinstance(hook_id, (dict, list)):
                continue
            hook_ids.append(str(hook_id))
    return hook_ids


def read_hook_ids(config_path: Path) -> list[str]:
    """Read the config file fresh and return its hook ids."""
    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read hook config", path=str(config_path), error=str(e))
        return []
    return parse_hook_ids(text)
