"""Configuration module for precommit-supervisor.

Contains the SupervisorConfig dataclass, config loading from YAML,
and config building from CLI arguments.
"""

import argparse
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .logging import get_logger

logger = get_logger("config")

# === Constants ===

# Supervisor settings file, looked up in the project root
CONFIG_FILE = Path(".pre-commit-supervisor.yaml")

# pre-commit's own hook configuration
HOOKS_CONFIG_FILENAME = ".pre-commit-config.yaml"

# Extra arguments used by the "run all" command
ALL_FILES_ARGS = ("--all-files",)


# === SupervisorConfig ===


@dataclass
class SupervisorConfig:
    """Supervisor configuration"""

    # pre-commit CLI
    executable: str = "pre-commit"  # Executable looked up on PATH
    subcommand: str = "run"  # Subcommand used for hook runs
    color_flag: str = "--color=always"  # Forces colour even though stdout is a pipe
    extra_args: list[str] = field(default_factory=list)  # Appended to every hook run

    # Paths
    config_filename: str = HOOKS_CONFIG_FILENAME
    project_root: Path | None = None  # None = discover from the working directory

    # Display
    show_output_on_failure: bool = True  # Raise the output panel when hooks fail

    # Logging
    log_level: str = "info"

    def __post_init__(self):
        """Resolve an explicit project_root to an absolute path."""
        if self.project_root is not None:
            self.project_root = Path(self.project_root).resolve()


# === Config Loading ===


def load_config_from_yaml(config_path: Path = CONFIG_FILE) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Dictionary with configuration values (None for unset keys).
    """
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        supervisor = data.get("supervisor", {}) or {}
        display = supervisor.get("display", {}) or {}
        paths = supervisor.get("paths", {}) or {}
        extra_args = supervisor.get("extra_args")

        return {
            "executable": supervisor.get("executable"),
            "subcommand": supervisor.get("subcommand"),
            "color_flag": supervisor.get("color_flag"),
            "extra_args": [str(a) for a in extra_args] if extra_args else None,
            "config_filename": paths.get("hooks_config"),
            "project_root": Path(paths["root"]) if paths.get("root") else None,
            "show_output_on_failure": display.get("show_output_on_failure"),
            "log_level": supervisor.get("log_level"),
        }
    except (OSError, yaml.YAMLError, ValueError, RecursionError, AttributeError, TypeError) as e:
        logger.warning("Failed to load config", path=str(config_path), error=str(e))
        return {}


def build_config(yaml_config: dict, args: argparse.Namespace) -> SupervisorConfig:
    """Build SupervisorConfig from YAML and CLI arguments.

    CLI arguments override YAML config.

    Args:
        yaml_config: Configuration loaded from YAML file.
        args: Parsed CLI arguments.

    Returns:
        SupervisorConfig instance.
    """
    config_kwargs = {}

    for key, value in yaml_config.items():
        if value is not None:
            config_kwargs[key] = value

    if getattr(args, "executable", None):
        config_kwargs["executable"] = args.executable
    if getattr(args, "project_root", None):
        config_kwargs["project_root"] = Path(args.project_root)
    if getattr(args, "no_popup", False):
        config_kwargs["show_output_on_failure"] = False
    if getattr(args, "log_level", None):
        config_kwargs["log_level"] = args.log_level

    return SupervisorConfig(**config_kwargs)
