"""CLI commands and argument parsing for precommit-supervisor."""

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable
from functools import partial
from pathlib import Path
from uuid import uuid4

from .config import (
    CONFIG_FILE,
    SupervisorConfig,
    build_config,
    load_config_from_yaml,
)
from .environment import Environment, find_config_file, find_project_root
from .errors import ProcessSpawnError, SupervisorError, ToolUnavailableError
from .logging import get_logger
from .state import RunStatus
from .supervisor import ProcessSupervisor

logger = get_logger("cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNAVAILABLE = 2
EXIT_INTERRUPTED = 130

SEVERITY_ICON = {
    "information": "✅",
    "warning": "⚠️ ",
    "error": "❌",
}


# === Console embedding ===


def console_notify(message: str, severity: str = "information") -> None:
    """Print a notification for the console user."""
    icon = SEVERITY_ICON.get(severity, "")
    print(f"{icon} {message}".strip())


def console_prompt(message: str) -> bool:
    """Ask a yes/no question on the terminal (default: no)."""
    try:
        answer = input(f"{message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def write_chunk(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def console_supervisor(config: SupervisorConfig) -> ProcessSupervisor:
    """Supervisor wired to stdout, printing notifications as it goes."""
    environment = Environment(
        find_config_file=partial(find_config_file, filename=config.config_filename),
        prompt_yes_no=console_prompt,
        notify_user=console_notify,
    )
    supervisor = ProcessSupervisor(config, environment)
    supervisor.buffer.add_chunk_listener(write_chunk)
    return supervisor


async def _run_to_completion(
    supervisor: ProcessSupervisor, start: Callable[[], Awaitable[None]]
) -> None:
    await start()
    try:
        await supervisor.wait()
    except asyncio.CancelledError:
        if supervisor.is_running:
            supervisor.kill()
        raise


def _execute(supervisor: ProcessSupervisor, start: Callable[[], Awaitable[None]]) -> int:
    """Run one supervised invocation in the foreground; return an exit code."""
    try:
        asyncio.run(_run_to_completion(supervisor, start))
    except (ToolUnavailableError, ProcessSpawnError) as e:
        console_notify(str(e), "error")
        return EXIT_UNAVAILABLE
    except SupervisorError as e:
        console_notify(str(e), "error")
        return EXIT_FAILED
    except KeyboardInterrupt:
        console_notify("Interrupted, pre-commit killed", "warning")
        return EXIT_INTERRUPTED

    if supervisor.last_exit_code not in (None, 0):
        return EXIT_FAILED
    return EXIT_OK


# === CLI Commands ===


def cmd_run(args: argparse.Namespace, config: SupervisorConfig) -> int:
    """Run hooks once, streaming coloured output to the terminal."""
    supervisor = console_supervisor(config)
    extra_args = list(args.extra or [])
    if args.all_files:
        extra_args.insert(0, "--all-files")

    code = _execute(supervisor, lambda: supervisor.start(extra_args, hook_id=args.hook))

    state = supervisor.current_state()
    if state.status is RunStatus.FAILED and state.failed_hooks:
        print("\nFailed hooks:")
        for hook_id in state.failed_hooks:
            print(f"  - {hook_id}")
    return code


def cmd_install(args: argparse.Namespace, config: SupervisorConfig) -> int:
    """Install pre-commit's git hook scripts."""
    supervisor = console_supervisor(config)
    return _execute(supervisor, supervisor.install)


def cmd_autoupdate(args: argparse.Namespace, config: SupervisorConfig) -> int:
    """Update hook repositories to their latest revisions."""
    supervisor = console_supervisor(config)
    return _execute(supervisor, supervisor.autoupdate)


def cmd_hooks(args: argparse.Namespace, config: SupervisorConfig) -> int:
    """Print hook ids from the config, one per line."""
    supervisor = console_supervisor(config)
    for hook_id in supervisor.list_task_identifiers():
        print(hook_id)
    return EXIT_OK


def cmd_check(args: argparse.Namespace, config: SupervisorConfig) -> int:
    """Report whether pre-commit can be run here."""
    supervisor = console_supervisor(config)
    root = supervisor.project_root()
    if supervisor.is_available():
        print(f"✅ {config.executable} available in {root}")
        return EXIT_OK

    if not supervisor.environment.executable_resolvable(config.executable):
        print(f"❌ {config.executable} not found on PATH")
    else:
        print(f"❌ No {config.config_filename} in {root}")
    return EXIT_FAILED


def cmd_tui(args: argparse.Namespace, config: SupervisorConfig) -> int:
    """Launch the interactive dashboard."""
    from .logging import setup_logging, tui_log_path
    from .tui import PreCommitApp

    # TUI mode: log to file, TUI owns screen
    log_file = tui_log_path(Path(args.log_dir) if args.log_dir else None)
    setup_logging(level=config.log_level, tui_mode=True, log_file=log_file)

    app = PreCommitApp(config=config)
    app.run()
    return EXIT_OK


# === Main ===


def common_options(suppress_defaults: bool = False) -> argparse.ArgumentParser:
    """Options accepted before or after the subcommand name.

    Subcommands get suppress_defaults=True so that an option given only
    before the subcommand is not overwritten by the subcommand's default.
    """

    def default(value):
        return argparse.SUPPRESS if suppress_defaults else value

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--project-root",
        type=str,
        default=default(""),
        help="Project root directory (default: nearest directory containing .git)",
    )
    common.add_argument(
        "--executable",
        type=str,
        default=default(""),
        help="pre-commit executable (default: pre-commit)",
    )
    common.add_argument(
        "--no-popup",
        action="store_true",
        default=default(False),
        help="Do not raise the output view when hooks fail",
    )
    common.add_argument(
        "--log-level",
        type=str,
        default=default(None),
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: info)",
    )
    common.add_argument(
        "--log-json",
        action="store_true",
        default=default(False),
        help="Output logs as JSON lines",
    )
    return common


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="precommit-supervisor",
        description="precommit-supervisor: run pre-commit with live output and failure tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[common_options()],
    )
    common = common_options(suppress_defaults=True)

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # run
    run_parser = subparsers.add_parser("run", parents=[common], help="Run hooks once")
    run_parser.add_argument("--all-files", "-a", action="store_true", help="Run on all files")
    run_parser.add_argument("--hook", help="Run a single hook by id")
    run_parser.add_argument(
        "extra",
        nargs="*",
        help="Extra arguments passed to pre-commit (after --)",
    )

    # hooks
    subparsers.add_parser("hooks", parents=[common], help="List hook ids from the config")

    # install / autoupdate
    subparsers.add_parser("install", parents=[common], help="Install the git hook scripts")
    subparsers.add_parser("autoupdate", parents=[common], help="Update hook repositories")

    # check
    subparsers.add_parser("check", parents=[common], help="Check that pre-commit can run here")

    # tui
    tui_parser = subparsers.add_parser("tui", parents=[common], help="Launch the dashboard")
    tui_parser.add_argument("--log-dir", default="", help="Directory for the TUI log file")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    # Load config from the project root, then override with CLI args
    root = Path(args.project_root) if args.project_root else find_project_root() or Path.cwd()
    yaml_config = load_config_from_yaml(root / CONFIG_FILE)
    config = build_config(yaml_config, args)

    if args.command != "tui":
        from .logging import setup_logging

        setup_logging(level=config.log_level, json_output=args.log_json)

    import structlog

    structlog.contextvars.bind_contextvars(session_id=uuid4().hex[:8])

    commands = {
        "run": cmd_run,
        "hooks": cmd_hooks,
        "install": cmd_install,
        "autoupdate": cmd_autoupdate,
        "check": cmd_check,
        "tui": cmd_tui,
    }
    return commands[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
