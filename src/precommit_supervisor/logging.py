"""Structured logging for precommit-supervisor.

Log events often carry pieces of pre-commit's own output (commands,
error text, excerpts of a failing run). That output is coloured for a
terminal, so values are stripped of escape sequences and shortened
before they reach a renderer. The asyncio machinery behind the
subprocess pump is kept quiet unless debugging.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

import structlog

from .ansi import strip_ansi

# Longest string value kept verbatim in a log event
MAX_VALUE_LENGTH = 500

DEFAULT_LOG_DIR = Path.home() / ".cache" / "precommit-supervisor"

# Libraries that log per subprocess event at debug/info level
NOISY_LOGGERS = ("asyncio", "textual", "markdown_it")


def strip_escape_sequences(
    logger: object, method_name: str, event_dict: dict
) -> dict:
    """Structlog processor that removes terminal escapes from string values."""
    for key, value in event_dict.items():
        if isinstance(value, str) and "\x1b" in value:
            event_dict[key] = strip_ansi(value)
    return event_dict


def truncate_long_values(
    logger: object, method_name: str, event_dict: dict
) -> dict:
    """Structlog processor that shortens oversized string values."""
    for key, value in event_dict.items():
        if key == "event":
            continue
        if isinstance(value, str) and len(value) > MAX_VALUE_LENGTH:
            omitted = len(value) - MAX_VALUE_LENGTH
            event_dict[key] = f"{value[:MAX_VALUE_LENGTH]}... [{omitted} chars truncated]"
    return event_dict


def tui_log_path(log_dir: Path | None = None) -> Path:
    """Timestamped log file for one dashboard session."""
    directory = log_dir or DEFAULT_LOG_DIR
    return directory / f"tui-{datetime.now().strftime('%Y%m%d-%H%M%S')}.log"


def setup_logging(
    level: str = "info",
    json_output: bool = False,
    log_file: Path | None = None,
    tui_mode: bool = False,
) -> None:
    """Configure structlog for the entire application.

    Args:
        level: Log level (debug, info, warning, error).
        json_output: If True, output JSON lines.
        log_file: Also write logs here; the only destination in TUI mode.
        tui_mode: If True, never write to the terminal (the TUI owns it).
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        strip_escape_sequences,
        truncate_long_values,
    ]

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        stream=sys.stderr,
        force=True,
    )
    quiet_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    root = logging.getLogger()
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(log_level)
        if tui_mode:
            root.handlers = [file_handler]
        else:
            root.addHandler(file_handler)
    elif tui_mode:
        root.handlers = [logging.NullHandler()]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        # Colour only when the sole destination is an interactive stderr
        colors = not tui_mode and log_file is None and sys.stderr.isatty()
        renderer = structlog.dev.ConsoleRenderer(colors=colors)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for handler in root.handlers:
        handler.setFormatter(formatter)


def get_logger(module: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to a module name.

    Args:
        module: Module name (e.g., "supervisor", "hooks").

    Returns:
        Bound structlog logger.
    """
    return structlog.get_logger(module=module)
