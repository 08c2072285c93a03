"""Tests for precommit_supervisor.logging module."""

import logging
from pathlib import Path

from precommit_supervisor.logging import (
    DEFAULT_LOG_DIR,
    MAX_VALUE_LENGTH,
    get_logger,
    setup_logging,
    strip_escape_sequences,
    truncate_long_values,
    tui_log_path,
)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_setup_returns_none(self):
        setup_logging()

    def test_setup_with_json_mode(self):
        setup_logging(json_output=True)

    def test_setup_with_log_file(self, tmp_path):
        log_file = tmp_path / "test.log"
        setup_logging(log_file=log_file)

    def test_setup_with_tui_mode(self, tmp_path):
        log_file = tmp_path / "logs" / "tui.log"
        setup_logging(tui_mode=True, log_file=log_file)
        assert log_file.parent.is_dir()

    def test_tui_mode_never_writes_to_terminal(self, tmp_path):
        setup_logging(tui_mode=True, log_file=tmp_path / "tui.log")
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.FileHandler)

    def test_tui_mode_without_file_discards(self):
        setup_logging(tui_mode=True)
        assert all(isinstance(h, logging.NullHandler) for h in logging.getLogger().handlers)

    def test_asyncio_quiet_unless_debugging(self):
        setup_logging(level="info")
        assert logging.getLogger("asyncio").level == logging.WARNING
        setup_logging(level="debug")
        assert logging.getLogger("asyncio").level == logging.DEBUG


class TestGetLogger:
    """Tests for get_logger."""

    def test_returns_bound_logger(self):
        logger = get_logger("test_module")
        assert logger is not None

    def test_logger_has_module_context(self):
        logger = get_logger("my_module")
        assert callable(getattr(logger, "info", None))

    def test_logger_can_bind_pid(self):
        logger = get_logger("supervisor")
        run_logger = logger.bind(pid=4242)
        assert run_logger is not None


class TestTruncateLongValues:
    """Tests for truncate_long_values processor."""

    def test_truncates_long_output(self):
        event_dict = truncate_long_values(None, "info", {"output": "x" * 2000})
        assert len(event_dict["output"]) < 2000
        assert event_dict["output"].startswith("x" * MAX_VALUE_LENGTH)
        assert "1500 chars truncated" in event_dict["output"]

    def test_preserves_short_values(self):
        event_dict = truncate_long_values(None, "info", {"command": "pre-commit run"})
        assert event_dict["command"] == "pre-commit run"

    def test_event_message_untouched(self):
        message = "m" * 1000
        event_dict = truncate_long_values(None, "info", {"event": message})
        assert event_dict["event"] == message

    def test_non_strings_untouched(self):
        event_dict = truncate_long_values(None, "info", {"failed_hooks": ["a"] * 1000})
        assert len(event_dict["failed_hooks"]) == 1000


class TestStripEscapeSequences:
    """Tests for strip_escape_sequences processor."""

    def test_removes_colour_codes(self):
        event_dict = strip_escape_sequences(
            None, "info", {"output": "black....\x1b[41mFailed\x1b[m", "event": "Hooks failed"}
        )
        assert event_dict["output"] == "black....Failed"
        assert event_dict["event"] == "Hooks failed"

    def test_removes_hyperlinks(self):
        link = "\x1b]8;;https://pre-commit.com\x1b\\docs\x1b]8;;\x1b\\"
        assert strip_escape_sequences(None, "info", {"error": link})["error"] == "docs"

    def test_leaves_other_values(self):
        values = {"pid": 4242, "command": "pre-commit run"}
        assert strip_escape_sequences(None, "info", dict(values)) == values


class TestTuiLogPath:
    def test_default_directory(self):
        path = tui_log_path()
        assert path.parent == DEFAULT_LOG_DIR
        assert path.name.startswith("tui-")
        assert path.suffix == ".log"

    def test_custom_directory(self, tmp_path):
        assert tui_log_path(Path(tmp_path)).parent == tmp_path
