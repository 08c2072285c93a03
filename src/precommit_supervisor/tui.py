"""Textual dashboard for precommit-supervisor.

A menu of keybindings drives the supervisor; hook output streams into a
log panel and a status bar mirrors the run state (idle, running, passed,
failed with the failed hooks listed).
"""

from __future__ import annotations

from functools import partial

from rich.markup import escape
from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Label, OptionList, RichLog, Static

from .config import SupervisorConfig
from .environment import Environment, find_config_file
from .errors import NoActiveProcessError, RunAbortedError, SupervisorError
from .logging import get_logger
from .state import RunState, RunStatus
from .supervisor import ProcessSupervisor

logger = get_logger("tui")

STATUS_STYLE: dict[RunStatus, str] = {
    RunStatus.IDLE: "dim",
    RunStatus.RUNNING: "bold yellow",
    RunStatus.SUCCEEDED: "bold green",
    RunStatus.FAILED: "bold red",
}

STATUS_LABEL: dict[RunStatus, str] = {
    RunStatus.IDLE: "idle",
    RunStatus.RUNNING: "running",
    RunStatus.SUCCEEDED: "passed",
    RunStatus.FAILED: "failed",
}

# Actions that start pre-commit; offered only while it is available
START_ACTIONS = {"run", "run_all", "run_hook", "install", "autoupdate"}


# === Widgets ===


class StatusBar(Static):
    """One-line view of the current run state."""

    @staticmethod
    def format_status(state: RunState, available: bool = True) -> str:
        """Format run state as a Rich-markup string.

        Args:
            state: Snapshot of the supervisor's run state.
            available: Whether pre-commit can be run in this project.

        Returns:
            Rich-markup formatted string.
        """
        if not available and state.status is not RunStatus.RUNNING:
            return "[bold]pre-commit:[/] [dim]unavailable (no executable or config)[/]"

        style = STATUS_STYLE[state.status]
        text = f"[bold]pre-commit:[/] [{style}]{STATUS_LABEL[state.status]}[/]"
        if state.status is RunStatus.FAILED and state.failed_hooks:
            noun = "hook" if len(state.failed_hooks) == 1 else "hooks"
            names = ", ".join(escape(h) for h in state.failed_hooks)
            text += f"  [red]{len(state.failed_hooks)} {noun}: {names}[/]"
        return text


class OutputPanel(RichLog):
    """Rendered output of the current run."""


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no question, answered with the buttons or y/n."""

    BINDINGS = [
        Binding("y", "answer(True)", "Yes"),
        Binding("n,escape", "answer(False)", "No"),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label(self.message, id="question")
            with Horizontal(id="buttons"):
                yield Button("Kill and restart", variant="error", id="yes")
                yield Button("Keep running", variant="primary", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_answer(self, answer: bool) -> None:
        self.dismiss(answer)


class HookPickerScreen(ModalScreen["str | None"]):
    """Pick one hook id from the config."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, hook_ids: list[str]) -> None:
        super().__init__()
        self.hook_ids = hook_ids

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label("Run which hook?")
            yield OptionList(*self.hook_ids, id="hook-list")

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(self.hook_ids[event.option_index])

    def action_cancel(self) -> None:
        self.dismiss(None)


# === App ===


class PreCommitApp(App[None]):
    """Textual TUI app driving a single pre-commit process."""

    TITLE = "precommit-supervisor"

    CSS = """
    Screen {
        layout: vertical;
    }

    OutputPanel {
        height: 1fr;
        border: solid $secondary;
    }

    #status-bar {
        dock: bottom;
        height: 1;
        background: $surface;
        padding: 0 2;
    }

    ConfirmScreen, HookPickerScreen {
        align: center middle;
    }

    #dialog {
        width: 60;
        height: auto;
        max-height: 80%;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }

    #buttons {
        height: auto;
        margin-top: 1;
    }

    #buttons Button {
        margin-right: 2;
    }
    """

    BINDINGS = [
        Binding("r", "run", "Run"),
        Binding("a", "run_all", "Run all files"),
        Binding("h", "run_hook", "Run hook"),
        Binding("i", "install", "Install"),
        Binding("u", "autoupdate", "Autoupdate"),
        Binding("k", "kill", "Kill"),
        Binding("o", "toggle_output", "Output"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, config: SupervisorConfig | None = None) -> None:
        super().__init__()
        self._config = config or SupervisorConfig()
        self._ready = False
        environment = Environment(
            find_config_file=partial(find_config_file, filename=self._config.config_filename),
            notify_status_observers=self.refresh_status,
            prompt_yes_no=self.confirm,
            notify_user=self.notify_user,
            raise_output=self.show_output,
        )
        self.supervisor = ProcessSupervisor(self._config, environment)
        self.supervisor.buffer.add_line_listener(self._write_line)
        self.supervisor.buffer.add_clear_listener(self._clear_output)

    def compose(self) -> ComposeResult:
        """Build the widget tree."""
        yield Header()
        yield OutputPanel(id="output", wrap=False, markup=False, highlight=False)
        yield StatusBar(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self._ready = True
        self.sub_title = str(self.supervisor.project_root())
        self.refresh_status()

    # === Collaborators for the supervisor ===

    def refresh_status(self) -> None:
        """Re-render the status bar from the supervisor's state."""
        if not self._ready:
            return
        status_bar = self.query_one("#status-bar", StatusBar)
        status_bar.update(
            StatusBar.format_status(
                self.supervisor.current_state(),
                available=self.supervisor.is_available(),
            )
        )
        self.refresh_bindings()

    async def confirm(self, message: str) -> bool:
        return bool(await self.push_screen_wait(ConfirmScreen(message)))

    def notify_user(self, message: str, severity: str = "information") -> None:
        self.notify(message, severity=severity)

    def show_output(self) -> None:
        panel = self.query_one(OutputPanel)
        panel.display = True
        panel.focus()

    def _write_line(self, line: Text) -> None:
        self.query_one(OutputPanel).write(line)

    def _clear_output(self) -> None:
        if self._ready:
            self.query_one(OutputPanel).clear()

    # === Actions ===

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Hide commands that cannot run right now."""
        if action in START_ACTIONS:
            return self.supervisor.is_available()
        if action == "kill":
            return self.supervisor.is_running
        return True

    async def _guarded(self, operation) -> None:
        try:
            await operation
        except RunAbortedError as e:
            self.notify(str(e), severity="warning")
        except SupervisorError as e:
            logger.warning("Command rejected", error=str(e))
            self.notify(str(e), severity="error")

    @work(group="commands")
    async def action_run(self) -> None:
        await self._guarded(self.supervisor.start())

    @work(group="commands")
    async def action_run_all(self) -> None:
        await self._guarded(self.supervisor.start_all())

    @work(group="commands")
    async def action_run_hook(self) -> None:
        hook_ids = self.supervisor.list_task_identifiers()
        if not hook_ids:
            self.notify("No hooks found in the config", severity="warning")
            return
        hook_id = await self.push_screen_wait(HookPickerScreen(hook_ids))
        if hook_id:
            await self._guarded(self.supervisor.start_single_task(hook_id))

    @work(group="commands")
    async def action_install(self) -> None:
        await self._guarded(self.supervisor.install())

    @work(group="commands")
    async def action_autoupdate(self) -> None:
        await self._guarded(self.supervisor.autoupdate())

    def action_kill(self) -> None:
        try:
            self.supervisor.kill()
        except NoActiveProcessError as e:
            self.notify(str(e), severity="warning")
            return
        self.notify("pre-commit killed", severity="warning")

    def action_toggle_output(self) -> None:
        panel = self.query_one(OutputPanel)
        panel.display = not panel.display

    async def action_quit(self) -> None:
        """Kill any active run, then quit."""
        if self.supervisor.is_running:
            self.supervisor.kill()
        self.exit()
