"""Output buffer for one supervised run.

Raw bytes from the subprocess are decoded incrementally, stripped of
OSC sequences, and kept two ways: rendered lines (rich Text with SGR
colours resolved into styles) for display, and plain text for failure
classification. Listeners see the stream live.
"""

import codecs
from collections.abc import Callable

from rich.text import Text

from .ansi import AnsiRenderer, OscStripper
from .logging import get_logger

logger = get_logger("output")

ChunkListener = Callable[[str], None]
LineListener = Callable[[Text], None]
ClearListener = Callable[[], None]


class OutputBuffer:
    """Append-only buffer, cleared only between runs."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._stripper = OscStripper()
        self._renderer = AnsiRenderer()
        self._lines: list[Text] = []
        self._partial = ""
        self._closed = False
        self._chunk_listeners: list[ChunkListener] = []
        self._line_listeners: list[LineListener] = []
        self._clear_listeners: list[ClearListener] = []

    # === Listeners ===

    def add_chunk_listener(self, listener: ChunkListener) -> None:
        """Receive each filtered chunk with colour escapes intact."""
        self._chunk_listeners.append(listener)

    def add_line_listener(self, listener: LineListener) -> None:
        """Receive each completed line, rendered into styled Text."""
        self._line_listeners.append(listener)

    def add_clear_listener(self, listener: ClearListener) -> None:
        self._clear_listeners.append(listener)

    # === Writing ===

    def clear(self) -> None:
        """Reset to empty for a new run."""
        self._decoder.reset()
        self._stripper.reset()
        self._renderer.reset()
        self._lines = []
        self._partial = ""
        self._closed = False
        self._notify(self._clear_listeners)

    def append(self, data: bytes) -> str:
        """Add raw subprocess output.

        Returns:
            The decoded, OSC-stripped text that was appended.
        """
        return self._append_text(self._stripper.feed(self._decoder.decode(data)))

    def close(self) -> None:
        """Flush held-back data once the process has exited."""
        if self._closed:
            return
        tail = self._decoder.decode(b"", final=True)
        text = self._stripper.feed(tail) + self._stripper.flush()
        self._append_text(text)
        if self._partial:
            self._emit_line(self._partial)
            self._partial = ""
        self._closed = True

    def _append_text(self, text: str) -> str:
        if not text:
            return text
        self._notify(self._chunk_listeners, text)

        *complete, self._partial = (self._partial + text).split("\n")
        for line in complete:
            self._emit_line(line)
        return text

    def _emit_line(self, line: str) -> None:
        rendered = self._renderer.render_line(line)
        self._lines.append(rendered)
        self._notify(self._line_listeners, rendered)

    def _notify(self, listeners: list, *args) -> None:
        # A failing listener does not stop the others or the buffer
        for listener in listeners:
            try:
                listener(*args)
            except Exception as e:
                logger.warning(
                    "Output listener failed",
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(e),
                )

    # === Reading ===

    @property
    def lines(self) -> list[Text]:
        """Completed rendered lines."""
        return list(self._lines)

    @property
    def plain_text(self) -> str:
        """Buffer content with every escape resolved away."""
        plain = [line.plain for line in self._lines]
        if self._partial:
            plain.append(AnsiRenderer().render_line(self._partial).plain)
        return "\n".join(plain)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._lines) + (1 if self._partial else 0)
