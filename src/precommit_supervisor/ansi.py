"""Terminal escape handling for streamed tool output.

OSC sequences (hyperlinks, window titles) are meaningless in a static
buffer and are removed as output arrives. SGR colour sequences pass
through to live sinks and are resolved into rich styles for the stored
buffer, whose plain text is later scanned for failed hooks.
"""

import re

from rich.ansi import AnsiDecoder
from rich.text import Text

ESC = "\x1b"

# ESC ] <body> terminated by BEL or ST (ESC \)
_OSC_RE = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")

# Any CSI sequence, OSC sequence or two-character escape
_ANSI_RE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[@-Z\\-_]"
)

# Held-back partial escapes longer than this are released unfiltered
MAX_PENDING_ESCAPE = 4096


def strip_osc(text: str) -> str:
    """Remove all OSC sequences from text.

    Repeats until nothing matches, so a sequence that only forms once an
    inner one is removed is stripped too and the result is stable.
    """
    while True:
        stripped = _OSC_RE.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def strip_ansi(text: str) -> str:
    """Remove every escape sequence, leaving plain characters."""
    while True:
        stripped = _ANSI_RE.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def _partial_escape_start(text: str) -> int | None:
    """Index where an unfinished escape sequence begins, if any."""
    osc_start = text.rfind(ESC + "]")
    if osc_start != -1:
        tail = text[osc_start + 2 :]
        # A final ESC may be the first half of the ST terminator
        if "\x07" not in tail and ESC not in tail[:-1]:
            return osc_start
    if text.endswith(ESC):
        return len(text) - 1
    return None


class OscStripper:
    """Streaming OSC remover that tolerates sequences split across chunks."""

    def __init__(self) -> None:
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: str) -> str:
        """Filter one chunk, holding back a trailing partial sequence."""
        text = strip_osc(self._pending + chunk)
        self._pending = ""

        start = _partial_escape_start(text)
        if start is not None and len(text) - start <= MAX_PENDING_ESCAPE:
            self._pending = text[start:]
            text = text[:start]
        return text

    def flush(self) -> str:
        """Release held data at end of stream.

        A lone ESC is passed on; an OSC sequence that never terminated is
        dropped.
        """
        pending, self._pending = self._pending, ""
        if pending.startswith(ESC + "]"):
            return ""
        return pending

    def reset(self) -> None:
        self._pending = ""


class AnsiRenderer:
    """Resolve SGR sequences into styled rich Text, one line at a time.

    Style state carries over from one line to the next, as on a terminal.
    """

    def __init__(self) -> None:
        self._decoder = AnsiDecoder()

    def render_line(self, line: str) -> Text:
        return self._decoder.decode_line(line.rstrip("\r"))

    def reset(self) -> None:
        self._decoder = AnsiDecoder()
