"""Failed-hook detection from pre-commit's report.

pre-commit prints one line per hook, e.g.::

    check-yaml...............................................Failed

Matching that line is a heuristic tied to pre-commit's human-readable
format. If the format changes, fewer (or no) hooks are reported.
"""

import re
from typing import Protocol

from .logging import get_logger

logger = get_logger("classifier")

FAILED_LINE_RE = re.compile(r"^([A-Za-z0-9_-]+)\.+Failed[ \t\r]*$", re.MULTILINE)


class FailureClassifier(Protocol):
    """Anything that can list failed hooks from finished output."""

    def classify(self, text: str) -> list[str]: ...


class PatternFailureClassifier:
    """Report hooks whose status line ends in ``Failed``."""

    def __init__(self, pattern: re.Pattern[str] = FAILED_LINE_RE):
        self.pattern = pattern

    def classify(self, text: str) -> list[str]:
        return [m.group(1) for m in self.pattern.finditer(text)]


def classify_failures(text: str, classifier: FailureClassifier | None = None) -> list[str]:
    """Run a classifier over plain output. Never raises.

    Args:
        text: Plain text of the finished run.
        classifier: Classifier to use (default: PatternFailureClassifier).

    Returns:
        Ordered failed hook ids, duplicates preserved; [] on error.
    """
    classifier = classifier or PatternFailureClassifier()
    try:
        return list(classifier.classify(text))
    except Exception as e:
        logger.warning("Failure classification failed", error=str(e))
        return []
