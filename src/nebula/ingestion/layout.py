"""Reading-order text reconstruction from positioned PDF text runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from nebula.ingestion.normalization import is_cjk

PARAGRAPH_GAP = 24.0
LINE_GAP = 8.0


@dataclass(frozen=True, slots=True)
class TextRun:
    """A literal string drawn at a baseline; y grows upwards from the page bottom."""

    text: str
    y: float


def page_marker(page_number: int) -> str:
    return f"\n\n--- Page {page_number} ---\n\n"


def _separator(previous: str, run_text: str, y_diff: float) -> str:
    if y_diff > PARAGRAPH_GAP:
        return "\n\n"
    if y_diff > LINE_GAP:
        return "\n"
    if y_diff < -LINE_GAP:
        # Upward jumps are superscripts or column breaks, never a line break.
        return " "

    last_char = previous[-1]
    if last_char in (" ", "\n") or is_cjk(last_char) or is_cjk(run_text[0]):
        return ""
    return " "


class PageLayout:
    """Accumulates the runs of a single page; one instance per page."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._last_y: float | None = None

    def add(self, run: TextRun) -> None:
        if not run.text or not run.text.strip():
            return

        if self._last_y is not None:
            previous = self._parts[-1]
            self._parts.append(_separator(previous, run.text, self._last_y - run.y))
        self._parts.append(run.text)
        self._last_y = run.y

    def text(self) -> str:
        return "".join(self._parts)


def reconstruct_page_text(runs: Iterable[TextRun]) -> str:
    """Join one page's runs into text with paragraph and line breaks."""

    layout = PageLayout()
    for run in runs:
        layout.add(run)
    return layout.text()
