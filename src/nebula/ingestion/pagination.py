"""Fixed-budget pagination with a heading-derived table of contents."""

from __future__ import annotations

from dataclasses import dataclass
import math
import re
from typing import Callable

from nebula.ingestion.config import DEFAULT_PAGE_CHAR_BUDGET
from nebula.ingestion.models import Page, Pagination, TocEntry

TITLE_MAX_CHARS = 20
TITLE_ELLIPSIS = "..."
PULL_FORWARD_RATIO = 0.8

_ATX_RE = re.compile(r"^(#{1,6})\s+")
_CJK_CHAPTER_RE = re.compile(r"^第[0-9零一二三四五六七八九十百千]+[章回节卷]")
_EN_CHAPTER_RE = re.compile(r"^Chapter\s+\d+", re.IGNORECASE)
_TITLE_PREFIX_RE = re.compile(r"^[#\s]+")


@dataclass(frozen=True, slots=True)
class HeadingMatch:
    level: int
    title: str


def _display_title(line: str) -> str:
    title = _TITLE_PREFIX_RE.sub("", line).strip()
    if len(title) > TITLE_MAX_CHARS:
        return title[:TITLE_MAX_CHARS] + TITLE_ELLIPSIS
    return title


def _match_atx(line: str) -> HeadingMatch | None:
    match = _ATX_RE.match(line)
    if match is None:
        return None
    return HeadingMatch(level=len(match.group(1)), title=_display_title(line))


def _match_cjk_chapter(line: str) -> HeadingMatch | None:
    if _CJK_CHAPTER_RE.match(line) is None:
        return None
    return HeadingMatch(level=1, title=_display_title(line))


def _match_english_chapter(line: str) -> HeadingMatch | None:
    if _EN_CHAPTER_RE.match(line) is None:
        return None
    return HeadingMatch(level=1, title=_display_title(line))


HEADING_MATCHERS: tuple[Callable[[str], HeadingMatch | None], ...] = (
    _match_atx,
    _match_cjk_chapter,
    _match_english_chapter,
)


def match_heading(line: str) -> HeadingMatch | None:
    """Return the first heading interpretation of a line, if any."""

    candidate = line.strip()
    if not candidate:
        return None
    for matcher in HEADING_MATCHERS:
        heading = matcher(candidate)
        if heading is not None:
            return heading
    return None


def paginate(text: str, page_char_budget: int = DEFAULT_PAGE_CHAR_BUDGET) -> Pagination:
    """Split text into bounded pages and index heading-like lines.

    ``page_char_budget`` counts raw line lengths only; line terminators are
    kept in page content but do not count against the budget. Concatenating
    page contents in order reproduces ``text`` exactly.
    """

    if page_char_budget <= 0:
        raise ValueError("page_char_budget must be positive")

    lines = text.split("\n")
    last_line = len(lines) - 1
    pull_forward_at = page_char_budget * PULL_FORWARD_RATIO

    contents: list[str] = []
    toc: list[TocEntry] = []
    chunk: list[str] = []
    current_length = 0
    page_index = 0

    for line_no, line in enumerate(lines):
        heading = match_heading(line)
        if heading is not None:
            # Decided from the length accumulated so far, not the final page size.
            target = page_index + 1 if current_length > pull_forward_at else page_index
            toc.append(TocEntry(title=heading.title, page_index=target, level=heading.level))

        chunk.append(line if line_no == last_line else line + "\n")
        current_length += len(line)

        if current_length > page_char_budget:
            contents.append("".join(chunk))
            chunk = []
            current_length = 0
            page_index += 1

    remainder = "".join(chunk)
    if remainder.strip():
        contents.append(remainder)
    elif contents:
        contents[-1] += remainder
    else:
        # Blank input still yields one (empty) page to display.
        contents.append(remainder)

    pages = [Page(ordinal=ordinal, content=content) for ordinal, content in enumerate(contents, start=1)]
    last_index = len(pages) - 1
    toc = [
        entry if entry.page_index <= last_index else TocEntry(entry.title, last_index, entry.level)
        for entry in toc
    ]
    return Pagination(pages=pages, toc=toc)


def page_for_progress(progress: float | None, page_count: int) -> int:
    """Map a stored reading percentage to the 1-based page to resume at."""

    if not progress or page_count <= 0:
        return 1
    page = max(1, math.ceil(progress / 100 * page_count))
    return min(page, page_count)


def progress_for_page(page: int, page_count: int) -> float:
    """Percentage of the document read when standing on ``page``."""

    if page_count <= 0:
        return 0.0
    return page / page_count * 100
