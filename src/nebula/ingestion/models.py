"""Canonical data structures shared by the dispatcher, adapters and paginator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath

METADATA_SNIPPET_CHARS = 3000


class DocumentFormat(Enum):
    TXT = "txt"
    MD = "md"
    PDF = "pdf"
    EPUB = "epub"
    MOBI = "mobi"


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """Raw upload handed to the dispatcher for a single ingestion call."""

    data: bytes
    name: str
    mime: str | None = None

    @property
    def suffix(self) -> str:
        # Uploads may carry Windows separators in the declared name.
        return PurePosixPath(self.name.replace("\\", "/")).suffix.lower()

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(slots=True)
class ExtractedText:
    """Flattened extraction output consumed by pagination and storage."""

    text: str
    format: DocumentFormat
    warnings: list[str] = field(default_factory=list)

    def snippet(self, limit: int = METADATA_SNIPPET_CHARS) -> str:
        """Leading slice of the text used for downstream metadata generation."""

        return self.text[:limit]


@dataclass(frozen=True, slots=True)
class Page:
    ordinal: int
    content: str


@dataclass(frozen=True, slots=True)
class TocEntry:
    title: str
    page_index: int
    level: int = 1


@dataclass(slots=True)
class Pagination:
    """Pages and table of contents derived from one extracted text."""

    pages: list[Page]
    toc: list[TocEntry] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def page(self, ordinal: int) -> Page | None:
        """Return the page with a 1-based ordinal, or None when out of range."""

        if 1 <= ordinal <= len(self.pages):
            return self.pages[ordinal - 1]
        return None

    def active_entry(self, ordinal: int) -> TocEntry | None:
        """Return the heading whose section contains the given page."""

        active: TocEntry | None = None
        for entry in self.toc:
            if entry.page_index + 1 > ordinal:
                break
            active = entry
        return active
