"""Shared adapter contract for per-format extractors."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from nebula.ingestion.models import ExtractedText, SourceDocument


@runtime_checkable
class IngestionAdapter(Protocol):
    """Protocol that every format adapter must implement.

    Adapters keep no per-document state between calls; anything tracked
    while walking a document lives in locals of ``extract``.
    """

    def extract(self, document: SourceDocument) -> ExtractedText:
        """Extract a document into flattened text or raise ``IngestionError``."""
