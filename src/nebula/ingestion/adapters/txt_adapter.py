"""Plain-text and Markdown adapter with encoding resolution."""

from __future__ import annotations

from nebula.ingestion.encoding import resolve_encoding
from nebula.ingestion.models import DocumentFormat, ExtractedText, SourceDocument


class TXTAdapter:
    """Decode untagged text buffers; Markdown passes through verbatim."""

    def extract(self, document: SourceDocument) -> ExtractedText:
        decoded = resolve_encoding(document.data)
        text_format = DocumentFormat.MD if document.suffix == ".md" else DocumentFormat.TXT
        return ExtractedText(text=decoded.text, format=text_format, warnings=list(decoded.warnings))
