"""Format dispatch entrypoint for document ingestion."""

from __future__ import annotations

import logging

from nebula.ingestion.adapters import build_default_adapters
from nebula.ingestion.adapters.base import IngestionAdapter
from nebula.ingestion.config import IngestionSettings
from nebula.ingestion.errors import ErrorKind, IngestionError
from nebula.ingestion.models import DocumentFormat, ExtractedText, SourceDocument

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"

_SUFFIX_FORMATS: dict[str, DocumentFormat] = {
    ".pdf": DocumentFormat.PDF,
    ".epub": DocumentFormat.EPUB,
    ".mobi": DocumentFormat.MOBI,
    ".md": DocumentFormat.MD,
}


def detect_format(name: str, mime: str | None = None) -> DocumentFormat:
    """Pick a format from the declared mime and filename; never rejects."""

    if mime and mime.split(";", 1)[0].strip().lower() == PDF_MIME:
        return DocumentFormat.PDF
    suffix = SourceDocument(b"", name).suffix
    return _SUFFIX_FORMATS.get(suffix, DocumentFormat.TXT)


def _size_mb(size: int) -> str:
    return f"{size / 1024 / 1024:.2f}MB"


class DocumentIngestor:
    """Resolve the right adapter and return flattened extraction output."""

    def __init__(
        self,
        settings: IngestionSettings | None = None,
        adapters: dict[DocumentFormat, IngestionAdapter] | None = None,
    ) -> None:
        self._settings = settings or IngestionSettings()
        if adapters is None:
            adapters = build_default_adapters(self._settings)
        self._adapter_map: dict[DocumentFormat, IngestionAdapter] = dict(adapters)

    @property
    def settings(self) -> IngestionSettings:
        return self._settings

    @property
    def adapter_map(self) -> dict[DocumentFormat, IngestionAdapter]:
        """Registered adapters keyed by document format."""

        return dict(self._adapter_map)

    def register_adapter(self, document_format: DocumentFormat, adapter: IngestionAdapter) -> None:
        """Register an adapter implementation for a format."""

        if not isinstance(document_format, DocumentFormat):
            raise ValueError(f"Unknown document format: {document_format!r}")
        self._adapter_map[document_format] = adapter

    def ingest(self, data: bytes, filename: str, mime: str | None = None) -> ExtractedText:
        """Extract one uploaded document; raises ``IngestionError`` on failure."""

        document = SourceDocument(data=bytes(data), name=filename, mime=mime)
        limit = self._settings.max_input_bytes
        if document.size > limit:
            raise IngestionError(
                ErrorKind.OVERSIZED_INPUT,
                f"File too large ({_size_mb(document.size)}); the limit is {_size_mb(limit)}",
                filename,
            )

        document_format = detect_format(filename, mime)
        adapter = self._adapter_map.get(document_format)
        if adapter is None:
            raise IngestionError(
                ErrorKind.UNSUPPORTED_FORMAT, f"No adapter registered for {document_format.value} files", filename
            )

        try:
            extracted = adapter.extract(document)
        except IngestionError:
            raise
        except Exception as exc:
            raise IngestionError(ErrorKind.UNSUPPORTED_FORMAT, f"Adapter extraction failed: {exc}", filename) from exc

        if not isinstance(extracted, ExtractedText):
            raise IngestionError(ErrorKind.UNSUPPORTED_FORMAT, "Adapter returned non-canonical output", filename)
        if not extracted.text.strip():
            raise IngestionError(ErrorKind.EMPTY_CONTENT, "File content is empty or could not be parsed", filename)

        for warning in extracted.warnings:
            logger.warning("%s: %s", filename, warning)
        logger.info(
            "Ingested %s as %s (%d chars, %d warnings)",
            filename,
            extracted.format.value,
            len(extracted.text),
            len(extracted.warnings),
        )
        return extracted

