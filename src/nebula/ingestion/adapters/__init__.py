"""Ingestion adapter implementations and contracts."""

import logging

from nebula.ingestion.config import IngestionSettings
from nebula.ingestion.models import DocumentFormat

from .base import IngestionAdapter
from .mobi_adapter import MOBIAdapter
from .txt_adapter import TXTAdapter

logger = logging.getLogger(__name__)

try:
    from .pdf_adapter import PDFAdapter
except ImportError:
    PDFAdapter = None
    logger.warning("PDF support unavailable: install 'pymupdf'")

try:
    from .epub_adapter import EPUBAdapter
except ImportError:
    EPUBAdapter = None
    logger.warning("EPUB support unavailable: install 'lxml' and 'beautifulsoup4'")


def build_default_adapters(settings: IngestionSettings | None = None) -> dict[DocumentFormat, IngestionAdapter]:
    """Return the default format-to-adapter map."""
    settings = settings or IngestionSettings()
    text_adapter = TXTAdapter()
    adapters: dict[DocumentFormat, IngestionAdapter] = {
        DocumentFormat.TXT: text_adapter,
        DocumentFormat.MD: text_adapter,
        DocumentFormat.MOBI: MOBIAdapter(),
    }
    if PDFAdapter is not None:
        adapters[DocumentFormat.PDF] = PDFAdapter(page_limit=settings.pdf_page_limit)
    if EPUBAdapter is not None:
        adapters[DocumentFormat.EPUB] = EPUBAdapter()
    return adapters


__all__ = [
    "IngestionAdapter",
    "PDFAdapter",
    "EPUBAdapter",
    "MOBIAdapter",
    "TXTAdapter",
    "build_default_adapters",
]
