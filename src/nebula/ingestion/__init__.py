"""Ingestion package interfaces."""

from .errors import ErrorKind, IngestionError
from .ingestor import DocumentIngestor, detect_format
from .models import DocumentFormat, ExtractedText, Page, Pagination, SourceDocument, TocEntry
from .pagination import paginate

__all__ = [
    "DocumentFormat",
    "DocumentIngestor",
    "ErrorKind",
    "ExtractedText",
    "IngestionError",
    "Page",
    "Pagination",
    "SourceDocument",
    "TocEntry",
    "detect_format",
    "paginate",
]
