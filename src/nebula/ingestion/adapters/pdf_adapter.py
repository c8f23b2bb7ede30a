"""PDF adapter rebuilding paragraph-aware text from positioned spans."""

from __future__ import annotations

from typing import Iterator

import pymupdf

from nebula.ingestion.config import DEFAULT_PDF_PAGE_LIMIT
from nebula.ingestion.errors import ErrorKind, IngestionError
from nebula.ingestion.layout import TextRun, page_marker, reconstruct_page_text
from nebula.ingestion.models import DocumentFormat, ExtractedText, SourceDocument

_TEXT_FLAGS = pymupdf.TEXT_PRESERVE_WHITESPACE | pymupdf.TEXT_MEDIABOX_CLIP

# mupdf content-stream errors do not derive from RuntimeError.
_CORRUPTION_ERRORS = (pymupdf.mupdf.FzErrorBase, RuntimeError)


def _page_runs(page: pymupdf.Page) -> Iterator[TextRun]:
    """Yield spans in content order with baselines measured from the page bottom."""

    height = page.rect.height
    for block in page.get_text("dict", flags=_TEXT_FLAGS)["blocks"]:
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                origin_y = span.get("origin", (0.0, 0.0))[1]
                yield TextRun(text=span.get("text", ""), y=height - origin_y)


def truncation_notice(page_limit: int, total_pages: int) -> str:
    return f"\n\n[Note: only the first {page_limit} of {total_pages} pages were extracted.]"


class PDFAdapter:
    """Extract reading-order text from the leading pages of a PDF."""

    def __init__(self, page_limit: int = DEFAULT_PDF_PAGE_LIMIT) -> None:
        if page_limit <= 0:
            raise ValueError("page_limit must be positive")
        self._page_limit = page_limit

    def extract(self, document: SourceDocument) -> ExtractedText:
        try:
            pdf = pymupdf.open(stream=document.data, filetype="pdf")
        except pymupdf.FileDataError as exc:
            raise IngestionError(
                ErrorKind.INVALID_CONTAINER, f"PDF file is invalid or damaged: {exc}", document.name
            ) from exc
        except Exception as exc:
            raise IngestionError(ErrorKind.EXTRACTION_FAILED, f"PDF parsing failed: {exc}", document.name) from exc

        with pdf:
            if pdf.needs_pass:
                raise IngestionError(
                    ErrorKind.PASSWORD_PROTECTED,
                    "PDF is encrypted; remove the password protection and retry",
                    document.name,
                )
            return self._extract_pages(pdf, document.name)

    def _extract_pages(self, pdf: pymupdf.Document, source: str) -> ExtractedText:
        total_pages = pdf.page_count
        pages_to_read = min(total_pages, self._page_limit)

        parts: list[str] = []
        has_text = False
        for page_number in range(1, pages_to_read + 1):
            try:
                page_text = reconstruct_page_text(_page_runs(pdf.load_page(page_number - 1)))
            except _CORRUPTION_ERRORS as exc:
                raise IngestionError(
                    ErrorKind.CORRUPT_BINARY, f"PDF page {page_number} could not be read: {exc}", source
                ) from exc
            except Exception as exc:
                raise IngestionError(ErrorKind.EXTRACTION_FAILED, f"PDF parsing failed: {exc}", source) from exc

            has_text = has_text or bool(page_text.strip())
            parts.append(page_marker(page_number) + page_text)

        if not has_text:
            raise IngestionError(ErrorKind.EMPTY_CONTENT, "PDF contains no extractable text", source)

        warnings: list[str] = []
        if total_pages > pages_to_read:
            parts.append(truncation_notice(pages_to_read, total_pages))
            warnings.append(f"Only the first {pages_to_read} of {total_pages} pages were extracted")

        return ExtractedText(text="".join(parts), format=DocumentFormat.PDF, warnings=warnings)
