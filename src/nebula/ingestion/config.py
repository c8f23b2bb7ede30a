"""Runtime limits for document ingestion and pagination."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

DEFAULT_MAX_INPUT_BYTES = 50 * 1024 * 1024
DEFAULT_PDF_PAGE_LIMIT = 50
DEFAULT_PAGE_CHAR_BUDGET = 1200


def _positive_int(source: Mapping[str, str], name: str, default: int) -> int:
    raw = source.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


@dataclass(frozen=True, slots=True)
class IngestionSettings:
    """Hard resource ceilings applied to every ingestion call."""

    max_input_bytes: int = DEFAULT_MAX_INPUT_BYTES
    pdf_page_limit: int = DEFAULT_PDF_PAGE_LIMIT
    page_char_budget: int = DEFAULT_PAGE_CHAR_BUDGET

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "IngestionSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        max_input_mb = _positive_int(source, "NEBULA_MAX_INPUT_MB", DEFAULT_MAX_INPUT_BYTES // (1024 * 1024))
        pdf_page_limit = _positive_int(source, "NEBULA_PDF_PAGE_LIMIT", DEFAULT_PDF_PAGE_LIMIT)
        page_char_budget = _positive_int(source, "NEBULA_PAGE_CHARS", DEFAULT_PAGE_CHAR_BUDGET)

        return cls(
            max_input_bytes=max_input_mb * 1024 * 1024,
            pdf_page_limit=pdf_page_limit,
            page_char_budget=page_char_budget,
        )
