"""Typed ingestion failures surfaced to callers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    UNSUPPORTED_FORMAT = "unsupported_format"
    INVALID_CONTAINER = "invalid_container"     # malformed zip/XML/PDF structure
    MISSING_MANIFEST = "missing_manifest"
    PASSWORD_PROTECTED = "password_protected"
    CORRUPT_BINARY = "corrupt_binary"
    EMPTY_CONTENT = "empty_content"             # structurally fine but no usable text
    UNEXTRACTABLE_BINARY = "unextractable_binary"
    OVERSIZED_INPUT = "oversized_input"
    EXTRACTION_FAILED = "extraction_failed"


@dataclass(slots=True)
class IngestionError(Exception):
    """Domain error terminating the ingestion of one document."""

    kind: ErrorKind
    message: str
    source: str | None = None

    def __str__(self) -> str:
        if self.source:
            return f"{self.message} (source={self.source})"
        return self.message
