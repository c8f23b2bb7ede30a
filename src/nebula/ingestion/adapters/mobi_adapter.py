"""Degraded-fidelity MOBI adapter.

This is not a PalmDB/MOBI parser. The container is decoded permissively and
only runs of readable characters are kept, so formatting is lost and some
binary noise may survive. EPUB remains the format of choice for full text.
"""

from __future__ import annotations

import logging
import re

from nebula.ingestion.errors import ErrorKind, IngestionError
from nebula.ingestion.models import DocumentFormat, ExtractedText, SourceDocument
from nebula.ingestion.normalization import CJK_CHAR_RANGES, strip_tags

logger = logging.getLogger(__name__)

LOSSY_NOTICE = (
    "[Note: MOBI files are read in plain-text recovery mode and some formatting may be lost. "
    "Upload an EPUB for the best reading experience.]\n\n"
)
MIN_RUN_CHARS = 10
MIN_FALLBACK_CHARS = 100

_READABLE_RUN_RE = re.compile(
    rf"[\w \t\n\r\f\v{CJK_CHAR_RANGES},.?!:;\"'()<>\[\]\-]{{{MIN_RUN_CHARS},}}"
)
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\n\r\t]")


def recover_readable_text(raw: bytes) -> str | None:
    """Return the readable runs of a binary buffer, or None when there are none."""

    decoded = raw.decode("utf-8", errors="replace")
    runs = _READABLE_RUN_RE.findall(decoded)
    if runs:
        recovered = strip_tags("\n".join(runs))
        if recovered.strip():
            return recovered

    fallback = _NON_PRINTABLE_RE.sub("", decoded)
    if len(fallback) < MIN_FALLBACK_CHARS:
        return None
    logger.warning("No readable runs found, using printable ASCII fallback")
    return fallback


class MOBIAdapter:
    """Best-effort text recovery from MOBI containers."""

    def extract(self, document: SourceDocument) -> ExtractedText:
        recovered = recover_readable_text(document.data)
        if recovered is None:
            raise IngestionError(
                ErrorKind.UNEXTRACTABLE_BINARY,
                "Cannot extract readable text from this MOBI file; convert it to EPUB and retry",
                document.name,
            )

        return ExtractedText(
            text=LOSSY_NOTICE + recovered,
            format=DocumentFormat.MOBI,
            warnings=["MOBI text was recovered in lossy mode"],
        )
