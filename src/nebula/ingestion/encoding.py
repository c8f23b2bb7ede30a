"""Encoding resolution for plain-text and Markdown uploads.

Uploads rarely declare their charset. UTF-8 is tried first; when the
permissive decode is littered with replacement characters the buffer is
re-read as GB18030, a superset of GBK and GB2312. The heuristic is tuned
for Chinese-language corpora and is not a general charset sniffer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)

REPLACEMENT_CHAR = "\ufffd"
REPLACEMENT_RATIO_THRESHOLD = 0.01
FALLBACK_ENCODING = "gb18030"


@dataclass(slots=True)
class DecodedText:
    text: str
    encoding: str
    warnings: list[str] = field(default_factory=list)


def _replacement_count(text: str) -> int:
    return text.count(REPLACEMENT_CHAR)


def needs_fallback(text: str) -> bool:
    """Return True when a UTF-8 decode looks like the wrong charset."""

    count = _replacement_count(text)
    return count > 0 and count > len(text) * REPLACEMENT_RATIO_THRESHOLD


def resolve_encoding(raw: bytes) -> DecodedText:
    """Decode an untagged text buffer, falling back to GB18030 when needed."""

    # utf-8-sig drops a leading BOM and behaves like utf-8 otherwise.
    utf8_text = raw.decode("utf-8-sig", errors="replace")
    if not needs_fallback(utf8_text):
        return DecodedText(text=utf8_text, encoding="utf-8")

    logger.info(
        "UTF-8 decode produced %d replacement characters, retrying as %s",
        _replacement_count(utf8_text),
        FALLBACK_ENCODING,
    )
    try:
        fallback_text = raw.decode(FALLBACK_ENCODING, errors="replace")
    except (LookupError, UnicodeDecodeError) as exc:
        logger.warning("%s decode failed, keeping lossy UTF-8 text: %s", FALLBACK_ENCODING, exc)
        return DecodedText(
            text=utf8_text,
            encoding="utf-8",
            warnings=[f"Text decoded as lossy UTF-8; {FALLBACK_ENCODING} fallback failed: {exc}"],
        )

    warnings: list[str] = []
    leftover = _replacement_count(fallback_text)
    if leftover:
        warnings.append(f"{FALLBACK_ENCODING} decode left {leftover} unreadable characters")
    return DecodedText(text=fallback_text, encoding=FALLBACK_ENCODING, warnings=warnings)
