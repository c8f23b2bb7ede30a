"""Character classes and markup helpers shared by the extractors."""

from __future__ import annotations

import re

# Ideographic punctuation, unified ideographs and full-width forms.
CJK_CHAR_RANGES = "\u3000-\u303f\u4e00-\u9fa5\uff00-\uffef"

_CJK_RE = re.compile(f"[{CJK_CHAR_RANGES}]")
_TAG_RE = re.compile(r"<[^>]*>")


def is_cjk(char: str) -> bool:
    """Return True when a single character falls inside the CJK ranges."""

    return bool(char) and _CJK_RE.fullmatch(char) is not None


def strip_tags(text: str) -> str:
    """Remove angle-bracket markup left behind in recovered text."""

    return _TAG_RE.sub("", text)
