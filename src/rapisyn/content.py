"""Response body content kind detection and JSON pretty-printing."""

from __future__ import annotations

import json

from rapisyn.tokens import ContentKind


def detect_kind(content_type: str | None, text: str = "") -> ContentKind:
    """Pick a lexer for a response body from its Content-Type, sniffing *text* as fallback."""
    ct = (content_type or "").lower()
    if "html" in ct:
        return ContentKind.HTML
    if "json" in ct:
        return ContentKind.JSON

    head = text.lstrip()[:1]
    if head in ("{", "["):
        return ContentKind.JSON
    if head == "<":
        return ContentKind.HTML
    return ContentKind.PLAIN


def pretty_json(text: str) -> str:
    """Re-indent JSON text with two spaces; return *text* unchanged if it does not parse."""
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except (ValueError, RecursionError):
        # Malformed, or nested deeper than the decoder can follow
        return text
