"""Theme-aware syntax highlighting for HTTP response bodies."""

from __future__ import annotations

__version__ = "0.1.0"

from collections.abc import Mapping

from rapisyn.colors import ColorMap, SemanticSlot, build_color_map
from rapisyn.lexer import tokenize, tokenize_html, tokenize_json
from rapisyn.theme import ScopeRule, ThemeDocument, resolve_rules
from rapisyn.tokens import ContentKind, Token, TokenClass


def highlight(
    text: str,
    kind: ContentKind | str | None = None,
    colors: Mapping[SemanticSlot, str] | None = None,
    *,
    content_type: str | None = None,
) -> str:
    """Tokenize a response body and render it as HTML.

    Without *colors* the result is a ``<code>`` fragment styled only by
    ``syn-*`` classes; with *colors* it is a standalone page whose stylesheet
    binds those classes to the map. With no *kind*, the lexer is picked from
    *content_type* and the text.
    """
    from rapisyn.content import detect_kind
    from rapisyn.render import render_page, render_tokens

    if kind is None:
        kind = detect_kind(content_type, text)
    tokens = tokenize(text, kind)
    if colors is None:
        return render_tokens(tokens)
    return render_page(tokens, colors)


__all__ = [
    "ColorMap",
    "ContentKind",
    "ScopeRule",
    "SemanticSlot",
    "ThemeDocument",
    "Token",
    "TokenClass",
    "build_color_map",
    "highlight",
    "resolve_rules",
    "tokenize",
    "tokenize_html",
    "tokenize_json",
]
