"""Minimal LSP server for rapisyn — semantic tokens for JSON and HTML documents."""

from __future__ import annotations

import re
from collections.abc import Sequence

from lsprotocol.types import (
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    SemanticTokens,
    SemanticTokensLegend,
    SemanticTokensParams,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from rapisyn import __version__
from rapisyn.lexer import tokenize
from rapisyn.tokens import ContentKind, Token, TokenClass

TOKEN_TYPES = [
    "property",
    "string",
    "number",
    "keyword",
    "comment",
    "operator",
    "type",
    "parameter",
    "macro",
]

_CLASS_TYPES = {
    TokenClass.KEY: "property",
    TokenClass.STRING: "string",
    TokenClass.NUMBER: "number",
    TokenClass.BOOL: "keyword",
    TokenClass.NULL: "keyword",
    TokenClass.PUNCT: "operator",
    TokenClass.TAG: "type",
    TokenClass.ATTR_NAME: "parameter",
    TokenClass.ATTR_VALUE: "string",
    TokenClass.COMMENT: "comment",
    TokenClass.DOCTYPE: "macro",
}
_TYPE_INDEX = {cls: TOKEN_TYPES.index(name) for cls, name in _CLASS_TYPES.items()}

_LANGUAGE_KINDS = {
    "json": ContentKind.JSON,
    "jsonc": ContentKind.JSON,
    "html": ContentKind.HTML,
}
_SUFFIX_KINDS = {
    ".json": ContentKind.JSON,
    ".jsonc": ContentKind.JSON,
    ".html": ContentKind.HTML,
    ".htm": ContentKind.HTML,
}

# Line terminators as LSP counts them
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")

server = LanguageServer("rapisyn-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def document_kind(uri: str, language_id: str | None) -> ContentKind | None:
    """Pick a lexer from the client's language id, falling back to the URI suffix."""
    if language_id and language_id.lower() in _LANGUAGE_KINDS:
        return _LANGUAGE_KINDS[language_id.lower()]
    name = uri.rsplit("/", 1)[-1].lower()
    for suffix, kind in _SUFFIX_KINDS.items():
        if name.endswith(suffix):
            return kind
    return None


def encode_semantic_tokens(tokens: Sequence[Token]) -> list[int]:
    """Encode tokens in the LSP relative format, splitting multi-line tokens per line.

    Columns are counted in UTF-16 code units. GAP tokens are not reported.
    """
    data: list[int] = []
    line = col = 0
    prev_line = prev_col = 0
    after_cr = False
    for tok in tokens:
        type_index = _TYPE_INDEX.get(tok.cls)
        text = tok.text
        if after_cr and text.startswith("\n"):
            # Rest of a CRLF whose "\r" ended the previous token
            text = text[1:]
        for i, piece in enumerate(_LINE_BREAK_RE.split(text)):
            if i > 0:
                line += 1
                col = 0
            length = _utf16_len(piece)
            if type_index is not None and length:
                delta_col = col - prev_col if line == prev_line else col
                data.extend([line - prev_line, delta_col, length, type_index, 0])
                prev_line, prev_col = line, col
            col += length
        after_cr = tok.text.endswith("\r")
    return data


def _semantic_tokens(ls: LanguageServer, uri: str) -> SemanticTokens:
    """Tokenize the document at *uri* and return its semantic tokens."""
    doc = ls.workspace.get_text_document(uri)
    kind = document_kind(uri, getattr(doc, "language_id", None))
    if kind is None:
        return SemanticTokens(data=[])
    return SemanticTokens(data=encode_semantic_tokens(tokenize(doc.source, kind)))


@server.feature(
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    SemanticTokensLegend(token_types=TOKEN_TYPES, token_modifiers=[]),
)
def semantic_tokens_full(ls: LanguageServer, params: SemanticTokensParams) -> SemanticTokens:
    return _semantic_tokens(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
