"""JSON and HTML lexers — split response bodies into classified tokens.

Both lexers are lossless: joining the text of every emitted token gives
back the input exactly. Text neither lexer recognizes is emitted as an
unstyled GAP token (or, for a tag that cannot be decomposed, a single TAG
token) instead of raising.

Each scan is a single forward pass. Openers are found with a regex search,
then the lexer measures how far the token extends; an opener whose token
cannot close is left in the gap without rescanning the rest of the input.
"""

from __future__ import annotations

import re

from rapisyn.tokens import ContentKind, Token, TokenClass

# ----------------------------------------------------------------------
# Patterns
# ----------------------------------------------------------------------

_JSON_RE = re.compile(
    r'(?P<quote>")'
    r"|(?P<number>-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)"
    r"|(?P<bool>\b(?:true|false)\b)"
    r"|(?P<null>\bnull\b)"
    r"|(?P<punct>[{}\[\],:])"
)

# String body after the opening quote. Stops at the closing quote, at the
# end of the text, or at a backslash that escapes nothing (before a newline).
_STRING_BODY_RE = re.compile(r'[^"\\]*(?:\\.[^"\\]*)*')

# A string followed by this is an object key.
_KEY_TAIL_RE = re.compile(r"\s*:")

_JSON_CLASSES = {
    "number": TokenClass.NUMBER,
    "bool": TokenClass.BOOL,
    "null": TokenClass.NULL,
    "punct": TokenClass.PUNCT,
}

# Openers match only the "<"; the lexer finds where the markup ends.
_HTML_RE = re.compile(
    r"(?P<comment><(?=!--))"
    r"|(?P<doctype><(?=!DOCTYPE))"
    r"|(?P<tag><(?=/?[a-zA-Z]))"
    r"|(?P<text>[^<]+)",
    re.IGNORECASE,
)

_TAG_NAME_RE = re.compile(r"(</?)([\w-]+)")
_SPACE_RE = re.compile(r"\s*")

_ATTR_RE = re.compile(
    r"""(?P<name>[\w:-]+)(?P<eq>\s*=\s*)(?P<value>["'][^"']*["']|[\w-]+)"""
    r"|(?P<ws>\s+)"
    r"|(?P<word>[\w:-]+)"
)

Piece = tuple[TokenClass, str]


# ----------------------------------------------------------------------
# Lexers
# ----------------------------------------------------------------------


class _RegexLexer:
    """Forward scan over one compiled alternation, filling gaps losslessly.

    Subclasses implement ``_claim``: given a match, return the pieces of the
    token starting there, or None to leave the matched text in the gap.
    """

    pattern: re.Pattern[str]

    def __init__(self, source: str) -> None:
        self._source = source
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        source = self._source
        pos = gap = 0
        while True:
            m = self.pattern.search(source, pos)
            if m is None:
                break
            pieces = self._claim(m)
            if pieces is None:
                pos = m.end()
                continue
            self._emit(TokenClass.GAP, source[gap : m.start()])
            for cls, text in pieces:
                self._emit(cls, text)
            pos = gap = m.start() + sum(len(text) for _, text in pieces)
        self._emit(TokenClass.GAP, source[gap:])
        return self._tokens

    def _emit(self, cls: TokenClass, text: str) -> None:
        if text:
            self._tokens.append(Token(cls, text))

    def _claim(self, m: re.Match[str]) -> list[Piece] | None:
        raise NotImplementedError


class JsonLexer(_RegexLexer):
    """Tokenize (typically pretty-printed) JSON text."""

    pattern = _JSON_RE

    def __init__(self, source: str) -> None:
        super().__init__(source)
        # Quotes before this offset lie escaped inside an unterminated string
        self._unclosed_until = 0

    def _claim(self, m: re.Match[str]) -> list[Piece] | None:
        kind = m.lastgroup
        if kind == "quote":
            return self._claim_string(m.start())
        return [(_JSON_CLASSES[kind], m.group())]

    def _claim_string(self, start: int) -> list[Piece] | None:
        if start < self._unclosed_until:
            return None
        source = self._source
        end = _STRING_BODY_RE.match(source, start + 1).end()
        if end >= len(source) or source[end] != '"':
            # A later quote inside this body resumes at the same escape
            # alignment, so it stops at the same place
            self._unclosed_until = end
            return None
        literal = source[start : end + 1]
        tail = _KEY_TAIL_RE.match(source, end + 1)
        if tail is None:
            return [(TokenClass.STRING, literal)]
        return [(TokenClass.KEY, literal), (TokenClass.PUNCT, tail.group())]


class HtmlLexer(_RegexLexer):
    """Tokenize HTML-like markup, decomposing each tag into markers and attributes."""

    pattern = _HTML_RE

    def __init__(self, source: str) -> None:
        super().__init__(source)
        self._last_gt = source.rfind(">")
        self._last_comment_close = source.rfind("-->")

    def _claim(self, m: re.Match[str]) -> list[Piece] | None:
        kind = m.lastgroup
        if kind == "text":
            return [(TokenClass.GAP, m.group())]

        start = m.start()
        if kind == "comment":
            if self._last_comment_close < start + 4:
                return None
            end = self._source.find("-->", start + 4) + 3
            return [(TokenClass.COMMENT, self._source[start:end])]

        if self._last_gt < start:
            return None
        end = self._source.find(">", start) + 1
        text = self._source[start:end]
        if kind == "doctype":
            return [(TokenClass.DOCTYPE, text)]
        return _tag_pieces(text)


class _AttributeLexer(_RegexLexer):
    pattern = _ATTR_RE

    def _claim(self, m: re.Match[str]) -> list[Piece] | None:
        if m.group("word") is not None:
            # Valueless attribute or stray text
            return None
        if m.group("ws") is not None:
            return [(TokenClass.GAP, m.group("ws"))]
        return [
            (TokenClass.ATTR_NAME, m.group("name")),
            (TokenClass.PUNCT, m.group("eq")),
            (TokenClass.ATTR_VALUE, m.group("value")),
        ]


def _tag_pieces(text: str) -> list[Piece]:
    """Split one ``<...>`` span into opener, name, attribute tokens, and closer.

    Whitespace directly after the name belongs to the attribute region; the
    closer is the longest ``\\s*/?>`` suffix after it.
    """
    m = _TAG_NAME_RE.match(text)
    if m is None:
        return [(TokenClass.TAG, text)]
    name_end = m.end()
    space_end = _SPACE_RE.match(text, name_end).end()

    if space_end == name_end:
        attrs, closer = "", text[name_end:]
        if closer not in (">", "/>"):
            # Irregular markup (e.g. "<a:b>"): keep the span whole
            return [(TokenClass.TAG, text)]
    else:
        body = text[space_end:-1]
        if body.endswith("/"):
            body = body[:-1]
        cut = space_end + len(body.rstrip())
        attrs, closer = text[name_end:cut], text[cut:]

    pieces: list[Piece] = [(TokenClass.TAG, m.group(1)), (TokenClass.TAG, m.group(2))]
    pieces.extend((tok.cls, tok.text) for tok in tokenize_attributes(attrs))
    pieces.append((TokenClass.TAG, closer))
    return pieces


# ----------------------------------------------------------------------
# Convenience functions
# ----------------------------------------------------------------------


def tokenize_json(text: str) -> list[Token]:
    """Tokenize JSON text into KEY/STRING/NUMBER/BOOL/NULL/PUNCT/GAP tokens."""
    return JsonLexer(text).tokenize()


def tokenize_html(text: str) -> list[Token]:
    """Tokenize HTML text into TAG/ATTR_*/COMMENT/DOCTYPE/PUNCT/GAP tokens."""
    return HtmlLexer(text).tokenize()


def tokenize_attributes(region: str) -> list[Token]:
    """Tokenize the attribute region of a single tag (the text after the tag name)."""
    return _AttributeLexer(region).tokenize()


def tokenize(text: str, kind: ContentKind | str) -> list[Token]:
    """Tokenize *text* with the lexer for *kind* ("json", "html" or "plain")."""
    kind = ContentKind(kind)
    if kind is ContentKind.JSON:
        return tokenize_json(text)
    if kind is ContentKind.HTML:
        return tokenize_html(text)
    return [Token(TokenClass.GAP, text)] if text else []
