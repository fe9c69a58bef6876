"""HTML renderer — turns a token stream and a color map into markup."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from rapisyn.colors import SemanticSlot
from rapisyn.tokens import Token, TokenClass

CSS_VAR_PREFIX = "--rapi-syn-"

# Token class -> slot whose custom property colors it
_CLASS_SLOTS: dict[TokenClass, SemanticSlot] = {
    TokenClass.KEY: SemanticSlot.KEY,
    TokenClass.STRING: SemanticSlot.STRING,
    TokenClass.NUMBER: SemanticSlot.NUMBER,
    TokenClass.BOOL: SemanticSlot.BOOL,
    TokenClass.NULL: SemanticSlot.NULL,
    TokenClass.TAG: SemanticSlot.TAG,
    TokenClass.ATTR_NAME: SemanticSlot.ATTR_NAME,
    TokenClass.ATTR_VALUE: SemanticSlot.ATTR_VALUE,
    TokenClass.COMMENT: SemanticSlot.COMMENT,
    TokenClass.DOCTYPE: SemanticSlot.TAG,
}


def render_tokens(tokens: Sequence[Token]) -> str:
    """Render tokens as a ``<code>`` element, one ``<span>`` per token."""
    parts: list[str] = ["<code>"]
    for tok in tokens:
        text = _escape_html(tok.text)
        if tok.cls.styled:
            parts.append(f'<span class="syn-{tok.cls.value}">{text}</span>')
        else:
            parts.append(f"<span>{text}</span>")
    parts.append("</code>")
    return "".join(parts)


def css_var(slot: SemanticSlot) -> str:
    """Return the custom property name carrying *slot*'s color."""
    return f"{CSS_VAR_PREFIX}{slot.value}"


def color_map_css(colors: Mapping[SemanticSlot, str]) -> str:
    """Render a color map as CSS custom property declarations, one per line."""
    return "".join(f"{css_var(slot)}: {colors[slot]};\n" for slot in SemanticSlot if slot in colors)


def stylesheet(colors: Mapping[SemanticSlot, str]) -> str:
    """Return a stylesheet binding the custom properties and the ``syn-*`` classes."""
    parts: list[str] = [":root {\n"]
    for line in color_map_css(colors).splitlines(keepends=True):
        parts.append(f"  {line}")
    parts.append("}\n")
    parts.append(f".rv-body {{ color: var({css_var(SemanticSlot.PUNCTUATION)}); }}\n")
    for cls, slot in _CLASS_SLOTS.items():
        parts.append(f".syn-{cls.value} {{ color: var({css_var(slot)}); }}\n")
    return "".join(parts)


def render_page(
    tokens: Sequence[Token], colors: Mapping[SemanticSlot, str], title: str = "Response"
) -> str:
    """Render a complete HTML document showing the highlighted tokens."""
    parts: list[str] = ["<!DOCTYPE html>\n"]
    parts.append("<html>\n")
    parts.append("<head>\n")
    parts.append('<meta charset="utf-8">\n')
    parts.append(f"<title>{_escape_html(title)}</title>\n")
    parts.append("<style>\n")
    parts.append(stylesheet(colors))
    parts.append("</style>\n")
    parts.append("</head>\n")
    parts.append("<body>\n")
    parts.append(f'<pre class="rv-body">{render_tokens(tokens)}</pre>\n')
    parts.append("</body>\n")
    parts.append("</html>\n")
    return "".join(parts)


# ---------------------------------------------------------------------------
# HTML escaping
# ---------------------------------------------------------------------------


def _escape_html(text: str) -> str:
    """Escape text for HTML body content. Also encodes non-ASCII as entities."""
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        elif ord(ch) > 0x7F:
            result.append(f"&#x{ord(ch):X};")
        else:
            result.append(ch)
    return "".join(result)
