"""Semantic highlight slots and theme color resolution.

Each of the ten slots names a few TextMate scopes to look for. The matcher
searches a flattened rule list for the most specific selector matching any
of them; the builder lays the results over a light or dark default palette.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum

from rapisyn.theme import ScopeRule, ThemeDocument, resolve_rules


class SemanticSlot(Enum):
    KEY = "key"
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"
    TAG = "tag"
    ATTR_NAME = "attr-name"
    ATTR_VALUE = "attr-value"
    COMMENT = "comment"
    PUNCTUATION = "punctuation"


ColorMap = dict[SemanticSlot, str]

# Candidate scopes per slot, most specific first
SLOT_SCOPES: Mapping[SemanticSlot, tuple[str, ...]] = {
    SemanticSlot.KEY: (
        "support.type.property-name",
        "meta.object-literal.key",
        "string.json support.type.property-name",
    ),
    SemanticSlot.STRING: ("string.quoted", "string"),
    SemanticSlot.NUMBER: ("constant.numeric", "constant.numeric.json"),
    SemanticSlot.BOOL: (
        "constant.language.boolean",
        "constant.language.json",
        "constant.language",
    ),
    SemanticSlot.NULL: ("constant.language.null", "constant.language.undefined"),
    SemanticSlot.TAG: ("entity.name.tag", "entity.name.tag.html"),
    SemanticSlot.ATTR_NAME: (
        "entity.other.attribute-name",
        "entity.other.attribute-name.html",
    ),
    SemanticSlot.ATTR_VALUE: ("string.quoted.double.html", "meta.attribute string"),
    SemanticSlot.COMMENT: ("comment", "comment.block", "comment.line"),
    SemanticSlot.PUNCTUATION: ("punctuation", "meta.brace", "punctuation.definition"),
}

# Dark+ palette
DARK_DEFAULTS: Mapping[SemanticSlot, str] = {
    SemanticSlot.KEY: "#9cdcfe",
    SemanticSlot.STRING: "#ce9178",
    SemanticSlot.NUMBER: "#b5cea8",
    SemanticSlot.BOOL: "#569cd6",
    SemanticSlot.NULL: "#569cd6",
    SemanticSlot.TAG: "#569cd6",
    SemanticSlot.ATTR_NAME: "#9cdcfe",
    SemanticSlot.ATTR_VALUE: "#ce9178",
    SemanticSlot.COMMENT: "#6a9955",
    SemanticSlot.PUNCTUATION: "#d4d4d4",
}

# Light+ palette
LIGHT_DEFAULTS: Mapping[SemanticSlot, str] = {
    SemanticSlot.KEY: "#0451a5",
    SemanticSlot.STRING: "#a31515",
    SemanticSlot.NUMBER: "#098658",
    SemanticSlot.BOOL: "#0000ff",
    SemanticSlot.NULL: "#0000ff",
    SemanticSlot.TAG: "#800000",
    SemanticSlot.ATTR_NAME: "#ff0000",
    SemanticSlot.ATTR_VALUE: "#0000ff",
    SemanticSlot.COMMENT: "#008000",
    SemanticSlot.PUNCTUATION: "#000000",
}


def default_palette(is_light: bool) -> ColorMap:
    """Return a fresh copy of the light or dark default palette."""
    return dict(LIGHT_DEFAULTS if is_light else DARK_DEFAULTS)


def selector_matches(selector: str, candidate: str) -> bool:
    """Return True if *selector* equals, is an ancestor of, or descends from *candidate*."""
    if selector == candidate:
        return True
    return candidate.startswith((selector + ".", selector + " ")) or selector.startswith(
        (candidate + ".", candidate + " ")
    )


def find_color(candidates: Sequence[str], rules: Sequence[ScopeRule]) -> str | None:
    """Return the foreground of the most specific rule matching any candidate.

    Specificity is selector length. On a tie the rule seen first wins:
    only a strictly longer selector replaces the current best.
    """
    best_color: str | None = None
    best_len = -1
    for rule in rules:
        if not rule.foreground:
            continue
        for selector in rule.scopes:
            for candidate in candidates:
                if selector_matches(selector, candidate) and len(selector) > best_len:
                    best_len = len(selector)
                    best_color = rule.foreground
    return best_color


def match_slots(rules: Sequence[ScopeRule]) -> dict[SemanticSlot, str | None]:
    """Resolve every semantic slot against *rules*; unmatched slots map to None."""
    return {slot: find_color(scopes, rules) for slot, scopes in SLOT_SCOPES.items()}


def build_color_map(document: ThemeDocument | None, is_light: bool) -> ColorMap:
    """Build a complete color map for *document* over the default palette."""
    colors = default_palette(is_light)
    for slot, color in match_slots(resolve_rules(document)).items():
        if color is not None:
            colors[slot] = color
    return colors


def is_default_palette(colors: Mapping[SemanticSlot, str], is_light: bool) -> bool:
    """Return True if *colors* is exactly the default palette (no theme color applied)."""
    return dict(colors) == default_palette(is_light)
