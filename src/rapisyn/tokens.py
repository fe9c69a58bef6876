"""Token classes, token data structure, and content kinds."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenClass(Enum):
    # Unstyled
    GAP = "gap"  # whitespace, text between tags, anything unmatched
    PUNCT = "punct"  # { } [ ] , : and attribute =

    # JSON
    KEY = "key"  # "name" before a colon
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"  # true / false
    NULL = "null"

    # HTML
    TAG = "tag"  # <, </, tag name, >, />
    ATTR_NAME = "attr-name"
    ATTR_VALUE = "attr-value"
    COMMENT = "comment"
    DOCTYPE = "doctype"

    @property
    def styled(self) -> bool:
        """Return True if the renderer gives this class its own CSS class."""
        return self not in (TokenClass.GAP, TokenClass.PUNCT)


class ContentKind(Enum):
    JSON = "json"
    HTML = "html"
    PLAIN = "plain"


@dataclass(frozen=True, slots=True)
class Token:
    """A classified slice of the input text."""

    cls: TokenClass
    text: str
