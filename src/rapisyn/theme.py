"""Theme documents and rule-set resolution.

A theme is a chain of documents: each one carries its own scope rules and
optionally a parent it extends. ``resolve_rules`` flattens the chain into
one ordered list, ancestors first. The walk never performs I/O; documents
arrive already materialized (see ``rapisyn.loader``).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Hard ceiling on the number of documents visited in one chain
MAX_INCLUDE_DEPTH = 32

_SCOPE_SPLIT_RE = re.compile(r"\s*,\s*")


@dataclass(frozen=True, slots=True)
class ScopeRule:
    """Scope selectors sharing one foreground color."""

    scopes: tuple[str, ...]
    foreground: str | None = None


@dataclass(eq=False, slots=True)
class ThemeDocument:
    """One theme file's rules plus the document it extends.

    Compared and hashed by identity, so a (malformed) cyclic chain can be
    represented and detected. ``light`` is the theme's own light/dark
    declaration, when it makes one.
    """

    rules: tuple[ScopeRule, ...] = ()
    parent: ThemeDocument | None = None
    name: str = ""
    light: bool | None = None


def _normalize_scopes(scope: Any) -> tuple[str, ...]:
    if isinstance(scope, str):
        parts: Iterable[Any] = _SCOPE_SPLIT_RE.split(scope)
    elif isinstance(scope, (list, tuple)):
        parts = scope
    else:
        return ()
    return tuple(p.strip() for p in parts if isinstance(p, str) and p.strip())


def normalize_rule(raw: Any) -> ScopeRule | None:
    """Convert one raw ``tokenColors`` entry to a ScopeRule, or None if unusable."""
    if not isinstance(raw, dict):
        return None
    scopes = _normalize_scopes(raw.get("scope"))
    settings = raw.get("settings")
    foreground = None
    if isinstance(settings, dict) and isinstance(settings.get("foreground"), str):
        foreground = settings["foreground"]
    return ScopeRule(scopes, foreground)


def normalize_rules(raw: Any) -> tuple[ScopeRule, ...]:
    """Convert a raw ``tokenColors`` value to ScopeRules.

    The scope of an entry may be a comma-separated string or a list of
    strings. Entries that are not objects are dropped; anything that is not
    a list yields no rules.
    """
    if not isinstance(raw, list):
        return ()
    rules: list[ScopeRule] = []
    for entry in raw:
        rule = normalize_rule(entry)
        if rule is not None:
            rules.append(rule)
    return tuple(rules)


def resolve_rules(
    document: ThemeDocument | None, max_depth: int = MAX_INCLUDE_DEPTH
) -> tuple[ScopeRule, ...]:
    """Flatten a document chain into one rule list, ancestors first.

    The walk stops at the first document already seen (a cycle), after
    *max_depth* documents, or at a parent that is not a ThemeDocument.
    Whatever was gathered up to that point is returned.
    """
    chain: list[ThemeDocument] = []
    seen: set[int] = set()
    node: Any = document

    while node is not None:
        if not isinstance(node, ThemeDocument):
            logger.debug("ignoring malformed theme ancestor %r", node)
            break
        if id(node) in seen:
            logger.debug("theme include cycle at %r, truncating", node.name)
            break
        if len(chain) >= max_depth:
            logger.debug("theme include chain deeper than %d, truncating", max_depth)
            break
        seen.add(id(node))
        chain.append(node)
        node = node.parent

    rules: list[ScopeRule] = []
    for doc in reversed(chain):
        if not isinstance(doc.rules, (tuple, list)):
            continue
        rules.extend(r for r in doc.rules if isinstance(r, ScopeRule))
    return tuple(rules)
