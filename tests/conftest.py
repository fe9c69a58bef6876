"""Shared test fixtures and helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from rapisyn.lexer import tokenize_html, tokenize_json
from rapisyn.theme import ScopeRule
from rapisyn.tokens import Token, TokenClass


@pytest.fixture
def lex_json():
    """Return a helper that tokenizes JSON and drops GAP tokens."""

    def _lex(source: str) -> list[Token]:
        return [t for t in tokenize_json(source) if t.cls != TokenClass.GAP]

    return _lex


@pytest.fixture
def lex_html():
    """Return a helper that tokenizes HTML and drops GAP tokens."""

    def _lex(source: str) -> list[Token]:
        return [t for t in tokenize_html(source) if t.cls != TokenClass.GAP]

    return _lex


@pytest.fixture
def write_theme(tmp_path: Path):
    """Return a helper that writes a theme file (dict or raw text) under tmp_path."""

    def _write(name: str, content: dict | str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


def rule(scope: str | tuple[str, ...], foreground: str | None) -> ScopeRule:
    """Build a ScopeRule from a single selector or a tuple of selectors."""
    scopes = (scope,) if isinstance(scope, str) else scope
    return ScopeRule(scopes, foreground)


def assert_classes(tokens: list[Token], expected: list[TokenClass]) -> None:
    """Assert that the token classes match the expected list."""
    actual = [t.cls for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_texts(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token texts match the expected list."""
    actual = [t.text for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def pairs(tokens: list[Token]) -> list[tuple[TokenClass, str]]:
    """Return (class, text) pairs for compact comparisons."""
    return [(t.cls, t.text) for t in tokens]
