"""Theme file loading and theme lookup.

Reads editor color theme files (JSON with comments), follows their
``include`` chain, and materializes the result as ThemeDocuments for the
pure resolution code in ``rapisyn.theme``. Locators find a theme file by
name, either among installed editor extensions or in plain directories.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Protocol

from rapisyn.errors import ThemeLoadError
from rapisyn.theme import MAX_INCLUDE_DEPTH, ThemeDocument, normalize_rules

logger = logging.getLogger(__name__)

# Strings are matched first and kept, so "//" inside a URL survives.
_COMMENT_RE = re.compile(r'("(?:[^"\\]|\\.)*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r'("(?:[^"\\]|\\.)*")|,(\s*[\]}])', re.DOTALL)

_LIGHT_UI_THEMES = frozenset({"vs", "hc-light"})


def _drop_comment(m: re.Match[str]) -> str:
    if m.group(1) is not None:
        return m.group(1)
    # Keep line breaks so error positions still point at the original line
    return "\n" * m.group(0).count("\n")


def _drop_comma(m: re.Match[str]) -> str:
    if m.group(1) is not None:
        return m.group(1)
    return m.group(2)


def strip_jsonc(text: str) -> str:
    """Remove // and /* */ comments and trailing commas from JSONC text."""
    text = _COMMENT_RE.sub(_drop_comment, text)
    return _TRAILING_COMMA_RE.sub(_drop_comma, text)


def read_theme_file(path: Path | str) -> dict[str, Any]:
    """Read and parse one theme file. Raises ThemeLoadError on any failure."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except (OSError, ValueError) as exc:
        raise ThemeLoadError(f"cannot read theme file: {exc}", path) from exc

    text = strip_jsonc(raw)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ThemeLoadError(
            f"invalid theme JSON: {exc.msg}", path, text, exc.lineno, exc.colno
        ) from exc

    if not isinstance(data, dict):
        raise ThemeLoadError("theme file must contain a JSON object", path)
    return data


def theme_is_light(data: dict[str, Any]) -> bool | None:
    """Return the light flag declared by a theme file's ``type``, if any."""
    kind = data.get("type")
    if not isinstance(kind, str):
        return None
    return kind.lower() in ("light", "hc-light", "hclight")


def load_theme(
    path: Path | str, name: str | None = None, max_depth: int = MAX_INCLUDE_DEPTH
) -> ThemeDocument | None:
    """Load a theme file and its ``include`` ancestors into a ThemeDocument chain.

    Include paths are relative to the including file. An unreadable root
    gives None; an unreadable include, a repeated file, or a chain longer
    than *max_depth* ends the chain at the last good document.
    """
    chain: list[tuple[Path, dict[str, Any]]] = []
    seen: set[Path] = set()
    current: Path | None = Path(path)

    while current is not None:
        try:
            key = current.resolve()
        except (OSError, ValueError) as exc:
            logger.warning("cannot resolve theme path %r: %s", str(current), exc)
            break
        if key in seen:
            logger.warning("theme include cycle at %s, ignoring further includes", current)
            break
        if len(chain) >= max_depth:
            logger.warning("theme include chain deeper than %d at %s, truncating", max_depth, current)
            break
        seen.add(key)
        try:
            data = read_theme_file(current)
        except ThemeLoadError as exc:
            logger.warning("%s", exc)
            break
        chain.append((current, data))
        include = data.get("include")
        current = current.parent / include if isinstance(include, str) and include else None

    if not chain:
        return None

    parent: ThemeDocument | None = None
    for file_path, data in reversed(chain[1:]):
        parent = _document(file_path, data, parent)

    root_path, root_data = chain[0]
    doc = _document(root_path, root_data, parent)
    doc.light = theme_is_light(root_data)
    if name:
        doc.name = name
    return doc


def _document(path: Path, data: dict[str, Any], parent: ThemeDocument | None) -> ThemeDocument:
    label = data.get("name")
    return ThemeDocument(
        rules=normalize_rules(data.get("tokenColors")),
        parent=parent,
        name=label if isinstance(label, str) else path.stem,
    )


# ----------------------------------------------------------------------
# Locators
# ----------------------------------------------------------------------


class ThemeLocator(Protocol):
    """Find a theme by its user-facing name."""

    def locate(self, theme_name: str) -> ThemeDocument | None:
        """Return the materialized theme, or None if it cannot be found or read."""
        ...


class ExtensionThemeLocator:
    """Locate themes contributed by editor extensions.

    Each search directory is an extensions folder (for example
    ``~/.vscode/extensions``) whose children hold a ``package.json``
    manifest; a directory holding a manifest itself is searched too.
    """

    def __init__(self, extension_dirs: Iterable[Path | str]) -> None:
        self._dirs = [Path(d) for d in extension_dirs]

    def locate(self, theme_name: str) -> ThemeDocument | None:
        found = self._find(theme_name)
        if found is None:
            logger.info("theme %r not provided by any extension", theme_name)
            return None
        path, contrib = found
        doc = load_theme(path, theme_name)
        ui_theme = contrib.get("uiTheme")
        # The manifest's uiTheme decides light/dark over the file's own "type"
        if doc is not None and isinstance(ui_theme, str):
            doc.light = ui_theme in _LIGHT_UI_THEMES
        return doc

    def _find(self, theme_name: str) -> tuple[Path, dict[str, Any]] | None:
        for ext_dir, manifest in self._manifests():
            contributes = manifest.get("contributes")
            if not isinstance(contributes, dict):
                continue
            themes = contributes.get("themes")
            if not isinstance(themes, list):
                continue
            for contrib in themes:
                if not isinstance(contrib, dict):
                    continue
                label = contrib.get("label") or contrib.get("id") or ""
                if theme_name not in (label, contrib.get("id")):
                    continue
                theme_path = contrib.get("path")
                if isinstance(theme_path, str):
                    return ext_dir / theme_path, contrib
        return None

    def _manifests(self) -> Iterator[tuple[Path, dict[str, Any]]]:
        for base in self._dirs:
            if not base.is_dir():
                continue
            candidates = [base, *sorted(p for p in base.iterdir() if p.is_dir())]
            for ext_dir in candidates:
                manifest_path = ext_dir / "package.json"
                if not manifest_path.is_file():
                    continue
                try:
                    manifest = json.loads(manifest_path.read_text(encoding="utf-8-sig"))
                except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
                    logger.debug("skipping extension manifest %s: %s", manifest_path, exc)
                    continue
                if isinstance(manifest, dict):
                    yield ext_dir, manifest


class FileThemeLocator:
    """Locate ``<name>.json`` / ``<name>.jsonc`` theme files in plain directories."""

    def __init__(self, theme_dirs: Iterable[Path | str]) -> None:
        self._dirs = [Path(d) for d in theme_dirs]

    def locate(self, theme_name: str) -> ThemeDocument | None:
        for base in self._dirs:
            for suffix in (".json", ".jsonc"):
                path = base / f"{theme_name}{suffix}"
                if path.is_file():
                    return load_theme(path, theme_name)
        return None


class ChainedThemeLocator:
    """Try several locators in order; the first hit wins."""

    def __init__(self, *locators: ThemeLocator) -> None:
        self._locators = locators

    def locate(self, theme_name: str) -> ThemeDocument | None:
        for locator in self._locators:
            doc = locator.locate(theme_name)
            if doc is not None:
                return doc
        return None
