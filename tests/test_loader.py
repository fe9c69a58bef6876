"""Theme file reading, include chains, and theme locators."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from rapisyn.colors import SemanticSlot, build_color_map
from rapisyn.errors import ThemeLoadError
from rapisyn.loader import (
    ChainedThemeLocator,
    ExtensionThemeLocator,
    FileThemeLocator,
    load_theme,
    read_theme_file,
    strip_jsonc,
)
from rapisyn.theme import resolve_rules


def _theme(scope: str, color: str, **extra) -> dict:
    return {"tokenColors": [{"scope": scope, "settings": {"foreground": color}}], **extra}


class TestStripJsonc:
    def test_line_comment(self) -> None:
        assert json.loads(strip_jsonc('{"a": 1 // one\n}')) == {"a": 1}

    def test_block_comment(self) -> None:
        assert json.loads(strip_jsonc('{/* x\n y */"a": 1}')) == {"a": 1}

    def test_block_comment_keeps_line_count(self) -> None:
        assert strip_jsonc("/* a\nb\nc */x").count("\n") == 2

    def test_trailing_commas(self) -> None:
        assert json.loads(strip_jsonc('{"a": [1, 2,], "b": 3,}')) == {"a": [1, 2], "b": 3}

    def test_url_in_string_survives(self) -> None:
        text = '{"u": "http://example.com/*x*/"}'
        assert json.loads(strip_jsonc(text)) == {"u": "http://example.com/*x*/"}

    def test_comma_in_string_survives(self) -> None:
        assert json.loads(strip_jsonc('{"a": ",]"}')) == {"a": ",]"}


class TestReadThemeFile:
    def test_reads_jsonc(self, write_theme) -> None:
        path = write_theme("t.json", '{\n  // comment\n  "name": "T",\n}')
        assert read_theme_file(path) == {"name": "T"}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ThemeLoadError, match="cannot read"):
            read_theme_file(tmp_path / "nope.json")

    def test_invalid_json_has_position(self, write_theme) -> None:
        path = write_theme("bad.json", '{\n  "a": 1\n  "b": 2\n}')
        with pytest.raises(ThemeLoadError) as exc_info:
            read_theme_file(path)
        err = exc_info.value
        assert err.line == 3
        assert err.path == path

    def test_top_level_must_be_object(self, write_theme) -> None:
        path = write_theme("list.json", "[1, 2]")
        with pytest.raises(ThemeLoadError, match="JSON object"):
            read_theme_file(path)

    def test_null_byte_in_path(self, tmp_path: Path) -> None:
        with pytest.raises(ThemeLoadError, match="cannot read"):
            read_theme_file(tmp_path / "a\x00b.json")


class TestLoadTheme:
    def test_single_file(self, write_theme) -> None:
        path = write_theme("t.json", _theme("comment", "#c", name="Mine", type="light"))
        doc = load_theme(path)
        assert doc is not None
        assert doc.name == "Mine"
        assert doc.light is True
        assert doc.parent is None
        assert doc.rules[0].scopes == ("comment",)

    def test_name_override_and_stem_default(self, write_theme) -> None:
        path = write_theme("plain.json", _theme("comment", "#c"))
        assert load_theme(path).name == "plain"
        assert load_theme(path, "Given").name == "Given"

    def test_dark_type(self, write_theme) -> None:
        path = write_theme("d.json", _theme("comment", "#c", type="dark"))
        assert load_theme(path).light is False

    def test_include_chain_base_first(self, write_theme) -> None:
        write_theme("themes/base.json", _theme("comment", "#base"))
        top = write_theme("themes/top.json", _theme("string", "#top", include="./base.json"))
        doc = load_theme(top)
        assert doc is not None
        assert doc.parent is not None
        assert doc.parent.name == "base"
        assert [r.foreground for r in resolve_rules(doc)] == ["#base", "#top"]

    def test_include_in_subdirectory(self, write_theme) -> None:
        write_theme("themes/common/base.json", _theme("comment", "#base"))
        top = write_theme("themes/top.json", _theme("string", "#top", include="common/base.json"))
        assert len(resolve_rules(load_theme(top))) == 2

    def test_missing_include_keeps_own_rules(self, write_theme, caplog) -> None:
        top = write_theme("top.json", _theme("string", "#top", include="gone.json"))
        with caplog.at_level(logging.WARNING, logger="rapisyn.loader"):
            doc = load_theme(top)
        assert doc is not None
        assert doc.parent is None
        assert [r.foreground for r in resolve_rules(doc)] == ["#top"]
        assert "gone.json" in caplog.text

    def test_include_cycle_terminates(self, write_theme, caplog) -> None:
        a = write_theme("a.json", _theme("a", "#a", include="b.json"))
        write_theme("b.json", _theme("b", "#b", include="a.json"))
        with caplog.at_level(logging.WARNING, logger="rapisyn.loader"):
            doc = load_theme(a)
        assert [r.foreground for r in resolve_rules(doc)] == ["#b", "#a"]
        assert "cycle" in caplog.text

    def test_null_byte_in_include_ends_chain(self, write_theme, caplog) -> None:
        top = write_theme("top.json", _theme("string", "#top", include="a\x00b.json"))
        with caplog.at_level(logging.WARNING, logger="rapisyn.loader"):
            doc = load_theme(top)
        assert doc is not None
        assert doc.parent is None
        assert [r.foreground for r in resolve_rules(doc)] == ["#top"]
        assert caplog.records

    def test_self_include(self, write_theme) -> None:
        a = write_theme("a.json", _theme("a", "#a", include="a.json"))
        assert [r.foreground for r in resolve_rules(load_theme(a))] == ["#a"]

    def test_depth_limit(self, write_theme) -> None:
        for i in range(5):
            write_theme(f"t{i}.json", _theme(f"s{i}", f"#{i}", include=f"t{i + 1}.json"))
        write_theme("t5.json", _theme("s5", "#5"))
        doc = load_theme(Path(write_theme("t0.json", _theme("s0", "#0", include="t1.json"))), max_depth=2)
        assert [r.foreground for r in resolve_rules(doc)] == ["#1", "#0"]

    def test_unreadable_root(self, tmp_path: Path) -> None:
        assert load_theme(tmp_path / "missing.json") is None

    def test_malformed_root(self, write_theme) -> None:
        assert load_theme(write_theme("bad.json", "{not json")) is None

    def test_colors_from_loaded_theme(self, write_theme) -> None:
        path = write_theme(
            "t.json",
            {
                "tokenColors": [
                    {"scope": "string", "settings": {"foreground": "#111"}},
                    {"scope": ["string.quoted.double"], "settings": {"foreground": "#222"}},
                    {"scope": "support.type.property-name, entity.name.tag", "settings": {"foreground": "#333"}},
                ]
            },
        )
        colors = build_color_map(load_theme(path), False)
        assert colors[SemanticSlot.STRING] == "#222"
        assert colors[SemanticSlot.KEY] == "#333"
        assert colors[SemanticSlot.TAG] == "#333"


@pytest.fixture
def extensions(tmp_path: Path) -> Path:
    """An extensions directory with one theme extension and one broken manifest."""
    root = tmp_path / "extensions"
    ext = root / "acme.night-1.0.0"
    (ext / "themes").mkdir(parents=True)
    (ext / "package.json").write_text(
        json.dumps(
            {
                "name": "night",
                "contributes": {
                    "themes": [
                        {"label": "Acme Night", "uiTheme": "vs-dark", "path": "./themes/night.json"},
                        {"id": "acme-day", "label": "Acme Day", "uiTheme": "vs", "path": "./themes/day.json"},
                    ]
                },
            }
        )
    )
    (ext / "themes" / "night.json").write_text(json.dumps(_theme("comment", "#night", type="light")))
    (ext / "themes" / "day.json").write_text(json.dumps(_theme("comment", "#day")))

    broken = root / "broken-0.1"
    broken.mkdir()
    (broken / "package.json").write_text("{ nope")
    return root


class TestExtensionThemeLocator:
    def test_locate_by_label(self, extensions: Path) -> None:
        doc = ExtensionThemeLocator([extensions]).locate("Acme Night")
        assert doc is not None
        assert doc.name == "Acme Night"
        assert doc.rules[0].foreground == "#night"

    def test_ui_theme_decides_light_flag(self, extensions: Path) -> None:
        locator = ExtensionThemeLocator([extensions])
        assert locator.locate("Acme Night").light is False
        assert locator.locate("Acme Day").light is True

    def test_locate_by_id(self, extensions: Path) -> None:
        doc = ExtensionThemeLocator([extensions]).locate("acme-day")
        assert doc is not None
        assert doc.rules[0].foreground == "#day"

    def test_unknown_theme(self, extensions: Path) -> None:
        assert ExtensionThemeLocator([extensions]).locate("Nope") is None

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert ExtensionThemeLocator([tmp_path / "none"]).locate("Acme Night") is None

    def test_extension_directory_itself(self, extensions: Path) -> None:
        doc = ExtensionThemeLocator([extensions / "acme.night-1.0.0"]).locate("Acme Day")
        assert doc is not None

    def test_null_byte_in_contributed_path(self, tmp_path: Path) -> None:
        ext = tmp_path / "bad-1.0"
        ext.mkdir()
        manifest = {"contributes": {"themes": [{"label": "Bad", "path": "themes/a\u0000b.json"}]}}
        (ext / "package.json").write_text(json.dumps(manifest))
        assert ExtensionThemeLocator([tmp_path]).locate("Bad") is None


class TestFileThemeLocator:
    def test_json_and_jsonc(self, write_theme, tmp_path: Path) -> None:
        write_theme("themes/one.json", _theme("comment", "#1"))
        write_theme("themes/two.jsonc", "{// c\n" + json.dumps(_theme("comment", "#2"))[1:])
        locator = FileThemeLocator([tmp_path / "themes"])
        assert locator.locate("one").rules[0].foreground == "#1"
        assert locator.locate("two").rules[0].foreground == "#2"
        assert locator.locate("three") is None


class TestChainedThemeLocator:
    def test_first_hit_wins(self, write_theme, extensions: Path, tmp_path: Path) -> None:
        write_theme("themes/Acme Night.json", _theme("comment", "#file"))
        locator = ChainedThemeLocator(
            FileThemeLocator([tmp_path / "themes"]),
            ExtensionThemeLocator([extensions]),
        )
        assert locator.locate("Acme Night").rules[0].foreground == "#file"
        assert locator.locate("Acme Day").rules[0].foreground == "#day"
