"""Command-line interface for rapisyn."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rapisyn.colors import ColorMap, build_color_map, is_default_palette
from rapisyn.errors import ThemeLoadError
from rapisyn.tokens import ContentKind

logger = logging.getLogger(__name__)

_KIND_CHOICES = ("auto", "json", "html", "plain")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    kind: ContentKind | None
    content_type: str | None
    theme_name: str | None
    theme_file: Path | None
    theme_dirs: list[Path]
    extension_dirs: list[Path]
    light: bool | None
    pretty: bool
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="rapisyn",
        description="Render an HTTP response body as theme-colored HTML",
    )
    p.add_argument("input", help="Response body file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--kind",
        choices=_KIND_CHOICES,
        default=None,
        help="Body content kind (default: auto)",
    )
    p.add_argument(
        "--content-type",
        metavar="TYPE",
        help="Response Content-Type used to pick the lexer when --kind is auto",
    )
    p.add_argument("--theme", metavar="NAME", help="Color theme name to look up")
    p.add_argument("--theme-file", metavar="FILE", help="Color theme file to load")
    p.add_argument(
        "--theme-dir",
        action="append",
        default=[],
        metavar="DIR",
        help="Directory holding <NAME>.json theme files (repeatable)",
    )
    p.add_argument(
        "--extensions-dir",
        action="append",
        default=[],
        metavar="DIR",
        help="Editor extensions directory to search for themes (repeatable)",
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--light", dest="light", action="store_const", const=True, default=None)
    mode.add_argument("--dark", dest="light", action="store_const", const=False)
    p.add_argument(
        "--pretty",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Re-indent JSON bodies before highlighting (default: on)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover rapisyn.toml)",
    )
    p.add_argument("--debug", action="store_true", help="Dump tokens and colors to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "rapisyn.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _str_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value]
    return []


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    cfg_theme = config.get("theme")
    if not isinstance(cfg_theme, dict):
        cfg_theme = {}
    cfg_output = config.get("output")
    if not isinstance(cfg_output, dict):
        cfg_output = {}

    # Theme selection: config < CLI
    theme_name = args.theme
    if theme_name is None and isinstance(cfg_theme.get("name"), str):
        theme_name = cfg_theme["name"]

    theme_file: Path | None = Path(args.theme_file) if args.theme_file else None
    if theme_file is None and isinstance(cfg_theme.get("file"), str):
        theme_file = Path(cfg_theme["file"])

    # Search directories: config first, then CLI
    theme_dirs = [Path(d) for d in _str_list(cfg_theme.get("dirs"))]
    theme_dirs.extend(Path(d) for d in args.theme_dir)
    extension_dirs = [Path(d) for d in _str_list(cfg_theme.get("extensions"))]
    extension_dirs.extend(Path(d) for d in args.extensions_dir)

    light = args.light
    if light is None and isinstance(cfg_theme.get("light"), bool):
        light = cfg_theme["light"]

    # Output: config < CLI
    kind_name = args.kind
    if kind_name is None and cfg_output.get("kind") in _KIND_CHOICES:
        kind_name = cfg_output["kind"]
    kind = None if kind_name in (None, "auto") else ContentKind(kind_name)

    pretty = True
    if isinstance(cfg_output.get("pretty"), bool):
        pretty = cfg_output["pretty"]
    if args.pretty is not None:
        pretty = args.pretty

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        kind=kind,
        content_type=args.content_type,
        theme_name=theme_name,
        theme_file=theme_file,
        theme_dirs=theme_dirs,
        extension_dirs=extension_dirs,
        light=light,
        pretty=pretty,
        debug=args.debug,
        verbose=args.verbose,
    )


def resolve_colors(options: CliOptions) -> tuple[ColorMap, bool]:
    """Load the requested theme and build its color map.

    Returns the color map and the light flag it was built for. Raises
    ThemeLoadError only for an explicit theme file that cannot be read.
    """
    from rapisyn.loader import (
        ChainedThemeLocator,
        ExtensionThemeLocator,
        FileThemeLocator,
        load_theme,
        read_theme_file,
    )

    doc = None
    if options.theme_file is not None:
        # Surface the formatted parse error for a file the user named
        read_theme_file(options.theme_file)
        doc = load_theme(options.theme_file)
    elif options.theme_name:
        locator = ChainedThemeLocator(
            FileThemeLocator(options.theme_dirs),
            ExtensionThemeLocator(options.extension_dirs),
        )
        doc = locator.locate(options.theme_name)
        if doc is None:
            logger.warning("theme %r not found", options.theme_name)

    is_light = options.light
    if is_light is None:
        is_light = bool(doc is not None and doc.light)

    colors = build_color_map(doc, is_light)
    if (options.theme_file or options.theme_name) and is_default_palette(colors, is_light):
        print("warning: theme colors unavailable, using default palette", file=sys.stderr)
    return colors, is_light


def highlight_file(options: CliOptions) -> str:
    """Read, tokenize, color, and render a response body file to HTML."""
    from rapisyn.content import detect_kind, pretty_json
    from rapisyn.debug import dump_colors, dump_tokens
    from rapisyn.lexer import tokenize
    from rapisyn.render import render_page

    text = options.input_file.read_text(encoding="utf-8", errors="replace")
    kind = options.kind or detect_kind(options.content_type, text)
    if kind is ContentKind.JSON and options.pretty:
        text = pretty_json(text)

    tokens = tokenize(text, kind)
    colors, _ = resolve_colors(options)

    if options.debug:
        dump_tokens(tokens, file=sys.stderr)
        dump_colors(colors, file=sys.stderr)

    return render_page(tokens, colors, title=options.input_file.name)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        options = resolve_options(args)
    except tomllib.TOMLDecodeError as exc:
        print(f"error: invalid config file: {exc}", file=sys.stderr)
        return 2

    try:
        html = highlight_file(options)
    except ThemeLoadError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"error: cannot read {options.input_file}: {exc.strerror or exc}", file=sys.stderr)
        return 1

    if options.output_file:
        try:
            options.output_file.write_text(html, encoding="utf-8")
        except OSError as exc:
            print(f"error: cannot write {options.output_file}: {exc.strerror or exc}", file=sys.stderr)
            return 1
    else:
        sys.stdout.write(html)

    return 0
