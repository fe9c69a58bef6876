"""Error types with formatted source context."""

from __future__ import annotations

from pathlib import Path


class RapisynError(Exception):
    """Base class for errors raised outside the pure highlighting core."""


class ThemeLoadError(RapisynError):
    """Raised when a theme file cannot be read or parsed.

    ``line`` and ``column`` are 1-based and refer to the text after JSONC
    comments were stripped, which keeps line numbers intact.
    """

    def __init__(
        self,
        message: str,
        path: Path | str,
        source: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.message = message
        self.path = Path(path)
        self.source = source
        self.line = line
        self.column = column
        super().__init__(self.format())

    def format(self) -> str:
        if self.line is None:
            return f"error: {self.message}\n  --> {self.path}"

        col = self.column or 1
        source_line = ""
        if self.source is not None:
            lines = self.source.splitlines()
            if 0 <= self.line - 1 < len(lines):
                source_line = lines[self.line - 1]

        line_num = str(self.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {self.path}:{self.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {' ' * (col - 1)}^"
        )
