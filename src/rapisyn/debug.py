"""--debug token and color dump to stderr."""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from typing import TextIO

from rapisyn.colors import SemanticSlot
from rapisyn.tokens import Token


def dump_tokens(tokens: Sequence[Token], *, file: TextIO = sys.stderr) -> None:
    """Print one line per token: offset, class, and the repr of its text."""
    file.write(f"Tokens ({len(tokens)})\n")
    offset = 0
    width = max((len(t.cls.name) for t in tokens), default=0)
    for tok in tokens:
        file.write(f"  {offset:>6}  {tok.cls.name:<{width}}  {tok.text!r}\n")
        offset += len(tok.text)


def dump_colors(colors: Mapping[SemanticSlot, str], *, file: TextIO = sys.stderr) -> None:
    """Print the resolved color of every slot."""
    file.write("Colors\n")
    for slot in SemanticSlot:
        file.write(f"  {slot.value:<12} {colors.get(slot, '-')}\n")
