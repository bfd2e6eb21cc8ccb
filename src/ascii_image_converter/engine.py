from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np


@dataclass
class AsciiGrid:
    chars: list[list[str]]  # one list of characters per row, top to bottom
    colours: np.ndarray | None  # (rows, cols, 3) uint8 mean RGB per character, or None

    @property
    def rows(self) -> int:
        return len(self.chars)

    @property
    def cols(self) -> int:
        return len(self.chars[0]) if self.chars else 0

    def cells(self) -> Iterator[list[tuple[str, tuple[int, int, int] | None]]]:
        """Yield each row as (char, colour) pairs; colour is None when not carried."""
        for r, row in enumerate(self.chars):
            if self.colours is None:
                yield [(char, None) for char in row]
            else:
                yield [(char, tuple(int(v) for v in self.colours[r, c])) for c, char in enumerate(row)]


def assemble_lines(grid: AsciiGrid) -> list[str]:
    """Join each row's characters into one line."""
    return ["".join(row) for row in grid.chars]


def format_colour(grid: AsciiGrid) -> list[str]:
    """Lines with each character wrapped in an ANSI truecolor foreground escape."""
    if grid.colours is None:
        return assemble_lines(grid)
    out = []
    for row in grid.cells():
        parts = [f"\033[38;2;{r};{g};{b}m{char}" for char, (r, g, b) in row]
        parts.append("\033[0m")
        out.append("".join(parts))
    return out
