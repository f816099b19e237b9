# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Sparse crossword grid built from placed words.

The grid maps (row, col) to the letter placed there and the word that
placed it first. Coordinates are unbounded and may be negative.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from models import Coordinate, PlacedWord


class GridConflictError(Exception):
    """Raised when two words place different letters on the same cell."""

    def __init__(
        self,
        coordinate: Coordinate,
        word: str,
        letter: str,
        existing_word: str,
        existing_letter: str
    ):
        self.coordinate = coordinate
        self.word = word
        self.letter = letter
        self.existing_word = existing_word
        self.existing_letter = existing_letter
        super().__init__(
            f"Conflict at {coordinate}: '{word}' places '{letter}' "
            f"over '{existing_letter}' from '{existing_word}'"
        )


class EmptyGridError(Exception):
    """Raised when connectivity is checked on a grid with no words."""
    pass


@dataclass
class CrosswordGrid:
    """Occupied cells plus the anchor of every word, in input order."""
    cells: Dict[Coordinate, Tuple[str, str]] = field(default_factory=dict)
    anchors: List[Coordinate] = field(default_factory=list)

    def letter_at(self, row: int, col: int) -> str:
        entry = self.cells.get((row, col))
        return entry[0] if entry else ''

    def occupied_count(self) -> int:
        return len(self.cells)

    def is_connected(self) -> bool:
        return is_connected(self.cells, self.anchors)

    def bounds(self) -> Tuple[int, int, int, int]:
        """Return (min_row, min_col, max_row, max_col) of occupied cells."""
        rows = [r for r, _ in self.cells]
        cols = [c for _, c in self.cells]
        return min(rows), min(cols), max(rows), max(cols)

    def to_string(self, show_solution: bool = True) -> str:
        """Render the occupied area, '■' for empty cells."""
        if not self.cells:
            return ""
        min_row, min_col, max_row, max_col = self.bounds()
        lines = []
        for row in range(min_row, max_row + 1):
            line = ""
            for col in range(min_col, max_col + 1):
                letter = self.letter_at(row, col)
                if not letter:
                    line += "■ "
                elif show_solution:
                    line += f"{letter} "
                else:
                    line += "_ "
            lines.append(line.rstrip())
        return "\n".join(lines)


def build_grid(words: Sequence[PlacedWord]) -> CrosswordGrid:
    """
    Replay every word's letters into a grid.

    Matching letters on a shared cell are a valid crossing. The first
    mismatch stops the build and raises GridConflictError.

    Args:
        words: Placed words with valid shape and integer coordinates

    Returns:
        CrosswordGrid with cells and anchors

    Raises:
        GridConflictError: If two words disagree on a cell's letter
    """
    grid = CrosswordGrid()

    for placed in words:
        grid.anchors.append(placed.anchor)
        for letter, cell in zip(placed.word, placed.cells()):
            existing = grid.cells.get(cell)
            if existing is None:
                grid.cells[cell] = (letter, placed.word)
            elif existing[0] != letter:
                raise GridConflictError(
                    coordinate=cell,
                    word=placed.word,
                    letter=letter,
                    existing_word=existing[1],
                    existing_letter=existing[0],
                )

    return grid


def is_connected(
    cells: Dict[Coordinate, Tuple[str, str]],
    anchors: Sequence[Coordinate]
) -> bool:
    """
    Check that every occupied cell is reachable from the first anchor.

    Cells are joined to their four orthogonal neighbours when both are
    occupied, so words that only touch side by side count as connected.

    Raises:
        EmptyGridError: If there are no cells or no anchors
    """
    if not cells or not anchors:
        raise EmptyGridError("No words to check for connectivity")

    start = anchors[0]
    visited = {start}
    queue = deque([start])

    while queue:
        row, col = queue.popleft()
        for dr, dc in [(-1, 0), (1, 0), (0, -1), (0, 1)]:
            neighbour = (row + dr, col + dc)
            if neighbour in cells and neighbour not in visited:
                visited.add(neighbour)
                queue.append(neighbour)

    return len(visited) == len(cells)
