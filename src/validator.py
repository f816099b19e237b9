# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Crossword Layout Validator

Checks that a generated crossword is:
1. Well formed (every word is 3-12 uppercase letters at integer coordinates)
2. Collision free (crossing words agree on shared letters)
3. Connected (all letters form a single grid)

Error messages are written to be sent back to the AI as fix requests,
so they name the offending words and coordinates.
"""

import logging
from typing import Any, Dict

from models import CrosswordResult, is_valid_word
from grid import CrosswordGrid, GridConflictError, build_grid, is_connected


logger = logging.getLogger(__name__)


class CrosswordValidationError(Exception):
    """Base class for layout validation failures."""
    pass


class EmptyCrosswordError(CrosswordValidationError):
    """Raised when the crossword has no words."""

    def __init__(self):
        super().__init__("No words generated.")


class WordShapeError(CrosswordValidationError):
    """Raised when a word is not 3-12 uppercase letters."""

    def __init__(self, word: Any):
        self.word = word
        super().__init__(
            f"Invalid word '{word}': words must be 3-12 uppercase letters (A-Z) "
            f"with no spaces or punctuation."
        )


class CoordinateError(CrosswordValidationError):
    """Raised when a word's row or col is not an integer."""

    def __init__(self, word: Any, row: Any, col: Any):
        self.word = word
        super().__init__(
            f"Invalid coordinates for word '{word}': row and col must be "
            f"integers (got row={row!r}, col={col!r})."
        )


class GridConflictValidationError(CrosswordValidationError):
    """Raised when two words place different letters on one cell."""

    def __init__(self, conflict: GridConflictError):
        self.conflict = conflict
        row, col = conflict.coordinate
        super().__init__(
            f"Letter conflict at (row {row}, col {col}): "
            f"'{conflict.word}' places '{conflict.letter}' but "
            f"'{conflict.existing_word}' already has '{conflict.existing_letter}' "
            f"there. Crossing words must share the same letter."
        )


class DisconnectedGridError(CrosswordValidationError):
    """Raised when the words do not form one connected grid."""

    def __init__(self):
        super().__init__(
            "Grid is not fully connected: some words are isolated from the rest. "
            "Every word must intersect at least one other word so that all "
            "words form a single connected grid."
        )


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_crossword(result: CrosswordResult) -> CrosswordGrid:
    """
    Validate a crossword layout.

    Args:
        result: The generated crossword

    Returns:
        The built grid (callers that only need pass/fail can ignore it)

    Raises:
        CrosswordValidationError: Subclass describing the first problem found
    """
    if not result.questions:
        raise EmptyCrosswordError()

    for placed in result.questions:
        if not is_valid_word(placed.word):
            raise WordShapeError(placed.word)
        if not _is_integer(placed.row) or not _is_integer(placed.col):
            raise CoordinateError(placed.word, placed.row, placed.col)

    try:
        grid = build_grid(result.questions)
    except GridConflictError as e:
        raise GridConflictValidationError(e) from e

    if not is_connected(grid.cells, grid.anchors):
        raise DisconnectedGridError()

    logger.debug(
        f"Validated {len(result.questions)} words over "
        f"{grid.occupied_count()} cells"
    )
    return grid


def grid_stats(grid: CrosswordGrid) -> Dict[str, Any]:
    """Summary numbers for a validated grid, used in logs and CLI output."""
    min_row, min_col, max_row, max_col = grid.bounds()
    return {
        'words': len(grid.anchors),
        'occupied_cells': grid.occupied_count(),
        'height': max_row - min_row + 1,
        'width': max_col - min_col + 1,
    }
