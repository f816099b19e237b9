# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""Unit tests for grid module."""

import os
import sys
import unittest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from grid import CrosswordGrid, EmptyGridError, GridConflictError, build_grid, is_connected
from models import Direction, PlacedWord


def across(word, row, col):
    return PlacedWord(word=word, clue=f"clue for {word}", direction=Direction.ACROSS, row=row, col=col)


def down(word, row, col):
    return PlacedWord(word=word, clue=f"clue for {word}", direction=Direction.DOWN, row=row, col=col)


class TestBuildGrid(unittest.TestCase):
    """Tests for build_grid."""

    def test_crossing_words_share_cell(self):
        """CODE across and OPEN down share the O at (0, 1)."""
        grid = build_grid([across("CODE", 0, 0), down("OPEN", 0, 1)])

        self.assertEqual(grid.occupied_count(), 7)
        self.assertEqual(grid.letter_at(0, 1), "O")
        self.assertEqual(grid.letter_at(3, 1), "N")
        self.assertEqual(grid.anchors, [(0, 0), (0, 1)])

    def test_first_writer_kept_on_shared_cell(self):
        """A matching crossing leaves the first word as the cell owner."""
        grid = build_grid([across("CODE", 0, 0), down("OPEN", 0, 1)])

        self.assertEqual(grid.cells[(0, 1)], ("O", "CODE"))

    def test_conflict_raises(self):
        """Different letters on one cell raise GridConflictError."""
        with self.assertRaises(GridConflictError) as ctx:
            build_grid([across("CAT", 0, 0), down("DOG", 0, 0)])

        error = ctx.exception
        self.assertEqual(error.coordinate, (0, 0))
        self.assertEqual(error.word, "DOG")
        self.assertEqual(error.letter, "D")
        self.assertEqual(error.existing_word, "CAT")
        self.assertEqual(error.existing_letter, "C")

    def test_negative_coordinates_allowed(self):
        """Coordinates are unbounded."""
        grid = build_grid([across("CAT", -2, -5)])

        self.assertEqual(grid.letter_at(-2, -3), "T")
        self.assertEqual(grid.bounds(), (-2, -5, -2, -3))

    def test_empty_input(self):
        """No words builds an empty grid."""
        grid = build_grid([])

        self.assertEqual(grid.occupied_count(), 0)
        self.assertEqual(grid.anchors, [])


class TestIsConnected(unittest.TestCase):
    """Tests for connectivity checking."""

    def test_crossing_words_connected(self):
        grid = build_grid([across("CODE", 0, 0), down("OPEN", 0, 1)])

        self.assertTrue(grid.is_connected())

    def test_distant_words_disconnected(self):
        grid = build_grid([across("CAT", 0, 0), across("DOG", 10, 10)])

        self.assertFalse(grid.is_connected())

    def test_touching_words_connected(self):
        """Side-by-side words with no shared cell still count as connected."""
        grid = build_grid([across("CAT", 0, 0), across("DOG", 0, 3)])

        self.assertTrue(grid.is_connected())

    def test_diagonal_words_disconnected(self):
        """Diagonal neighbours are not joined."""
        grid = build_grid([across("CAT", 0, 0), across("DOG", 1, 3)])

        self.assertFalse(grid.is_connected())

    def test_single_word_connected(self):
        grid = build_grid([down("OPEN", 4, 4)])

        self.assertTrue(grid.is_connected())

    def test_empty_raises(self):
        with self.assertRaises(EmptyGridError):
            is_connected({}, [])

    def test_cells_without_anchors_raise(self):
        with self.assertRaises(EmptyGridError):
            is_connected({(0, 0): ("C", "CAT")}, [])


class TestGridRendering(unittest.TestCase):
    """Tests for CrosswordGrid.to_string."""

    def test_solution_rendering(self):
        grid = build_grid([across("CODE", 0, 0), down("OPEN", 0, 1)])

        lines = grid.to_string().split("\n")

        self.assertEqual(len(lines), 4)
        self.assertEqual(lines[0], "C O D E")
        self.assertEqual(lines[1], "■ P ■ ■")

    def test_blank_rendering(self):
        grid = build_grid([across("CAT", 0, 0)])

        self.assertEqual(grid.to_string(show_solution=False), "_ _ _")

    def test_empty_grid_renders_nothing(self):
        self.assertEqual(CrosswordGrid().to_string(), "")


if __name__ == '__main__':
    unittest.main()
