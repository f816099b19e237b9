# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""Unit tests for ai_limiter module."""

import os
import sys
import unittest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ai_limiter import AICallbackLimiter, AILimitError


class TestAICallbackLimiter(unittest.TestCase):
    """Tests for AICallbackLimiter class."""

    def test_default_limits(self):
        """Test default limiter limits."""
        limiter = AICallbackLimiter()

        self.assertEqual(limiter.max_total, 10)
        self.assertEqual(limiter.total_calls, 0)
        self.assertEqual(limiter.total_tokens, 0)

    def test_can_call_within_limit(self):
        """Test can_call returns True when within limits."""
        limiter = AICallbackLimiter(max_total=10)

        self.assertTrue(limiter.can_call('crossword_layout'))

    def test_can_call_at_total_limit(self):
        """Test can_call returns False when the total limit is reached."""
        limiter = AICallbackLimiter(max_total=2)

        limiter.record_call('term_extraction')
        limiter.record_call('crossword_layout')

        self.assertFalse(limiter.can_call('crossword_layout'))

    def test_can_call_type_limit(self):
        """Test can_call respects type-specific limits."""
        limiter = AICallbackLimiter(
            max_total=10,
            limits={'term_extraction': 1, 'crossword_layout': 3}
        )

        limiter.record_call('term_extraction')

        self.assertFalse(limiter.can_call('term_extraction'))
        self.assertTrue(limiter.can_call('crossword_layout'))

    def test_type_limit_capped_by_total(self):
        limiter = AICallbackLimiter(max_total=2, limits={'crossword_layout': 5})

        self.assertEqual(limiter.get_remaining('crossword_layout'), 2)

    def test_check_raises(self):
        limiter = AICallbackLimiter(limits={'term_extraction': 1})
        limiter.record_call('term_extraction')

        with self.assertRaises(AILimitError) as ctx:
            limiter.check('term_extraction')

        self.assertEqual(ctx.exception.prompt_type, 'term_extraction')
        self.assertEqual(ctx.exception.limit, 1)

    def test_record_call(self):
        """Test recording calls updates counters."""
        limiter = AICallbackLimiter()

        limiter.record_call('crossword_layout', tokens_used=100)
        limiter.record_call('crossword_layout', tokens_used=150, success=False)

        self.assertEqual(limiter.total_calls, 2)
        self.assertEqual(limiter.total_tokens, 250)
        self.assertEqual(limiter.counts['crossword_layout'], 2)
        self.assertFalse(limiter.call_history[1].success)

    def test_get_stats(self):
        limiter = AICallbackLimiter(max_total=5)
        limiter.record_call('term_extraction', tokens_used=50)
        limiter.record_call('crossword_layout', tokens_used=70, success=False)

        stats = limiter.get_stats()

        self.assertEqual(stats['total_calls'], 2)
        self.assertEqual(stats['total_tokens'], 120)
        self.assertEqual(stats['remaining_calls'], 3)
        self.assertEqual(stats['calls_by_type'], {'term_extraction': 1, 'crossword_layout': 1})
        self.assertEqual(stats['success_rate'], 0.5)

    def test_get_stats_remaining_by_type(self):
        limiter = AICallbackLimiter(
            max_total=4,
            limits={'term_extraction': 1, 'crossword_layout': 3}
        )
        limiter.record_call('term_extraction')
        limiter.record_call('crossword_layout')

        stats = limiter.get_stats()

        self.assertEqual(
            stats['remaining_by_type'],
            {'term_extraction': 0, 'crossword_layout': 2}
        )


if __name__ == '__main__':
    unittest.main()
