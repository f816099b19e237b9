# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
AI call limiter for the assessment generator.

Bounds how many requests each prompt type may send to the AI so a
generation run can never loop past its retry budget.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class CallRecord:
    """Record of a single AI call."""
    prompt_type: str
    timestamp: float
    tokens_used: int = 0
    success: bool = True


class AILimitError(Exception):
    """Raised when AI callback limit is reached."""

    def __init__(self, prompt_type: str, limit: int):
        self.prompt_type = prompt_type
        self.limit = limit
        super().__init__(
            f"AI limit reached for '{prompt_type}': {limit} calls"
        )


@dataclass
class AICallbackLimiter:
    """
    Tracks and enforces AI call limits.

    Must be checked before every AI call.

    Usage:
        limiter = AICallbackLimiter(max_total=10, limits={'crossword_layout': 3})

        limiter.check('crossword_layout')
        response = send_request()
        limiter.record_call('crossword_layout', tokens_used=1200)
    """
    max_total: int = 10
    limits: Dict[str, int] = field(default_factory=dict)
    counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    total_calls: int = 0
    total_tokens: int = 0
    call_history: List[CallRecord] = field(default_factory=list)

    def _limit_for(self, prompt_type: str) -> int:
        return min(self.limits.get(prompt_type, self.max_total), self.max_total)

    def can_call(self, prompt_type: str) -> bool:
        """
        Check if an AI call is allowed.

        Args:
            prompt_type: Type of prompt (e.g., 'term_extraction')

        Returns:
            True if call is allowed, False if limit reached
        """
        return (
            self.total_calls < self.max_total
            and self.counts.get(prompt_type, 0) < self._limit_for(prompt_type)
        )

    def check(self, prompt_type: str) -> None:
        """Raise AILimitError if the next call of this type is not allowed."""
        if not self.can_call(prompt_type):
            raise AILimitError(prompt_type, self._limit_for(prompt_type))

    def record_call(
        self,
        prompt_type: str,
        tokens_used: int = 0,
        success: bool = True
    ) -> None:
        """Record that an AI call was made."""
        self.counts[prompt_type] += 1
        self.total_calls += 1
        self.total_tokens += tokens_used
        self.call_history.append(CallRecord(
            prompt_type=prompt_type,
            timestamp=time.time(),
            tokens_used=tokens_used,
            success=success,
        ))

    def get_remaining(self, prompt_type: Optional[str] = None) -> int:
        """Remaining calls overall, or for one prompt type."""
        total_remaining = self.max_total - self.total_calls
        if prompt_type:
            used = self.counts.get(prompt_type, 0)
            type_remaining = self._limit_for(prompt_type) - used
            return min(type_remaining, total_remaining)
        return total_remaining

    def get_stats(self) -> Dict[str, Any]:
        """Usage statistics for logging."""
        successful = sum(1 for c in self.call_history if c.success)
        return {
            'total_calls': self.total_calls,
            'total_tokens': self.total_tokens,
            'remaining_calls': self.get_remaining(),
            'calls_by_type': dict(self.counts),
            'remaining_by_type': {
                prompt_type: self.get_remaining(prompt_type)
                for prompt_type in self.limits
            },
            'success_rate': (
                successful / len(self.call_history) if self.call_history else 1.0
            ),
        }
