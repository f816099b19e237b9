# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Crossword generation orchestrator.

Runs one generation request through two AI stages:
1. Term extraction (once): key terms and definitions from the source
2. Layout attempts (bounded): a crossword built from those terms, validated
   after every attempt, with the validator's error sent back as a fix
   request on the next attempt

States:
    EXTRACTING -> LAYOUT_ATTEMPT(n) -> SUCCESS
                                    -> LAYOUT_ATTEMPT(n + 1)
                                    -> EXHAUSTED
    EXTRACTING -> FAILED (extraction errors are never retried)
"""

import logging
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ai_client import (
    AIClientError, AICrosswordClient, AIResponseFormatError,
    CROSSWORD_LAYOUT, TERM_EXTRACTION,
)
from ai_limiter import AICallbackLimiter, AILimitError
from config import GenerationConfig
from models import (
    CrosswordResult, GenerationRequest, ResponseShapeError, TermCandidate,
    parse_terms,
)
from validator import CrosswordValidationError, validate_crossword


INVALID_JSON_FEEDBACK = (
    "The previous response was invalid JSON. Return valid JSON only, "
    "matching the requested structure exactly."
)


class GenerationState(Enum):
    EXTRACTING = "extracting"
    LAYOUT_ATTEMPT = "layout_attempt"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class ExtractionError(Exception):
    """Raised when term extraction fails. Not retried."""
    pass


class LayoutTimeoutError(Exception):
    """Raised when an AI call does not finish within the attempt timeout."""
    pass


class GenerationExhaustedError(Exception):
    """Raised when every layout attempt failed."""

    def __init__(self, attempts: int, last_error: str):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Crossword generation failed after {attempts} attempts. "
            f"Last error: {last_error}"
        )


@dataclass
class AttemptRecord:
    """Outcome of one layout attempt."""
    number: int
    feedback_sent: Optional[str] = None
    error: Optional[str] = None
    duration: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class GenerationRun:
    """
    Observable state of one generation request.

    Created fresh by every generate() call and handed to the transition
    callback, so nothing is shared between requests.
    """
    request: GenerationRequest
    state: GenerationState = GenerationState.EXTRACTING
    attempt: int = 0
    terms: List[TermCandidate] = field(default_factory=list)
    feedback: Optional[str] = None
    last_error: Optional[str] = None
    attempts: List[AttemptRecord] = field(default_factory=list)
    result: Optional[CrosswordResult] = None
    call_stats: Dict[str, Any] = field(default_factory=dict)


class CrosswordOrchestrator:
    """
    Drives term extraction and the validate-and-retry layout loop.

    Usage:
        orchestrator = CrosswordOrchestrator(ai_client, GenerationConfig())
        result = orchestrator.generate(GenerationRequest(
            topic="Photosynthesis", content=text, word_count=10
        ))
    """

    def __init__(
        self,
        ai_client: AICrosswordClient,
        settings: Optional[GenerationConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_transition: Optional[Callable[[GenerationRun], None]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            ai_client: Client used for both AI stages
            settings: Retry bound, timeouts and limits
            sleep: Backoff function (replaceable in tests)
            on_transition: Called with the run after every state change
            logger: Logger instance (uses module logger if not provided)
        """
        self.ai = ai_client
        self.settings = settings or GenerationConfig()
        self._sleep = sleep
        self.on_transition = on_transition
        self.logger = logger if logger else logging.getLogger(__name__)

    def generate(self, request: GenerationRequest) -> CrosswordResult:
        """
        Generate a validated crossword for the request.

        Returns:
            CrosswordResult with at most request.word_count entries

        Raises:
            ExtractionError: If term extraction fails
            GenerationExhaustedError: If every layout attempt fails
        """
        run = GenerationRun(request=request)
        limiter = AICallbackLimiter(
            max_total=self.settings.max_ai_callbacks,
            limits={
                TERM_EXTRACTION: 1,
                CROSSWORD_LAYOUT: self.settings.max_retries,
            },
        )

        self.logger.info(
            f"Generating crossword: topic='{request.topic}', "
            f"words={request.word_count}, "
            f"document={'yes' if request.document else 'no'}"
        )

        self._transition(run, GenerationState.EXTRACTING)
        try:
            run.terms = self._extract_terms(run, limiter)
        except ExtractionError as e:
            run.last_error = str(e)
            self._record_stats(run, limiter)
            self._transition(run, GenerationState.FAILED)
            raise
        self.logger.info(f"   - {len(run.terms)} terms extracted")

        max_retries = self.settings.max_retries
        for number in range(1, max_retries + 1):
            run.attempt = number
            self._transition(run, GenerationState.LAYOUT_ATTEMPT)

            record = AttemptRecord(number=number, feedback_sent=run.feedback)
            started = time.monotonic()
            try:
                result = self._attempt_layout(run, limiter)
            except AILimitError as e:
                record.error = str(e)
                run.attempts.append(record)
                run.last_error = record.error
                self.logger.error(f"   X Attempt {number}: {e}")
                break
            except (AIResponseFormatError, ResponseShapeError) as e:
                record.error = f"Invalid response format: {e}"
                run.feedback = INVALID_JSON_FEEDBACK
            except CrosswordValidationError as e:
                record.error = str(e)
                run.feedback = record.error
            except (AIClientError, LayoutTimeoutError) as e:
                record.error = str(e)
                run.feedback = record.error
            else:
                record.duration = time.monotonic() - started
                run.attempts.append(record)
                run.result = result
                self._record_stats(run, limiter)
                self._transition(run, GenerationState.SUCCESS)
                self.logger.info(
                    f"Crossword generated on attempt {number}/{max_retries}: "
                    f"'{result.title}' with {len(result.questions)} words"
                )
                return result

            record.duration = time.monotonic() - started
            run.attempts.append(record)
            run.last_error = record.error
            self.logger.warning(
                f"   X Attempt {number}/{max_retries} failed: {record.error}"
            )

            if number < max_retries:
                self._sleep(self.settings.retry_backoff_seconds)

        self._record_stats(run, limiter)
        self._transition(run, GenerationState.EXHAUSTED)
        self.logger.error(
            f"Crossword generation exhausted after {len(run.attempts)} attempts"
        )
        raise GenerationExhaustedError(len(run.attempts), run.last_error or "unknown error")

    def _extract_terms(
        self,
        run: GenerationRun,
        limiter: AICallbackLimiter
    ) -> List[TermCandidate]:
        """Stage 1: one AI call for terms and definitions."""
        request = run.request
        term_count = request.word_count + self.settings.extra_terms
        content = request.content[:self.settings.max_source_chars]

        try:
            response = self._call_ai(
                limiter,
                TERM_EXTRACTION,
                self.ai.extract_terms,
                topic=request.topic,
                content=content,
                term_count=term_count,
                document=request.document,
            )
            terms = parse_terms(response.payload)
        except (AIClientError, AILimitError, LayoutTimeoutError,
                ResponseShapeError) as e:
            raise ExtractionError(f"Term extraction failed: {e}") from e

        if not terms:
            raise ExtractionError(
                "Term extraction failed: no usable terms (3-12 letters, A-Z) "
                "were found in the source material"
            )
        return terms

    def _attempt_layout(
        self,
        run: GenerationRun,
        limiter: AICallbackLimiter
    ) -> CrosswordResult:
        """
        Stage 2: one AI call, parse, validate, truncate.

        Raises the per-attempt error on failure.
        """
        count = run.request.word_count
        response = self._call_ai(
            limiter,
            CROSSWORD_LAYOUT,
            self.ai.generate_layout,
            topic=run.request.topic,
            terms=run.terms,
            word_count=count,
            feedback=run.feedback,
        )

        result = CrosswordResult.from_dict(response.payload)
        validate_crossword(result)

        produced = len(result.questions)
        if produced < count:
            self.logger.warning(
                f"   - AI returned {produced} words, {count} requested"
            )
            return result

        if produced > count:
            truncated = result.truncated(count)
            try:
                validate_crossword(truncated)
            except CrosswordValidationError as e:
                raise CrosswordValidationError(
                    f"Returned {produced} words but exactly {count} were "
                    f"requested, and keeping only the first {count} breaks "
                    f"the grid: {e}"
                ) from e
            self.logger.info(f"   - Truncated {produced} words to {count}")
            return truncated

        return result

    def _call_ai(
        self,
        limiter: AICallbackLimiter,
        prompt_type: str,
        func: Callable[..., Any],
        **kwargs
    ) -> Any:
        """
        Run one AI call against the attempt timeout.

        The call runs on a daemon thread. If it does not finish in time the
        thread is abandoned, any late result is discarded, and the thread
        never keeps the process from exiting.
        """
        limiter.check(prompt_type)
        timeout = self.settings.attempt_timeout_seconds

        future: Future = Future()

        def worker():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(func(**kwargs))
            except BaseException as e:
                future.set_exception(e)

        threading.Thread(target=worker, name=prompt_type, daemon=True).start()
        try:
            response = future.result(timeout=timeout)
        except FuturesTimeoutError:
            limiter.record_call(prompt_type, success=False)
            raise LayoutTimeoutError(
                f"AI request '{prompt_type}' timed out after {timeout:g} seconds"
            )
        except Exception:
            limiter.record_call(prompt_type, success=False)
            raise

        limiter.record_call(prompt_type, tokens_used=response.tokens_used)
        return response

    def _record_stats(self, run: GenerationRun, limiter: AICallbackLimiter) -> None:
        run.call_stats = limiter.get_stats()
        self.logger.info(f"   AI calls: {run.call_stats}")

    def _transition(self, run: GenerationRun, state: GenerationState) -> None:
        run.state = state
        if state == GenerationState.LAYOUT_ATTEMPT:
            self.logger.info(
                f"State: {state.name} {run.attempt}/{self.settings.max_retries}"
            )
        else:
            self.logger.info(f"State: {state.name}")
        if self.on_transition:
            self.on_transition(run)
