# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Data models for the crossword assessment generator.

Covers the entries proposed by the AI (PlacedWord, TermCandidate), the
generation input and output (GenerationRequest, CrosswordResult) and the
records kept by the assessment store.
"""

import re
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


WORD_PATTERN = re.compile(r'^[A-Z]{3,12}$')
MIN_WORD_LENGTH = 3
MAX_WORD_LENGTH = 12

Coordinate = Tuple[int, int]


class ResponseShapeError(ValueError):
    """Raised when an AI payload does not match the expected structure."""
    pass


class Direction(Enum):
    ACROSS = "across"
    DOWN = "down"

    @classmethod
    def parse(cls, value: Any) -> 'Direction':
        if isinstance(value, Direction):
            return value
        if not isinstance(value, str):
            raise ResponseShapeError(f"Direction must be a string, got {value!r}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ResponseShapeError(
                f"Direction must be 'across' or 'down', got {value!r}"
            )


def is_valid_word(word: Any) -> bool:
    """Check a word against the 3-12 uppercase letter shape."""
    return isinstance(word, str) and WORD_PATTERN.match(word) is not None


def _require(data: Dict[str, Any], key: str, kind: type, context: str) -> Any:
    if key not in data:
        raise ResponseShapeError(f"Missing '{key}' in {context}")
    value = data[key]
    if not isinstance(value, kind):
        raise ResponseShapeError(
            f"'{key}' in {context} must be {kind.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


@dataclass(frozen=True)
class PlacedWord:
    """
    One crossword entry: a word, its clue and the grid position of its
    first letter.

    Word, row and col are kept exactly as received so the validator can
    report a malformed word or non-integer coordinates by name.
    """
    word: Any
    clue: str
    direction: Direction
    row: Any
    col: Any

    @property
    def anchor(self) -> Coordinate:
        return (self.row, self.col)

    def cells(self) -> List[Coordinate]:
        """Coordinates occupied by each letter, in letter order."""
        if self.direction == Direction.ACROSS:
            return [(self.row, self.col + i) for i in range(len(self.word))]
        return [(self.row + i, self.col) for i in range(len(self.word))]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'word': self.word,
            'clue': self.clue,
            'direction': self.direction.value,
            'row': self.row,
            'col': self.col,
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'PlacedWord':
        if not isinstance(data, dict):
            raise ResponseShapeError(
                f"Question entry must be an object, got {type(data).__name__}"
            )
        for key in ('word', 'row', 'col'):
            if key not in data:
                raise ResponseShapeError(f"Missing '{key}' in question entry")
        return cls(
            word=data['word'],
            clue=_require(data, 'clue', str, 'question entry'),
            direction=Direction.parse(data.get('direction')),
            row=data['row'],
            col=data['col'],
        )


@dataclass(frozen=True)
class TermCandidate:
    """A term and short definition extracted from the source material."""
    word: str
    definition: str

    @classmethod
    def from_dict(cls, data: Any) -> 'TermCandidate':
        if not isinstance(data, dict):
            raise ResponseShapeError(
                f"Term entry must be an object, got {type(data).__name__}"
            )
        word = _require(data, 'word', str, 'term entry')
        definition = _require(data, 'definition', str, 'term entry')
        return cls(word=word.strip().upper(), definition=definition.strip())


def parse_terms(payload: Any) -> List[TermCandidate]:
    """
    Parse a term extraction payload into candidates.

    Accepts either ``{"terms": [...]}`` or a bare list. Terms that do not
    fit the word shape are dropped; duplicates keep their first definition.
    """
    if isinstance(payload, dict):
        if 'terms' not in payload:
            raise ResponseShapeError("Missing 'terms' in extraction response")
        payload = payload['terms']
    if not isinstance(payload, list):
        raise ResponseShapeError(
            f"Terms must be a list, got {type(payload).__name__}"
        )

    terms: List[TermCandidate] = []
    seen = set()
    for item in payload:
        term = TermCandidate.from_dict(item)
        if not is_valid_word(term.word) or term.word in seen:
            continue
        seen.add(term.word)
        terms.append(term)
    return terms


@dataclass(frozen=True)
class SourceDocument:
    """An attached source document: raw bytes plus declared MIME type."""
    data: bytes
    mime_type: str
    filename: Optional[str] = None


@dataclass(frozen=True)
class GenerationRequest:
    """Input to one crossword generation run."""
    topic: str
    content: str
    word_count: int
    document: Optional[SourceDocument] = None


@dataclass(frozen=True)
class CrosswordResult:
    """Title, subject and the ordered list of placed entries."""
    title: str
    subject: str
    questions: Tuple[PlacedWord, ...] = ()

    def truncated(self, count: int) -> 'CrosswordResult':
        return CrosswordResult(
            title=self.title,
            subject=self.subject,
            questions=tuple(self.questions[:count]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'subject': self.subject,
            'questions': [q.to_dict() for q in self.questions],
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'CrosswordResult':
        if not isinstance(data, dict):
            raise ResponseShapeError(
                f"Crossword response must be an object, got {type(data).__name__}"
            )
        questions = _require(data, 'questions', list, 'crossword response')
        return cls(
            title=_require(data, 'title', str, 'crossword response'),
            subject=_require(data, 'subject', str, 'crossword response'),
            questions=tuple(PlacedWord.from_dict(q) for q in questions),
        )


# Store records

@dataclass
class Assessment:
    id: str
    title: str
    subject: str
    faculty_name: str
    deadline: Optional[str] = None
    class_section: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Question:
    id: str
    assessment_id: str
    word: str
    clue: str
    direction: str
    row: int
    col: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StudentResponse:
    """A submitted attempt at an assessment."""
    id: str
    assessment_id: str
    roll_number: str
    score: int
    total_questions: int
    answers: Dict[str, str] = field(default_factory=dict)
    student_name: Optional[str] = None
    submitted_at: Optional[str] = None
    time_taken: int = 0  # seconds

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
