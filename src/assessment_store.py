# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Record store for assessments, their questions and student responses.

Records are kept as three lists and written to a single YAML file after
every change. Without a path the store lives in memory only.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from models import Assessment, PlacedWord, Question, StudentResponse


logger = logging.getLogger(__name__)

STORE_VERSION = "1.0"


class StoreError(Exception):
    """Raised when the store file cannot be read or written."""
    pass


class DuplicateResponseError(StoreError):
    """Raised when a roll number already answered an assessment."""

    def __init__(self, assessment_id: str, roll_number: str):
        self.assessment_id = assessment_id
        self.roll_number = roll_number
        super().__init__("You have already submitted this assessment.")


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AssessmentStore:
    """
    Usage:
        store = AssessmentStore('output/assessments.yaml')
        assessment_id = store.create_assessment(
            title="Cells", subject="Biology", faculty_name="Dr. Rao",
            questions=result.questions,
        )
        assessment, questions = store.get_assessment(assessment_id)
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self.assessments: List[Assessment] = []
        self.questions: List[Question] = []
        self.responses: List[StudentResponse] = []

        if self.path and self.path.exists():
            self._load()

    def _load(self):
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise StoreError(f"Invalid YAML in store file {self.path}: {e}")

        if not isinstance(data, dict):
            raise StoreError(
                f"Store file must contain a YAML mapping, got {type(data)}"
            )

        try:
            self.assessments = [Assessment(**a) for a in data.get('assessments', [])]
            self.questions = [Question(**q) for q in data.get('questions', [])]
            self.responses = [StudentResponse(**r) for r in data.get('responses', [])]
        except TypeError as e:
            raise StoreError(f"Malformed record in store file {self.path}: {e}")

        logger.debug(
            f"Loaded {len(self.assessments)} assessments, "
            f"{len(self.responses)} responses from {self.path}"
        )

    def _save(self):
        if self.path is None:
            return

        data = {
            'version': STORE_VERSION,
            'assessments': [a.to_dict() for a in self.assessments],
            'questions': [q.to_dict() for q in self.questions],
            'responses': [r.to_dict() for r in self.responses],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(
                data, f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )
        tmp_path.replace(self.path)

    def create_assessment(
        self,
        title: str,
        subject: str,
        faculty_name: str,
        questions: Sequence[PlacedWord],
        deadline: Optional[str] = None,
        class_section: Optional[str] = None
    ) -> str:
        """
        Store an assessment with its questions.

        Returns:
            The generated assessment id
        """
        assessment = Assessment(
            id=_new_id(),
            title=title,
            subject=subject,
            faculty_name=faculty_name,
            deadline=deadline,
            class_section=class_section,
            created_at=_now(),
        )
        self.assessments.append(assessment)
        for placed in questions:
            self.questions.append(Question(
                id=_new_id(),
                assessment_id=assessment.id,
                word=placed.word,
                clue=placed.clue,
                direction=placed.direction.value,
                row=placed.row,
                col=placed.col,
            ))
        self._save()

        logger.info(
            f"Stored assessment {assessment.id} '{title}' "
            f"with {len(questions)} questions"
        )
        return assessment.id

    def get_assessment(
        self,
        assessment_id: str
    ) -> Optional[Tuple[Assessment, List[Question]]]:
        """Fetch an assessment and its questions, or None if unknown."""
        for assessment in self.assessments:
            if assessment.id == assessment_id:
                questions = [
                    q for q in self.questions if q.assessment_id == assessment_id
                ]
                return assessment, questions
        return None

    def get_assessments_by_faculty(self, faculty_name: str) -> List[Assessment]:
        """Assessments whose faculty name matches, ignoring case."""
        wanted = faculty_name.lower()
        return [a for a in self.assessments if a.faculty_name.lower() == wanted]

    def submit_response(
        self,
        assessment_id: str,
        roll_number: str,
        score: int,
        total_questions: int,
        answers: Optional[Dict[str, str]] = None,
        student_name: Optional[str] = None,
        time_taken: int = 0
    ) -> str:
        """
        Store a student's response.

        Returns:
            The generated response id

        Raises:
            DuplicateResponseError: If the roll number already submitted
        """
        for existing in self.responses:
            if (existing.assessment_id == assessment_id
                    and existing.roll_number == roll_number):
                raise DuplicateResponseError(assessment_id, roll_number)

        response = StudentResponse(
            id=_new_id(),
            assessment_id=assessment_id,
            roll_number=roll_number,
            score=score,
            total_questions=total_questions,
            answers=dict(answers or {}),
            student_name=student_name,
            submitted_at=_now(),
            time_taken=time_taken,
        )
        self.responses.append(response)
        self._save()
        return response.id

    def get_responses(self, assessment_id: str) -> List[StudentResponse]:
        return [r for r in self.responses if r.assessment_id == assessment_id]

    def summary(self) -> Dict[str, Any]:
        return {
            'assessments': len(self.assessments),
            'questions': len(self.questions),
            'responses': len(self.responses),
        }
