# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""Unit tests for assessment_store module."""

import os
import shutil
import sys
import tempfile
import unittest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from assessment_store import AssessmentStore, DuplicateResponseError, StoreError
from models import Direction, PlacedWord


QUESTIONS = (
    PlacedWord("CODE", "Program text", Direction.ACROSS, 0, 0),
    PlacedWord("OPEN", "Not closed", Direction.DOWN, 0, 1),
)


class TestAssessmentStore(unittest.TestCase):
    """Tests for AssessmentStore."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, 'records', 'assessments.yaml')
        self.store = AssessmentStore(self.path)

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def create(self, store=None, faculty="Dr. Rao"):
        return (store or self.store).create_assessment(
            title="Networking Basics",
            subject="Computer Science",
            faculty_name=faculty,
            questions=QUESTIONS,
            deadline="2026-11-01T17:00:00",
            class_section="B2",
        )

    def test_create_and_fetch(self):
        assessment_id = self.create()

        assessment, questions = self.store.get_assessment(assessment_id)

        self.assertEqual(assessment.title, "Networking Basics")
        self.assertEqual(assessment.class_section, "B2")
        self.assertIsNotNone(assessment.created_at)
        self.assertEqual([q.word for q in questions], ["CODE", "OPEN"])
        self.assertEqual(questions[1].direction, "down")
        self.assertTrue(all(q.assessment_id == assessment_id for q in questions))

    def test_unknown_assessment(self):
        self.assertIsNone(self.store.get_assessment("missing"))

    def test_ids_are_unique(self):
        self.assertNotEqual(self.create(), self.create())

    def test_faculty_lookup_ignores_case(self):
        self.create(faculty="Dr. Rao")
        self.create(faculty="Prof. Iyer")

        found = self.store.get_assessments_by_faculty("DR. RAO")

        self.assertEqual(len(found), 1)
        self.assertEqual(found[0].faculty_name, "Dr. Rao")
        self.assertEqual(self.store.get_assessments_by_faculty("Dr. Ra"), [])

    def test_submit_response(self):
        assessment_id = self.create()

        response_id = self.store.submit_response(
            assessment_id, "21CS042", score=1, total_questions=2,
            answers={"1": "CODE", "2": "OPAL"}, student_name="Asha",
            time_taken=95,
        )

        responses = self.store.get_responses(assessment_id)
        self.assertEqual(len(responses), 1)
        self.assertEqual(responses[0].id, response_id)
        self.assertEqual(responses[0].answers["2"], "OPAL")

    def test_duplicate_response_rejected(self):
        assessment_id = self.create()
        self.store.submit_response(assessment_id, "21CS042", 2, 2)

        with self.assertRaises(DuplicateResponseError) as ctx:
            self.store.submit_response(assessment_id, "21CS042", 0, 2)

        self.assertEqual(str(ctx.exception), "You have already submitted this assessment.")
        self.assertEqual(len(self.store.get_responses(assessment_id)), 1)

    def test_same_roll_number_other_assessment(self):
        first = self.create()
        second = self.create()

        self.store.submit_response(first, "21CS042", 2, 2)
        self.store.submit_response(second, "21CS042", 1, 2)

        self.assertEqual(len(self.store.get_responses(second)), 1)

    def test_persisted_across_instances(self):
        assessment_id = self.create()
        self.store.submit_response(assessment_id, "21CS042", 2, 2)

        reopened = AssessmentStore(self.path)

        assessment, questions = reopened.get_assessment(assessment_id)
        self.assertEqual(assessment.faculty_name, "Dr. Rao")
        self.assertEqual(len(questions), 2)
        self.assertEqual(reopened.summary(), {'assessments': 1, 'questions': 2, 'responses': 1})
        with self.assertRaises(DuplicateResponseError):
            reopened.submit_response(assessment_id, "21CS042", 0, 2)

    def test_in_memory_store(self):
        store = AssessmentStore()

        assessment_id = self.create(store=store)

        self.assertIsNotNone(store.get_assessment(assessment_id))
        self.assertFalse(os.path.exists(self.path))

    def test_invalid_store_file(self):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, 'w') as f:
            f.write("assessments: [unclosed\n")

        with self.assertRaises(StoreError):
            AssessmentStore(self.path)

    def test_malformed_record(self):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, 'w') as f:
            f.write("assessments:\n  - id: abc\n")

        with self.assertRaises(StoreError):
            AssessmentStore(self.path)


if __name__ == '__main__':
    unittest.main()
