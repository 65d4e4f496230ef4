"""
Peer Evaluation Service
Assigns peer evaluations once an exam's solutions are released, and records
the marks students give each other
"""
import math
import random
import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import PyMongoError

from acadeval.core import (
    BadRequestException,
    ConflictException,
    DatabaseException,
    ForbiddenException,
    NotFoundException,
    EvaluationStatus,
    Messages,
    evaluation_logger,
)
from acadeval.db import (
    EvaluationRepository,
    ExamRepository,
    SubmissionRepository,
)
from acadeval.evaluation import (
    InvalidKError,
    assign_peers,
    group_by_evaluator,
    new_evaluation,
)

logger = logging.getLogger(__name__)


class PeerEvaluationService:
    """Service for peer evaluation assignment and submission"""

    def __init__(self, db: Database, rng: Optional[random.Random] = None):
        self.exams = ExamRepository(db)
        self.submissions = SubmissionRepository(db)
        self.evaluations = EvaluationRepository(db)
        self.rng = rng

    def send_solutions(self, exam_id: str, teacher_id: str) -> Dict[str, Any]:
        """
        Assign each submitter up to k peers to evaluate and store the assignments.

        Safe to call again: existing pairs are never duplicated and an
        evaluator's total never exceeds k.

        Returns:
            Summary with created/skipped counts and the number of evaluators
        """
        exam = self.exams.find_owned(exam_id, teacher_id)
        if not exam:
            raise NotFoundException("Exam", exam_id)

        try:
            submitters = self.submissions.student_ids_for_exam(exam_id)
            existing = self.evaluations.existing_pairs(exam_id)
        except PyMongoError as e:
            logger.error(f"Failed to load submissions for exam {exam_id}: {e}")
            raise DatabaseException("loading submissions", str(e))

        if not submitters:
            raise BadRequestException(Messages.NO_SUBMISSIONS)

        try:
            pairs = assign_peers(
                exam_id,
                exam.get("k", 0),
                submitters,
                existing_pairs=existing,
                rng=self.rng
            )
        except InvalidKError as e:
            raise BadRequestException(str(e))

        num_questions = exam.get("num_questions", 0)
        created = skipped = 0
        try:
            for evaluator, evaluatee in sorted(pairs):
                record = new_evaluation(exam_id, evaluator, evaluatee, num_questions)
                if self.evaluations.insert_if_absent(record):
                    created += 1
                else:
                    skipped += 1
        except PyMongoError as e:
            evaluation_logger.error(
                f"Exam {exam_id}: persistence failed after {created} new evaluation(s): {e}"
            )
            raise DatabaseException("creating evaluations", str(e))

        evaluation_logger.info(
            f"Exam {exam_id}: {created} evaluation(s) created, {skipped} already present, "
            f"{len(submitters)} submitter(s), k={exam.get('k', 0)}"
        )
        return {
            "message": Messages.SOLUTIONS_SENT,
            "created": created,
            "skipped": skipped,
            "evaluators": len(group_by_evaluator(pairs)),
        }

    def list_evaluations(self, exam_id: str, teacher_id: str) -> List[Dict[str, Any]]:
        if not self.exams.find_owned(exam_id, teacher_id):
            raise NotFoundException("Exam", exam_id)
        return self.evaluations.list_for_exam(exam_id)

    def evaluations_for_student(self, student_id: str) -> List[Dict[str, Any]]:
        return self.evaluations.list_for_evaluator(student_id)

    def submit_evaluation(
        self,
        evaluation_id: str,
        evaluator_id: str,
        marks: List[float],
        feedback: str = ""
    ) -> Dict[str, Any]:
        """
        Record an evaluator's marks and move the evaluation to completed.

        Raises:
            NotFoundException: unknown evaluation
            ForbiddenException: caller is not the assigned evaluator
            ConflictException: evaluation is already completed
            BadRequestException: marks do not fit the exam's questions
        """
        evaluation = self.evaluations.find_by_id(evaluation_id)
        if not evaluation:
            raise NotFoundException("Evaluation", evaluation_id)
        if evaluation["evaluator"] != evaluator_id:
            raise ForbiddenException(message="Only the assigned evaluator can submit this evaluation")
        if not EvaluationStatus.can_transition(
            EvaluationStatus(evaluation["status"]), EvaluationStatus.COMPLETED
        ):
            raise ConflictException("Evaluation has already been completed")

        if len(marks) != len(evaluation["marks"]):
            raise BadRequestException(
                f"Expected {len(evaluation['marks'])} marks, got {len(marks)}"
            )

        exam = self.exams.find_by_id(evaluation["exam"])
        questions = exam.get("questions", []) if exam else []
        for index, mark in enumerate(marks):
            max_marks = questions[index]["max_marks"] if index < len(questions) else None
            if not math.isfinite(mark) or mark < 0 or (max_marks is not None and mark > max_marks):
                raise BadRequestException(f"Mark for question {index + 1} is out of range")

        updated = self.evaluations.complete(evaluation_id, marks, feedback)
        if not updated:
            # Lost a race with another submission of the same evaluation
            raise ConflictException("Evaluation has already been completed")

        evaluation_logger.info(
            f"Evaluation {evaluation_id} completed by {evaluator_id} "
            f"(total {sum(marks)})"
        )
        return updated
