"""
Exam Service
Handles exam scheduling, editing, solution storage and deletion
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pymongo.database import Database
from pymongo.errors import PyMongoError

from acadeval.config import settings
from acadeval.core import (
    BadRequestException,
    DatabaseException,
    FileProcessingException,
    NotFoundException,
    FileLimits,
    Messages,
)
from acadeval.db import (
    BatchRepository,
    CourseRepository,
    EvaluationRepository,
    ExamRepository,
    SubmissionRepository,
    UserRepository,
)
from acadeval.utils import course_label, duration_minutes, placeholder_questions

logger = logging.getLogger(__name__)


def _check_k(k: Optional[int]) -> None:
    if k is not None and k < 0:
        raise BadRequestException(Messages.INVALID_K)


def _as_utc(value: datetime) -> datetime:
    """Naive UTC, the form pymongo hands datetimes back in"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _check_window(start_time: datetime, end_time: datetime) -> None:
    if end_time <= start_time:
        raise BadRequestException("End time must be after start time")


class ExamService:
    """Service for exam lifecycle management"""

    def __init__(self, db: Database):
        self.exams = ExamRepository(db)
        self.courses = CourseRepository(db)
        self.batches = BatchRepository(db)
        self.users = UserRepository(db)
        self.submissions = SubmissionRepository(db)
        self.evaluations = EvaluationRepository(db)

    def get_owned_exam(self, exam_id: str, teacher_id: str, with_pdf: bool = False) -> Dict[str, Any]:
        exam = self.exams.find_owned(exam_id, teacher_id, with_pdf=with_pdf)
        if not exam:
            raise NotFoundException("Exam", exam_id)
        return exam

    def schedule_exam(
        self,
        teacher_id: str,
        course_id: str,
        batch_id: str,
        title: str,
        start_time: datetime,
        end_time: datetime,
        num_questions: int,
        k: int,
        solution: Optional[Tuple[bytes, str]] = None
    ) -> Dict[str, Any]:
        """
        Create an exam with placeholder questions.

        Args:
            solution: Optional (pdf bytes, mime type) uploaded with the exam
        """
        if not title or not course_id or not batch_id:
            raise BadRequestException("All fields are required including k parameter")
        if num_questions < 1:
            raise BadRequestException("num_questions must be at least 1")
        _check_k(k)
        start_time, end_time = _as_utc(start_time), _as_utc(end_time)
        _check_window(start_time, end_time)

        exam = {
            "course": course_id,
            "batch": batch_id,
            "title": title,
            "start_time": start_time,
            "end_time": end_time,
            "num_questions": num_questions,
            "k": k,
            "created_by": teacher_id,
            "questions": placeholder_questions(num_questions, settings.DEFAULT_MAX_MARKS),
            "created_at": datetime.utcnow(),
        }
        if solution:
            content, mime_type = self._validate_pdf(*solution)
            exam["solution_pdf"] = content
            exam["solution_pdf_mime_type"] = mime_type

        exam_id = self.exams.create(exam)
        logger.info(f"Exam created: {exam_id} ({title}, n={num_questions}, k={k})")
        return self.exams.find_by_id(exam_id)

    def list_exams(self, teacher_id: str) -> List[Dict[str, Any]]:
        exams = self.exams.list_by_teacher(teacher_id)
        logger.info(f"Teacher {teacher_id}: {len(exams)} exam(s) found")

        result = []
        for exam in exams:
            course = self.courses.find_by_id(exam.get("course"))
            batch = self.batches.find_by_id(exam.get("batch"))
            num_questions = exam.get("num_questions", 0)
            result.append({
                "id": exam["id"],
                "title": exam["title"],
                "course": course_label(course),
                "batch": batch["name"] if batch else "Unknown Batch",
                "start_time": exam["start_time"],
                "end_time": exam["end_time"],
                "num_questions": num_questions,
                "duration": f"{duration_minutes(exam['start_time'], exam['end_time'])} mins",
                "total_marks": sum(q.get("max_marks", 0) for q in exam.get("questions", [])),
                "k": exam.get("k", 0),
                "total_students": len(batch.get("students", [])) if batch else 0,
                "has_solution": bool(exam.get("solution_pdf_mime_type")),
            })
        return result

    def exam_submissions(self, exam_id: str, teacher_id: str) -> List[Dict[str, Any]]:
        self.get_owned_exam(exam_id, teacher_id)

        submissions = self.submissions.list_for_exam(exam_id)
        students = {
            s["id"]: s
            for s in self.users.find_by_ids(sub["student"] for sub in submissions)
        }
        return [
            {
                "student_name": students.get(sub["student"], {}).get("name", ""),
                "student_email": students.get(sub["student"], {}).get("email", ""),
                "submitted_at": sub["submitted_at"],
            }
            for sub in submissions
        ]

    def _validate_pdf(self, content: bytes, mime_type: str) -> Tuple[bytes, str]:
        if mime_type != "application/pdf":
            raise BadRequestException(Messages.INVALID_FILE_TYPE)
        if not content:
            raise FileProcessingException("solution", "file is empty")
        if len(content) > FileLimits.MAX_UPLOAD_SIZE:
            raise BadRequestException("File size exceeds limit")
        return content, mime_type

    def upload_solution(self, exam_id: str, teacher_id: str, content: bytes, mime_type: str) -> None:
        self.get_owned_exam(exam_id, teacher_id)
        content, mime_type = self._validate_pdf(content, mime_type)
        self.exams.update(exam_id, {
            "solution_pdf": content,
            "solution_pdf_mime_type": mime_type,
        })
        logger.info(f"Solution uploaded for exam {exam_id} ({len(content)} bytes)")

    def get_solution(self, exam_id: str, teacher_id: str) -> Tuple[bytes, str]:
        exam = self.exams.find_owned(exam_id, teacher_id, with_pdf=True)
        if not exam or not exam.get("solution_pdf"):
            raise NotFoundException("Solution")
        return exam["solution_pdf"], exam.get("solution_pdf_mime_type") or "application/pdf"

    def update_exam(
        self,
        exam_id: str,
        teacher_id: str,
        title: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        num_questions: Optional[int] = None,
        k: Optional[int] = None
    ) -> Dict[str, Any]:
        """Partial update; a new question count regenerates the placeholder questions"""
        exam = self.get_owned_exam(exam_id, teacher_id)
        _check_k(k)

        fields: Dict[str, Any] = {}
        if title:
            fields["title"] = title
        if start_time:
            fields["start_time"] = _as_utc(start_time)
        if end_time:
            fields["end_time"] = _as_utc(end_time)
        if "start_time" in fields or "end_time" in fields:
            _check_window(
                fields.get("start_time", exam["start_time"]),
                fields.get("end_time", exam["end_time"])
            )
        if num_questions and num_questions != exam.get("num_questions"):
            fields["num_questions"] = num_questions
            fields["questions"] = placeholder_questions(num_questions, settings.DEFAULT_MAX_MARKS)
        if k is not None:
            fields["k"] = k

        if not fields:
            return exam

        updated = self.exams.update(exam_id, fields)
        logger.info(f"Exam {exam_id} updated: {sorted(fields)}")
        return updated

    def delete_exam(self, exam_id: str, teacher_id: str) -> Dict[str, int]:
        """Delete an exam together with its evaluations and submissions"""
        self.get_owned_exam(exam_id, teacher_id)

        try:
            evaluations = self.evaluations.delete_for_exam(exam_id)
            submissions = self.submissions.delete_for_exam(exam_id)
            self.exams.delete(exam_id)
        except PyMongoError as e:
            logger.error(f"Failed to delete exam {exam_id}: {e}")
            raise DatabaseException("deleting exam", str(e))

        logger.info(
            f"Exam {exam_id} deleted with {evaluations} evaluation(s) "
            f"and {submissions} submission(s)"
        )
        return {"evaluations": evaluations, "submissions": submissions}
