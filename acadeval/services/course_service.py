"""
Course Service
Teacher course/batch listing and student roster management
"""
import logging
from typing import Any, Dict, List, Tuple

from pymongo.database import Database

from acadeval.config import settings
from acadeval.core import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    Messages,
    Role,
)
from acadeval.db import UserRepository, CourseRepository, BatchRepository
from acadeval.services.auth_service import hash_password
from acadeval.utils import (
    course_label,
    parse_student_csv,
    count_csv_lines,
    build_students_csv,
    safe_filename,
)

logger = logging.getLogger(__name__)


class CourseService:
    """Service for courses, batches and enrollment"""

    def __init__(self, db: Database):
        self.users = UserRepository(db)
        self.courses = CourseRepository(db)
        self.batches = BatchRepository(db)

    def teacher_courses(self, teacher_id: str) -> List[Dict[str, Any]]:
        """Courses of a teacher, each paired with the batch the teacher instructs"""
        teacher = self.users.find_by_id(teacher_id)
        if not teacher or not teacher.get("enrolled_courses"):
            return []

        result = []
        for course in self.courses.find_by_ids(teacher["enrolled_courses"]):
            batch = self.batches.find_for_course(course["id"], teacher_id)
            result.append({
                "course_id": course["id"],
                "course_name": course_label(course),
                "batch_id": batch["id"] if batch else None,
                "batch_name": batch["name"] if batch else "N/A",
            })
        return result

    def enrolled_students(self, course_id: str, batch_id: str) -> List[Dict[str, str]]:
        if not course_id or not batch_id:
            raise BadRequestException("Course ID and Batch ID are required")

        batch = self.batches.find_by_id(batch_id)
        if not batch:
            raise NotFoundException("Batch", batch_id)

        students = self.users.find_by_ids(batch.get("students", []))
        logger.info(f"Found {len(students)} students in batch {batch_id}")
        return [{"name": s["name"], "email": s["email"]} for s in students]

    def students_csv(self, course_id: str, batch_id: str, teacher_id: str) -> Tuple[str, str]:
        """
        Build the roster CSV of a batch the teacher instructs.

        Returns:
            (filename, csv content)
        """
        if not course_id or not batch_id:
            raise BadRequestException("Course ID and Batch ID are required")

        batch = self.batches.find_by_id(batch_id, instructor_id=teacher_id)
        if not batch:
            raise ForbiddenException(message=Messages.BATCH_FORBIDDEN)

        course = self.courses.find_by_id(course_id)
        if not course:
            raise NotFoundException("Course", course_id)

        students = self.users.find_by_ids(batch.get("students", []))
        content = build_students_csv(students, course_label(course), batch["name"])
        filename = safe_filename(f"{course['code']}_{batch['name']}_students.csv")
        return filename, content

    def enroll_students(self, batch_id: str, students: List[Dict[str, str]]) -> Dict[str, Any]:
        """
        Enroll students into a batch.

        Unknown emails become new student accounts with the default password;
        known users get the batch's course added to their enrolled courses.
        """
        batch = self.batches.find_by_id(batch_id)
        if not batch:
            raise NotFoundException("Batch", batch_id)

        course_id = batch["course"]
        student_ids = []
        for entry in students:
            user = self.users.find_by_email(entry["email"])
            if not user:
                user_id = self.users.create(
                    name=entry["name"],
                    email=entry["email"],
                    password_hash=hash_password(settings.DEFAULT_STUDENT_PASSWORD),
                    role=Role.STUDENT.value,
                    enrolled_courses=[course_id],
                )
                logger.info(f"Created new student: {entry['email']}")
            else:
                user_id = user["id"]
                self.users.add_course(user_id, course_id)
            student_ids.append(user_id)

        existing = set(batch.get("students", []))
        new_ids = [sid for sid in dict.fromkeys(student_ids) if sid not in existing]
        updated = self.batches.add_students(batch_id, new_ids)

        logger.info(f"Batch {batch_id}: enrolled {len(new_ids)} new student(s)")
        return {
            "message": Messages.STUDENTS_ENROLLED,
            "enrolled_count": len(new_ids),
            "total_students": len(updated.get("students", [])),
        }

    def enroll_students_csv(self, batch_id: str, content: str) -> Dict[str, Any]:
        if count_csv_lines(content) < 2:
            raise BadRequestException(Messages.CSV_TOO_SHORT)
        students = parse_student_csv(content)
        logger.info(f"Parsed {len(students)} students from CSV")
        return self.enroll_students(batch_id, students)
