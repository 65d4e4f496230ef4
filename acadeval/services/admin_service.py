"""
Admin Service
Teacher-course assignment and user role management
"""
import logging
from typing import Any, Dict, List

from pymongo.database import Database

from acadeval.core import ForbiddenException, NotFoundException, Messages, Role, admin_logger
from acadeval.db import UserRepository, CourseRepository

logger = logging.getLogger(__name__)

# Roles a teacher may hand out
ROSTER_ROLES = {Role.STUDENT.value, Role.TA.value}


class AdminService:
    """Service for teacher/course administration"""

    def __init__(self, db: Database):
        self.users = UserRepository(db)
        self.courses = CourseRepository(db)

    def _teacher_and_course(self, email: str, course_code: str):
        teacher = self.users.find_by_email(email, role=Role.TEACHER.value)
        if not teacher:
            raise NotFoundException("Teacher", email)

        course = self.courses.find_by_code(course_code)
        if not course:
            raise NotFoundException("Course", course_code)

        return teacher, course

    def assign_teacher_to_course(self, email: str, course_code: str) -> Dict[str, Any]:
        teacher, course = self._teacher_and_course(email, course_code)

        added = self.users.add_course(teacher["id"], course["id"])
        if added:
            admin_logger.info(f"Assigned {email} to course {course_code}")
        else:
            admin_logger.info(f"{email} already assigned to {course_code}, skipping")

        return {"message": Messages.TEACHER_ASSIGNED, "already_assigned": not added}

    def unassign_teacher_from_course(self, email: str, course_code: str) -> Dict[str, Any]:
        teacher, course = self._teacher_and_course(email, course_code)
        self.users.remove_course(teacher["id"], course["id"])
        admin_logger.info(f"Unassigned {email} from course {course_code}")
        return {"message": Messages.TEACHER_UNASSIGNED}

    def get_all_teachers(self) -> List[Dict[str, Any]]:
        """Teachers with their enrolled courses resolved to name and code"""
        teachers = self.users.list_by_roles([Role.TEACHER.value])

        course_ids = {cid for t in teachers for cid in t.get("enrolled_courses", [])}
        courses = {c["id"]: c for c in self.courses.find_by_ids(course_ids)}

        return [
            {
                "id": t["id"],
                "name": t["name"],
                "email": t["email"],
                "enrolled_courses": [
                    {"id": cid, "name": courses[cid]["name"], "code": courses[cid]["code"]}
                    for cid in t.get("enrolled_courses", [])
                    if cid in courses
                ],
            }
            for t in teachers
        ]

    def delete_teacher(self, email: str) -> Dict[str, Any]:
        if not self.users.delete_by_email(email, Role.TEACHER.value):
            raise NotFoundException("Teacher", email)
        admin_logger.info(f"Deleted teacher {email}")
        return {"message": Messages.TEACHER_DELETED}

    def update_role(self, email: str, role: Role, caller_role: Role = Role.ADMIN) -> Dict[str, Any]:
        """
        Change a user's role.

        Admins may set any role. Other callers may only move students and
        TAs between those two roles.

        Raises:
            NotFoundException: no user with this email
            ForbiddenException: the caller may not make this change
        """
        target = self.users.find_by_email(email)
        if not target:
            raise NotFoundException("User", email)

        if caller_role != Role.ADMIN and (
            role.value not in ROSTER_ROLES or target.get("role") not in ROSTER_ROLES
        ):
            admin_logger.warning(
                f"Refused role change of {email} ({target.get('role')} -> {role.value}) "
                f"by {caller_role.value}"
            )
            raise ForbiddenException(
                message="Only an admin can grant or revoke teacher or admin roles"
            )

        user = self.users.update_role(email, role.value)
        if not user:
            raise NotFoundException("User", email)
        admin_logger.info(f"Role of {email} updated to {role.value}")
        return {"message": f"Role updated to '{role.value}' for {email}"}

    def list_users(self) -> List[Dict[str, Any]]:
        """Students and TAs"""
        return [
            {"id": u["id"], "name": u["name"], "email": u["email"], "role": u["role"]}
            for u in self.users.list_by_roles([Role.STUDENT.value, Role.TA.value])
        ]
