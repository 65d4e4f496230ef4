"""
Tests for admin, course and exam services
"""
from datetime import datetime, timedelta

import pytest

from acadeval.core import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    Collections,
    Role,
)
from acadeval.db import BatchRepository, CourseRepository, UserRepository
from acadeval.services import (
    AdminService,
    CourseService,
    ExamService,
    PeerEvaluationService,
)


class TestAdminService:
    def test_assign_is_idempotent(self, db, seed):
        CourseRepository(db).create("Networks", "CS302")
        service = AdminService(db)

        first = service.assign_teacher_to_course("tina@uni.edu", "CS302")
        second = service.assign_teacher_to_course("tina@uni.edu", "CS302")

        assert first["already_assigned"] is False
        assert second["already_assigned"] is True
        teacher = UserRepository(db).find_by_id(seed.teacher_id)
        assert len(teacher["enrolled_courses"]) == 2

    def test_assign_unknown_course(self, seed, db):
        with pytest.raises(NotFoundException):
            AdminService(db).assign_teacher_to_course("tina@uni.edu", "NOPE")

    def test_assign_requires_teacher_role(self, seed, db):
        with pytest.raises(NotFoundException):
            AdminService(db).assign_teacher_to_course("a@uni.edu", "CS301")

    def test_unassign(self, seed, db):
        AdminService(db).unassign_teacher_from_course("tina@uni.edu", "CS301")
        assert UserRepository(db).find_by_id(seed.teacher_id)["enrolled_courses"] == []

    def test_get_all_teachers(self, seed, db):
        teachers = {t["email"]: t for t in AdminService(db).get_all_teachers()}

        assert set(teachers) == {"tina@uni.edu", "omar@uni.edu"}
        assert teachers["tina@uni.edu"]["enrolled_courses"] == [
            {"id": seed.course_id, "name": "Operating Systems", "code": "CS301"}
        ]
        assert "password_hash" not in teachers["tina@uni.edu"]

    def test_delete_teacher(self, seed, db):
        service = AdminService(db)
        service.delete_teacher("omar@uni.edu")
        with pytest.raises(NotFoundException):
            service.delete_teacher("omar@uni.edu")

    def test_update_role_and_list_users(self, seed, db):
        service = AdminService(db)
        service.update_role("a@uni.edu", Role.TA)

        users = {u["email"]: u["role"] for u in service.list_users()}
        assert users["a@uni.edu"] == "ta"
        assert "tina@uni.edu" not in users

    def test_update_role_unknown_user(self, db):
        with pytest.raises(NotFoundException):
            AdminService(db).update_role("ghost@uni.edu", Role.TA)

    def test_teacher_can_switch_student_and_ta(self, seed, db):
        service = AdminService(db)
        service.update_role("a@uni.edu", Role.TA, caller_role=Role.TEACHER)
        service.update_role("a@uni.edu", Role.STUDENT, caller_role=Role.TEACHER)

        assert UserRepository(db).find_by_email("a@uni.edu")["role"] == "student"

    @pytest.mark.parametrize("email,role", [
        ("tina@uni.edu", Role.ADMIN),
        ("a@uni.edu", Role.TEACHER),
        ("omar@uni.edu", Role.STUDENT),
        ("ada@uni.edu", Role.TA),
    ])
    def test_teacher_cannot_grant_or_revoke_staff_roles(self, seed, db, email, role):
        before = UserRepository(db).find_by_email(email)["role"]

        with pytest.raises(ForbiddenException):
            AdminService(db).update_role(email, role, caller_role=Role.TEACHER)

        assert UserRepository(db).find_by_email(email)["role"] == before

    def test_admin_can_promote_to_teacher(self, seed, db):
        AdminService(db).update_role("a@uni.edu", Role.TEACHER, caller_role=Role.ADMIN)
        assert UserRepository(db).find_by_email("a@uni.edu")["role"] == "teacher"


class TestCourseService:
    def test_teacher_courses(self, seed, db):
        courses = CourseService(db).teacher_courses(seed.teacher_id)

        assert courses == [{
            "course_id": seed.course_id,
            "course_name": "Operating Systems (CS301)",
            "batch_id": seed.batch_id,
            "batch_name": "B1",
        }]

    def test_teacher_without_courses(self, seed, db):
        assert CourseService(db).teacher_courses(seed.other_teacher_id) == []

    def test_enrolled_students(self, seed, db):
        students = CourseService(db).enrolled_students(seed.course_id, seed.batch_id)
        assert sorted(s["email"] for s in students) == [
            "a@uni.edu", "b@uni.edu", "c@uni.edu", "d@uni.edu"
        ]

    def test_enrolled_students_requires_ids(self, db):
        with pytest.raises(BadRequestException):
            CourseService(db).enrolled_students("", "")

    def test_enroll_from_csv(self, seed, db):
        content = 'Name,Email\n"Eve Ng","e@uni.edu"\nStudent A,a@uni.edu\n\n,missing@uni.edu\n'

        result = CourseService(db).enroll_students_csv(seed.batch_id, content)

        assert result["enrolled_count"] == 1
        assert result["total_students"] == 5
        eve = UserRepository(db).find_by_email("e@uni.edu")
        assert eve["role"] == "student"
        assert eve["enrolled_courses"] == [seed.course_id]
        assert UserRepository(db).find_by_email("missing@uni.edu") is None

    def test_enroll_adds_course_to_existing_user(self, seed, db):
        other_course = CourseRepository(db).create("Networks", "CS302")
        batch_id = BatchRepository(db).create("N1", other_course, seed.teacher_id)

        result = CourseService(db).enroll_students(batch_id, [{"name": "Student A", "email": "a@uni.edu"}])

        assert result["enrolled_count"] == 1
        student = UserRepository(db).find_by_email("a@uni.edu")
        assert set(student["enrolled_courses"]) == {seed.course_id, other_course}

    def test_csv_without_rows(self, seed, db):
        with pytest.raises(BadRequestException):
            CourseService(db).enroll_students_csv(seed.batch_id, "Name,Email\n")

    def test_students_csv(self, seed, db):
        filename, content = CourseService(db).students_csv(seed.course_id, seed.batch_id, seed.teacher_id)

        lines = content.splitlines()
        assert filename == "CS301_B1_students.csv"
        assert lines[0] == "Name,Email,Course,Batch"
        assert '"Student A","a@uni.edu","Operating Systems (CS301)","B1"' in lines
        assert len(lines) == 5

    def test_students_csv_other_teacher(self, seed, db):
        with pytest.raises(ForbiddenException):
            CourseService(db).students_csv(seed.course_id, seed.batch_id, seed.other_teacher_id)


class TestExamService:
    def test_schedule_creates_placeholder_questions(self, seed, db):
        exam = ExamService(db).get_owned_exam(seed.exam_id, seed.teacher_id)

        assert exam["num_questions"] == 3
        assert exam["k"] == 2
        assert exam["questions"][0] == {"question_text": "Question 1", "max_marks": 10}
        assert len(exam["questions"]) == 3

    def test_schedule_rejects_negative_k(self, seed, db):
        start = datetime(2026, 3, 2, 9, 0)
        with pytest.raises(BadRequestException):
            ExamService(db).schedule_exam(
                seed.teacher_id, seed.course_id, seed.batch_id, "Quiz",
                start, start + timedelta(hours=1), 2, -1
            )

    def test_schedule_rejects_inverted_window(self, seed, db):
        start = datetime(2026, 3, 2, 9, 0)
        with pytest.raises(BadRequestException):
            ExamService(db).schedule_exam(
                seed.teacher_id, seed.course_id, seed.batch_id, "Quiz",
                start, start - timedelta(hours=1), 2, 1
            )

    def test_update_rejects_inverted_window(self, seed, db):
        service = ExamService(db)
        start = datetime(2026, 3, 1, 9, 0)

        with pytest.raises(BadRequestException):
            service.update_exam(seed.exam_id, seed.teacher_id, end_time=start - timedelta(hours=1))
        with pytest.raises(BadRequestException):
            service.update_exam(seed.exam_id, seed.teacher_id, start_time=start + timedelta(hours=2))

        assert service.list_exams(seed.teacher_id)[0]["duration"] == "90 mins"

    def test_update_moves_whole_window(self, seed, db):
        start = datetime(2026, 3, 8, 9, 0)
        exam = ExamService(db).update_exam(
            seed.exam_id, seed.teacher_id,
            start_time=start, end_time=start + timedelta(minutes=45)
        )

        assert exam["start_time"] == start
        assert ExamService(db).list_exams(seed.teacher_id)[0]["duration"] == "45 mins"

    def test_list_exams(self, seed, db):
        exams = ExamService(db).list_exams(seed.teacher_id)

        assert len(exams) == 1
        exam = exams[0]
        assert exam["course"] == "Operating Systems (CS301)"
        assert exam["batch"] == "B1"
        assert exam["duration"] == "90 mins"
        assert exam["total_marks"] == 30
        assert exam["total_students"] == 4
        assert exam["has_solution"] is False

    def test_update_question_count_resets_questions(self, seed, db):
        exam = ExamService(db).update_exam(seed.exam_id, seed.teacher_id, num_questions=5, k=1)

        assert exam["num_questions"] == 5
        assert [q["question_text"] for q in exam["questions"]] == [
            f"Question {i}" for i in range(1, 6)
        ]
        assert exam["k"] == 1

    def test_update_rejects_negative_k(self, seed, db):
        with pytest.raises(BadRequestException):
            ExamService(db).update_exam(seed.exam_id, seed.teacher_id, k=-3)

    def test_update_by_other_teacher(self, seed, db):
        with pytest.raises(NotFoundException):
            ExamService(db).update_exam(seed.exam_id, seed.other_teacher_id, title="Hijack")

    def test_solution_roundtrip(self, seed, db):
        service = ExamService(db)
        service.upload_solution(seed.exam_id, seed.teacher_id, b"%PDF-1.4 body", "application/pdf")

        content, mime_type = service.get_solution(seed.exam_id, seed.teacher_id)
        assert content == b"%PDF-1.4 body"
        assert mime_type == "application/pdf"
        assert service.list_exams(seed.teacher_id)[0]["has_solution"] is True

    def test_solution_must_be_pdf(self, seed, db):
        with pytest.raises(BadRequestException):
            ExamService(db).upload_solution(seed.exam_id, seed.teacher_id, b"a,b", "text/csv")

    def test_missing_solution(self, seed, db):
        with pytest.raises(NotFoundException):
            ExamService(db).get_solution(seed.exam_id, seed.teacher_id)

    def test_exam_submissions(self, seed, db):
        submissions = ExamService(db).exam_submissions(seed.exam_id, seed.teacher_id)
        assert sorted(s["student_email"] for s in submissions) == [
            "a@uni.edu", "b@uni.edu", "c@uni.edu", "d@uni.edu"
        ]

    def test_delete_cascades(self, seed, db):
        PeerEvaluationService(db).send_solutions(seed.exam_id, seed.teacher_id)

        removed = ExamService(db).delete_exam(seed.exam_id, seed.teacher_id)

        assert removed == {"evaluations": 8, "submissions": 4}
        assert db[Collections.EXAMS].count_documents({}) == 0
        assert db[Collections.EVALUATIONS].count_documents({}) == 0
        assert db[Collections.SUBMISSIONS].count_documents({}) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
