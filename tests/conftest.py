"""
Shared fixtures: an in-memory MongoDB and a seeded course with one exam
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

import mongomock
import pytest
from fastapi.testclient import TestClient

from acadeval.core import Role
from acadeval.db import (
    ensure_indexes,
    get_database,
    BatchRepository,
    CourseRepository,
    SubmissionRepository,
    UserRepository,
)
from acadeval.main import app
from acadeval.services import ExamService, hash_password
from acadeval.utils import create_token


@pytest.fixture
def db():
    database = mongomock.MongoClient()["acadeval_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def seed(db):
    """Teacher with course CS301, batch B1 of four students, and a 3-question exam with k=2"""
    users = UserRepository(db)
    teacher_id = users.create("Tina Teacher", "tina@uni.edu", hash_password("secret"), Role.TEACHER.value)
    other_teacher_id = users.create("Omar Other", "omar@uni.edu", hash_password("secret"), Role.TEACHER.value)
    admin_id = users.create("Ada Admin", "ada@uni.edu", hash_password("secret"), Role.ADMIN.value)

    course_id = CourseRepository(db).create("Operating Systems", "CS301")
    users.add_course(teacher_id, course_id)

    student_ids = [
        users.create(f"Student {c}", f"{c.lower()}@uni.edu", hash_password("pw"), Role.STUDENT.value, [course_id])
        for c in "ABCD"
    ]
    batch_id = BatchRepository(db).create("B1", course_id, teacher_id, student_ids)

    start = datetime(2026, 3, 1, 9, 0)
    exam = ExamService(db).schedule_exam(
        teacher_id=teacher_id,
        course_id=course_id,
        batch_id=batch_id,
        title="Midterm",
        start_time=start,
        end_time=start + timedelta(minutes=90),
        num_questions=3,
        k=2,
    )

    submissions = SubmissionRepository(db)
    for sid in student_ids:
        submissions.create(exam["id"], sid)

    return SimpleNamespace(
        teacher_id=teacher_id,
        other_teacher_id=other_teacher_id,
        admin_id=admin_id,
        course_id=course_id,
        batch_id=batch_id,
        student_ids=student_ids,
        exam_id=exam["id"],
    )


@pytest.fixture
def client(db):
    app.dependency_overrides[get_database] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build a bearer header for a user id and role"""
    def build(user_id: str, role: Role) -> dict:
        return {"Authorization": f"Bearer {create_token(user_id, role.value)}"}
    return build
