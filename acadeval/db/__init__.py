# Database package
from .mongo import get_client, get_database, ensure_indexes
from .repositories import (
    parse_id,
    serialize,
    UserRepository,
    CourseRepository,
    BatchRepository,
    ExamRepository,
    SubmissionRepository,
    EvaluationRepository,
)

__all__ = [
    "get_client",
    "get_database",
    "ensure_indexes",
    "parse_id",
    "serialize",
    "UserRepository",
    "CourseRepository",
    "BatchRepository",
    "ExamRepository",
    "SubmissionRepository",
    "EvaluationRepository",
]
