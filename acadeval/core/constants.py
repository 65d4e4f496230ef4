"""
Application constants
"""
from enum import Enum


class Role(str, Enum):
    """User roles"""
    ADMIN = "admin"
    TEACHER = "teacher"
    TA = "ta"
    STUDENT = "student"


class EvaluationStatus(str, Enum):
    """Peer evaluation lifecycle: pending -> completed, nothing else"""
    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def can_transition(cls, current: "EvaluationStatus", target: "EvaluationStatus") -> bool:
        return current == cls.PENDING and target == cls.COMPLETED


# API Response Messages
class Messages:
    """API response messages"""

    # Success messages
    TEACHER_ASSIGNED = "Teacher assigned to course successfully"
    TEACHER_UNASSIGNED = "Course unassigned from teacher successfully"
    TEACHER_DELETED = "Teacher deleted successfully"
    EXAM_SCHEDULED = "Exam scheduled successfully"
    EXAM_UPDATED = "Exam updated successfully"
    EXAM_DELETED = "Exam and related data deleted successfully"
    STUDENTS_ENROLLED = "Students enrolled successfully"
    SOLUTIONS_SENT = "Solutions sent to students for peer evaluation"
    SOLUTION_UPLOADED = "Solution uploaded successfully"

    # Error messages
    NO_SUBMISSIONS = "No submissions found for this exam"
    BATCH_FORBIDDEN = "Batch not found or unauthorized access"
    INVALID_FILE_TYPE = "Only PDF and CSV files are accepted"
    CSV_TOO_SHORT = "CSV file must contain at least a header and one data row"
    INVALID_CREDENTIALS = "Invalid email or password"
    INVALID_K = "k must be a non-negative integer"


# File size limits (in bytes)
class FileLimits:
    """File size limits"""
    MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB
    ALLOWED_MIME_TYPES = ("application/pdf", "text/csv")


class Collections:
    """MongoDB collection names"""
    USERS = "users"
    COURSES = "courses"
    BATCHES = "batches"
    EXAMS = "exams"
    SUBMISSIONS = "submissions"
    EVALUATIONS = "evaluations"
