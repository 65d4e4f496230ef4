# Utils package
from .helpers import (
    course_label,
    duration_minutes,
    placeholder_questions,
    parse_student_csv,
    count_csv_lines,
    build_students_csv,
    safe_filename,
)
from .jwt_manager import create_token, decode_token

__all__ = [
    "course_label",
    "duration_minutes",
    "placeholder_questions",
    "parse_student_csv",
    "count_csv_lines",
    "build_students_csv",
    "safe_filename",
    "create_token",
    "decode_token",
]
