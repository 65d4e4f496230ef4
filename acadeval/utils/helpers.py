"""
Utility functions for the application
"""
import csv
import io
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


def course_label(course: Optional[Dict]) -> str:
    """Display name such as 'Operating Systems (CS301)'"""
    if not course:
        return "Unknown Course"
    return f"{course.get('name', '')} ({course.get('code', '')})"


def duration_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two datetimes"""
    return int((end - start).total_seconds() // 60)


def placeholder_questions(num_questions: int, max_marks: int) -> List[Dict]:
    """Generate 'Question 1'..'Question n' entries"""
    return [
        {"question_text": f"Question {i}", "max_marks": max_marks}
        for i in range(1, num_questions + 1)
    ]


def parse_student_csv(content: str) -> List[Dict[str, str]]:
    """
    Parse a roster CSV into name/email rows.

    The first non-empty line is a header. Rows missing a name or an email
    are skipped.
    """
    lines = [line for line in content.splitlines() if line.strip()]
    students = []
    for row in csv.reader(lines[1:]):
        if len(row) < 2:
            continue
        name, email = row[0].strip(), row[1].strip()
        if name and email:
            students.append({"name": name, "email": email})
        else:
            logger.warning(f"Skipping incomplete CSV row: {row}")
    return students


def count_csv_lines(content: str) -> int:
    return len([line for line in content.splitlines() if line.strip()])


def build_students_csv(students: Iterable[Dict], course: str, batch: str) -> str:
    """Roster export with a Name,Email,Course,Batch header"""
    buffer = io.StringIO()
    buffer.write("Name,Email,Course,Batch\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for student in students:
        writer.writerow([student.get("name", ""), student.get("email", ""), course, batch])
    return buffer.getvalue()


def safe_filename(filename: str) -> str:
    """Make filename safe for filesystem"""
    unsafe_chars = '<>:"/\\|?* '
    for char in unsafe_chars:
        filename = filename.replace(char, "_")
    return filename
