"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from acadeval.core.constants import Role


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ===== Auth Schemas =====
class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role


# ===== Admin Schemas =====
class TeacherCourseRequest(BaseModel):
    email: str = Field(..., description="Teacher email")
    course_code: str = Field(..., description="Course code, e.g. CS301")


class CourseInfo(BaseModel):
    id: str
    name: str
    code: str


class TeacherInfo(BaseModel):
    id: str
    name: str
    email: str
    enrolled_courses: List[CourseInfo] = []


class UpdateRoleRequest(BaseModel):
    email: str
    role: Role


class UserInfo(BaseModel):
    id: str
    name: str
    email: str
    role: Role


# ===== Roster Schemas =====
class TeacherCourse(BaseModel):
    course_id: str
    course_name: str
    batch_id: Optional[str] = None
    batch_name: str = "N/A"


class StudentEntry(BaseModel):
    name: str
    email: str


class EnrollStudentsRequest(BaseModel):
    batch_id: str
    students: List[StudentEntry]


class EnrollmentResponse(BaseModel):
    success: bool = True
    message: str
    enrolled_count: int
    total_students: int


# ===== Exam Schemas =====
class ExamUpdateRequest(BaseModel):
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    num_questions: Optional[int] = Field(default=None, ge=1)
    k: Optional[int] = Field(default=None, description="Peers per evaluator, must be >= 0")


class ExamSummary(BaseModel):
    id: str
    title: str
    course: str
    batch: str
    start_time: datetime
    end_time: datetime
    num_questions: int
    duration: str
    total_marks: int
    k: int
    total_students: int
    has_solution: bool = False


class SubmissionInfo(BaseModel):
    student_name: str
    student_email: str
    submitted_at: datetime


# ===== Peer Evaluation Schemas =====
class SendSolutionsResponse(BaseModel):
    success: bool = True
    message: str
    created: int
    skipped: int
    evaluators: int


class EvaluationInfo(BaseModel):
    id: str
    exam: str
    evaluator: str
    evaluatee: str
    marks: List[float]
    feedback: str = ""
    status: str


class EvaluationSubmitRequest(BaseModel):
    marks: List[float] = Field(..., description="One mark per exam question")
    feedback: str = ""
