# Services package
from .admin_service import AdminService
from .auth_service import AuthService, hash_password
from .course_service import CourseService
from .exam_service import ExamService
from .peer_evaluation_service import PeerEvaluationService

__all__ = [
    "AdminService",
    "AuthService",
    "hash_password",
    "CourseService",
    "ExamService",
    "PeerEvaluationService",
]
