"""
FastAPI dependencies: database, current user, role checks and services
"""
import logging
from typing import Callable, Dict

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from acadeval.core import ForbiddenException, UnauthorizedException, Role
from acadeval.db import get_database, UserRepository
from acadeval.services import (
    AdminService,
    AuthService,
    CourseService,
    ExamService,
    PeerEvaluationService,
)
from acadeval.utils import decode_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Database = Depends(get_database)
) -> Dict:
    """Resolve the bearer token to a user document"""
    if credentials is None:
        raise UnauthorizedException()

    try:
        payload = decode_token(credentials.credentials)
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected token: {e}")
        raise UnauthorizedException("Invalid or expired token")

    user = UserRepository(db).find_by_id(payload.get("sub"))
    if not user:
        raise UnauthorizedException("User no longer exists")
    return user


def require_role(*roles: Role) -> Callable[..., Dict]:
    """Dependency factory allowing only the given roles"""
    allowed = {r.value for r in roles}

    def checker(user: Dict = Depends(get_current_user)) -> Dict:
        if user.get("role") not in allowed:
            raise ForbiddenException(" or ".join(sorted(allowed)), user.get("role"))
        return user

    return checker


def get_admin_service(db: Database = Depends(get_database)) -> AdminService:
    return AdminService(db)


def get_auth_service(db: Database = Depends(get_database)) -> AuthService:
    return AuthService(db)


def get_course_service(db: Database = Depends(get_database)) -> CourseService:
    return CourseService(db)


def get_exam_service(db: Database = Depends(get_database)) -> ExamService:
    return ExamService(db)


def get_peer_evaluation_service(db: Database = Depends(get_database)) -> PeerEvaluationService:
    return PeerEvaluationService(db)
