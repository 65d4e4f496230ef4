# Core package
from .constants import Role, EvaluationStatus, Messages, FileLimits, Collections
from .exceptions import (
    BaseAPIException,
    NotFoundException,
    UnauthorizedException,
    ForbiddenException,
    BadRequestException,
    ConflictException,
    FileProcessingException,
    DatabaseException,
)
from .logger import logger, setup_logger, evaluation_logger, admin_logger

__all__ = [
    # Constants
    "Role",
    "EvaluationStatus",
    "Messages",
    "FileLimits",
    "Collections",
    # Exceptions
    "BaseAPIException",
    "NotFoundException",
    "UnauthorizedException",
    "ForbiddenException",
    "BadRequestException",
    "ConflictException",
    "FileProcessingException",
    "DatabaseException",
    # Logging
    "logger",
    "setup_logger",
    "evaluation_logger",
    "admin_logger",
]
