"""
Auth Service
Credential check and token issue
"""
import logging

from pymongo.database import Database
from werkzeug.security import check_password_hash, generate_password_hash

from acadeval.core import UnauthorizedException, Messages
from acadeval.db import UserRepository
from acadeval.utils import create_token

logger = logging.getLogger(__name__)


def hash_password(raw: str) -> str:
    return generate_password_hash(raw)


class AuthService:
    def __init__(self, db: Database):
        self.users = UserRepository(db)

    def login(self, email: str, password: str) -> dict:
        user = self.users.find_by_email(email)
        if not user or not check_password_hash(user.get("password_hash", ""), password):
            logger.warning(f"Failed login for {email}")
            raise UnauthorizedException(Messages.INVALID_CREDENTIALS)

        return {
            "access_token": create_token(user["id"], user["role"]),
            "token_type": "bearer",
            "role": user["role"],
        }
