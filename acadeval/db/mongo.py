"""
MongoDB connection handling
"""
import logging
from functools import lru_cache

from pymongo import MongoClient, ASCENDING
from pymongo.database import Database

from acadeval.config import settings
from acadeval.core.constants import Collections

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client() -> MongoClient:
    """Shared client for the configured MONGO_URI"""
    logger.info(f"Connecting to MongoDB database '{settings.MONGO_DB_NAME}'")
    return MongoClient(settings.MONGO_URI)


def get_database() -> Database:
    """FastAPI dependency returning the application database"""
    return get_client()[settings.MONGO_DB_NAME]


def ensure_indexes(db: Database) -> None:
    """Create the unique indexes the services rely on"""
    db[Collections.USERS].create_index([("email", ASCENDING)], unique=True)
    db[Collections.COURSES].create_index([("code", ASCENDING)], unique=True)
    db[Collections.SUBMISSIONS].create_index(
        [("exam", ASCENDING), ("student", ASCENDING)],
        unique=True
    )
    # (exam, evaluator, evaluatee) is the idempotence key for peer assignment
    db[Collections.EVALUATIONS].create_index(
        [("exam", ASCENDING), ("evaluator", ASCENDING), ("evaluatee", ASCENDING)],
        unique=True
    )
    db[Collections.EVALUATIONS].create_index([("evaluator", ASCENDING)])
    logger.info("MongoDB indexes ensured")
