"""
Collection repositories
Thin wrappers around pymongo collections. Ids leave this module as strings.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from acadeval.core.constants import Collections, EvaluationStatus
from acadeval.evaluation import EvaluationRecord, Pair

logger = logging.getLogger(__name__)


def parse_id(value: Any) -> Optional[ObjectId]:
    """Convert a string id to ObjectId, None if it is not a valid id"""
    if isinstance(value, ObjectId):
        return value
    if value is not None and ObjectId.is_valid(str(value)):
        return ObjectId(str(value))
    return None


def serialize(doc: Optional[Dict]) -> Optional[Dict]:
    """Replace ObjectIds (including inside lists) with strings, _id becomes id"""
    if doc is None:
        return None

    def convert(value):
        if isinstance(value, ObjectId):
            return str(value)
        if isinstance(value, list):
            return [convert(v) for v in value]
        return value

    out = {key: convert(value) for key, value in doc.items() if key != "_id"}
    if "_id" in doc:
        out["id"] = str(doc["_id"])
    return out


def _ids(values: Iterable[Any]) -> List[ObjectId]:
    return [oid for oid in (parse_id(v) for v in values) if oid is not None]


class UserRepository:
    """Users of every role"""

    def __init__(self, db: Database):
        self.col = db[Collections.USERS]

    def find_by_id(self, user_id: str) -> Optional[Dict]:
        oid = parse_id(user_id)
        if oid is None:
            return None
        return serialize(self.col.find_one({"_id": oid}))

    def find_by_email(self, email: str, role: Optional[str] = None) -> Optional[Dict]:
        query: Dict[str, Any] = {"email": email}
        if role:
            query["role"] = role
        return serialize(self.col.find_one(query))

    def list_by_roles(self, roles: Iterable[str]) -> List[Dict]:
        cursor = self.col.find(
            {"role": {"$in": list(roles)}},
            {"password_hash": 0}
        )
        return [serialize(doc) for doc in cursor]

    def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str,
        enrolled_courses: Iterable[str] = ()
    ) -> str:
        result = self.col.insert_one({
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "role": role,
            "enrolled_courses": _ids(enrolled_courses),
        })
        return str(result.inserted_id)

    def update_role(self, email: str, role: str) -> Optional[Dict]:
        doc = self.col.find_one_and_update(
            {"email": email},
            {"$set": {"role": role}},
            return_document=ReturnDocument.AFTER
        )
        return serialize(doc)

    def add_course(self, user_id: str, course_id: str) -> bool:
        """Add a course to enrolled_courses; False if it was already there"""
        result = self.col.update_one(
            {"_id": parse_id(user_id)},
            {"$addToSet": {"enrolled_courses": parse_id(course_id)}}
        )
        return result.modified_count > 0

    def remove_course(self, user_id: str, course_id: str) -> bool:
        result = self.col.update_one(
            {"_id": parse_id(user_id)},
            {"$pull": {"enrolled_courses": parse_id(course_id)}}
        )
        return result.modified_count > 0

    def delete_by_email(self, email: str, role: str) -> bool:
        return self.col.delete_one({"email": email, "role": role}).deleted_count > 0

    def find_by_ids(self, user_ids: Iterable[str]) -> List[Dict]:
        cursor = self.col.find({"_id": {"$in": _ids(user_ids)}}, {"password_hash": 0})
        return [serialize(doc) for doc in cursor]


class CourseRepository:
    def __init__(self, db: Database):
        self.col = db[Collections.COURSES]

    def create(self, name: str, code: str) -> str:
        return str(self.col.insert_one({"name": name, "code": code}).inserted_id)

    def find_by_id(self, course_id: str) -> Optional[Dict]:
        oid = parse_id(course_id)
        if oid is None:
            return None
        return serialize(self.col.find_one({"_id": oid}))

    def find_by_code(self, code: str) -> Optional[Dict]:
        return serialize(self.col.find_one({"code": code}))

    def find_by_ids(self, course_ids: Iterable[str]) -> List[Dict]:
        return [serialize(doc) for doc in self.col.find({"_id": {"$in": _ids(course_ids)}})]


class BatchRepository:
    def __init__(self, db: Database):
        self.col = db[Collections.BATCHES]

    def create(
        self,
        name: str,
        course_id: str,
        instructor_id: Optional[str] = None,
        student_ids: Iterable[str] = ()
    ) -> str:
        result = self.col.insert_one({
            "name": name,
            "course": parse_id(course_id),
            "instructor": parse_id(instructor_id),
            "students": _ids(student_ids),
        })
        return str(result.inserted_id)

    def find_by_id(self, batch_id: str, instructor_id: Optional[str] = None) -> Optional[Dict]:
        oid = parse_id(batch_id)
        if oid is None:
            return None
        query: Dict[str, Any] = {"_id": oid}
        if instructor_id is not None:
            query["instructor"] = parse_id(instructor_id)
        return serialize(self.col.find_one(query))

    def find_for_course(self, course_id: str, instructor_id: str) -> Optional[Dict]:
        return serialize(self.col.find_one({
            "course": parse_id(course_id),
            "instructor": parse_id(instructor_id),
        }))

    def add_students(self, batch_id: str, student_ids: Iterable[str]) -> Optional[Dict]:
        doc = self.col.find_one_and_update(
            {"_id": parse_id(batch_id)},
            {"$addToSet": {"students": {"$each": _ids(student_ids)}}},
            return_document=ReturnDocument.AFTER
        )
        return serialize(doc)


class ExamRepository:
    def __init__(self, db: Database):
        self.col = db[Collections.EXAMS]

    def create(self, exam: Dict[str, Any]) -> str:
        doc = dict(exam)
        for key in ("course", "batch", "created_by"):
            doc[key] = parse_id(doc.get(key))
        return str(self.col.insert_one(doc).inserted_id)

    def find_by_id(self, exam_id: str) -> Optional[Dict]:
        oid = parse_id(exam_id)
        if oid is None:
            return None
        return serialize(self.col.find_one({"_id": oid}, {"solution_pdf": 0}))

    def find_owned(self, exam_id: str, teacher_id: str, with_pdf: bool = False) -> Optional[Dict]:
        """Exam by id, only if created by the given teacher"""
        oid = parse_id(exam_id)
        if oid is None:
            return None
        projection = None if with_pdf else {"solution_pdf": 0}
        doc = self.col.find_one({"_id": oid, "created_by": parse_id(teacher_id)}, projection)
        return serialize(doc)

    def list_by_teacher(self, teacher_id: str) -> List[Dict]:
        cursor = self.col.find({"created_by": parse_id(teacher_id)}, {"solution_pdf": 0})
        return [serialize(doc) for doc in cursor]

    def update(self, exam_id: str, fields: Dict[str, Any]) -> Optional[Dict]:
        doc = self.col.find_one_and_update(
            {"_id": parse_id(exam_id)},
            {"$set": fields},
            projection={"solution_pdf": 0},
            return_document=ReturnDocument.AFTER
        )
        return serialize(doc)

    def delete(self, exam_id: str) -> bool:
        return self.col.delete_one({"_id": parse_id(exam_id)}).deleted_count > 0


class SubmissionRepository:
    def __init__(self, db: Database):
        self.col = db[Collections.SUBMISSIONS]

    def create(self, exam_id: str, student_id: str, submitted_at: Optional[datetime] = None) -> str:
        result = self.col.insert_one({
            "exam": parse_id(exam_id),
            "student": parse_id(student_id),
            "submitted_at": submitted_at or datetime.utcnow(),
        })
        return str(result.inserted_id)

    def list_for_exam(self, exam_id: str) -> List[Dict]:
        cursor = self.col.find({"exam": parse_id(exam_id)}).sort("submitted_at", 1)
        return [serialize(doc) for doc in cursor]

    def student_ids_for_exam(self, exam_id: str) -> List[str]:
        return [
            str(doc["student"])
            for doc in self.col.find({"exam": parse_id(exam_id)}, {"student": 1})
        ]

    def delete_for_exam(self, exam_id: str) -> int:
        return self.col.delete_many({"exam": parse_id(exam_id)}).deleted_count


class EvaluationRepository:
    def __init__(self, db: Database):
        self.col = db[Collections.EVALUATIONS]

    def existing_pairs(self, exam_id: str) -> Set[Pair]:
        cursor = self.col.find(
            {"exam": parse_id(exam_id)},
            {"evaluator": 1, "evaluatee": 1}
        )
        return {(str(doc["evaluator"]), str(doc["evaluatee"])) for doc in cursor}

    def insert_if_absent(self, record: EvaluationRecord) -> bool:
        """
        Atomically create the evaluation unless (exam, evaluator, evaluatee) exists.

        Returns:
            True if a new document was inserted
        """
        key = {
            "exam": parse_id(record.exam),
            "evaluator": parse_id(record.evaluator),
            "evaluatee": parse_id(record.evaluatee),
        }
        try:
            result = self.col.update_one(
                key,
                {"$setOnInsert": {
                    "marks": list(record.marks),
                    "feedback": record.feedback,
                    "status": record.status,
                    "created_at": datetime.utcnow(),
                }},
                upsert=True
            )
        except DuplicateKeyError:
            # A concurrent upsert won the race on the unique index
            return False
        return result.upserted_id is not None

    def find_by_id(self, evaluation_id: str) -> Optional[Dict]:
        oid = parse_id(evaluation_id)
        if oid is None:
            return None
        return serialize(self.col.find_one({"_id": oid}))

    def list_for_exam(self, exam_id: str) -> List[Dict]:
        return [serialize(doc) for doc in self.col.find({"exam": parse_id(exam_id)})]

    def list_for_evaluator(self, evaluator_id: str) -> List[Dict]:
        return [serialize(doc) for doc in self.col.find({"evaluator": parse_id(evaluator_id)})]

    def complete(self, evaluation_id: str, marks: List[float], feedback: str) -> Optional[Dict]:
        """Move a pending evaluation to completed; None if it was not pending"""
        doc = self.col.find_one_and_update(
            {"_id": parse_id(evaluation_id), "status": EvaluationStatus.PENDING.value},
            {"$set": {
                "marks": list(marks),
                "feedback": feedback,
                "status": EvaluationStatus.COMPLETED.value,
                "completed_at": datetime.utcnow(),
            }},
            return_document=ReturnDocument.AFTER
        )
        return serialize(doc)

    def delete_for_exam(self, exam_id: str) -> int:
        return self.col.delete_many({"exam": parse_id(exam_id)}).deleted_count
