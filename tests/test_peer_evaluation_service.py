"""
Tests for peer evaluation assignment and submission against an in-memory MongoDB
"""
import random

import pytest

from acadeval.core import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    Collections,
)
from acadeval.db import EvaluationRepository, ExamRepository, SubmissionRepository
from acadeval.evaluation import group_by_evaluator, new_evaluation
from acadeval.services import ExamService, PeerEvaluationService


@pytest.fixture
def service(db):
    return PeerEvaluationService(db, rng=random.Random(42))


class TestSendSolutions:
    def test_creates_k_evaluations_per_submitter(self, db, seed, service):
        result = service.send_solutions(seed.exam_id, seed.teacher_id)

        assert result["created"] == 4 * 2
        assert result["skipped"] == 0
        assert result["evaluators"] == 4

        evaluations = EvaluationRepository(db).list_for_exam(seed.exam_id)
        assert len(evaluations) == 8
        for ev in evaluations:
            assert ev["evaluator"] != ev["evaluatee"]
            assert ev["marks"] == [0, 0, 0]
            assert ev["feedback"] == ""
            assert ev["status"] == "pending"

    def test_rerun_creates_nothing(self, db, seed, service):
        service.send_solutions(seed.exam_id, seed.teacher_id)
        second = service.send_solutions(seed.exam_id, seed.teacher_id)

        assert second["created"] == 0
        assert db[Collections.EVALUATIONS].count_documents({}) == 8

    def test_raising_k_tops_up_without_duplicates(self, db, seed, service):
        service.send_solutions(seed.exam_id, seed.teacher_id)
        ExamService(db).update_exam(seed.exam_id, seed.teacher_id, k=3)

        result = service.send_solutions(seed.exam_id, seed.teacher_id)

        assert result["created"] == 4
        pairs = EvaluationRepository(db).existing_pairs(seed.exam_id)
        assert len(pairs) == 12
        assert all(len(vs) == 3 for vs in group_by_evaluator(pairs).values())

    def test_mark_vector_uses_question_count_at_creation(self, db, seed, service):
        ExamService(db).update_exam(seed.exam_id, seed.teacher_id, num_questions=5)
        service.send_solutions(seed.exam_id, seed.teacher_id)

        for ev in EvaluationRepository(db).list_for_exam(seed.exam_id):
            assert ev["marks"] == [0] * 5

    def test_no_submissions(self, db, seed, service):
        db[Collections.SUBMISSIONS].delete_many({})
        with pytest.raises(BadRequestException):
            service.send_solutions(seed.exam_id, seed.teacher_id)

    def test_single_submitter_creates_nothing(self, db, seed, service):
        db[Collections.SUBMISSIONS].delete_many({})
        SubmissionRepository(db).create(seed.exam_id, seed.student_ids[0])

        result = service.send_solutions(seed.exam_id, seed.teacher_id)
        assert result["created"] == 0

    def test_other_teacher_cannot_release(self, seed, service):
        with pytest.raises(NotFoundException):
            service.send_solutions(seed.exam_id, seed.other_teacher_id)

    def test_stored_negative_k_is_reported(self, db, seed, service):
        ExamRepository(db).update(seed.exam_id, {"k": -1})
        with pytest.raises(BadRequestException):
            service.send_solutions(seed.exam_id, seed.teacher_id)


class TestInsertIfAbsent:
    def test_second_insert_is_ignored(self, db, seed):
        repo = EvaluationRepository(db)
        a, b = seed.student_ids[:2]
        record = new_evaluation(seed.exam_id, a, b, 3)

        assert repo.insert_if_absent(record) is True
        assert repo.insert_if_absent(record) is False
        assert len(repo.list_for_exam(seed.exam_id)) == 1

    def test_existing_record_is_not_overwritten(self, db, seed):
        repo = EvaluationRepository(db)
        a, b = seed.student_ids[:2]
        repo.insert_if_absent(new_evaluation(seed.exam_id, a, b, 3))
        evaluation_id = repo.list_for_exam(seed.exam_id)[0]["id"]
        repo.complete(evaluation_id, [5, 5, 5], "good")

        repo.insert_if_absent(new_evaluation(seed.exam_id, a, b, 3))

        stored = repo.find_by_id(evaluation_id)
        assert stored["status"] == "completed"
        assert stored["marks"] == [5, 5, 5]


class TestSubmitEvaluation:
    @pytest.fixture
    def evaluation(self, db, seed, service):
        service.send_solutions(seed.exam_id, seed.teacher_id)
        return EvaluationRepository(db).list_for_exam(seed.exam_id)[0]

    def test_completes_pending_evaluation(self, service, evaluation):
        updated = service.submit_evaluation(
            evaluation["id"], evaluation["evaluator"], [7, 8, 10], "Clear reasoning"
        )

        assert updated["status"] == "completed"
        assert updated["marks"] == [7, 8, 10]
        assert updated["feedback"] == "Clear reasoning"

    def test_completed_evaluation_cannot_be_reopened(self, service, evaluation):
        service.submit_evaluation(evaluation["id"], evaluation["evaluator"], [1, 2, 3])
        with pytest.raises(ConflictException):
            service.submit_evaluation(evaluation["id"], evaluation["evaluator"], [4, 5, 6])

    def test_only_assigned_evaluator(self, service, evaluation):
        with pytest.raises(ForbiddenException):
            service.submit_evaluation(evaluation["id"], evaluation["evaluatee"], [1, 2, 3])

    def test_mark_count_must_match(self, service, evaluation):
        with pytest.raises(BadRequestException):
            service.submit_evaluation(evaluation["id"], evaluation["evaluator"], [1, 2])

    def test_mark_out_of_range(self, service, evaluation):
        with pytest.raises(BadRequestException):
            service.submit_evaluation(evaluation["id"], evaluation["evaluator"], [1, 11, 2])
        with pytest.raises(BadRequestException):
            service.submit_evaluation(evaluation["id"], evaluation["evaluator"], [-1, 0, 0])

    @pytest.mark.parametrize("bad_mark", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_mark(self, service, evaluation, bad_mark):
        with pytest.raises(BadRequestException):
            service.submit_evaluation(evaluation["id"], evaluation["evaluator"], [1, bad_mark, 2])

    def test_unknown_evaluation(self, service, seed):
        with pytest.raises(NotFoundException):
            service.submit_evaluation("not-an-id", seed.student_ids[0], [])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
