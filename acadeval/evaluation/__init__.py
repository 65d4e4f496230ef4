"""
Peer evaluation module

Usage:
    from acadeval.evaluation import assign_peers, new_evaluation

    pairs = assign_peers(exam_id, k=2, submitter_ids=students, existing_pairs=stored)
    records = [new_evaluation(exam_id, e, v, num_questions) for e, v in pairs]
"""

from .assigner import (
    Pair,
    InvalidKError,
    EvaluationRecord,
    new_evaluation,
    group_by_evaluator,
    assign_peers,
)

__all__ = [
    "Pair",
    "InvalidKError",
    "EvaluationRecord",
    "new_evaluation",
    "group_by_evaluator",
    "assign_peers",
]
