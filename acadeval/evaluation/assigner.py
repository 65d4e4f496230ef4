"""
Peer Evaluation Assigner
Decides which submitters evaluate which peers for an exam
"""
import random
import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, Iterable, List, Optional, Set, Tuple

from acadeval.core.constants import EvaluationStatus

logger = logging.getLogger(__name__)

# (evaluator, evaluatee)
Pair = Tuple[str, str]


class InvalidKError(ValueError):
    """Raised when the number of peers per evaluator is negative"""

    def __init__(self, k: int):
        super().__init__(f"k must be >= 0, got {k}")
        self.k = k


@dataclass
class EvaluationRecord:
    """A single peer evaluation assignment as stored in the evaluations collection"""
    exam: str
    evaluator: str
    evaluatee: str
    marks: List[float] = field(default_factory=list)
    feedback: str = ""
    status: str = EvaluationStatus.PENDING.value

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        return asdict(self)


def new_evaluation(
    exam_id: str,
    evaluator: str,
    evaluatee: str,
    num_questions: int
) -> EvaluationRecord:
    """
    Build a pending evaluation with a zeroed mark vector.

    Args:
        exam_id: Exam the evaluation belongs to
        evaluator: Student doing the grading
        evaluatee: Student being graded
        num_questions: Exam question count at creation time

    Returns:
        EvaluationRecord with ``num_questions`` zero marks
    """
    if evaluator == evaluatee:
        raise ValueError("A student cannot evaluate their own submission")
    if num_questions < 0:
        raise ValueError(f"num_questions must be >= 0, got {num_questions}")

    return EvaluationRecord(
        exam=exam_id,
        evaluator=evaluator,
        evaluatee=evaluatee,
        marks=[0] * num_questions,
    )


def group_by_evaluator(pairs: Iterable[Pair]) -> Dict[str, Set[str]]:
    """Map each evaluator to the set of evaluatees it holds"""
    grouped: Dict[str, Set[str]] = {}
    for evaluator, evaluatee in pairs:
        grouped.setdefault(evaluator, set()).add(evaluatee)
    return grouped


def assign_peers(
    exam_id: str,
    k: int,
    submitter_ids: Iterable[str],
    existing_pairs: Iterable[Pair] = (),
    rng: Optional[random.Random] = None
) -> Set[Pair]:
    """
    Compute the new (evaluator, evaluatee) pairs for an exam.

    Every submitter ends up with at most ``min(k, S - 1)`` evaluatees in total,
    counting the pairs it already holds. Evaluatees are drawn uniformly at
    random without replacement from the other submitters. Pairs already in
    ``existing_pairs`` are never returned, so re-running is safe.

    Args:
        exam_id: Exam identifier, used for logging only
        k: Target number of evaluatees per evaluator
        submitter_ids: Students with a submission on record
        existing_pairs: Pairs already stored for this exam
        rng: Random source, defaults to the ``random`` module

    Returns:
        Set of pairs to create

    Raises:
        InvalidKError: if ``k`` is negative
    """
    if k < 0:
        raise InvalidKError(k)

    submitters = set(submitter_ids)
    if len(submitters) <= 1:
        logger.info(f"Exam {exam_id}: {len(submitters)} submitter(s), nothing to assign")
        return set()

    rng = rng or random
    target = min(k, len(submitters) - 1)

    # Pairs pointing outside the current submitter set do not count toward the cap
    held = group_by_evaluator(
        (e, v) for e, v in existing_pairs
        if e in submitters and v in submitters and e != v
    )

    new_pairs: Set[Pair] = set()
    for evaluator in sorted(submitters):
        already = held.get(evaluator, set())
        quota = target - len(already)
        if quota <= 0:
            continue

        pool = sorted(submitters - already - {evaluator})
        for evaluatee in rng.sample(pool, min(quota, len(pool))):
            new_pairs.add((evaluator, evaluatee))

    logger.info(
        f"Exam {exam_id}: {len(new_pairs)} new pair(s) for "
        f"{len(submitters)} submitters (k={k}, effective={target})"
    )
    return new_pairs
