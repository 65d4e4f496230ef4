"""
Student API routes
Peer evaluations assigned to the caller
"""
from typing import Dict, List
from fastapi import APIRouter, Depends

from acadeval.core import Role
from acadeval.dependencies import get_peer_evaluation_service, require_role
from acadeval.schemas import EvaluationInfo, EvaluationSubmitRequest
from acadeval.services import PeerEvaluationService

router = APIRouter()

student_only = require_role(Role.STUDENT)


@router.get("/evaluations", response_model=List[EvaluationInfo])
async def my_evaluations(
    user: Dict = Depends(student_only),
    service: PeerEvaluationService = Depends(get_peer_evaluation_service)
):
    """
    Evaluations the caller has to perform
    """
    return service.evaluations_for_student(user["id"])


@router.post("/evaluations/{evaluation_id}", response_model=EvaluationInfo)
async def submit_evaluation(
    evaluation_id: str,
    request: EvaluationSubmitRequest,
    user: Dict = Depends(student_only),
    service: PeerEvaluationService = Depends(get_peer_evaluation_service)
):
    return service.submit_evaluation(evaluation_id, user["id"], request.marks, request.feedback)
