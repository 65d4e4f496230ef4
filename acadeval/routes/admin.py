"""
Admin API routes
Teacher-course assignment
"""
from typing import List
from fastapi import APIRouter, Depends

from acadeval.core import Role
from acadeval.dependencies import get_admin_service, require_role
from acadeval.schemas import MessageResponse, TeacherCourseRequest, TeacherInfo
from acadeval.services import AdminService

router = APIRouter(dependencies=[Depends(require_role(Role.ADMIN))])


@router.post("/assign-teacher", response_model=MessageResponse)
async def assign_teacher_to_course(
    request: TeacherCourseRequest,
    service: AdminService = Depends(get_admin_service)
):
    """
    Add a course to a teacher's enrolled courses (no-op if already assigned)
    """
    result = service.assign_teacher_to_course(request.email, request.course_code)
    return MessageResponse(message=result["message"])


@router.post("/unassign-teacher", response_model=MessageResponse)
async def unassign_teacher_from_course(
    request: TeacherCourseRequest,
    service: AdminService = Depends(get_admin_service)
):
    result = service.unassign_teacher_from_course(request.email, request.course_code)
    return MessageResponse(message=result["message"])


@router.get("/teachers", response_model=List[TeacherInfo])
async def get_all_teachers(service: AdminService = Depends(get_admin_service)):
    """
    List teachers with their courses
    """
    return service.get_all_teachers()


@router.delete("/teachers/{email}", response_model=MessageResponse)
async def delete_teacher(email: str, service: AdminService = Depends(get_admin_service)):
    result = service.delete_teacher(email)
    return MessageResponse(message=result["message"])
