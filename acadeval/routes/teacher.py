"""
Teacher API routes
Courses, rosters, exams and peer evaluation release
"""
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response

from acadeval.core import (
    BadRequestException,
    FileProcessingException,
    FileLimits,
    Messages,
    Role,
)
from acadeval.dependencies import (
    get_admin_service,
    get_course_service,
    get_exam_service,
    get_peer_evaluation_service,
    require_role,
)
from acadeval.schemas import (
    EnrollmentResponse,
    EnrollStudentsRequest,
    EvaluationInfo,
    ExamSummary,
    ExamUpdateRequest,
    MessageResponse,
    SendSolutionsResponse,
    SubmissionInfo,
    TeacherCourse,
    UpdateRoleRequest,
    UserInfo,
)
from acadeval.services import AdminService, CourseService, ExamService, PeerEvaluationService

router = APIRouter()

teacher_only = require_role(Role.TEACHER)


async def _read_upload(file: UploadFile) -> bytes:
    """Read an upload, enforcing the accepted MIME types and size limit"""
    if file.content_type not in FileLimits.ALLOWED_MIME_TYPES:
        raise BadRequestException(Messages.INVALID_FILE_TYPE)
    content = await file.read()
    if len(content) > FileLimits.MAX_UPLOAD_SIZE:
        raise BadRequestException("File size exceeds limit")
    return content


# ===== Users =====
@router.post("/update-role", response_model=MessageResponse)
async def update_role(
    request: UpdateRoleRequest,
    user: Dict = Depends(require_role(Role.TEACHER, Role.ADMIN)),
    service: AdminService = Depends(get_admin_service)
):
    """
    Teachers may switch users between student and TA; any other change needs an admin
    """
    result = service.update_role(request.email, request.role, caller_role=Role(user["role"]))
    return MessageResponse(message=result["message"])


@router.get("/users", response_model=List[UserInfo])
async def list_users(
    user: Dict = Depends(require_role(Role.TEACHER, Role.ADMIN)),
    service: AdminService = Depends(get_admin_service)
):
    """
    Students and TAs
    """
    return service.list_users()


# ===== Courses & rosters =====
@router.get("/teacher-courses", response_model=List[TeacherCourse])
async def teacher_courses(
    user: Dict = Depends(teacher_only),
    service: CourseService = Depends(get_course_service)
):
    return service.teacher_courses(user["id"])


@router.get("/enrolled-students")
async def enrolled_students(
    course_id: str = Query(None),
    batch_id: str = Query(None),
    user: Dict = Depends(teacher_only),
    service: CourseService = Depends(get_course_service)
):
    return service.enrolled_students(course_id, batch_id)


@router.get("/download-students-csv")
async def download_students_csv(
    course_id: str = Query(None),
    batch_id: str = Query(None),
    user: Dict = Depends(teacher_only),
    service: CourseService = Depends(get_course_service)
):
    """
    Roster of a batch the caller instructs, as CSV
    """
    filename, content = service.students_csv(course_id, batch_id, user["id"])
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/enroll-students", response_model=EnrollmentResponse)
async def enroll_students_csv(
    batch_id: str = Form(...),
    csv_file: UploadFile = File(...),
    user: Dict = Depends(teacher_only),
    service: CourseService = Depends(get_course_service)
):
    """
    Enroll students from an uploaded name,email CSV
    """
    content = await _read_upload(csv_file)
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise FileProcessingException(csv_file.filename, "file is not valid UTF-8")
    return service.enroll_students_csv(batch_id, text)


@router.post("/enroll-students-json", response_model=EnrollmentResponse)
async def enroll_students_json(
    request: EnrollStudentsRequest,
    user: Dict = Depends(teacher_only),
    service: CourseService = Depends(get_course_service)
):
    return service.enroll_students(
        request.batch_id,
        [s.model_dump() for s in request.students]
    )


# ===== Exams =====
@router.post("/schedule-exam", status_code=201)
async def schedule_exam(
    course_id: str = Form(...),
    batch_id: str = Form(...),
    title: str = Form(...),
    start_time: datetime = Form(...),
    end_time: datetime = Form(...),
    num_questions: int = Form(...),
    k: int = Form(...),
    solutions: Optional[UploadFile] = File(None),
    user: Dict = Depends(teacher_only),
    service: ExamService = Depends(get_exam_service)
):
    """
    Schedule an exam; a solutions PDF may be attached
    """
    solution = None
    if solutions is not None and solutions.filename:
        solution = (await _read_upload(solutions), solutions.content_type)

    exam = service.schedule_exam(
        teacher_id=user["id"],
        course_id=course_id,
        batch_id=batch_id,
        title=title,
        start_time=start_time,
        end_time=end_time,
        num_questions=num_questions,
        k=k,
        solution=solution
    )
    return {"success": True, "message": Messages.EXAM_SCHEDULED, "exam": exam}


@router.get("/exams", response_model=List[ExamSummary])
async def list_exams(
    user: Dict = Depends(teacher_only),
    service: ExamService = Depends(get_exam_service)
):
    return service.list_exams(user["id"])


@router.put("/exam/{exam_id}")
async def update_exam(
    exam_id: str,
    request: ExamUpdateRequest,
    user: Dict = Depends(teacher_only),
    service: ExamService = Depends(get_exam_service)
):
    exam = service.update_exam(exam_id, user["id"], **request.model_dump())
    return {"success": True, "message": Messages.EXAM_UPDATED, "exam": exam}


@router.delete("/exam/{exam_id}", response_model=MessageResponse)
async def delete_exam(
    exam_id: str,
    user: Dict = Depends(teacher_only),
    service: ExamService = Depends(get_exam_service)
):
    """
    Delete an exam with its submissions and evaluations
    """
    service.delete_exam(exam_id, user["id"])
    return MessageResponse(message=Messages.EXAM_DELETED)


@router.get("/exam-submissions/{exam_id}", response_model=List[SubmissionInfo])
async def exam_submissions(
    exam_id: str,
    user: Dict = Depends(teacher_only),
    service: ExamService = Depends(get_exam_service)
):
    return service.exam_submissions(exam_id, user["id"])


@router.post("/upload-solution/{exam_id}", response_model=MessageResponse)
async def upload_solution(
    exam_id: str,
    solution_pdf: UploadFile = File(...),
    user: Dict = Depends(teacher_only),
    service: ExamService = Depends(get_exam_service)
):
    content = await _read_upload(solution_pdf)
    service.upload_solution(exam_id, user["id"], content, solution_pdf.content_type)
    return MessageResponse(message=Messages.SOLUTION_UPLOADED)


@router.get("/solution/{exam_id}")
async def get_solution(
    exam_id: str,
    user: Dict = Depends(teacher_only),
    service: ExamService = Depends(get_exam_service)
):
    content, mime_type = service.get_solution(exam_id, user["id"])
    return Response(
        content=content,
        media_type=mime_type,
        headers={"Content-Disposition": f'inline; filename="solution_{exam_id}.pdf"'}
    )


# ===== Peer evaluation =====
@router.post("/send-solutions/{exam_id}", response_model=SendSolutionsResponse)
async def send_solutions(
    exam_id: str,
    user: Dict = Depends(teacher_only),
    service: PeerEvaluationService = Depends(get_peer_evaluation_service)
):
    """
    Release solutions and assign each submitter k peers to evaluate
    """
    return service.send_solutions(exam_id, user["id"])


@router.get("/exam/{exam_id}/evaluations", response_model=List[EvaluationInfo])
async def exam_evaluations(
    exam_id: str,
    user: Dict = Depends(teacher_only),
    service: PeerEvaluationService = Depends(get_peer_evaluation_service)
):
    return service.list_evaluations(exam_id, user["id"])
