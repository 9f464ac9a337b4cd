"""Classroom endpoints for teachers and students."""

from fastapi import APIRouter, HTTPException, Query, status

from staarkids.db.classrooms_repository import (
    AlreadyEnrolledError,
    ClassroomCodeExhaustedError,
    ClassroomFullError,
    ClassroomNotFoundError,
    create_classroom,
    join_classroom,
    list_classroom_students,
    list_classrooms_by_teacher,
    list_student_classrooms,
    list_students_by_teacher,
)
from staarkids.db.users_repository import get_user
from staarkids.web.schemas import (
    ClassroomCreate,
    ClassroomJoinRequest,
    ClassroomListResponse,
    ClassroomResponse,
    EnrollmentResponse,
    TeacherStudentsResponse,
    UserResponse,
)

router = APIRouter(prefix="/api", tags=["classrooms"])


def _require_teacher(user_id: str) -> None:
    user = get_user(user_id)
    if user is None or user.role != "teacher":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher access required",
        )


@router.post(
    "/teacher/classrooms",
    response_model=ClassroomResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_teacher_classroom(body: ClassroomCreate) -> ClassroomResponse:
    """Create a classroom. Only teachers may do this."""
    _require_teacher(body.teacher_id)

    try:
        classroom = create_classroom(
            teacher_id=body.teacher_id,
            class_name=body.class_name,
            grade=body.grade,
            subject=body.subject,
            max_students=body.max_students,
        )
    except ClassroomCodeExhaustedError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )

    return ClassroomResponse(**classroom.to_dict())


@router.get("/teacher/classrooms", response_model=ClassroomListResponse)
async def teacher_classrooms(
    teacher_id: str = Query(..., alias="teacherId"),
) -> ClassroomListResponse:
    """Active classrooms of a teacher."""
    classrooms = [
        ClassroomResponse(**c.to_dict()) for c in list_classrooms_by_teacher(teacher_id)
    ]
    return ClassroomListResponse(classrooms=classrooms, count=len(classrooms))


@router.get("/teacher/students", response_model=TeacherStudentsResponse)
async def teacher_students(
    teacher_id: str = Query(..., alias="teacherId"),
) -> TeacherStudentsResponse:
    """Students enrolled in any of a teacher's classrooms."""
    _require_teacher(teacher_id)

    students = [UserResponse(**u.to_dict()) for u in list_students_by_teacher(teacher_id)]
    return TeacherStudentsResponse(students=students, count=len(students))


@router.get(
    "/teacher/classrooms/{classroom_id}/students",
    response_model=TeacherStudentsResponse,
)
async def classroom_students(
    classroom_id: int,
    teacher_id: str = Query(..., alias="teacherId"),
) -> TeacherStudentsResponse:
    """Roster of one of the teacher's classrooms."""
    _require_teacher(teacher_id)

    owned = {c.classroom_id for c in list_classrooms_by_teacher(teacher_id)}
    if classroom_id not in owned:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Classroom not found",
        )

    students = [UserResponse(**u.to_dict()) for u in list_classroom_students(classroom_id)]
    return TeacherStudentsResponse(students=students, count=len(students))


@router.post(
    "/classroom/join",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join(body: ClassroomJoinRequest) -> EnrollmentResponse:
    """Enroll a student with a classroom code."""
    if get_user(body.student_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{body.student_id}' not found",
        )

    try:
        enrollment = join_classroom(body.student_id, body.code)
    except ClassroomNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AlreadyEnrolledError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ClassroomFullError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return EnrollmentResponse(**enrollment.to_dict())


@router.get("/classroom/student", response_model=ClassroomListResponse)
async def student_classrooms(
    student_id: str = Query(..., alias="studentId"),
) -> ClassroomListResponse:
    """Classrooms a student is enrolled in."""
    classrooms = [
        ClassroomResponse(**c.to_dict()) for c in list_student_classrooms(student_id)
    ]
    return ClassroomListResponse(classrooms=classrooms, count=len(classrooms))
