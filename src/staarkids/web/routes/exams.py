"""Mock exam endpoints.

Exams are assembled from stored questions and graded server-side;
clients never see correct answers before submitting.
"""

import structlog
from fastapi import APIRouter, HTTPException, Query, status

from staarkids.core.scoring import grade_exam
from staarkids.core.teks import validate_grade_subject
from staarkids.db.exams_repository import (
    MockExamRecord,
    complete_exam_attempt,
    create_exam_attempt,
    create_mock_exam,
    get_exam_attempt,
    get_exam_history,
    get_exam_questions,
    get_mock_exam,
    list_mock_exams,
    set_exam_questions,
)
from staarkids.db.questions_repository import get_random_questions
from staarkids.db.users_repository import get_user
from staarkids.web.schemas import (
    ExamAttemptDetailResponse,
    ExamAttemptResponse,
    ExamHistoryResponse,
    ExamQuestion,
    ExamStartRequest,
    ExamSubmitRequest,
    ExamSubmitResponse,
    MockExamCreate,
    MockExamDetailResponse,
    MockExamListResponse,
    MockExamResponse,
    QuestionPayload,
    QuestionResultResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/exams", tags=["exams"])


def _get_exam_or_404(exam_id: int) -> MockExamRecord:
    exam = get_mock_exam(exam_id)
    if exam is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Exam {exam_id} not found",
        )
    return exam


def _require_user(user_id: str) -> None:
    if get_user(user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{user_id}' not found",
        )


@router.get("", response_model=MockExamListResponse)
async def list_exams(grade: int | None = Query(default=None)) -> MockExamListResponse:
    """List mock exams, optionally for one grade."""
    exams = [MockExamResponse(**e.to_dict()) for e in list_mock_exams(grade)]
    return MockExamListResponse(exams=exams, count=len(exams))


@router.post("", response_model=MockExamDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_exam(body: MockExamCreate) -> MockExamDetailResponse:
    """Build a mock exam from randomly drawn stored questions."""
    try:
        validate_grade_subject(body.grade, body.subject)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    questions = get_random_questions(body.grade, body.subject, body.question_count)
    if not questions:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"No stored questions for grade {body.grade} {body.subject}",
        )

    exam = create_mock_exam(
        name=body.name,
        grade=body.grade,
        subject=body.subject,
        total_questions=len(questions),
        time_limit=body.time_limit,
    )
    set_exam_questions(exam.exam_id, [q.question_id for q in questions])

    if len(questions) < body.question_count:
        logger.warning(
            "exam_short_of_questions",
            exam_id=exam.exam_id,
            requested=body.question_count,
            available=len(questions),
        )

    return MockExamDetailResponse(
        exam=MockExamResponse(**exam.to_dict()),
        questions=[ExamQuestion.from_question(q) for q in questions],
    )


@router.get("/history", response_model=ExamHistoryResponse)
async def exam_history(user_id: str = Query(..., alias="userId")) -> ExamHistoryResponse:
    """All exam attempts of a user, newest first."""
    attempts = [ExamAttemptResponse(**a.to_dict()) for a in get_exam_history(user_id)]
    return ExamHistoryResponse(attempts=attempts, count=len(attempts))


@router.get("/attempts/{attempt_id}", response_model=ExamAttemptDetailResponse)
async def exam_attempt_details(
    attempt_id: int,
    user_id: str = Query(..., alias="userId"),
) -> ExamAttemptDetailResponse:
    """An attempt with its exam; answers are included once it is completed."""
    attempt = get_exam_attempt(attempt_id)
    if attempt is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Exam attempt not found",
        )
    if attempt.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )

    exam = _get_exam_or_404(attempt.exam_id)
    questions = get_exam_questions(exam.exam_id)

    return ExamAttemptDetailResponse(
        attempt=ExamAttemptResponse(**attempt.to_dict()),
        exam=MockExamResponse(**exam.to_dict()),
        questions=[ExamQuestion.from_question(q) for q in questions],
        review=[QuestionPayload.from_question(q) for q in questions] if attempt.completed else [],
    )


@router.get("/{exam_id}", response_model=MockExamDetailResponse)
async def get_exam(exam_id: int) -> MockExamDetailResponse:
    """Get an exam and its questions (without answers)."""
    exam = _get_exam_or_404(exam_id)
    return MockExamDetailResponse(
        exam=MockExamResponse(**exam.to_dict()),
        questions=[ExamQuestion.from_question(q) for q in get_exam_questions(exam_id)],
    )


@router.post(
    "/{exam_id}/start",
    response_model=ExamAttemptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_exam(exam_id: int, body: ExamStartRequest) -> ExamAttemptResponse:
    """Open an attempt on an exam."""
    exam = _get_exam_or_404(exam_id)
    _require_user(body.user_id)

    attempt = create_exam_attempt(body.user_id, exam_id, exam.total_questions)
    return ExamAttemptResponse(**attempt.to_dict())


@router.post("/{exam_id}/submit", response_model=ExamSubmitResponse)
async def submit_exam(exam_id: int, body: ExamSubmitRequest) -> ExamSubmitResponse:
    """Grade submitted answers and complete the attempt."""
    exam = _get_exam_or_404(exam_id)

    if body.attempt_id is not None:
        attempt = get_exam_attempt(body.attempt_id)
        if attempt is None or attempt.exam_id != exam_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Attempt {body.attempt_id} not found for exam {exam_id}",
            )
        if attempt.completed:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Attempt {body.attempt_id} already submitted",
            )
    elif body.user_id:
        _require_user(body.user_id)
        attempt = create_exam_attempt(body.user_id, exam_id, exam.total_questions)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="attemptId or userId is required",
        )

    result = grade_exam(get_exam_questions(exam_id), body.answers)
    completed = complete_exam_attempt(
        attempt.attempt_id,
        score=result.score,
        correct_answers=result.correct_answers,
        time_spent=body.time_spent,
    )

    return ExamSubmitResponse(
        attempt=ExamAttemptResponse(**completed.to_dict()),
        total_questions=result.total_questions,
        correct_answers=result.correct_answers,
        score=result.score,
        results=[QuestionResultResponse(**r.to_dict()) for r in result.results],
    )
