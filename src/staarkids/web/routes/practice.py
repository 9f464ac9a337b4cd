"""Practice endpoints: answering questions and progress statistics."""

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Query, status

from staarkids.core.scoring import normalize_letter
from staarkids.core.teks import validate_grade_subject
from staarkids.db.attempts_repository import (
    create_practice_attempt,
    get_overall_accuracy,
    get_practice_history,
    get_user_progress,
    get_user_stats,
)
from staarkids.db.questions_repository import get_question
from staarkids.db.users_repository import get_user
from staarkids.web.schemas import (
    AccuracyResponse,
    PracticeAttemptCreate,
    PracticeAttemptResponse,
    PracticeHistoryResponse,
    ProgressEntry,
    ProgressResponse,
    UserStatsResponse,
)

router = APIRouter(prefix="/api", tags=["practice"])


def _require_user(user_id: str) -> None:
    if get_user(user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{user_id}' not found",
        )


@router.post(
    "/practice/attempt",
    response_model=PracticeAttemptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_attempt(body: PracticeAttemptCreate) -> PracticeAttemptResponse:
    """Record an answer to a stored question."""
    _require_user(body.user_id)

    question = get_question(body.question_id)
    if question is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Question {body.question_id} not found",
        )

    selected = None if body.skipped else normalize_letter(body.selected_answer)
    is_correct = selected is not None and selected == question.correct_answer

    attempt = create_practice_attempt(
        user_id=body.user_id,
        question_id=body.question_id,
        is_correct=is_correct,
        selected_answer=selected,
        hints_used=body.hints_used,
        time_spent=body.time_spent,
        skipped=body.skipped,
    )

    return PracticeAttemptResponse(
        **attempt.to_dict(),
        correct_answer=question.correct_answer,
        explanation=question.explanation,
    )


@router.get("/practice/history", response_model=PracticeHistoryResponse)
async def practice_history(
    user_id: str = Query(..., alias="userId"),
    limit: int = Query(default=10, ge=1, le=100),
) -> PracticeHistoryResponse:
    """Most recent practice attempts of a user."""
    attempts = [
        PracticeAttemptResponse(**a.to_dict())
        for a in get_practice_history(user_id, limit=limit)
    ]
    return PracticeHistoryResponse(attempts=attempts, count=len(attempts))


@router.get("/progress/{grade}", response_model=ProgressResponse)
async def progress(
    grade: int,
    user_id: str = Query(..., alias="userId"),
) -> ProgressResponse:
    """Per-TEKS progress of a user for one grade."""
    entries = [ProgressEntry(**asdict(p)) for p in get_user_progress(user_id, grade)]
    return ProgressResponse(user_id=user_id, grade=grade, progress=entries)


@router.get("/stats/{grade}/{subject}", response_model=UserStatsResponse)
async def stats(
    grade: int,
    subject: str,
    user_id: str = Query(..., alias="userId"),
) -> UserStatsResponse:
    """Practice statistics for a grade and subject."""
    try:
        validate_grade_subject(grade, subject)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return UserStatsResponse(**asdict(get_user_stats(user_id, grade, subject)))


@router.get("/accuracy", response_model=AccuracyResponse)
async def accuracy(user_id: str = Query(..., alias="userId")) -> AccuracyResponse:
    """Accuracy across all of a user's practice."""
    return AccuracyResponse(**asdict(get_overall_accuracy(user_id)))
