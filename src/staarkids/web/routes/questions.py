"""Question endpoints: generation, validation and the stored bank."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from staarkids.core.question_generator import QuestionGenerator
from staarkids.core.question_validator import validate_question
from staarkids.core.teks import is_valid_teks, validate_grade_subject
from staarkids.db.questions_repository import (
    count_questions_by_grade_subject,
    get_questions_by_grade_and_subject,
    get_questions_by_teks,
    insert_question,
)
from staarkids.web.dependencies import get_generator
from staarkids.web.schemas import (
    GenerateQuestionsRequest,
    GenerateQuestionsResponse,
    QuestionCount,
    QuestionListResponse,
    QuestionPayload,
    QuestionStatsResponse,
    ValidationResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/questions", tags=["questions"])


def _check_grade_subject(grade: int, subject: str) -> None:
    try:
        validate_grade_subject(grade, subject)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post("/generate", response_model=GenerateQuestionsResponse)
def generate_questions(
    request: GenerateQuestionsRequest,
    generator: QuestionGenerator = Depends(get_generator),
) -> GenerateQuestionsResponse:
    """Generate questions with the LLM, falling back to the built-in bank."""
    _check_grade_subject(request.grade, request.subject)
    if request.teks_standard and not is_valid_teks(request.teks_standard):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid TEKS standard '{request.teks_standard}'",
        )

    questions, method = generator.generate_with_fallback(
        request.grade,
        request.subject,
        count=request.count,
        category=request.category,
        teks_standard=request.teks_standard,
    )

    if request.save:
        for question in questions:
            insert_question(question)
        logger.info("generated_questions_saved", count=len(questions), method=method)

    return GenerateQuestionsResponse(
        questions=[QuestionPayload.from_question(q) for q in questions],
        generated=len(questions),
        method=method,
    )


@router.post("/validate", response_model=ValidationResponse)
async def validate_question_payload(payload: QuestionPayload) -> ValidationResponse:
    """Run the question validator on a submitted question."""
    result = validate_question(payload.to_question())
    return ValidationResponse(is_valid=result.is_valid, issues=result.issues)


@router.get("/stats", response_model=QuestionStatsResponse)
async def question_stats() -> QuestionStatsResponse:
    """Count stored questions per grade and subject."""
    counts = [QuestionCount(**row) for row in count_questions_by_grade_subject()]
    return QuestionStatsResponse(
        counts=counts,
        total=sum(c.total for c in counts),
    )


@router.get("/{grade}/{subject}", response_model=QuestionListResponse)
async def list_questions(
    grade: int,
    subject: str,
    teks: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=500),
) -> QuestionListResponse:
    """List stored questions for a grade and subject."""
    _check_grade_subject(grade, subject)

    if teks:
        questions = get_questions_by_teks(grade, subject, teks)
        if limit is not None:
            questions = questions[:limit]
    else:
        questions = get_questions_by_grade_and_subject(grade, subject, limit=limit)

    return QuestionListResponse(
        questions=[QuestionPayload.from_question(q) for q in questions],
        count=len(questions),
    )
