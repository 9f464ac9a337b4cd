"""Pydantic schemas for the Web API.

The web client speaks camelCase JSON; fields are declared in snake_case
and aliased. Requests accept either spelling.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from staarkids.core.questions import Question


class ApiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# HEALTH
# =============================================================================


class HealthResponse(ApiModel):
    """Response for health check."""

    status: str
    version: str
    timestamp: str


# =============================================================================
# QUESTION SCHEMAS
# =============================================================================


class QuestionPayload(ApiModel):
    """A question in wire form."""

    id: int | None = None
    grade: int
    subject: str
    teks_standard: str
    question_text: str = ""
    answer_choices: list[str] = Field(default_factory=list)
    correct_answer: str = ""
    explanation: str = ""
    category: str = ""
    difficulty: str = "medium"
    is_from_real_staar: bool = Field(default=False, alias="isFromRealSTAAR")
    year: int | None = None
    has_image: bool = False
    image_description: str | None = None

    @classmethod
    def from_question(cls, question: Question) -> QuestionPayload:
        return cls.model_validate(question.to_payload())

    def to_question(self) -> Question:
        return Question.from_payload(self.model_dump(by_alias=True))


class GenerateQuestionsRequest(ApiModel):
    """Request body for question generation."""

    grade: int
    subject: str
    count: int = Field(default=1, ge=1, le=20)
    category: str | None = None
    teks_standard: str | None = None
    save: bool = False


class GenerateQuestionsResponse(ApiModel):
    questions: list[QuestionPayload]
    generated: int
    method: Literal["llm", "standard"]


class ValidationResponse(ApiModel):
    is_valid: bool
    issues: list[str]


class QuestionListResponse(ApiModel):
    questions: list[QuestionPayload]
    count: int


class QuestionCount(ApiModel):
    grade: int
    subject: str
    total: int


class QuestionStatsResponse(ApiModel):
    counts: list[QuestionCount]
    total: int


# =============================================================================
# PRACTICE SCHEMAS
# =============================================================================


class PracticeAttemptCreate(ApiModel):
    """Request body for recording a practice answer.

    Correctness is decided server-side from the stored question.
    """

    user_id: str
    question_id: int
    selected_answer: str | None = None
    hints_used: int = Field(default=0, ge=0)
    time_spent: int | None = Field(default=None, ge=0)
    skipped: bool = False


class PracticeAttemptResponse(ApiModel):
    attempt_id: int
    user_id: str
    question_id: int
    selected_answer: str | None
    is_correct: bool
    hints_used: int
    time_spent: int | None
    skipped: bool
    created_at: str
    correct_answer: str | None = None
    explanation: str | None = None


class PracticeHistoryResponse(ApiModel):
    attempts: list[PracticeAttemptResponse]
    count: int


class ProgressEntry(ApiModel):
    grade: int
    subject: str
    teks_standard: str
    total_attempts: int
    correct_attempts: int
    average_score: float
    last_practiced: str | None


class ProgressResponse(ApiModel):
    user_id: str
    grade: int
    progress: list[ProgressEntry]


class CategoryStatResponse(ApiModel):
    category: str
    total_questions: int
    correct_answers: int
    accuracy: int
    last_attempted: str | None


class UserStatsResponse(ApiModel):
    total_attempts: int
    correct_attempts: int
    average_score: float
    category_stats: list[CategoryStatResponse]


class GradeAccuracyResponse(ApiModel):
    grade: int
    attempts: int
    correct: int
    accuracy: int


class AccuracyResponse(ApiModel):
    total_attempts: int
    correct_attempts: int
    overall_accuracy: int
    math_accuracy: int
    reading_accuracy: int
    grade_breakdown: list[GradeAccuracyResponse]


# =============================================================================
# EXAM SCHEMAS
# =============================================================================


class MockExamCreate(ApiModel):
    """Request body for building a mock exam from stored questions."""

    name: str = Field(..., min_length=1, max_length=200)
    grade: int
    subject: str
    question_count: int = Field(default=10, ge=1, le=50)
    time_limit: int | None = Field(default=None, ge=1)


class MockExamResponse(ApiModel):
    exam_id: int
    name: str
    grade: int
    subject: str
    total_questions: int
    time_limit: int | None
    created_at: str


class MockExamListResponse(ApiModel):
    exams: list[MockExamResponse]
    count: int


class ExamQuestion(ApiModel):
    """Question as shown during an exam, without answer or explanation."""

    id: int
    teks_standard: str
    question_text: str
    answer_choices: list[str]
    category: str
    has_image: bool = False
    image_description: str | None = None

    @classmethod
    def from_question(cls, question: Question) -> ExamQuestion:
        return cls(
            id=question.question_id,
            teks_standard=question.teks_standard,
            question_text=question.question_text,
            answer_choices=question.answer_choices,
            category=question.category,
            has_image=question.has_image,
            image_description=question.image_description,
        )


class MockExamDetailResponse(ApiModel):
    exam: MockExamResponse
    questions: list[ExamQuestion]


class ExamStartRequest(ApiModel):
    user_id: str


class ExamAttemptResponse(ApiModel):
    attempt_id: int
    user_id: str
    exam_id: int
    score: float | None
    total_questions: int
    correct_answers: int
    time_spent: int | None
    completed: bool
    started_at: str
    completed_at: str | None


class ExamSubmitRequest(ApiModel):
    """Answers for an exam.

    Either attempt_id (from /start) or user_id must be given; with only
    user_id the attempt is created on submit.
    """

    attempt_id: int | None = None
    user_id: str | None = None
    answers: dict[int, str] = Field(default_factory=dict)
    time_spent: int | None = Field(default=None, ge=0)


class QuestionResultResponse(ApiModel):
    question_id: int | None
    selected_answer: str | None
    correct_answer: str
    is_correct: bool


class ExamSubmitResponse(ApiModel):
    attempt: ExamAttemptResponse
    total_questions: int
    correct_answers: int
    score: float
    results: list[QuestionResultResponse]


class ExamHistoryResponse(ApiModel):
    attempts: list[ExamAttemptResponse]
    count: int


class ExamAttemptDetailResponse(ApiModel):
    """An attempt with its exam and questions.

    review carries the questions with answers and explanations, and is
    only filled once the attempt is completed.
    """

    attempt: ExamAttemptResponse
    exam: MockExamResponse
    questions: list[ExamQuestion]
    review: list[QuestionPayload] = Field(default_factory=list)


# =============================================================================
# USER SCHEMAS
# =============================================================================

Role = Literal["student", "parent", "teacher"]


class UserCreate(ApiModel):
    """Request body for creating (or replacing) a user."""

    user_id: str | None = Field(default=None, min_length=1, max_length=64)
    email: str | None = Field(default=None, max_length=200)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    current_grade: int = Field(default=4, ge=3, le=5)
    role: Role = "student"


class UserUpdate(ApiModel):
    current_grade: int | None = Field(default=None, ge=3, le=5)
    role: Role | None = None
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class UserResponse(ApiModel):
    user_id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    current_grade: int
    role: str
    created_at: str
    updated_at: str


class UserListResponse(ApiModel):
    users: list[UserResponse]
    count: int


# =============================================================================
# CLASSROOM SCHEMAS
# =============================================================================


class ClassroomCreate(ApiModel):
    teacher_id: str
    class_name: str = Field(..., min_length=1, max_length=100)
    grade: int = Field(..., ge=3, le=5)
    subject: Literal["math", "reading", "both"] = "both"
    max_students: int = Field(default=30, ge=1, le=200)


class ClassroomResponse(ApiModel):
    classroom_id: int
    code: str
    teacher_id: str
    class_name: str
    grade: int
    subject: str
    is_active: bool
    max_students: int
    created_at: str
    expires_at: str | None


class ClassroomListResponse(ApiModel):
    classrooms: list[ClassroomResponse]
    count: int


class TeacherStudentsResponse(ApiModel):
    students: list[UserResponse]
    count: int


class ClassroomJoinRequest(ApiModel):
    student_id: str
    code: str = Field(..., min_length=1, max_length=16)


class EnrollmentResponse(ApiModel):
    enrollment_id: int
    student_id: str
    classroom_id: int
    enrolled_at: str
    is_active: bool


# =============================================================================
# PARENT SCHEMAS
# =============================================================================


class ParentLinkRequest(ApiModel):
    parent_id: str
    child_email: str = Field(..., min_length=3, max_length=200)


class ParentRelationResponse(ApiModel):
    relation_id: int
    student_id: str
    parent_id: str
    relationship_type: str
    is_active: bool
    created_at: str


class ChildrenResponse(ApiModel):
    children: list[UserResponse]
    count: int


# =============================================================================
# CHAT SCHEMAS
# =============================================================================


class NovaChatRequest(ApiModel):
    user_id: str | None = None
    grade: int = Field(default=4, ge=3, le=5)
    message: str = Field(..., min_length=1, max_length=2000)


class NovaChatResponse(ApiModel):
    response: str
