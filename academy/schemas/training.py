"""
Pydantic schemas for the training API.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, StrictInt

from academy.kernel.models.progress import ProgressStatus


class QuizQuestionPublic(BaseModel):
    """Question as shown to a learner (no answer key)."""

    text: str
    options: List[str]


class CourseResponse(BaseModel):
    id: uuid.UUID
    tier: str
    tier_name: str
    title: str
    description: Optional[str] = None
    content_type: str
    order_index: int
    is_mandatory: bool
    is_capstone: bool
    pass_mark_percent: Optional[int] = None
    questions: List[QuizQuestionPublic] = []


class TierSnapshotResponse(BaseModel):
    tier: str
    name: str
    status: str
    unlocked: bool
    total_courses: int
    completed_courses: int
    progress_percent: int


class TierOverviewResponse(BaseModel):
    """Every tier in progression order for the current staff member."""

    staff_id: uuid.UUID
    tiers: List[TierSnapshotResponse]


class QuizSubmitRequest(BaseModel):
    """One selected option index per question, in question order."""

    answers: List[Optional[StrictInt]]


class ProgressOverrideRequest(BaseModel):
    status: ProgressStatus
    reason: Optional[str] = Field(default=None, max_length=500)


class ProgressResponse(BaseModel):
    course_id: uuid.UUID
    status: str
    stage: str
    progress_percent: int
    last_quiz_score: Optional[int] = None
    quiz_attempts: int = 0
    completed_at: Optional[datetime] = None


class QuizResultResponse(BaseModel):
    total_questions: int
    correct_answers: int
    score_percentage: int
    pass_mark: int
    passed: bool


class CertificateResponse(BaseModel):
    id: uuid.UUID
    tier: str
    tier_name: str
    certificate_number: str
    staff_name: Optional[str] = None
    quiz_score: int
    issued_at: datetime
    expires_at: datetime
    status: str
    days_until_expiry: int
    retrain_required: bool = False


class CertificateListResponse(BaseModel):
    certificates: List[CertificateResponse]


class ProgressionResponse(BaseModel):
    """Result of a learner action or an override."""

    course_id: uuid.UUID
    tier: str
    progress: Optional[ProgressResponse] = None
    quiz: Optional[QuizResultResponse] = None
    reflection_id: Optional[uuid.UUID] = None
    tier_status: str
    tier_progress: int
    certificate: Optional[CertificateResponse] = None
    certificate_issued: bool = False


class JourneyResponse(BaseModel):
    staff_id: uuid.UUID
    values_completed: bool
    hygiene_completed: bool
    certified: bool
    certificate_issued_at: Optional[datetime] = None
    current_step: str
    last_updated: Optional[datetime] = None
