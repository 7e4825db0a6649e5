"""
Training endpoints - catalog, tier overview, course progress, certificates, journey.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, status

from academy.api.deps import AdminStaff, CurrentStaff, DbSession
from academy.engines.training.catalog import CourseCatalog, CourseDefinition, quiz_questions
from academy.engines.training.certificate_issuer import CertificateView
from academy.engines.training.progression import ProgressionEngine, ProgressionResult
from academy.engines.training.reflection_gate import ReflectionSubmission
from academy.engines.training.tiers import TIER_NAMES, Tier
from academy.engines.training.transitions import stage_of
from academy.kernel.models.course import Course
from academy.kernel.models.journey import JourneyProgress
from academy.kernel.models.progress import ProgressRecord
from academy.schemas.training import (
    CertificateListResponse,
    CertificateResponse,
    CourseResponse,
    JourneyResponse,
    ProgressionResponse,
    ProgressOverrideRequest,
    ProgressResponse,
    QuizQuestionPublic,
    QuizResultResponse,
    QuizSubmitRequest,
    TierOverviewResponse,
    TierSnapshotResponse,
)

router = APIRouter()


def _course_to_schema(course: Course) -> CourseResponse:
    return CourseResponse(
        id=course.id,
        tier=course.tier,
        tier_name=TIER_NAMES[Tier(course.tier)],
        title=course.title,
        description=course.description,
        content_type=course.content_type,
        order_index=course.order_index,
        is_mandatory=course.is_mandatory,
        is_capstone=course.is_capstone,
        pass_mark_percent=course.pass_mark_percent,
        questions=[QuizQuestionPublic(text=q.text, options=q.options) for q in quiz_questions(course)],
    )


def _progress_to_schema(record: ProgressRecord) -> ProgressResponse:
    return ProgressResponse(
        course_id=record.course_id,
        status=record.status,
        stage=stage_of(record).value,
        progress_percent=record.progress_percent,
        last_quiz_score=record.last_quiz_score,
        quiz_attempts=record.quiz_attempts,
        completed_at=record.completed_at,
    )


def _certificate_to_schema(view: CertificateView) -> CertificateResponse:
    cert = view.certificate
    return CertificateResponse(
        id=cert.id,
        tier=cert.tier,
        tier_name=cert.tier_name,
        certificate_number=cert.certificate_number,
        staff_name=cert.staff_name,
        quiz_score=cert.quiz_score,
        issued_at=cert.issued_at,
        expires_at=cert.expires_at,
        status=view.status.value,
        days_until_expiry=view.days_until_expiry,
        retrain_required=view.retrain_required,
    )


def _journey_to_schema(journey: JourneyProgress) -> JourneyResponse:
    return JourneyResponse(
        staff_id=journey.staff_id,
        values_completed=journey.values_completed,
        hygiene_completed=journey.hygiene_completed,
        certified=journey.certified,
        certificate_issued_at=journey.certificate_issued_at,
        current_step=journey.current_step,
        last_updated=journey.last_updated,
    )


def _result_to_schema(engine: ProgressionEngine, result: ProgressionResult) -> ProgressionResponse:
    quiz = None
    if result.quiz is not None:
        quiz = QuizResultResponse(
            total_questions=result.quiz.total_questions,
            correct_answers=result.quiz.correct_answers,
            score_percentage=result.quiz.score_percentage,
            pass_mark=result.quiz.pass_mark,
            passed=result.quiz.passed,
        )
    certificate = None
    if result.certificate is not None:
        certificate = _certificate_to_schema(engine.certificates.describe(result.certificate))
    return ProgressionResponse(
        course_id=result.course.id,
        tier=result.course.tier,
        progress=_progress_to_schema(result.record) if result.record is not None else None,
        quiz=quiz,
        reflection_id=result.reflection.id if result.reflection is not None else None,
        tier_status=result.tier_status.value,
        tier_progress=result.tier_progress,
        certificate=certificate,
        certificate_issued=result.certificate_issued,
    )


# Catalog

@router.get("/courses", response_model=List[CourseResponse])
async def list_courses(
    staff: CurrentStaff,
    db: DbSession,
    tier: Optional[Tier] = None,
):
    """List catalog courses in progression order, optionally for one tier."""
    courses = await CourseCatalog(db).list_courses(tier)
    return [_course_to_schema(c) for c in courses]


@router.get("/courses/{course_id}", response_model=CourseResponse)
async def get_course(
    course_id: uuid.UUID,
    staff: CurrentStaff,
    db: DbSession,
):
    return _course_to_schema(await CourseCatalog(db).get_course(course_id))


@router.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CourseDefinition,
    admin: AdminStaff,
    db: DbSession,
):
    """Add a course to the catalog (content authors)."""
    course = await CourseCatalog(db).add_course(body, author_id=admin.id)
    return _course_to_schema(course)


@router.get("/tiers", response_model=TierOverviewResponse)
async def get_tier_overview(
    staff: CurrentStaff,
    db: DbSession,
):
    """Lock state and completion of every tier for the current staff member."""
    snapshots = await ProgressionEngine(db).overview(staff.id)
    return TierOverviewResponse(
        staff_id=staff.id,
        tiers=[
            TierSnapshotResponse(
                tier=s.tier.value,
                name=s.name,
                status=s.status.value,
                unlocked=s.unlocked,
                total_courses=s.total_courses,
                completed_courses=s.completed_courses,
                progress_percent=s.progress_percent,
            )
            for s in snapshots
        ],
    )


# Learner actions

@router.post("/courses/{course_id}/complete", response_model=ProgressionResponse)
async def complete_reading(
    course_id: uuid.UUID,
    staff: CurrentStaff,
    db: DbSession,
):
    """Mark a reading course as read."""
    engine = ProgressionEngine(db)
    result = await engine.complete_reading(staff.id, course_id, staff_name=staff.name)
    return _result_to_schema(engine, result)


@router.post("/courses/{course_id}/quiz", response_model=ProgressionResponse)
async def submit_quiz(
    course_id: uuid.UUID,
    body: QuizSubmitRequest,
    staff: CurrentStaff,
    db: DbSession,
):
    """Submit quiz answers; returns score, verdict and any certificate issued."""
    engine = ProgressionEngine(db)
    result = await engine.submit_quiz(staff.id, course_id, body.answers, staff_name=staff.name)
    return _result_to_schema(engine, result)


@router.post("/courses/{course_id}/reflection", response_model=ProgressionResponse)
async def submit_reflection(
    course_id: uuid.UUID,
    body: ReflectionSubmission,
    staff: CurrentStaff,
    db: DbSession,
):
    """Submit the learning reflection that completes a capstone course."""
    engine = ProgressionEngine(db)
    result = await engine.submit_reflection(staff.id, course_id, body, staff_name=staff.name)
    return _result_to_schema(engine, result)


# Certificates and journey

@router.get("/certificates", response_model=CertificateListResponse)
async def list_certificates(
    staff: CurrentStaff,
    db: DbSession,
):
    views = await ProgressionEngine(db).list_certificates(staff.id)
    return CertificateListResponse(certificates=[_certificate_to_schema(v) for v in views])


@router.get("/journey", response_model=JourneyResponse)
async def get_journey(
    staff: CurrentStaff,
    db: DbSession,
):
    return _journey_to_schema(await ProgressionEngine(db).get_journey(staff.id))


@router.post("/journey/culture-acknowledged", response_model=JourneyResponse)
async def acknowledge_culture(
    staff: CurrentStaff,
    db: DbSession,
):
    """Called by the values module once the staff member acknowledges the culture pledge."""
    return _journey_to_schema(await ProgressionEngine(db).acknowledge_culture(staff.id))


# Administration

@router.post("/admin/progress/{staff_id}/{course_id}", response_model=ProgressionResponse)
async def override_progress(
    staff_id: uuid.UUID,
    course_id: uuid.UUID,
    body: ProgressOverrideRequest,
    admin: AdminStaff,
    db: DbSession,
):
    """Correct a staff member's course status."""
    engine = ProgressionEngine(db)
    result = await engine.override_progress(
        staff_id,
        course_id,
        body.status,
        actor_id=admin.id,
        reason=body.reason,
    )
    return _result_to_schema(engine, result)
