"""
Progression Engine - runs the training pipeline after every progress write.

    quiz/reading -> completion recorder (reflection gate for capstones)
        -> level gate re-evaluates the tier
        -> certificate issuer (tier complete)
        -> journey aggregator

Everything runs inside the caller's session, so one request is one
transaction.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from academy.config import Settings, get_settings
from academy.engines.training.catalog import CourseCatalog, course_pass_mark, quiz_questions
from academy.engines.training.certificate_issuer import CertificateIssuer, CertificateView
from academy.engines.training.completion_recorder import (
    CompletionOutcome,
    CompletionRecorder,
    ProgressChange,
)
from academy.engines.training.exceptions import IncompleteSubmission, ReflectionRequired
from academy.engines.training.journey import JourneyAggregator
from academy.engines.training.level_gate import LevelGateResolver, TierSnapshot, TierStatus
from academy.engines.training.quiz_scorer import QuizResult, QuizScorer
from academy.engines.training.reflection_gate import ReflectionGate, ReflectionSubmission
from academy.engines.training.tiers import Tier
from academy.engines.training.transitions import ProgressStage, stage_for_status, stage_of
from academy.kernel.events.event_store import EventStore
from academy.kernel.models.base import utcnow
from academy.kernel.models.certificate import Certificate
from academy.kernel.models.course import Course
from academy.kernel.models.event_log import EventType
from academy.kernel.models.journey import JourneyProgress
from academy.kernel.models.progress import ProgressRecord, ProgressStatus, ReflectionRecord
from academy.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ProgressionResult:
    """What one learner action changed."""

    course: Course
    record: Optional[ProgressRecord]
    stage: ProgressStage
    tier_status: TierStatus
    tier_progress: int
    quiz: Optional[QuizResult] = None
    reflection: Optional[ReflectionRecord] = None
    certificate: Optional[Certificate] = None
    certificate_issued: bool = False


class ProgressionEngine:
    """
    Facade over the training components for one database session.

    Usage:
        engine = ProgressionEngine(session)
        result = await engine.submit_quiz(staff_id, course_id, [0, 2, 1])
        if result.certificate_issued:
            ...
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.settings = settings or get_settings()
        self.catalog = CourseCatalog(session)
        self.level_gate = LevelGateResolver(session, self.catalog)
        self.recorder = CompletionRecorder(session, self.catalog, self.level_gate, clock=clock)
        self.reflections = ReflectionGate(session, self.catalog, self.level_gate, self.recorder, clock=clock)
        self.certificates = CertificateIssuer(
            session, self.catalog, self.level_gate, settings=self.settings, clock=clock
        )
        self.journey = JourneyAggregator(session, clock=clock)
        self.events = EventStore(session)

    # Learner actions

    async def complete_reading(
        self,
        staff_id: uuid.UUID,
        course_id: uuid.UUID,
        staff_name: Optional[str] = None,
    ) -> ProgressionResult:
        change = await self.recorder.record_completion(staff_id, course_id, CompletionOutcome())
        course = await self.catalog.get_course(course_id)
        return await self._after_write(staff_id, course, change, staff_name=staff_name)

    async def submit_quiz(
        self,
        staff_id: uuid.UUID,
        course_id: uuid.UUID,
        answers: Sequence[Optional[int]],
        staff_name: Optional[str] = None,
    ) -> ProgressionResult:
        """
        Score a quiz submission and record it.

        Raises:
            UnknownCourse, TierLocked, IncompleteSubmission
        """
        course = await self.catalog.get_course(course_id)
        await self.level_gate.ensure_unlocked(staff_id, Tier(course.tier), course.id)
        if not course.is_quiz:
            raise IncompleteSubmission(
                "Course has no quiz to submit",
                details={"course_id": str(course.id)},
            )

        quiz = QuizScorer.evaluate(quiz_questions(course), answers, course_pass_mark(course))
        change = await self.recorder.record_completion(
            staff_id, course.id, CompletionOutcome(quiz_score=quiz.score_percentage)
        )
        result = await self._after_write(staff_id, course, change, staff_name=staff_name)
        result.quiz = quiz
        return result

    async def submit_reflection(
        self,
        staff_id: uuid.UUID,
        course_id: uuid.UUID,
        submission: ReflectionSubmission,
        staff_name: Optional[str] = None,
    ) -> ProgressionResult:
        outcome = await self.reflections.submit_reflection(staff_id, course_id, submission)
        course = await self.catalog.get_course(course_id)
        if outcome.change is None:
            result = await self._snapshot(staff_id, course)
        else:
            result = await self._after_write(staff_id, course, outcome.change, staff_name=staff_name)
        result.reflection = outcome.reflection
        return result

    async def acknowledge_culture(self, staff_id: uuid.UUID) -> JourneyProgress:
        return await self.journey.on_culture_acknowledged(staff_id)

    # Administration

    async def override_progress(
        self,
        staff_id: uuid.UUID,
        course_id: uuid.UUID,
        status: ProgressStatus,
        actor_id: uuid.UUID,
        reason: Optional[str] = None,
        staff_name: Optional[str] = None,
    ) -> ProgressionResult:
        """
        Correct a progress record by hand.

        The tier is re-evaluated afterwards, so a completion removed here
        drops the tier back to incomplete on the next read. Certificates
        already issued are left untouched.

        Raises:
            UnknownCourse
            ReflectionRequired: completing a capstone with no reflection on file
        """
        course = await self.catalog.get_course(course_id)
        stage = stage_for_status(status)
        if stage == ProgressStage.COMPLETED and course.is_capstone:
            if await self.reflections.get_reflection(staff_id, course.id) is None:
                raise ReflectionRequired(course.id)

        change = await self.recorder.override(staff_id, course, stage)
        await self.events.log(
            event_type=EventType.PROGRESS_OVERRIDDEN,
            entity_type="course",
            entity_id=course.id,
            staff_id=staff_id,
            actor_id=actor_id,
            payload={"from": change.before, "to": change.after, "reason": reason},
        )
        logger.info(
            "Progress overridden",
            extra={
                "staff_id": str(staff_id),
                "course_id": str(course.id),
                "actor_id": str(actor_id),
                "from_stage": change.before.value,
                "to_stage": change.after.value,
            },
        )
        return await self._after_write(staff_id, course, change, staff_name=staff_name)

    # Queries

    async def overview(self, staff_id: uuid.UUID) -> List[TierSnapshot]:
        return await self.level_gate.overview(staff_id)

    async def list_certificates(
        self,
        staff_id: uuid.UUID,
        now: Optional[datetime] = None,
    ) -> List[CertificateView]:
        return await self.certificates.list_certificates(staff_id, now)

    async def get_journey(self, staff_id: uuid.UUID) -> JourneyProgress:
        return await self.journey.get_journey(staff_id)

    # Pipeline

    async def _after_write(
        self,
        staff_id: uuid.UUID,
        course: Course,
        change: ProgressChange,
        staff_name: Optional[str] = None,
    ) -> ProgressionResult:
        tier = Tier(course.tier)
        status = await self.level_gate.tier_status(staff_id, tier)
        certificate: Optional[Certificate] = None
        issued = False

        if change.newly_completed and status == TierStatus.COMPLETE:
            await self.events.log(
                event_type=EventType.TIER_COMPLETED,
                entity_type="staff",
                entity_id=staff_id,
                staff_id=staff_id,
                payload={"tier": tier, "course_id": course.id},
            )
            logger.info("Tier completed", extra={"staff_id": str(staff_id), "tier": tier.value})
            await self.journey.on_tier_completed(staff_id, tier)
            certificate, issued = await self.certificates.issue(staff_id, tier, staff_name)
            if certificate is not None:
                await self.journey.on_certificate_issued(staff_id, tier, certificate.issued_at)

        return ProgressionResult(
            course=course,
            record=change.record,
            stage=change.after,
            tier_status=status,
            tier_progress=await self.level_gate.tier_progress(staff_id, tier),
            certificate=certificate,
            certificate_issued=issued,
        )

    async def _snapshot(self, staff_id: uuid.UUID, course: Course) -> ProgressionResult:
        tier = Tier(course.tier)
        record = await self.recorder.get_record(staff_id, course.id)
        return ProgressionResult(
            course=course,
            record=record,
            stage=stage_of(record) if record is not None else ProgressStage.NOT_STARTED,
            tier_status=await self.level_gate.tier_status(staff_id, tier),
            tier_progress=await self.level_gate.tier_progress(staff_id, tier),
            certificate=await self.certificates.get_certificate(staff_id, tier),
        )
