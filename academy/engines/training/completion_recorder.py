"""
Course Completion Recorder - sole writer of ProgressRecord rows.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from academy.engines.training.catalog import CourseCatalog, course_pass_mark
from academy.engines.training.exceptions import IncompleteSubmission
from academy.engines.training.level_gate import LevelGateResolver
from academy.engines.training.quiz_scorer import QuizScorer
from academy.engines.training.tiers import Tier
from academy.engines.training.transitions import (
    STAGE_STATE,
    ProgressEvent,
    ProgressStage,
    next_stage,
    stage_of,
)
from academy.kernel.events.event_store import EventStore
from academy.kernel.models.base import utcnow
from academy.kernel.models.course import Course
from academy.kernel.models.event_log import EventType
from academy.kernel.models.progress import ProgressRecord, ProgressStatus
from academy.kernel.store import RecordStore


class CompletionOutcome(BaseModel):
    """What the learner did: a reading acknowledgement or a scored quiz."""

    quiz_score: Optional[int] = Field(default=None, ge=0, le=100)


@dataclass
class ProgressChange:
    """Result of one write to a progress record."""

    record: ProgressRecord
    before: ProgressStage
    after: ProgressStage
    passed: Optional[bool] = None

    @property
    def newly_completed(self) -> bool:
        return self.after == ProgressStage.COMPLETED and self.before != ProgressStage.COMPLETED

    @property
    def awaiting_reflection(self) -> bool:
        return self.after == ProgressStage.AWAITING_REFLECTION


class CompletionRecorder:
    """
    Records course outcomes as progress transitions.

    - Reading course: completed (100%) on acknowledgement.
    - Quiz fail: in_progress (50%), score stored, attempts + 1. Unlimited retakes.
    - Quiz pass on a capstone: held at in_progress (90%) until the
      reflection gate finalizes it.
    - Quiz pass otherwise: completed (100%).
    """

    def __init__(
        self,
        session: AsyncSession,
        catalog: CourseCatalog,
        level_gate: LevelGateResolver,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.level_gate = level_gate
        self.progress = RecordStore(session, ProgressRecord)
        self.events = EventStore(session)
        self.clock = clock

    async def get_record(self, staff_id: uuid.UUID, course_id: uuid.UUID) -> Optional[ProgressRecord]:
        return await self.progress.first(staff_id=staff_id, course_id=course_id)

    async def get_or_create(self, staff_id: uuid.UUID, course_id: uuid.UUID) -> ProgressRecord:
        """Lazily create the (staff, course) record in not_started."""
        record, _ = await self.progress.create_if_absent(
            {"staff_id": staff_id, "course_id": course_id},
            status=ProgressStatus.NOT_STARTED.value,
            progress_percent=0,
            quiz_attempts=0,
        )
        return record

    async def record_completion(
        self,
        staff_id: uuid.UUID,
        course_id: uuid.UUID,
        outcome: CompletionOutcome,
    ) -> ProgressChange:
        """
        Record a learner outcome for a course.

        Raises:
            UnknownCourse: course_id is not catalogued
            TierLocked: the course's tier is not unlocked for this staff member
            IncompleteSubmission: a quiz course was recorded without a score
        """
        course = await self.catalog.get_course(course_id)
        await self.level_gate.ensure_unlocked(staff_id, Tier(course.tier), course.id)
        if course.is_quiz and outcome.quiz_score is None:
            raise IncompleteSubmission(
                "Quiz courses are completed by submitting the quiz",
                details={"course_id": str(course.id)},
            )

        record = await self.get_or_create(staff_id, course.id)
        now = self.clock()
        fields: dict = {}
        passed: Optional[bool] = None

        if course.is_quiz:
            passed = QuizScorer.is_pass(outcome.quiz_score, course_pass_mark(course))
            if not passed:
                event = ProgressEvent.QUIZ_FAILED
            elif course.is_capstone:
                event = ProgressEvent.CAPSTONE_QUIZ_PASSED
            else:
                event = ProgressEvent.QUIZ_PASSED
            fields["last_quiz_score"] = outcome.quiz_score
            fields["quiz_attempts"] = (record.quiz_attempts or 0) + 1
            if passed and record.quiz_passed_at is None:
                fields["quiz_passed_at"] = now
        else:
            event = ProgressEvent.READING_COMPLETED

        change = await self._apply(record, event, now, **fields)
        change.passed = passed

        if course.is_quiz:
            await self.events.log(
                event_type=EventType.QUIZ_PASSED if passed else EventType.QUIZ_FAILED,
                entity_type="course",
                entity_id=course.id,
                staff_id=staff_id,
                payload={
                    "tier": course.tier,
                    "score": outcome.quiz_score,
                    "pass_mark": course_pass_mark(course),
                    "attempt": change.record.quiz_attempts,
                },
            )
        if change.newly_completed:
            await self._log_completed(course, change)
        return change

    async def finalize_capstone(
        self,
        staff_id: uuid.UUID,
        course: Course,
        completed_at: datetime,
    ) -> ProgressChange:
        """Complete a held capstone once its reflection is stored."""
        record = await self.get_or_create(staff_id, course.id)
        change = await self._apply(record, ProgressEvent.REFLECTION_ACCEPTED, completed_at)
        if change.newly_completed:
            await self._log_completed(course, change)
        return change

    async def override(
        self,
        staff_id: uuid.UUID,
        course: Course,
        stage: ProgressStage,
    ) -> ProgressChange:
        """
        Administrative correction: put the record on an arbitrary stage.
        Moving backwards clears the completion and quiz-pass timestamps.
        """
        record = await self.get_or_create(staff_id, course.id)
        before = stage_of(record)
        status, percent = STAGE_STATE[stage]
        fields = {"status": status.value, "progress_percent": percent}
        if stage == ProgressStage.COMPLETED:
            if record.completed_at is None:
                fields["completed_at"] = self.clock()
        else:
            fields["completed_at"] = None
            fields["quiz_passed_at"] = None
        record = await self.progress.update(record.id, **fields)
        return ProgressChange(record=record, before=before, after=stage)

    async def _apply(
        self,
        record: ProgressRecord,
        event: ProgressEvent,
        now: datetime,
        **fields,
    ) -> ProgressChange:
        before = stage_of(record)
        after = next_stage(before, event)
        status, percent = STAGE_STATE[after]
        fields["status"] = status.value
        fields["progress_percent"] = percent
        if after == ProgressStage.COMPLETED and before != ProgressStage.COMPLETED:
            fields["completed_at"] = now
        record = await self.progress.update(record.id, **fields)
        return ProgressChange(record=record, before=before, after=after)

    async def _log_completed(self, course: Course, change: ProgressChange) -> None:
        await self.events.log(
            event_type=EventType.COURSE_COMPLETED,
            entity_type="course",
            entity_id=course.id,
            staff_id=change.record.staff_id,
            payload={"tier": course.tier, "completed_at": change.record.completed_at},
        )
