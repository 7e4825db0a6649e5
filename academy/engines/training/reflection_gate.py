"""
Reflection Gate - capstone courses finish only after a reflection.

Passing the capstone quiz holds the course at 90%; the reflection is
stored first and only then is the course marked complete, stamped with
the reflection time.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from academy.engines.training.catalog import CourseCatalog
from academy.engines.training.completion_recorder import CompletionRecorder, ProgressChange
from academy.engines.training.exceptions import IncompleteReflection, ReflectionNotDue
from academy.engines.training.level_gate import LevelGateResolver
from academy.engines.training.tiers import Tier
from academy.engines.training.transitions import ProgressStage, stage_of
from academy.kernel.events.event_store import EventStore
from academy.kernel.models.base import utcnow
from academy.kernel.models.event_log import EventType
from academy.kernel.models.progress import ReflectionRecord, ReflectionVisibility
from academy.kernel.store import RecordStore

REQUIRED_FIELDS = ("what_learned", "connected_value", "proud_moment")


class ReflectionSubmission(BaseModel):
    """Answers from the learning reflection form."""

    what_learned: str = ""
    connected_value: str = ""
    connected_value_why: Optional[str] = None
    proud_moment: str = ""
    concerns: Optional[str] = None
    suggestions: Optional[str] = None
    visibility: ReflectionVisibility = ReflectionVisibility.PUBLIC

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_FIELDS if not (getattr(self, name) or "").strip()]


@dataclass
class ReflectionOutcome:
    reflection: Optional[ReflectionRecord]
    change: Optional[ProgressChange]  # None when the course was already complete


class ReflectionGate:
    def __init__(
        self,
        session: AsyncSession,
        catalog: CourseCatalog,
        level_gate: LevelGateResolver,
        recorder: CompletionRecorder,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.level_gate = level_gate
        self.recorder = recorder
        self.reflections = RecordStore(session, ReflectionRecord)
        self.events = EventStore(session)
        self.clock = clock

    async def get_reflection(self, staff_id: uuid.UUID, course_id: uuid.UUID) -> Optional[ReflectionRecord]:
        return await self.reflections.first(staff_id=staff_id, course_id=course_id)

    async def submit_reflection(
        self,
        staff_id: uuid.UUID,
        course_id: uuid.UUID,
        submission: ReflectionSubmission,
    ) -> ReflectionOutcome:
        """
        Store a reflection and finalize the capstone course.

        Raises:
            UnknownCourse: course_id is not catalogued
            ReflectionNotDue: not a capstone, or its quiz is not passed yet
            TierLocked: the course's tier is locked
            IncompleteReflection: a required answer is blank
        """
        course = await self.catalog.get_course(course_id)
        if not course.is_capstone:
            raise ReflectionNotDue(course.id, "course does not require a reflection")
        await self.level_gate.ensure_unlocked(staff_id, Tier(course.tier), course.id)

        missing = submission.missing_fields()
        if missing:
            raise IncompleteReflection(missing)

        record = await self.recorder.get_record(staff_id, course.id)
        stage = stage_of(record) if record is not None else ProgressStage.NOT_STARTED
        if stage == ProgressStage.COMPLETED:
            return ReflectionOutcome(reflection=await self.get_reflection(staff_id, course.id), change=None)
        if stage != ProgressStage.AWAITING_REFLECTION:
            raise ReflectionNotDue(course.id, "the course quiz has not been passed")

        submitted_at = self.clock()
        reflection, _ = await self.reflections.create_if_absent(
            {"staff_id": staff_id, "course_id": course.id},
            what_learned=submission.what_learned.strip(),
            connected_value=submission.connected_value.strip(),
            connected_value_why=submission.connected_value_why,
            proud_moment=submission.proud_moment.strip(),
            concerns=submission.concerns,
            suggestions=submission.suggestions,
            visibility=submission.visibility.value,
            submitted_at=submitted_at,
        )
        await self.events.log(
            event_type=EventType.REFLECTION_SUBMITTED,
            entity_type="course",
            entity_id=course.id,
            staff_id=staff_id,
            payload={"reflection_id": reflection.id, "visibility": reflection.visibility},
        )

        change = await self.recorder.finalize_capstone(staff_id, course, submitted_at)
        return ReflectionOutcome(reflection=reflection, change=change)
