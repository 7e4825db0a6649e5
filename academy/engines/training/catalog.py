"""
Course Catalog - ordered, tier-tagged course definitions.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator
from sqlalchemy.ext.asyncio import AsyncSession

from academy.engines.training.exceptions import UnknownCourse
from academy.engines.training.quiz_scorer import QuizQuestion
from academy.engines.training.tiers import TIER_ORDER, Tier, pass_mark_for
from academy.kernel.events.event_store import EventStore
from academy.kernel.models.course import ContentType, Course
from academy.kernel.models.event_log import EventType
from academy.kernel.store import RecordStore


class CourseDefinition(BaseModel):
    """A course as authored by the content team."""

    tier: Tier
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    content_type: ContentType = ContentType.READING
    order_index: int = Field(default=0, ge=0)
    is_mandatory: bool = True
    is_capstone: bool = False
    questions: List[QuizQuestion] = []
    pass_mark_percent: Optional[int] = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def _quiz_shape(self) -> "CourseDefinition":
        if self.content_type == ContentType.QUIZ and not self.questions:
            raise ValueError("quiz courses need at least one question")
        if self.content_type == ContentType.READING and self.questions:
            raise ValueError("reading courses cannot carry quiz questions")
        if self.is_capstone and self.content_type != ContentType.QUIZ:
            raise ValueError("capstone courses must be quiz courses")
        return self


def quiz_questions(course: Course) -> List[QuizQuestion]:
    """Parse the stored quiz definition of a course."""
    return [QuizQuestion.model_validate(q) for q in (course.quiz or [])]


def course_pass_mark(course: Course) -> int:
    return pass_mark_for(Tier(course.tier), course.pass_mark_percent)


class CourseCatalog:
    """Read access to the catalog, plus authoring for content teams."""

    def __init__(self, session: AsyncSession):
        self.courses = RecordStore(session, Course)
        self.events = EventStore(session)

    async def get_course(self, course_id: uuid.UUID) -> Course:
        """Fetch a course. Raises UnknownCourse when the id is not catalogued."""
        course = await self.courses.get(course_id)
        if course is None:
            raise UnknownCourse(course_id)
        return course

    async def courses_in_tier(self, tier: Tier) -> List[Course]:
        return await self.courses.list({"tier": tier.value}, sort_key="order_index")

    async def list_courses(self, tier: Optional[Tier] = None) -> List[Course]:
        """All courses in progression order (tier, then order_index)."""
        if tier is not None:
            return await self.courses_in_tier(tier)
        rows = await self.courses.list(sort_key="order_index")
        rank = {t.value: i for i, t in enumerate(TIER_ORDER)}
        return sorted(rows, key=lambda c: (rank.get(c.tier, len(rank)), c.order_index))

    async def add_course(
        self,
        definition: CourseDefinition,
        author_id: Optional[uuid.UUID] = None,
    ) -> Course:
        course_id = await self.courses.create(
            tier=definition.tier.value,
            title=definition.title,
            description=definition.description,
            content_type=definition.content_type.value,
            order_index=definition.order_index,
            is_mandatory=definition.is_mandatory,
            is_capstone=definition.is_capstone,
            quiz=[q.model_dump() for q in definition.questions] or None,
            pass_mark_percent=definition.pass_mark_percent,
        )
        if author_id is not None:
            await self.events.log(
                event_type=EventType.COURSE_CREATED,
                entity_type="course",
                entity_id=course_id,
                staff_id=author_id,
                actor_id=author_id,
                payload={"tier": definition.tier, "title": definition.title},
            )
        return await self.get_course(course_id)
