"""
Per-staff course progress and capstone reflections.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from academy.kernel.models.base import Base, TimestampMixin, generate_uuid


class ProgressStatus(str, Enum):
    """Authoritative completion status of a course for one staff member."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ReflectionVisibility(str, Enum):
    """Who may read a reflection."""
    PUBLIC = "public"  # staff managers
    PRIVATE = "private"  # HR only


class ProgressRecord(Base, TimestampMixin):
    """
    One row per (staff, course). Created lazily, mutated only by the
    completion recorder and reflection gate, never deleted.
    """

    __tablename__ = "training_progress"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    staff_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    course_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("training_courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ProgressStatus.NOT_STARTED.value)
    progress_percent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_quiz_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quiz_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    quiz_passed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (UniqueConstraint("staff_id", "course_id", name="uq_training_progress_staff_course"),)

    @property
    def is_completed(self) -> bool:
        return self.status == ProgressStatus.COMPLETED.value


class ReflectionRecord(Base):
    """Structured reflection submitted to finish a capstone course. Immutable."""

    __tablename__ = "training_reflections"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    staff_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    course_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("training_courses.id", ondelete="CASCADE"),
        nullable=False,
    )

    what_learned: Mapped[str] = mapped_column(Text, nullable=False)
    connected_value: Mapped[str] = mapped_column(String(100), nullable=False)
    connected_value_why: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    proud_moment: Mapped[str] = mapped_column(Text, nullable=False)
    concerns: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    suggestions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    visibility: Mapped[str] = mapped_column(String(20), nullable=False, default=ReflectionVisibility.PUBLIC.value)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("staff_id", "course_id", name="uq_training_reflections_staff_course"),)
