"""
Course catalog model. Authored by content teams; read-only to the engine.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from academy.kernel.models.base import Base, TimestampMixin, generate_uuid


class ContentType(str, Enum):
    """How a course is completed."""
    READING = "reading"
    QUIZ = "quiz"


class Course(Base, TimestampMixin):
    """
    A catalog entry belonging to one tier.

    quiz holds the ordered question list for quiz courses:
    [{"text": str, "options": [str, ...], "correct_index": int}, ...]
    """

    __tablename__ = "training_courses"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    tier: Mapped[str] = mapped_column(String(20), nullable=False)
    content_type: Mapped[str] = mapped_column(String(20), nullable=False, default=ContentType.READING.value)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_mandatory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_capstone: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    quiz: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    pass_mark_percent: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_training_courses_tier_order", "tier", "order_index"),
    )

    @property
    def is_quiz(self) -> bool:
        return self.content_type == ContentType.QUIZ.value

    def __repr__(self) -> str:
        return f"<Course {self.tier}:{self.order_index} {self.title!r}>"
