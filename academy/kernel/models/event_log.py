"""
Immutable event log for the training audit trail.

Every progression step is logged here before commit.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, String, func, Index, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from academy.kernel.models.base import Base, generate_uuid


class EventType(str, Enum):
    """All event types for the audit log."""

    # Catalog events
    COURSE_CREATED = "catalog.course_created"

    # Progress events
    QUIZ_PASSED = "training.quiz_passed"
    QUIZ_FAILED = "training.quiz_failed"
    COURSE_COMPLETED = "training.course_completed"
    REFLECTION_SUBMITTED = "training.reflection_submitted"
    TIER_COMPLETED = "training.tier_completed"

    # Certification events
    CERTIFICATE_ISSUED = "certification.issued"

    # Journey events
    CULTURE_ACKNOWLEDGED = "journey.culture_acknowledged"
    JOURNEY_ADVANCED = "journey.advanced"

    # Admin events
    PROGRESS_OVERRIDDEN = "admin.progress_overridden"


class EventLog(Base):
    """
    Immutable audit event log.

    This table is append-only - no updates or deletes allowed.
    """

    __tablename__ = "event_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )

    event_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    # Entity reference
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )

    # Staff member whose training the event concerns
    staff_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )
    # Who performed it, when different (admin overrides, authoring)
    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
    )

    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
        Index("ix_event_logs_staff_time", "staff_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<EventLog {self.event_type} {self.entity_type}:{self.entity_id}>"
