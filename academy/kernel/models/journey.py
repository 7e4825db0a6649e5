"""
Cross-module onboarding journey: values -> hygiene -> certification.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from academy.kernel.models.base import Base, generate_uuid


class JourneyStep(str, Enum):
    """Milestones in order. COMPLETE means every milestone is reached."""
    VALUES = "values"
    HYGIENE = "hygiene"
    CERTIFICATION = "certification"
    COMPLETE = "complete"


JOURNEY_STEP_ORDER = [
    JourneyStep.VALUES,
    JourneyStep.HYGIENE,
    JourneyStep.CERTIFICATION,
    JourneyStep.COMPLETE,
]


class JourneyProgress(Base):
    """One row per staff member; current_step only moves forward."""

    __tablename__ = "training_journeys"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    staff_id: Mapped[uuid.UUID] = mapped_column(nullable=False, unique=True, index=True)

    values_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    hygiene_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    certified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    certificate_issued_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    current_step: Mapped[str] = mapped_column(String(20), nullable=False, default=JourneyStep.VALUES.value)
    last_updated: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
