"""
Kernel Data Models

SQLAlchemy models for the training record store.
"""

from academy.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow, as_utc
from academy.kernel.models.course import Course, ContentType
from academy.kernel.models.progress import (
    ProgressRecord,
    ProgressStatus,
    ReflectionRecord,
    ReflectionVisibility,
)
from academy.kernel.models.certificate import Certificate
from academy.kernel.models.journey import JourneyProgress, JourneyStep, JOURNEY_STEP_ORDER
from academy.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    "as_utc",
    # Catalog
    "Course",
    "ContentType",
    # Progress
    "ProgressRecord",
    "ProgressStatus",
    "ReflectionRecord",
    "ReflectionVisibility",
    # Certification
    "Certificate",
    # Journey
    "JourneyProgress",
    "JourneyStep",
    "JOURNEY_STEP_ORDER",
    # Event Log
    "EventLog",
    "EventType",
]
