"""
Progress state machine for a single (staff, course) record.

The stored status/progress pair is derived from a stage. Valid
transitions are defined here; anything missing from the table is
rejected. Stages only move forward through learner events; moving a
record backwards is reserved for administrative overrides.
"""

from enum import Enum
from typing import Dict, Tuple

from academy.kernel.models.progress import ProgressRecord, ProgressStatus


class ProgressStage(str, Enum):
    """Stages of course progress, in order."""
    NOT_STARTED = "not_started"
    ATTEMPTED = "attempted"  # quiz taken, not passed
    AWAITING_REFLECTION = "awaiting_reflection"  # capstone quiz passed
    COMPLETED = "completed"


class ProgressEvent(str, Enum):
    """Learner events that drive transitions."""
    READING_COMPLETED = "reading_completed"
    QUIZ_FAILED = "quiz_failed"
    QUIZ_PASSED = "quiz_passed"
    CAPSTONE_QUIZ_PASSED = "capstone_quiz_passed"
    REFLECTION_ACCEPTED = "reflection_accepted"


# Stored (status, progress_percent) for each stage
STAGE_STATE: Dict[ProgressStage, Tuple[ProgressStatus, int]] = {
    ProgressStage.NOT_STARTED: (ProgressStatus.NOT_STARTED, 0),
    ProgressStage.ATTEMPTED: (ProgressStatus.IN_PROGRESS, 50),
    ProgressStage.AWAITING_REFLECTION: (ProgressStatus.IN_PROGRESS, 90),
    ProgressStage.COMPLETED: (ProgressStatus.COMPLETED, 100),
}

_S = ProgressStage
_E = ProgressEvent

_TRANSITIONS: Dict[Tuple[ProgressStage, ProgressEvent], ProgressStage] = {
    # Reading courses complete on first acknowledgement
    (_S.NOT_STARTED, _E.READING_COMPLETED): _S.COMPLETED,
    (_S.ATTEMPTED, _E.READING_COMPLETED): _S.COMPLETED,
    (_S.COMPLETED, _E.READING_COMPLETED): _S.COMPLETED,
    # Failed attempts never move a record backwards
    (_S.NOT_STARTED, _E.QUIZ_FAILED): _S.ATTEMPTED,
    (_S.ATTEMPTED, _E.QUIZ_FAILED): _S.ATTEMPTED,
    (_S.AWAITING_REFLECTION, _E.QUIZ_FAILED): _S.AWAITING_REFLECTION,
    (_S.COMPLETED, _E.QUIZ_FAILED): _S.COMPLETED,
    (_S.NOT_STARTED, _E.QUIZ_PASSED): _S.COMPLETED,
    (_S.ATTEMPTED, _E.QUIZ_PASSED): _S.COMPLETED,
    (_S.AWAITING_REFLECTION, _E.QUIZ_PASSED): _S.COMPLETED,
    (_S.COMPLETED, _E.QUIZ_PASSED): _S.COMPLETED,
    # Capstones hold at 90% until the reflection arrives
    (_S.NOT_STARTED, _E.CAPSTONE_QUIZ_PASSED): _S.AWAITING_REFLECTION,
    (_S.ATTEMPTED, _E.CAPSTONE_QUIZ_PASSED): _S.AWAITING_REFLECTION,
    (_S.AWAITING_REFLECTION, _E.CAPSTONE_QUIZ_PASSED): _S.AWAITING_REFLECTION,
    (_S.COMPLETED, _E.CAPSTONE_QUIZ_PASSED): _S.COMPLETED,
    (_S.AWAITING_REFLECTION, _E.REFLECTION_ACCEPTED): _S.COMPLETED,
    (_S.COMPLETED, _E.REFLECTION_ACCEPTED): _S.COMPLETED,
}


def next_stage(current: ProgressStage, event: ProgressEvent) -> ProgressStage:
    """Apply an event to a stage. Raises ValueError for undefined transitions."""
    try:
        return _TRANSITIONS[(current, event)]
    except KeyError:
        raise ValueError(f"Invalid transition: {current.value} on {event.value}") from None


def can_apply(current: ProgressStage, event: ProgressEvent) -> bool:
    return (current, event) in _TRANSITIONS


def stage_of(record: ProgressRecord) -> ProgressStage:
    """Recover the stage from a stored record."""
    if record.status == ProgressStatus.COMPLETED.value:
        return ProgressStage.COMPLETED
    if record.status == ProgressStatus.IN_PROGRESS.value:
        if record.quiz_passed_at is not None:
            return ProgressStage.AWAITING_REFLECTION
        return ProgressStage.ATTEMPTED
    return ProgressStage.NOT_STARTED


def stage_for_status(status: ProgressStatus) -> ProgressStage:
    """Stage an administrative override lands on for a requested status."""
    return {
        ProgressStatus.NOT_STARTED: ProgressStage.NOT_STARTED,
        ProgressStatus.IN_PROGRESS: ProgressStage.ATTEMPTED,
        ProgressStatus.COMPLETED: ProgressStage.COMPLETED,
    }[status]
