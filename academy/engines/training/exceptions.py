"""
Training engine exceptions.

Every rejected operation raises one of these; repeated issuance, repeated
quiz attempts and expired certificates are data states, not errors.
"""

from typing import Any, Dict, Optional


class TrainingError(Exception):
    """Base exception for training engine errors."""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: str = "TRAINING_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class UnknownCourse(TrainingError):
    """Raised when a course id is not in the catalog."""

    status_code = 404

    def __init__(self, course_id: Any, message: Optional[str] = None):
        super().__init__(
            message=message or f"Course not found: {course_id}",
            code="UNKNOWN_COURSE",
            details={"course_id": str(course_id)},
        )


class TierLocked(TrainingError):
    """Raised when interacting with a course whose tier is not unlocked."""

    status_code = 403

    def __init__(self, tier: str, course_id: Any = None):
        details = {"tier": tier}
        if course_id is not None:
            details["course_id"] = str(course_id)
        super().__init__(
            message=f"Tier {tier} is locked until the previous tier is complete",
            code="TIER_LOCKED",
            details=details,
        )


class IncompleteSubmission(TrainingError):
    """Raised when a quiz submission does not answer every question exactly once."""

    status_code = 422

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INCOMPLETE_SUBMISSION", details=details)


class IncompleteReflection(TrainingError):
    """Raised when required reflection fields are blank."""

    status_code = 422

    def __init__(self, missing_fields: list):
        super().__init__(
            message="Reflection is missing required answers",
            code="INCOMPLETE_REFLECTION",
            details={"missing_fields": missing_fields},
        )


class ReflectionNotDue(TrainingError):
    """Raised when a reflection is submitted for a course that cannot take one yet."""

    status_code = 409

    def __init__(self, course_id: Any, reason: str):
        super().__init__(
            message=f"Reflection not accepted: {reason}",
            code="REFLECTION_NOT_DUE",
            details={"course_id": str(course_id), "reason": reason},
        )


class ReflectionRequired(TrainingError):
    """Raised when a capstone course would be completed without a reflection."""

    status_code = 409

    def __init__(self, course_id: Any):
        super().__init__(
            message="Capstone courses cannot be completed without a reflection",
            code="REFLECTION_REQUIRED",
            details={"course_id": str(course_id)},
        )
