"""
Training Engine - tiered course progression and certification.

Tiers (strict order, each unlocks when the previous is complete):
- Foundation: Culture & Values (pass mark 80%)
- L1 Food Hygiene (80%)
- L2 Food Hygiene (85%)
- L3 Food Hygiene (90%)

Completing every course in a tier issues one certificate for that tier,
valid for 12 months. Capstone courses finish only after a reflection.
"""

from academy.engines.training.tiers import (
    Tier,
    TIER_ORDER,
    TIER_NAMES,
    PASS_MARKS,
    FALLBACK_SCORES,
    HYGIENE_TIERS,
    round_half_up,
)
from academy.engines.training.exceptions import (
    TrainingError,
    UnknownCourse,
    TierLocked,
    IncompleteSubmission,
    IncompleteReflection,
    ReflectionNotDue,
    ReflectionRequired,
)
from academy.engines.training.quiz_scorer import QuizQuestion, QuizResult, QuizScorer
from academy.engines.training.catalog import CourseCatalog, CourseDefinition
from academy.engines.training.transitions import ProgressStage, ProgressEvent, next_stage
from academy.engines.training.level_gate import LevelGateResolver, TierSnapshot, TierStatus
from academy.engines.training.completion_recorder import (
    CompletionOutcome,
    CompletionRecorder,
    ProgressChange,
)
from academy.engines.training.reflection_gate import ReflectionGate, ReflectionSubmission
from academy.engines.training.certificate_issuer import (
    CertificateIssuer,
    CertificateView,
    ExpiryStatus,
    classify_expiry,
)
from academy.engines.training.journey import JourneyAggregator
from academy.engines.training.progression import ProgressionEngine, ProgressionResult

__all__ = [
    "Tier",
    "TIER_ORDER",
    "TIER_NAMES",
    "PASS_MARKS",
    "FALLBACK_SCORES",
    "HYGIENE_TIERS",
    "round_half_up",
    "TrainingError",
    "UnknownCourse",
    "TierLocked",
    "IncompleteSubmission",
    "IncompleteReflection",
    "ReflectionNotDue",
    "ReflectionRequired",
    "QuizQuestion",
    "QuizResult",
    "QuizScorer",
    "CourseCatalog",
    "CourseDefinition",
    "ProgressStage",
    "ProgressEvent",
    "next_stage",
    "LevelGateResolver",
    "TierSnapshot",
    "TierStatus",
    "CompletionOutcome",
    "CompletionRecorder",
    "ProgressChange",
    "ReflectionGate",
    "ReflectionSubmission",
    "CertificateIssuer",
    "CertificateView",
    "ExpiryStatus",
    "classify_expiry",
    "JourneyAggregator",
    "ProgressionEngine",
    "ProgressionResult",
]
