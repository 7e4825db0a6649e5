"""Unit tests for journey milestone ordering."""

from academy.engines.training.journey import advance_step, compute_step
from academy.kernel.models.journey import JourneyStep


def test_first_unreached_milestone():
    assert compute_step(False, False, False) == JourneyStep.VALUES
    assert compute_step(True, False, False) == JourneyStep.HYGIENE
    assert compute_step(True, True, False) == JourneyStep.CERTIFICATION
    assert compute_step(True, True, True) == JourneyStep.COMPLETE


def test_earlier_gap_holds_the_step():
    # Certified without acknowledging culture still points at values
    assert compute_step(False, True, True) == JourneyStep.VALUES


def test_advance_never_moves_backwards():
    assert advance_step(JourneyStep.HYGIENE, JourneyStep.CERTIFICATION) == JourneyStep.CERTIFICATION
    assert advance_step(JourneyStep.CERTIFICATION, JourneyStep.VALUES) == JourneyStep.CERTIFICATION
    assert advance_step(JourneyStep.COMPLETE, JourneyStep.HYGIENE) == JourneyStep.COMPLETE
