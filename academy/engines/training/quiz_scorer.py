"""
Quiz Scoring Engine - deterministic percent-correct scoring.
"""

from typing import List, Optional, Sequence

from pydantic import BaseModel, Field, model_validator

from academy.engines.training.exceptions import IncompleteSubmission
from academy.engines.training.tiers import round_half_up


class QuizQuestion(BaseModel):
    """A multiple-choice question with a single correct option."""

    text: str
    options: List[str] = Field(min_length=2)
    correct_index: int

    @model_validator(mode="after")
    def _correct_index_in_range(self) -> "QuizQuestion":
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError("correct_index must address one of the options")
        return self


class QuizResult(BaseModel):
    """Outcome of scoring one submission."""

    total_questions: int
    correct_answers: int
    score_percentage: int
    pass_mark: int
    passed: bool
    question_results: List[bool]


class QuizScorer:
    """
    Scores quiz submissions.

    Every question carries equal weight: score = round(100 * correct / total),
    halves rounded up. No partial credit, no negative marking. A submission
    must answer every question exactly once; an option index outside the
    question's options simply counts as wrong.
    """

    @classmethod
    def validate_submission(
        cls,
        questions: Sequence[QuizQuestion],
        answers: Sequence[Optional[int]],
    ) -> None:
        """Reject partial submissions before any scoring happens."""
        if not questions:
            raise IncompleteSubmission("Quiz has no questions to answer")
        if len(answers) != len(questions):
            raise IncompleteSubmission(
                f"Expected {len(questions)} answers, got {len(answers)}",
                details={"expected": len(questions), "received": len(answers)},
            )
        unanswered = [
            i for i, a in enumerate(answers)
            if a is None or isinstance(a, bool) or not isinstance(a, int)
        ]
        if unanswered:
            raise IncompleteSubmission(
                "Every question needs exactly one answer",
                details={"unanswered": unanswered},
            )

    @classmethod
    def grade(
        cls,
        questions: Sequence[QuizQuestion],
        answers: Sequence[int],
    ) -> List[bool]:
        return [a == q.correct_index for q, a in zip(questions, answers)]

    @classmethod
    def score(
        cls,
        questions: Sequence[QuizQuestion],
        answers: Sequence[Optional[int]],
    ) -> int:
        """Percent of questions answered correctly (0-100)."""
        cls.validate_submission(questions, answers)
        correct = sum(cls.grade(questions, answers))
        return round_half_up(100 * correct / len(questions))

    @staticmethod
    def is_pass(score_percentage: int, pass_mark: int) -> bool:
        return score_percentage >= pass_mark

    @classmethod
    def evaluate(
        cls,
        questions: Sequence[QuizQuestion],
        answers: Sequence[Optional[int]],
        pass_mark: int,
    ) -> QuizResult:
        """Score a submission and decide pass/fail against pass_mark."""
        cls.validate_submission(questions, answers)
        results = cls.grade(questions, answers)
        score = round_half_up(100 * sum(results) / len(questions))
        return QuizResult(
            total_questions=len(questions),
            correct_answers=sum(results),
            score_percentage=score,
            pass_mark=pass_mark,
            passed=cls.is_pass(score, pass_mark),
            question_results=results,
        )
