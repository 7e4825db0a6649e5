"""Unit tests for the quiz scoring engine."""

import pytest

from academy.engines.training.exceptions import IncompleteSubmission
from academy.engines.training.quiz_scorer import QuizQuestion, QuizScorer
from academy.engines.training.tiers import PASS_MARKS, Tier


def _questions(count: int):
    return [
        QuizQuestion(text=f"Q{i}", options=["a", "b", "c", "d"], correct_index=i % 4)
        for i in range(count)
    ]


class TestScore:
    def test_all_correct_is_100(self):
        questions = _questions(10)
        answers = [q.correct_index for q in questions]
        assert QuizScorer.score(questions, answers) == 100

    def test_all_wrong_is_0(self):
        questions = _questions(10)
        answers = [(q.correct_index + 1) % 4 for q in questions]
        assert QuizScorer.score(questions, answers) == 0

    def test_seven_of_ten(self):
        questions = _questions(10)
        answers = [q.correct_index for q in questions[:7]] + [(q.correct_index + 1) % 4 for q in questions[7:]]
        assert QuizScorer.score(questions, answers) == 70

    def test_halves_round_up(self):
        # 1/8 = 12.5% -> 13
        questions = _questions(8)
        answers = [questions[0].correct_index] + [(q.correct_index + 1) % 4 for q in questions[1:]]
        assert QuizScorer.score(questions, answers) == 13

    def test_thirds_round_to_nearest(self):
        # 2/3 = 66.67% -> 67, 1/3 = 33.33% -> 33
        questions = _questions(3)
        right = [q.correct_index for q in questions]
        wrong = [(q.correct_index + 1) % 4 for q in questions]
        assert QuizScorer.score(questions, right[:2] + wrong[2:]) == 67
        assert QuizScorer.score(questions, right[:1] + wrong[1:]) == 33

    def test_deterministic(self):
        questions = _questions(6)
        answers = [0, 1, 0, 3, 0, 1]
        first = QuizScorer.evaluate(questions, answers, 80)
        second = QuizScorer.evaluate(questions, answers, 80)
        assert first == second

    def test_out_of_range_answer_counts_as_wrong(self):
        questions = _questions(2)
        answers = [questions[0].correct_index, 99]
        assert QuizScorer.score(questions, answers) == 50


class TestValidation:
    def test_too_few_answers_rejected(self):
        with pytest.raises(IncompleteSubmission) as exc_info:
            QuizScorer.score(_questions(5), [0, 1, 2])
        assert exc_info.value.details == {"expected": 5, "received": 3}

    def test_too_many_answers_rejected(self):
        with pytest.raises(IncompleteSubmission):
            QuizScorer.score(_questions(2), [0, 1, 2])

    def test_unanswered_question_rejected(self):
        with pytest.raises(IncompleteSubmission) as exc_info:
            QuizScorer.score(_questions(3), [0, None, 2])
        assert exc_info.value.details["unanswered"] == [1]

    def test_boolean_is_not_an_answer(self):
        with pytest.raises(IncompleteSubmission):
            QuizScorer.score(_questions(1), [True])

    def test_empty_quiz_rejected(self):
        with pytest.raises(IncompleteSubmission):
            QuizScorer.score([], [])

    def test_question_needs_two_options(self):
        with pytest.raises(ValueError):
            QuizQuestion(text="Q", options=["only"], correct_index=0)

    def test_correct_index_must_address_an_option(self):
        with pytest.raises(ValueError):
            QuizQuestion(text="Q", options=["a", "b"], correct_index=2)


class TestPassMark:
    def test_tier_defaults(self):
        assert PASS_MARKS[Tier.FOUNDATION] == 80
        assert PASS_MARKS[Tier.L1] == 80
        assert PASS_MARKS[Tier.L2] == 85
        assert PASS_MARKS[Tier.L3] == 90

    def test_pass_is_inclusive(self):
        assert QuizScorer.is_pass(80, 80) is True
        assert QuizScorer.is_pass(79, 80) is False

    def test_evaluate_reports_verdict(self):
        questions = _questions(10)
        answers = [q.correct_index for q in questions[:9]] + [(questions[9].correct_index + 1) % 4]
        result = QuizScorer.evaluate(questions, answers, pass_mark=90)
        assert result.score_percentage == 90
        assert result.correct_answers == 9
        assert result.passed is True
        assert result.question_results == [True] * 9 + [False]

        result = QuizScorer.evaluate(questions, answers, pass_mark=95)
        assert result.passed is False
