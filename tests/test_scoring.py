from __future__ import annotations

from tutor_app.core.models import Question
from tutor_app.core.services.scoring import compute_score, feedback_for


def test_one_correct_one_wrong_one_skipped(three_questions):
    report = compute_score(three_questions, {0: 0, 1: 0})
    assert (report.correct_count, report.wrong_count, report.skipped_count) == (1, 1, 1)
    assert report.raw_score == 1
    assert report.percentage == 33
    assert report.total_questions == 3


def test_negative_marking_is_floored_at_zero_percent(three_questions):
    report = compute_score(three_questions, {0: 1, 1: 0}, positive_mark=1, negative_mark=1)
    assert report.raw_score == -2
    assert report.percentage == 0


def test_percentage_rounds_half_up():
    questions = [Question(text=str(i), options=("a", "b"), correct_index=0) for i in range(8)]
    report = compute_score(questions, {0: 0})
    # 1/8 = 12.5%
    assert report.percentage == 13


def test_empty_quiz_scores_zero():
    report = compute_score([], {})
    assert report.percentage == 0
    assert feedback_for(report).title == "Completed"


def test_feedback_tiers(three_questions):
    perfect = feedback_for(compute_score(three_questions, {0: 0, 1: 1, 2: 1}))
    assert perfect.title == "Perfect Score!" and perfect.celebrate
    good = feedback_for(compute_score(three_questions, {0: 0, 1: 1}))
    assert good.title == "Good Effort!"
    low = feedback_for(compute_score(three_questions, {}))
    assert low.title == "Don't Give Up!" and not low.celebrate
