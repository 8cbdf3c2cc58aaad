"""Service for scoring a submitted quiz attempt."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import math

from tutor_app.constants.quiz_constants import DEFAULT_NEGATIVE_MARK, DEFAULT_POSITIVE_MARK
from tutor_app.core.models import Question


@dataclass(frozen=True, slots=True)
class ScoreReport:
    """Immutable snapshot of a submitted attempt."""

    correct_count: int
    wrong_count: int
    skipped_count: int
    raw_score: float
    percentage: int
    total_questions: int
    elapsed_seconds: float


@dataclass(frozen=True, slots=True)
class Feedback:
    """Result-card headline chosen from the percentage."""

    title: str
    subtitle: str
    celebrate: bool = False


def compute_score(
    questions: Sequence[Question],
    answers: Mapping[int, int],
    elapsed_seconds: float = 0.0,
    positive_mark: float = DEFAULT_POSITIVE_MARK,
    negative_mark: float = DEFAULT_NEGATIVE_MARK,
) -> ScoreReport:
    """Classify every question as correct, wrong or skipped and total the marks."""
    correct = wrong = skipped = 0
    raw_score = 0.0

    for index, question in enumerate(questions):
        chosen = answers.get(index)
        if chosen is None:
            skipped += 1
        elif chosen == question.correct_index:
            correct += 1
            raw_score += positive_mark
        else:
            wrong += 1
            raw_score -= negative_mark

    total = len(questions)
    max_score = total * positive_mark
    percentage = 0
    if max_score > 0:
        # Half-up rounding; round() would round 12.5 down to 12.
        percentage = max(0, math.floor(100 * raw_score / max_score + 0.5))

    return ScoreReport(
        correct_count=correct,
        wrong_count=wrong,
        skipped_count=skipped,
        raw_score=raw_score,
        percentage=percentage,
        total_questions=total,
        elapsed_seconds=elapsed_seconds,
    )


def feedback_for(report: ScoreReport) -> Feedback:
    if report.total_questions == 0:
        return Feedback(title="Completed", subtitle="")
    if report.percentage >= 100:
        return Feedback(title="Perfect Score!", subtitle="You mastered this chapter!", celebrate=True)
    if report.percentage >= 80:
        return Feedback(title="Excellent Work!", subtitle="Great job, keep it up!", celebrate=True)
    if report.percentage >= 50:
        return Feedback(title="Good Effort!", subtitle="You're getting there!")
    return Feedback(title="Don't Give Up!", subtitle="Review and try again.")
