"""Service for driving a single quiz attempt.

Phases::

    LOADING --load(questions)--> ACTIVE --submit()--> RESULT <--> SOLUTION
       `--load([]) / fail_load()--> UNAVAILABLE

ACTIVE has a paused flag that freezes the clock. Every transition is total:
requests that do not apply to the current phase are ignored and out-of-range
indices are clamped, so callers never need to guard against exceptions.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
import logging

from tutor_app.constants.quiz_constants import DEFAULT_NEGATIVE_MARK, DEFAULT_POSITIVE_MARK
from tutor_app.core.models import Question
from tutor_app.core.services.scoring import ScoreReport, compute_score

logger = logging.getLogger(__name__)


class QuizPhase(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    RESULT = "result"
    SOLUTION = "solution"
    UNAVAILABLE = "unavailable"


class QuestionStatus(str, Enum):
    """Palette badge state of a question, listed in precedence order."""

    REVIEW = "review"
    ANSWERED = "answered"
    CURRENT = "current"
    VISITED = "visited"
    NOT_VISITED = "not_visited"


def classify_status(
    *,
    marked: bool,
    answered: bool,
    current: bool,
    visited: bool,
) -> QuestionStatus:
    """Pick the badge status; the first matching condition wins."""
    for status, applies in (
        (QuestionStatus.REVIEW, marked),
        (QuestionStatus.ANSWERED, answered),
        (QuestionStatus.CURRENT, current),
        (QuestionStatus.VISITED, visited),
    ):
        if applies:
            return status
    return QuestionStatus.NOT_VISITED


class QuizSession:
    """Manages the state of one quiz attempt over a fixed list of questions."""

    def __init__(
        self,
        positive_mark: float = DEFAULT_POSITIVE_MARK,
        negative_mark: float = DEFAULT_NEGATIVE_MARK,
    ) -> None:
        self.positive_mark = positive_mark
        self.negative_mark = negative_mark
        self._phase = QuizPhase.LOADING
        self._questions: list[Question] = []
        self._paused = False
        self._report: ScoreReport | None = None
        self._reset_progress()

    def _reset_progress(self) -> None:
        self._answers: dict[int, int] = {}
        self._visited: set[int] = set()
        self._marked: set[int] = set()
        self._current_index = 0
        self._elapsed_seconds = 0.0
        self._per_question_seconds: dict[int, float] = {}
        self._paused = False
        self._report = None

    # --- Loading -----------------------------------------------------------

    def load(self, questions: Sequence[Question]) -> None:
        """Finish loading. An empty question list makes the quiz unavailable."""
        if self._phase is not QuizPhase.LOADING:
            return
        self._questions = list(questions)
        if not self._questions:
            self._phase = QuizPhase.UNAVAILABLE
            return
        self._reset_progress()
        self._visited.add(0)
        self._phase = QuizPhase.ACTIVE

    def fail_load(self) -> None:
        if self._phase is QuizPhase.LOADING:
            self._phase = QuizPhase.UNAVAILABLE

    def restart(self) -> None:
        """Start a fresh attempt over the same questions ("Try again")."""
        if self._phase not in (QuizPhase.RESULT, QuizPhase.SOLUTION):
            return
        self._reset_progress()
        self._visited.add(0)
        self._phase = QuizPhase.ACTIVE

    # --- Read access -------------------------------------------------------

    @property
    def phase(self) -> QuizPhase:
        return self._phase

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_clock_running(self) -> bool:
        return self._phase is QuizPhase.ACTIVE and not self._paused

    @property
    def questions(self) -> list[Question]:
        return list(self._questions)

    @property
    def question_count(self) -> int:
        return len(self._questions)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_question(self) -> Question | None:
        if not self._questions:
            return None
        return self._questions[self._current_index]

    @property
    def answers(self) -> dict[int, int]:
        return dict(self._answers)

    @property
    def visited(self) -> set[int]:
        return set(self._visited)

    @property
    def marked_for_review(self) -> set[int]:
        return set(self._marked)

    @property
    def elapsed_seconds(self) -> float:
        return self._elapsed_seconds

    @property
    def per_question_seconds(self) -> dict[int, float]:
        return dict(self._per_question_seconds)

    @property
    def report(self) -> ScoreReport | None:
        """Score snapshot taken at submission, None before that."""
        return self._report

    def status_of(self, index: int) -> QuestionStatus:
        return classify_status(
            marked=index in self._marked,
            answered=index in self._answers,
            current=index == self._current_index,
            visited=index in self._visited,
        )

    def statuses(self) -> list[QuestionStatus]:
        return [self.status_of(index) for index in range(len(self._questions))]

    # --- Answering ---------------------------------------------------------

    def _accepts_edits(self) -> bool:
        return self._phase is QuizPhase.ACTIVE and not self._paused

    def select_option(self, option_index: int) -> None:
        if not self._accepts_edits():
            return
        if not 0 <= option_index < len(self._questions[self._current_index].options):
            return
        self._answers[self._current_index] = option_index

    def clear_answer(self) -> None:
        if not self._accepts_edits():
            return
        self._answers.pop(self._current_index, None)

    def toggle_mark_for_review(self) -> None:
        if not self._accepts_edits():
            return
        if self._current_index in self._marked:
            self._marked.discard(self._current_index)
        else:
            self._marked.add(self._current_index)

    # --- Navigation --------------------------------------------------------

    def _can_navigate(self) -> bool:
        return self._phase in (QuizPhase.ACTIVE, QuizPhase.SOLUTION)

    def next_question(self) -> None:
        if not self._can_navigate():
            return
        if self._current_index + 1 < len(self._questions):
            self._current_index += 1
            if self._phase is QuizPhase.ACTIVE:
                self._visited.add(self._current_index)

    def previous_question(self) -> None:
        if not self._can_navigate():
            return
        if self._current_index > 0:
            self._current_index -= 1

    def jump_to(self, index: int) -> None:
        if not self._can_navigate():
            return
        self._current_index = min(max(index, 0), len(self._questions) - 1)
        if self._phase is QuizPhase.ACTIVE:
            self._visited.add(self._current_index)

    # --- Clock -------------------------------------------------------------

    def pause(self) -> None:
        if self._phase is QuizPhase.ACTIVE:
            self._paused = True

    def resume(self) -> None:
        if self._phase is QuizPhase.ACTIVE:
            self._paused = False

    def tick(self, seconds: float) -> None:
        """Accrue time to the total and the current question while running."""
        if not self.is_clock_running or seconds <= 0:
            return
        self._elapsed_seconds += seconds
        index = self._current_index
        self._per_question_seconds[index] = self._per_question_seconds.get(index, 0.0) + seconds

    # --- Submission --------------------------------------------------------

    def submit(self) -> ScoreReport | None:
        """Freeze the attempt and take the score snapshot."""
        if self._phase is not QuizPhase.ACTIVE:
            return self._report
        self._paused = False
        self._report = compute_score(
            self._questions,
            self._answers,
            elapsed_seconds=self._elapsed_seconds,
            positive_mark=self.positive_mark,
            negative_mark=self.negative_mark,
        )
        self._phase = QuizPhase.RESULT
        logger.info(
            "Quiz submitted: %d correct, %d wrong, %d skipped (%d%%).",
            self._report.correct_count,
            self._report.wrong_count,
            self._report.skipped_count,
            self._report.percentage,
        )
        return self._report

    def view_solutions(self) -> None:
        if self._phase is QuizPhase.RESULT:
            self._phase = QuizPhase.SOLUTION
            self._current_index = 0

    def back_to_result(self) -> None:
        if self._phase is QuizPhase.SOLUTION:
            self._phase = QuizPhase.RESULT
