"""Business logic for live quiz sessions shared by the HTTP handlers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from threading import Lock
import time
from typing import Any, Protocol
from uuid import uuid4

from tutor_app.constants.quiz_constants import (
    DEFAULT_NEGATIVE_MARK,
    DEFAULT_POSITIVE_MARK,
    NO_QUIZ_AVAILABLE_MESSAGE,
    SESSION_IDLE_TIMEOUT_SECONDS,
    TICK_INTERVAL_SECONDS,
)
from tutor_app.core.quiz_normalizer import load_quiz_from_payload
from tutor_app.core.services.content_repository import ContentFetchError
from tutor_app.core.services.quiz_session import QuizPhase, QuizSession
from tutor_app.core.services.scoring import feedback_for
from tutor_app.core.services.session_ticker import SessionTicker
from tutor_app.styling.color_palette import status_color

logger = logging.getLogger(__name__)


class QuizSource(Protocol):
    def get_quiz_payload(self, chapter_id: str) -> Any: ...


@dataclass(slots=True)
class _LiveQuiz:
    chapter_id: str
    session: QuizSession
    last_access: float = 0.0
    ticker: SessionTicker | None = None


class QuizManager:
    """Facade owning every live quiz session of the process.

    Sessions are keyed by an opaque id handed to the client. All access goes
    through one lock because FastAPI runs sync handlers on a thread pool and
    the per-session tickers run on their own threads.

    A session untouched by its client for ``idle_timeout`` seconds is evicted
    along with its ticker. Running sessions are evicted by their own ticker,
    all others by the sweep done when a new quiz starts.
    """

    def __init__(
        self,
        quiz_source: QuizSource,
        positive_mark: float = DEFAULT_POSITIVE_MARK,
        negative_mark: float = DEFAULT_NEGATIVE_MARK,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        ticker_factory: Callable[[Callable[[float], bool], float], SessionTicker] | None = None,
        idle_timeout: float = SESSION_IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = Lock()
        self._source = quiz_source
        self._positive_mark = positive_mark
        self._negative_mark = negative_mark
        self._tick_interval = tick_interval
        self._ticker_factory = ticker_factory or (
            lambda on_tick, interval: SessionTicker(on_tick, interval)
        )
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._live: dict[str, _LiveQuiz] = {}

    # --- Lifecycle ---------------------------------------------------------

    def start_quiz(self, chapter_id: str) -> str:
        """Fetch a chapter's quiz and open a session for it; returns the session id."""
        session = QuizSession(self._positive_mark, self._negative_mark)
        try:
            payload = self._source.get_quiz_payload(chapter_id)
        except ContentFetchError as exc:
            logger.warning("Quiz fetch for chapter %s failed: %s", chapter_id, exc)
            session.fail_load()
        else:
            session.load(load_quiz_from_payload(payload))

        session_id = uuid4().hex
        live = _LiveQuiz(chapter_id=chapter_id, session=session, last_access=self._clock())
        with self._lock:
            self._evict_idle()
            self._live[session_id] = live
            if session.phase is QuizPhase.ACTIVE:
                self._start_ticker(session_id, live)
        logger.info(
            "Opened quiz session %s for chapter %s (%s, %d question(s)).",
            session_id,
            chapter_id,
            session.phase.value,
            session.question_count,
        )
        return session_id

    def discard(self, session_id: str) -> None:
        """Drop a session when the user leaves the quiz screen."""
        with self._lock:
            live = self._live.pop(session_id, None)
            if live is None:
                raise KeyError(session_id)
            self._stop_ticker(live)

    def shutdown(self) -> None:
        with self._lock:
            for live in self._live.values():
                self._stop_ticker(live)
            self._live.clear()

    def has_session(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._live

    def is_ticking(self, session_id: str) -> bool:
        with self._lock:
            live = self._get(session_id)
            return live.ticker is not None and live.ticker.is_running()

    # --- Transitions -------------------------------------------------------

    def select_option(self, session_id: str, option_index: int) -> dict[str, Any]:
        return self._apply(session_id, lambda s: s.select_option(option_index))

    def next_question(self, session_id: str) -> dict[str, Any]:
        return self._apply(session_id, QuizSession.next_question)

    def previous_question(self, session_id: str) -> dict[str, Any]:
        return self._apply(session_id, QuizSession.previous_question)

    def clear_answer(self, session_id: str) -> dict[str, Any]:
        return self._apply(session_id, QuizSession.clear_answer)

    def toggle_mark_for_review(self, session_id: str) -> dict[str, Any]:
        return self._apply(session_id, QuizSession.toggle_mark_for_review)

    def jump_to(self, session_id: str, index: int) -> dict[str, Any]:
        return self._apply(session_id, lambda s: s.jump_to(index))

    def pause(self, session_id: str) -> dict[str, Any]:
        return self._apply(session_id, QuizSession.pause)

    def resume(self, session_id: str) -> dict[str, Any]:
        return self._apply(session_id, QuizSession.resume)

    def submit(self, session_id: str) -> dict[str, Any]:
        with self._lock:
            live = self._get(session_id)
            live.session.submit()
            self._stop_ticker(live)
            return session_snapshot(live.session, live.chapter_id)

    def view_solutions(self, session_id: str) -> dict[str, Any]:
        return self._apply(session_id, QuizSession.view_solutions)

    def back_to_result(self, session_id: str) -> dict[str, Any]:
        return self._apply(session_id, QuizSession.back_to_result)

    def restart(self, session_id: str) -> dict[str, Any]:
        with self._lock:
            live = self._get(session_id)
            live.session.restart()
            if live.session.phase is QuizPhase.ACTIVE and live.ticker is None:
                self._start_ticker(session_id, live)
            return session_snapshot(live.session, live.chapter_id)

    def tick(self, session_id: str, seconds: float) -> bool:
        """Advance a session's clock; returns False once it no longer needs ticks."""
        with self._lock:
            live = self._live.get(session_id)
            if live is None:
                return False
            if self._is_idle(live):
                self._evict(session_id, live)
                return False
            live.session.tick(seconds)
            return live.session.phase is QuizPhase.ACTIVE

    def get_snapshot(self, session_id: str) -> dict[str, Any]:
        with self._lock:
            live = self._get(session_id)
            return session_snapshot(live.session, live.chapter_id)

    # --- Internals ---------------------------------------------------------

    def _get(self, session_id: str) -> _LiveQuiz:
        live = self._live.get(session_id)
        if live is None:
            raise KeyError(session_id)
        live.last_access = self._clock()
        return live

    def _apply(self, session_id: str, action: Callable[[QuizSession], None]) -> dict[str, Any]:
        with self._lock:
            live = self._get(session_id)
            action(live.session)
            return session_snapshot(live.session, live.chapter_id)

    def _start_ticker(self, session_id: str, live: _LiveQuiz) -> None:
        ticker = self._ticker_factory(lambda seconds: self.tick(session_id, seconds), self._tick_interval)
        live.ticker = ticker
        ticker.start()

    def _is_idle(self, live: _LiveQuiz) -> bool:
        return self._clock() - live.last_access > self._idle_timeout

    def _evict(self, session_id: str, live: _LiveQuiz) -> None:
        self._live.pop(session_id, None)
        self._stop_ticker(live)
        logger.info("Evicted idle quiz session %s (%s).", session_id, live.session.phase.value)

    def _evict_idle(self) -> None:
        stale = [(sid, live) for sid, live in self._live.items() if self._is_idle(live)]
        for session_id, live in stale:
            self._evict(session_id, live)

    @staticmethod
    def _stop_ticker(live: _LiveQuiz) -> None:
        if live.ticker is not None:
            live.ticker.cancel()
            live.ticker = None


def session_snapshot(session: QuizSession, chapter_id: str | None = None) -> dict[str, Any]:
    """Plain-data view of a session for the rendering layer.

    The correct option and explanation are only revealed in the solution
    phase.
    """
    phase = session.phase
    snapshot: dict[str, Any] = {
        "chapter_id": chapter_id,
        "phase": phase.value,
        "paused": session.is_paused,
        "question_count": session.question_count,
        "current_index": session.current_index,
        "elapsed_seconds": session.elapsed_seconds,
        "per_question_seconds": {str(k): v for k, v in sorted(session.per_question_seconds.items())},
        "answers": {str(k): v for k, v in sorted(session.answers.items())},
        "marked_for_review": sorted(session.marked_for_review),
        "visited": sorted(session.visited),
        "statuses": [
            {"status": status.value, "color": status_color(status)}
            for status in session.statuses()
        ],
        "message": NO_QUIZ_AVAILABLE_MESSAGE if phase is QuizPhase.UNAVAILABLE else None,
        "question": None,
        "result": None,
    }

    question = session.current_question
    if question is not None and phase in (QuizPhase.ACTIVE, QuizPhase.SOLUTION):
        current = {
            "text": question.text,
            "options": list(question.options),
            "selected_index": session.answers.get(session.current_index),
        }
        if phase is QuizPhase.SOLUTION:
            current["correct_index"] = question.correct_index
            current["explanation"] = question.explanation
        snapshot["question"] = current

    report = session.report
    if report is not None and phase in (QuizPhase.RESULT, QuizPhase.SOLUTION):
        feedback = feedback_for(report)
        snapshot["result"] = {
            "correct_count": report.correct_count,
            "wrong_count": report.wrong_count,
            "skipped_count": report.skipped_count,
            "raw_score": report.raw_score,
            "percentage": report.percentage,
            "total_questions": report.total_questions,
            "elapsed_seconds": report.elapsed_seconds,
            "feedback_title": feedback.title,
            "feedback_subtitle": feedback.subtitle,
            "celebrate": feedback.celebrate,
        }
    return snapshot
