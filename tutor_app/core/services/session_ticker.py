"""Background one-second clock for live quiz sessions."""

from __future__ import annotations

from collections.abc import Callable
import logging
from threading import Event, Thread

from tutor_app.constants.quiz_constants import TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class SessionTicker:
    """Calls ``on_tick(interval)`` every ``interval`` seconds until cancelled.

    ``on_tick`` returns False to stop the ticker from inside the callback,
    e.g. once the session it drives has been submitted.
    """

    def __init__(
        self,
        on_tick: Callable[[float], bool],
        interval: float = TICK_INTERVAL_SECONDS,
        name: str = "QuizSessionTicker",
    ) -> None:
        self._on_tick = on_tick
        self._interval = interval
        self._stopped = Event()
        self._thread = Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._stopped.set()

    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._stopped.is_set()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            try:
                keep_going = self._on_tick(self._interval)
            except Exception:
                logger.exception("Quiz ticker callback failed; stopping ticker.")
                break
            if not keep_going:
                break
        self._stopped.set()
