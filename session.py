from __future__ import annotations

import enum
import logging
import random
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence

from input_events import AppendChar, Backspace, CommitWord, InputEvent, is_typeable
from scoring import SESSION_DURATION_S, SessionSummary, summarize


logger = logging.getLogger(__name__)


class WordSource(Protocol):
    def fetch_words(self) -> Sequence[str]: ...

    def post_result(self, summary: SessionSummary) -> bool: ...


class Chooser(Protocol):
    def choice(self, seq: Sequence[str]) -> str: ...


Dispatch = Callable[..., Any]


class SessionState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


@dataclass(frozen=True)
class DisplayState:
    elapsed_seconds: int
    correct_count: int
    incorrect_count: int
    current_word: str
    typed_buffer: str


def dispatch_in_background(fn: Callable[..., Any], *args: Any) -> threading.Thread:
    thread = threading.Thread(target=fn, args=args, name="leaderboard-post", daemon=True)
    thread.start()
    return thread


class TrialSession:
    """One timed typing trial: ``IDLE -> RUNNING -> ENDED``.

    The host drives it from a single poll loop: input events first, then
    ``tick``. A session is never restarted; build a new one for the next
    trial, which also fetches a fresh word list.
    """

    def __init__(
        self,
        client: WordSource,
        *,
        duration_s: float = SESSION_DURATION_S,
        rng: Chooser | None = None,
        clock: Callable[[], float] = time.monotonic,
        dispatch: Dispatch | None = None,
    ) -> None:
        words = tuple(client.fetch_words())
        if not words:
            raise ValueError("word list must contain at least one word")
        self._client = client
        self._words = words
        self._duration_s = duration_s
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock
        self._dispatch = dispatch if dispatch is not None else dispatch_in_background

        self._state = SessionState.IDLE
        self._current_word = ""
        self._typed = ""
        self._correct = 0
        self._incorrect = 0
        self._start_time: float | None = None
        self._summary: SessionSummary | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def words(self) -> tuple[str, ...]:
        return self._words

    @property
    def duration_s(self) -> float:
        return self._duration_s

    @property
    def current_word(self) -> str:
        return self._current_word

    @property
    def typed_buffer(self) -> str:
        return self._typed

    @property
    def correct_count(self) -> int:
        return self._correct

    @property
    def incorrect_count(self) -> int:
        return self._incorrect

    @property
    def start_time(self) -> float | None:
        return self._start_time

    @property
    def summary(self) -> SessionSummary | None:
        """Final result, available once the session has ended."""
        return self._summary

    def start(self, now: float | None = None) -> bool:
        """Begin the trial. Returns False (and changes nothing) unless idle."""
        if self._state is not SessionState.IDLE:
            logger.warning("Ignoring start() while session is %s", self._state.value)
            return False
        self._start_time = self._clock() if now is None else now
        self._correct = 0
        self._incorrect = 0
        self._typed = ""
        self._next_word()
        self._state = SessionState.RUNNING
        logger.info("Session started with %d words", len(self._words))
        return True

    def _next_word(self) -> None:
        self._current_word = self._rng.choice(self._words)

    def apply_input_event(self, event: InputEvent) -> None:
        if self._state is not SessionState.RUNNING:
            return
        if isinstance(event, AppendChar):
            if is_typeable(event.char):
                self._typed += event.char.lower()
        elif isinstance(event, Backspace):
            self._typed = self._typed[:-1]
        elif isinstance(event, CommitWord):
            self._commit()

    def _commit(self) -> None:
        if self._typed == self._current_word:
            self._correct += 1
        else:
            self._incorrect += 1
        self._typed = ""
        self._next_word()

    def _elapsed(self, now: float) -> float:
        if self._start_time is None:
            return 0.0
        return now - self._start_time

    def tick(self, now: float | None = None) -> SessionSummary | None:
        """Check the clock; returns the summary on the call that ends the trial."""
        if self._state is not SessionState.RUNNING:
            return None
        now = self._clock() if now is None else now
        if self._elapsed(now) < self._duration_s:
            return None

        self._state = SessionState.ENDED
        self._summary = summarize(self._correct, self._incorrect, self._duration_s)
        logger.info("Game over! %s", self._summary.report().replace("\n", ", "))
        self._dispatch(self._client.post_result, self._summary)
        return self._summary

    def display_state(self, now: float | None = None) -> DisplayState:
        if self._state is SessionState.IDLE:
            elapsed = 0
        elif self._state is SessionState.ENDED:
            elapsed = int(self._duration_s)
        else:
            now = self._clock() if now is None else now
            elapsed = int(min(max(self._elapsed(now), 0.0), self._duration_s))
        return DisplayState(
            elapsed_seconds=elapsed,
            correct_count=self._correct,
            incorrect_count=self._incorrect,
            current_word=self._current_word,
            typed_buffer=self._typed,
        )
