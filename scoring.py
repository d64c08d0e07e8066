from __future__ import annotations

from dataclasses import dataclass

SESSION_DURATION_S = 30


def words_per_minute(correct: int, incorrect: int, duration_s: float) -> float:
    # Every attempted word counts toward throughput, not only correct ones.
    return (correct + incorrect) * (60 / duration_s)


def accuracy(correct: int, incorrect: int) -> float:
    total = correct + incorrect
    return (correct / total) * 100 if total > 0 else 0.0


def format_number(value: float) -> str:
    """Whole numbers without a trailing ``.0``, anything else to 2 decimals."""
    if float(value).is_integer():
        return str(int(value))
    return str(round(value, 2))


@dataclass(frozen=True)
class SessionSummary:
    correct: int
    incorrect: int
    wpm: float
    accuracy: float

    @property
    def accuracy_display(self) -> float:
        return round(self.accuracy, 2)

    def report(self) -> str:
        """Plain-text report posted to the leaderboard."""
        return (
            f"Correct words: {self.correct}\n"
            f"Incorrect words: {self.incorrect}\n"
            f"WPM: {format_number(self.wpm)}\n"
            f"Accuracy: {format_number(self.accuracy_display)}"
        )

    def score_line(self) -> str:
        return f"Score: {format_number(self.wpm)} wpm @ {format_number(self.accuracy_display)}% accuracy"


def summarize(correct: int, incorrect: int, duration_s: float = SESSION_DURATION_S) -> SessionSummary:
    return SessionSummary(
        correct=correct,
        incorrect=incorrect,
        wpm=words_per_minute(correct, incorrect, duration_s),
        accuracy=accuracy(correct, incorrect),
    )
