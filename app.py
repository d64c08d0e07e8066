from __future__ import annotations

import logging
import os
from functools import partial
from typing import Any, Callable

from textual import events, work
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.logging import TextualHandler
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Static
from rich.markup import escape
from rich.table import Table

from input_events import normalize_key
from scoring import SESSION_DURATION_S, SessionSummary, format_number
from session import TrialSession
from word_service import DEFAULT_BASE_URL, WordServiceClient


POLL_INTERVAL_S = 0.1
API_URL_ENV = "TYPING_TRIAL_API_URL"


def configure_logging() -> None:
    """Route log records to the Textual devtools console."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[TextualHandler()],
    )


class HomeScreen(Screen):
    BINDINGS = [("enter", "start", "Start"), ("q", "quit", "Quit")]

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="home"):
            yield Static("Typing Speed Trainer", id="title")
            yield Static("Press Enter to Start!", id="subtitle")
            yield Static("", id="last-score")
            with Horizontal(id="home-buttons"):
                yield Button("Start Trial", id="start", variant="success")
                yield Button("Quit", id="quit", variant="error")
        yield Footer()

    def on_screen_resume(self) -> None:
        summary = self.app.last_summary
        if summary is not None:
            self.query_one("#last-score", Static).update(summary.score_line())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "start":
            self.action_start()
        elif event.button.id == "quit":
            self.app.exit()

    def action_start(self) -> None:
        self.app.push_screen(TrialScreen(self.app.client, self.app.duration_s))


class TrialScreen(Screen):
    BINDINGS = [("escape", "back", "Back")]

    def __init__(self, client: WordServiceClient, duration_s: float = SESSION_DURATION_S) -> None:
        super().__init__()
        self.client = client
        self.duration_s = duration_s
        self.session: TrialSession | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="trial"):
            with Horizontal(id="counters"):
                yield Static("Time: 0s", id="time")
                yield Static("Correct Words: 0", id="correct")
                yield Static("Incorrect Words: 0", id="incorrect")
            yield Static("Type the Word:", id="prompt-label")
            yield Static("Loading words...", id="prompt")
            yield Static("", id="typed")
        yield Footer()

    def on_mount(self) -> None:
        self._load_session()

    @work(thread=True, exclusive=True)
    def _load_session(self) -> None:
        # fetch_words blocks for up to the client timeout; keep it off the event loop.
        session = TrialSession(self.client, duration_s=self.duration_s, dispatch=self._post_in_worker)
        self.app.call_from_thread(self._begin, session)

    def _begin(self, session: TrialSession) -> None:
        if not self.is_attached:
            return
        self.session = session
        self.session.start()
        self._refresh_view()
        self.set_interval(POLL_INTERVAL_S, self._poll)

    def _post_in_worker(self, fn: Callable[..., Any], *args: Any) -> None:
        self.app.run_worker(partial(fn, *args), thread=True, exit_on_error=False)

    def on_key(self, event: events.Key) -> None:
        if self.session is None:
            return
        input_event = normalize_key(event.key, event.character)
        if input_event is None:
            return
        event.stop()
        self.session.apply_input_event(input_event)
        self._refresh_view()

    def _poll(self) -> None:
        if self.session is None:
            return
        summary = self.session.tick()
        self._refresh_view()
        if summary is not None:
            self.app.last_summary = summary
            self.app.switch_screen(SummaryScreen(summary))

    def _refresh_view(self) -> None:
        state = self.session.display_state()
        self.query_one("#time", Static).update(f"Time: {state.elapsed_seconds}s")
        self.query_one("#correct", Static).update(f"Correct Words: {state.correct_count}")
        self.query_one("#incorrect", Static).update(f"Incorrect Words: {state.incorrect_count}")
        self.query_one("#prompt", Static).update(f"[b blue]{escape(state.current_word)}[/]")
        self.query_one("#typed", Static).update(f"[green]{escape(state.typed_buffer)}[/]")

    def action_back(self) -> None:
        self.app.pop_screen()


class SummaryScreen(Screen):
    BINDINGS = [("enter", "home", "Home"), ("escape", "home", "Home")]

    def __init__(self, summary: SessionSummary) -> None:
        super().__init__()
        self.summary = summary

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="summary"):
            yield Static("Game Over!", id="summary-title")
            yield Static("", id="summary-body")
            yield Button("Back to Home", id="home", variant="success")
        yield Footer()

    def on_mount(self) -> None:
        table = Table(show_header=False, box=None, show_edge=False, pad_edge=False)
        table.add_column("Metric", width=18, no_wrap=True)
        table.add_column("Value", justify="right", width=8, no_wrap=True)
        table.add_row("Correct words", str(self.summary.correct))
        table.add_row("Incorrect words", str(self.summary.incorrect))
        table.add_row("WPM", format_number(self.summary.wpm))
        table.add_row("Accuracy", f"{format_number(self.summary.accuracy_display)}%")
        self.query_one("#summary-body", Static).update(table)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "home":
            self.app.pop_screen()

    def action_home(self) -> None:
        self.app.pop_screen()


class TypingTrialApp(App):
    CSS = """
    #home, #trial, #summary {
        padding: 1 2;
    }

    #title {
        content-align: center middle;
        text-style: bold;
    }

    #subtitle, #last-score {
        content-align: center middle;
        color: $text-muted;
        margin-bottom: 1;
    }

    #home-buttons {
        height: auto;
        margin-top: 1;
    }

    #counters {
        height: auto;
        margin-bottom: 2;
    }

    #counters Static {
        width: 1fr;
    }

    #prompt, #typed {
        height: 3;
        border: solid $primary;
        padding: 0 1;
    }

    #summary-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    TITLE = "Typing Speed Trainer"

    def __init__(self, client: WordServiceClient, duration_s: float = SESSION_DURATION_S) -> None:
        super().__init__()
        self.client = client
        self.duration_s = duration_s
        self.last_summary: SessionSummary | None = None

    def on_mount(self) -> None:
        self.push_screen(HomeScreen())


def main() -> None:
    configure_logging()
    client = WordServiceClient(os.environ.get(API_URL_ENV, DEFAULT_BASE_URL))
    TypingTrialApp(client).run()
    client.request_shutdown()


if __name__ == "__main__":
    main()
