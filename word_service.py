from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import requests

if TYPE_CHECKING:
    from scoring import SessionSummary


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api/"
WORDS_ENDPOINT = "words"
LEADERBOARD_ENDPOINT = "leaderboard"
SHUTDOWN_ENDPOINT = "shutdown"
REQUEST_TIMEOUT_S = 5.0

# Served when the word service is unreachable. Same content as the mock service's list.
FALLBACK_WORDS: tuple[str, ...] = (
    "myrmecology", "beater", "unclouded", "delusional", "overbid",
    "nomadic", "nones", "carrousel", "outlets", "templates",
    "ember", "novelisations", "glossiness", "controversial", "monocyte",
    "impugner", "embroiled", "initialism", "tabbies", "gelato",
    "physiologist", "delayed", "scriptures", "dribbled", "provisional",
    "germ", "hairstylists", "spottily", "elated", "mapping",
    "tiebreakers", "easters", "coffees", "conformable", "central",
    "capitalism", "germinal", "kilosiemens", "ultra", "humanistic",
    "formatters", "fortune", "conversions", "angularities", "aneurysm",
    "quantize", "contribute", "cephalics", "teeing", "denudes",
)


class Transport(Protocol):
    def get(self, url: str, **kwargs: Any) -> requests.Response: ...

    def post(self, url: str, **kwargs: Any) -> requests.Response: ...


def _parse_words(data: Any) -> tuple[str, ...] | None:
    if not isinstance(data, dict):
        return None
    raw = data.get("words")
    if not isinstance(raw, list) or not all(isinstance(w, str) for w in raw):
        return None
    words = tuple(w.strip().lower() for w in raw if w.strip())
    return words or None


class WordServiceClient:
    """Talks to the word/leaderboard service.

    Every call is attempted once and never raises: transport and payload
    errors are logged and answered with the fallback list or ``False``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        transport: Transport | None = None,
        timeout_s: float = REQUEST_TIMEOUT_S,
        fallback_words: tuple[str, ...] = FALLBACK_WORDS,
    ) -> None:
        if not fallback_words:
            raise ValueError("fallback_words must not be empty")
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout_s = timeout_s
        self.fallback_words = tuple(fallback_words)
        self._transport = transport if transport is not None else requests.Session()

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def fetch_words(self) -> tuple[str, ...]:
        """Return the remote word list, or the fallback list on any failure."""
        url = self._url(WORDS_ENDPOINT)
        logger.info("Sending GET request to %s", url)
        try:
            response = self._transport.get(
                url,
                timeout=self.timeout_s,
                headers={"Accept": "application/json"},
            )
        except Exception as exc:
            logger.warning("GET %s failed: %s; using fallback words", url, exc)
            return self.fallback_words

        if response.status_code != 200:
            logger.warning(
                "GET %s returned HTTP %s; using fallback words", url, response.status_code
            )
            return self.fallback_words

        try:
            data = response.json()
        except Exception as exc:
            logger.warning("GET %s returned invalid JSON: %s; using fallback words", url, exc)
            return self.fallback_words

        words = _parse_words(data)
        if words is None:
            logger.warning("GET %s returned a malformed word list; using fallback words", url)
            return self.fallback_words

        logger.info("Word list initialised: %d words", len(words))
        return words

    def post_result(self, summary: SessionSummary) -> bool:
        url = self._url(LEADERBOARD_ENDPOINT)
        logger.info("Sending POST request to %s", url)
        try:
            self._transport.post(
                url,
                data=summary.report().encode("utf-8"),
                timeout=self.timeout_s,
                headers={"Content-Type": "text/plain; charset=utf-8"},
            )
        except Exception as exc:
            logger.warning("Error posting to leaderboard at %s: %s", url, exc)
            return False
        logger.info("Result successfully posted to leaderboard")
        return True

    def request_shutdown(self) -> bool:
        url = self._url(SHUTDOWN_ENDPOINT)
        logger.info("Sending GET request to %s", url)
        try:
            self._transport.get(url, timeout=self.timeout_s)
        except Exception as exc:
            logger.warning("Error shutting down word service at %s: %s", url, exc)
            return False
        logger.info("Word service shutdown requested")
        return True
