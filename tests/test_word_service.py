"""Tests for word_service – the resilient word/leaderboard client."""

from __future__ import annotations

import logging

import pytest
import requests

from scoring import summarize
from word_service import DEFAULT_BASE_URL, FALLBACK_WORDS, REQUEST_TIMEOUT_S, WordServiceClient


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, bad_json: bool = False) -> None:
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeTransport:
    """Records requests and replays a canned response or error."""

    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response or FakeResponse()
        self.error = error
        self.calls: list[tuple[str, str, dict]] = []

    def _handle(self, method: str, url: str, kwargs: dict) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self._handle("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._handle("POST", url, kwargs)


def make_client(**kwargs) -> tuple[WordServiceClient, FakeTransport]:
    transport = FakeTransport(**kwargs)
    return WordServiceClient(transport=transport), transport


# ---------------------------------------------------------------------------
# Fallback word list
# ---------------------------------------------------------------------------

class TestFallbackWords:
    def test_non_empty_and_lowercase(self):
        assert len(FALLBACK_WORDS) == 50
        assert all(w and w == w.lower() for w in FALLBACK_WORDS)

    def test_is_immutable(self):
        assert isinstance(FALLBACK_WORDS, tuple)

    def test_empty_fallback_rejected(self):
        with pytest.raises(ValueError):
            WordServiceClient(transport=FakeTransport(), fallback_words=())


# ---------------------------------------------------------------------------
# fetch_words
# ---------------------------------------------------------------------------

class TestFetchWords:
    def test_returns_remote_words(self):
        client, transport = make_client(response=FakeResponse(payload={"words": ["cat", "dog"]}))
        assert client.fetch_words() == ("cat", "dog")
        method, url, kwargs = transport.calls[0]
        assert method == "GET"
        assert url == DEFAULT_BASE_URL + "words"
        assert kwargs["timeout"] == REQUEST_TIMEOUT_S

    def test_lowercases_and_drops_blank_entries(self):
        client, _ = make_client(response=FakeResponse(payload={"words": ["Cat", " ", "DOG "]}))
        assert client.fetch_words() == ("cat", "dog")

    @pytest.mark.parametrize("error", [
        requests.ConnectionError("connection refused"),
        requests.Timeout("read timed out"),
    ])
    def test_transport_failure_uses_fallback(self, error, caplog):
        client, _ = make_client(error=error)
        with caplog.at_level(logging.WARNING):
            words = client.fetch_words()
        assert words == FALLBACK_WORDS
        assert "using fallback words" in caplog.text
        assert DEFAULT_BASE_URL + "words" in caplog.text

    def test_non_200_uses_fallback(self):
        client, _ = make_client(response=FakeResponse(status_code=503, payload={"words": ["cat"]}))
        assert client.fetch_words() == FALLBACK_WORDS

    def test_bad_json_uses_fallback(self):
        client, _ = make_client(response=FakeResponse(bad_json=True))
        assert client.fetch_words() == FALLBACK_WORDS

    @pytest.mark.parametrize("payload", [
        None,
        [],
        {},
        {"words": "cat"},
        {"words": []},
        {"words": ["cat", 3]},
        {"words": ["", "  "]},
    ])
    def test_malformed_payload_uses_fallback(self, payload):
        client, _ = make_client(response=FakeResponse(payload=payload))
        assert client.fetch_words() == FALLBACK_WORDS

    def test_custom_fallback_is_injected(self):
        client = WordServiceClient(
            transport=FakeTransport(error=requests.ConnectionError()),
            fallback_words=("ember",),
        )
        assert client.fetch_words() == ("ember",)

    def test_base_url_gets_trailing_slash(self):
        transport = FakeTransport(response=FakeResponse(payload={"words": ["cat"]}))
        client = WordServiceClient("http://example.test/api", transport=transport)
        client.fetch_words()
        assert transport.calls[0][1] == "http://example.test/api/words"


# ---------------------------------------------------------------------------
# post_result / request_shutdown
# ---------------------------------------------------------------------------

class TestPostResult:
    def test_posts_plain_text_report(self):
        client, transport = make_client()
        assert client.post_result(summarize(1, 1)) is True
        method, url, kwargs = transport.calls[0]
        assert method == "POST"
        assert url == DEFAULT_BASE_URL + "leaderboard"
        assert kwargs["data"].decode("utf-8") == (
            "Correct words: 1\nIncorrect words: 1\nWPM: 4\nAccuracy: 50"
        )
        assert kwargs["headers"]["Content-Type"].startswith("text/plain")

    def test_any_response_is_success(self):
        client, _ = make_client(response=FakeResponse(status_code=500))
        assert client.post_result(summarize(0, 0)) is True

    def test_transport_failure_returns_false(self, caplog):
        client, _ = make_client(error=requests.ConnectionError("connection refused"))
        with caplog.at_level(logging.WARNING):
            assert client.post_result(summarize(0, 0)) is False
        assert "Error posting to leaderboard" in caplog.text


class TestRequestShutdown:
    def test_success(self):
        client, transport = make_client()
        assert client.request_shutdown() is True
        assert transport.calls[0][:2] == ("GET", DEFAULT_BASE_URL + "shutdown")

    def test_failure_returns_false(self):
        client, _ = make_client(error=requests.Timeout())
        assert client.request_shutdown() is False


# ---------------------------------------------------------------------------
# Non-requests errors
# ---------------------------------------------------------------------------

LONG_LABEL_URL = "http://" + "a" * 70 + ".com/api"


class TestUnexpectedErrors:
    def test_fetch_with_os_error_uses_fallback(self, caplog):
        client, _ = make_client(error=OSError("boom"))
        with caplog.at_level(logging.WARNING):
            assert client.fetch_words() == FALLBACK_WORDS
        assert "boom" in caplog.text

    def test_post_with_os_error_returns_false(self):
        client, _ = make_client(error=OSError("boom"))
        assert client.post_result(summarize(1, 0)) is False

    def test_shutdown_with_os_error_returns_false(self):
        client, _ = make_client(error=OSError("boom"))
        assert client.request_shutdown() is False

    def test_json_decoder_raising_type_error_uses_fallback(self):
        class BrokenJson(FakeResponse):
            def json(self):
                raise TypeError("not json")

        client, _ = make_client(response=BrokenJson())
        assert client.fetch_words() == FALLBACK_WORDS

    def test_unparseable_host_with_real_session(self, caplog):
        client = WordServiceClient(LONG_LABEL_URL, timeout_s=0.5)
        with caplog.at_level(logging.WARNING):
            assert client.fetch_words() == FALLBACK_WORDS
            assert client.post_result(summarize(1, 1)) is False
            assert client.request_shutdown() is False
        assert LONG_LABEL_URL + "/words" in caplog.text
