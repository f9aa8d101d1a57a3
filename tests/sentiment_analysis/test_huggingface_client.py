"""
Hugging Face Inference Client Tests.

============================================================
PURPOSE
============================================================
TEST CATEGORIES:
- Credential precondition
- Request payload and headers
- 404 failover to the fallback model
- HTTP status to typed error mapping
- Response decoding and transport failures

============================================================
"""

import asyncio

import aiohttp
import pytest

from sentiment_analysis.config import AnalyzerConfig, validate_api_key
from sentiment_analysis.exceptions import (
    AuthError,
    ConfigurationError,
    ModelLoadingError,
    ModelUnavailableError,
    NetworkError,
    RateLimitError,
    RequestError,
    ResponseFormatError,
)
from sentiment_analysis.models import LabelScore, Sentiment


PRIMARY_URL = "https://inference.test/models/primary"
FALLBACK_URL = "https://inference.test/models/fallback"

CARDIFF_PAIRS = [("positive", 0.9), ("neutral", 0.07), ("negative", 0.03)]


# ============================================================
# CREDENTIALS
# ============================================================

class TestCredentials:
    """Tests for the API key precondition."""

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_network(self, make_client):
        client, session = make_client([], api_key=None)

        with pytest.raises(ConfigurationError, match="not set"):
            await client.classify("hello")

        assert session.calls == []

    @pytest.mark.asyncio
    async def test_wrong_prefix_fails_before_network(self, make_client):
        client, session = make_client([], api_key="sk_1234567890abcdef")

        with pytest.raises(ConfigurationError, match="hf_"):
            await client.classify("hello")

        assert session.calls == []

    @pytest.mark.asyncio
    async def test_set_api_key_enables_requests(self, make_client, ok_response):
        client, session = make_client([ok_response(CARDIFF_PAIRS)], api_key=None)

        client.set_api_key("  hf_abcdefghijkl  ")
        await client.classify("hello")

        assert session.calls[0]["headers"]["Authorization"] == "Bearer hf_abcdefghijkl"

    @pytest.mark.parametrize("key,valid", [
        ("hf_abcdefghij", True),
        ("  hf_abcdefghij  ", True),
        ("hf_short", False),
        ("xx_abcdefghijkl", False),
        ("", False),
        (None, False),
    ])
    def test_validate_api_key(self, key, valid):
        assert validate_api_key(key) is valid

    def test_config_demo_mode_without_key(self):
        assert AnalyzerConfig().has_live_credentials is False
        assert AnalyzerConfig(api_key="hf_abcdefghij").has_live_credentials is True

    def test_config_validate_reports_bad_values(self):
        config = AnalyzerConfig(
            api_key="bad",
            rate_limit_delay_seconds=-1,
            demo_min_delay_seconds=2.0,
            demo_max_delay_seconds=1.0,
        )

        errors = config.validate()

        assert len(errors) == 3

    def test_config_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HUGGINGFACE_API_KEY", "hf_fromenvironment")
        monkeypatch.setenv("SENTIMENT_RATE_LIMIT_DELAY", "0.5")
        monkeypatch.setenv("SENTIMENT_STORAGE_DIR", str(tmp_path))

        config = AnalyzerConfig.from_env()

        assert config.api_key == "hf_fromenvironment"
        assert config.rate_limit_delay_seconds == 0.5
        assert config.storage_dir == tmp_path
        assert config.validate() == []


# ============================================================
# REQUESTS
# ============================================================

class TestRequest:
    """Tests for the outgoing request."""

    @pytest.mark.asyncio
    async def test_payload_and_headers(self, make_client, ok_response):
        client, session = make_client([ok_response(CARDIFF_PAIRS)])

        await client.classify("x" * 800)

        call = session.calls[0]
        assert call["url"] == PRIMARY_URL
        assert call["json"]["inputs"] == "x" * 500
        assert call["json"]["options"] == {"wait_for_model": True, "use_cache": False}
        assert call["headers"]["Authorization"].startswith("Bearer hf_")
        assert call["headers"]["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_nested_response(self, make_client, ok_response):
        client, _ = make_client([ok_response(CARDIFF_PAIRS, nested=True)])

        pairs = await client.classify("hello")

        assert pairs[0] == LabelScore("positive", 0.9)
        assert len(pairs) == 3

    @pytest.mark.asyncio
    async def test_flat_response(self, make_client, ok_response):
        client, _ = make_client([ok_response(CARDIFF_PAIRS, nested=False)])

        pairs = await client.classify("hello")

        assert [p.label for p in pairs] == ["positive", "neutral", "negative"]

    @pytest.mark.asyncio
    async def test_analyze_builds_full_analysis(self, make_client, ok_response):
        client, _ = make_client([ok_response(CARDIFF_PAIRS)])

        analysis = await client.analyze("This is an amazing product")

        assert analysis.sentiment == Sentiment.POSITIVE
        assert analysis.confidence == pytest.approx(0.9)
        assert [k.word for k in analysis.keywords] == ["amazing"]
        assert analysis.explanation.startswith("This text shows positive sentiment")

    @pytest.mark.asyncio
    async def test_test_connection(self, make_client, ok_response):
        client, session = make_client([ok_response(CARDIFF_PAIRS)])

        assert await client.test_connection() is True
        assert session.calls[0]["json"]["inputs"] == "This is a test message."

    @pytest.mark.asyncio
    async def test_close_leaves_injected_session_open(self, make_client):
        client, session = make_client([])

        await client.close()

        assert session.closed is False


# ============================================================
# FAILOVER
# ============================================================

class TestFailover:
    """Tests for the 404 failover to the fallback model."""

    @pytest.mark.asyncio
    async def test_primary_404_uses_fallback(self, make_client, http_response, ok_response):
        client, session = make_client([
            http_response(404, {"error": "Model not found"}),
            ok_response([("5 stars", 0.6), ("4 stars", 0.2), ("1 star", 0.2)]),
        ])

        analysis = await client.analyze("great")

        assert [c["url"] for c in session.calls] == [PRIMARY_URL, FALLBACK_URL]
        assert analysis.sentiment == Sentiment.POSITIVE
        assert analysis.confidence == pytest.approx(0.8)
        assert client.get_stats()["failovers"] == 1

    @pytest.mark.asyncio
    async def test_both_404_is_model_unavailable(self, make_client, http_response):
        client, session = make_client([
            http_response(404, "Not Found"),
            http_response(404, "Not Found"),
        ])

        with pytest.raises(ModelUnavailableError):
            await client.classify("hello")

        assert len(session.calls) == 2

    @pytest.mark.asyncio
    async def test_fallback_failure_surfaces_specific_error(self, make_client, http_response):
        client, _ = make_client([
            http_response(404, "Not Found"),
            http_response(429, {"error": "Too many requests"}),
        ])

        with pytest.raises(RateLimitError):
            await client.classify("hello")

    @pytest.mark.asyncio
    async def test_non_404_primary_failure_does_not_fail_over(self, make_client, http_response):
        client, session = make_client([http_response(500, "boom")])

        with pytest.raises(RequestError):
            await client.classify("hello")

        assert len(session.calls) == 1


# ============================================================
# ERROR MAPPING
# ============================================================

class TestErrorMapping:
    """Tests for HTTP status to typed error mapping."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_errors(self, make_client, http_response, status):
        client, _ = make_client([http_response(status, {"error": "Unauthorized"})])

        with pytest.raises(AuthError) as exc_info:
            await client.classify("hello")

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_rate_limit_with_retry_after(self, make_client, http_response):
        client, _ = make_client([
            http_response(429, {"error": "Rate limit"}, headers={"Retry-After": "7"}),
        ])

        with pytest.raises(RateLimitError) as exc_info:
            await client.classify("hello")

        assert exc_info.value.retry_after_seconds == 7.0

    @pytest.mark.asyncio
    async def test_model_loading_carries_estimated_time(self, make_client, http_response):
        client, _ = make_client([
            http_response(503, {"error": "Model is currently loading", "estimated_time": 20.5}),
        ])

        with pytest.raises(ModelLoadingError) as exc_info:
            await client.classify("hello")

        assert exc_info.value.retry_after_seconds == 20.5
        assert "20.5s" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_model_loading_without_estimate(self, make_client, http_response):
        client, _ = make_client([http_response(503, "Service Unavailable")])

        with pytest.raises(ModelLoadingError) as exc_info:
            await client.classify("hello")

        assert exc_info.value.retry_after_seconds is None

    @pytest.mark.asyncio
    async def test_other_status_is_request_error(self, make_client, http_response):
        client, _ = make_client([http_response(500, {"error": "Internal failure"})])

        with pytest.raises(RequestError) as exc_info:
            await client.classify("hello")

        assert exc_info.value.status_code == 500
        assert "Internal failure" in exc_info.value.body
        assert str(exc_info.value) == "Internal failure"

    @pytest.mark.asyncio
    async def test_unparseable_body(self, make_client, http_response):
        client, _ = make_client([http_response(200, "<html>not json</html>")])

        with pytest.raises(ResponseFormatError):
            await client.classify("hello")

    @pytest.mark.asyncio
    async def test_unexpected_json_shape(self, make_client, http_response):
        client, _ = make_client([http_response(200, {"label": "positive", "score": 0.9})])

        with pytest.raises(ResponseFormatError):
            await client.classify("hello")

    @pytest.mark.asyncio
    async def test_connection_error_is_network_error(self, make_client):
        client, _ = make_client([aiohttp.ClientConnectionError("unreachable")])

        with pytest.raises(NetworkError):
            await client.classify("hello")

    @pytest.mark.asyncio
    async def test_timeout_is_network_error(self, make_client):
        client, _ = make_client([asyncio.TimeoutError()])

        with pytest.raises(NetworkError, match="timed out"):
            await client.classify("hello")

    @pytest.mark.asyncio
    async def test_errors_are_counted(self, make_client, http_response):
        client, _ = make_client([http_response(500, "boom")])

        with pytest.raises(RequestError):
            await client.classify("hello")

        assert client.get_stats()["errors"] == 1
