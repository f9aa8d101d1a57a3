"""
Hugging Face Inference Client - One classification call per request.

Responsibilities:
- Credential precondition (``hf_`` prefixed key)
- Primary endpoint with a single failover to the fallback model on 404
- HTTP status to typed error mapping
- Flat / nested response decoding

No retries beyond the 404 failover; retry policy belongs to the caller.
Calls are serialized and spaced by the RequestScheduler, not here.
"""

import asyncio
import json
import logging
from typing import Any, Mapping, Optional

import aiohttp

from ..config import API_KEY_PREFIX, DEFAULT_FALLBACK_MODEL_URL, DEFAULT_PRIMARY_MODEL_URL
from ..exceptions import (
    AuthError,
    ConfigurationError,
    ModelLoadingError,
    ModelUnavailableError,
    NetworkError,
    RateLimitError,
    RequestError,
    ResponseFormatError,
)
from ..labels import decode_response
from ..models import LabelScore, SentimentAnalysis
from ..pipeline import SentimentPipeline
from .base import BaseSentimentProvider, ProviderMetadata


logger = logging.getLogger(__name__)


NOT_FOUND = 404
CONNECTION_PROBE_TEXT = "This is a test message."


def _error_from_body(body: str) -> tuple[Optional[str], Optional[float]]:
    """Pull ``error`` and ``estimated_time`` out of an error body, if it is JSON."""
    try:
        data = json.loads(body)
    except ValueError:
        return None, None
    if not isinstance(data, dict):
        return None, None

    message = data.get("error")
    estimated = data.get("estimated_time")
    if not isinstance(message, str):
        message = None
    if not isinstance(estimated, (int, float)) or isinstance(estimated, bool):
        estimated = None
    return message, estimated


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class HuggingFaceClient(BaseSentimentProvider):
    """
    Hugging Face Inference API sentiment client.

    Request body:
        {"inputs": <text[:500]>, "options": {"wait_for_model": true, "use_cache": false}}

    Success body: a list of {label, score}, flat or nested one level.
    """

    DEFAULT_TIMEOUT = 30  # seconds
    MAX_INPUT_CHARS = 500
    USER_AGENT = "SentimentAnalysisDashboard/1.0"

    def __init__(
        self,
        api_key: Optional[str] = None,
        primary_url: str = DEFAULT_PRIMARY_MODEL_URL,
        fallback_url: str = DEFAULT_FALLBACK_MODEL_URL,
        timeout: Optional[float] = None,
        max_input_chars: Optional[int] = None,
        session: Optional[aiohttp.ClientSession] = None,
        pipeline: Optional[SentimentPipeline] = None,
    ) -> None:
        self.api_key = api_key.strip() if api_key else None
        self.primary_url = primary_url
        self.fallback_url = fallback_url
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.max_input_chars = max_input_chars or self.MAX_INPUT_CHARS
        self._pipeline = pipeline or SentimentPipeline()

        # Sessions passed in belong to the caller and are not closed here
        self._session = session
        self._owns_session = session is None

        self._stats = {
            "total_requests": 0,
            "failovers": 0,
            "errors": 0,
        }

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="huggingface",
            display_name="Hugging Face Inference API",
            version="1.0.0",
            requires_api_key=True,
            is_simulated=False,
            base_url=self.primary_url,
            documentation_url="https://huggingface.co/docs/api-inference",
            tags=["sentiment", "transformers", "remote"],
        )

    def set_api_key(self, api_key: Optional[str]) -> None:
        self.api_key = api_key.strip() if api_key else None

    def get_stats(self) -> dict[str, Any]:
        return {**self._stats, "provider": self.metadata.name}

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────

    async def classify(self, text: str) -> list[LabelScore]:
        """
        Classify one text and return the raw label/score pairs.

        Raises:
            ConfigurationError: API key missing or malformed (no request sent)
            ModelUnavailableError: primary and fallback both returned 404
            AuthError, RateLimitError, ModelLoadingError, RequestError,
            ResponseFormatError, NetworkError: see module docstring
        """
        self._check_credentials()

        payload = {
            "inputs": text[:self.max_input_chars],
            "options": {
                "wait_for_model": True,
                "use_cache": False,
            },
        }

        self._stats["total_requests"] += 1
        try:
            status, body, headers = await self._post(self.primary_url, payload)
            if status == NOT_FOUND:
                logger.info("Primary model not found, trying fallback model")
                self._stats["failovers"] += 1
                status, body, headers = await self._post(self.fallback_url, payload)
                if status == NOT_FOUND:
                    raise ModelUnavailableError(
                        "Model not found. The sentiment analysis model may be "
                        "temporarily unavailable. Please try again later.",
                        details={"urls": [self.primary_url, self.fallback_url]},
                    )

            if not 200 <= status < 300:
                raise self._error_for_status(status, body, headers)

            return self._decode(body)
        except Exception:
            self._stats["errors"] += 1
            raise

    async def analyze(self, text: str) -> SentimentAnalysis:
        pairs = await self.classify(text)
        return self._pipeline.build(text, pairs)

    async def test_connection(self) -> bool:
        """Analyze a probe sentence. Returns True or raises the typed error."""
        await self.analyze(CONNECTION_PROBE_TEXT)
        return True

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    # ─────────────────────────────────────────────────────────────
    # Internal methods
    # ─────────────────────────────────────────────────────────────

    def _check_credentials(self) -> None:
        if not self.api_key:
            raise ConfigurationError(
                "Hugging Face API key not set. Please add your API key in the settings."
            )
        if not self.api_key.startswith(API_KEY_PREFIX):
            raise ConfigurationError(
                f'Invalid API key format. Hugging Face API keys should start with "{API_KEY_PREFIX}".'
            )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or (self._owns_session and self._session.closed):
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def _post(
        self,
        url: str,
        payload: dict[str, Any],
    ) -> tuple[int, str, Mapping[str, str]]:
        """POST the payload, returning (status, body text, headers)."""
        session = await self._get_session()
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "User-Agent": self.USER_AGENT,
        }

        try:
            async with session.post(url, json=payload, headers=headers) as response:
                body = await response.text()
                return response.status, body, response.headers
        except aiohttp.ClientError as e:
            raise NetworkError(
                "Network error. Please check your internet connection and try again.",
                details={"url": url, "reason": str(e)},
            ) from e
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"Request timed out after {self.timeout}s.",
                details={"url": url},
            ) from e

    def _error_for_status(
        self,
        status: int,
        body: str,
        headers: Mapping[str, str],
    ) -> Exception:
        remote_message, estimated_time = _error_from_body(body)
        logger.warning(f"Inference request failed with status {status}")

        if status == 401:
            return AuthError(
                "Invalid API key. Please check your Hugging Face API key in Settings.",
                status_code=status,
            )
        if status == 403:
            return AuthError(
                "Access forbidden. Please check your API key permissions or try a different model.",
                status_code=status,
            )
        if status == 429:
            return RateLimitError(
                "Rate limit exceeded. Please wait a moment before making more requests.",
                retry_after_seconds=_parse_retry_after(headers.get("Retry-After")),
            )
        if status == 503:
            message = "Model is currently loading. Please try again in a few moments."
            if estimated_time is not None:
                message = (
                    f"Model is loading, estimated time: {estimated_time}s. "
                    "Please try again in a moment."
                )
            return ModelLoadingError(message, retry_after_seconds=estimated_time)

        return RequestError(
            remote_message or f"API request failed ({status})",
            status_code=status,
            body=body,
        )

    def _decode(self, body: str) -> list[LabelScore]:
        try:
            data = json.loads(body)
        except ValueError as e:
            raise ResponseFormatError(
                "Invalid response format from API. Please try again.",
                raw_data=body,
            ) from e

        decoded = decode_response(data)
        logger.debug(f"Decoded {len(decoded.items)} label scores ({decoded.shape.value})")
        return decoded.items
