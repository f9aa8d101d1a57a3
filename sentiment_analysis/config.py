"""
Sentiment Analysis - Configuration.

============================================================
PURPOSE
============================================================
All configuration for the analysis core, loaded from the
environment (a local .env file is honored).

When no valid API key is configured every analysis is routed
through the demo simulator instead of failing.

============================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


API_KEY_PREFIX = "hf_"
API_KEY_MIN_LENGTH = 10

DEFAULT_PRIMARY_MODEL_URL = (
    "https://api-inference.huggingface.co/models/"
    "cardiffnlp/twitter-roberta-base-sentiment-latest"
)
DEFAULT_FALLBACK_MODEL_URL = (
    "https://api-inference.huggingface.co/models/"
    "nlptown/bert-base-multilingual-uncased-sentiment"
)
DEFAULT_STORAGE_DIR = Path.home() / ".sentiment_analysis"


def validate_api_key(api_key: Optional[str]) -> bool:
    """A usable key starts with ``hf_`` and is longer than 10 characters."""
    if not api_key:
        return False
    key = api_key.strip()
    return key.startswith(API_KEY_PREFIX) and len(key) > API_KEY_MIN_LENGTH


# ============================================================
# ANALYZER CONFIGURATION
# ============================================================

@dataclass
class AnalyzerConfig:
    """
    Configuration for the orchestrator, client, scheduler and simulator.
    """

    api_key: Optional[str] = None
    """Hugging Face API key. Absent or invalid means demo mode."""

    primary_model_url: str = DEFAULT_PRIMARY_MODEL_URL
    """Primary inference endpoint."""

    fallback_model_url: str = DEFAULT_FALLBACK_MODEL_URL
    """Endpoint tried once when the primary returns 404."""

    rate_limit_delay_seconds: float = 2.0
    """Minimum spacing between consecutive remote calls."""

    request_timeout_seconds: float = 30.0
    """Total timeout of a single HTTP call."""

    max_input_chars: int = 500
    """Outgoing text is truncated to this many characters."""

    storage_dir: Path = DEFAULT_STORAGE_DIR
    """Directory holding the persisted results and batches."""

    demo_min_delay_seconds: float = 1.5
    demo_max_delay_seconds: float = 2.5
    """Simulated latency range of the demo simulator."""

    @property
    def has_live_credentials(self) -> bool:
        return validate_api_key(self.api_key)

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """Load configuration from environment variables."""
        load_dotenv()
        return cls(
            api_key=os.getenv("HUGGINGFACE_API_KEY") or None,
            primary_model_url=os.getenv("HF_PRIMARY_MODEL_URL", DEFAULT_PRIMARY_MODEL_URL),
            fallback_model_url=os.getenv("HF_FALLBACK_MODEL_URL", DEFAULT_FALLBACK_MODEL_URL),
            rate_limit_delay_seconds=float(os.getenv("SENTIMENT_RATE_LIMIT_DELAY", "2.0")),
            request_timeout_seconds=float(os.getenv("SENTIMENT_REQUEST_TIMEOUT", "30")),
            max_input_chars=int(os.getenv("SENTIMENT_MAX_INPUT_CHARS", "500")),
            storage_dir=Path(os.getenv("SENTIMENT_STORAGE_DIR", str(DEFAULT_STORAGE_DIR))).expanduser(),
            demo_min_delay_seconds=float(os.getenv("SENTIMENT_DEMO_MIN_DELAY", "1.5")),
            demo_max_delay_seconds=float(os.getenv("SENTIMENT_DEMO_MAX_DELAY", "2.5")),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.api_key and not validate_api_key(self.api_key):
            errors.append(
                f"api_key must start with '{API_KEY_PREFIX}' and be longer "
                f"than {API_KEY_MIN_LENGTH} characters"
            )

        if self.rate_limit_delay_seconds < 0:
            errors.append("rate_limit_delay_seconds must not be negative")

        if self.request_timeout_seconds <= 0:
            errors.append("request_timeout_seconds must be positive")

        if self.max_input_chars < 1:
            errors.append("max_input_chars must be at least 1")

        if self.demo_min_delay_seconds < 0:
            errors.append("demo_min_delay_seconds must not be negative")

        if self.demo_max_delay_seconds < self.demo_min_delay_seconds:
            errors.append("demo_max_delay_seconds must not be below demo_min_delay_seconds")

        return errors
