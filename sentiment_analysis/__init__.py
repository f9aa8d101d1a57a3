"""
Sentiment Analysis - Orchestration core for remote text sentiment classification.

This package provides:
- Hugging Face inference client with primary/fallback failover
- Rate-limited request scheduler (one call in flight, fixed spacing)
- Label mapping and score normalization into positive/negative/neutral
- Lexicon keyword extraction and an offline demo simulator
- Orchestrator for single and batch analysis over a persisted history

Usage:
    from sentiment_analysis import AnalysisOrchestrator, AnalyzerConfig

    orchestrator = AnalysisOrchestrator(AnalyzerConfig.from_env())

    result = await orchestrator.analyze_one("This is an amazing product")
    print(f"{result.sentiment.value}: {result.confidence:.2f}")

    batch = await orchestrator.analyze_batch(
        ["good movie", "terrible film"],
        name="reviews",
    )
    print(batch.summary)

Without a valid HUGGINGFACE_API_KEY every analysis runs in demo mode.
"""

from .analytics import (
    AnalyticsReport,
    ComparisonReport,
    LabeledResult,
    compare_results,
    compute_analytics,
    filter_batches,
    filter_results,
)
from .config import AnalyzerConfig, validate_api_key
from .exceptions import (
    AuthError,
    ConfigurationError,
    ModelLoadingError,
    ModelUnavailableError,
    NetworkError,
    RateLimitError,
    RequestError,
    ResponseFormatError,
    SentimentAnalysisError,
    StorageError,
)
from .keywords import extract_keywords
from .labels import map_label_scores, map_sentiment_label, normalize_scores
from .models import (
    BatchResult,
    BatchSummary,
    Keyword,
    LabelScore,
    Sentiment,
    SentimentAnalysis,
    SentimentResult,
    SentimentScores,
)
from .orchestrator import AnalysisOrchestrator
from .pipeline import SentimentPipeline
from .providers import BaseSentimentProvider, DemoSimulator, HuggingFaceClient
from .scheduler import RequestScheduler
from .state import AnalysisState
from .storage import JsonResultStore, MemoryResultStore


__all__ = [
    # Orchestration
    "AnalysisOrchestrator",
    "AnalysisState",
    "AnalyzerConfig",
    "RequestScheduler",
    "validate_api_key",

    # Providers
    "BaseSentimentProvider",
    "HuggingFaceClient",
    "DemoSimulator",

    # Pipeline
    "SentimentPipeline",
    "map_sentiment_label",
    "normalize_scores",
    "map_label_scores",
    "extract_keywords",

    # Storage
    "JsonResultStore",
    "MemoryResultStore",

    # Analytics
    "AnalyticsReport",
    "ComparisonReport",
    "LabeledResult",
    "compute_analytics",
    "compare_results",
    "filter_results",
    "filter_batches",

    # Models
    "Sentiment",
    "LabelScore",
    "SentimentScores",
    "Keyword",
    "SentimentAnalysis",
    "SentimentResult",
    "BatchSummary",
    "BatchResult",

    # Exceptions
    "SentimentAnalysisError",
    "ConfigurationError",
    "AuthError",
    "RateLimitError",
    "ModelLoadingError",
    "ModelUnavailableError",
    "ResponseFormatError",
    "NetworkError",
    "RequestError",
    "StorageError",
]


# Version
__version__ = "1.0.0"
