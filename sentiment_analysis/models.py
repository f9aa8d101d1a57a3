"""
Sentiment Analysis Data Models - Normalized result and batch structures.

Every text analysed, live or simulated, ends up as a SentimentResult.
Batches reference their results by id; they never embed copies.
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Sentiment(Enum):
    """Canonical sentiment. Declaration order is the verdict tie-break order."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


def generate_id(prefix: str) -> str:
    """Build an id like ``result_1700000000000_3f9a0c1b2``."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LabelScore:
    """One raw (label, score) pair as returned by the remote classifier."""
    label: str
    score: float


@dataclass(frozen=True)
class SentimentScores:
    """Three-way score distribution, summing to 1 within 0.01 (or all zero)."""
    positive: float = 0.0
    negative: float = 0.0
    neutral: float = 0.0

    @property
    def total(self) -> float:
        return self.positive + self.negative + self.neutral

    def get(self, sentiment: Sentiment) -> float:
        return getattr(self, sentiment.value)

    def to_dict(self) -> dict[str, float]:
        return {
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SentimentScores":
        return cls(
            positive=float(data.get("positive", 0.0)),
            negative=float(data.get("negative", 0.0)),
            neutral=float(data.get("neutral", 0.0)),
        )


@dataclass(frozen=True)
class Keyword:
    """Sentiment-bearing token found in the source text."""
    word: str
    sentiment: Sentiment
    weight: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "sentiment": self.sentiment.value,
            "weight": self.weight,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Keyword":
        return cls(
            word=data["word"],
            sentiment=Sentiment(data["sentiment"]),
            weight=float(data["weight"]),
        )


@dataclass(frozen=True)
class SentimentAnalysis:
    """
    Post-normalization output of a provider.

    The live client and the demo simulator both produce this shape,
    so callers do not care which path ran.
    """
    sentiment: Sentiment
    confidence: float
    scores: SentimentScores
    keywords: tuple[Keyword, ...] = ()
    explanation: str = ""


@dataclass(frozen=True)
class SentimentResult:
    """A stored analysis. Immutable once created; only deletion applies."""
    id: str
    text: str
    sentiment: Sentiment
    confidence: float
    scores: SentimentScores
    keywords: tuple[Keyword, ...]
    timestamp: datetime
    explanation: Optional[str] = None

    @classmethod
    def from_analysis(
        cls,
        text: str,
        analysis: SentimentAnalysis,
        timestamp: Optional[datetime] = None,
    ) -> "SentimentResult":
        return cls(
            id=generate_id("result"),
            text=text,
            sentiment=analysis.sentiment,
            confidence=analysis.confidence,
            scores=analysis.scores,
            keywords=tuple(analysis.keywords),
            timestamp=timestamp or utcnow(),
            explanation=analysis.explanation or None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "sentiment": self.sentiment.value,
            "confidence": self.confidence,
            "scores": self.scores.to_dict(),
            "keywords": [k.to_dict() for k in self.keywords],
            "timestamp": self.timestamp.isoformat(),
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SentimentResult":
        return cls(
            id=data["id"],
            text=data["text"],
            sentiment=Sentiment(data["sentiment"]),
            confidence=float(data["confidence"]),
            scores=SentimentScores.from_dict(data.get("scores", {})),
            keywords=tuple(Keyword.from_dict(k) for k in data.get("keywords", [])),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            explanation=data.get("explanation"),
        )


@dataclass(frozen=True)
class BatchSummary:
    """Per-label counts and mean confidence of a batch."""
    total_texts: int
    positive_count: int
    negative_count: int
    neutral_count: int
    average_confidence: float

    @classmethod
    def from_results(cls, results: list[SentimentResult]) -> "BatchSummary":
        total = len(results)
        return cls(
            total_texts=total,
            positive_count=sum(1 for r in results if r.sentiment == Sentiment.POSITIVE),
            negative_count=sum(1 for r in results if r.sentiment == Sentiment.NEGATIVE),
            neutral_count=sum(1 for r in results if r.sentiment == Sentiment.NEUTRAL),
            average_confidence=(
                sum(r.confidence for r in results) / total if total > 0 else 0.0
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_texts": self.total_texts,
            "positive_count": self.positive_count,
            "negative_count": self.negative_count,
            "neutral_count": self.neutral_count,
            "average_confidence": self.average_confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BatchSummary":
        return cls(
            total_texts=int(data["total_texts"]),
            positive_count=int(data["positive_count"]),
            negative_count=int(data["negative_count"]),
            neutral_count=int(data["neutral_count"]),
            average_confidence=float(data["average_confidence"]),
        )


@dataclass(frozen=True)
class BatchResult:
    """
    A named, ordered group of analyses.

    result_ids preserves processing order, which is the input order.
    The batch owns exactly these results for cascading deletion.
    """
    id: str
    name: str
    result_ids: tuple[str, ...]
    summary: BatchSummary
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_results(
        cls,
        name: str,
        results: list[SentimentResult],
    ) -> "BatchResult":
        return cls(
            id=generate_id("batch"),
            name=name,
            result_ids=tuple(r.id for r in results),
            summary=BatchSummary.from_results(results),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "result_ids": list(self.result_ids),
            "summary": self.summary.to_dict(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BatchResult":
        return cls(
            id=data["id"],
            name=data["name"],
            result_ids=tuple(data.get("result_ids", [])),
            summary=BatchSummary.from_dict(data["summary"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
