"""
Analytics - History filtering, dashboard aggregates and text comparison.

Pure computations over stored results. Rendering is left to callers.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Sequence

from .models import BatchResult, Sentiment, SentimentResult


# ============================================================
# REPORT TYPES
# ============================================================

@dataclass(frozen=True)
class DailyTrend:
    day: date
    positive: int = 0
    negative: int = 0
    neutral: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.negative + self.neutral

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
            "total": self.total,
        }


@dataclass(frozen=True)
class KeywordFrequency:
    word: str
    count: int
    sentiment: Sentiment

    def to_dict(self) -> dict[str, Any]:
        return {"word": self.word, "count": self.count, "sentiment": self.sentiment.value}


@dataclass
class AnalyticsReport:
    total: int
    sentiment_counts: dict[Sentiment, int]
    sentiment_percentages: dict[Sentiment, float]
    confidence_by_sentiment: dict[Sentiment, float]
    average_confidence: float
    trend: list[DailyTrend] = field(default_factory=list)
    top_keywords: list[KeywordFrequency] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "sentiment_counts": {k.value: v for k, v in self.sentiment_counts.items()},
            "sentiment_percentages": {k.value: v for k, v in self.sentiment_percentages.items()},
            "confidence_by_sentiment": {k.value: v for k, v in self.confidence_by_sentiment.items()},
            "average_confidence": self.average_confidence,
            "trend": [t.to_dict() for t in self.trend],
            "top_keywords": [k.to_dict() for k in self.top_keywords],
        }


@dataclass(frozen=True)
class LabeledResult:
    """A result tagged with a caller-chosen label, as in a side-by-side comparison."""
    label: str
    result: SentimentResult


@dataclass(frozen=True)
class ComparisonReport:
    entries: tuple[LabeledResult, ...]
    most_positive: LabeledResult
    most_negative: LabeledResult
    highest_confidence: LabeledResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [
                {"label": e.label, **e.result.to_dict()} for e in self.entries
            ],
            "most_positive": self.most_positive.label,
            "most_negative": self.most_negative.label,
            "highest_confidence": self.highest_confidence.label,
        }


# ============================================================
# HISTORY FILTERS
# ============================================================

def filter_results(
    results: Sequence[SentimentResult],
    search: str = "",
    sentiment: Optional[Sentiment] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[SentimentResult]:
    """Case-insensitive text search, optional sentiment and [start, end] window."""
    needle = search.strip().lower()
    filtered = []
    for result in results:
        if needle and needle not in result.text.lower():
            continue
        if sentiment is not None and result.sentiment != sentiment:
            continue
        if start is not None and result.timestamp < start:
            continue
        if end is not None and result.timestamp > end:
            continue
        filtered.append(result)
    return filtered


def filter_batches(batches: Sequence[BatchResult], search: str = "") -> list[BatchResult]:
    needle = search.strip().lower()
    return [b for b in batches if needle in b.name.lower()]


# ============================================================
# DASHBOARD AGGREGATES
# ============================================================

def compute_analytics(
    results: Sequence[SentimentResult],
    now: Optional[datetime] = None,
    days: int = 7,
    top_n: int = 10,
) -> Optional[AnalyticsReport]:
    """
    Aggregate a result collection. Returns None when there is nothing to report.

    The trend covers the last ``days`` calendar days (UTC) ending today.
    """
    if not results:
        return None

    total = len(results)
    counts = {s: 0 for s in Sentiment}
    confidence_sums = {s: 0.0 for s in Sentiment}
    for result in results:
        counts[result.sentiment] += 1
        confidence_sums[result.sentiment] += result.confidence

    percentages = {s: counts[s] / total * 100 for s in Sentiment}
    confidence_by_sentiment = {
        s: (confidence_sums[s] / counts[s] if counts[s] else 0.0) for s in Sentiment
    }

    return AnalyticsReport(
        total=total,
        sentiment_counts=counts,
        sentiment_percentages=percentages,
        confidence_by_sentiment=confidence_by_sentiment,
        average_confidence=sum(r.confidence for r in results) / total,
        trend=_daily_trend(results, now or datetime.now(timezone.utc), days),
        top_keywords=_top_keywords(results, top_n),
    )


def _daily_trend(
    results: Sequence[SentimentResult],
    now: datetime,
    days: int,
) -> list[DailyTrend]:
    today = _as_utc(now).date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    per_day: dict[date, Counter] = {d: Counter() for d in window}

    for result in results:
        day = _as_utc(result.timestamp).date()
        if day in per_day:
            per_day[day][result.sentiment] += 1

    return [
        DailyTrend(
            day=d,
            positive=per_day[d][Sentiment.POSITIVE],
            negative=per_day[d][Sentiment.NEGATIVE],
            neutral=per_day[d][Sentiment.NEUTRAL],
        )
        for d in window
    ]


def _top_keywords(results: Sequence[SentimentResult], top_n: int) -> list[KeywordFrequency]:
    counts: Counter = Counter()
    first_sentiment: dict[str, Sentiment] = {}
    for result in results:
        for keyword in result.keywords:
            counts[keyword.word] += 1
            first_sentiment.setdefault(keyword.word, keyword.sentiment)

    return [
        KeywordFrequency(word=word, count=count, sentiment=first_sentiment[word])
        for word, count in counts.most_common(top_n)
    ]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ============================================================
# COMPARISON
# ============================================================

def compare_results(entries: Sequence[LabeledResult]) -> ComparisonReport:
    """
    Pick the most positive, most negative and most confident entries.

    Earlier entries win ties.
    """
    if len(entries) < 2:
        raise ValueError("At least two texts are required for a comparison")

    def best(key) -> LabeledResult:
        winner = entries[0]
        for entry in entries[1:]:
            if key(entry) > key(winner):
                winner = entry
        return winner

    return ComparisonReport(
        entries=tuple(entries),
        most_positive=best(lambda e: e.result.scores.positive),
        most_negative=best(lambda e: e.result.scores.negative),
        highest_confidence=best(lambda e: e.result.confidence),
    )
