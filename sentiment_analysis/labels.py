"""
Label Mapper & Score Normalizer.

Converts raw classifier output of any label vocabulary (polarity words,
LABEL_n ids, star ratings) into the canonical three-way distribution.

Pure functions - no network, no storage.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from .exceptions import ResponseFormatError
from .models import LabelScore, Sentiment, SentimentScores


logger = logging.getLogger(__name__)


SUM_TOLERANCE = 0.01

POSITIVE_EXACT = {"label_2", "pos"}
POSITIVE_CONTAINS = ("positive", "4 stars", "5 stars")

NEGATIVE_EXACT = {"label_0", "neg"}
NEGATIVE_CONTAINS = ("negative", "1 star", "2 stars")


# ─────────────────────────────────────────────────────────────
# Label mapping
# ─────────────────────────────────────────────────────────────

def map_sentiment_label(label: str) -> Sentiment:
    """Map a raw model label to a canonical sentiment. Unmatched labels are neutral."""
    normalized = label.strip().lower()

    if normalized in POSITIVE_EXACT or any(p in normalized for p in POSITIVE_CONTAINS):
        return Sentiment.POSITIVE
    if normalized in NEGATIVE_EXACT or any(n in normalized for n in NEGATIVE_CONTAINS):
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def normalize_scores(pairs: Iterable[LabelScore]) -> SentimentScores:
    """
    Aggregate raw scores into canonical buckets.

    Scores of labels mapping to the same bucket add up. Each bucket is
    clamped to [0, 1]; if the triple then misses 1 by more than the
    tolerance it is rescaled proportionally. An all-zero triple stays zero.
    """
    buckets = {s: 0.0 for s in Sentiment}
    for pair in pairs:
        buckets[map_sentiment_label(pair.label)] += pair.score

    for sentiment, value in buckets.items():
        buckets[sentiment] = max(0.0, min(1.0, value))

    total = sum(buckets.values())
    if total > 0 and abs(total - 1.0) > SUM_TOLERANCE:
        for sentiment in buckets:
            buckets[sentiment] /= total
    elif total == 0:
        logger.debug("No recognizable scores, emitting zero distribution")

    return SentimentScores(
        positive=buckets[Sentiment.POSITIVE],
        negative=buckets[Sentiment.NEGATIVE],
        neutral=buckets[Sentiment.NEUTRAL],
    )


def select_verdict(scores: SentimentScores) -> Sentiment:
    """Highest-scoring sentiment; the first maximum in enum order wins ties."""
    verdict = Sentiment.POSITIVE
    for sentiment in Sentiment:
        if scores.get(sentiment) > scores.get(verdict):
            verdict = sentiment
    return verdict


def map_label_scores(
    pairs: Iterable[LabelScore],
) -> tuple[Sentiment, float, SentimentScores]:
    """Run the full mapping: (verdict, confidence, distribution)."""
    scores = normalize_scores(pairs)
    verdict = select_verdict(scores)
    return verdict, scores.get(verdict), scores


# ─────────────────────────────────────────────────────────────
# Response decoding
# ─────────────────────────────────────────────────────────────

class ResponseShape(Enum):
    """Success body layouts accepted from the inference endpoint."""
    FLAT = "flat"      # [{"label": ..., "score": ...}, ...]
    NESTED = "nested"  # [[{"label": ..., "score": ...}, ...]]


@dataclass(frozen=True)
class DecodedResponse:
    shape: ResponseShape
    items: list[LabelScore]


def _is_label_score(item: Any) -> bool:
    return (
        isinstance(item, dict)
        and isinstance(item.get("label"), str)
        and isinstance(item.get("score"), (int, float))
        and not isinstance(item.get("score"), bool)
    )


def decode_response(payload: Any) -> DecodedResponse:
    """
    Decode a parsed JSON success body.

    Raises:
        ResponseFormatError: payload matches neither accepted shape
    """
    if not isinstance(payload, list) or not payload:
        raise ResponseFormatError(
            "Unexpected API response format. Please try again.",
            raw_data=repr(payload),
        )

    head = payload[0]
    if isinstance(head, list):
        shape = ResponseShape.NESTED
        entries = head
    elif _is_label_score(head):
        shape = ResponseShape.FLAT
        entries = payload
    else:
        raise ResponseFormatError(
            "Unexpected API response format. Please try again.",
            raw_data=repr(payload),
        )

    if not entries or not all(_is_label_score(e) for e in entries):
        raise ResponseFormatError(
            "Unexpected API response format. Please try again.",
            raw_data=repr(payload),
            details={"shape": shape.value},
        )

    return DecodedResponse(
        shape=shape,
        items=[LabelScore(label=e["label"], score=float(e["score"])) for e in entries],
    )
