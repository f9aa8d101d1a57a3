"""
Sentiment Pipeline - Assembles a SentimentAnalysis from raw classifier output.

This pipeline:
1. Maps raw labels onto canonical sentiments and normalizes the scores
2. Selects the verdict and its confidence
3. Extracts lexicon keywords from the full source text
4. Writes a short human-readable explanation
"""

import logging
from typing import Iterable, Sequence

from .keywords import MAX_KEYWORDS, extract_keywords
from .labels import map_label_scores
from .models import Keyword, LabelScore, Sentiment, SentimentAnalysis, SentimentScores


logger = logging.getLogger(__name__)


HIGH_CONFIDENCE = 0.8
MODERATE_CONFIDENCE = 0.6


def confidence_level(confidence: float) -> str:
    if confidence > HIGH_CONFIDENCE:
        return "high"
    if confidence > MODERATE_CONFIDENCE:
        return "moderate"
    return "low"


def generate_explanation(
    sentiment: Sentiment,
    confidence: float,
    keywords: Sequence[Keyword],
) -> str:
    """One or two sentences describing the verdict."""
    explanation = (
        f"This text shows {sentiment.value} sentiment with "
        f"{confidence_level(confidence)} confidence ({confidence * 100:.1f}%)."
    )
    if keywords:
        words = ", ".join(k.word for k in keywords)
        explanation += f" Key indicators include words like: {words}."
    return explanation


class SentimentPipeline:
    """
    Turns provider output into the shared SentimentAnalysis shape.

    Used by the live client (from raw label/score pairs) and by the demo
    simulator (from an already-built distribution).
    """

    def __init__(self, max_keywords: int = MAX_KEYWORDS) -> None:
        self.max_keywords = max_keywords

    def build(
        self,
        text: str,
        pairs: Iterable[LabelScore],
    ) -> SentimentAnalysis:
        """Normalize raw classifier pairs and attach keywords and explanation."""
        sentiment, confidence, scores = map_label_scores(pairs)
        logger.debug(
            f"Mapped verdict={sentiment.value} confidence={confidence:.3f} "
            f"scores={scores.to_dict()}"
        )
        return self.finalize(text, sentiment, confidence, scores)

    def finalize(
        self,
        text: str,
        sentiment: Sentiment,
        confidence: float,
        scores: SentimentScores,
    ) -> SentimentAnalysis:
        keywords = extract_keywords(text, sentiment, limit=self.max_keywords)
        return SentimentAnalysis(
            sentiment=sentiment,
            confidence=confidence,
            scores=scores,
            keywords=tuple(keywords),
            explanation=generate_explanation(sentiment, confidence, keywords),
        )
