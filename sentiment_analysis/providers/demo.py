"""
Demo Simulator - Offline stand-in for the Hugging Face client.

Produces plausible results without network access or credentials,
scoring text by lexicon hits and adding realistic latency.
"""

import asyncio
import logging
import random
from typing import Optional

from ..keywords import count_lexicon_hits
from ..models import Sentiment, SentimentAnalysis, SentimentScores
from ..pipeline import SentimentPipeline
from .base import BaseSentimentProvider, ProviderMetadata


logger = logging.getLogger(__name__)


class DemoSimulator(BaseSentimentProvider):
    """
    Rule-based simulated sentiment provider.

    Verdict rules:
    - more positive than negative hits: positive, confidence min(0.65 + 0.08*hits, 0.92)
    - more negative than positive hits: negative, same formula
    - tie (including no hits): neutral, confidence uniform in [0.55, 0.80]
    """

    BASE_CONFIDENCE = 0.65
    CONFIDENCE_PER_HIT = 0.08
    MAX_CONFIDENCE = 0.92
    NEUTRAL_CONFIDENCE_RANGE = (0.55, 0.80)
    REMAINDER_SHARE = 0.6
    DEFAULT_LATENCY_RANGE = (1.5, 2.5)

    def __init__(
        self,
        latency_range: Optional[tuple[float, float]] = None,
        rng: Optional[random.Random] = None,
        pipeline: Optional[SentimentPipeline] = None,
    ) -> None:
        self.latency_range = latency_range or self.DEFAULT_LATENCY_RANGE
        self._rng = rng or random.Random()
        self._pipeline = pipeline or SentimentPipeline()

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="demo",
            display_name="Demo Simulator",
            version="1.0.0",
            requires_api_key=False,
            is_simulated=True,
            tags=["sentiment", "offline", "simulated"],
        )

    async def analyze(self, text: str) -> SentimentAnalysis:
        low, high = self.latency_range
        await asyncio.sleep(self._rng.uniform(low, high))
        return self.simulate(text)

    def simulate(self, text: str) -> SentimentAnalysis:
        """Compute the simulated analysis without the artificial delay."""
        positive_hits, negative_hits = count_lexicon_hits(text)

        if positive_hits > negative_hits:
            sentiment = Sentiment.POSITIVE
            confidence = self._hit_confidence(positive_hits)
        elif negative_hits > positive_hits:
            sentiment = Sentiment.NEGATIVE
            confidence = self._hit_confidence(negative_hits)
        else:
            sentiment = Sentiment.NEUTRAL
            confidence = self._rng.uniform(*self.NEUTRAL_CONFIDENCE_RANGE)

        remaining = 1.0 - confidence
        raw = {
            s: confidence if s == sentiment
            else self._rng.random() * remaining * self.REMAINDER_SHARE
            for s in Sentiment
        }
        total = sum(raw.values())
        scores = SentimentScores(
            positive=raw[Sentiment.POSITIVE] / total,
            negative=raw[Sentiment.NEGATIVE] / total,
            neutral=raw[Sentiment.NEUTRAL] / total,
        )

        logger.debug(
            f"Simulated verdict={sentiment.value} hits=+{positive_hits}/-{negative_hits}"
        )
        return self._pipeline.finalize(text, sentiment, confidence, scores)

    def _hit_confidence(self, hits: int) -> float:
        return min(self.BASE_CONFIDENCE + hits * self.CONFIDENCE_PER_HIT, self.MAX_CONFIDENCE)
