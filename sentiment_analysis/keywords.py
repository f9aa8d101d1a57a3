"""
Keyword Extractor - Lexicon scan for sentiment-bearing tokens.

The lexicons are shared with the demo simulator, which scores text by
counting hits against the same lists.
"""

import re
from typing import Optional

from .models import Keyword, Sentiment


POSITIVE_WORDS: frozenset[str] = frozenset([
    "good", "great", "excellent", "amazing", "wonderful", "fantastic",
    "love", "best", "perfect", "awesome", "outstanding", "brilliant",
    "superb", "magnificent", "incredible", "marvelous", "exceptional",
    "delightful", "impressive", "remarkable", "beautiful", "lovely",
    "nice", "pleasant", "enjoyable", "satisfying",
])

NEGATIVE_WORDS: frozenset[str] = frozenset([
    "bad", "terrible", "awful", "horrible", "hate", "worst",
    "disappointing", "poor", "useless", "disgusting", "dreadful",
    "appalling", "atrocious", "abysmal", "pathetic", "miserable",
    "unpleasant", "annoying", "frustrating", "irritating", "boring",
    "stupid", "ridiculous", "waste", "failure", "broken",
])

KEYWORD_WEIGHT = 0.8
MAX_KEYWORDS = 5

_WORD_RE = re.compile(r"\b\w+\b")


def tokenize(text: str) -> list[str]:
    """Lower-cased word tokens in scan order."""
    return _WORD_RE.findall(text.lower())


def classify_word(word: str) -> Optional[Sentiment]:
    if word in POSITIVE_WORDS:
        return Sentiment.POSITIVE
    if word in NEGATIVE_WORDS:
        return Sentiment.NEGATIVE
    return None


def extract_keywords(
    text: str,
    sentiment: Optional[Sentiment] = None,
    limit: int = MAX_KEYWORDS,
) -> list[Keyword]:
    """
    Return up to ``limit`` unique lexicon hits, in scan order.

    ``sentiment`` is the verdict already reached for the text. It is
    accepted for context only; extraction depends on the lexicons alone.
    """
    keywords: list[Keyword] = []
    seen: set[str] = set()

    for word in tokenize(text):
        if word in seen:
            continue
        word_sentiment = classify_word(word)
        if word_sentiment is None:
            continue
        seen.add(word)
        keywords.append(Keyword(word=word, sentiment=word_sentiment, weight=KEYWORD_WEIGHT))
        if len(keywords) >= limit:
            break

    return keywords


def count_lexicon_hits(text: str) -> tuple[int, int]:
    """Count every positive and negative lexicon occurrence (duplicates included)."""
    positive = 0
    negative = 0
    for word in tokenize(text):
        word_sentiment = classify_word(word)
        if word_sentiment == Sentiment.POSITIVE:
            positive += 1
        elif word_sentiment == Sentiment.NEGATIVE:
            negative += 1
    return positive, negative
