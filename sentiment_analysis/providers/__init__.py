"""Sentiment providers: live Hugging Face client and offline demo simulator."""

from .base import BaseSentimentProvider, ProviderMetadata
from .demo import DemoSimulator
from .huggingface import HuggingFaceClient

__all__ = [
    "BaseSentimentProvider",
    "ProviderMetadata",
    "DemoSimulator",
    "HuggingFaceClient",
]
