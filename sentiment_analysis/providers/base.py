"""
Base Sentiment Provider - Abstract interface for analysis backends.

Both the live Hugging Face client and the offline demo simulator
implement this, so the orchestrator can treat them alike.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..models import SentimentAnalysis


@dataclass
class ProviderMetadata:
    """Metadata about an analysis provider."""
    name: str
    display_name: str
    version: str
    requires_api_key: bool = False
    is_simulated: bool = False
    base_url: str = ""
    documentation_url: str = ""
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "version": self.version,
            "requires_api_key": self.requires_api_key,
            "is_simulated": self.is_simulated,
            "base_url": self.base_url,
            "tags": self.tags,
        }


class BaseSentimentProvider(ABC):
    """
    Abstract base class for sentiment providers.

    Subclasses must implement:
    - analyze() - Classify one text into a SentimentAnalysis
    - metadata - Provider metadata property
    """

    @property
    @abstractmethod
    def metadata(self) -> ProviderMetadata:
        """Return provider metadata."""
        pass

    @abstractmethod
    async def analyze(self, text: str) -> SentimentAnalysis:
        """Classify a single text. Raises the typed errors of the provider."""
        pass

    async def close(self) -> None:
        """Cleanup resources. Override if needed."""
        pass
