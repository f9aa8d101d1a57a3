"""
Sentiment Analysis Exceptions - Typed error taxonomy.

The inference client and the request scheduler raise these unchanged;
the orchestrator records the message in its state and re-raises to the caller.
"""

from datetime import datetime, timezone
from typing import Any, Optional


class SentimentAnalysisError(Exception):
    """Base exception for all sentiment analysis errors."""
    
    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(self.message)
    
    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(SentimentAnalysisError):
    """API key missing or malformed."""
    pass


class AuthError(SentimentAnalysisError):
    """Remote service rejected the credential (401/403)."""
    
    def __init__(
        self,
        message: str,
        status_code: int = 401,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
    
    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class RateLimitError(SentimentAnalysisError):
    """Remote service rate limit exceeded (429)."""
    
    def __init__(
        self,
        message: str,
        retry_after_seconds: Optional[float] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.retry_after_seconds = retry_after_seconds
    
    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after_seconds"] = self.retry_after_seconds
        return data


class ModelLoadingError(SentimentAnalysisError):
    """Model is cold and still loading (503)."""
    
    def __init__(
        self,
        message: str,
        retry_after_seconds: Optional[float] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.retry_after_seconds = retry_after_seconds  # estimated_time from the service
    
    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after_seconds"] = self.retry_after_seconds
        return data


class ModelUnavailableError(SentimentAnalysisError):
    """Both the primary and the fallback model returned 404."""
    pass


class ResponseFormatError(SentimentAnalysisError):
    """Success body could not be decoded into label/score pairs."""
    
    def __init__(
        self,
        message: str,
        raw_data: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.raw_data = raw_data[:500] if raw_data else None
    
    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["raw_data_preview"] = self.raw_data[:100] if self.raw_data else None
        return data


class NetworkError(SentimentAnalysisError):
    """Transport failure: unreachable host, DNS, timeout."""
    pass


class RequestError(SentimentAnalysisError):
    """Any other non-2xx response."""
    
    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.body = body[:500]
    
    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "body": self.body,
        })
        return data


class StorageError(SentimentAnalysisError):
    """Persisting results or batches failed."""
    pass
