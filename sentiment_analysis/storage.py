"""
Result Store - Persistence of analysed results and batches.

Two named records, each a JSON array:
- sentiment_results.json
- sentiment_batches.json

Every save rewrites both records in full. Only the orchestrator writes
here; there are no concurrent external writers.
"""

import json
import logging
from pathlib import Path
from typing import Any, Sequence

from .exceptions import StorageError
from .models import BatchResult, SentimentResult


logger = logging.getLogger(__name__)


RESULTS_RECORD = "sentiment_results"
BATCHES_RECORD = "sentiment_batches"


class MemoryResultStore:
    """In-process store, used for tests and ephemeral sessions."""

    def __init__(self) -> None:
        self._records: dict[str, list[dict[str, Any]]] = {}
        self.save_count = 0

    def load(self) -> tuple[list[SentimentResult], list[BatchResult]]:
        return (
            [SentimentResult.from_dict(r) for r in self._records.get(RESULTS_RECORD, [])],
            [BatchResult.from_dict(b) for b in self._records.get(BATCHES_RECORD, [])],
        )

    def save(
        self,
        results: Sequence[SentimentResult],
        batches: Sequence[BatchResult],
    ) -> None:
        self._records[RESULTS_RECORD] = [r.to_dict() for r in results]
        self._records[BATCHES_RECORD] = [b.to_dict() for b in batches]
        self.save_count += 1

    def clear(self) -> None:
        self._records.clear()


class JsonResultStore:
    """
    File-backed store under a single directory.

    A missing record loads as empty. A corrupt record is logged and
    loads as empty, matching how state restore behaves on startup.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    @property
    def results_path(self) -> Path:
        return self.directory / f"{RESULTS_RECORD}.json"

    @property
    def batches_path(self) -> Path:
        return self.directory / f"{BATCHES_RECORD}.json"

    def load(self) -> tuple[list[SentimentResult], list[BatchResult]]:
        try:
            results = [
                SentimentResult.from_dict(item)
                for item in self._read_record(self.results_path)
            ]
            batches = [
                BatchResult.from_dict(item)
                for item in self._read_record(self.batches_path)
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Discarding malformed analysis history: {e}")
            return [], []

        logger.info(f"Loaded {len(results)} results and {len(batches)} batches")
        return results, batches

    def save(
        self,
        results: Sequence[SentimentResult],
        batches: Sequence[BatchResult],
    ) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._write_record(self.results_path, [r.to_dict() for r in results])
            self._write_record(self.batches_path, [b.to_dict() for b in batches])
        except OSError as e:
            raise StorageError(
                f"Failed to persist analysis history: {e}",
                details={"directory": str(self.directory)},
            ) from e

    def clear(self) -> None:
        try:
            for path in (self.results_path, self.batches_path):
                path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to clear analysis history: {e}",
                details={"directory": str(self.directory)},
            ) from e
        logger.info("Cleared persisted analysis history")

    def _read_record(self, path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {path.name}: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Ignoring {path.name}: expected a JSON array")
            return []
        return data

    def _write_record(self, path: Path, data: list[dict[str, Any]]) -> None:
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(path)
