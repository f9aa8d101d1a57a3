"""
Analysis State - Single owned state value and its transitions.

Each transition is a pure function returning a new AnalysisState.
The orchestrator owns the current value and swaps it on every step;
nothing here touches storage.

Collections are most-recent-first.
"""

from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional

from .models import BatchResult, SentimentResult


@dataclass(frozen=True)
class AnalysisState:
    is_loading: bool = False
    progress: float = 0.0
    error: Optional[str] = None
    results: tuple[SentimentResult, ...] = ()
    batches: tuple[BatchResult, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_loading": self.is_loading,
            "progress": self.progress,
            "error": self.error,
            "results": [r.to_dict() for r in self.results],
            "batches": [b.to_dict() for b in self.batches],
        }


# ============================================================
# TRANSITIONS
# ============================================================

def begin_analysis(state: AnalysisState) -> AnalysisState:
    return replace(state, is_loading=True, error=None, progress=0.0)


def update_progress(state: AnalysisState, progress: float) -> AnalysisState:
    return replace(state, progress=max(0.0, min(100.0, progress)))


def fail_analysis(state: AnalysisState, message: str) -> AnalysisState:
    return replace(state, is_loading=False, error=message)


def settle_loading(state: AnalysisState, in_flight: int) -> AnalysisState:
    """Loading stays set while any other operation is still running."""
    return replace(state, is_loading=in_flight > 0)


def add_result(state: AnalysisState, result: SentimentResult) -> AnalysisState:
    """Prepend a single analysis and finish loading."""
    return replace(
        state,
        results=(result,) + state.results,
        is_loading=False,
        progress=100.0,
    )


def add_batch(
    state: AnalysisState,
    batch: BatchResult,
    results: Iterable[SentimentResult],
) -> AnalysisState:
    """
    Prepend a finished batch and its results.

    Results keep their batch (input) order at the head of the collection.
    """
    return replace(
        state,
        results=tuple(results) + state.results,
        batches=(batch,) + state.batches,
        is_loading=False,
    )


def remove_result(state: AnalysisState, result_id: str) -> AnalysisState:
    """Drop exactly one result. Batches keep their member ids."""
    return replace(
        state,
        results=tuple(r for r in state.results if r.id != result_id),
    )


def remove_batch(state: AnalysisState, batch_id: str) -> AnalysisState:
    """Drop a batch and every result whose id is one of its members."""
    batch = find_batch(state, batch_id)
    if batch is None:
        return state

    member_ids = set(batch.result_ids)
    return replace(
        state,
        batches=tuple(b for b in state.batches if b.id != batch_id),
        results=tuple(r for r in state.results if r.id not in member_ids),
    )


def cleared(state: AnalysisState) -> AnalysisState:
    return replace(state, results=(), batches=(), progress=0.0, error=None)


# ============================================================
# QUERIES
# ============================================================

def find_result(state: AnalysisState, result_id: str) -> Optional[SentimentResult]:
    return next((r for r in state.results if r.id == result_id), None)


def find_batch(state: AnalysisState, batch_id: str) -> Optional[BatchResult]:
    return next((b for b in state.batches if b.id == batch_id), None)


def batch_results(state: AnalysisState, batch: BatchResult) -> list[SentimentResult]:
    """Member results in batch order; ids deleted individually are skipped."""
    by_id = {r.id: r for r in state.results}
    return [by_id[i] for i in batch.result_ids if i in by_id]
