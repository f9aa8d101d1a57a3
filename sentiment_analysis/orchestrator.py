"""
Analysis Orchestrator - Single-text and batch analysis over a persisted history.

============================================================
RESPONSIBILITY
============================================================
- Routes each text to the live client (through the request
  scheduler) or to the demo simulator
- Builds results and batches, tracks loading and progress
- Owns the AnalysisState value and the result store
- Persists the full history after every mutation

============================================================
FAILURE SEMANTICS
============================================================
- No automatic retries; the caller decides whether to resubmit
- Any failure clears loading, records the message, re-raises
- Batches are all-or-nothing: nothing from a failed batch is kept

============================================================
"""

import logging
from typing import Optional, Protocol, Sequence

from .analytics import ComparisonReport, LabeledResult, compare_results
from .config import AnalyzerConfig, validate_api_key
from .exceptions import ConfigurationError
from .models import BatchResult, SentimentAnalysis, SentimentResult
from .providers import DemoSimulator, HuggingFaceClient
from .providers.huggingface import CONNECTION_PROBE_TEXT
from .scheduler import RequestScheduler
from .state import (
    AnalysisState,
    add_batch,
    add_result,
    batch_results,
    begin_analysis,
    cleared,
    fail_analysis,
    find_batch,
    find_result,
    remove_batch,
    remove_result,
    settle_loading,
    update_progress,
)
from .storage import JsonResultStore


logger = logging.getLogger(__name__)


class ResultStore(Protocol):
    def load(self) -> tuple[list[SentimentResult], list[BatchResult]]: ...

    def save(
        self,
        results: Sequence[SentimentResult],
        batches: Sequence[BatchResult],
    ) -> None: ...

    def clear(self) -> None: ...


class AnalysisOrchestrator:
    """
    Stateful coordinator of all analysis operations.

    State is hydrated from the store on first use. Every operation moves
    the state through discrete transitions (see ``state.py``); mutating
    operations persist the new collections before they return.

    Usage:
        orchestrator = AnalysisOrchestrator(AnalyzerConfig.from_env())
        result = await orchestrator.analyze_one("What a wonderful day")
        batch = await orchestrator.analyze_batch(["good movie", "terrible film"], "reviews")
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        store: Optional[ResultStore] = None,
        client: Optional[HuggingFaceClient] = None,
        simulator: Optional[DemoSimulator] = None,
        scheduler: Optional[RequestScheduler] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self._store = store or JsonResultStore(self.config.storage_dir)
        self._client = client or HuggingFaceClient(
            api_key=self.config.api_key,
            primary_url=self.config.primary_model_url,
            fallback_url=self.config.fallback_model_url,
            timeout=self.config.request_timeout_seconds,
            max_input_chars=self.config.max_input_chars,
        )
        self._simulator = simulator or DemoSimulator(
            latency_range=(
                self.config.demo_min_delay_seconds,
                self.config.demo_max_delay_seconds,
            ),
        )
        self._scheduler = scheduler or RequestScheduler(
            self._client.analyze,
            delay_seconds=self.config.rate_limit_delay_seconds,
        )
        self._state: Optional[AnalysisState] = None
        self._in_flight = 0

    # ─────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────

    @property
    def state(self) -> AnalysisState:
        if self._state is None:
            results, batches = self._store.load()
            self._state = AnalysisState(results=tuple(results), batches=tuple(batches))
        return self._state

    @property
    def is_demo_mode(self) -> bool:
        """True when no valid API key is configured."""
        return not validate_api_key(self._client.api_key)

    def get_result(self, result_id: str) -> Optional[SentimentResult]:
        return find_result(self.state, result_id)

    def get_batch(self, batch_id: str) -> Optional[BatchResult]:
        return find_batch(self.state, batch_id)

    def get_batch_results(self, batch_id: str) -> list[SentimentResult]:
        batch = find_batch(self.state, batch_id)
        if batch is None:
            return []
        return batch_results(self.state, batch)

    # ─────────────────────────────────────────────────────────────
    # Analysis
    # ─────────────────────────────────────────────────────────────

    async def analyze_one(
        self,
        text: str,
        use_simulation: Optional[bool] = None,
    ) -> SentimentResult:
        """
        Analyze a single text, prepend the result and persist.

        ``use_simulation=None`` picks the demo simulator when no valid
        API key is configured.
        """
        self._begin()

        try:
            if not text or not text.strip():
                raise ValueError("Text to analyze must not be blank")

            analysis = await self._run(text, self._resolve_simulation(use_simulation))
            result = SentimentResult.from_analysis(text, analysis)

            new_state = add_result(self._state, result)
            self._persist(new_state)
        except Exception as e:
            self._record_failure(e, "Analysis failed")
            raise

        self._finish(new_state)
        logger.info(
            f"Analyzed text: {result.sentiment.value} ({result.confidence:.2f}) id={result.id}"
        )
        return result

    async def analyze_batch(
        self,
        texts: Sequence[str],
        name: str,
        use_simulation: Optional[bool] = None,
    ) -> BatchResult:
        """
        Analyze texts strictly one after another and store them as a batch.

        Blank entries are dropped. Progress is reported after every text.
        A failure discards everything produced so far.
        """
        self._begin()

        try:
            batch_name = (name or "").strip()
            if not batch_name:
                raise ValueError("Batch name must not be blank")

            pending = [t for t in texts if t and t.strip()]
            if not pending:
                raise ValueError("Batch contains no non-blank texts")

            simulate = self._resolve_simulation(use_simulation)
            total = len(pending)
            logger.info(f"Starting batch '{batch_name}' with {total} texts")

            results: list[SentimentResult] = []
            for completed, text in enumerate(pending, start=1):
                analysis = await self._run(text, simulate)
                results.append(SentimentResult.from_analysis(text, analysis))
                self._state = update_progress(self._state, completed / total * 100)

            batch = BatchResult.from_results(batch_name, results)
            new_state = add_batch(self._state, batch, results)
            self._persist(new_state)
        except Exception as e:
            self._record_failure(e, "Batch analysis failed")
            raise

        self._finish(new_state)
        logger.info(
            f"Finished batch '{batch.name}': +{batch.summary.positive_count} "
            f"-{batch.summary.negative_count} ={batch.summary.neutral_count}"
        )
        return batch

    async def compare(
        self,
        labeled_texts: Sequence[tuple[str, str]],
        use_simulation: Optional[bool] = None,
    ) -> ComparisonReport:
        """
        Analyze (label, text) pairs in order and compare them.

        Each text is stored as an individual result.
        """
        entries = [(label, text) for label, text in labeled_texts if text and text.strip()]
        if len(entries) < 2:
            raise ValueError("At least two texts are required for a comparison")

        labeled = []
        for index, (label, text) in enumerate(entries, start=1):
            result = await self.analyze_one(text.strip(), use_simulation)
            labeled.append(LabeledResult(label=label or f"Text {index}", result=result))

        return compare_results(labeled)

    # ─────────────────────────────────────────────────────────────
    # History mutations
    # ─────────────────────────────────────────────────────────────

    def delete_result(self, result_id: str) -> bool:
        """Remove one result. Batches referencing it are left as they are."""
        state = self.state
        if find_result(state, result_id) is None:
            return False

        new_state = remove_result(state, result_id)
        self._persist(new_state)
        self._state = new_state
        logger.info(f"Deleted result {result_id}")
        return True

    def delete_batch(self, batch_id: str) -> bool:
        """Remove a batch and exactly its member results."""
        state = self.state
        if find_batch(state, batch_id) is None:
            return False

        new_state = remove_batch(state, batch_id)
        self._persist(new_state)
        self._state = new_state
        logger.info(
            f"Deleted batch {batch_id} and "
            f"{len(state.results) - len(new_state.results)} member results"
        )
        return True

    def clear_all(self) -> None:
        """Wipe the in-memory history and the persisted store."""
        self._store.clear()
        self._state = cleared(self.state)
        logger.info("Cleared all results and batches")

    # ─────────────────────────────────────────────────────────────
    # Settings
    # ─────────────────────────────────────────────────────────────

    def set_api_key(self, api_key: Optional[str]) -> None:
        """
        Install a new API key, or remove it with None (demo mode).

        Raises:
            ConfigurationError: key does not look like a Hugging Face key
        """
        if api_key is not None and not validate_api_key(api_key):
            raise ConfigurationError(
                'API key should start with "hf_" and be at least 10 characters long.'
            )
        self._client.set_api_key(api_key)
        self.config.api_key = api_key.strip() if api_key else None
        logger.info("API key removed, demo mode active" if api_key is None else "API key updated")

    async def test_connection(self) -> bool:
        """Send a probe text through the scheduler. Raises the typed error on failure."""
        await self._scheduler.submit(CONNECTION_PROBE_TEXT)
        return True

    async def close(self) -> None:
        await self._scheduler.close()
        await self._client.close()
        await self._simulator.close()

    # ─────────────────────────────────────────────────────────────
    # Internal methods
    # ─────────────────────────────────────────────────────────────

    def _resolve_simulation(self, use_simulation: Optional[bool]) -> bool:
        if use_simulation is None:
            return self.is_demo_mode
        return use_simulation

    async def _run(self, text: str, simulate: bool) -> SentimentAnalysis:
        if simulate:
            return await self._simulator.analyze(text)
        return await self._scheduler.submit(text)

    def _persist(self, state: AnalysisState) -> None:
        self._store.save(state.results, state.batches)

    def _begin(self) -> None:
        self._state = begin_analysis(self.state)
        self._in_flight += 1

    def _finish(self, state: AnalysisState) -> None:
        self._in_flight -= 1
        self._state = settle_loading(state, self._in_flight)

    def _record_failure(self, error: Exception, fallback_message: str) -> None:
        message = str(error) or fallback_message
        self._finish(fail_analysis(self._state, message))
        logger.error(f"{fallback_message}: {type(error).__name__}: {message}")
