"""
Sentiment Analysis - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line access to the analysis orchestrator.

- argparse sub-commands for analysis and history management
- Configuration from environment, overridable per flag
- Plain-text output

============================================================
USAGE
============================================================
python -m sentiment_analysis analyze "What a wonderful day"
python -m sentiment_analysis batch --name reviews --file reviews.txt
python -m sentiment_analysis history --sentiment negative
python -m sentiment_analysis stats

============================================================
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .analytics import compute_analytics, filter_batches, filter_results
from .config import AnalyzerConfig
from .exceptions import SentimentAnalysisError
from .models import BatchResult, Sentiment, SentimentResult
from .orchestrator import AnalysisOrchestrator


logger = logging.getLogger(__name__)


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sentiment-analysis",
        description="Analyze text sentiment with the Hugging Face Inference API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Without a valid HUGGINGFACE_API_KEY (starting with "hf_") every
analysis runs through the offline demo simulator.

Examples:
  %(prog)s analyze "This is an amazing and wonderful product"
  %(prog)s batch --name reviews "good movie" "terrible film"
  %(prog)s batch --name reviews --file reviews.txt --demo
  %(prog)s history --search movie --sentiment positive
        """
    )

    parser.add_argument(
        "--storage-dir",
        type=str,
        metavar="PATH",
        help="Directory for persisted results (default: SENTIMENT_STORAGE_DIR)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: LOG_LEVEL or WARNING)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version="%(prog)s 1.0.0",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --------------------------------------------------------
    # Analysis
    # --------------------------------------------------------
    analyze = subparsers.add_parser("analyze", help="Analyze a single text")
    analyze.add_argument("text", help="Text to analyze")
    analyze.add_argument("--demo", action="store_true", help="Force the demo simulator")

    batch = subparsers.add_parser("batch", help="Analyze several texts as a named batch")
    batch.add_argument("texts", nargs="*", help="Texts to analyze")
    batch.add_argument("--name", required=True, help="Batch name")
    batch.add_argument("--file", type=str, metavar="PATH", help="Newline-delimited text file")
    batch.add_argument("--demo", action="store_true", help="Force the demo simulator")

    # --------------------------------------------------------
    # History
    # --------------------------------------------------------
    history = subparsers.add_parser("history", help="List stored results and batches")
    history.add_argument("--search", default="", help="Case-insensitive text/name filter")
    history.add_argument(
        "--sentiment",
        choices=[s.value for s in Sentiment],
        help="Only show results with this sentiment",
    )
    history.add_argument("--batches", action="store_true", help="List batches instead of results")

    subparsers.add_parser("stats", help="Show aggregate statistics")

    delete_result = subparsers.add_parser("delete-result", help="Delete one result")
    delete_result.add_argument("id")

    delete_batch = subparsers.add_parser("delete-batch", help="Delete a batch and its results")
    delete_batch.add_argument("id")

    subparsers.add_parser("clear", help="Delete all results and batches")
    subparsers.add_parser("test-connection", help="Check the API key against the live endpoint")

    return parser


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace) -> AnalyzerConfig:
    config = AnalyzerConfig.from_env()
    if args.storage_dir:
        config.storage_dir = Path(args.storage_dir).expanduser()
    return config


def read_batch_texts(args: argparse.Namespace) -> List[str]:
    texts = list(args.texts)
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            texts.extend(line.strip() for line in f)
    return [t for t in texts if t.strip()]


# ============================================================
# OUTPUT
# ============================================================

def format_result(result: SentimentResult) -> str:
    scores = result.scores
    lines = [
        f"[{result.id}] {result.sentiment.value.upper()} ({result.confidence * 100:.1f}%)",
        f"  text: {result.text}",
        f"  scores: positive={scores.positive:.3f} negative={scores.negative:.3f} "
        f"neutral={scores.neutral:.3f}",
    ]
    if result.keywords:
        lines.append("  keywords: " + ", ".join(k.word for k in result.keywords))
    if result.explanation:
        lines.append(f"  {result.explanation}")
    return "\n".join(lines)


def format_batch(batch: BatchResult) -> str:
    s = batch.summary
    return (
        f"[{batch.id}] {batch.name}: {s.total_texts} texts, "
        f"{s.positive_count} positive / {s.negative_count} negative / "
        f"{s.neutral_count} neutral, avg confidence {s.average_confidence * 100:.1f}%"
    )


# ============================================================
# COMMANDS
# ============================================================

async def run_command(args: argparse.Namespace, orchestrator: AnalysisOrchestrator) -> int:
    command = args.command

    if command == "analyze":
        result = await orchestrator.analyze_one(args.text, True if args.demo else None)
        print(format_result(result))

    elif command == "batch":
        texts = read_batch_texts(args)
        batch = await orchestrator.analyze_batch(texts, args.name, True if args.demo else None)
        print(format_batch(batch))
        for result in orchestrator.get_batch_results(batch.id):
            print(format_result(result))

    elif command == "history":
        state = orchestrator.state
        if args.batches:
            for batch in filter_batches(state.batches, args.search):
                print(format_batch(batch))
        else:
            sentiment = Sentiment(args.sentiment) if args.sentiment else None
            for result in filter_results(state.results, args.search, sentiment):
                print(format_result(result))

    elif command == "stats":
        report = compute_analytics(orchestrator.state.results)
        if report is None:
            print("No results yet.")
            return 0
        print(f"Total results: {report.total}")
        print(f"Average confidence: {report.average_confidence * 100:.1f}%")
        for sentiment in Sentiment:
            print(
                f"  {sentiment.value:8s} {report.sentiment_counts[sentiment]:5d} "
                f"({report.sentiment_percentages[sentiment]:.1f}%), "
                f"avg confidence {report.confidence_by_sentiment[sentiment] * 100:.1f}%"
            )
        if report.top_keywords:
            print("Top keywords: " + ", ".join(
                f"{k.word} ({k.count})" for k in report.top_keywords
            ))

    elif command == "delete-result":
        if not orchestrator.delete_result(args.id):
            print(f"Result not found: {args.id}", file=sys.stderr)
            return 1

    elif command == "delete-batch":
        if not orchestrator.delete_batch(args.id):
            print(f"Batch not found: {args.id}", file=sys.stderr)
            return 1

    elif command == "clear":
        orchestrator.clear_all()

    elif command == "test-connection":
        await orchestrator.test_connection()
        print("Connection OK")

    return 0


async def async_main(args: argparse.Namespace) -> int:
    config = build_config(args)
    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    orchestrator = AnalysisOrchestrator(config=config)

    if not config.has_live_credentials and args.command in ("analyze", "batch"):
        logger.info("No valid API key configured, using demo mode")

    try:
        return await run_command(args, orchestrator)
    except (SentimentAnalysisError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await orchestrator.close()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level or os.getenv("LOG_LEVEL", "WARNING").upper(),
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    return asyncio.run(async_main(args))


if __name__ == "__main__":
    sys.exit(main())
