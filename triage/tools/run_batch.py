"""Classify and assign every ticket of a CSV dataset.

Usage:
    python -m triage.tools.run_batch
    python -m triage.tools.run_batch --data-dir data --output data/routing_results.csv
    python -m triage.tools.run_batch --rules-only  # never call the model endpoint
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from triage.adapters.csv_loader.loader import load_dataset
from triage.adapters.export.results_writer import write_results
from triage.adapters.llm.gemini_adapter import GeminiClassifier
from triage.adapters.nlp.rule_classifier import RuleClassifier
from triage.application.use_cases.assign_ticket import AssignTicketUseCase
from triage.application.use_cases.process_ticket import BatchProcessUseCase, BatchResult, ProcessTicketUseCase
from triage.config import settings

logger = logging.getLogger(__name__)


async def run(data_dir: Path, output: Path, rules_only: bool = False) -> BatchResult:
    """Load, process and export one dataset. Raises FileNotFoundError for a missing CSV."""
    dataset = load_dataset(data_dir)
    logger.info(
        "Dataset: %d tickets, %d managers, %d offices",
        len(dataset.tickets), len(dataset.managers), len(dataset.offices),
    )

    rules = RuleClassifier()
    classifier = rules if rules_only else GeminiClassifier(fallback=rules)
    engine = AssignTicketUseCase(
        fallback_offices=settings.fallback_offices,
        home_country=settings.home_country,
    )
    process_uc = ProcessTicketUseCase(
        classifier=classifier,
        engine=engine,
        managers=dataset.managers,
        offices=dataset.offices,
        project_dir=Path(settings.project_dir),
    )

    try:
        result = await BatchProcessUseCase(process_uc).execute(dataset.tickets)
    finally:
        if isinstance(classifier, GeminiClassifier):
            await classifier.aclose()

    write_results(output, result.processed)
    return result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Classify and route tickets from CSV files")
    parser.add_argument("--data-dir", type=Path, default=Path(settings.csv_data_path))
    parser.add_argument("--output", type=Path, default=Path(settings.results_path))
    parser.add_argument("--rules-only", action="store_true", help="Skip the model endpoint")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(levelname)s | %(message)s",
    )

    try:
        result = asyncio.run(run(args.data_dir, args.output, rules_only=args.rules_only))
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1

    logger.info(
        "Done: %d/%d tickets, %d assigned, %d unassigned → %s",
        len(result.processed), result.total_input, result.assigned, result.unassigned, args.output,
    )
    if result.aborted:
        logger.error("Batch aborted: %s", result.error)
    return 0


if __name__ == "__main__":
    sys.exit(main())
