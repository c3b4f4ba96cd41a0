"""Command-line entry point: enrich a CSV file of company URLs."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import get_settings
from .exceptions import EnrichmentError
from .pipeline import EnrichmentPipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="company-enrichment",
        description="Enrich a spreadsheet of company URLs with provider data",
    )
    parser.add_argument("input_file", help="CSV file with a company_url column")
    parser.add_argument(
        "--output",
        "-o",
        help="Output CSV file (default: <input>_enriched.csv)",
    )
    parser.add_argument("--email", help="Also email the report to this address")
    return parser


def default_output_path(input_file: str) -> Path:
    path = Path(input_file)
    return path.with_name(f"{path.stem}_enriched.csv")


async def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for one enrichment run.

    Returns:
        Process exit code (0 for success, 1 for failure).
    """
    args = build_parser().parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=settings.log_format,
    )
    settings.log_configuration()

    input_path = Path(args.input_file)
    if not input_path.is_file():
        logger.error(f"Input file not found: {input_path}")
        return 1
    output_path = Path(args.output) if args.output else default_output_path(args.input_file)

    try:
        async with EnrichmentPipeline(settings) as pipeline:
            report = await pipeline.run(input_path.read_bytes(), email=args.email)
    except EnrichmentError as e:
        logger.error(f"Enrichment failed: {e}")
        return 1

    output_path.write_bytes(report)
    logger.info(f"Report written to {output_path}")
    return 0


def run() -> None:
    """Console-script wrapper around main()."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":  # pragma: no cover
    run()
