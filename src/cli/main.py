"""ENPA ingestion CLI entry points.

This module maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Sequence

from core.constants import (
    DEFAULT_HEADER_OUTPUT,
    DEFAULT_MIN_BATCH_SIZE,
    SOURCE_KIND_JSONL,
    SUPPORTED_SOURCE_KINDS,
)
from core.errors import EnpaError
from core.run_config import load_run_config
from core.types import IngestionOptions, IngestionSummary
from ingest.ingestion_sdk import IngestionClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="enpa-ingest",
        description="Batch ENPA data shares for the PHA and Facilitator servers",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_run_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ingestion CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "run":
        return _run_ingestion_command(parser, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_ingestion_command(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    """Handle run command.

    Args:
        parser: Parser used to report usage errors.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    try:
        options = _build_options(parser, args)
        summary = IngestionClient().run(options)
    except EnpaError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    _print_summary(summary)
    return 0


def _build_options(parser: argparse.ArgumentParser, args: argparse.Namespace) -> IngestionOptions:
    if args.config:
        return load_run_config(args.config)
    missing = [
        flag
        for flag, value in (
            ("--metric", args.metric),
            ("--start-time", args.start_time),
            ("--duration", args.duration),
            ("--pha-output", args.pha_output),
            ("--facilitator-output", args.facilitator_output),
        )
        if value is None
    ]
    if missing:
        parser.error(f"the following arguments are required without --config: {', '.join(missing)}")
    return IngestionOptions(
        metrics=tuple(args.metric),
        start_time=args.start_time,
        duration=args.duration,
        pha_output=args.pha_output,
        facilitator_output=args.facilitator_output,
        header_output=args.header_output,
        source_uri=args.source,
        source_kind=args.source_kind,
        min_batch_size=args.min_batch_size,
    )


def _print_summary(summary: IngestionSummary) -> None:
    for batch in summary.batches:
        print(
            f"{batch.metric}\t"
            f"{batch.share_count}\t"
            f"{batch.pha_path}\t"
            f"{batch.facilitator_path}\t"
            f"{batch.header_path or '-'}"
        )
    for name, value in sorted(summary.counters.items()):
        print(f"{name}={value}")


def _add_run_command(subparsers: Any) -> None:
    """Register run subcommand."""
    parser = subparsers.add_parser("run", help="Filter, split, and write one ingestion window")
    parser.add_argument("--config", help="YAML run config; other run flags are ignored")
    parser.add_argument(
        "--metric",
        action="append",
        help="Metric name to batch; repeat for several metrics",
    )
    parser.add_argument("--start-time", type=int, help="Window start, epoch seconds")
    parser.add_argument("--duration", type=int, help="Window length in seconds")
    parser.add_argument("--pha-output", help="Path or s3:// prefix for PHA packet files")
    parser.add_argument(
        "--facilitator-output",
        help="Path or s3:// prefix for Facilitator packet files",
    )
    parser.add_argument(
        "--header-output",
        default=DEFAULT_HEADER_OUTPUT,
        help="Path or s3:// prefix for batch header files",
    )
    parser.add_argument("--source", help="Document export file, directory, or s3://bucket/prefix")
    parser.add_argument(
        "--source-kind",
        default=SOURCE_KIND_JSONL,
        choices=SUPPORTED_SOURCE_KINDS,
        help="Document source implementation",
    )
    parser.add_argument(
        "--min-batch-size",
        type=int,
        default=DEFAULT_MIN_BATCH_SIZE,
        help="Withhold batches with fewer shares; 0 disables",
    )
