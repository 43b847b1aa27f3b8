#!/usr/bin/env python3

import argparse
import sys
import time
from typing import List, Optional

from colored_logger import setup_colored_logging, get_colored_logger
from processing.site_builder import BuildReport, SiteBuilder
from settings import Settings

logger = get_colored_logger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Orchestrates the build:
    1. Parse CLI args
    2. Load settings
    3. Build every article and publish the search index
    4. Report the outcome as an exit code
    """
    args = _parse_cli_args(argv)
    setup_colored_logging(level="DEBUG" if args.verbose else "INFO")

    settings = Settings(args.settings)
    builder = SiteBuilder(settings, articles_dir=args.articles, output_dir=args.output)

    start_time = time.time()
    report = builder.build(today=args.date)
    elapsed = time.time() - start_time
    logger.info("Finished in %.2f seconds", elapsed)

    return _exit_code(report, args.strict)


def _parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses and returns the command-line arguments.
    """
    parser = argparse.ArgumentParser(
        prog="dse-build",
        description="Build annotated study articles into HTML pages and a search index",
    )
    parser.add_argument("--articles", help="Directory of .md articles (default: from settings)")
    parser.add_argument("--output", help="Output directory (default: from settings)")
    parser.add_argument("--settings", help="Settings file (.json, .yml or .yaml)")
    parser.add_argument("--date", help="Update date stamped on pages and index (YYYY-MM-DD)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Also fail when annotation blocks were left as plain text",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def _exit_code(report: BuildReport, strict: bool) -> int:
    if not report.succeeded:
        return 1
    if strict and report.block_error_count:
        logger.failure("Strict mode: %d annotation block(s) failed to parse", report.block_error_count)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
