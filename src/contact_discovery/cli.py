"""CLI entrypoint for contact-discovery."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from .config import (
    DEFAULT_CONCURRENT_SUBLINKS,
    DEFAULT_CONCURRENT_WEBSITES,
    DEFAULT_ENGINE,
    DEFAULT_NAVIGATION_TIMEOUT,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_POOL_SIZE,
    SUPPORTED_ENGINES,
    CrawlConfig,
)
from .errors import ConfigError
from .logging_utils import configure_logging, get_logger
from .models import DomainResult
from .pipeline import run_pipeline
from .validation import ensure_scheme, load_lines_from_file


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        prog="contact-discovery",
        description="Contact Discovery Engine - find organizer/contact emails on websites.",
    )
    parser.add_argument(
        "domains",
        nargs="*",
        help="Domain names or URLs to scan (e.g., domain-1.com https://domain-2.com).",
    )
    parser.add_argument("--seeds-file", help="Path to a file with one domain or URL per line.")
    parser.add_argument(
        "--output-dir", default=DEFAULT_OUTPUT_DIR, help="Directory for JSON results."
    )
    parser.add_argument(
        "--engine",
        choices=SUPPORTED_ENGINES,
        default=DEFAULT_ENGINE,
        help="Page engine: headless Chrome via Selenium, or plain HTTP requests.",
    )
    parser.add_argument(
        "--pool-size",
        type=int,
        default=DEFAULT_POOL_SIZE,
        help="Maximum number of live browser sessions.",
    )
    parser.add_argument(
        "--concurrent-websites",
        type=int,
        default=DEFAULT_CONCURRENT_WEBSITES,
        help="Seed domains processed at once.",
    )
    parser.add_argument(
        "--concurrent-sublinks",
        type=int,
        default=DEFAULT_CONCURRENT_SUBLINKS,
        help="Sub-links of one domain extracted at once.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_NAVIGATION_TIMEOUT,
        help="Navigation timeout in seconds.",
    )
    parser.add_argument(
        "--check-mx", action="store_true", help="Annotate results with MX record checks."
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable tqdm progress bars.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse and pre-validate CLI input."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not (args.domains or args.seeds_file):
        parser.error("Please provide at least one domain or --seeds-file.")
    return args


def _materialize_seeds(args: argparse.Namespace) -> tuple[str, ...]:
    values = list(args.domains or [])
    if args.seeds_file:
        values.extend(load_lines_from_file(args.seeds_file))
    return tuple(ensure_scheme(value) for value in values)


def namespace_to_config(args: argparse.Namespace) -> CrawlConfig:
    """Convert CLI args to validated CrawlConfig."""
    return CrawlConfig(
        seeds=_materialize_seeds(args),
        output_dir=args.output_dir,
        pool_size=args.pool_size,
        concurrent_websites=args.concurrent_websites,
        concurrent_sublinks=args.concurrent_sublinks,
        navigation_timeout=args.timeout,
        engine=args.engine,
        show_progress=not args.no_progress,
        check_mx=bool(args.check_mx),
    )


def log_summary(results: list[DomainResult], logger: logging.Logger) -> None:
    """Log the final per-domain summary."""
    logger.info("Final summary")
    for result in results:
        if result.error and not result.emails:
            logger.info("%s: no emails found (Error: %s)", result.domain, result.error)
            continue
        status = f"Partial Success ({result.error})" if result.error else "Success"
        logger.info("%s: %d emails, %s", result.domain, len(result.emails), status)
        for label, items in (
            ("Primary Domain Emails", result.primary_emails),
            ("Other Emails", result.other_emails),
        ):
            if items:
                logger.info("  %s:", label)
            for item in items:
                logger.info("    %s  <- %s", item.email, item.source_link)


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose)
    logger = get_logger()
    try:
        config = namespace_to_config(args)
        results, output = run_pipeline(config, logger=logger)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    log_summary(results, logger)
    logger.info("Results saved to %s", output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
