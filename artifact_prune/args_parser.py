"""
Argument parsing for the artifact_prune CLI.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from .config import DEFAULT_LOCAL_ROOT, DEFAULT_MAX_WORKERS, DEFAULT_PAGE_SIZE


def add_target_arguments(parser: argparse.ArgumentParser) -> None:
    """Add bucket, endpoint and local root arguments."""
    parser.add_argument("--bucket", help="Bucket to prune (default: $PRUNE_BUCKET).")
    parser.add_argument(
        "--local-root",
        help=f"Build output directory to preserve (default: $PRUNE_LOCAL_ROOT or {DEFAULT_LOCAL_ROOT}).",
    )
    parser.add_argument("--region", help="Region name (default: $PRUNE_REGION).")
    parser.add_argument(
        "--endpoint-url",
        help="S3-compatible endpoint, e.g. https://oss-cn-hangzhou.aliyuncs.com (default: $PRUNE_ENDPOINT_URL).",
    )
    parser.add_argument(
        "--prefix",
        dest="key_prefix",
        help="Only prune keys under this prefix; local paths are published beneath it.",
    )
    parser.add_argument("--env-file", help="Path to a .env file with credentials (default: $PRUNE_ENV_FILE or ~/.env).")


def add_tuning_arguments(parser: argparse.ArgumentParser) -> None:
    """Add paging, concurrency, retry and timeout arguments."""
    parser.add_argument(
        "--page-size",
        type=int,
        help=f"Objects requested per listing page (default: {DEFAULT_PAGE_SIZE}).",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        help=f"Concurrent delete requests (default: {DEFAULT_MAX_WORKERS}).",
    )
    parser.add_argument(
        "--retries",
        dest="delete_retries",
        type=int,
        default=0,
        help="Retry throttled or transient delete failures this many times (default: 0).",
    )
    parser.add_argument(
        "--retry-backoff",
        type=float,
        help="Initial retry delay in seconds, doubled per retry (default: 1.0).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Stop issuing requests after SECONDS; deletes already sent are not undone.",
    )


def add_action_arguments(parser: argparse.ArgumentParser) -> None:
    """Add dry-run, failure policy and output arguments."""
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List orphaned objects without deleting them.",
    )
    parser.add_argument(
        "--fail-on-delete-errors",
        action="store_true",
        help="Exit with status 2 if any delete failed (default: report only).",
    )
    parser.add_argument("--report-json", type=Path, help="Optional path to write the run report as JSON.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")


def create_parser() -> argparse.ArgumentParser:
    """Build the artifact_prune argument parser."""
    parser = argparse.ArgumentParser(
        description="Delete remote objects that no longer have a matching file in the local build output.",
    )
    add_target_arguments(parser)
    add_tuning_arguments(parser)
    add_action_arguments(parser)
    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse and validate command-line arguments."""
    parser = create_parser()
    args = parser.parse_args(argv)
    if args.page_size is not None and args.page_size <= 0:
        parser.error("--page-size must be positive.")
    if args.max_workers is not None and args.max_workers <= 0:
        parser.error("--max-workers must be positive.")
    if args.delete_retries < 0:
        parser.error("--retries must be >= 0.")
    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be positive.")
    return args
