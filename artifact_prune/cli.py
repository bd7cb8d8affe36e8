"""
Command-line interface and main entry point for artifact_prune.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

from .args_parser import parse_args
from .client_factory import create_s3_client
from .config import ConfigurationError, PruneConfig, load_credentials_from_env, load_prune_config
from .local_manifest import LocalEnumerationError
from .remote_listing import RemoteListError, RunCancelled
from .reports import print_summary, write_report_json
from .runner import PruneReport, PruneRun

INTERRUPTED_EXIT_CODE = 130


def _config_overrides(args: argparse.Namespace) -> dict:
    return {
        "bucket": args.bucket,
        "local_root": args.local_root,
        "region": args.region,
        "endpoint_url": args.endpoint_url,
        "key_prefix": args.key_prefix,
        "page_size": args.page_size,
        "max_workers": args.max_workers,
        "delete_retries": args.delete_retries,
        "retry_backoff": args.retry_backoff,
        "timeout": args.timeout,
        "dry_run": args.dry_run,
        "fail_on_delete_errors": args.fail_on_delete_errors,
    }


class InterruptHandler:
    """Turns Ctrl-C into a cancel request so the run can stop cleanly."""

    def __init__(self, cancel_event: threading.Event):
        self.cancel_event = cancel_event
        self.interrupted = False
        self._previous_handler = None

    def __enter__(self) -> "InterruptHandler":
        self._previous_handler = signal.signal(signal.SIGINT, self._signal_handler)
        return self

    def __exit__(self, *_exc_info) -> None:
        signal.signal(signal.SIGINT, self._previous_handler)

    def _signal_handler(self, _signum, _frame):
        """Set the cancel event on the first Ctrl-C; a second one stops immediately."""
        if self.interrupted:
            raise KeyboardInterrupt
        print("\nInterrupt received; finishing in-flight deletes and skipping the rest.", file=sys.stderr)
        self.interrupted = True
        self.cancel_event.set()


def _run(config: PruneConfig, s3, cancel_event: threading.Event) -> PruneReport | int:
    """Execute the run, mapping fatal errors to exit code 1."""
    try:
        return PruneRun(config, s3, cancel_event=cancel_event).execute()
    except LocalEnumerationError as exc:
        logging.error("Local enumeration failed: %s", exc)
    except RemoteListError as exc:
        logging.error("Remote listing failed; nothing was deleted: %s", exc)
    except RunCancelled as exc:
        logging.error("%s", exc)
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the artifact_prune CLI."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    try:
        config = load_prune_config(_config_overrides(args))
        credentials = load_credentials_from_env(args.env_file)
        s3 = create_s3_client(config, credentials)
    except (ConfigurationError, ValueError) as exc:
        logging.error("%s", exc)
        return 1

    cancel_event = threading.Event()
    with InterruptHandler(cancel_event) as interrupt:
        try:
            result = _run(config, s3, cancel_event)
        except KeyboardInterrupt:
            print("\nInterrupted; deletes already issued are not undone.", file=sys.stderr)
            return INTERRUPTED_EXIT_CODE
    if isinstance(result, int):
        return INTERRUPTED_EXIT_CODE if interrupt.interrupted else result

    print_summary(result)
    if args.report_json:
        write_report_json(result, args.report_json)
    if interrupt.interrupted:
        return INTERRUPTED_EXIT_CODE
    return result.summary.exit_code(config.fail_on_delete_errors)
