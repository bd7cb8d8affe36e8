"""
Prune run driver: enumerate local, enumerate remote, diff, delete.

Local enumeration runs first so a broken build tree aborts the run before a
single request reaches the object store.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .config import PruneConfig
from .local_manifest import build_local_manifest, to_remote_key
from .reconciler import PruneSummary, Reconciler, compute_orphans
from .remote_delete import DeleteFn, make_delete_fn, with_retries
from .remote_listing import RunCancelled, listing_prefix, remote_names, walk_remote_objects


class RunState(Enum):
    """Phases of a single prune run."""

    IDLE = "idle"
    ENUMERATING_LOCAL = "enumerating_local"
    ENUMERATING_REMOTE = "enumerating_remote"
    DIFFING = "diffing"
    DELETING = "deleting"
    DONE = "done"


_ALLOWED_TRANSITIONS = {
    RunState.IDLE: {RunState.ENUMERATING_LOCAL},
    RunState.ENUMERATING_LOCAL: {RunState.ENUMERATING_REMOTE},
    RunState.ENUMERATING_REMOTE: {RunState.DIFFING},
    RunState.DIFFING: {RunState.DELETING, RunState.DONE},
    RunState.DELETING: {RunState.DONE},
    RunState.DONE: set(),
}


class InvalidTransitionError(RuntimeError):
    """Raised when a run is driven out of order."""


@dataclass
class PruneReport:
    """Outcome of one prune run."""

    bucket: str
    local_count: int
    remote_count: int
    orphans: Tuple[str, ...]
    summary: PruneSummary = field(default_factory=PruneSummary)
    dry_run: bool = False

    @property
    def orphan_count(self) -> int:
        return len(self.orphans)


class PruneRun:
    """Drives one prune run through its states."""

    def __init__(
        self,
        config: PruneConfig,
        s3,
        *,
        cancel_event: Optional[threading.Event] = None,
        delete_fn: Optional[DeleteFn] = None,
    ):
        self.config = config
        self.s3 = s3
        self.cancel_event = cancel_event or threading.Event()
        if delete_fn is None:
            delete_fn = make_delete_fn(s3, config.bucket)
        self.delete_fn = with_retries(delete_fn, config.delete_retries, config.retry_backoff)
        self.state = RunState.IDLE

    def _advance(self, new_state: RunState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"Cannot move from {self.state.value} to {new_state.value}")
        logging.debug("Prune run: %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def _check_cancelled(self, phase: str) -> None:
        if self.cancel_event.is_set():
            raise RunCancelled(f"Prune run cancelled during {phase}; nothing was deleted")

    def _arm_timeout(self) -> Optional[threading.Timer]:
        if self.config.timeout is None:
            return None
        timer = threading.Timer(self.config.timeout, self._on_timeout)
        timer.daemon = True
        timer.start()
        return timer

    def _on_timeout(self) -> None:
        logging.warning("Prune run timed out after %.1fs; stopping", self.config.timeout)
        self.cancel_event.set()

    def execute(self) -> PruneReport:
        """
        Run all phases and return the report.

        Raises:
            LocalEnumerationError: If the local build tree cannot be read
            RemoteListError: If any page of the remote listing fails
            RunCancelled: If cancelled or timed out before deletion started
        """
        config = self.config
        timer = self._arm_timeout()
        try:
            self._advance(RunState.ENUMERATING_LOCAL)
            local_paths = build_local_manifest(config.local_root)
            local_keys = frozenset(to_remote_key(path, config.key_prefix) for path in local_paths)
            self._check_cancelled("local enumeration")

            self._advance(RunState.ENUMERATING_REMOTE)
            records = walk_remote_objects(
                self.s3,
                config.bucket,
                config.page_size,
                prefix=listing_prefix(config.key_prefix),
                cancel_event=self.cancel_event,
            )
            names = remote_names(records)
            self._check_cancelled("remote listing")

            self._advance(RunState.DIFFING)
            orphans = compute_orphans(local_keys, names)
            report = PruneReport(
                bucket=config.bucket,
                local_count=len(local_keys),
                remote_count=len(names),
                orphans=tuple(sorted(orphans)),
                dry_run=config.dry_run,
            )
            logging.info(
                "%d local file(s), %d remote object(s), %d orphan(s)",
                report.local_count,
                report.remote_count,
                report.orphan_count,
            )

            if config.dry_run:
                for name in report.orphans:
                    print(f"Would delete: {name}")
                self._advance(RunState.DONE)
                return report

            self._advance(RunState.DELETING)
            reconciler = Reconciler(self.delete_fn, config.max_workers, self.cancel_event)
            report.summary = reconciler.prune(orphans)
            self._advance(RunState.DONE)
            return report
        finally:
            if timer is not None:
                timer.cancel()
