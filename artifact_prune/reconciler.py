"""
Reconciler: diff the remote listing against the local manifest and delete orphans.

Deletes are independent. A failed delete is recorded and the run moves on;
only listing and local enumeration failures are fatal, and those happen
before anything reaches this module.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import AbstractSet, List, Optional, Union

from .remote_delete import DeleteFn, RemoteDeleteError


@dataclass(frozen=True)
class Deleted:
    """The orphan was removed from the store."""

    name: str


@dataclass(frozen=True)
class Failed:
    """The delete request for the orphan failed; the object is unchanged."""

    name: str
    reason: str


PruneOutcome = Union[Deleted, Failed]


class PruneSummary:
    """Thread-safe tally of per-object outcomes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.deleted: List[str] = []
        self.failures: List[Failed] = []
        self.skipped: List[str] = []
        self.cancelled = False

    def record(self, outcome: PruneOutcome) -> None:
        """Add one outcome (safe to call from worker threads)."""
        with self._lock:
            if isinstance(outcome, Deleted):
                self.deleted.append(outcome.name)
            else:
                self.failures.append(outcome)

    def record_skipped(self, name: str) -> None:
        """Note an orphan that was never attempted because the run was cancelled."""
        with self._lock:
            self.skipped.append(name)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def exit_code(self, fail_on_delete_errors: bool = False) -> int:
        """Return 2 if deletes failed and the caller opted into treating that as fatal."""
        if fail_on_delete_errors and self.failures:
            return 2
        return 0

    def as_dict(self) -> dict:
        """Serializable view used for reports."""
        with self._lock:
            return {
                "deleted_count": len(self.deleted),
                "failed_count": len(self.failures),
                "skipped_count": len(self.skipped),
                "cancelled": self.cancelled,
                "deleted": sorted(self.deleted),
                "failures": [{"name": f.name, "reason": f.reason} for f in sorted(self.failures, key=lambda f: f.name)],
            }


def compute_orphans(local_paths: AbstractSet[str], remote_names: AbstractSet[str]) -> frozenset[str]:
    """Return remote names with no exactly matching local path."""
    return frozenset(remote_names) - frozenset(local_paths)


class Reconciler:  # pylint: disable=too-few-public-methods
    """Deletes orphaned objects with bounded concurrency."""

    def __init__(
        self,
        delete_fn: DeleteFn,
        max_workers: int = 1,
        cancel_event: Optional[threading.Event] = None,
    ):
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.delete_fn = delete_fn
        self.max_workers = max_workers
        self.cancel_event = cancel_event or threading.Event()

    def _delete_one(self, name: str, summary: PruneSummary) -> None:
        if self.cancel_event.is_set():
            summary.record_skipped(name)
            return
        try:
            self.delete_fn(name)
        except RemoteDeleteError as exc:
            logging.error("Failed to delete %s: %s", name, exc.reason)
            summary.record(Failed(name, exc.reason))
            return
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logging.exception("Failed to delete %s", name)
            summary.record(Failed(name, repr(exc)))
            return
        print(f"Delete: {name}")
        summary.record(Deleted(name))

    def prune(self, orphans: AbstractSet[str]) -> PruneSummary:
        """
        Issue one delete per orphan and return the aggregated summary.

        Completed deletes are never rolled back. Once the cancel event is set,
        orphans that have not started are skipped; in-flight deletes finish.
        """
        summary = PruneSummary()
        if not orphans:
            logging.info("No orphaned objects; nothing to delete.")
            return summary

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self._delete_one, name, summary) for name in sorted(orphans)]
            try:
                for future in as_completed(futures):
                    future.result()
            except KeyboardInterrupt:
                logging.warning("Interrupted; finishing in-flight deletes and skipping the rest")
                self.cancel_event.set()

        summary.cancelled = self.cancel_event.is_set()
        if summary.skipped:
            logging.warning("Run cancelled; %d orphan(s) were not attempted", summary.skipped_count)
        return summary
