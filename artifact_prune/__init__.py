"""
Remote artifact pruning package.

Delete objects from a bucket that no longer have a matching file in the local
build output.
"""

from . import (
    args_parser,
    cli,
    client_factory,
    config,
    local_manifest,
    reconciler,
    remote_delete,
    remote_listing,
    reports,
    runner,
)
from .config import ConfigurationError, PruneConfig, RemoteCredentials
from .local_manifest import LocalEnumerationError, build_local_manifest
from .reconciler import Deleted, Failed, PruneSummary, Reconciler, compute_orphans
from .remote_delete import RemoteDeleteError, delete_object, with_retries
from .remote_listing import RemoteListError, RemoteObjectRecord, RunCancelled, walk_remote_objects
from .runner import PruneReport, PruneRun, RunState

__all__ = [
    "ConfigurationError",
    "Deleted",
    "Failed",
    "LocalEnumerationError",
    "PruneConfig",
    "PruneReport",
    "PruneRun",
    "PruneSummary",
    "Reconciler",
    "RemoteCredentials",
    "RemoteDeleteError",
    "RemoteListError",
    "RemoteObjectRecord",
    "RunCancelled",
    "RunState",
    "args_parser",
    "build_local_manifest",
    "cli",
    "client_factory",
    "compute_orphans",
    "config",
    "delete_object",
    "local_manifest",
    "reconciler",
    "remote_delete",
    "remote_listing",
    "reports",
    "runner",
    "walk_remote_objects",
    "with_retries",
]
