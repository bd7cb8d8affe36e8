"""
Remote listing walker.

Follows list_objects_v2 continuation tokens in a plain loop until the store
reports the last page. Any page failure aborts the walk: pruning against a
partial listing could delete objects that are still in use.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from botocore.exceptions import BotoCoreError, ClientError


class RemoteListError(RuntimeError):
    """Raised when a page of the remote listing cannot be fetched."""


class RunCancelled(RuntimeError):
    """Raised when a prune run is cancelled before deletion starts."""


@dataclass(frozen=True)
class RemoteObjectRecord:
    """One object as reported by the listing; only the name is compared."""

    name: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None


@dataclass(frozen=True)
class ListPage:
    """A single listing page and the cursor for the next one (None on the last page)."""

    objects: List[RemoteObjectRecord]
    continuation_token: Optional[str]


def listing_prefix(prefix: str) -> str:
    """Return the Prefix filter for a key prefix, anchored at a '/' boundary."""
    stripped = prefix.strip("/")
    return f"{stripped}/" if stripped else ""


def fetch_page(
    s3,
    bucket: str,
    max_keys: int,
    continuation_token: Optional[str] = None,
    prefix: str = "",
) -> ListPage:
    """
    Fetch one page of the bucket listing.

    Raises:
        RemoteListError: On any client/network error, or when the store reports
            a truncated page without a continuation token
    """
    request = {"Bucket": bucket, "MaxKeys": max_keys}
    if continuation_token:
        request["ContinuationToken"] = continuation_token
    if prefix:
        request["Prefix"] = prefix

    try:
        response = s3.list_objects_v2(**request)
    except ClientError as exc:
        error_code = exc.response.get("Error", {}).get("Code", "Unknown")
        raise RemoteListError(
            f"Listing {bucket} failed at cursor {continuation_token!r}: {error_code} - {exc}"
        ) from exc
    except BotoCoreError as exc:
        raise RemoteListError(f"Listing {bucket} failed at cursor {continuation_token!r}: {exc}") from exc

    objects = [
        RemoteObjectRecord(
            name=obj["Key"],
            size=obj.get("Size"),
            last_modified=obj.get("LastModified"),
        )
        for obj in response.get("Contents", [])
    ]

    next_token = response.get("NextContinuationToken")
    if response.get("IsTruncated") and not next_token:
        raise RemoteListError(f"Listing {bucket} is truncated but no continuation token was returned")
    if not response.get("IsTruncated", bool(next_token)):
        next_token = None
    return ListPage(objects=objects, continuation_token=next_token)


def walk_remote_objects(
    s3,
    bucket: str,
    page_size: int,
    *,
    prefix: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> List[RemoteObjectRecord]:
    """
    Return every object in the bucket (or under prefix), following all pages.

    Raises:
        ValueError: If page_size is not positive
        RemoteListError: If any page fails or the store repeats a cursor
        RunCancelled: If cancel_event is set between pages
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    records: List[RemoteObjectRecord] = []
    seen_tokens: set[str] = set()
    cursor: Optional[str] = None
    pages = 0

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise RunCancelled(f"Remote listing of {bucket} cancelled after {pages} page(s)")

        page = fetch_page(s3, bucket, page_size, cursor, prefix)
        records.extend(page.objects)
        pages += 1
        logging.debug("Listed page %d of %s: %d object(s)", pages, bucket, len(page.objects))

        cursor = page.continuation_token
        if cursor is None:
            break
        if cursor in seen_tokens:
            raise RemoteListError(f"Listing {bucket} returned a repeated continuation token")
        seen_tokens.add(cursor)

    logging.info("Remote listing: %d object(s) in %s across %d page(s)", len(records), bucket, pages)
    return records


def remote_names(records: Iterable[RemoteObjectRecord]) -> frozenset[str]:
    """Collapse listing records into the set of object names."""
    return frozenset(record.name for record in records)
