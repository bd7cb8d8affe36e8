"""
Remote delete capability and an optional retry decoration around it.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError
from botocore.exceptions import ConnectionError as BotoConnectionError
from botocore.exceptions import ReadTimeoutError

MAX_BACKOFF_SECONDS = 60
RETRYABLE_ERROR_CODES = frozenset(
    {
        "SlowDown",
        "RequestLimitExceeded",
        "ServiceUnavailable",
        "InternalError",
        "RequestTimeout",
        "500",
        "503",
    }
)


class RemoteDeleteError(RuntimeError):
    """Raised when a single object cannot be deleted."""

    def __init__(self, name: str, reason: str, *, code: str | None = None):
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason
        self.code = code

    @property
    def retryable(self) -> bool:
        """True for throttling and transient server-side failures."""
        return self.code in RETRYABLE_ERROR_CODES


DeleteFn = Callable[[str], None]


def delete_object(s3, bucket: str, name: str) -> None:
    """
    Delete one object by key.

    Raises:
        RemoteDeleteError: If the store rejects the request or the call fails
    """
    try:
        s3.delete_object(Bucket=bucket, Key=name)
    except ClientError as exc:
        error = exc.response.get("Error", {})
        code = str(error.get("Code", "Unknown"))
        message = error.get("Message") or str(exc)
        raise RemoteDeleteError(name, f"{code} - {message}", code=code) from exc
    except (BotoConnectionError, ReadTimeoutError) as exc:
        raise RemoteDeleteError(name, str(exc), code="RequestTimeout") from exc
    except BotoCoreError as exc:
        raise RemoteDeleteError(name, str(exc), code=type(exc).__name__) from exc


def make_delete_fn(s3, bucket: str) -> DeleteFn:
    """Bind delete_object to a client and bucket."""

    def _delete(name: str) -> None:
        delete_object(s3, bucket, name)

    return _delete


def with_retries(
    delete_fn: DeleteFn,
    attempts: int,
    backoff: float,
    sleep: Callable[[float], None] = time.sleep,
) -> DeleteFn:
    """
    Wrap delete_fn so retryable failures are attempted again with exponential backoff.

    Args:
        delete_fn: The delete callable to decorate
        attempts: Number of retries after the first failure (0 returns delete_fn unchanged)
        backoff: Initial delay in seconds, doubled per retry and capped at 60s
        sleep: Sleep function (patched in tests)
    """
    if attempts <= 0:
        return delete_fn

    def _delete_with_retries(name: str) -> None:
        for retry in range(attempts + 1):
            try:
                delete_fn(name)
                return
            except RemoteDeleteError as exc:
                if not exc.retryable or retry == attempts:
                    raise
                delay = min(MAX_BACKOFF_SECONDS, backoff * (2**retry))
                logging.warning(
                    "Delete of %s throttled (%s); retry %d/%d in %.1fs",
                    name,
                    exc.code,
                    retry + 1,
                    attempts,
                    delay,
                )
                sleep(delay)

    return _delete_with_retries
