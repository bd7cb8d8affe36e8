"""
Configuration and credential loading for artifact_prune.

Everything a prune run needs is collected once into a PruneConfig and handed
down explicitly; nothing below reads settings from module globals.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_LOCAL_ROOT = "./build"
DEFAULT_PAGE_SIZE = 160
DEFAULT_MAX_WORKERS = 8
DEFAULT_RETRY_BACKOFF = 1.0


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class RemoteCredentials:
    """Access keys for the object store."""

    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class PruneConfig:  # pylint: disable=too-many-instance-attributes
    """Settings for a single prune run."""

    bucket: str
    local_root: Path
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    key_prefix: str = ""
    page_size: int = DEFAULT_PAGE_SIZE
    max_workers: int = DEFAULT_MAX_WORKERS
    delete_retries: int = 0
    retry_backoff: float = DEFAULT_RETRY_BACKOFF
    timeout: Optional[float] = None
    dry_run: bool = False
    fail_on_delete_errors: bool = False


def _resolve_env_path(env_path: Optional[str] = None) -> str:
    """
    Determine which .env file should be used for credentials.

    Priority order:
      1. Explicit parameter
      2. PRUNE_ENV_FILE environment variable
      3. ~/.env
    """
    if env_path:
        return env_path
    prune_env_file = os.environ.get("PRUNE_ENV_FILE")
    if prune_env_file:
        return prune_env_file
    return str(Path.home() / ".env")


def load_credentials_from_env(env_path: Optional[str] = None) -> RemoteCredentials:
    """
    Load object store credentials from a .env file and the process environment.

    The AWS_* names are preferred; ACCESS_KEY_ID / ACCESS_KEY_SECRET are accepted
    for deploy scripts written against the OSS SDK.

    Raises:
        ConfigurationError: If no access key pair can be found
    """
    resolved_path = _resolve_env_path(env_path)
    load_dotenv(resolved_path)

    access_key_id = os.getenv("AWS_ACCESS_KEY_ID") or os.getenv("ACCESS_KEY_ID")
    secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY") or os.getenv("ACCESS_KEY_SECRET")
    session_token = os.getenv("AWS_SESSION_TOKEN")
    if access_key_id and secret_access_key:
        logging.debug("Credentials loaded (env file %s)", resolved_path)
        return RemoteCredentials(access_key_id, secret_access_key, session_token or None)

    raise ConfigurationError(f"Object store credentials not found in environment or {resolved_path}")


def _pick(overrides: Mapping[str, object], environ: Mapping[str, str], key: str, env_name: str):
    value = overrides.get(key)
    if value is not None:
        return value
    env_value = environ.get(env_name)
    if env_value:
        return env_value
    return None


def _positive_int(value, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None
    if number <= 0:
        raise ConfigurationError(f"{name} must be positive, got {number}")
    return number


def load_prune_config(
    overrides: Mapping[str, object],
    environ: Optional[Mapping[str, str]] = None,
) -> PruneConfig:
    """
    Build a PruneConfig from CLI overrides, falling back to PRUNE_* variables.

    Args:
        overrides: Values supplied on the command line (None means "not given")
        environ: Environment mapping (defaults to os.environ)

    Raises:
        ConfigurationError: If the bucket is missing or a numeric setting is invalid
    """
    environ = os.environ if environ is None else environ

    bucket = _pick(overrides, environ, "bucket", "PRUNE_BUCKET")
    if not bucket:
        raise ConfigurationError("A bucket is required (--bucket or PRUNE_BUCKET).")

    local_root = _pick(overrides, environ, "local_root", "PRUNE_LOCAL_ROOT") or DEFAULT_LOCAL_ROOT
    page_size = _pick(overrides, environ, "page_size", "PRUNE_PAGE_SIZE")
    page_size = DEFAULT_PAGE_SIZE if page_size is None else _positive_int(page_size, "page size")
    max_workers = _pick(overrides, environ, "max_workers", "PRUNE_MAX_WORKERS")
    max_workers = DEFAULT_MAX_WORKERS if max_workers is None else _positive_int(max_workers, "max workers")

    delete_retries = int(overrides.get("delete_retries") or 0)
    if delete_retries < 0:
        raise ConfigurationError(f"retries must be >= 0, got {delete_retries}")

    retry_backoff = overrides.get("retry_backoff")
    retry_backoff = DEFAULT_RETRY_BACKOFF if retry_backoff is None else float(retry_backoff)
    if retry_backoff < 0:
        raise ConfigurationError(f"retry backoff must be >= 0, got {retry_backoff}")

    timeout = overrides.get("timeout")
    if timeout is not None:
        timeout = float(timeout)
        if timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {timeout}")

    return PruneConfig(
        bucket=str(bucket),
        local_root=Path(str(local_root)).expanduser(),
        region=_pick(overrides, environ, "region", "PRUNE_REGION"),
        endpoint_url=_pick(overrides, environ, "endpoint_url", "PRUNE_ENDPOINT_URL"),
        key_prefix=str(_pick(overrides, environ, "key_prefix", "PRUNE_KEY_PREFIX") or ""),
        page_size=page_size,
        max_workers=max_workers,
        delete_retries=delete_retries,
        retry_backoff=retry_backoff,
        timeout=timeout,
        dry_run=bool(overrides.get("dry_run", False)),
        fail_on_delete_errors=bool(overrides.get("fail_on_delete_errors", False)),
    )
