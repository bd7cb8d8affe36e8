"""
Local manifest builder: every regular file under the build output directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath


class LocalEnumerationError(OSError):
    """Raised when the local build tree cannot be fully enumerated."""


def _raise_walk_error(exc: OSError) -> None:
    raise LocalEnumerationError(f"Cannot read {exc.filename}: {exc.strerror}") from exc


def build_local_manifest(root: Path | str) -> frozenset[str]:
    """
    Return forward-slash relative paths for all regular files under root.

    Directory symlinks are not followed. File symlinks count under their link
    path when they resolve to a regular file; dangling links are skipped.

    Raises:
        LocalEnumerationError: If root is missing, not a directory, or any
            directory below it cannot be read
    """
    root_path = Path(root).expanduser()
    if not root_path.exists():
        raise LocalEnumerationError(f"Local root {root_path} does not exist")
    if not root_path.is_dir():
        raise LocalEnumerationError(f"Local root {root_path} is not a directory")
    if not os.access(root_path, os.R_OK | os.X_OK):
        raise LocalEnumerationError(f"Local root {root_path} is not readable")

    manifest: set[str] = set()
    for dirpath, _dirnames, filenames in os.walk(root_path, onerror=_raise_walk_error):
        current = Path(dirpath)
        for name in filenames:
            file_path = current / name
            if not file_path.is_file():
                logging.debug("Skipping non-regular entry %s", file_path)
                continue
            manifest.add(file_path.relative_to(root_path).as_posix())

    logging.info("Local manifest: %d file(s) under %s", len(manifest), root_path)
    return frozenset(manifest)


def to_remote_key(relative_path: str, prefix: str = "") -> str:
    """Map a manifest path onto the remote key space under an optional prefix."""
    if not prefix:
        return relative_path
    return str(PurePosixPath(prefix.strip("/")) / relative_path)
