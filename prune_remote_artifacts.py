#!/usr/bin/env python3
"""
Delete objects from a bucket that have no matching file in the local build output.

This is a thin wrapper around the artifact_prune package.
"""
from __future__ import annotations

from artifact_prune.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
