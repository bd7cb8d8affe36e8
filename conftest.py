"""Pytest configuration and shared fixtures for artifact_prune."""

# pylint: disable=wrong-import-position

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from artifact_prune.config import PruneConfig
from tests.s3_stub import InMemoryBucket


@pytest.fixture(autouse=True)
def mock_env_file(tmp_path_factory, monkeypatch):
    """Point PRUNE_ENV_FILE at a temporary .env with fake credentials and clear PRUNE_* overrides."""
    for name in (
        "PRUNE_BUCKET",
        "PRUNE_LOCAL_ROOT",
        "PRUNE_REGION",
        "PRUNE_ENDPOINT_URL",
        "PRUNE_KEY_PREFIX",
        "PRUNE_PAGE_SIZE",
        "PRUNE_MAX_WORKERS",
        "ACCESS_KEY_ID",
        "ACCESS_KEY_SECRET",
        "AWS_SESSION_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test_key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test_secret")
    env_file = tmp_path_factory.mktemp("env") / ".env"
    env_file.write_text("AWS_ACCESS_KEY_ID=test_key\nAWS_SECRET_ACCESS_KEY=test_secret\n")
    monkeypatch.setenv("PRUNE_ENV_FILE", str(env_file))
    yield str(env_file)


@pytest.fixture(name="build_dir")
def fixture_build_dir(tmp_path):
    """A small build output tree: index.html, static/js/main.js, static/css/main.css."""
    root = tmp_path / "build"
    (root / "static" / "js").mkdir(parents=True)
    (root / "static" / "css").mkdir(parents=True)
    (root / "index.html").write_text("<html></html>")
    (root / "static" / "js" / "main.js").write_text("console.log(1)")
    (root / "static" / "css" / "main.css").write_text("body {}")
    return root


@pytest.fixture(name="bucket")
def fixture_bucket():
    """In-memory bucket holding the current build plus two stale bundles."""
    return InMemoryBucket(
        [
            "index.html",
            "static/js/main.js",
            "static/css/main.css",
            "static/js/main.old.js",
            "static/css/main.old.css",
        ]
    )


@pytest.fixture(name="prune_config")
def fixture_prune_config(build_dir):
    """Minimal config targeting the build_dir fixture."""
    return PruneConfig(bucket="site-bucket", local_root=build_dir, page_size=2, max_workers=2)
