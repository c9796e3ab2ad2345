"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    src_path = Path(__file__).resolve().parent.parent / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch):
    """Runtime config isolated from the caller's ENPA_* environment."""
    from core.config import EnpaConfig

    for name in (
        "ENPA_S3_REGION",
        "ENPA_S3_PROFILE",
        "ENPA_FIREBASE_PROJECT_ID",
        "ENPA_SERVICE_ACCOUNT_KEY",
        "ENPA_RANDOM_SEED",
        "ENPA_MAX_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)
    return EnpaConfig.from_env()
