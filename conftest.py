"""
Repository-level pytest configuration.

Provides:
  - the repository root for tests that read files relative to it
  - safe environment defaults, so local runs never pick up a real org by accident

Real runs set ENVIRONMENT and the password variables named in config/config.yaml
from a secret manager in CI/CD.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _safe_env_defaults() -> Generator[None, None, None]:
    """
    Set environment defaults if not already provided by the user/CI.
    """
    defaults = {
        "ENVIRONMENT": "DEV",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
