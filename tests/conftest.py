"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any application import so the global
settings object is built from test values rather than a local .env file.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault(
    "APP_SEED_AGENCIES",
    "ag-1:Acme Agency:key-acme:ac_public1:pro,ag-2:Beta Agency:key-beta:be_public2:toolkit",
)
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from agency_toolkit.core.rate_limit import reset_rate_gate
from agency_toolkit.core.stores import reset_stores

ACME_HEADERS = {"X-API-Key": "key-acme"}
BETA_HEADERS = {"X-API-Key": "key-beta"}


@pytest.fixture(autouse=True)
def _fresh_state():
    """Every test starts with freshly seeded stores and an empty rate gate."""
    reset_stores()
    reset_rate_gate()
    yield
    reset_stores()
    reset_rate_gate()


@pytest.fixture
def client() -> TestClient:
    from agency_toolkit.main import app

    return TestClient(app)


@pytest.fixture
def acme_headers() -> dict[str, str]:
    return dict(ACME_HEADERS)


@pytest.fixture
def beta_headers() -> dict[str, str]:
    return dict(BETA_HEADERS)
