# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Swaps the Supabase singleton for an in-memory fake
# - Provides a FastAPI TestClient and common payloads
# =============================================================================

import json
import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

import pytest

from lib.supabase_client import SupabaseClient
from tests.fakes import FakeSupabase


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_supabase():
    """In-memory Supabase with two programs seeded."""
    fake = FakeSupabase()
    fake.add_row("programs", {"id": 1, "name": "Green Streets"})
    fake.add_row("programs", {"id": 2, "name": "Food Share"})

    previous = SupabaseClient._instance
    SupabaseClient._instance = fake
    yield fake
    SupabaseClient._instance = previous


@pytest.fixture
def client(fake_supabase):
    """FastAPI TestClient backed by the fake Supabase."""
    from fastapi.testclient import TestClient
    from app.main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def sample_metrics():
    """A metrics map covering all three categories."""
    return {
        "People": [
            {
                "label": "Volunteers",
                "values": [
                    {"value": 12, "date": "2024-03-01", "notes": "spring drive"},
                    {"value": 8, "date": "2024-04-01"},
                ],
            },
        ],
        "Place": [
            {"label": "Trees", "values": [{"value": 3}, {"value": 5}]},
            {"label": "Gardens", "values": [{"value": 2}], "showInScoreboard": False},
        ],
        "Policy": [],
    }


@pytest.fixture
def sample_form(sample_metrics):
    """Multipart form fields for POST /add-initiative."""
    return {
        "programName": "Green Streets",
        "initiativeName": "Tree Planting",
        "description": "Planting street trees across the east side",
        "modesOfAction": json.dumps(["Serve", "Advocate"]),
        "metrics": json.dumps(sample_metrics),
    }


@pytest.fixture
def png_file():
    """A tiny PNG upload tuple for TestClient files=."""
    return {"image": ("tree.png", b"\x89PNG\r\n\x1a\nfake-image-bytes", "image/png")}
