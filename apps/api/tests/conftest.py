"""
Pytest configuration and fixtures

The calculators are pure functions, so no database or Redis is needed.
Rate limiting is switched off before the app settings are loaded.
"""
import pytest
import sys
import os

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("SENTRY_DSN", "")


@pytest.fixture
def client():
    """FastAPI test client for the public calculators."""
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def sample_race_times():
    """Sample goal times for pacing tests (seconds, distance key)"""
    return {
        "5k_20min": (20 * 60, "5k"),
        "10k_45min": (45 * 60, "10k"),
        "half_marathon_90min": (90 * 60, "half_marathon"),
        "marathon_3hr": (3 * 3600, "marathon"),
    }


@pytest.fixture
def steady_loads():
    """28 days of identical daily load"""
    return [50.0] * 28


@pytest.fixture
def spike_loads():
    """Three steady weeks followed by a doubled week"""
    return [40.0] * 21 + [80.0] * 7
