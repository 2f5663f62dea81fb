# tests/conftest.py
from __future__ import annotations

import os

import pytest

from tests.utils import (
    FakeListingService,
    FakeProbe,
    RecordingNotifier,
    make_flat_record,
    make_nested_record,
    make_state,
    png_bytes as _make_png,
)


# -------- Environment isolation --------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("FLATMATE_"):
            monkeypatch.delenv(key, raising=False)
    yield


# -------- Wizard fixtures --------
@pytest.fixture
def state_factory():
    """
    Factory for WizardState pre-filled with valid step-2 and step-3 fields.

    Usage:
        state = state_factory(goal="Flatmate", property_type="Shared Flatmate")
    """

    def _factory(**overrides):
        return make_state(**overrides)

    return _factory


@pytest.fixture
def fake_service():
    return FakeListingService()


@pytest.fixture
def fake_probe():
    return FakeProbe()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def nested_record():
    return make_nested_record()


@pytest.fixture
def flat_record():
    return make_flat_record()


@pytest.fixture
def png_bytes():
    """
    Fixture that returns a callable to generate PNG bytes.
    Usage:
        data = png_bytes(64, 64)
    """
    return _make_png


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: marks integration tests")
