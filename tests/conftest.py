"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def orders_model_path() -> Path:
    """Model document of a small, fully resolvable order application."""
    return FIXTURES / "orders_model.yaml"
