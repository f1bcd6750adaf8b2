"""
Shared pytest configuration and fixtures for formula-terms tests.
"""

import pytest

from formula_terms.config import settings
from formula_terms.formulas import parse_formula


@pytest.fixture(autouse=True)
def clean_config(monkeypatch, tmp_path):
    """Isolate every test from user config files and environment settings."""
    monkeypatch.delenv("FORMULA_TERMS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("FORMULA_TERMS_DEFAULT_CODING", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    settings.reset_config()
    yield
    settings.reset_config()


@pytest.fixture
def formula():
    """Parse a formula string."""
    return parse_formula


@pytest.fixture
def four_levels():
    return ["a", "b", "c", "d"]

