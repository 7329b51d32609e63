"""Shared fixtures for calculator tests."""
from __future__ import annotations

import pytest

from config import CalculatorConfig
from decimal_math import DivisionMode
from store import SessionStore


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def exact_config() -> CalculatorConfig:
    return CalculatorConfig(division_mode=DivisionMode.EXACT)


@pytest.fixture
def short_config() -> CalculatorConfig:
    """Config with a three-digit entry limit."""
    return CalculatorConfig(max_display_digits=3)
