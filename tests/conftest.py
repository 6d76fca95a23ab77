"""Pytest configuration and shared fixtures for the diffview test suite.

This module provides shared fixtures, test configuration, and Hypothesis
profiles used across the entire test suite.
"""

import logging
import os

import pytest
from hypothesis import Phase, Verbosity, settings

from diffview.models import DiffRecord, DiffType, LineRecord

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)

# Load profile from environment or use default
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "property: Property-based tests driven by Hypothesis")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")

def make_records(count: int) -> list[LineRecord]:
    """Build ``count`` unchanged line records numbered from 1."""
    return [
        LineRecord(
            left=DiffRecord(index + 1, DiffType.DEFAULT, f"line {index}"),
            right=DiffRecord(index + 1, DiffType.DEFAULT, f"line {index}"),
        )
        for index in range(count)
    ]


@pytest.fixture
def record_factory():
    """Provide a factory for unchanged line records."""
    return make_records


@pytest.fixture
def restore_package_logger():
    """Restore the diffview package logger after a test reconfigures it."""
    package_logger = logging.getLogger("diffview")
    saved = (package_logger.level, list(package_logger.handlers), package_logger.propagate)
    yield package_logger
    for handler in package_logger.handlers:
        if handler not in saved[1]:
            handler.close()
    package_logger.setLevel(saved[0])
    package_logger.handlers[:] = saved[1]
    package_logger.propagate = saved[2]

