"""
Pytest configuration and shared fixtures for timedim testing.

Provides processor fixtures, temporary configuration directories and
logging isolation for unit and integration testing.
"""

import logging
import os
import tempfile
from pathlib import Path

import pytest
import yaml

from timedim.core.logging_manager import ROOT_LOGGER_NAME
from timedim.processors.core.date_normalizer import DateNormalizer
from timedim.processors.core.dimension_builder import DimensionBuilder
from timedim.processors.core.filter_dates import FilterDates
from timedim.processors.core.format_detector import FormatDetector
from timedim.processors.core.range_parser import RangeParser

from tests.fixtures.sample_data import SAMPLE_CONFIGURATIONS


# Processor Fixtures
@pytest.fixture
def normalizer():
    """Date normalizer"""
    return DateNormalizer()


@pytest.fixture
def detector(normalizer):
    """Format detector sharing the normalizer"""
    return FormatDetector(normalizer)


@pytest.fixture
def range_parser(normalizer, detector):
    """Range parser wired to the shared processors"""
    return RangeParser(normalizer, detector)


@pytest.fixture
def dimension_builder(normalizer, detector, range_parser):
    """Dimension builder wired to the shared processors"""
    return DimensionBuilder(normalizer, detector, range_parser)


@pytest.fixture
def filter_dates(normalizer, detector):
    """Filter date rewriter wired to the shared processors"""
    return FilterDates(normalizer, detector)


# Configuration Fixtures
@pytest.fixture
def temp_config_dir():
    """Temporary directory holding default and production config files"""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_dir = Path(temp_dir) / "config"
        config_dir.mkdir()

        with open(config_dir / "default_config.yaml", "w") as f:
            yaml.dump(SAMPLE_CONFIGURATIONS["default"], f)
        with open(config_dir / "production.yaml", "w") as f:
            yaml.dump(SAMPLE_CONFIGURATIONS["production"], f)

        yield config_dir


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove TIMEDIM_ variables that would override test configuration"""
    for key in list(os.environ):
        if key.startswith("TIMEDIM_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Restore the quiet, propagating package logger after each test"""
    yield
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.addHandler(logging.NullHandler())
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


def pytest_configure(config):
    """Configure custom pytest markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
