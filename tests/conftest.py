"""Shared fixtures for the formatbridge test suite."""

import pytest

from formatbridge_cli.core.config import Config
from formatbridge_cli.core.converter import ConversionController
from formatbridge_cli.core.format_detector import FormatDetector
from formatbridge_cli.core.repair import SyntaxRepairEngine


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def controller(config):
    return ConversionController(config)


@pytest.fixture
def detector(config):
    return FormatDetector(config)


@pytest.fixture
def engine(config):
    return SyntaxRepairEngine(config)
