"""
Repository-level pytest configuration.

Why this exists:
  - Configure Loguru once per process from `logging.*`
  - Register command line options shared by every suite
  - Expose the repo root to tests

Configuration comes from config/config.yaml with environment overrides
(UI_BASE_URL, UI_HEADLESS, ...). Nothing is defaulted here so the YAML value
stays authoritative when no override is set.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from testsuites.ui_testing.framework.config_loader import init_logger


def pytest_addoption(parser):
    parser.addoption(
        "--live-site",
        action="store_true",
        default=False,
        help="Run UI tests against the configured base URL instead of the local fixture storefront",
    )


def pytest_configure(config):
    init_logger()


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent
