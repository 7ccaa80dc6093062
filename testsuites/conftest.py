"""
================================================================================
Suite-level Pytest Configuration
================================================================================

Registers the project markers and tags collected tests by location and
component, so `-m form` or `-m ui` select without per-test decorators.

================================================================================
"""

from pathlib import Path

import pytest


MARKERS = {
    # priority
    "P0": "Blocker - the page is unusable without it",
    "P1": "Critical - core component behavior",
    "P2": "Normal - secondary behavior and edge cases",
    "P3": "Minor - wording, markup details, defensive checks",
    # kind
    "smoke": "Fast confidence checks",
    "regression": "Full regression pass",
    "unit": "Pure logic, no browser",
    "ui": "Drives a real browser",
    # component
    "slider": "Dual carousel synchronization",
    "form": "Multi-step quiz form",
    "reviews": "Reviews panel and gallery overlay",
    "location": "Detected location banner",
}

COMPONENT_MODULES = {
    "test_slider": "slider",
    "test_slider_logic": "slider",
    "test_form": "form",
    "test_form_session": "form",
    "test_form_settle": "form",
    "test_validation_rules": "form",
    "test_reviews": "reviews",
    "test_reviews_logic": "reviews",
}


def pytest_configure(config):
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


def pytest_collection_modifyitems(config, items):
    for item in items:
        parts = Path(str(item.fspath)).parts

        if "ui_testing" in parts:
            item.add_marker(pytest.mark.ui)
        elif "unit" in parts:
            item.add_marker(pytest.mark.unit)

        component = COMPONENT_MODULES.get(Path(str(item.fspath)).stem)
        if component:
            item.add_marker(getattr(pytest.mark, component))


def pytest_report_header(config):
    return ["Storefront UI Verification Harness"]
