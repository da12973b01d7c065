"""
================================================================================
Root Pytest Configuration
================================================================================

Registers the suite's markers and tags collected tests by location.

The first two classification markers on a scenario become its feature and
scenario tags in the run summary, so order them feature first.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority scenarios - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority scenarios - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority scenarios - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority scenarios - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification scenarios"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression suite"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "ui: Scenarios driving the Lightning UI"
    )
    config.addinivalue_line(
        "markers", "unit: Framework tests with a fake driver and clock"
    )
    config.addinivalue_line(
        "markers", "live: Needs a reachable org (enable with BROWSER__LIVE=true)"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "login: Login and logout"
    )
    config.addinivalue_line(
        "markers", "navigation: Tabs and App Launcher navigation"
    )


def pytest_collection_modifyitems(config, items):
    """
    Auto-add the 'ui' / 'unit' markers based on where a test lives.
    """
    for item in items:
        if "ui_testing" in item.path.parts:
            item.add_marker(pytest.mark.ui)

        if "unit" in item.path.parts:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Salesforce Lightning UI Automation Suite",
        "=" * 60,
        "",
    ]
