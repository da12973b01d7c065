"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures and hooks for Lightning scenarios.

Key Features:
- One browser session and RunContext per run, with stopwatch accounting
- Per-scenario context, start banners and run summary status lines
- Pause while a LOCK file exists in the project root
- Screenshot on any scenario that did not pass
- Live scenarios skipped unless browser.live is enabled

================================================================================
"""

from datetime import datetime
from pathlib import Path
from typing import Generator

import pytest
from loguru import logger

from lightning_tools.common import RUN_SUMMARY, get_config, init_logger
from lightning_tools.report_tools import attach_screenshot
from lightning_suites.ui_testing.framework.browser_manager import BrowserManager
from lightning_suites.ui_testing.framework.driver import DriverError
from lightning_suites.ui_testing.framework.run_context import RunContext, SuiteSettings
from lightning_suites.ui_testing.framework.scenario import ScenarioContext
from lightning_suites.ui_testing.pages import Pages


PROJECT_ROOT = Path(__file__).resolve().parents[3]


# ================================================================================
# Collection
# ================================================================================

def pytest_collection_modifyitems(config, items):
    """Skip live scenarios unless a reachable org is configured."""
    if get_config("browser.live", False):
        return
    skip_live = pytest.mark.skip(reason="Live org disabled (set BROWSER__LIVE=true to run)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ================================================================================
# Session Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def settings() -> SuiteSettings:
    init_logger()
    return SuiteSettings.from_config()


@pytest.fixture(scope="session")
def browser_manager() -> Generator[BrowserManager, None, None]:
    """
    Session-scoped browser manager fixture.

    A single browser for the whole run, reducing launch overhead.
    """
    manager = BrowserManager(
        headless=bool(get_config("browser.headless", True)),
        browser_type=get_config("browser.type", "chromium"),
        action_timeout_ms=int(get_config("browser.action_timeout_ms", 5000)),
        navigation_timeout_ms=int(get_config("browser.navigation_timeout_ms", 60000)),
    )
    manager.start()
    yield manager
    manager.close()


@pytest.fixture(scope="session")
def run_context(browser_manager: BrowserManager, settings: SuiteSettings) -> Generator[RunContext, None, None]:
    """The run's driver session and stopwatch accounting."""
    ctx = RunContext(browser_manager.new_driver(), settings)
    ctx.stopwatch.initialise()
    yield ctx
    ctx.stopwatch.shutdown()


# ================================================================================
# Scenario Lifecycle
# ================================================================================

def _wait_while_locked(ctx: RunContext) -> None:
    lock_file = PROJECT_ROOT / get_config("suite.lock_file", "LOCK")
    poll = float(get_config("suite.lock_poll_seconds", 5))
    announced = False
    while lock_file.exists():
        if not announced:
            logger.warning(f"{lock_file} exists, pausing until it is removed")
            announced = True
        ctx.clock.sleep(poll)
    if announced:
        logger.info("Lock removed, resuming")


def _scenario_status(item) -> str:
    for when in ("setup", "call", "teardown"):
        report = getattr(item, f"rep_{when}", None)
        if report is not None and not report.passed:
            return report.outcome
    return "passed"


def _take_failure_screenshot(ctx: RunContext, scenario: ScenarioContext) -> None:
    screenshot_dir = PROJECT_ROOT / get_config("suite.screenshot_dir", "reports/screenshots")
    screenshot_dir.mkdir(parents=True, exist_ok=True)
    path = screenshot_dir / scenario.screenshot_name(datetime.now().strftime("%Y%m%d-%H%M"))
    try:
        ctx.driver.screenshot(str(path))
        attach_screenshot(path, name="failure_screenshot")
        logger.info(f"Screenshot saved to {path}")
    except DriverError as e:
        logger.error(f"Failed to capture screenshot on failure: {e}")


@pytest.fixture(autouse=True)
def scenario(request, run_context: RunContext) -> Generator[ScenarioContext, None, None]:
    """
    Start and finish one scenario: banners, run summary lines, screenshot.
    """
    _wait_while_locked(run_context)

    # own_markers holds decorators bottom-up
    marker_names = [marker.name for marker in request.node.own_markers]
    context = run_context.begin_scenario(
        ScenarioContext.from_markers(request.node.name, reversed(marker_names))
    )
    logger.info("*" * 60)
    logger.info(f"Starting scenario {context.name} [{context.label}]")
    logger.info("*" * 60)
    RUN_SUMMARY.info(f"{context.label} started - {context.name}")

    yield context

    status = _scenario_status(request.node)
    if status != "passed":
        _take_failure_screenshot(run_context, context)
        RUN_SUMMARY.error(f"{context.label} Status - {status.upper()}")
    else:
        RUN_SUMMARY.info(f"{context.label} Status - PASSED")
    logger.info(f"Finished scenario {context.name}: {status}")
    run_context.end_scenario()


@pytest.fixture
def pages(run_context: RunContext, scenario: ScenarioContext) -> Pages:
    """Page objects for the current scenario."""
    return Pages.initialise(run_context)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Keep each phase's report on the item so the scenario fixture can read
    the outcome during teardown.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)
