"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for the Lightning suite.

Features:
    - One browser and one page per run, wrapped in a PlaywrightDriver
    - Browser type, headless mode and timeouts from configuration
    - Best-effort teardown of pages, contexts and the Playwright process

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Playwright,
    sync_playwright,
)

from .playwright_driver import PlaywrightDriver


class BrowserManager:
    """
    Launches the browser and hands out the driver session.

    Usage:
        with BrowserManager(browser_type="chromium") as manager:
            driver = manager.new_driver()
            driver.navigate("https://login.salesforce.com")
    """

    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": [
            "--ignore-certificate-errors",
            "--disable-notifications",
        ],
    }

    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium",
        action_timeout_ms: int = 5000,
        navigation_timeout_ms: int = 60000,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode
            browser_type: Browser to use - 'chromium', 'firefox', 'webkit'
            action_timeout_ms: Native action timeout handed to the driver
            navigation_timeout_ms: Page load timeout for goto/reload
        """
        self.headless = headless
        self.browser_type = browser_type
        self.action_timeout_ms = action_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    def __enter__(self) -> "BrowserManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = sync_playwright().start()

        if self.browser_type == "firefox":
            browser_launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            browser_launcher = self._playwright.webkit
        else:
            browser_launcher = self._playwright.chromium

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }
        self._browser = browser_launcher.launch(**launch_options)
        logger.debug(f"Browser started: {self.browser_type} (headless={self.headless})")

    def new_driver(self) -> PlaywrightDriver:
        """
        Open a fresh context and page and wrap it as the driver session.

        Returns:
            PlaywrightDriver bound to the new page
        """
        if self._browser is None:
            self.start()

        context = self._browser.new_context(**self.DEFAULT_CONTEXT_OPTIONS)
        context.set_default_navigation_timeout(self.navigation_timeout_ms)
        self._contexts.append(context)
        page = context.new_page()
        logger.debug(f"New page opened in context #{len(self._contexts)}")
        return PlaywrightDriver(page, action_timeout_ms=self.action_timeout_ms)

    def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                context.close()
            except PlaywrightError as e:
                logger.warning(f"Failed to close browser context: {e}")
        self._contexts.clear()

        if self._browser:
            self._browser.close()
            self._browser = None

        if self._playwright:
            self._playwright.stop()
            self._playwright = None
        logger.debug("Browser closed")


__all__ = ["BrowserManager"]
