"""
================================================================================
Login Page
================================================================================

Salesforce login for a configured role in the current environment.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import allure
from loguru import logger

from ..framework.driver import DriverError, Locator, RetryBudgetExceeded
from ..framework.page_base import ArrivalSpec, BasePage
from ..framework.run_context import ConfigurationError, RunContext
from .navigation_panel import NavigationPanel


class LoginPage(BasePage):
    """
    Usage:
        login_page.go_to()
        login_page.confirm_arrival()
        login_page.login("Sales User")
    """

    PAGE_NAME = "Login"

    USERNAME = Locator.css("#username", "Username text box")
    PASSWORD = Locator.css("#password", "Password text box")
    LOGIN_BUTTON = Locator.xpath("//button[text()=' Submit ']", "Login button")

    def __init__(self, ctx: RunContext, navigation: NavigationPanel):
        super().__init__(ctx)
        self.navigation = navigation
        self.user = "Not Assigned"

    def arrival_spec(self) -> ArrivalSpec:
        return ArrivalSpec(anchor=self.USERNAME, refreshes=1)

    def go_to(self) -> None:
        """
        Open the login URL of the configured environment.

        Raises:
            ConfigurationError: No URL configured for the environment
        """
        settings = self.ctx.settings
        logger.info(f"Environment = {settings.environment}")
        if not settings.url:
            raise ConfigurationError(f"URL not specified for environment {settings.environment}")
        logger.info(f"Salesforce URL to launch = {settings.url}")
        with allure.step(f"Open {settings.url}"):
            self.driver.navigate(settings.url)

    def confirm_arrival(self) -> None:
        """
        Wait for the username box. A session left over from an earlier
        scenario lands on Lightning instead, so log out and wait again.
        """
        try:
            self.waits.visible(self.USERNAME)
        except DriverError as e:
            logger.info(f"Exception awaiting arrival on login page, attempting logging out: {e}")
            try:
                self.navigation.logout()
                self.arrival.confirm(self.arrival_spec())
            except (DriverError, RetryBudgetExceeded) as e1:
                self.handler.handle("Could not navigate to Login page", e1, self)

        workaround = self.ctx.settings.login_workaround_seconds
        if workaround > 0:
            logger.info(f"Sleeping for {workaround} seconds to work around session-related errors")
            self.waits.sleep(workaround)

    def login(self, role: str) -> None:
        """
        Log in as ``role``.

        Raises:
            ConfigurationError: The role has no credentials in this environment
        """
        self.user = role
        credentials = self.ctx.settings.credentials_for(role)
        with allure.step(f"Log in as {role}"):
            try:
                self.actions.enter_text(self.USERNAME, credentials.username)
                self.actions.click_element(self.LOGIN_BUTTON)
                self.actions.enter_text(self.PASSWORD, credentials.password)
                self.actions.hit_escape_key()
            except (DriverError, RetryBudgetExceeded) as e:
                self.handler.handle("Could not login to Salesforce", e, self)
        logger.info(f"Logged in as {role}")


__all__ = ["LoginPage"]
