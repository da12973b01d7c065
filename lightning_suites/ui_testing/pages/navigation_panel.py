"""
================================================================================
Navigation Panel
================================================================================

The Lightning global navigation: object tabs, the App Launcher (waffle),
the user menu and the setup gear.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Dict

import allure
from loguru import logger

from ..framework.driver import DriverError, ErrorKind, Locator, RetryBudgetExceeded
from ..framework.locators import xpath_literal
from ..framework.page_base import ArrivalSpec, BasePage


def _tab(name: str) -> Locator:
    return Locator.xpath(f"//a[@title={xpath_literal(name)}]/span", f"{name} tab")


def app_launcher_link(name: str) -> Locator:
    return Locator.xpath(
        f"//p[@class='slds-truncate'][text()={xpath_literal(name)}]", f"App Launcher link '{name}'"
    )


class NavigationPanel(BasePage):
    """
    Global navigation shared by every Lightning page.
    """

    PAGE_NAME = "Navigation panel"

    TABS: Dict[str, Locator] = {name: _tab(name) for name in ("Leads", "Accounts", "Contacts", "Cases")}

    WAFFLE = Locator.xpath("//div[@class='slds-icon-waffle']", "App Launcher")
    VIEW_ALL = Locator.xpath("//button[@class='slds-button'][contains(text(),'View All')]", "View All")
    SEARCH_APPS = Locator.xpath("//input[contains(@placeholder,'Search apps')]", "Search apps box")
    APP_LINKS = Locator.xpath("//p[@class='slds-truncate']", "App Launcher links")
    USER_MENU = Locator.xpath("//span/img[@title='User']", "User menu")
    LOG_OUT = Locator.css("a:text-is('Log Out')", "Log Out link")
    SETUP_GEAR = Locator.xpath("//div[@class='setupGear']", "Setup gear")
    SETUP_LINK = Locator.xpath("//div[@class='slds-grid']//span[text()='Setup']", "Setup link")
    DISMISS_NOTIFICATION = Locator.xpath(
        "//div[@class='slds-notification-container unsCardQueue']//button[@title='Dismiss notification']",
        "Dismiss notification",
    )

    WAFFLE_ATTEMPTS = 3
    LOGOUT_ATTEMPTS = 3

    def arrival_spec(self) -> ArrivalSpec:
        return ArrivalSpec(anchor=self.TABS["Accounts"])

    def click_tab(self, name: str) -> None:
        with allure.step(f"Click tab {name}"):
            try:
                logger.info(f"Navigating to page {name}")
                tab = self.TABS.get(name) or _tab(name)
                self.actions.script_click(tab)
                logger.info(f"Just clicked tab {name}")
            except DriverError as e:
                self.handler.handle(f"Could not click tab {name}", e, self)

    def _open_app_launcher(self) -> None:
        self.waits.present(self.WAFFLE)
        self.actions.robust_click(self.WAFFLE)
        self.waits.sleep(2)
        self.waits.clickable(self.VIEW_ALL, self.ctx.waits.fifteen)
        self.actions.script_click(self.VIEW_ALL)
        self.waits.sleep(1)
        try:
            self.waits.visible(self.SEARCH_APPS, preset="short")
        except DriverError as e:
            if e.kind not in (ErrorKind.TIMEOUT, ErrorKind.STALE_REFERENCE):
                raise
            logger.warning(f"Search apps box not shown, clicking the App Launcher again: {e}")
            self.waits.sleep(5)
            self.actions.robust_click(self.WAFFLE)
            self.waits.visible(self.SEARCH_APPS, preset="short")

    def click_waffle_grid(self) -> None:
        """Open the App Launcher on its full list."""
        try:
            self._open_app_launcher()
        except (DriverError, RetryBudgetExceeded) as e:
            self.handler.handle("Could not find the app search page", e, self)

    def click_waffle_and_navigate(self, page: str) -> None:
        """Open ``page`` through the App Launcher search, refreshing between tries."""
        with allure.step(f"Navigate to {page} through the App Launcher"):
            try:
                self._search_app(page)
                link = app_launcher_link(page)
                self.waits.clickable(link, 5)
                self.actions.script_click(link)
                logger.info(f"Just clicked app link {page}")
            except (DriverError, RetryBudgetExceeded) as e:
                self.handler.handle(f"Could not click app link {page}", e, self)

    def _search_app(self, page: str) -> None:
        for number in range(1, self.WAFFLE_ATTEMPTS + 1):
            logger.info(f"Navigating to page using waffle icon : {page} : try {number} of {self.WAFFLE_ATTEMPTS}")
            self._open_app_launcher()
            self.actions.type_text(self.SEARCH_APPS, page, submit=False)
            try:
                self.waits.present(self.APP_LINKS)
                return
            except DriverError as e:
                if e.kind is not ErrorKind.TIMEOUT:
                    raise
                logger.error(f"Could not launch page on try {number} of {self.WAFFLE_ATTEMPTS}: {e}")
                self.waits.refresh()
                self.waits.sleep(10)
        raise RetryBudgetExceeded(f"Maximum retry count exceeded trying to navigate to page {page}")

    def validate_page_visibility(self, can: bool, page: str) -> None:
        """Assert whether the App Launcher offers ``page`` to the current user."""
        link = app_launcher_link(page)
        if can:
            self.asserts.assert_true(
                self.waits.element_exists(link, within=self.ctx.waits.short),
                f"{page} page link should exist",
            )
        else:
            self.asserts.assert_true(not self.waits.element_exists(link), f"{page} page link should not exist")

    def logout(self) -> None:
        """
        Log out through the user menu, accepting any "unsaved changes" alert.
        Up to three attempts; the last failure is classified.
        """
        for number in range(1, self.LOGOUT_ATTEMPTS + 1):
            try:
                logger.info(f"Logging out - attempt {number}")
                self.waits.accept_alert_if_present()
                self.waits.present(self.USER_MENU)
                self.actions.script_click(self.USER_MENU)
                self._click_log_out()
                logger.info("Successfully logged out")
                return
            except (DriverError, RetryBudgetExceeded) as e:
                logger.warning(f"Couldn't log out >> {number}/{self.LOGOUT_ATTEMPTS}: {e}")
                if number == self.LOGOUT_ATTEMPTS:
                    self.handler.handle("Could not logout", e, self)

    def _click_log_out(self) -> None:
        try:
            self.waits.clickable_safe(self.LOG_OUT, 10)
            self.actions.script_click(self.LOG_OUT)
            self.waits.sleep(1)
            self.waits.accept_alert_if_present()
        except DriverError as e:
            logger.warning(f"Logout failed, trying again: {e}")
            if not self.waits.element_exists(self.LOG_OUT):
                self.actions.script_click(self.USER_MENU)
                self.waits.sleep(2)
            self.waits.clickable(self.LOG_OUT, 5)
            self.actions.script_click(self.LOG_OUT)

    def clear_notifications(self) -> int:
        """Dismiss any notification cards; returns how many were dismissed."""
        buttons = self.driver.find_elements(self.DISMISS_NOTIFICATION)
        if buttons:
            logger.info(f"{len(buttons)} notification messages found. Attempting to clear them.")
        dismissed = 0
        for button in buttons:
            try:
                self.driver.click(button)
                dismissed += 1
            except DriverError as e:
                logger.warning(f"Issue clearing notification: {e}")
        return dismissed

    def navigate_to_setup(self) -> None:
        try:
            logger.info("Navigating to set up")
            try:
                self.waits.clickable_safe(self.SETUP_GEAR, 6)
            except DriverError as e:
                logger.warning(f"Issue locating the setup gear, refreshing: {e}")
                self.waits.refresh()
                self.waits.clickable_safe(self.SETUP_GEAR, 6)
            self.actions.click_element(self.SETUP_GEAR)
            self.waits.sleep(3)
            self.waits.clickable_safe(self.SETUP_LINK, 40)
            self.actions.click_element(self.SETUP_LINK)
        except (DriverError, RetryBudgetExceeded) as e:
            self.handler.handle("Could not navigate to Setup", e, self)


__all__ = ["NavigationPanel", "app_launcher_link"]
