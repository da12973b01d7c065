"""
================================================================================
Home Page
================================================================================

The Lightning home page reached after login. Arrival steps past the
scheduled-maintenance interstitial, refreshes until the global header logo
shows, clears a stale "session has ended" banner and checks the title.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

import allure
from loguru import logger

from ..framework.driver import DriverError, Locator, RetryBudgetExceeded
from ..framework.locators import xpath_literal
from ..framework.page_base import ArrivalSpec, BasePage, Detour


class HomePage(BasePage):
    """
    Attributes:
        instance_url: Scheme and host of the org, recorded on arrival
    """

    PAGE_NAME = "Salesforce home"
    TITLE = "Home | Salesforce"

    LOGO = Locator.css(".slds-global-header__logo", "Home page logo")
    SCHEDULED_MAINTENANCE = Detour(
        marker=Locator.xpath("//div[@id='alert']//span[text()='Scheduled Maintenance']", "Scheduled maintenance box"),
        proceed=Locator.xpath("//div[@id='message']/form/p/a", "Scheduled maintenance continue link"),
    )
    # Seen when logging out and straight back in while the old session lingers
    SESSION_ENDED = Locator.xpath(
        "//h2/lightning-formatted-text[text()='Your session has ended']", "Session ended banner"
    )
    SEARCH_BOX = Locator.xpath("//input[@title='Search Salesforce']", "Search Salesforce box")

    def __init__(self, ctx):
        super().__init__(ctx)
        self.instance_url: Optional[str] = None

    def arrival_spec(self) -> ArrivalSpec:
        return ArrivalSpec(
            anchor=self.LOGO,
            title=self.TITLE,
            refreshes=5,
            interstitial=self.SCHEDULED_MAINTENANCE,
            session_banner=self.SESSION_ENDED,
        )

    def confirm_arrival(self) -> None:
        super().confirm_arrival()
        parts = urlsplit(self.driver.current_url())
        self.instance_url = f"{parts.scheme}://{parts.netloc}/"
        logger.info(f"Instance URL = {self.instance_url}")

    def search_for(self, text: str) -> None:
        """Search globally and open the highlighted result."""
        with allure.step(f"Search for {text}"):
            try:
                self.actions.enter_text(self.SEARCH_BOX, text)
                self.actions.click_element(self.SEARCH_BOX)
                result = Locator.xpath(f"//mark[text()={xpath_literal(text)}]", f"Search result '{text}'")
                self.waits.visible(result, preset="short")
                self.waits.clickable(result, self.ctx.waits.short)
                self.actions.click_element(result)
            except (DriverError, RetryBudgetExceeded) as e:
                self.handler.handle(f"Issue searching for: {text}", e, self)


__all__ = ["HomePage"]
