"""
================================================================================
Base Page Object
================================================================================

Foundation for Lightning page objects.

Provides:
    - PageObject: the capability every page offers (confirm_arrival,
      store_details)
    - ArrivalSpec / ArrivalConfirmer: confirm a page has really loaded,
      refreshing when it has not, and step around the scheduled-maintenance
      interstitial and the "session has ended" banner
    - BasePage: composes the waits, actions, arrival confirmer and exception
      handler every page needs

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Protocol

import allure
from loguru import logger

from .assert_logger import AssertLogger
from .driver import DriverError, ErrorKind, Locator, RetryBudgetExceeded
from .element_actions import ElementActions
from .exception_handler import ExceptionHandler
from .locators import TOAST_MESSAGE, LabelLocator
from .run_context import RunContext
from .waits import Waiter


STORE_DETAILS_ATTEMPTS = 3
STORE_DETAILS_PAUSE_SECONDS = 2
STORE_URL_ATTEMPTS = 10


class PageObject(Protocol):
    """What the scenario steps may ask of any page."""

    def confirm_arrival(self) -> None: ...

    def store_details(self) -> None: ...


@dataclass(frozen=True)
class Detour:
    """
    An interstitial that may appear instead of the page.

    Attributes:
        marker: Present only while the interstitial is shown
        proceed: Clicked to get past it
        settle_seconds: Pause after proceeding
    """
    marker: Locator
    proceed: Locator
    settle_seconds: float = 2


@dataclass(frozen=True)
class ArrivalSpec:
    """
    How to recognise that a page has arrived.

    Attributes:
        anchor: Element visible once the page is usable
        title: Text the browser title must contain
        preset: Timeout preset for the first anchor wait
        refreshes: Refresh cycles allowed when the anchor is missing
        refresh_delay: Seconds to pause before each refresh
        title_refreshes: Refreshes allowed when the title is wrong
        interstitial: Optional maintenance-style detour
        session_banner: Banner meaning the server session ended
    """
    anchor: Optional[Locator] = None
    title: Optional[str] = None
    preset: str = "default"
    refreshes: int = 5
    refresh_delay: float = 4
    title_refreshes: int = 3
    interstitial: Optional[Detour] = None
    session_banner: Optional[Locator] = None


_ANCHOR_MISSING = (ErrorKind.TIMEOUT, ErrorKind.NO_SUCH_ELEMENT)


class ArrivalConfirmer:
    """Runs an ArrivalSpec against the current page."""

    def __init__(self, waits: Waiter, actions: ElementActions):
        self.waits = waits
        self.actions = actions

    @allure.step("Confirm page arrival")
    def confirm(self, spec: ArrivalSpec) -> None:
        """
        Raises:
            WaitTimeoutError / DriverError: the last anchor or title failure
            RetryBudgetExceeded: the session banner never went away
        """
        if spec.interstitial is not None:
            self._pass_interstitial(spec.interstitial)

        if spec.anchor is not None:
            self._await_anchor(spec)

        if spec.session_banner is not None and self.waits.element_exists(spec.session_banner):
            logger.warning("Session ended banner shown, refreshing until it clears")
            self.waits.refresh_until_absent(spec.session_banner, spec.refreshes, "Session ended banner")
            if spec.anchor is not None:
                self._await_anchor(spec)

        if spec.title is not None:
            try:
                self.waits.title_contains(spec.title, preset=spec.preset)
            except DriverError as e:
                if e.kind is not ErrorKind.TIMEOUT:
                    raise
                self.waits.refresh_until_title(spec.title, spec.title_refreshes)

    def _pass_interstitial(self, detour: Detour) -> None:
        if not self.waits.element_exists(detour.marker):
            return
        logger.info(f"{detour.marker} shown, continuing past it")
        self.actions.click_element(detour.proceed)
        self.waits.sleep(detour.settle_seconds)

    def _await_anchor(self, spec: ArrivalSpec) -> None:
        try:
            self.waits.visible(spec.anchor, preset=spec.preset)
            return
        except DriverError as e:
            if e.kind not in _ANCHOR_MISSING:
                raise
            last_error = e
            logger.warning(f"{spec.anchor} not visible, refreshing up to {spec.refreshes} times")

        for number in range(1, spec.refreshes + 1):
            self.waits.sleep(spec.refresh_delay)
            logger.info(f"Refresh {number}/{spec.refreshes} waiting for {spec.anchor}")
            self.waits.refresh()
            try:
                self.waits.visible(spec.anchor, preset="fifteen")
                return
            except DriverError as e:
                if e.kind not in _ANCHOR_MISSING:
                    raise
                last_error = e
        raise last_error


class BasePage:
    """
    Base class for Lightning page objects.

    Subclasses describe their arrival with ``arrival_spec()`` and may
    override ``store_details()`` to capture record values for later steps.

    Usage:
        class AccountsPage(BasePage):
            PAGE_NAME = "Accounts"

            def arrival_spec(self) -> ArrivalSpec:
                return ArrivalSpec(anchor=locators.list_title("Accounts"))
    """

    PAGE_NAME: str = "page"

    def __init__(self, ctx: RunContext):
        self.ctx = ctx
        self.driver = ctx.driver
        self.waits = Waiter(ctx)
        self.actions = ElementActions(ctx, self.waits)
        self.arrival = ArrivalConfirmer(self.waits, self.actions)
        self.handler = ExceptionHandler.from_context(ctx)
        self.asserts = AssertLogger(ctx.settings.assert_rethrow)
        self.fields: Dict[tuple, LabelLocator] = {}

    def arrival_spec(self) -> ArrivalSpec:
        raise NotImplementedError(f"{type(self).__name__} does not describe its arrival")

    def confirm_arrival(self) -> None:
        """Confirm the page loaded; an unrecovered failure skips or fails the scenario."""
        with allure.step(f"Confirm arrival at {self.PAGE_NAME}"):
            try:
                self.arrival.confirm(self.arrival_spec())
            except (DriverError, RetryBudgetExceeded) as e:
                self.handler.handle(f"{self.PAGE_NAME} page not displayed", e, self)
            logger.info(f"Arrived at {self.PAGE_NAME}")

    def store_details(self) -> None:
        """Capture values from the page into the scenario data. Nothing by default."""

    def store_details_with_retries(self) -> None:
        """
        Run store_details() once the page has loaded, retrying stale and
        missing elements.
        """
        try:
            self.waits.page_loaded()
            for number in range(1, STORE_DETAILS_ATTEMPTS + 1):
                try:
                    self.store_details()
                    return
                except DriverError as e:
                    if e.kind not in (ErrorKind.STALE_REFERENCE, ErrorKind.NO_SUCH_ELEMENT):
                        raise
                    logger.warning(f"Storing {self.PAGE_NAME} details failed ({e.kind.value}), attempt {number}")
                    last_error = e
                    self.waits.sleep(STORE_DETAILS_PAUSE_SECONDS)
            raise RetryBudgetExceeded("Maximum retry count exceeded storing details") from last_error
        except (DriverError, RetryBudgetExceeded) as e:
            self.handler.handle("Page not stored", e, self)

    def store_current_url(self, key: str) -> str:
        """Save the current URL in the scenario data, retrying until it reads back."""
        if self.ctx.scenario is None:
            raise RuntimeError(f"No scenario is running to store {key} in")
        for _ in range(STORE_URL_ATTEMPTS):
            url = self.driver.current_url()
            if url:
                self.ctx.scenario.store(key, url)
                return url
            self.waits.sleep(1)
        raise RetryBudgetExceeded(f"Unable to read the current URL to store as {key}")

    def field(self, label: str, kind: str = "text") -> LabelLocator:
        key = (label, kind)
        if key not in self.fields:
            self.fields[key] = LabelLocator(label, kind)
        return self.fields[key]

    @allure.step("Fill field {label}")
    def fill_field(self, label: str, text: Optional[str], kind: str = "text") -> None:
        """
        Replace the value of the field editor labelled ``label``, looked up
        through every known layout variant.
        """
        self.actions.enter_text(self.field(label, kind).resolve(self.driver), text)

    def validate_message_contains(self, expected: str, message: Locator = TOAST_MESSAGE) -> None:
        self.waits.visible(message, preset="short")
        text = self.driver.get_text(self.driver.find_element(message))
        self.asserts.assert_contains(text, expected, f"{message} shows '{expected}'")


__all__ = [
    "PageObject",
    "Detour",
    "ArrivalSpec",
    "ArrivalConfirmer",
    "BasePage",
]
