# ================================================================================
# Element Actions Module
# ================================================================================
#
# Resilient interactions with Lightning elements: bounded retries around click
# and type, and the escalating recovery ladder for clicks that keep failing.
#
# Key Features:
#   - Click retried on the driver's generic interaction failures
#   - Typing gated on clickability and retried when not interactable
#   - robust_click: script click -> hover + click -> refresh and retry
#   - Keyboard helpers, scrolling, checkbox state and text fallbacks
#   - Allure step integration
#
# ================================================================================

from __future__ import annotations

from typing import Any, List, Optional

import allure
from loguru import logger

from .driver import DriverError, ErrorKind, Locator, RetryBudgetExceeded, describe
from .retry import CLICK_POLICY, TYPE_POLICY, RetryPolicy, attempt
from .run_context import RunContext
from .waits import Waiter


SCRIPT_CLICK = "el => el.click()"
PARENT_CLICK = "el => el.parentElement.click()"
SCROLL_INTO_VIEW = "el => el.scrollIntoView(true)"
CHECKBOX_AFTER_CONTENT = "el => window.getComputedStyle(el, '::after').getPropertyValue('content')"

TYPE_CLICKABLE_SECONDS = 8
HOVER_CLICKABLE_SECONDS = 6
ROBUST_CLICK_REFRESHES = 3
REFRESH_SETTLE_SECONDS = 2


class ElementActions:
    """
    Click, type and recovery actions bound to a RunContext.

    Targets are Locators (resolved afresh on every attempt) or elements the
    driver already resolved.

    Example:
        actions = ElementActions(ctx)
        actions.click_element(Locator.css("button.save", "Save button"))
        actions.type_text(Locator.css("#username"), "sales.user@example.com")
    """

    def __init__(self, ctx: RunContext, waits: Optional[Waiter] = None):
        self.ctx = ctx
        self.driver = ctx.driver
        self.waits = waits or Waiter(ctx)

    def _resolve(self, target: Any) -> Any:
        if isinstance(target, Locator):
            return self.driver.find_element(target)
        return target

    # ------------------------------------------------------------------
    # Click
    # ------------------------------------------------------------------

    @allure.step("Click element: {target}")
    def click_element(self, target: Any, policy: RetryPolicy = CLICK_POLICY) -> None:
        """
        Click with retries on interaction failures.

        Raises:
            DriverError: the last retryable error once the budget is spent,
                unwrapped; any other error immediately
        """
        logger.debug(f"Clicking element: {describe(target)}")
        attempt(
            lambda: self.driver.click(self._resolve(target)),
            policy,
            self.waits.sleep,
            f"click {describe(target)}",
        ).unwrap()

    def script_click(self, target: Any) -> None:
        self.driver.execute_script(SCRIPT_CLICK, self._resolve(target))

    @allure.step("Robust click: {target}")
    def robust_click(
        self,
        target: Any,
        anchor: Optional[Locator] = None,
        max_refreshes: int = ROBUST_CLICK_REFRESHES,
    ) -> None:
        """
        Click through the escalation ladder.

        1. script click
        2. on a script error: hover, then native click
        3. on any other driver error: refresh, settle, wait for ``anchor``,
           re-resolve ``target`` and start again at 1

        Args:
            target: Locator to click; a resolved element cannot be re-resolved
                after a refresh, so its failure is re-raised instead
            anchor: Element whose visibility confirms the page is back
            max_refreshes: Refresh cycles allowed before giving up

        Raises:
            RetryBudgetExceeded: Still failing after ``max_refreshes`` refreshes
        """
        refreshes = 0
        page_error: Optional[DriverError] = None
        while True:
            try:
                self._escalating_click(target)
                return
            except DriverError as e:
                if not isinstance(target, Locator):
                    raise
                if refreshes >= max_refreshes:
                    message = f"Maximum retry count exceeded clicking {describe(target)}"
                    if page_error is not None:
                        message += f"; page not back after last refresh: {page_error}"
                    raise RetryBudgetExceeded(message) from e
                refreshes += 1
                logger.warning(
                    f"Click on {describe(target)} failed ({e.kind.value}), "
                    f"refreshing page ({refreshes}/{max_refreshes})"
                )
                page_error = self._refresh_and_rewait(anchor)

    def _escalating_click(self, target: Any) -> None:
        element = self._resolve(target)
        try:
            self.script_click(element)
        except DriverError as e:
            if e.kind is not ErrorKind.SCRIPT:
                raise
            logger.info(f"Script click failed on {describe(target)}, trying hover then click")
            self.driver.hover(element)
            self.driver.click(element)

    def _refresh_and_rewait(self, anchor: Optional[Locator]) -> Optional[DriverError]:
        """Refresh and wait for ``anchor``; returns the error if the page did not come back."""
        try:
            self.waits.refresh()
            self.waits.sleep(REFRESH_SETTLE_SECONDS)
            if anchor is not None:
                self.waits.visible(anchor, preset="fifteen")
        except DriverError as e:
            logger.warning(f"Page not back after refresh: {e}")
            return e
        return None

    def hover_and_click(self, hover_target: Any, click_target: Any) -> None:
        """Hover over one element to reveal another, then click it."""
        self.driver.hover(self._resolve(hover_target))
        self.click_element(click_target)

    def hover_and_safe_click(self, hover_target: Any, click_target: Any) -> None:
        """
        Hover, wait for the revealed element and click it. A script error
        during the click clicks its parent element instead.
        """
        self.driver.hover(self._resolve(hover_target))
        self.waits.visible(click_target)
        self.waits.clickable(click_target, HOVER_CLICKABLE_SECONDS)
        element = self._resolve(click_target)
        try:
            self.driver.click(element)
        except DriverError as e:
            if e.kind is not ErrorKind.SCRIPT:
                raise
            logger.warning(f"Script error clicking {describe(click_target)}, clicking its parent")
            self.driver.execute_script(PARENT_CLICK, element)

    def wait_until_click(self, target: Any, seconds: float, attempts: int = 40,
                         pause: float = 1.0) -> None:
        """
        Hover, wait for clickable and click, repeating on any driver error.

        Raises:
            DriverError: the last error after ``attempts`` tries
        """
        def hover_wait_click() -> None:
            element = self._resolve(target)
            self.driver.hover(element)
            self.waits.clickable(element, seconds)
            self.driver.click(element)

        policy = RetryPolicy(max_attempts=attempts, delay=pause, retryable=frozenset(ErrorKind))
        attempt(hover_wait_click, policy, self.waits.sleep, f"click {describe(target)}").unwrap()

    def click_by_locator(self, locator: Locator) -> None:
        self.waits.clickable(locator, self.ctx.waits.fifteen)
        self.wait_until_click(locator, 5, attempts=20, pause=0.5)

    # ------------------------------------------------------------------
    # Typing
    # ------------------------------------------------------------------

    @allure.step("Type text into {target}")
    def type_text(self, target: Any, text: Optional[str], clear_first: bool = False,
                  submit: bool = True) -> None:
        """
        Send ``text``, followed by Tab when ``submit``.

        Each attempt waits for the element to be clickable first. Only
        not-interactable errors are retried.

        Args:
            target: Locator or element
            text: Text to send; None or "" does nothing
            clear_first: Clear existing content first
            submit: Send a Tab keystroke afterwards
        """
        if not text:
            logger.debug(f"Nothing to type into {describe(target)}")
            return

        def send() -> None:
            self.waits.clickable(target, TYPE_CLICKABLE_SECONDS)
            element = self._resolve(target)
            if clear_first:
                self.driver.clear(element)
            self.driver.send_keys(element, text)
            if submit:
                self.driver.press_key("Tab", element)

        attempt(send, TYPE_POLICY, self.waits.sleep, f"type into {describe(target)}").unwrap()

    def enter_text(self, target: Any, text: Optional[str], submit: bool = True) -> None:
        """
        Replace the content of a text box and tab out of it.

        The box is always cleared, so None or "" blanks it.
        """
        self.waits.clickable_safe(target, TYPE_CLICKABLE_SECONDS)
        self.driver.clear(self._resolve(target))
        if text:
            self.type_text(target, text, submit=submit)

    def enter_text_no_tab(self, target: Any, text: Optional[str]) -> None:
        self.enter_text(target, text, submit=False)

    def type_one_char_at_a_time(self, target: Any, text: Optional[str], delay_ms: int = 100) -> None:
        """For inputs that run a lookup on every keystroke. No retry."""
        self.waits.clickable_safe(target, TYPE_CLICKABLE_SECONDS)
        element = self._resolve(target)
        self.driver.clear(element)
        for char in text or "":
            self.waits.sleep_millis(delay_ms)
            self.driver.send_keys(element, char)

    def move_to_and_send_keys(self, target: Any, keys: str) -> None:
        element = self._resolve(target)
        self.driver.hover(element)
        self.driver.click(element)
        self.driver.send_keys(element, keys)

    def press_key(self, key: str, target: Any = None) -> None:
        self.driver.press_key(key, self._resolve(target) if target is not None else None)

    def hit_escape_key(self) -> None:
        self.press_key("Escape")

    def hit_enter_key(self, target: Any = None) -> None:
        self.press_key("Enter", target)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def scroll_into_view(self, target: Any) -> None:
        self.driver.execute_script(SCROLL_INTO_VIEW, self._resolve(target))

    def checkbox_state(self, target: Any) -> bool:
        """Lightning draws the tick in ::after; its content is "" when checked."""
        content = self.driver.execute_script(CHECKBOX_AFTER_CONTENT, self._resolve(target))
        return content == '""'

    def text_from_available(self, *targets: Any) -> str:
        """
        Text of the first target that can be read.

        Raises:
            DriverError: None of the targets could be read
        """
        if not targets:
            return ""
        last_error: Optional[DriverError] = None
        for target in targets:
            try:
                return self.driver.get_text(self._resolve(target))
            except DriverError as e:
                last_error = e
        raise DriverError(
            last_error.kind, f"No passed elements were available to retrieve the text from: {last_error}"
        )

    def first_visible(self, elements: List[Any]) -> Optional[Any]:
        """First displayed element, or None when none is."""
        for element in elements or []:
            try:
                if self.driver.is_displayed(element):
                    return element
            except DriverError as e:
                logger.debug(f"Skipping unreadable element: {e}")
        return None


__all__ = ["ElementActions", "SCRIPT_CLICK", "CHECKBOX_AFTER_CONTENT"]
