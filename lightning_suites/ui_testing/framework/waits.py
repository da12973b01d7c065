"""
================================================================================
Synchronization Waits
================================================================================

Polling waits for the asynchronous Lightning UI.

Every wait in the suite goes through poll_until(), a single loop that
evaluates a predicate, sleeps for the poll interval and gives up at a fixed
deadline. Waiter layers element conditions, timeout presets, the existence
probe and refresh-until helpers on top of it, and brackets each wait with the
waiting stopwatch.

Timing guarantees of poll_until():
    - a predicate that becomes true at time t (< deadline) is observed at the
      first poll at or after t, never later than the deadline
    - a predicate that never becomes true fails at or after the deadline,
      never before it

Usage:
    waits = Waiter(ctx)
    waits.visible(Locator.css("#username"), preset="short")
    new_status = waits.text_changed(status_field, baseline="Draft", seconds=30)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Iterable, List, Optional, TypeVar

import allure
from loguru import logger

from .clock import Clock
from .driver import (
    DriverError,
    ErrorKind,
    Locator,
    RetryBudgetExceeded,
    WaitTimeoutError,
    describe,
)
from .run_context import RunContext

T = TypeVar("T")

# Errors that mean "the element is not there (any more)"
LOOKUP_ERRORS: FrozenSet[ErrorKind] = frozenset(
    {ErrorKind.NO_SUCH_ELEMENT, ErrorKind.STALE_REFERENCE}
)

TEXT_CHANGE_INTERVAL = 0.25
STALE_RETRY_LIMIT = 15
STALE_RETRY_PAUSE_SECONDS = 0.25

# Truthy when another element covers the centre point of el
OBSCURED_SCRIPT = """el => {
    const r = el.getBoundingClientRect();
    const top = document.elementFromPoint(r.left + r.width / 2, r.top + r.height / 2);
    return !!top && top !== el && !el.contains(top);
}"""

READY_STATE_SCRIPT = "() => document.readyState"


class Condition(str, enum.Enum):
    """Predicate kinds understood by Waiter.until()."""
    VISIBLE = "visible"
    INVISIBLE = "invisible"
    PRESENT = "present"
    CLICKABLE = "clickable"
    ENABLED = "enabled"
    NOT_ENABLED = "not_enabled"
    TEXT_CHANGED = "text_changed"
    TEXT_CONTAINS = "text_contains"


@dataclass(frozen=True)
class WaitSpec:
    """
    Timeout, poll interval and condition of one wait.

    Raises:
        ValueError: interval or timeout not strictly positive
    """
    timeout: float
    interval: float
    condition: str = "condition"

    def __post_init__(self):
        if self.interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.interval}")
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")


def poll_until(
    predicate: Callable[[], Optional[T]],
    spec: WaitSpec,
    clock: Clock,
    target: str = "",
    ignored: Iterable[ErrorKind] = LOOKUP_ERRORS,
    baseline: Optional[str] = None,
) -> T:
    """
    Evaluate ``predicate`` every ``spec.interval`` seconds until it yields a
    value other than None/False or ``spec.timeout`` seconds have passed.

    Args:
        predicate: Returns None or False for "not yet", anything else to finish
        spec: Timeout, interval and condition name
        clock: Time source
        target: Description of what is polled, for the timeout message
        ignored: DriverError kinds treated as "not yet"; others propagate
        baseline: Starting text for text-change waits, for the timeout message

    Returns:
        The predicate's first satisfying value

    Raises:
        WaitTimeoutError: The deadline passed first
    """
    ignored = frozenset(ignored)
    start = clock.now()
    deadline = start + spec.timeout
    last_error: Optional[DriverError] = None

    while True:
        try:
            result = predicate()
            if result is not None and result is not False:
                return result
        except DriverError as e:
            if e.kind not in ignored:
                raise
            last_error = e

        now = clock.now()
        if now >= deadline:
            raise WaitTimeoutError(
                spec.condition, target, now - start, baseline=baseline, last_error=last_error
            )
        clock.sleep(min(spec.interval, deadline - now))


class Waiter:
    """
    Element, page and refresh waits bound to a RunContext.

    Targets are either Locators, re-resolved on every poll, or elements
    already resolved by the driver, which may go stale.
    """

    def __init__(self, ctx: RunContext):
        self.ctx = ctx
        self.driver = ctx.driver
        self.clock = ctx.clock

    # ------------------------------------------------------------------
    # Sleeping
    # ------------------------------------------------------------------

    def sleep(self, seconds: float) -> None:
        with self.ctx.stopwatch.waiting("sleep"):
            self.clock.sleep(seconds)

    def sleep_millis(self, millis: float) -> None:
        self.sleep(millis / 1000.0)

    # ------------------------------------------------------------------
    # Generic condition wait
    # ------------------------------------------------------------------

    def _timeout(self, timeout: Optional[float], preset: str) -> float:
        return timeout if timeout is not None else self.ctx.waits.seconds(preset)

    def _resolve(self, target: Any) -> Any:
        if isinstance(target, Locator):
            elements = self.driver.find_elements(target)
            return elements[0] if elements else None
        return target

    def _displayed(self, element: Any) -> bool:
        return element is not None and self.driver.is_displayed(element)

    def _predicate(self, condition: Condition, target: Any, text: Optional[str]) -> Callable[[], Any]:
        driver = self.driver

        def invisible() -> bool:
            try:
                return not self._displayed(self._resolve(target))
            except DriverError as e:
                if e.kind in LOOKUP_ERRORS:
                    return True
                raise

        def not_enabled() -> bool:
            try:
                element = self._resolve(target)
                return element is None or not driver.is_enabled(element)
            except DriverError as e:
                if e.kind in LOOKUP_ERRORS:
                    return True
                raise

        def visible() -> bool:
            return self._displayed(self._resolve(target))

        def present() -> bool:
            if isinstance(target, Locator):
                return bool(driver.find_elements(target))
            driver.is_displayed(target)
            return True

        def clickable() -> bool:
            element = self._resolve(target)
            return (
                self._displayed(element)
                and driver.is_enabled(element)
                and not driver.execute_script(OBSCURED_SCRIPT, element)
            )

        def enabled() -> bool:
            element = self._resolve(target)
            return element is not None and driver.is_enabled(element)

        def text_contains() -> bool:
            element = self._resolve(target)
            return element is not None and (text or "") in driver.get_text(element)

        predicates = {
            Condition.VISIBLE: visible,
            Condition.INVISIBLE: invisible,
            Condition.PRESENT: present,
            Condition.CLICKABLE: clickable,
            Condition.ENABLED: enabled,
            Condition.NOT_ENABLED: not_enabled,
            Condition.TEXT_CONTAINS: text_contains,
        }
        if condition not in predicates:
            raise ValueError(f"Condition {condition} needs a dedicated wait")
        return predicates[condition]

    def until(
        self,
        condition: Condition,
        target: Any,
        timeout: Optional[float] = None,
        preset: str = "default",
        text: Optional[str] = None,
        interval: Optional[float] = None,
        ignored: Iterable[ErrorKind] = LOOKUP_ERRORS,
    ) -> Any:
        """
        Wait for ``condition`` to hold for ``target``.

        Args:
            condition: Predicate kind
            target: Locator or resolved element
            timeout: Seconds; the ``preset`` is used when omitted
            preset: Named timeout preset (short, default, long, fifteen, two)
            text: Expected substring for TEXT_CONTAINS
            interval: Poll interval; clickable waits poll slower by default
            ignored: Error kinds that count as "not yet"

        Raises:
            WaitTimeoutError: The condition did not hold in time
        """
        condition = Condition(condition)
        if interval is None:
            interval = (
                self.ctx.waits.clickable_poll_interval
                if condition is Condition.CLICKABLE
                else self.ctx.waits.poll_interval
            )
        spec = WaitSpec(self._timeout(timeout, preset), interval, condition.value)
        with self.ctx.stopwatch.waiting(condition.value):
            return poll_until(
                self._predicate(condition, target, text),
                spec,
                self.clock,
                target=describe(target),
                ignored=ignored,
            )

    # ------------------------------------------------------------------
    # Named element waits
    # ------------------------------------------------------------------

    def visible(self, target: Any, timeout: Optional[float] = None, preset: str = "default") -> Any:
        return self.until(Condition.VISIBLE, target, timeout, preset)

    def invisible(self, target: Any, timeout: Optional[float] = None, preset: str = "default") -> Any:
        return self.until(Condition.INVISIBLE, target, timeout, preset)

    def present(self, target: Any, timeout: Optional[float] = None, preset: str = "default") -> Any:
        return self.until(Condition.PRESENT, target, timeout, preset)

    def clickable(self, target: Any, seconds: float) -> Any:
        return self.until(Condition.CLICKABLE, target, seconds)

    def enabled(self, target: Any, millis: float) -> Any:
        return self.until(Condition.ENABLED, target, millis / 1000.0)

    def not_enabled(self, target: Any, millis: float) -> Any:
        return self.until(Condition.NOT_ENABLED, target, millis / 1000.0)

    def text_contains(self, target: Any, text: str, timeout: Optional[float] = None,
                      preset: str = "default") -> Any:
        return self.until(Condition.TEXT_CONTAINS, target, timeout, preset, text=text)

    def text_changed(self, target: Any, baseline: str, seconds: float) -> str:
        """
        Wait for the element text to differ from ``baseline``.

        Returns:
            The new text

        Raises:
            WaitTimeoutError: Still equal to the baseline after ``seconds``,
                carrying the baseline and the elapsed time
        """
        def changed() -> Optional[str]:
            element = self._resolve(target)
            if element is None:
                return None
            current = self.driver.get_text(element)
            logger.debug(f"Current value of {describe(target)}: {current!r}")
            return current if current != baseline else None

        spec = WaitSpec(seconds, TEXT_CHANGE_INTERVAL, Condition.TEXT_CHANGED.value)
        with self.ctx.stopwatch.waiting(Condition.TEXT_CHANGED.value):
            return poll_until(changed, spec, self.clock, target=describe(target), baseline=baseline)

    def text_changes_within(self, target: Any, seconds: float) -> bool:
        """Return once the text changes or after ``seconds``; True if it changed."""
        element = self._resolve(target)
        if element is None:
            return False
        baseline = self.driver.get_text(element)
        try:
            self.text_changed(target, baseline, seconds)
            return True
        except WaitTimeoutError:
            return False

    def clickable_safe(self, target: Any, seconds: float) -> None:
        """
        Clickable wait that starts over when the element goes stale.

        Raises:
            RetryBudgetExceeded: Still stale after the retry limit
            WaitTimeoutError: Not clickable in time
        """
        last: Optional[DriverError] = None
        for attempt in range(STALE_RETRY_LIMIT + 1):
            try:
                self.until(Condition.CLICKABLE, target, seconds,
                           ignored={ErrorKind.NO_SUCH_ELEMENT})
                return
            except DriverError as e:
                if e.kind is not ErrorKind.STALE_REFERENCE:
                    raise
                logger.warning(f"Stale reference waiting for {describe(target)}, retry {attempt + 1}")
                last = e
                if attempt < STALE_RETRY_LIMIT:
                    self.sleep(STALE_RETRY_PAUSE_SECONDS)
        raise RetryBudgetExceeded(
            f"Maximum retry count exceeded waiting for {describe(target)} to be clickable"
        ) from last

    def wait_to_vanish(self, target: Any, seconds: float) -> None:
        """Wait up to ``seconds`` for the element to stop being displayed."""
        self.until(Condition.INVISIBLE, target, seconds, interval=1.0)

    # ------------------------------------------------------------------
    # Existence probe
    # ------------------------------------------------------------------

    def element_exists(self, target: Any, within: Optional[float] = None) -> bool:
        """
        Answer whether the target exists. Never raises for absence.

        Args:
            target: Locator (list query) or resolved element (still attached)
            within: Seconds to keep polling the list query; a single query
                when omitted
        """
        def exists() -> bool:
            if isinstance(target, Locator):
                return bool(self.driver.find_elements(target))
            try:
                self.driver.is_displayed(target)
                return True
            except DriverError as e:
                if e.kind in LOOKUP_ERRORS:
                    return False
                raise

        if not within:
            return exists()

        spec = WaitSpec(within, self.ctx.waits.poll_interval, "existing")
        with self.ctx.stopwatch.waiting("exists"):
            try:
                return poll_until(exists, spec, self.clock, target=describe(target))
            except WaitTimeoutError:
                return False

    # ------------------------------------------------------------------
    # Page waits
    # ------------------------------------------------------------------

    def title_contains(self, title: str, timeout: Optional[float] = None, preset: str = "default") -> bool:
        spec = WaitSpec(self._timeout(timeout, preset), self.ctx.waits.poll_interval, "in title")
        with self.ctx.stopwatch.waiting("title"):
            return poll_until(lambda: title in self.driver.title(), spec, self.clock,
                              target=repr(title))

    def url_contains(self, partial: str, timeout: Optional[float] = None, preset: str = "default") -> bool:
        spec = WaitSpec(self._timeout(timeout, preset), self.ctx.waits.poll_interval, "in url")
        with self.ctx.stopwatch.waiting("url"):
            return poll_until(lambda: partial in self.driver.current_url(), spec, self.clock,
                              target=repr(partial))

    def page_loaded(self, timeout: Optional[float] = None, preset: str = "default") -> bool:
        spec = WaitSpec(self._timeout(timeout, preset), self.ctx.waits.poll_interval, "loaded")
        with self.ctx.stopwatch.waiting("page_load"):
            return poll_until(
                lambda: self.driver.execute_script(READY_STATE_SCRIPT) == "complete",
                spec, self.clock, target="document",
            )

    def text_to_appear(self, text: str, attempts: int = 12) -> bool:
        """Poll the page body for ``text``; False when it never shows."""
        body = Locator.css("body", "page body")
        try:
            self.until(Condition.TEXT_CONTAINS, body, attempts * TEXT_CHANGE_INTERVAL,
                       text=text, interval=TEXT_CHANGE_INTERVAL)
            return True
        except WaitTimeoutError:
            logger.debug(f"Text {text!r} did not appear")
            return False

    def accept_alert_if_present(self) -> Optional[str]:
        message = self.driver.accept_alert()
        if message is not None:
            logger.info(f"Alert appeared with text : {message}")
        return message

    # ------------------------------------------------------------------
    # Refresh-until helpers
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        with self.ctx.stopwatch.waiting("refresh"):
            self.driver.refresh()

    @staticmethod
    def _check_refreshes(refreshes: int) -> None:
        if refreshes < 1:
            raise ValueError(f"Number of refreshes must be at least 1, got {refreshes}")

    @allure.step("Refresh until visible: {description}")
    def refresh_until_visible(self, target: Any, refreshes: int, description: str) -> None:
        """
        Refresh, then wait (fifteen-second preset) for the target, up to
        ``refreshes`` times.

        Raises:
            WaitTimeoutError / DriverError: the most recent failure when the
                target never became visible
        """
        self._check_refreshes(refreshes)
        last_error: Optional[DriverError] = None
        with self.ctx.stopwatch.waiting("refresh_until"):
            for _ in range(refreshes):
                logger.info(f"About to refresh page to wait for element to become visible : {description}")
                self.refresh()
                try:
                    self.visible(target, preset="fifteen")
                    return
                except DriverError as e:
                    if e.kind not in (ErrorKind.TIMEOUT, ErrorKind.NO_SUCH_ELEMENT):
                        raise
                    last_error = e
        raise last_error

    @allure.step("Refresh until {description} shows text")
    def refresh_until_visible_and_contains_text(
        self,
        target: Any,
        texts: Optional[List[str]],
        refreshes: int,
        millis_between: float,
        description: str,
    ) -> None:
        """
        Refresh until the target is visible and its text contains any of
        ``texts``. An empty list only waits for visibility.
        """
        self._check_refreshes(refreshes)
        with self.ctx.stopwatch.waiting("refresh_until"):
            self.refresh_until_visible(target, refreshes, description)
            if not texts:
                return
            for _ in range(refreshes):
                current = self.driver.get_text(self._resolve(target))
                if any(text in current for text in texts):
                    return
                self.sleep_millis(millis_between)
                logger.info(f"About to refresh page to wait for element to contain text : {texts}")
                self.refresh()
                self.visible(target, preset="fifteen")
            current = self.driver.get_text(self._resolve(target))
        raise RetryBudgetExceeded(
            f"{description} not containing text {texts} after {refreshes} refreshes. "
            f"Current element text : {current}"
        )

    @allure.step("Refresh until title contains {title}")
    def refresh_until_title(self, title: str, refreshes: int, description: str = "") -> None:
        self._check_refreshes(refreshes)
        last_error: Optional[WaitTimeoutError] = None
        with self.ctx.stopwatch.waiting("refresh_until"):
            for _ in range(refreshes):
                logger.info(f"About to refresh page to wait for title {title!r} {description}")
                self.refresh()
                try:
                    self.title_contains(title)
                    return
                except WaitTimeoutError as e:
                    last_error = e
        raise last_error

    @allure.step("Refresh until absent: {description}")
    def refresh_until_absent(self, locator: Locator, refreshes: int, description: str,
                             settle_seconds: float = 4) -> None:
        """
        Refresh until nothing matches ``locator``. Always starts with a refresh.

        Raises:
            RetryBudgetExceeded: Still present after ``refreshes`` refreshes
        """
        self._check_refreshes(refreshes)
        with self.ctx.stopwatch.waiting("refresh_until"):
            for _ in range(refreshes):
                logger.info(f"About to refresh page to wait for element to not exist : {locator.selector}")
                self.refresh()
                self.sleep(settle_seconds)
                if not self.element_exists(locator):
                    return
        raise RetryBudgetExceeded(
            f"{description} still exists after {refreshes} refreshes. Locator : {locator.selector}"
        )

    @allure.step("Refresh until exists: {description}")
    def refresh_until_exists(self, locator: Locator, refreshes: int, description: str,
                             settle_seconds: float = 4) -> None:
        """
        Refresh until ``locator`` matches. Always starts with a refresh.

        Raises:
            RetryBudgetExceeded: Still missing after ``refreshes`` refreshes
        """
        self._check_refreshes(refreshes)
        with self.ctx.stopwatch.waiting("refresh_until"):
            for _ in range(refreshes):
                logger.info(f"About to refresh page to wait for element to exist : {locator.selector}")
                self.refresh()
                self.sleep(settle_seconds)
                if self.element_exists(locator):
                    return
        raise RetryBudgetExceeded(
            f"{description} does not exist after {refreshes} refreshes. Locator : {locator.selector}"
        )


__all__ = [
    "Condition",
    "WaitSpec",
    "poll_until",
    "Waiter",
    "LOOKUP_ERRORS",
    "OBSCURED_SCRIPT",
    "READY_STATE_SCRIPT",
]
