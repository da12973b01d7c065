"""
Fakes for framework unit tests: a virtual clock and an in-memory driver.

The clock only moves when something sleeps, and runs scheduled callbacks
as it passes their time, so a test can say "the Save button shows up 3s
from now" without real waiting.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest

from lightning_suites.ui_testing.framework.driver import DriverError, ErrorKind, Locator
from lightning_suites.ui_testing.framework.element_actions import CHECKBOX_AFTER_CONTENT, SCRIPT_CLICK
from lightning_suites.ui_testing.framework.run_context import RunContext, SuiteSettings
from lightning_suites.ui_testing.framework.waits import OBSCURED_SCRIPT, READY_STATE_SCRIPT


class FakeClock:

    def __init__(self, start: float = 0.0):
        self.time = start
        self.sleeps: List[float] = []
        self._events: List[tuple] = []

    def now(self) -> float:
        return self.time

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        target = self.time + seconds
        while self._events and self._events[0][0] <= target:
            when, callback = self._events.pop(0)
            self.time = max(self.time, when)
            callback()
        self.time = target

    def at(self, when: float, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the clock reaches ``when``."""
        self._events.append((when, callback))
        self._events.sort(key=lambda event: event[0])


class FakeElement:

    def __init__(self, name: str, text: str = "", displayed: bool = True, enabled: bool = True,
                 after_content: str = "none"):
        self.name = name
        self.text = text
        self.displayed = displayed
        self.enabled = enabled
        self.after_content = after_content
        self.stale = False
        self.value = ""

    def __repr__(self) -> str:
        return f"<FakeElement {self.name}>"


class FakeDriver:
    """
    In-memory DriverCapability.

    Failures are scripted per element name and operation:
        driver.fail("save", "click", ErrorKind.DRIVER, times=3)
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.elements: Dict[str, List[FakeElement]] = {}
        self.failures: Dict[tuple, List[ErrorKind]] = {}
        self.calls: List[tuple] = []
        self.refreshes = 0
        self.on_refresh: Optional[Callable[[int], None]] = None
        self.page_title = ""
        self.url = ""
        self.pending_alert: Optional[str] = None
        self.screenshots: List[str] = []

    # -- arranging --------------------------------------------------------

    def add(self, locator: Locator, name: Optional[str] = None, **attrs: Any) -> FakeElement:
        element = FakeElement(name or locator.selector, **attrs)
        self.elements.setdefault(locator.selector, []).append(element)
        return element

    def remove(self, locator: Locator) -> None:
        for element in self.elements.pop(locator.selector, []):
            element.stale = True

    def fail(self, name: str, operation: str, kind: ErrorKind, times: int = 1) -> None:
        self.failures.setdefault((name, operation), []).extend([kind] * times)

    def ops(self, operation: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == operation]

    def _act(self, operation: str, element: FakeElement, *args: Any) -> None:
        self.calls.append((operation, element.name) + args)
        if element.stale:
            raise DriverError(ErrorKind.STALE_REFERENCE, f"{element.name} is detached")
        pending = self.failures.get((element.name, operation))
        if pending:
            raise DriverError(pending.pop(0), f"{operation} failed on {element.name}")

    # -- DriverCapability -------------------------------------------------

    def find_element(self, locator: Locator) -> FakeElement:
        found = self.find_elements(locator)
        if not found:
            raise DriverError(ErrorKind.NO_SUCH_ELEMENT, f"No element for {locator.selector}")
        return found[0]

    def find_elements(self, locator: Locator) -> List[FakeElement]:
        self.calls.append(("find", locator.selector))
        return list(self.elements.get(locator.selector, []))

    def click(self, element: FakeElement) -> None:
        self._act("click", element)

    def send_keys(self, element: FakeElement, text: str) -> None:
        self._act("send_keys", element, text)
        element.value += text

    def press_key(self, key: str, element: Any = None) -> None:
        self.calls.append(("press_key", element.name if element is not None else None, key))

    def clear(self, element: FakeElement) -> None:
        self._act("clear", element)
        element.value = ""

    def is_displayed(self, element: FakeElement) -> bool:
        if element.stale:
            raise DriverError(ErrorKind.STALE_REFERENCE, f"{element.name} is detached")
        return element.displayed

    def is_enabled(self, element: FakeElement) -> bool:
        if element.stale:
            raise DriverError(ErrorKind.STALE_REFERENCE, f"{element.name} is detached")
        return element.enabled

    def get_text(self, element: FakeElement) -> str:
        if element.stale:
            raise DriverError(ErrorKind.STALE_REFERENCE, f"{element.name} is detached")
        return element.text

    def execute_script(self, script: str, element: Any = None) -> Any:
        if script == OBSCURED_SCRIPT:
            return False
        if script == READY_STATE_SCRIPT:
            return "complete"
        if script == SCRIPT_CLICK:
            self._act("script_click", element)
            return None
        if script == CHECKBOX_AFTER_CONTENT:
            return element.after_content
        if element is not None:
            self._act("script", element)
        return None

    def hover(self, element: FakeElement) -> None:
        self._act("hover", element)

    def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))
        self.url = url

    def refresh(self) -> None:
        self.refreshes += 1
        self.calls.append(("refresh", self.refreshes, self.clock.now()))
        if self.on_refresh is not None:
            self.on_refresh(self.refreshes)

    def title(self) -> str:
        return self.page_title

    def current_url(self) -> str:
        return self.url

    def accept_alert(self) -> Optional[str]:
        message, self.pending_alert = self.pending_alert, None
        return message

    def screenshot(self, path: str) -> None:
        self.screenshots.append(path)

    def close(self) -> None:
        self.calls.append(("close",))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def driver(clock: FakeClock) -> FakeDriver:
    return FakeDriver(clock)


@pytest.fixture
def settings() -> SuiteSettings:
    return SuiteSettings(
        environment="DEV",
        url="https://example--dev.sandbox.my.salesforce.com",
        users={"SalesUser": {"username": "sales.user@example.com", "password": "pw"}},
    )


@pytest.fixture
def ctx(driver: FakeDriver, settings: SuiteSettings, clock: FakeClock) -> RunContext:
    context = RunContext(driver, settings, clock)
    context.stopwatch.initialise()
    return context
