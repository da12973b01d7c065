"""
================================================================================
Playwright Driver Adapter
================================================================================

Implements DriverCapability over a Playwright sync Page and translates
Playwright errors into DriverError kinds.

Translation rules:
    - detached element / destroyed execution context / disposed handle
      -> STALE_REFERENCE
    - a Playwright TimeoutError raised by an action (click, type, hover) means
      the actionability checks never passed -> NOT_INTERACTABLE
    - a failure inside execute_script -> SCRIPT
    - anything else -> DRIVER

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from loguru import logger
from playwright.sync_api import Dialog, ElementHandle, Page
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .driver import DriverError, ErrorKind, Locator


_STALE_MARKERS = (
    "not attached",
    "detached",
    "execution context was destroyed",
    "is disposed",
    "target closed",
    "frame was detached",
)

_NOT_INTERACTABLE_MARKERS = (
    "not visible",
    "not enabled",
    "not editable",
    "intercepts pointer events",
    "outside of the viewport",
    "not stable",
)


def classify_error(error: PlaywrightError, default: ErrorKind = ErrorKind.DRIVER) -> ErrorKind:
    """Map a Playwright error message onto an ErrorKind."""
    message = str(error).lower()
    if any(marker in message for marker in _STALE_MARKERS):
        return ErrorKind.STALE_REFERENCE
    if any(marker in message for marker in _NOT_INTERACTABLE_MARKERS):
        return ErrorKind.NOT_INTERACTABLE
    return default


class PlaywrightDriver:
    """
    DriverCapability implementation for one Playwright page.

    Dialogs (alert/confirm) are accepted as they open; accept_alert() reports
    the message of the last one seen.

    Args:
        page: Playwright sync Page owned by the BrowserManager
        action_timeout_ms: Timeout for each native action. Kept short so the
            framework's own retry budgets decide how long to keep trying.
    """

    def __init__(self, page: Page, action_timeout_ms: int = 5000):
        self.page = page
        self.action_timeout_ms = action_timeout_ms
        self._last_dialog: Optional[str] = None
        self.page.on("dialog", self._on_dialog)

    def _on_dialog(self, dialog: Dialog) -> None:
        self._last_dialog = dialog.message
        logger.debug(f"Accepting {dialog.type} dialog: {dialog.message}")
        dialog.accept()

    @contextmanager
    def _translated(
        self,
        what: str,
        default: ErrorKind = ErrorKind.DRIVER,
        on_timeout: ErrorKind = ErrorKind.TIMEOUT,
    ) -> Iterator[None]:
        try:
            yield
        except PlaywrightTimeoutError as e:
            raise DriverError(classify_error(e, on_timeout), f"{what}: {e}") from e
        except PlaywrightError as e:
            raise DriverError(classify_error(e, default), f"{what}: {e}") from e

    # ------------------------------------------------------------------
    # Element resolution
    # ------------------------------------------------------------------

    def find_element(self, locator: Locator) -> ElementHandle:
        with self._translated(f"find {locator}"):
            element = self.page.query_selector(locator.selector)
        if element is None:
            raise DriverError(ErrorKind.NO_SUCH_ELEMENT, f"No element matches {locator}")
        return element

    def find_elements(self, locator: Locator) -> List[ElementHandle]:
        with self._translated(f"find all {locator}"):
            return self.page.query_selector_all(locator.selector)

    # ------------------------------------------------------------------
    # Element actions and state
    # ------------------------------------------------------------------

    def click(self, element: ElementHandle) -> None:
        with self._translated("click", on_timeout=ErrorKind.NOT_INTERACTABLE):
            element.click(timeout=self.action_timeout_ms)

    def send_keys(self, element: ElementHandle, text: str) -> None:
        with self._translated("send keys", on_timeout=ErrorKind.NOT_INTERACTABLE):
            element.type(text, timeout=self.action_timeout_ms)

    def press_key(self, key: str, element: Optional[ElementHandle] = None) -> None:
        with self._translated(f"press {key}", on_timeout=ErrorKind.NOT_INTERACTABLE):
            if element is None:
                self.page.keyboard.press(key)
            else:
                element.press(key, timeout=self.action_timeout_ms)

    def clear(self, element: ElementHandle) -> None:
        with self._translated("clear", on_timeout=ErrorKind.NOT_INTERACTABLE):
            element.fill("", timeout=self.action_timeout_ms)

    def hover(self, element: ElementHandle) -> None:
        with self._translated("hover", on_timeout=ErrorKind.NOT_INTERACTABLE):
            element.hover(timeout=self.action_timeout_ms)

    def is_displayed(self, element: ElementHandle) -> bool:
        with self._translated("is displayed"):
            return element.is_visible()

    def is_enabled(self, element: ElementHandle) -> bool:
        with self._translated("is enabled"):
            return element.is_enabled()

    def get_text(self, element: ElementHandle) -> str:
        with self._translated("get text"):
            return element.inner_text()

    def execute_script(self, script: str, element: Optional[ElementHandle] = None) -> Any:
        with self._translated("execute script", default=ErrorKind.SCRIPT):
            if element is None:
                return self.page.evaluate(script)
            return element.evaluate(script)

    # ------------------------------------------------------------------
    # Page level
    # ------------------------------------------------------------------

    def navigate(self, url: str) -> None:
        with self._translated(f"navigate to {url}"):
            self.page.goto(url)

    def refresh(self) -> None:
        with self._translated("refresh"):
            self.page.reload()

    def title(self) -> str:
        with self._translated("title"):
            return self.page.title()

    def current_url(self) -> str:
        return self.page.url

    def accept_alert(self) -> Optional[str]:
        message, self._last_dialog = self._last_dialog, None
        return message

    def screenshot(self, path: str) -> None:
        with self._translated(f"screenshot {path}"):
            self.page.screenshot(path=path, full_page=True)

    def close(self) -> None:
        with self._translated("close page"):
            self.page.close()


__all__ = ["PlaywrightDriver", "classify_error"]
