"""
================================================================================
Driver Capability
================================================================================

The narrow browser interface the synchronization engine is written against,
plus the error taxonomy every retry and escalation decision branches on.

    - Locator: an unresolved element description, re-evaluated on each poll
    - ErrorKind / DriverError: the only exception type a driver raises
    - WaitTimeoutError: a deadline passed before a condition held
    - RetryBudgetExceeded: a bounded recovery loop gave up
    - DriverCapability: the protocol PlaywrightDriver and test fakes implement

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol


class ErrorKind(enum.Enum):
    """Classification of a driver failure."""
    STALE_REFERENCE = "stale_reference"
    NO_SUCH_ELEMENT = "no_such_element"
    TIMEOUT = "timeout"
    NOT_INTERACTABLE = "not_interactable"
    SCRIPT = "script"
    DRIVER = "driver"


class DriverError(Exception):
    """
    Raised by the driver abstraction for every browser-side failure.

    Attributes:
        kind: ErrorKind used by retry policies and the escalation ladder
        message: Human readable description
    """

    def __init__(self, kind: ErrorKind, message: str = ""):
        super().__init__(f"[{kind.value}] {message}" if message else f"[{kind.value}]")
        self.kind = kind
        self.message = message


class WaitTimeoutError(DriverError):
    """
    A wait condition did not hold before its deadline.

    Attributes:
        condition: Name of the condition that was polled
        target: Description of what was polled
        elapsed: Seconds spent polling
        baseline: Starting text for text-change waits
    """

    def __init__(
        self,
        condition: str,
        target: str,
        elapsed: float,
        baseline: Optional[str] = None,
        last_error: Optional[BaseException] = None,
    ):
        message = f"Timed out after {elapsed:.2f}s waiting for {target} to be {condition}"
        if baseline is not None:
            message += f" (baseline text {baseline!r})"
        if last_error is not None:
            message += f"; last error: {last_error}"
        super().__init__(ErrorKind.TIMEOUT, message)
        self.condition = condition
        self.target = target
        self.elapsed = elapsed
        self.baseline = baseline


class RetryBudgetExceeded(RuntimeError):
    """A bounded retry or refresh loop ran out of attempts."""


@dataclass(frozen=True)
class Locator:
    """
    Unresolved description of an element.

    Selectors use Playwright syntax: ``xpath=//...``, CSS, ``text=...``.
    """
    selector: str
    description: str = ""

    @classmethod
    def xpath(cls, expression: str, description: str = "") -> "Locator":
        return cls(f"xpath={expression}", description)

    @classmethod
    def css(cls, expression: str, description: str = "") -> "Locator":
        return cls(expression, description)

    def __str__(self) -> str:
        return self.description or self.selector


def describe(target: Any) -> str:
    """Readable name for a Locator or a resolved element."""
    if isinstance(target, Locator):
        return str(target)
    return repr(target)


class DriverCapability(Protocol):
    """Browser operations consumed by waits, actions and pages."""

    def find_element(self, locator: Locator) -> Any:
        """Resolve the first match or raise DriverError(NO_SUCH_ELEMENT)."""
        ...

    def find_elements(self, locator: Locator) -> List[Any]:
        """Resolve all matches. Never raises for zero matches."""
        ...

    def click(self, element: Any) -> None: ...

    def send_keys(self, element: Any, text: str) -> None: ...

    def press_key(self, key: str, element: Any = None) -> None: ...

    def clear(self, element: Any) -> None: ...

    def is_displayed(self, element: Any) -> bool: ...

    def is_enabled(self, element: Any) -> bool: ...

    def get_text(self, element: Any) -> str: ...

    def execute_script(self, script: str, element: Any = None) -> Any:
        """Evaluate a JS function expression, passing the element when given."""
        ...

    def hover(self, element: Any) -> None: ...

    def navigate(self, url: str) -> None: ...

    def refresh(self) -> None: ...

    def title(self) -> str: ...

    def current_url(self) -> str: ...

    def accept_alert(self) -> Optional[str]:
        """Accept a pending dialog and return its message, or None."""
        ...

    def screenshot(self, path: str) -> None: ...

    def close(self) -> None: ...


__all__ = [
    "ErrorKind",
    "DriverError",
    "WaitTimeoutError",
    "RetryBudgetExceeded",
    "Locator",
    "describe",
    "DriverCapability",
]
