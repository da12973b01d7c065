"""
================================================================================
UI Testing Framework
================================================================================

Synchronization and resilient-interaction engine for Salesforce Lightning.

Components:
    - clock / stopwatch: time source and working/waiting accounting
    - driver / playwright_driver: driver capability and its Playwright adapter
    - waits: poll_until, element and page waits, refresh-until helpers
    - retry / element_actions: bounded retries and the click escalation ladder
    - page_base: page arrival confirmation and the base page object
    - exception_handler: technical error classification (skip or fail)
    - browser_manager: browser lifecycle

Author: Automation Team
License: MIT
================================================================================
"""

from .browser_manager import BrowserManager
from .clock import Clock, SystemClock
from .driver import (
    DriverCapability,
    DriverError,
    ErrorKind,
    Locator,
    RetryBudgetExceeded,
    WaitTimeoutError,
)
from .element_actions import ElementActions
from .exception_handler import ExceptionHandler
from .page_base import ArrivalConfirmer, ArrivalSpec, BasePage, Detour, PageObject
from .retry import InteractionOutcome, RetryPolicy, attempt
from .run_context import ConfigurationError, RunContext, SuiteSettings, WaitPresets
from .scenario import ScenarioContext
from .stopwatch import StopWatch, StopWatchController
from .waits import Condition, WaitSpec, Waiter, poll_until

__all__ = [
    "BrowserManager",
    "Clock",
    "SystemClock",
    "DriverCapability",
    "DriverError",
    "ErrorKind",
    "Locator",
    "RetryBudgetExceeded",
    "WaitTimeoutError",
    "ElementActions",
    "ExceptionHandler",
    "ArrivalConfirmer",
    "ArrivalSpec",
    "BasePage",
    "Detour",
    "PageObject",
    "InteractionOutcome",
    "RetryPolicy",
    "attempt",
    "ConfigurationError",
    "RunContext",
    "SuiteSettings",
    "WaitPresets",
    "ScenarioContext",
    "StopWatch",
    "StopWatchController",
    "Condition",
    "WaitSpec",
    "Waiter",
    "poll_until",
]
