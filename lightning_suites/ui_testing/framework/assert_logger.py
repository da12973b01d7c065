"""
Assertions that leave a trail in the logs.

Passing checks are logged at INFO, failures at ERROR and on the RUN_SUMMARY
stream. Failures are re-raised when ``rethrow`` is set, otherwise the scenario
carries on and the failure only shows in the logs.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from lightning_tools.common import RUN_SUMMARY


class AssertLogger:

    def __init__(self, rethrow: bool = True):
        self.rethrow = rethrow

    def _failed(self, message: str) -> None:
        logger.error(f"Assertion failed: {message}")
        RUN_SUMMARY.error(f"Assertion failed: {message}")
        if self.rethrow:
            raise AssertionError(message)

    def assert_true(self, condition: bool, message: str) -> None:
        if condition:
            logger.info(f"Assertion passed: {message}")
        else:
            self._failed(message)

    def assert_false(self, condition: bool, message: str) -> None:
        self.assert_true(not condition, message)

    def assert_equals(self, expected: Any, actual: Any, message: str) -> None:
        if expected == actual:
            logger.info(f"Assertion passed: {message} [{actual!r}]")
        else:
            self._failed(f"{message} expected [{expected!r}] but found [{actual!r}]")

    def assert_none(self, value: Any, message: str) -> None:
        if value is None:
            logger.info(f"Assertion passed: {message}")
        else:
            self._failed(f"{message} expected None but found [{value!r}]")

    def assert_contains(self, text: str, expected: str, message: str) -> None:
        if expected in (text or ""):
            logger.info(f"Assertion passed: {message}")
        else:
            self._failed(f"{message} expected [{text!r}] to contain [{expected!r}]")


__all__ = ["AssertLogger"]
