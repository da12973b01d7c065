"""
================================================================================
Exception Classification and Reporting
================================================================================

Turns an unrecovered technical error into a scenario outcome.

    - The full traceback goes to the diagnostic log at ERROR.
    - A condensed line goes to the RUN_SUMMARY stream: origin, message, the
      first line of the error and only the stack frames from this project.
    - With treat_technical_errors_as_skips (the default) the scenario is
      skipped, otherwise it fails. The original error is never re-raised.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import traceback
import types
from typing import Any, NoReturn, Tuple

import pytest
from loguru import logger

from lightning_tools.common import RUN_SUMMARY
from lightning_tools.report_tools import attach_text

from .run_context import RunContext


PROJECT_PACKAGES = ("lightning_suites", "lightning_tools")
EXCLUDED_MODULES = ("assert_logger",)
STACK_PADDING = " " * 36


def origin_name(origin: Any) -> Tuple[str, str]:
    """
    Short and qualified name of where an error was handled.

    Instances, classes, modules and plain strings all resolve the same way,
    so ``handle(msg, e, self)`` and ``handle(msg, e, type(self))`` agree.
    """
    if isinstance(origin, str):
        return origin.rsplit(".", 1)[-1], origin
    if isinstance(origin, types.ModuleType):
        return origin.__name__.rsplit(".", 1)[-1], origin.__name__
    cls = origin if isinstance(origin, type) else type(origin)
    return cls.__name__, f"{cls.__module__}.{cls.__qualname__}"


def first_line(error: BaseException) -> str:
    text = str(error).strip()
    head = text.splitlines()[0] if text else ""
    return f"{type(error).__name__}: {head}" if head else type(error).__name__


def _is_project_frame(filename: str) -> bool:
    path = filename.replace("\\", "/")
    return (
        any(f"/{package}/" in path for package in PROJECT_PACKAGES)
        and not any(f"/{module}.py" in path for module in EXCLUDED_MODULES)
    )


def essentials(error: BaseException) -> str:
    """First line of the error plus the project's own stack frames, padded."""
    lines = [first_line(error)]
    for frame in traceback.extract_tb(error.__traceback__):
        if _is_project_frame(frame.filename):
            short_file = frame.filename.replace("\\", "/").rsplit("/", 1)[-1]
            lines.append(f"{STACK_PADDING}at {frame.name}({short_file}:{frame.lineno})")
    return "\n".join(lines)


class ExceptionHandler:
    """
    Classifies unrecovered technical errors.

    Args:
        treat_technical_errors_as_skips: Skip the scenario (True) or fail it
    """

    def __init__(self, treat_technical_errors_as_skips: bool = True):
        self.treat_technical_errors_as_skips = treat_technical_errors_as_skips

    @classmethod
    def from_context(cls, ctx: RunContext) -> "ExceptionHandler":
        return cls(ctx.settings.treat_technical_errors_as_skips)

    def handle(self, message: str, error: BaseException, origin: Any) -> NoReturn:
        """
        Log, summarize and convert ``error`` into a skip or a failure.

        Args:
            message: What was being attempted
            error: The unrecovered error
            origin: Page object, class, module or name that gave up

        Raises:
            pytest.skip.Exception: when technical errors are treated as skips
            pytest.fail.Exception: otherwise
        """
        short, qualified = origin_name(origin)
        logger.opt(exception=error).error(f"Exception thrown in {short} : {message}")

        summary = f"{qualified} : {message}\n{STACK_PADDING}{essentials(error)}"
        RUN_SUMMARY.error(summary)
        attach_text(summary, name="Technical error")

        reason = f"{short} : {message} ({first_line(error)})"
        if self.treat_technical_errors_as_skips:
            pytest.skip(f"Technical error, scenario skipped. {reason}")
        pytest.fail(reason)


__all__ = ["ExceptionHandler", "origin_name", "essentials", "first_line"]
