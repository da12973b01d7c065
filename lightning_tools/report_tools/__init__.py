"""Allure reporting helpers."""

from .allure_utils import (
    AllureReportProcessor,
    ScenarioResultSummary,
    attach_screenshot,
    attach_text,
)

__all__ = [
    "AllureReportProcessor",
    "ScenarioResultSummary",
    "attach_screenshot",
    "attach_text",
]
