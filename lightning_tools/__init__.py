"""
================================================================================
Lightning Tools
================================================================================

Shared infrastructure for the Lightning UI automation suite.

Modules:
    - common: Configuration loading, logging setup and the run summary stream
    - report_tools: Allure attachment helpers

Example:
    from lightning_tools.common import get_config, init_logger, RUN_SUMMARY

    init_logger()
    RUN_SUMMARY.info("Suite started")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
