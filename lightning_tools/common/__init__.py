"""
================================================================================
Lightning Tools Common Utilities
================================================================================

Shared configuration management and logging setup for the suite.

Exports:
    - get_config / set_config / reload_config: dot-notation configuration access
    - init_logger / get_logger: loguru setup with the run summary sink
    - RUN_SUMMARY: logger bound to the condensed run summary stream

Usage:
    from lightning_tools.common import get_config, init_logger

    init_logger()
    short_wait = get_config("waits.short", 7)

================================================================================
"""

from .global_config import (
    RUN_SUMMARY,
    RUN_SUMMARY_CHANNEL,
    get_config,
    get_logger,
    init_logger,
    reload_config,
    set_config,
)

__all__ = [
    "RUN_SUMMARY",
    "RUN_SUMMARY_CHANNEL",
    "get_config",
    "get_logger",
    "init_logger",
    "reload_config",
    "set_config",
]
