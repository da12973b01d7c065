"""
================================================================================
Run Context
================================================================================

Explicitly constructed owner of everything a scenario run shares: the driver
session, the clock, stopwatch accounting, suite settings and the current
scenario. Components receive it instead of reaching for globals.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from lightning_tools.common import get_config

from .clock import Clock, SystemClock
from .driver import DriverCapability
from .scenario import ScenarioContext
from .stopwatch import StopWatchController


class ConfigurationError(Exception):
    """A required configuration value is missing or malformed."""
    pass


@dataclass(frozen=True)
class WaitPresets:
    """
    Named timeout presets in seconds plus the polling intervals.

    Attributes:
        short: Quick UI reactions (7s)
        default: Standard page transitions (61s)
        long: Slow back-office processing (360s)
        fifteen: Post-refresh re-waits (15s)
        two: Near-immediate checks (2s)
        poll_interval: Default polling interval
        clickable_poll_interval: Polling interval for clickable waits
    """
    short: float = 7
    default: float = 61
    long: float = 360
    fifteen: float = 15
    two: float = 2
    poll_interval: float = 0.2
    clickable_poll_interval: float = 0.25

    def seconds(self, preset: str) -> float:
        try:
            return float(getattr(self, preset))
        except AttributeError:
            raise ValueError(f"Unknown wait preset: {preset}") from None

    @classmethod
    def from_config(cls) -> "WaitPresets":
        raw = get_config("waits", {}) or {}
        known = {k: float(v) for k, v in raw.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass
class SuiteSettings:
    """
    Typed view over the YAML configuration.

    Attributes:
        environment: Environment name, upper case (DEV, SIT, UAT ...)
        url: Login URL of the environment
        users: Role name -> raw user mapping from configuration
        waits: Timeout presets
        treat_technical_errors_as_skips: Classification policy
        assert_rethrow: Whether AssertLogger re-raises failed assertions
        login_workaround_seconds: Pause after the login page appears
    """
    environment: str = "DEV"
    url: str = ""
    users: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    waits: WaitPresets = field(default_factory=WaitPresets)
    treat_technical_errors_as_skips: bool = True
    assert_rethrow: bool = True
    login_workaround_seconds: float = 0

    @classmethod
    def from_config(cls) -> "SuiteSettings":
        environment = str(os.getenv("ENVIRONMENT") or get_config("environment", "DEV")).upper()
        env_block = get_config(f"environments.{environment}", {}) or {}
        return cls(
            environment=environment,
            url=env_block.get("url", ""),
            users=env_block.get("users", {}) or {},
            waits=WaitPresets.from_config(),
            treat_technical_errors_as_skips=bool(
                get_config("policy.treat_technical_errors_as_skips", True)
            ),
            assert_rethrow=bool(get_config("policy.assert_rethrow", True)),
            login_workaround_seconds=float(get_config("login.workaround_seconds", 0) or 0),
        )

    def credentials_for(self, role: str) -> Credentials:
        """
        Look up the login for a role in the current environment.

        Role names are matched with spaces removed, so "Sales User" and
        "SalesUser" are the same role. A password may be given inline or
        through the environment variable named by ``password_env``.

        Raises:
            ConfigurationError: Role unknown or incomplete for this environment
        """
        key = role.replace(" ", "")
        user = self.users.get(key)
        if not user or not user.get("username"):
            raise ConfigurationError(
                f"Unable to find user details for {key} in environment {self.environment}"
            )
        password = user.get("password")
        if password is None and user.get("password_env"):
            password = os.getenv(user["password_env"])
        if not password:
            raise ConfigurationError(f"No password configured for {key} in {self.environment}")
        return Credentials(username=user["username"], password=str(password))


class RunContext:
    """
    Shared state for one run.

    Args:
        driver: The single driver session
        settings: Suite settings, loaded from configuration when omitted
        clock: Time source, the system clock when omitted
    """

    def __init__(
        self,
        driver: DriverCapability,
        settings: Optional[SuiteSettings] = None,
        clock: Optional[Clock] = None,
    ):
        self.driver = driver
        self.settings = settings or SuiteSettings.from_config()
        self.clock = clock or SystemClock()
        self.stopwatch = StopWatchController(self.clock)
        self.scenario: Optional[ScenarioContext] = None

    @property
    def waits(self) -> WaitPresets:
        return self.settings.waits

    def begin_scenario(self, scenario: ScenarioContext) -> ScenarioContext:
        self.scenario = scenario
        return scenario

    def end_scenario(self) -> None:
        self.scenario = None


__all__ = [
    "ConfigurationError",
    "WaitPresets",
    "Credentials",
    "SuiteSettings",
    "RunContext",
]
