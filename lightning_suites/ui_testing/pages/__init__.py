"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the Lightning application.

Each page class encapsulates:
    - Element locators
    - How to confirm the page has arrived
    - Page-specific actions

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ..framework.run_context import RunContext
from .home_page import HomePage
from .login_page import LoginPage
from .navigation_panel import NavigationPanel


@dataclass
class Pages:
    """The page objects of one scenario, built around its RunContext."""
    navigation: NavigationPanel
    login: LoginPage
    home: HomePage

    @classmethod
    def initialise(cls, ctx: RunContext) -> "Pages":
        navigation = NavigationPanel(ctx)
        return cls(
            navigation=navigation,
            login=LoginPage(ctx, navigation),
            home=HomePage(ctx),
        )


__all__ = [
    "Pages",
    "LoginPage",
    "HomePage",
    "NavigationPanel",
]
