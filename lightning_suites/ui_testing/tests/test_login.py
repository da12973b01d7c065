"""
================================================================================
Login Feature UI Tests
================================================================================

Live scenarios against a configured org. Skipped unless browser.live is
enabled and the role's password variable is set.

================================================================================
"""

import allure
import pytest

from lightning_suites.ui_testing.pages import Pages


@allure.epic("UI Testing")
@allure.feature("Authentication")
class TestLogin:
    """Login and navigation smoke scenarios."""

    @allure.story("Happy Path")
    @allure.title("Sales user logs in and reaches the home page")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.login
    @pytest.mark.P0
    @pytest.mark.smoke
    @pytest.mark.live
    def test_login_reaches_home(self, pages: Pages):
        with allure.step("Open login page"):
            pages.login.go_to()
            pages.login.confirm_arrival()

        pages.login.login("Sales User")

        with allure.step("Verify home page"):
            pages.home.confirm_arrival()
            assert pages.home.instance_url

        pages.navigation.logout()

    @allure.story("Navigation")
    @allure.title("Accounts tab opens after login")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.navigation
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.live
    def test_accounts_tab(self, pages: Pages):
        pages.login.go_to()
        pages.login.confirm_arrival()
        pages.login.login("Sales User")
        pages.home.confirm_arrival()

        with allure.step("Open Accounts"):
            pages.navigation.clear_notifications()
            pages.navigation.click_tab("Accounts")
            pages.navigation.waits.title_contains("Accounts")

        pages.navigation.logout()
