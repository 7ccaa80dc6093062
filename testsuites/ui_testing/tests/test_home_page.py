"""
================================================================================
Home Page UI Tests (Async / Playwright)
================================================================================

Page composition and the detected location banner.

================================================================================
"""

import allure
import pytest

from testsuites.ui_testing.framework.errors import AssertionMismatch
from testsuites.ui_testing.pages.home_page import HomePage


@allure.epic("UI Testing")
@allure.feature("Home Page")
class TestHomePage:
    """Home page composition (async)."""

    @allure.story("Page Load")
    @allure.title("Every region of the home page renders")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.P0
    @pytest.mark.smoke
    @pytest.mark.asyncio
    async def test_home_page_loaded(self, home_page: HomePage):
        await home_page.open()
        await home_page.verify_loaded()
        assert home_page.navigator.current_url.startswith(home_page.navigator.base_url)

    @allure.story("Page Load")
    @allure.title("Re-opening the page resets the form session")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P2
    @pytest.mark.asyncio
    async def test_reopen_is_idempotent(self, home_page: HomePage):
        await home_page.open()
        await home_page.form.fill_field("zip", "1234")
        assert home_page.form.session.errors == {"zip"}

        await home_page.open()

        assert home_page.form.session.errors == set()
        assert home_page.form.session.current_step_field == "zip"
        await home_page.form.expect_field_visible("zip")


@allure.epic("UI Testing")
@allure.feature("Home Page")
@allure.story("Location")
class TestLocation:
    """Detected location banner (async)."""

    @allure.title("Detected city is displayed after 'Available in'")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P1
    @pytest.mark.location
    @pytest.mark.asyncio
    async def test_location_displayed(self, home_page: HomePage):
        await home_page.open()
        location = home_page.location

        city = await location.detected_city()
        assert city

        assert await location.assert_displayed() == city
        await location.expect_markup_structure()

    @allure.title("Expected city mismatch is reported")
    @allure.severity(allure.severity_level.MINOR)
    @pytest.mark.P3
    @pytest.mark.location
    @pytest.mark.asyncio
    async def test_location_mismatch(self, home_page: HomePage):
        await home_page.open()

        with pytest.raises(AssertionMismatch) as exc_info:
            await home_page.location.assert_displayed("Nowhere, ZZ")
        assert exc_info.value.expected == "Nowhere, ZZ"
