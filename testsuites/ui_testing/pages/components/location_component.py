"""
================================================================================
Location Component (Async / Playwright)
================================================================================

Readback of the visitor's detected city ("Available in <City, ST>").

NOTE:
  The page fills the city from its own geo lookup, so `assert_displayed()`
  without an explicit city compares the element against itself. Pass the
  expected city when the test controls where the browser appears to be.

================================================================================
"""

from __future__ import annotations

from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Locator, Page

from testsuites.ui_testing.framework.config_loader import Timeouts
from testsuites.ui_testing.framework.errors import AssertionMismatch
from testsuites.ui_testing.framework.locators import resolve_first, resolve_visible, selector_for


AVAILABILITY_PHRASE = "Available in"

CITY_DATA_ATTRIBUTE = "data-location-city-and-state"
CITY_CLASS = "locationCityAndState"


class LocationComponent:
    """Detected location banner."""

    COMPONENT = "location"

    def __init__(self, page: Page, timeouts: Optional[Timeouts] = None):
        self.page = page
        self.timeouts = timeouts or Timeouts.from_config()

    def _container(self) -> Locator:
        return resolve_first(self.page, "location.container")

    async def _city(self) -> Locator:
        return await resolve_visible(
            self._container(), "location.city", self.timeouts.element, self.COMPONENT
        )

    async def detected_city(self) -> str:
        """Trimmed text of the city element."""
        city = await self._city()
        return (await city.text_content() or "").strip()

    @allure.step("Assert location is displayed")
    async def assert_displayed(self, city: Optional[str] = None) -> str:
        """
        Container reads "Available in" and the city element shows `city`
        (or, when omitted, whatever it currently shows).

        Returns:
            The displayed city

        Raises:
            ElementNotFoundError: Container or city element not visible
            AssertionMismatch: Phrase missing, or city text differs
        """
        await resolve_visible(self.page, "location.container", self.timeouts.element, self.COMPONENT)
        text = (await self._container().text_content() or "").strip()
        if AVAILABILITY_PHRASE not in text:
            logger.error(f"❌ Location banner lacks '{AVAILABILITY_PHRASE}': {text!r}")
            raise AssertionMismatch(
                f"Location banner does not contain '{AVAILABILITY_PHRASE}'",
                component=self.COMPONENT,
                expected=AVAILABILITY_PHRASE,
                observed=text,
            )

        expected = city if city is not None else await self.detected_city()
        actual = await self.detected_city()
        if actual != expected:
            raise AssertionMismatch(
                "Displayed city differs",
                component=self.COMPONENT,
                expected=expected,
                observed=actual,
            )

        logger.debug(f"Location displayed: {actual}")
        return actual

    async def expect_markup_structure(self) -> None:
        """City element carries its data attribute and class."""
        city = await self._city()
        has_attribute = await city.get_attribute(CITY_DATA_ATTRIBUTE) is not None
        classes = (await city.get_attribute("class") or "").split()
        if not has_attribute or CITY_CLASS not in classes:
            raise AssertionMismatch(
                "City element markup changed",
                component=self.COMPONENT,
                expected=selector_for("location.city"),
                observed=f"{CITY_DATA_ATTRIBUTE}={has_attribute}, class={' '.join(classes)!r}",
            )


__all__ = [
    "AVAILABILITY_PHRASE",
    "LocationComponent",
]
