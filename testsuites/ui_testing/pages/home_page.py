"""
================================================================================
Home Page Object (Async / Playwright)
================================================================================

Storefront landing page: product slider, quiz form, reviews and location
banner. The page holds a Navigator and one instance of each component; it
adds no behavior of its own beyond opening itself.

================================================================================
"""

from __future__ import annotations

from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Page

from testsuites.ui_testing.framework.config_loader import Timeouts
from testsuites.ui_testing.framework.page_base import Navigator
from testsuites.ui_testing.pages.components.form_component import FormComponent
from testsuites.ui_testing.pages.components.location_component import LocationComponent
from testsuites.ui_testing.pages.components.reviews_component import ReviewsComponent
from testsuites.ui_testing.pages.components.slider_component import SliderComponent


class HomePage:
    """Home page object (async)."""

    URL_PATH = "/"

    def __init__(
        self,
        page: Page,
        base_url: str = "",
        timeouts: Optional[Timeouts] = None,
    ):
        self.page = page
        self.timeouts = timeouts or Timeouts.from_config()
        self.navigator = Navigator(page, base_url)
        self.slider = SliderComponent(page, self.timeouts)
        self.form = FormComponent(page, self.timeouts, navigator=self.navigator)
        self.reviews = ReviewsComponent(page, self.timeouts)
        self.location = LocationComponent(page, self.timeouts)

    @allure.step("Open home page")
    async def open(self, path: Optional[str] = None) -> "HomePage":
        """Navigate to the landing page and start a fresh form session."""
        await self.navigator.open(path or self.URL_PATH)
        await self.navigator.wait_for_page_load()
        self.form.reset()
        logger.info(f"Home page opened: {self.navigator.current_url}")
        return self

    @allure.step("Verify home page loaded")
    async def verify_loaded(self) -> None:
        """Every component's root region is visible."""
        await self.slider.expect_visible()
        await self.form.expect_field_visible("zip")
        await self.reviews.expect_visible()
        await self.location.detected_city()


__all__ = ["HomePage"]
