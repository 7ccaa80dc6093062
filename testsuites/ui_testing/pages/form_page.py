"""
Form-only page object: navigator plus the quiz form controller.

Used by flow tests that do not touch the other regions of the page.
"""

from __future__ import annotations

from typing import Optional

import allure
from playwright.async_api import Page

from testsuites.ui_testing.framework.config_loader import Timeouts
from testsuites.ui_testing.framework.page_base import Navigator
from testsuites.ui_testing.pages.components.form_component import FormComponent


class FormPage:
    """Quiz form page object (async)."""

    URL_PATH = "/"

    def __init__(
        self,
        page: Page,
        base_url: str = "",
        timeouts: Optional[Timeouts] = None,
    ):
        self.page = page
        self.navigator = Navigator(page, base_url)
        self.form = FormComponent(page, timeouts, navigator=self.navigator)

    @allure.step("Open form page")
    async def open(self, path: Optional[str] = None) -> "FormPage":
        await self.navigator.open(path or self.URL_PATH)
        self.form.reset()
        await self.form.expect_field_visible("zip")
        return self


__all__ = ["FormPage"]
