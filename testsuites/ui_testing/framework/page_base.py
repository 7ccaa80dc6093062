"""
================================================================================
Navigator
================================================================================

Navigation held by page objects alongside their components.

A page object owns one Navigator; components that need the address (the
form, for its terminal redirect) share that same instance. Addresses are
built from `ui.base_url`, so the fixture storefront and the live site are
reached through identical calls.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Pattern, Union

import allure
from loguru import logger
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config_loader import REPO_ROOT, ConfigLoader
from .errors import TerminalNotReached


SCREENSHOT_DIR = REPO_ROOT / "reports" / "screenshots"

UrlPattern = Union[str, Pattern[str]]


def terminal_pattern(config: Optional[ConfigLoader] = None) -> Pattern[str]:
    """`ui.terminal_url_pattern`, compiled case-insensitively."""
    config = config or ConfigLoader()
    return re.compile(config.get("ui.terminal_url_pattern", "thank"), re.IGNORECASE)


def describe_pattern(url_pattern: UrlPattern) -> str:
    if isinstance(url_pattern, str):
        return url_pattern
    return f"/{url_pattern.pattern}/"


class Navigator:
    """
    Address handling for one page.

    Usage:
        navigator = Navigator(page)
        await navigator.open("/")
        await navigator.wait_for_url(terminal_pattern())
    """

    def __init__(self, page: Page, base_url: str = ""):
        self.page = page
        self.base_url = (base_url or ConfigLoader().get("ui.base_url", "http://localhost:3000")).rstrip("/")

    @property
    def current_url(self) -> str:
        return self.page.url

    def url_for(self, path: str = "/") -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def url_matches(self, url_pattern: Pattern[str]) -> bool:
        """Whether the current address contains a match for `url_pattern`."""
        return url_pattern.search(self.page.url or "") is not None

    async def open(self, path: str = "/", wait_for: str = "load") -> None:
        """
        Go to `path` under the base URL.

        Navigating again discards all client-side state, which is what makes
        page objects safe to reopen on a rerun.
        """
        target = self.url_for(path)
        with allure.step(f"Navigate to {path}"):
            await self.page.goto(target, wait_until=wait_for)
        logger.debug(f"Navigated to: {target}")

    async def wait_for_page_load(self, state: str = "load", timeout: int = 15000) -> None:
        await self.page.wait_for_load_state(state, timeout=timeout)

    async def wait_for_url(
        self,
        url_pattern: UrlPattern,
        timeout: int = 10000,
        component: str = "navigator",
    ) -> str:
        """
        Block until the address matches.

        Args:
            url_pattern: Glob string or compiled regex
            timeout: Bound in milliseconds
            component: Reported as the failing component

        Returns:
            The address that matched

        Raises:
            TerminalNotReached: Bound expired first
        """
        shown = describe_pattern(url_pattern)
        with allure.step(f"Wait for URL {shown}"):
            try:
                await self.page.wait_for_url(url_pattern, timeout=timeout)
            except PlaywrightTimeoutError:
                logger.error(f"❌ Still at {self.page.url} after {timeout}ms, wanted {shown}")
                raise TerminalNotReached(
                    f"Address did not match within {timeout}ms",
                    component=component,
                    expected=shown,
                    observed=self.page.url,
                ) from None
        return self.page.url

    # =========================================================================
    # Evidence
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """Save a PNG under reports/screenshots and attach it to the report."""
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        safe_name = re.sub(r"[^\w.-]+", "_", name)
        target = SCREENSHOT_DIR / f"{safe_name}_{stamp}.png"

        png = await self.page.screenshot(path=str(target), full_page=full_page)
        if attach_to_allure:
            allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)

        logger.debug(f"Screenshot saved: {target}")
        return target

    async def capture_failure(self, test_name: str) -> None:
        """Full-page screenshot plus the address the test failed at."""
        with allure.step("Capture failure details"):
            await self.screenshot(f"failure_{test_name}", full_page=True)
            allure.attach(
                self.page.url,
                name="Current URL",
                attachment_type=allure.attachment_type.TEXT,
            )
        logger.info(f"Failure evidence captured for {test_name} at {self.page.url}")


__all__ = [
    "Navigator",
    "SCREENSHOT_DIR",
    "describe_pattern",
    "terminal_pattern",
]
