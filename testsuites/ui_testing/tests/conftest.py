"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, page objects, and test setup/teardown.

Key Features:
- Function-scoped browser, context and page (one isolated browser per test)
- Local fixture storefront served through Playwright request routing at the
  configured base URL (disable with --live-site)
- Page Object fixtures
- Screenshot + URL capture on failure
- Skips cleanly when no browser binary is installed

================================================================================
"""

from __future__ import annotations

import re
from dataclasses import replace
from pathlib import Path
from typing import AsyncGenerator, Callable, Dict, Pattern, Tuple
from urllib.parse import urlsplit

import pytest
import pytest_asyncio
from loguru import logger
from playwright.async_api import BrowserContext, Page, Route
from playwright.async_api import Error as PlaywrightError

from testsuites.ui_testing.framework.browser_manager import BrowserManager
from testsuites.ui_testing.framework.config_loader import ConfigLoader, Timeouts
from testsuites.ui_testing.framework.page_base import Navigator
from testsuites.ui_testing.pages.form_page import FormPage
from testsuites.ui_testing.pages.home_page import HomePage


SITE_DIR = Path(__file__).parent / "site"


# ================================================================================
# Fixture Storefront
# ================================================================================

class FixtureStorefront:
    """
    Serves the files under `site/` in place of the configured base URL.

    Every request to the base URL's origin is fulfilled locally; nothing
    reaches the network. Product and review images are generated SVGs whose
    file names follow the storefront's hashed naming (`slide-1.3f69c48b.svg`).
    """

    PAGES: Dict[str, str] = {
        "/": "index.html",
        "/index.html": "index.html",
        "/thank-you": "thank-you.html",
    }

    ASSETS: Dict[str, Tuple[str, str]] = {
        "/static/storefront.js": ("storefront.js", "application/javascript"),
        "/static/storefront.css": ("storefront.css", "text/css"),
    }

    def __init__(self, base_url: str, site_dir: Path = SITE_DIR):
        self.base_url = base_url.rstrip("/")
        self.site_dir = site_dir

    @property
    def url_pattern(self) -> Pattern[str]:
        return re.compile(re.escape(self.base_url) + r"(?:[/?#].*)?$")

    async def handle(self, route: Route) -> None:
        path = urlsplit(route.request.url).path or "/"

        if path in self.PAGES:
            await route.fulfill(
                status=200,
                content_type="text/html; charset=utf-8",
                body=(self.site_dir / self.PAGES[path]).read_text(encoding="utf-8"),
            )
        elif path in self.ASSETS:
            filename, content_type = self.ASSETS[path]
            await route.fulfill(
                status=200,
                content_type=content_type,
                body=(self.site_dir / filename).read_text(encoding="utf-8"),
            )
        elif path.startswith("/static/media/") and path.endswith(".svg"):
            label = path.rsplit("/", 1)[-1].split(".", 1)[0]
            await route.fulfill(status=200, content_type="image/svg+xml", body=_svg(label))
        else:
            logger.debug(f"Fixture storefront: 404 for {path}")
            await route.fulfill(status=404, content_type="text/plain", body="Not Found")


def _svg(label: str) -> str:
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" width="120" height="80">'
        '<rect width="120" height="80" fill="#1d6fe8"/>'
        f'<text x="8" y="44" fill="#ffffff" font-size="14">{label}</text>'
        "</svg>"
    )


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture
def live_site(request) -> bool:
    """True when the suite runs against the real base URL (--live-site)."""
    return bool(request.config.getoption("--live-site"))


@pytest_asyncio.fixture
async def browser_manager() -> AsyncGenerator[BrowserManager, None]:
    """
    Function-scoped browser manager.

    Each test (and each xdist worker) owns its own browser; a missing browser
    binary skips the test instead of failing it.
    """
    manager = BrowserManager()
    try:
        await manager.start()
    except PlaywrightError as e:
        pytest.skip(f"Browser '{manager.settings.browser_type}' not available: {e}")
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def context(
    browser_manager: BrowserManager,
    live_site: bool,
) -> AsyncGenerator[BrowserContext, None]:
    """
    Function-scoped browser context.

    Unless --live-site is given, requests to the configured base URL are
    served by the fixture storefront.
    """
    context = await browser_manager.new_context()
    if not live_site:
        storefront = FixtureStorefront(ConfigLoader().get("ui.base_url"))
        await context.route(storefront.url_pattern, storefront.handle)
    yield context


@pytest_asyncio.fixture
async def page(context: BrowserContext, request) -> AsyncGenerator[Page, None]:
    """
    Function-scoped page fixture.

    Attaches a screenshot and the current URL to the Allure report when the
    test body failed.
    """
    page = await context.new_page()
    yield page

    report = getattr(request.node, "rep_call", None)
    if (
        report is not None
        and report.failed
        and ConfigLoader().get("capture.screenshot_on_failure", True)
    ):
        try:
            await Navigator(page).capture_failure(request.node.name)
        except PlaywrightError as e:
            logger.warning(f"⚠️ Failed to capture screenshot on failure: {e}")
    await page.close()


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def home_page(page: Page) -> HomePage:
    """Provides HomePage instance (not yet opened)."""
    return HomePage(page)


@pytest.fixture
def form_page(page: Page) -> FormPage:
    """Provides FormPage instance (not yet opened)."""
    return FormPage(page)


@pytest.fixture
def short_timeouts() -> Timeouts:
    """
    Tight wait bounds for tests that expect a wait to expire.
    """
    return replace(
        Timeouts.from_config(),
        element=2000,
        transition=800,
        field_reveal=1500,
        settle=1500,
        redirect=2000,
    )


@pytest.fixture
def defect_path(live_site: bool) -> Callable[[str], str]:
    """
    Build the fixture storefront path that switches on one defect.

    Defect variants exist only on the fixture storefront, so tests using this
    fixture are skipped with --live-site.
    """
    if live_site:
        pytest.skip("Defect variants exist only on the fixture storefront")

    def build(defect: str) -> str:
        return f"/?defect={defect}"

    return build


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report on the item (`rep_setup`, `rep_call`, ...)."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)
