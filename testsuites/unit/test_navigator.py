import re

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from testsuites.ui_testing.framework import page_base
from testsuites.ui_testing.framework.errors import TerminalNotReached
from testsuites.ui_testing.framework.page_base import (
    Navigator,
    describe_pattern,
    terminal_pattern,
)


class FakePage:
    def __init__(self, url="https://shop.example.com/", redirects=True):
        self.url = url
        self.redirects = redirects
        self.screenshots = []

    async def screenshot(self, path=None, full_page=False):
        self.screenshots.append((path, full_page))
        return b"\x89PNG"

    async def wait_for_url(self, url_pattern, timeout=None):
        if not self.redirects:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        self.url = "https://shop.example.com/thank-you"


def test_url_for_joins_paths_under_base():
    navigator = Navigator(FakePage(), base_url="https://shop.example.com/")

    assert navigator.url_for("/") == "https://shop.example.com/"
    assert navigator.url_for("thank-you") == "https://shop.example.com/thank-you"
    assert navigator.url_for("/?defect=stall") == "https://shop.example.com/?defect=stall"


def test_url_matches_terminal_pattern_case_insensitively():
    page = FakePage(url="https://shop.example.com/Thank-You")
    navigator = Navigator(page, base_url="https://shop.example.com")

    assert navigator.url_matches(terminal_pattern())
    page.url = "https://shop.example.com/"
    assert not navigator.url_matches(terminal_pattern())


def test_describe_pattern():
    assert describe_pattern("**/thank-you") == "**/thank-you"
    assert describe_pattern(re.compile("thank", re.I)) == "/thank/"


@pytest.mark.asyncio
async def test_screenshot_sanitizes_name(monkeypatch, tmp_path):
    monkeypatch.setattr(page_base, "SCREENSHOT_DIR", tmp_path)
    page = FakePage()
    navigator = Navigator(page, base_url="https://shop.example.com")

    target = await navigator.screenshot("failure_test_advance[next]", attach_to_allure=False)

    assert target.parent == tmp_path
    assert target.name.startswith("failure_test_advance_next_")
    assert target.suffix == ".png"
    assert page.screenshots == [(str(target), False)]


@pytest.mark.asyncio
async def test_wait_for_url_returns_matching_address():
    navigator = Navigator(FakePage(), base_url="https://shop.example.com")

    url = await navigator.wait_for_url(terminal_pattern(), timeout=100)

    assert url.endswith("/thank-you")


@pytest.mark.asyncio
async def test_wait_for_url_expiry_is_terminal_not_reached():
    navigator = Navigator(FakePage(redirects=False), base_url="https://shop.example.com")

    with pytest.raises(TerminalNotReached) as exc_info:
        await navigator.wait_for_url(terminal_pattern(), timeout=100, component="form")

    assert exc_info.value.component == "form"
    assert exc_info.value.expected == "/thank/"
    assert exc_info.value.observed == "https://shop.example.com/"
