"""
================================================================================
Browser Manager
================================================================================

Owns the Playwright driver, one browser and the contexts opened on it.

Settings are resolved once into a BrowserSettings value (`ui.*` and
`capture.*`), so a test run never mixes browsers or viewports. Every test
gets a fresh context: cookies, storage and routes do not leak between tests.
When `capture.video` / `capture.trace` are on, artifacts go under reports/.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
)

from .config_loader import REPO_ROOT, ConfigLoader


REPORTS_DIR = REPO_ROOT / "reports"
VIDEO_DIR = REPORTS_DIR / "videos"
TRACE_DIR = REPORTS_DIR / "traces"

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

# Chromium-only switches; other engines reject unknown args.
CHROMIUM_ARGS = ["--ignore-certificate-errors"]


@dataclass(frozen=True)
class BrowserSettings:
    """Launch and context settings for one run."""
    browser_type: str = "chromium"
    headless: bool = True
    slow_mo: int = 0
    viewport_width: int = 1920
    viewport_height: int = 1080
    record_video: bool = False
    trace: bool = False

    def __post_init__(self) -> None:
        if self.browser_type not in SUPPORTED_BROWSERS:
            raise ValueError(
                f"Unsupported browser: {self.browser_type!r}. "
                f"Expected one of {SUPPORTED_BROWSERS}"
            )

    @classmethod
    def from_config(cls, config: Optional[ConfigLoader] = None) -> "BrowserSettings":
        config = config or ConfigLoader()
        return cls(
            browser_type=str(config.get("ui.browser", "chromium")).lower(),
            headless=bool(config.get("ui.headless", True)),
            slow_mo=int(config.get("ui.slow_mo", 0)),
            viewport_width=int(config.get("ui.viewport.width", 1920)),
            viewport_height=int(config.get("ui.viewport.height", 1080)),
            record_video=bool(config.get("capture.video", False)),
            trace=bool(config.get("capture.trace", False)),
        )

    def launch_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"headless": self.headless, "slow_mo": self.slow_mo}
        if self.browser_type == "chromium":
            options["args"] = list(CHROMIUM_ARGS)
        return options

    def context_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "viewport": {"width": self.viewport_width, "height": self.viewport_height},
            "ignore_https_errors": True,
        }
        if self.record_video:
            options["record_video_dir"] = str(VIDEO_DIR)
        return options


class BrowserManager:
    """
    Browser lifecycle for UI verification.

    Usage:
        async with BrowserManager() as manager:
            page = await manager.new_page()

        # headed, slowed down, for local debugging
        async with BrowserManager(headless=False, slow_mo=250) as manager:
            ...

    Keyword overrides take precedence over configuration.
    """

    def __init__(
        self,
        settings: Optional[BrowserSettings] = None,
        **overrides: Any,
    ):
        settings = settings or BrowserSettings.from_config()
        self.settings = replace(settings, **overrides) if overrides else settings

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser

    async def start(self) -> None:
        """
        Start the driver and launch the configured engine.

        Raises:
            playwright Error: Engine binary missing or failed to launch;
                              the driver is stopped before re-raising
        """
        settings = self.settings
        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, settings.browser_type)
        try:
            self._browser = await launcher.launch(**settings.launch_options())
        except PlaywrightError:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug(
            f"Browser started: {settings.browser_type} "
            f"(headless={settings.headless}, slow_mo={settings.slow_mo})"
        )

    async def new_context(self, **options: Any) -> BrowserContext:
        """Open an isolated context; `options` override the configured ones."""
        if self._browser is None:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {**self.settings.context_options(), **options}
        if "record_video_dir" in context_options:
            Path(context_options["record_video_dir"]).mkdir(parents=True, exist_ok=True)

        context = await self._browser.new_context(**context_options)
        if self.settings.trace:
            await context.tracing.start(screenshots=True, snapshots=True)
        self._contexts.append(context)
        return context

    async def new_page(
        self,
        context: Optional[BrowserContext] = None,
        **context_options: Any,
    ) -> Page:
        """Page in `context`, or in a new context built from `context_options`."""
        if context is None:
            context = await self.new_context(**context_options)
        return await context.new_page()

    async def close(self) -> None:
        """Close contexts (saving traces), then the browser and the driver."""
        for number, context in enumerate(self._contexts):
            try:
                if self.settings.trace:
                    await self._save_trace(context, number)
                await context.close()
            except PlaywrightError as e:
                logger.warning(f"⚠️ Failed to close browser context: {e}")
        self._contexts.clear()

        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.debug("Browser closed")

    async def _save_trace(self, context: BrowserContext, number: int) -> None:
        TRACE_DIR.mkdir(parents=True, exist_ok=True)
        path = TRACE_DIR / f"trace_{id(self):x}_{number}.zip"
        await context.tracing.stop(path=str(path))
        logger.debug(f"Trace saved: {path}")


__all__ = [
    "BrowserManager",
    "BrowserSettings",
    "SUPPORTED_BROWSERS",
]
