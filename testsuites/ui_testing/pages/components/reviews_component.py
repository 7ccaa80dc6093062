"""
================================================================================
Reviews Component (Async / Playwright)
================================================================================

Expand/collapse reviews panel plus the image gallery overlay opened from it.

Panel state is reflected three ways at once: a state class on the container,
the toggle's label ("Show more" / "Show less") and the visibility of the
detail region. Assertions require all three to agree.

The gallery overlay exposes a "<position> / <total>" counter, 1-based.

================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import allure
from loguru import logger
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from testsuites.ui_testing.framework.config_loader import Timeouts
from testsuites.ui_testing.framework.errors import (
    AssertionMismatch,
    ElementNotFoundError,
    TransitionTimeout,
)
from testsuites.ui_testing.framework.locators import (
    EXPANDED_CLASS,
    OVERLAY_VISIBLE_CLASS,
    class_attrs,
    has_class,
    logical_indices,
    resolve,
    resolve_first,
    resolve_visible,
    selector_for,
)
from testsuites.ui_testing.framework.wait_helpers import (
    WaitConfig,
    WaitTimeoutError,
    poll_until,
)


COLLAPSED_LABEL = "Show more"
EXPANDED_LABEL = "Show less"

COUNTER_PATTERN = re.compile(r"(\d+)\s*/\s*(\d+)")

_CLASS_STATE_JS = """
([selector, className, expected]) => {
    const el = document.querySelector(selector);
    if (!el) return false;
    return el.classList.contains(className) === expected;
}
"""

_OVERLAY_CLOSED_JS = """
([overlaySel, visibleClass]) => {
    const overlay = document.querySelector(overlaySel + '.' + visibleClass);
    return overlay === null;
}
"""


@dataclass(frozen=True)
class DisclosureState:
    """Point-in-time read of the panel and its gallery."""
    expanded: bool
    gallery_open: bool
    gallery_index: int = 0
    gallery_total: int = 0

    @property
    def consistent(self) -> bool:
        if not self.gallery_open:
            return True
        return 1 <= self.gallery_index <= self.gallery_total


def parse_counter(text: Optional[str]) -> Tuple[int, int]:
    """
    Parse a "<position> / <total>" counter, tolerating surrounding whitespace.

    Raises:
        ValueError: When the text holds no counter
    """
    match = COUNTER_PATTERN.search(text or "")
    if not match:
        raise ValueError(f"Not a gallery counter: {text!r}")
    return int(match.group(1)), int(match.group(2))


class ReviewsComponent:
    """
    Reviews disclosure panel and gallery overlay.

    Usage:
        reviews = ReviewsComponent(page)
        await reviews.expect_collapsed()
        await reviews.toggle()
        await reviews.expect_expanded()

        await reviews.open_image(0)
        assert await reviews.current_position() == 1
        await reviews.close()
    """

    COMPONENT = "reviews"

    def __init__(
        self,
        page: Page,
        timeouts: Optional[Timeouts] = None,
        container_selector: Optional[str] = None,
    ):
        self.page = page
        self.timeouts = timeouts or Timeouts.from_config()
        self.container_selector = container_selector or selector_for("reviews.container")

    # =========================================================================
    # Locators (resolved at point of use)
    # =========================================================================

    def _container(self) -> Locator:
        return self.page.locator(self.container_selector).first

    def _detail(self) -> Locator:
        return resolve_first(self._container(), "reviews.detail")

    def _toggle(self) -> Locator:
        return resolve_first(self._container(), "reviews.toggle")

    def _label(self) -> Locator:
        return resolve_first(self._toggle(), "reviews.toggle.label")

    def _thumbnails(self) -> Locator:
        gallery = resolve_first(self._container(), "reviews.gallery")
        return resolve(gallery, "reviews.gallery.thumbnails")

    def _open_overlay(self) -> Locator:
        return self.page.locator(
            f"{selector_for('reviews.overlay')}.{OVERLAY_VISIBLE_CLASS}"
        ).first

    # =========================================================================
    # Panel
    # =========================================================================

    async def is_expanded(self) -> bool:
        """Expanded flag read from the container's state class."""
        classes = await self._container().get_attribute(
            "class", timeout=self.timeouts.element
        )
        return has_class(classes or "", EXPANDED_CLASS)

    async def label_text(self) -> str:
        label = await resolve_visible(
            self._toggle(), "reviews.toggle.label", self.timeouts.element, self.COMPONENT
        )
        return (await label.text_content() or "").strip()

    @allure.step("Toggle reviews panel")
    async def toggle(self) -> bool:
        """
        Click the show more/less control and wait until the state class flips.

        Returns:
            The new expanded flag

        Raises:
            TransitionTimeout: The state class never flipped
        """
        control = await resolve_visible(
            self._container(), "reviews.toggle", self.timeouts.element, self.COMPONENT
        )
        was_expanded = await self.is_expanded()
        await control.click()

        try:
            await self.page.wait_for_function(
                _CLASS_STATE_JS,
                arg=[self.container_selector, EXPANDED_CLASS, not was_expanded],
                timeout=self.timeouts.toggle,
            )
        except PlaywrightTimeoutError:
            logger.error(f"❌ Reviews panel did not flip from expanded={was_expanded}")
            raise TransitionTimeout(
                f"Reviews panel state did not change within {self.timeouts.toggle}ms",
                component=self.COMPONENT,
                expected=f"expanded={not was_expanded}",
                observed=f"expanded={was_expanded}",
            ) from None

        logger.debug(f"Reviews panel toggled: expanded={not was_expanded}")
        return not was_expanded

    async def _signals(self) -> Dict[str, object]:
        return {
            "state_class": await self.is_expanded(),
            "label": (await self._label().text_content() or "").strip(),
            "detail_visible": await self._detail().is_visible(),
        }

    async def _expect_state(self, expanded: bool) -> None:
        expected = {
            "state_class": expanded,
            "label": EXPANDED_LABEL if expanded else COLLAPSED_LABEL,
            "detail_visible": expanded,
        }

        async def probe():
            signals = await self._signals()
            return signals == expected, signals

        try:
            await poll_until(
                probe,
                WaitConfig(timeout_ms=self.timeouts.element),
                f"reviews panel expanded={expanded}",
            )
        except WaitTimeoutError as e:
            observed = e.last_result or {}
            diverging = sorted(k for k in expected if observed.get(k) != expected[k])
            logger.error(f"❌ Reviews panel signals disagree: {observed}")
            raise AssertionMismatch(
                f"Reviews panel is not {'expanded' if expanded else 'collapsed'} "
                f"(diverging: {', '.join(diverging) or 'unknown'})",
                component=self.COMPONENT,
                expected=expected,
                observed=observed,
            ) from None

    @allure.step("Expect reviews panel collapsed")
    async def expect_collapsed(self) -> None:
        await self._expect_state(expanded=False)

    @allure.step("Expect reviews panel expanded")
    async def expect_expanded(self) -> None:
        await self._expect_state(expanded=True)

    async def expect_visible(self) -> None:
        """Reviews container and its toggle are visible."""
        await resolve_visible(self.page, "reviews.container", self.timeouts.element, self.COMPONENT)
        await resolve_visible(self._container(), "reviews.toggle", self.timeouts.element, self.COMPONENT)

    # =========================================================================
    # Gallery overlay
    # =========================================================================

    async def image_count(self) -> int:
        """Number of non-clone thumbnails in the first review gallery."""
        await resolve_visible(
            self._container(), "reviews.gallery", self.timeouts.element, self.COMPONENT
        )
        return len(logical_indices(await class_attrs(self._thumbnails())))

    async def is_gallery_open(self) -> bool:
        return await self._open_overlay().count() > 0

    @allure.step("Open review image {index}")
    async def open_image(self, index: int = 0) -> None:
        """
        Click the thumbnail at a 0-based position and wait for the overlay.

        Raises:
            ElementNotFoundError: The thumbnail is not visible
            TransitionTimeout: The overlay never became visible
        """
        indices = logical_indices(await class_attrs(self._thumbnails()))
        if not 0 <= index < len(indices):
            raise ValueError(f"Image index {index} out of range [0, {len(indices)})")

        thumbnail = self._thumbnails().nth(indices[index])
        try:
            await thumbnail.wait_for(state="visible", timeout=self.timeouts.element)
        except PlaywrightTimeoutError:
            raise ElementNotFoundError(
                f"Review image {index} not visible",
                component=self.COMPONENT,
                expected=f"thumbnail {index} visible",
            ) from None
        await thumbnail.click()

        try:
            await self._open_overlay().wait_for(state="visible", timeout=self.timeouts.overlay)
        except PlaywrightTimeoutError:
            logger.error("❌ Gallery overlay did not open")
            raise TransitionTimeout(
                f"Gallery overlay did not open within {self.timeouts.overlay}ms",
                component=self.COMPONENT,
                expected=f"overlay with '{OVERLAY_VISIBLE_CLASS}'",
                observed="overlay hidden",
            ) from None
        logger.debug(f"Gallery opened at image {index}")

    async def _counter(self) -> Tuple[int, int]:
        counter = resolve_first(self._open_overlay(), "reviews.overlay.counter")
        try:
            text = await counter.text_content(timeout=self.timeouts.element)
        except PlaywrightTimeoutError:
            raise ElementNotFoundError(
                "Gallery counter not found (is the overlay open?)",
                component=self.COMPONENT,
                expected=selector_for("reviews.overlay.counter"),
            ) from None
        try:
            return parse_counter(text)
        except ValueError:
            raise AssertionMismatch(
                "Gallery counter is not formatted as '<position> / <total>'",
                component=self.COMPONENT,
                expected="<position> / <total>",
                observed=text,
            ) from None

    async def current_position(self) -> int:
        """1-based position shown by the overlay counter."""
        return (await self._counter())[0]

    async def total_count(self) -> int:
        """Total shown by the overlay counter."""
        return (await self._counter())[1]

    @allure.step("Close gallery overlay")
    async def close(self) -> None:
        """
        Click the overlay's close control and wait until it is no longer
        flagged visible.
        """
        close = await resolve_visible(
            self._open_overlay(), "reviews.overlay.close", self.timeouts.element, self.COMPONENT
        )
        await close.click()
        try:
            await self.page.wait_for_function(
                _OVERLAY_CLOSED_JS,
                arg=[selector_for("reviews.overlay"), OVERLAY_VISIBLE_CLASS],
                timeout=self.timeouts.overlay,
            )
        except PlaywrightTimeoutError:
            logger.error("❌ Gallery overlay did not close")
            raise TransitionTimeout(
                f"Gallery overlay still visible after {self.timeouts.overlay}ms",
                component=self.COMPONENT,
                expected="overlay hidden",
                observed=f"overlay with '{OVERLAY_VISIBLE_CLASS}'",
            ) from None
        logger.debug("Gallery closed")

    async def state(self) -> DisclosureState:
        expanded = await self.is_expanded()
        if not await self.is_gallery_open():
            return DisclosureState(expanded=expanded, gallery_open=False)
        position, total = await self._counter()
        return DisclosureState(
            expanded=expanded,
            gallery_open=True,
            gallery_index=position,
            gallery_total=total,
        )

    async def expect_gallery_open(self) -> DisclosureState:
        state = await self.state()
        if not state.gallery_open:
            raise AssertionMismatch(
                "Gallery overlay is not open",
                component=self.COMPONENT,
                expected="open",
                observed="closed",
            )
        if not state.consistent:
            raise AssertionMismatch(
                "Gallery counter position outside [1, total]",
                component=self.COMPONENT,
                expected=f"1..{state.gallery_total}",
                observed=state.gallery_index,
            )
        return state

    async def expect_current_position(self, expected: int) -> None:
        actual = await self.current_position()
        if actual != expected:
            raise AssertionMismatch(
                "Unexpected gallery position",
                component=self.COMPONENT,
                expected=expected,
                observed=actual,
            )


__all__ = [
    "COLLAPSED_LABEL",
    "EXPANDED_LABEL",
    "DisclosureState",
    "ReviewsComponent",
    "parse_counter",
]
