"""
================================================================================
Slider Component (Async / Playwright)
================================================================================

Dual-carousel synchronization checks for the product slider.

The slider renders two carousels: a large "main" carousel and a thumbnail
"preview" carousel. Both are infinite-loop carousels that insert clone
elements at each end of the track; clones carry the `slick-cloned` marker
class and are never counted or indexed.

Each carousel marks its current slide with `slick-current`, and every slide
carries its logical position in `data-slick-index`. The component reads those
markers; it never infers the active slide from pixel offsets.

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlsplit

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
    ACTIVE_CLASS,
    CLONE_CLASS,
    CURRENT_CLASS,
    INDEX_ATTRIBUTE,
    class_attrs,
    has_class,
    is_clone,
    logical_indices,
    resolve,
    resolve_first,
    resolve_visible,
    selector_for,
)


MAIN = "main"
PREVIEW = "preview"
CAROUSELS = (MAIN, PREVIEW)

NEXT = "next"
PREVIOUS = "previous"
DIRECTIONS: Dict[str, int] = {NEXT: 1, PREVIOUS: -1}


# Resolves once the current main slide is a settled, fully opaque, non-clone
# slide whose index differs from `previous` (when a change is expected).
_TRANSITION_SETTLED_JS = """
([containerSel, carouselSel, currentSel, cloneClass, indexAttr, previous]) => {
    const container = document.querySelector(containerSel);
    if (!container) return false;
    const carousel = container.querySelector(carouselSel);
    if (!carousel) return false;
    const current = carousel.querySelector(currentSel);
    if (!current || current.classList.contains(cloneClass)) return false;
    if (previous !== null && current.getAttribute(indexAttr) === String(previous)) {
        return false;
    }
    return parseFloat(window.getComputedStyle(current).opacity) === 1;
}
"""

_SLIDE_RECORDS_JS = """
(els, imageSel) => els.map(el => {
    const img = el.querySelector(imageSel);
    return {
        cls: el.getAttribute('class') || '',
        src: img ? img.getAttribute('src') : null,
    };
})
"""


@dataclass(frozen=True)
class Slide:
    """One logical (non-clone) slide."""
    position: int
    image_identity: str


@dataclass
class CarouselPair:
    """Point-in-time read of both carousels."""
    main: List[Slide] = field(default_factory=list)
    preview: List[Slide] = field(default_factory=list)
    active_main: int = -1
    active_preview: int = -1

    @property
    def synchronized(self) -> bool:
        return self.active_main == self.active_preview

    @property
    def images_match(self) -> bool:
        main = _slide_at(self.main, self.active_main)
        preview = _slide_at(self.preview, self.active_preview)
        if main is None or preview is None:
            return False
        return bool(main.image_identity) and main.image_identity == preview.image_identity


def _slide_at(slides: Sequence[Slide], position: int) -> Optional[Slide]:
    for slide in slides:
        if slide.position == position:
            return slide
    return None


def image_identity(src: Optional[str]) -> str:
    """
    Canonical token for an image reference.

    Takes the last path segment and cuts it at the first '.', so content-hash
    and extension suffixes are ignored:
        /static/media/slide-3.3f69c48b.jpg?v=2 -> slide-3
    """
    if not src:
        return ""
    path = urlsplit(src.strip()).path
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    return segment.split(".", 1)[0]


def expected_after(start: int, direction: str, steps: int, total: int) -> int:
    """
    Position reached after `steps` advances from `start`, wrapping around the
    logical slide count regardless of how many clones are rendered.
    """
    if total <= 0:
        raise ValueError(f"Slide count must be positive, got {total}")
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown direction: {direction!r}")
    return (start + DIRECTIONS[direction] * steps) % total


class SliderComponent:
    """
    Main + preview carousel pair.

    Usage:
        slider = SliderComponent(page)
        await slider.advance("next")
        await slider.assert_synchronized()
        await slider.assert_images_match()
    """

    COMPONENT = "slider"

    def __init__(
        self,
        page: Page,
        timeouts: Optional[Timeouts] = None,
        container_selector: Optional[str] = None,
    ):
        """
        Args:
            page: Playwright Page object
            timeouts: Wait bounds (defaults to `ui.timeouts.*`)
            container_selector: Override for the slider container selector
        """
        self.page = page
        self.timeouts = timeouts or Timeouts.from_config()
        self.container_selector = container_selector or selector_for("slider.container")

    # =========================================================================
    # Locators (resolved at point of use)
    # =========================================================================

    def _container(self) -> Locator:
        return self.page.locator(self.container_selector).first

    def _carousel(self, which: str) -> Locator:
        if which not in CAROUSELS:
            raise ValueError(f"Unknown carousel: {which!r}")
        return resolve_first(self._container(), f"slider.{which}")

    def _items(self, which: str) -> Locator:
        return resolve(self._carousel(which), f"slider.{which}.items")

    def _current(self, which: str) -> Locator:
        return resolve_first(self._carousel(which), f"slider.{which}.current")

    # =========================================================================
    # State reads
    # =========================================================================

    async def total_slides(self) -> int:
        """Number of non-clone slides in the main carousel."""
        total = len(logical_indices(await class_attrs(self._items(MAIN))))
        logger.debug(f"Slider has {total} logical slides")
        return total

    async def _wait_current(self, which: str) -> Locator:
        current = self._current(which)
        try:
            await current.wait_for(state="attached", timeout=self.timeouts.element)
        except PlaywrightTimeoutError:
            logger.error(f"❌ No '{CURRENT_CLASS}' slide in {which} carousel")
            raise ElementNotFoundError(
                f"No slide carries the '{CURRENT_CLASS}' marker in the {which} carousel",
                component=self.COMPONENT,
                expected=selector_for(f"slider.{which}.current"),
            ) from None
        return current

    async def active_index(self, which: str = MAIN) -> int:
        """
        Position of the current slide in a carousel, read from its index
        attribute.

        Raises:
            ElementNotFoundError: No slide carries the current marker
            AssertionMismatch: The marked slide has no integer index
        """
        current = await self._wait_current(which)
        raw = await current.get_attribute(INDEX_ATTRIBUTE)
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise AssertionMismatch(
                f"Current {which} slide has no integer '{INDEX_ATTRIBUTE}'",
                component=self.COMPONENT,
                expected="integer index",
                observed=raw,
            ) from None

    async def active_image_src(self, which: str = MAIN) -> Optional[str]:
        """Image reference of the current slide in a carousel."""
        current = await self._wait_current(which)
        image = resolve_first(current, f"slider.{which}.image")
        return await image.get_attribute("src")

    async def snapshot(self) -> CarouselPair:
        """Read both carousels into a CarouselPair."""
        pair = CarouselPair()
        for which in CAROUSELS:
            records = await self._items(which).evaluate_all(
                _SLIDE_RECORDS_JS, selector_for(f"slider.{which}.image")
            )
            slides = [
                Slide(position=position, image_identity=image_identity(record["src"]))
                for position, record in enumerate(
                    r for r in records if not is_clone(r["cls"])
                )
            ]
            setattr(pair, which, slides)
        pair.active_main = await self.active_index(MAIN)
        pair.active_preview = await self.active_index(PREVIEW)
        return pair

    # =========================================================================
    # Navigation
    # =========================================================================

    async def _wait_for_transition(self, previous: Optional[int]) -> None:
        try:
            await self.page.wait_for_function(
                _TRANSITION_SETTLED_JS,
                arg=[
                    self.container_selector,
                    selector_for("slider.main"),
                    selector_for("slider.main.current"),
                    CLONE_CLASS,
                    INDEX_ATTRIBUTE,
                    previous,
                ],
                timeout=self.timeouts.transition,
            )
        except PlaywrightTimeoutError:
            current = self._current(MAIN)
            observed = (
                await current.get_attribute(INDEX_ATTRIBUTE)
                if await current.count()
                else None
            )
            logger.error(
                f"❌ Slide transition did not settle within {self.timeouts.transition}ms"
            )
            raise TransitionTimeout(
                f"Slide transition did not settle within {self.timeouts.transition}ms",
                component=self.COMPONENT,
                expected="current main slide fully opaque"
                + (f" and moved away from {previous}" if previous is not None else ""),
                observed=f"current index {observed}",
            ) from None

    @allure.step("Advance slider: {direction}")
    async def advance(self, direction: str) -> int:
        """
        Click the next/previous arrow and wait for the transition to settle.

        Args:
            direction: "next" or "previous"

        Returns:
            The new active main index

        Raises:
            TransitionTimeout: The settled state was not observed in time
        """
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction: {direction!r}")
        role = "slider.next_arrow" if direction == NEXT else "slider.prev_arrow"

        previous = await self.active_index(MAIN)
        moves = await self.total_slides() > 1
        arrow = await resolve_visible(
            self._carousel(MAIN), role, self.timeouts.element, self.COMPONENT
        )
        await arrow.click()
        await self._wait_for_transition(previous if moves else None)

        index = await self.active_index(MAIN)
        logger.debug(f"Slider advanced {direction}: {previous} -> {index}")
        return index

    @allure.step("Jump slider to position {position}")
    async def jump_to(self, position: int) -> int:
        """
        Click the preview thumbnail at a logical position and wait for the
        transition to settle.

        Args:
            position: 0-based position within the non-clone thumbnails

        Returns:
            The new active main index
        """
        indices = logical_indices(await class_attrs(self._items(PREVIEW)))
        if not 0 <= position < len(indices):
            raise ValueError(
                f"Thumbnail position {position} out of range [0, {len(indices)})"
            )

        thumbnail = self._items(PREVIEW).nth(indices[position])
        try:
            await thumbnail.wait_for(state="visible", timeout=self.timeouts.element)
        except PlaywrightTimeoutError:
            raise ElementNotFoundError(
                f"Preview thumbnail {position} not visible",
                component=self.COMPONENT,
                expected=f"thumbnail {position} visible",
            ) from None

        previous = await self.active_index(MAIN)
        await thumbnail.click()
        await self._wait_for_transition(previous if previous != position else None)

        index = await self.active_index(MAIN)
        logger.debug(f"Slider jumped to thumbnail {position}: {previous} -> {index}")
        return index

    # =========================================================================
    # Assertions (read-only)
    # =========================================================================

    @allure.step("Assert main and preview carousels are synchronized")
    async def assert_synchronized(self) -> int:
        """Both carousels mark the same position as current."""
        main = await self.active_index(MAIN)
        preview = await self.active_index(PREVIEW)
        if main != preview:
            raise AssertionMismatch(
                "Main and preview carousels disagree on the active slide",
                component=self.COMPONENT,
                expected=f"preview index {main}",
                observed=f"preview index {preview}",
            )
        return main

    @allure.step("Assert active main and preview images match")
    async def assert_images_match(self) -> str:
        """The current slides of both carousels show the same image."""
        main = image_identity(await self.active_image_src(MAIN))
        preview = image_identity(await self.active_image_src(PREVIEW))
        if not main:
            raise AssertionMismatch(
                "Current main slide has no image reference",
                component=self.COMPONENT,
                expected="image src",
                observed=main,
            )
        if main != preview:
            raise AssertionMismatch(
                "Active main and preview images differ",
                component=self.COMPONENT,
                expected=main,
                observed=preview,
            )
        return main

    async def expect_active_index(self, expected: int) -> None:
        actual = await self.active_index(MAIN)
        if actual != expected:
            raise AssertionMismatch(
                "Unexpected active slide",
                component=self.COMPONENT,
                expected=expected,
                observed=actual,
            )

    async def expect_visible(self) -> None:
        """Slider container and both carousels are visible."""
        await resolve_visible(self.page, "slider.container", self.timeouts.element, self.COMPONENT)
        for which in CAROUSELS:
            await resolve_visible(
                self._container(), f"slider.{which}", self.timeouts.element, self.COMPONENT
            )

    async def expect_navigation_visible(self) -> None:
        """Both arrows are visible."""
        for role in ("slider.prev_arrow", "slider.next_arrow"):
            await resolve_visible(self._carousel(MAIN), role, self.timeouts.element, self.COMPONENT)

    async def expect_active_slide_classes(self) -> None:
        """The current main slide carries both the current and active classes."""
        current = await self._wait_current(MAIN)
        classes = await current.get_attribute("class") or ""
        missing = [c for c in (CURRENT_CLASS, ACTIVE_CLASS) if not has_class(classes, c)]
        if missing:
            raise AssertionMismatch(
                f"Current slide is missing classes {missing}",
                component=self.COMPONENT,
                expected=f"{CURRENT_CLASS} {ACTIVE_CLASS}",
                observed=classes,
            )

    async def expect_slide_image_loaded(self, position: int) -> None:
        """The image of a logical main slide is visible with non-zero opacity."""
        indices = logical_indices(await class_attrs(self._items(MAIN)))
        if not 0 <= position < len(indices):
            raise ValueError(f"Slide position {position} out of range [0, {len(indices)})")
        image = resolve_first(self._items(MAIN).nth(indices[position]), "slider.main.image")
        try:
            await image.wait_for(state="visible", timeout=self.timeouts.element)
        except PlaywrightTimeoutError:
            raise ElementNotFoundError(
                f"Image of slide {position} not visible",
                component=self.COMPONENT,
                expected="visible image",
            ) from None
        opacity = float(await image.evaluate("el => window.getComputedStyle(el).opacity"))
        if opacity <= 0:
            raise AssertionMismatch(
                f"Image of slide {position} is fully transparent",
                component=self.COMPONENT,
                expected="opacity > 0",
                observed=opacity,
            )


__all__ = [
    "MAIN",
    "PREVIEW",
    "NEXT",
    "PREVIOUS",
    "Slide",
    "CarouselPair",
    "SliderComponent",
    "image_identity",
    "expected_after",
]
