"""
================================================================================
Product Slider UI Tests (Async / Playwright)
================================================================================

Covers:
  - Main and preview carousels mark the same slide and show the same image
  - Arrow navigation wraps around the logical slide count in both directions
  - Thumbnail navigation
  - Faulty storefront variants surface as typed failures

================================================================================
"""

import allure
import pytest

from testsuites.ui_testing.framework.errors import (
    AssertionMismatch,
    ElementNotFoundError,
    TransitionTimeout,
)
from testsuites.ui_testing.pages.components.slider_component import (
    NEXT,
    PREVIOUS,
    expected_after,
    MAIN,
    PREVIEW,
)
from testsuites.ui_testing.pages.home_page import HomePage


@allure.epic("UI Testing")
@allure.feature("Product Slider")
class TestSlider:
    """Dual carousel UI test suite (async)."""

    @allure.story("Initial State")
    @allure.title("Slider renders synchronized on page load")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.P0
    @pytest.mark.smoke
    @pytest.mark.asyncio
    async def test_initial_state(self, home_page: HomePage):
        """Both carousels are visible and agree on the first slide."""
        await home_page.open()
        slider = home_page.slider

        with allure.step("Verify slider layout"):
            await slider.expect_visible()
            await slider.expect_navigation_visible()
            await slider.expect_active_slide_classes()

        with allure.step("Verify synchronization"):
            assert await slider.assert_synchronized() == 0
            assert await slider.assert_images_match()

    @allure.story("Arrow Navigation")
    @allure.title("Advancing {direction} wraps around and stays synchronized")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.P0
    @pytest.mark.regression
    @pytest.mark.parametrize("direction", [NEXT, PREVIOUS])
    @pytest.mark.asyncio
    async def test_advance_wraps_around(self, home_page: HomePage, direction: str):
        """After k advances the active index is the start moved by k modulo N."""
        await home_page.open()
        slider = home_page.slider

        start = await slider.active_index()
        total = await slider.total_slides()
        assert total >= 1

        for step in range(1, total + 2):
            with allure.step(f"Advance {direction} #{step}"):
                index = await slider.advance(direction)
                assert index == expected_after(start, direction, step, total)
                await slider.assert_synchronized()
                await slider.assert_images_match()

    @allure.story("Arrow Navigation")
    @allure.title("Next then previous returns to the starting slide")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.asyncio
    async def test_next_then_previous_is_identity(self, home_page: HomePage):
        await home_page.open()
        slider = home_page.slider
        start = await slider.active_index()

        await slider.advance(NEXT)
        await slider.advance(PREVIOUS)

        await slider.expect_active_index(start)
        await slider.assert_synchronized()

    @allure.story("Thumbnail Navigation")
    @allure.title("Clicking a preview thumbnail moves the main carousel")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.asyncio
    async def test_jump_to_thumbnail(self, home_page: HomePage):
        await home_page.open()
        slider = home_page.slider
        last = await slider.total_slides() - 1

        with allure.step(f"Jump to thumbnail {last}"):
            assert await slider.jump_to(last) == last

        await slider.assert_synchronized()
        await slider.assert_images_match()

        with pytest.raises(ValueError):
            await slider.jump_to(last + 1)

    @allure.story("Snapshot")
    @allure.title("Snapshot lists the same images in both carousels")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P2
    @pytest.mark.asyncio
    async def test_snapshot(self, home_page: HomePage):
        await home_page.open()
        slider = home_page.slider

        pair = await slider.snapshot()

        assert len(pair.main) == await slider.total_slides()
        assert [s.image_identity for s in pair.main] == [s.image_identity for s in pair.preview]
        assert pair.synchronized
        assert pair.images_match

    @allure.story("Images")
    @allure.title("Every logical slide image is rendered")
    @allure.severity(allure.severity_level.MINOR)
    @pytest.mark.P2
    @pytest.mark.asyncio
    async def test_slide_images_loaded(self, home_page: HomePage):
        await home_page.open()
        slider = home_page.slider

        for position in range(await slider.total_slides()):
            await slider.expect_slide_image_loaded(position)


@allure.epic("UI Testing")
@allure.feature("Product Slider")
@allure.story("Defect Detection")
class TestSliderDefects:
    """Faulty fixture storefront variants are reported, not papered over."""

    @allure.title("Preview that ignores arrow navigation is reported as desynchronized")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P1
    @pytest.mark.asyncio
    async def test_desynchronized_preview(self, home_page: HomePage, defect_path):
        await home_page.open(defect_path("slider-desync"))
        slider = home_page.slider

        assert await slider.advance(NEXT) == 1

        with pytest.raises(AssertionMismatch) as exc_info:
            await slider.assert_synchronized()
        assert exc_info.value.component == "slider"
        assert "preview index 0" in str(exc_info.value)

    @allure.title("Slide that never finishes fading in times out")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P2
    @pytest.mark.asyncio
    async def test_transition_never_settles(self, page, short_timeouts, defect_path):
        home_page = HomePage(page, timeouts=short_timeouts)
        await home_page.open(defect_path("slider-stuck"))

        with pytest.raises(TransitionTimeout) as exc_info:
            await home_page.slider.advance(NEXT)
        assert "800ms" in str(exc_info.value)

    @allure.title("Carousel without a current slide is reported as not found")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P2
    @pytest.mark.asyncio
    async def test_missing_current_marker(self, page, short_timeouts, defect_path):
        home_page = HomePage(page, timeouts=short_timeouts)
        await home_page.open(defect_path("slider-unmarked"))
        slider = home_page.slider

        assert await slider.active_index(PREVIEW) == 0

        with pytest.raises(ElementNotFoundError) as exc_info:
            await slider.active_index(MAIN)
        assert exc_info.value.component == "slider"
        assert "slick-current" in str(exc_info.value)

    @allure.title("Current slide without a numeric index is a mismatch")
    @allure.severity(allure.severity_level.MINOR)
    @pytest.mark.P3
    @pytest.mark.asyncio
    async def test_non_numeric_index(self, home_page: HomePage, defect_path):
        await home_page.open(defect_path("slider-bad-index"))

        with pytest.raises(AssertionMismatch) as exc_info:
            await home_page.slider.active_index(MAIN)
        assert exc_info.value.component == "slider"
        assert exc_info.value.observed == "first"
