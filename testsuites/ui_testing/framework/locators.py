"""
================================================================================
Locator Resolver
================================================================================

Declarative mapping from semantic roles ("zip input", "active main slide") to
selectors, plus pure functions that resolve a role inside a scope.

Handles are resolved freshly at every point of use. Components never keep a
Locator across an await that may re-render the element; they call `resolve()`
again instead.

Roles are namespaced by component:
    slider.*    dual carousel (main + preview)
    form.*      multi-step quiz form
    reviews.*   disclosure panel + image gallery overlay
    location.*  detected city readback

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union

from loguru import logger
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import ElementNotFoundError, LocatorRoleError


Scope = Union[Page, Locator]


# Marker classes and attributes of the carousel markup
CURRENT_CLASS = "slick-current"
ACTIVE_CLASS = "slick-active"
CLONE_CLASS = "slick-cloned"
INDEX_ATTRIBUTE = "data-slick-index"

# Disclosure panel / gallery markers
EXPANDED_CLASS = "reviewWrap_opened"
OVERLAY_VISIBLE_CLASS = "lg-visible"


LOCATORS: Dict[str, str] = {
    # Slider (scope: page)
    "slider.container": ".sliderTheme_blue",
    # Slider (scope: slider container)
    "slider.main": "[data-main-slider]",
    "slider.preview": "[data-main-preview-slider]",
    # Slider (scope: one carousel)
    "slider.main.items": ".sliderDefault__item",
    "slider.main.current": f".sliderDefault__item.{CURRENT_CLASS}",
    "slider.main.image": "img[alt='slider-img']",
    "slider.preview.items": ".sliderPrev__item",
    "slider.preview.current": f".sliderPrev__item.{CURRENT_CLASS}",
    "slider.preview.image": "img[alt='preview']",
    "slider.prev_arrow": ".slick-prev",
    "slider.next_arrow": ".slick-next",

    # Form (scope: page)
    "form.container": ".formWrap_quiz",
    # Form (scope: form container)
    "form.zip": "input[data-zip-code-input]",
    "form.email": "input[name='email'][placeholder='Email Address']",
    "form.phone": "input[data-phone-input], input[name='phone']",
    "form.advance": "button:has-text('Next'):visible",
    "form.finalize": "button:text-matches('submit', 'i'):visible",
    "form.error": "[data-error-block]",
    "form.error.visible": "[data-error-block]:visible",

    # Reviews (scope: page)
    "reviews.container": ".reviewWrap.reviewWrap_type3",
    "reviews.overlay": ".lg-outer",
    # Reviews (scope: reviews container)
    "reviews.detail": ".reviewFull",
    "reviews.toggle": ".moreless",
    "reviews.gallery": "[data-light-gallery]",
    "reviews.gallery.thumbnails": ".review__img",
    # Reviews (scope: toggle)
    "reviews.toggle.label": ".moreless__txt",
    # Reviews (scope: overlay)
    "reviews.overlay.close": ".lg-close",
    "reviews.overlay.counter": "#lg-counter",

    # Location (scope: page)
    "location.container": ".location__city",
    # Location (scope: location container)
    "location.city": "span[data-location-city-and-state].locationCityAndState",
}


def selector_for(role: str) -> str:
    """
    Look up the selector declared for a role.

    Raises:
        LocatorRoleError: When no selector is declared for the role
    """
    try:
        return LOCATORS[role]
    except KeyError:
        raise LocatorRoleError(f"No selector declared for role: {role}") from None


def resolve(scope: Scope, role: str) -> Locator:
    """Return a fresh Locator for every element matching `role` in `scope`."""
    return scope.locator(selector_for(role))


def resolve_first(scope: Scope, role: str) -> Locator:
    """Return a fresh Locator for the first element matching `role`."""
    return resolve(scope, role).first


async def resolve_visible(
    scope: Scope,
    role: str,
    timeout: int = 5000,
    component: str = "",
) -> Locator:
    """
    Resolve the first element for `role` and wait until it is visible.

    Args:
        scope: Page or Locator to search within
        role: Semantic role name
        timeout: Visibility bound in milliseconds
        component: Component name used in failure messages

    Returns:
        Locator for the visible element

    Raises:
        ElementNotFoundError: When the element is not visible within the bound
    """
    locator = resolve_first(scope, role)
    try:
        await locator.wait_for(state="visible", timeout=timeout)
    except PlaywrightTimeoutError:
        message = f"Element '{role}' not visible within {timeout}ms"
        logger.error(f"❌ {message} (selector: {selector_for(role)})")
        raise ElementNotFoundError(
            message,
            component=component,
            expected=selector_for(role),
        ) from None
    logger.debug(f"✅ Element '{role}' visible: {selector_for(role)}")
    return locator


def has_class(class_attr: str, class_name: str) -> bool:
    """True when `class_name` is one of the whitespace-separated classes."""
    return class_name in (class_attr or "").split()


def is_clone(class_attr: Optional[str]) -> bool:
    """Clone predicate: the element carries the clone marker class."""
    return has_class(class_attr or "", CLONE_CLASS)


def logical_indices(classes: Sequence[Optional[str]]) -> List[int]:
    """
    Physical indices of the non-clone elements, in document order.

    Position N in the returned list is logical position N, however many
    clones the carousel rendered at either end.
    """
    return [i for i, cls in enumerate(classes) if not is_clone(cls)]


async def class_attrs(locator: Locator) -> List[str]:
    """Class attribute of every element matched by `locator`, in one round trip."""
    return await locator.evaluate_all(
        "els => els.map(el => el.getAttribute('class') || '')"
    )


__all__ = [
    "LOCATORS",
    "CURRENT_CLASS",
    "ACTIVE_CLASS",
    "CLONE_CLASS",
    "INDEX_ATTRIBUTE",
    "EXPANDED_CLASS",
    "OVERLAY_VISIBLE_CLASS",
    "Scope",
    "selector_for",
    "resolve",
    "resolve_first",
    "resolve_visible",
    "has_class",
    "is_clone",
    "logical_indices",
    "class_attrs",
]
