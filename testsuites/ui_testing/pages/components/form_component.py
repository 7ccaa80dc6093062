"""
================================================================================
Form Component (Async / Playwright)
================================================================================

Multi-step quiz form: zip -> email -> phone -> "thank you" page.

Each step reveals one input. A step is completed either by an *advance*
action ("Next", moves to the following step) or by a *finalize* action
("Submit", ends the flow). Which one is correct depends on the step's
position in the flow; a step that exposes the wrong one is reported as a
StepActionMismatch rather than clicked through.

After every commit the controller settles: it waits, bounded, for one of
    - an error indicator for the field (step stays, field recorded in errors);
      an indicator already showing before the commit only counts once it
      has outlasted `stale_error` ms, so a late next step still wins
    - the next field's input (flow advances)
    - the terminal address (last step only)
Seeing none of them is recorded as a terminal observation, not raised.

================================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Set, Tuple

import allure
from loguru import logger
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from testsuites.ui_testing.framework.config_loader import Timeouts
from testsuites.ui_testing.framework.errors import (
    AssertionMismatch,
    ElementNotFoundError,
    FieldNotReached,
    StepActionMismatch,
    TerminalNotReached,
)
from testsuites.ui_testing.framework.locators import resolve, resolve_first, selector_for
from testsuites.ui_testing.framework.page_base import Navigator, terminal_pattern
from testsuites.ui_testing.framework.wait_helpers import (
    WaitTimeoutError,
    get_wait_config,
    poll_until,
)
from .validation_rules import FIELD_ORDER, is_last_field, next_field, rule_for


ADVANCE = "advance"
FINALIZE = "finalize"

_ACTION_ROLES: Dict[str, str] = {
    ADVANCE: "form.advance",
    FINALIZE: "form.finalize",
}

# Settle outcomes
ERROR_SHOWN = "error"
ADVANCED = "advanced"
TERMINAL = "terminal"

# Marks error blocks that were already visible before a commit
STALE_ERROR_ATTR = "data-harness-stale-error"

_MARK_STALE_JS = (
    "(els, attr) => els.forEach(e => e.setAttribute(attr, ''))"
)
_UNMARK_JS = (
    "(els, attr) => els.forEach(e => e.removeAttribute(attr))"
)
_ERROR_COUNTS_JS = (
    "(els, attr) => [els.length, els.filter(e => !e.hasAttribute(attr)).length]"
)


class FormStep(str, Enum):
    """Flow states; every state but TERMINAL awaits one field."""
    AWAITING_ZIP = "zip"
    AWAITING_EMAIL = "email"
    AWAITING_PHONE = "phone"
    TERMINAL = "terminal"


@dataclass
class FormSession:
    """
    Observed state of the flow.

    Attributes:
        current_step_field: Field whose step is showing, None once the flow
            ended (terminal page or a step that never appeared)
        values: Last value attempted per field
        errors: Fields currently showing a validation error
        reached_terminal_page: Whether the terminal address was observed
    """
    current_step_field: Optional[str] = FIELD_ORDER[0]
    values: Dict[str, str] = field(default_factory=dict)
    errors: Set[str] = field(default_factory=set)
    reached_terminal_page: bool = False

    @property
    def state(self) -> FormStep:
        if self.current_step_field is None:
            return FormStep.TERMINAL
        return FormStep(self.current_step_field)

    def copy(self) -> "FormSession":
        return FormSession(
            current_step_field=self.current_step_field,
            values=dict(self.values),
            errors=set(self.errors),
            reached_terminal_page=self.reached_terminal_page,
        )

    def describe(self) -> str:
        return (
            f"step={self.state.value}, errors={sorted(self.errors)}, "
            f"terminal_page={self.reached_terminal_page}"
        )


def step_action(field_name: str) -> str:
    """Completion action a step should expose given its position in the flow."""
    return FINALIZE if is_last_field(field_name) else ADVANCE


class FormComponent:
    """
    Quiz form flow controller.

    Usage:
        form = FormComponent(page)
        await form.fill_field("zip", "1234")
        await form.expect_validation_error("zip")

        await form.fill_and_submit({"zip": "12345", "email": "a@b.com", "phone": "1234567890"})
    """

    COMPONENT = "form"

    def __init__(
        self,
        page: Page,
        timeouts: Optional[Timeouts] = None,
        container_selector: Optional[str] = None,
        navigator: Optional[Navigator] = None,
    ):
        """
        Args:
            page: Playwright Page object
            timeouts: Wait bounds (defaults to `ui.timeouts.*`)
            container_selector: Override for the form container selector
            navigator: Shared navigation capability (created if omitted)
        """
        self.page = page
        self.timeouts = timeouts or Timeouts.from_config()
        self.container_selector = container_selector or selector_for("form.container")
        self.navigator = navigator or Navigator(page)
        self.session = FormSession()

    def reset(self) -> None:
        """Forget observed state (after re-navigation)."""
        self.session = FormSession()

    # =========================================================================
    # Locators (resolved at point of use)
    # =========================================================================

    def _container(self) -> Locator:
        return self.page.locator(self.container_selector).first

    def input_for(self, field_name: str) -> Locator:
        rule_for(field_name)
        return resolve_first(self._container(), f"form.{field_name}")

    def _visible_errors(self) -> Locator:
        return resolve(self._container(), "form.error.visible")

    def _field_errors(self, field_name: str) -> Locator:
        return self._visible_errors().filter(has_text=rule_for(field_name).error_pattern)

    # =========================================================================
    # Flow actions
    # =========================================================================

    @allure.step("Fill form field {name}")
    async def fill_field(self, name: str, value: str) -> FormSession:
        """
        Fill one step's input, commit it with the action proper to the step,
        and wait for the outcome.

        Args:
            name: "zip", "email" or "phone"
            value: Value to type (may be empty)

        Returns:
            Snapshot of the session after the step settled

        Raises:
            FieldNotReached: The step's input never became visible
            StepActionMismatch: The step exposes the wrong completion action
            ElementNotFoundError: The step exposes no completion action
        """
        rule_for(name)
        field_input = self.input_for(name)
        try:
            await field_input.wait_for(state="visible", timeout=self.timeouts.field_reveal)
        except PlaywrightTimeoutError:
            logger.error(f"❌ Step '{name}' never appeared ({self.session.describe()})")
            raise FieldNotReached(
                name,
                self.timeouts.field_reveal,
                observed=self.session.describe(),
                component=self.COMPONENT,
            ) from None

        logger.debug(f"Filling '{name}' with {value!r}")
        await field_input.fill(value)
        await self._mark_stale_errors(name)
        await self._commit(name)
        self.session.values[name] = value
        return await self._settle(name)

    async def _commit(self, name: str) -> None:
        expected = step_action(name)
        advance = resolve_first(self._container(), _ACTION_ROLES[ADVANCE])
        finalize = resolve_first(self._container(), _ACTION_ROLES[FINALIZE])

        try:
            await advance.or_(finalize).first.wait_for(
                state="visible", timeout=self.timeouts.element
            )
        except PlaywrightTimeoutError:
            logger.error(f"❌ Step '{name}' exposes no completion action")
            raise ElementNotFoundError(
                f"Step '{name}' exposes no completion action",
                component=self.COMPONENT,
                expected=expected,
            ) from None

        exposed = [
            action
            for action, locator in ((ADVANCE, advance), (FINALIZE, finalize))
            if await locator.is_visible()
        ]
        if expected not in exposed:
            logger.error(
                f"❌ Step '{name}' should complete with '{expected}' but exposes {exposed}"
            )
            raise StepActionMismatch(
                name,
                expected_action=expected,
                observed_action=", ".join(exposed) or None,
                component=self.COMPONENT,
            )

        target = advance if expected == ADVANCE else finalize
        await target.click()
        logger.debug(f"Committed '{name}' with {expected} action")

    async def _mark_stale_errors(self, name: str) -> None:
        """Tag the field's currently visible error blocks before committing."""
        await resolve(self._container(), "form.error").evaluate_all(_UNMARK_JS, STALE_ERROR_ATTR)
        await self._field_errors(name).evaluate_all(_MARK_STALE_JS, STALE_ERROR_ATTR)

    async def _error_counts(self, name: str) -> Tuple[int, int]:
        """(visible, fresh) error blocks for the field; fresh ones appeared after the commit."""
        visible, fresh = await self._field_errors(name).evaluate_all(
            _ERROR_COUNTS_JS, STALE_ERROR_ATTR
        )
        return int(visible), int(fresh)

    async def _settle(self, name: str) -> FormSession:
        following = next_field(name)
        following_input = self.input_for(following) if following else None
        pattern = terminal_pattern()
        committed_at = time.monotonic()
        stale_grace = self.timeouts.stale_error / 1000

        async def probe():
            if following is None and self.navigator.url_matches(pattern):
                return True, TERMINAL
            if following_input is not None and await following_input.is_visible():
                return True, ADVANCED
            visible, fresh = await self._error_counts(name)
            if fresh > 0:
                return True, ERROR_SHOWN
            if visible > 0 and time.monotonic() - committed_at >= stale_grace:
                return True, ERROR_SHOWN
            return False, None

        try:
            outcome = await poll_until(
                probe,
                get_wait_config("form_settle", self.timeouts.settle),
                f"outcome of '{name}' step",
            )
        except WaitTimeoutError:
            outcome = None

        if outcome == ERROR_SHOWN:
            self.session.errors.add(name)
            self.session.current_step_field = name
        elif outcome == ADVANCED:
            self.session.errors.discard(name)
            self.session.current_step_field = following
        elif outcome == TERMINAL:
            self.session.errors.discard(name)
            self.session.current_step_field = None
            self.session.reached_terminal_page = True
        else:
            logger.warning(
                f"⚠️ Step '{name}' showed no error, no next step and no redirect "
                f"within {self.timeouts.settle}ms; flow treated as ended"
            )
            self.session.current_step_field = None

        logger.debug(f"Step '{name}' settled: {outcome} ({self.session.describe()})")
        return self.session.copy()

    async def fill_form(self, values: Mapping[str, str]) -> FormSession:
        """
        Fill the supplied fields in flow order without waiting for a redirect.

        Args:
            values: Mapping field -> value; unknown fields are rejected
        """
        for name in values:
            rule_for(name)
        session = self.session.copy()
        for name in FIELD_ORDER:
            if name in values:
                session = await self.fill_field(name, values[name])
        return session

    @allure.step("Fill and submit form")
    async def fill_and_submit(self, values: Mapping[str, str]) -> FormSession:
        """
        Fill every supplied field in flow order, then wait for the terminal
        redirect.

        Raises:
            FieldNotReached: A later step never appeared
            TerminalNotReached: The flow never redirected to the terminal page
        """
        await self.fill_form(values)
        await self.expect_terminal_redirect()
        return self.session.copy()

    # =========================================================================
    # Assertions
    # =========================================================================

    @allure.step("Expect validation error on {field_name}")
    async def expect_validation_error(self, field_name: str) -> str:
        """
        An error indicator showing either of the field's messages is visible.

        Returns:
            The text of the matching indicator

        Raises:
            AssertionMismatch: No indicator appeared, or indicators appeared
                with text belonging to neither message
        """
        rule = rule_for(field_name)
        matching = self._field_errors(field_name)
        try:
            await matching.first.wait_for(state="visible", timeout=self.timeouts.element)
        except PlaywrightTimeoutError:
            shown = [
                text.strip()
                for text in await self._visible_errors().all_inner_texts()
                if text.strip()
            ]
            if shown:
                message = f"Error indicator shown for '{field_name}' with unexpected text"
                observed = shown
            else:
                message = f"No validation error shown for '{field_name}'"
                observed = "no visible error indicator"
            logger.error(f"❌ {message}: {observed}")
            raise AssertionMismatch(
                message,
                component=self.COMPONENT,
                expected=f"one of {list(rule.messages)}",
                observed=observed,
            ) from None

        self.session.errors.add(field_name)
        text = (await matching.first.inner_text()).strip()
        logger.debug(f"Validation error on '{field_name}': {text}")
        return text

    async def expect_no_validation_error(self, field_name: str) -> None:
        """No indicator currently shows either of the field's messages."""
        shown = await self._field_errors(field_name).all_inner_texts()
        if shown:
            raise AssertionMismatch(
                f"Unexpected validation error for '{field_name}'",
                component=self.COMPONENT,
                expected="no error",
                observed=[text.strip() for text in shown],
            )

    async def expect_field_visible(self, field_name: str) -> None:
        try:
            await self.input_for(field_name).wait_for(
                state="visible", timeout=self.timeouts.field_reveal
            )
        except PlaywrightTimeoutError:
            raise FieldNotReached(
                field_name,
                self.timeouts.field_reveal,
                observed=self.session.describe(),
                component=self.COMPONENT,
            ) from None

    async def expect_field_hidden(self, field_name: str) -> None:
        if await self.input_for(field_name).is_visible():
            raise AssertionMismatch(
                f"Field '{field_name}' is visible",
                component=self.COMPONENT,
                expected="hidden",
                observed="visible",
            )

    @allure.step("Expect redirect to terminal page")
    async def expect_terminal_redirect(self) -> str:
        """
        The address changes to the terminal page. A "thank you" message on the
        same address does not count.

        Returns:
            The terminal address
        """
        pattern = terminal_pattern()
        try:
            url = await self.navigator.wait_for_url(
                pattern, timeout=self.timeouts.redirect, component=self.COMPONENT
            )
        except TerminalNotReached as e:
            raise TerminalNotReached(
                "Flow never redirected to the terminal page",
                component=self.COMPONENT,
                expected=pattern.pattern,
                observed=f"{e.observed} ({self.session.describe()})",
            ) from None

        if not self.navigator.url_matches(pattern):
            raise AssertionMismatch(
                "Current address does not match the terminal pattern",
                component=self.COMPONENT,
                expected=pattern.pattern,
                observed=self.navigator.current_url,
            )

        self.session.current_step_field = None
        self.session.reached_terminal_page = True
        logger.info(f"Terminal page reached: {url}")
        return url

    async def visible_error_texts(self) -> List[str]:
        return [t.strip() for t in await self._visible_errors().all_inner_texts() if t.strip()]


__all__ = [
    "ADVANCE",
    "FINALIZE",
    "FormStep",
    "FormSession",
    "FormComponent",
    "step_action",
]
