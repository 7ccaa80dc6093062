"""
================================================================================
UI Verification Errors
================================================================================

Typed failures raised by page components.

Every failure derives from AssertionError so pytest reports it as a failed
check (not an error in the harness itself). Each exception carries the
component that raised it plus the expected and observed state, so a report
tells apart "element never appeared" from "element appeared but was wrong".

Hierarchy:
    UIVerificationError
        ElementNotFoundError    - required element absent after its wait bound
        TransitionTimeout       - settle signal never observed
        FieldNotReached         - form step input never revealed
        TerminalNotReached      - terminal redirect never happened
        AssertionMismatch       - observed value differs from expected
            StepActionMismatch  - form step exposes the wrong completion action

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Optional


class UIVerificationError(AssertionError):
    """Base class for every failure surfaced by a page component."""

    def __init__(
        self,
        message: str,
        component: str = "",
        expected: Any = None,
        observed: Any = None,
    ):
        self.component = component
        self.expected = expected
        self.observed = observed
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        prefix = f"[{self.component}] " if self.component else ""
        details = []
        if self.expected is not None:
            details.append(f"expected={self.expected!r}")
        if self.observed is not None:
            details.append(f"observed={self.observed!r}")
        suffix = f" ({', '.join(details)})" if details else ""
        return f"{prefix}{self.message}{suffix}"


class ElementNotFoundError(UIVerificationError):
    """Raised when a required element is absent after its wait bound."""
    pass


class TransitionTimeout(UIVerificationError):
    """Raised when a transition-complete / state-settled signal never appears."""
    pass


class FieldNotReached(UIVerificationError):
    """Raised when a form step's input never becomes visible."""

    def __init__(
        self,
        field: str,
        timeout_ms: int,
        observed: Any = None,
        component: str = "form",
    ):
        self.field = field
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Field '{field}' was never revealed within {timeout_ms}ms",
            component=component,
            expected=f"{field} input visible",
            observed=observed,
        )


class TerminalNotReached(UIVerificationError):
    """Raised when the flow never navigates to the terminal address."""
    pass


class AssertionMismatch(UIVerificationError):
    """Raised when an observed value disagrees with the expected one."""
    pass


class StepActionMismatch(AssertionMismatch):
    """
    Raised when a form step exposes a completion action that does not fit its
    position in the flow (e.g. a finalize button on a step that is not last).
    """

    def __init__(
        self,
        field: str,
        expected_action: str,
        observed_action: Optional[str],
        component: str = "form",
    ):
        self.field = field
        self.expected_action = expected_action
        self.observed_action = observed_action
        super().__init__(
            f"Step '{field}' exposes the wrong completion action",
            component=component,
            expected=expected_action,
            observed=observed_action,
        )


class LocatorRoleError(KeyError):
    """Raised when a semantic role has no selector declared."""
    pass


__all__ = [
    "UIVerificationError",
    "ElementNotFoundError",
    "TransitionTimeout",
    "FieldNotReached",
    "TerminalNotReached",
    "AssertionMismatch",
    "StepActionMismatch",
    "LocatorRoleError",
]
