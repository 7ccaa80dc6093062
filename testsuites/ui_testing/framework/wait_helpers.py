# ================================================================================
# Wait Helpers Module
# ================================================================================
#
# Bounded polling for UI state that has no single Playwright wait primitive,
# e.g. "either the next form step appeared, or an error was shown, or the page
# redirected". Every wait is bounded; expiry is the only cancellation path and
# surfaces as WaitTimeoutError, which components convert to their typed
# failures.
#
# Usage:
#   outcome = await poll_until(check, WaitConfig(timeout_ms=3000), "form settle")
#
# ================================================================================

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from loguru import logger
from playwright.async_api import Error as PlaywrightError


T = TypeVar("T")


@dataclass
class WaitConfig:
    """
    Configuration for a polling wait.

    Attributes:
        timeout_ms: Total bound in milliseconds
        initial_interval_ms: First delay between probes
        multiplier: Backoff multiplier applied after each probe
        max_interval_ms: Upper bound for the delay between probes
    """
    timeout_ms: int = 5000
    initial_interval_ms: int = 50
    multiplier: float = 1.5
    max_interval_ms: int = 250


# Pre-configured wait strategies for common UI scenarios
WAIT_SCENARIOS: Dict[str, WaitConfig] = {
    "default": WaitConfig(),
    "form_settle": WaitConfig(timeout_ms=5000),
}


class WaitTimeoutError(Exception):
    """Raised when a polling wait exceeds its bound."""

    def __init__(self, message: str, last_result=None):
        super().__init__(message)
        self.last_result = last_result


def get_wait_config(scenario: str, timeout_ms: Optional[int] = None) -> WaitConfig:
    """
    Get wait configuration for a scenario, optionally overriding the bound.

    Args:
        scenario: Scenario name (e.g. "form_settle")
        timeout_ms: Override for the scenario's timeout

    Returns:
        WaitConfig for the scenario, or default if not found
    """
    base = WAIT_SCENARIOS.get(scenario, WAIT_SCENARIOS["default"])
    if timeout_ms is None:
        return base
    return WaitConfig(
        timeout_ms=timeout_ms,
        initial_interval_ms=base.initial_interval_ms,
        multiplier=base.multiplier,
        max_interval_ms=base.max_interval_ms,
    )


def calculate_next_interval(current_interval_ms: float, config: WaitConfig) -> float:
    """Next probe delay with capped exponential backoff."""
    return min(current_interval_ms * config.multiplier, config.max_interval_ms)


async def poll_until(
    check_fn: Callable[[], Awaitable[Tuple[bool, T]]],
    config: Optional[WaitConfig] = None,
    description: str = "condition",
) -> T:
    """
    Poll an async probe until it reports success or the bound expires.

    Args:
        check_fn: Coroutine function returning (success, result)
        config: WaitConfig controlling bound and probe cadence
        description: Human-readable description for logging

    Returns:
        The result of the first successful probe

    Raises:
        WaitTimeoutError: If the bound expires first. The last probe result
            is kept on the exception for diagnostics.
    """
    config = config or WAIT_SCENARIOS["default"]
    deadline = time.monotonic() + config.timeout_ms / 1000
    interval = float(config.initial_interval_ms)
    attempt = 0
    last_result = None
    last_error = None

    while True:
        attempt += 1
        try:
            success, result = await check_fn()
            last_result = result
            if success:
                logger.debug(f"Wait satisfied after {attempt} probes: {description}")
                return result
        except PlaywrightError as e:
            # Element replaced by a re-render mid-read; probe again.
            last_error = str(e).splitlines()[0]
            logger.debug(f"Probe {attempt} for '{description}' raised: {last_error}")

        if time.monotonic() >= deadline:
            error_msg = (
                f"Timeout after {config.timeout_ms}ms waiting for: {description}. "
                f"Last result: {last_result}, last error: {last_error}"
            )
            logger.debug(error_msg)
            raise WaitTimeoutError(error_msg, last_result=last_result)

        await asyncio.sleep(interval / 1000)
        interval = calculate_next_interval(interval, config)


__all__ = [
    "WaitConfig",
    "WAIT_SCENARIOS",
    "WaitTimeoutError",
    "get_wait_config",
    "calculate_next_interval",
    "poll_until",
]
