"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based (async) verification harness for the storefront.

Components:
    - locators: role -> selector table and point-of-use resolution
    - page_base: Navigator capability composed into page objects
    - browser_manager: Browser lifecycle management
    - wait_helpers: Bounded polling with backoff
    - errors: Typed verification failures
    - config_loader: YAML/env configuration and Loguru setup

Author: Automation Team
License: MIT
================================================================================
"""

from .browser_manager import BrowserManager
from .config_loader import ConfigLoader, ConfigurationError, Timeouts, init_logger
from .errors import (
    AssertionMismatch,
    ElementNotFoundError,
    FieldNotReached,
    LocatorRoleError,
    StepActionMismatch,
    TerminalNotReached,
    TransitionTimeout,
    UIVerificationError,
)
from .page_base import Navigator

__all__ = [
    "BrowserManager",
    "ConfigLoader",
    "ConfigurationError",
    "Timeouts",
    "init_logger",
    "UIVerificationError",
    "ElementNotFoundError",
    "TransitionTimeout",
    "FieldNotReached",
    "TerminalNotReached",
    "AssertionMismatch",
    "StepActionMismatch",
    "LocatorRoleError",
    "Navigator",
]
