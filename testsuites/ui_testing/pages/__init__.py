"""
================================================================================
Page Objects
================================================================================

Page objects for the storefront under test.

Pages are compositions, not subclasses:
    - a Navigator (open, current address, URL waits, failure capture)
    - one instance of each component the page renders

Author: Automation Team
License: MIT
================================================================================
"""

from .home_page import HomePage
from .form_page import FormPage

__all__ = [
    "HomePage",
    "FormPage",
]
