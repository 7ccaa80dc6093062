"""
Page components.

Each component wraps one region of the storefront and is composed into page
objects; components never navigate.
"""

from .form_component import FormComponent, FormSession, FormStep
from .location_component import LocationComponent
from .reviews_component import DisclosureState, ReviewsComponent
from .slider_component import CarouselPair, Slide, SliderComponent
from .validation_rules import FIELD_ORDER, VALIDATION_RULES, ValidationRule

__all__ = [
    "FormComponent",
    "FormSession",
    "FormStep",
    "LocationComponent",
    "DisclosureState",
    "ReviewsComponent",
    "CarouselPair",
    "Slide",
    "SliderComponent",
    "FIELD_ORDER",
    "VALIDATION_RULES",
    "ValidationRule",
]
