"""Workflow entry points for generating journeys."""

from .journey_generator import (
    InvalidInterestSelection,
    JourneyGenerationError,
    JourneyGenerator,
    NoPlacesFound,
    generate_journey,
)

__all__ = [
    "InvalidInterestSelection",
    "JourneyGenerationError",
    "JourneyGenerator",
    "NoPlacesFound",
    "generate_journey",
]
