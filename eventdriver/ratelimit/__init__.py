"""
Call-rate wrappers for event listeners.

Provides debounce and throttle wrappers that coalesce listener calls
in time before they reach the real handler.
"""

from .wrappers import (
    Debounced,
    RateWrapper,
    Throttled,
    debounce,
    throttle,
    wrap_callback,
)

__all__ = [
    "Debounced",
    "RateWrapper",
    "Throttled",
    "debounce",
    "throttle",
    "wrap_callback",
]
