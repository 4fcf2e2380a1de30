# offgrid_calculator/services/validation.py
"""Validation helpers for calculator inputs."""

from __future__ import annotations

import math
from typing import Any


class InvalidInput(ValueError):
    """Raised when a calculator input violates its domain constraints."""


def as_number(value: Any, field: str) -> float:
    """Return *value* as a float; reject booleans, non-numbers and NaN."""
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be a number, got {value!r}") from None
    if math.isnan(number) or math.isinf(number):
        raise InvalidInput(f"{field} must be finite, got {value!r}")
    return number


def non_negative(value: Any, field: str) -> float:
    number = as_number(value, field)
    if number < 0:
        raise InvalidInput(f"{field} must not be negative (got {number:g})")
    return number


def positive(value: Any, field: str) -> float:
    number = as_number(value, field)
    if number <= 0:
        raise InvalidInput(f"{field} must be greater than zero (got {number:g})")
    return number


def in_range(value: Any, field: str, low: float, high: float) -> float:
    """Return value if ``low <= value <= high``; raise otherwise."""
    number = as_number(value, field)
    if number < low or number > high:
        raise InvalidInput(f"{field} must be between {low:g} and {high:g} (got {number:g})")
    return number


def loss_fraction(value: Any, field: str = "efficiency_loss") -> float:
    """A loss fraction lives in [0, 1); 1 or more leaves no usable energy."""
    number = as_number(value, field)
    if number < 0 or number >= 1:
        raise InvalidInput(f"{field} must be in [0, 1) (got {number:g})")
    return number
