# File: utils/math_utils.py
"""Math and calculation utilities for TaskQuest.

Pure Python math functions with ZERO Home Assistant dependencies.

Functions:
    - round_value: Consistent rounding to configured precision
    - calculate_percentage: Progress percentage calculations
"""

from __future__ import annotations

# Default float precision for rounding
DATA_FLOAT_PRECISION = 2


def round_value(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a value to the configured precision.

    Examples:
        round_value(10.456) → 10.46
        round_value(10.0) → 10.0
    """
    return round(value, precision)


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Calculate progress percentage with proper rounding.

    Args:
        current: Current progress value
        target: Target/total value
        precision: Number of decimal places for rounding

    Returns:
        Percentage (0-100) with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0  # Division by zero protection
    """
    if target <= 0:
        return 0.0
    return round_value((current / target) * 100, precision)
