"""Utility functions for FerroCash."""

from ferrocash.utils.money import (
    CENT,
    ZERO,
    non_negative_money,
    positive_money,
    to_date,
    to_money,
    utcnow,
)

__all__ = [
    # Money utilities
    "CENT",
    "ZERO",
    "to_money",
    "non_negative_money",
    "positive_money",
    # Time utilities
    "utcnow",
    "to_date",
]
