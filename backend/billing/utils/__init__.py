"""Utility functions and helpers."""

from billing.utils.datetime_utils import business_today

__all__ = [
    "business_today",
]
