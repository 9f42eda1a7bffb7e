"""Sequences API package."""

from billing.api.v1.sequences.routes import router

__all__ = ["router"]
