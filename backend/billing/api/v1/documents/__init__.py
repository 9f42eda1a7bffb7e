"""Document numbering API package."""

from billing.api.v1.documents.routes import router

__all__ = ["router"]
