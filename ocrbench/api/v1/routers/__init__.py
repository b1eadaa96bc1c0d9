"""API v1 routers package."""

from . import documents, extractions, images, session

__all__ = [
    "documents",
    "extractions",
    "images",
    "session",
]
