"""SQLAlchemy models for the color catalog."""

from datastore_showcase.models.base import Base
from datastore_showcase.models.color import ColorEntity

__all__ = [
    "Base",
    "ColorEntity",
]
