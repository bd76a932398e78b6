"""Business logic services."""

from datastore_showcase.services.color_service import ColorService, filter_colors

__all__ = [
    "ColorService",
    "filter_colors",
]
