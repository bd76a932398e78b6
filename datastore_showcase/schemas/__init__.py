"""Pydantic schemas shared across layers."""

from datastore_showcase.schemas.color import ColorRecord
from datastore_showcase.schemas.settings import SettingsSnapshot, Theme

__all__ = [
    "ColorRecord",
    "SettingsSnapshot",
    "Theme",
]
