"""Repositories - the color catalog and the persisted settings."""

from datastore_showcase.repositories.color_repository import ColorRepository
from datastore_showcase.repositories.settings_repository import SettingsRepository

__all__ = [
    "ColorRepository",
    "SettingsRepository",
]
