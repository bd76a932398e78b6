"""Preference store - durable typed key-value settings."""

from datastore_showcase.preferences.keys import (
    PreferenceKey,
    PreferenceType,
    boolean_key,
    float_key,
    int_key,
    string_key,
    string_set_key,
)
from datastore_showcase.preferences.serializer import (
    CorruptPreferencesError,
    PreferencesSerializer,
)
from datastore_showcase.preferences.snapshot import MutablePreferences, Preferences
from datastore_showcase.preferences.store import (
    PreferenceStore,
    PreferenceStoreClosedError,
    PreferenceStoreError,
    PreferenceWriteError,
)

__all__ = [
    "CorruptPreferencesError",
    "MutablePreferences",
    "PreferenceKey",
    "PreferenceStore",
    "PreferenceStoreClosedError",
    "PreferenceStoreError",
    "PreferenceType",
    "PreferenceWriteError",
    "Preferences",
    "PreferencesSerializer",
    "boolean_key",
    "float_key",
    "int_key",
    "string_key",
    "string_set_key",
]
