"""Settings Repository - typed access to the persisted UI settings.

Persisted keys:
- ``name_query``          : str   - last name filter typed by the user
- ``min_hue``             : float - lower hue bound (degrees)
- ``max_hue``             : float - upper hue bound (degrees)
- ``show_favorites``      : bool  - favorites-only filter
- ``theme``               : str   - "system", "light" or "dark"
- ``deleted_colors_json`` : str   - JSON array of deleted color records

The repository keeps no state of its own; every value is projected from the
preference store on demand.
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import TypeAdapter, ValidationError

from datastore_showcase.core.flow import Flow
from datastore_showcase.infra.logging import get_logger
from datastore_showcase.preferences import (
    MutablePreferences,
    PreferenceStore,
    PreferenceWriteError,
    Preferences,
    boolean_key,
    float_key,
    string_key,
    string_set_key,
)
from datastore_showcase.schemas.color import ColorRecord
from datastore_showcase.schemas.settings import SettingsSnapshot, Theme

logger = get_logger(__name__)

T = TypeVar("T")

NAME_QUERY = string_key("name_query", "")
MIN_HUE = float_key("min_hue", 0.0)
MAX_HUE = float_key("max_hue", 360.0)
SHOW_FAVORITES = boolean_key("show_favorites", False)
THEME = string_key("theme", Theme.SYSTEM.value)
DELETED_COLORS_JSON = string_key("deleted_colors_json", "[]")

# Older releases kept only the ids of deleted colors
LEGACY_DELETED_IDS = string_set_key("deleted_color_ids")
DELETED_COLORS_MIGRATED = boolean_key("deleted_colors_migrated", False)

_deleted_list_adapter: TypeAdapter[list[ColorRecord]] = TypeAdapter(list[ColorRecord])

ColorResolver = Callable[[int], Awaitable[ColorRecord | None]]


def decode_deleted_colors(raw: str) -> list[ColorRecord]:
    """Decode the deleted-colors JSON; malformed content yields an empty list."""
    try:
        return _deleted_list_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning(
            "Discarding unreadable deleted colors list",
            error_count=e.error_count(),
            raw_length=len(raw),
        )
        return []


def encode_deleted_colors(colors: list[ColorRecord]) -> str:
    """Encode records as a JSON array using the persisted field names."""
    return _deleted_list_adapter.dump_json(colors, by_alias=True).decode("utf-8")


def _read_theme(preferences: Preferences) -> Theme:
    raw = preferences.get_value(THEME)
    try:
        return Theme.parse(raw)
    except ValueError:
        logger.debug("Unknown stored theme, using system", stored=raw)
        return Theme.SYSTEM


def _read_snapshot(preferences: Preferences) -> SettingsSnapshot:
    return SettingsSnapshot(
        name_query=preferences.get_value(NAME_QUERY),
        min_hue=preferences.get_value(MIN_HUE),
        max_hue=preferences.get_value(MAX_HUE),
        show_only_favorites=preferences.get_value(SHOW_FAVORITES),
        theme=_read_theme(preferences),
    )


def _read_deleted(preferences: Preferences) -> list[ColorRecord]:
    return decode_deleted_colors(preferences.get_value(DELETED_COLORS_JSON))


class SettingsRepository:
    """Typed settings and the deleted-colors recovery list.

    Every flow is derived from the single ``PreferenceStore.data`` stream and
    only re-emits when its own value changes.
    """

    def __init__(self, store: PreferenceStore) -> None:
        """Initialize the repository.

        Args:
            store: The process-wide preference store
        """
        self._store = store

        data = store.data
        self.name_query_flow: Flow[str] = data.map(
            lambda p: p.get_value(NAME_QUERY)
        ).distinct_until_changed()
        self.min_hue_flow: Flow[float] = data.map(
            lambda p: p.get_value(MIN_HUE)
        ).distinct_until_changed()
        self.max_hue_flow: Flow[float] = data.map(
            lambda p: p.get_value(MAX_HUE)
        ).distinct_until_changed()
        self.show_favorites_flow: Flow[bool] = data.map(
            lambda p: p.get_value(SHOW_FAVORITES)
        ).distinct_until_changed()
        self.theme_flow: Flow[Theme] = data.map(_read_theme).distinct_until_changed()
        self.deleted_colors_flow: Flow[list[ColorRecord]] = data.map(
            _read_deleted
        ).distinct_until_changed()
        self.settings_flow: Flow[SettingsSnapshot] = data.map(
            _read_snapshot
        ).distinct_until_changed()

    # =========================================================================
    # One-shot reads
    # =========================================================================

    async def get_settings_once(self) -> SettingsSnapshot:
        """All five scalar settings from a single store read."""
        return _read_snapshot(await self._store.read_once())

    async def get_theme_once(self) -> Theme:
        return _read_theme(await self._store.read_once())

    async def get_deleted_once(self) -> list[ColorRecord]:
        return _read_deleted(await self._store.read_once())

    # =========================================================================
    # Scalar setters
    # =========================================================================

    async def set_name_query(self, value: str) -> None:
        """Persist the name filter (empty string clears it)."""

        def apply(prefs: MutablePreferences) -> None:
            prefs[NAME_QUERY] = value

        await self._transact("set_name_query", apply)

    async def set_hue_range(self, min_hue: float, max_hue: float) -> None:
        """Persist both hue bounds in one transaction.

        Bounds are stored as given; keeping ``min_hue <= max_hue`` is the
        caller's job.
        """

        def apply(prefs: MutablePreferences) -> None:
            prefs[MIN_HUE] = min_hue
            prefs[MAX_HUE] = max_hue

        await self._transact("set_hue_range", apply)

    async def set_show_favorites(self, value: bool) -> None:
        def apply(prefs: MutablePreferences) -> None:
            prefs[SHOW_FAVORITES] = value

        await self._transact("set_show_favorites", apply)

    async def set_theme(self, value: Theme | str) -> None:
        """Persist the theme.

        Raises:
            ValueError: If value is not a known theme
        """
        theme = Theme.parse(value)

        def apply(prefs: MutablePreferences) -> None:
            prefs[THEME] = theme.value

        await self._transact("set_theme", apply)

    # =========================================================================
    # Deleted colors
    # =========================================================================

    async def add_deleted_color(self, color: ColorRecord) -> None:
        """Append a record to the deleted list in one atomic edit."""

        def apply(prefs: MutablePreferences) -> None:
            deleted = _read_deleted(prefs)
            deleted.append(color)
            prefs[DELETED_COLORS_JSON] = encode_deleted_colors(deleted)

        await self._transact("add_deleted_color", apply, color_id=color.id)

    async def remove_deleted_colors(self) -> None:
        """Discard every entry of the deleted list."""

        def apply(prefs: MutablePreferences) -> None:
            prefs[DELETED_COLORS_JSON] = "[]"

        await self._transact("remove_deleted_colors", apply)

    async def restore_deleted_colors(self) -> list[ColorRecord]:
        """Drain the deleted list.

        Captures the list and clears the key within the same transaction, so
        each entry is handed out exactly once.

        Returns:
            The records that were pending restore, in deletion order
        """

        def drain(prefs: MutablePreferences) -> list[ColorRecord]:
            deleted = _read_deleted(prefs)
            prefs[DELETED_COLORS_JSON] = "[]"
            return deleted

        restored = await self._transact("restore_deleted_colors", drain)
        logger.info("Deleted colors drained for restore", count=len(restored))
        return restored

    # =========================================================================
    # Legacy format
    # =========================================================================

    async def migrate_legacy_deleted_colors(self, resolve: ColorResolver) -> int:
        """Convert the legacy id-set format into the JSON list, once.

        Ids are resolved to records through ``resolve`` (typically a catalog
        lookup); ids that no longer resolve are dropped.

        Args:
            resolve: Async lookup of a color record by id

        Returns:
            Number of records appended to the deleted list
        """
        current = await self._store.read_once()
        if current.get_value(DELETED_COLORS_MIGRATED):
            return 0

        legacy_ids: list[int] = []
        for raw_id in current.get_value(LEGACY_DELETED_IDS):
            try:
                legacy_ids.append(int(raw_id))
            except ValueError:
                logger.warning("Skipping malformed legacy deleted id", raw_id=raw_id)

        resolved: list[ColorRecord] = []
        for color_id in sorted(legacy_ids):
            record = await resolve(color_id)
            if record is None:
                logger.warning("Legacy deleted color not found, dropping", color_id=color_id)
                continue
            resolved.append(record)

        def apply(prefs: MutablePreferences) -> int:
            if prefs.get_value(DELETED_COLORS_MIGRATED):
                return 0
            deleted = _read_deleted(prefs)
            deleted.extend(resolved)
            prefs[DELETED_COLORS_JSON] = encode_deleted_colors(deleted)
            prefs.remove(LEGACY_DELETED_IDS)
            prefs[DELETED_COLORS_MIGRATED] = True
            return len(resolved)

        migrated = await self._transact("migrate_legacy_deleted_colors", apply)
        logger.info(
            "Legacy deleted colors migrated",
            legacy_ids=len(legacy_ids),
            migrated=migrated,
        )
        return migrated

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _transact(
        self,
        operation: str,
        transform: Callable[[MutablePreferences], T],
        **context: object,
    ) -> T:
        try:
            return await self._store.transact(transform)
        except PreferenceWriteError as e:
            logger.error(
                "Settings write failed",
                operation=operation,
                error=str(e),
                **context,
            )
            raise
