"""Color Service - user actions over the catalog and the settings.

Composes ``ColorRepository`` and ``SettingsRepository`` the way the color
screen uses them. Preference write failures are logged and reported as a
``False`` (or empty) result so a failed action never takes the app down.
"""

from collections.abc import Awaitable, Iterable

from sqlalchemy.exc import SQLAlchemyError

from datastore_showcase.core.color_math import parse_hex_color
from datastore_showcase.core.palette import Palette
from datastore_showcase.infra.logging import get_logger
from datastore_showcase.preferences import PreferenceStoreError
from datastore_showcase.repositories.color_repository import ColorRepository
from datastore_showcase.repositories.settings_repository import SettingsRepository
from datastore_showcase.schemas.color import ColorRecord
from datastore_showcase.schemas.settings import SettingsSnapshot, Theme

logger = get_logger(__name__)

UNNAMED = "Unnamed"


def filter_colors(
    colors: Iterable[ColorRecord], snapshot: SettingsSnapshot
) -> list[ColorRecord]:
    """Apply the persisted filters to a list of colors.

    A color is kept when its name contains the query (case-insensitive,
    blank query matches all), its hue lies in ``[min_hue, max_hue]``, and it
    is a favorite whenever favorites-only is enabled.
    """
    query = snapshot.name_query.strip().casefold()
    return [
        color
        for color in colors
        if (not query or query in color.name.casefold())
        and snapshot.min_hue <= color.hue <= snapshot.max_hue
        and (not snapshot.show_only_favorites or color.is_favorite)
    ]


class ColorService:
    """Catalog actions with recoverable deletes and persisted filters."""

    def __init__(self, colors: ColorRepository, settings: SettingsRepository) -> None:
        self.colors = colors
        self.settings = settings

    async def seed_if_empty(self, palette: Palette) -> int:
        """Insert the palette when the catalog has no colors.

        Returns:
            Number of colors inserted
        """
        if await self.colors.get_all_once():
            return 0

        inserted = await self.colors.insert_all(palette.to_records())
        logger.info("Catalog seeded", palette=palette.name, count=len(inserted))
        return len(inserted)

    async def add_color(self, name: str, hex_color: str) -> ColorRecord | None:
        """Add a color from user input.

        Returns:
            The stored record, or None if the hex color is invalid
        """
        try:
            color = parse_hex_color(hex_color)
        except ValueError:
            logger.warning("Rejected invalid hex color", hex_color=hex_color)
            return None

        record = ColorRecord(name=name.strip() or UNNAMED, color=color)
        return await self.colors.insert(record)

    async def toggle_favorite(self, color_id: int) -> bool | None:
        return await self.colors.toggle_favorite(color_id)

    async def delete_color(self, color: ColorRecord) -> bool:
        """Delete a color, keeping it recoverable.

        The record is saved to the deleted list first; if that write fails
        the catalog row is left in place.

        Returns:
            True if the color was deleted
        """
        if not await self._persist(
            "add_deleted_color",
            self.settings.add_deleted_color(color),
            color_id=color.id,
        ):
            return False

        await self.colors.delete(color)
        logger.info("Color deleted", color_id=color.id, name=color.name)
        return True

    async def restore_deleted_colors(self) -> list[ColorRecord]:
        """Put every pending deleted color back into the catalog.

        Records that fail to reach the catalog are put back on the deleted
        list so they stay recoverable.

        Returns:
            The records actually restored (empty if the deleted list could not
            be drained)
        """
        try:
            pending = await self.settings.restore_deleted_colors()
        except PreferenceStoreError as e:
            logger.error("Restore of deleted colors failed", error=str(e))
            return []

        restored: list[ColorRecord] = []
        for index, color in enumerate(pending):
            try:
                restored.append(await self.colors.insert(color))
            except SQLAlchemyError as e:
                unrestored = pending[index:]
                logger.error(
                    "Catalog insert failed during restore",
                    color_id=color.id,
                    error=str(e),
                    requeued=len(unrestored),
                )
                for record in unrestored:
                    await self._persist(
                        "add_deleted_color",
                        self.settings.add_deleted_color(record),
                        color_id=record.id,
                    )
                break

        logger.info("Deleted colors restored", count=len(restored))
        return restored

    async def clear_deleted_colors(self) -> bool:
        """Permanently discard the deleted list."""
        return await self._persist(
            "remove_deleted_colors", self.settings.remove_deleted_colors()
        )

    # =========================================================================
    # Filters and theme
    # =========================================================================

    async def set_name_query(self, value: str) -> bool:
        return await self._persist("set_name_query", self.settings.set_name_query(value))

    async def set_hue_range(self, min_hue: float, max_hue: float) -> bool:
        """Persist the hue range, swapping the bounds if they are inverted."""
        if min_hue > max_hue:
            min_hue, max_hue = max_hue, min_hue
        return await self._persist(
            "set_hue_range", self.settings.set_hue_range(min_hue, max_hue)
        )

    async def set_show_favorites(self, value: bool) -> bool:
        return await self._persist(
            "set_show_favorites", self.settings.set_show_favorites(value)
        )

    async def set_theme(self, value: Theme | str) -> bool:
        """Persist the theme.

        Raises:
            ValueError: If value is not a known theme
        """
        theme = Theme.parse(value)
        return await self._persist("set_theme", self.settings.set_theme(theme))

    async def visible_colors_once(self) -> list[ColorRecord]:
        """Catalog colors passing the persisted filters."""
        snapshot = await self.settings.get_settings_once()
        return filter_colors(await self.colors.get_all_once(), snapshot)

    async def _persist(
        self, operation: str, action: Awaitable[None], **context: object
    ) -> bool:
        try:
            await action
        except PreferenceStoreError as e:
            logger.error(
                "Settings action failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
                **context,
            )
            return False
        return True
