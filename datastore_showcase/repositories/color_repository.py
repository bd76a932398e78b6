"""Color Repository - the color catalog table.

Reads return ``ColorRecord`` values, never live ORM rows. ``all_colors``
re-emits the full id-ordered list after every mutation made through this
repository.
"""

from collections.abc import AsyncIterator, Sequence

from sqlalchemy import delete, select, update

from datastore_showcase.core.flow import Flow, SharedState
from datastore_showcase.infra.database import Database
from datastore_showcase.infra.logging import get_logger
from datastore_showcase.models.color import ColorEntity
from datastore_showcase.schemas.color import ColorRecord

logger = get_logger(__name__)


class ColorRepository:
    """CRUD and range queries over the ``colors`` table."""

    def __init__(self, database: Database) -> None:
        self._database = database
        self._state: SharedState[list[ColorRecord]] = SharedState()
        self.all_colors: Flow[list[ColorRecord]] = Flow(self._subscribe)

    async def _subscribe(self) -> AsyncIterator[list[ColorRecord]]:
        if not self._state.has_value and not self._state.closed:
            self._state.publish(await self.get_all_once())
        async for colors in self._state.subscribe():
            yield colors

    async def _changed(self) -> None:
        """Refresh the list stream once there is someone to tell."""
        if self._state.closed or (
            not self._state.has_value and self._state.subscriber_count == 0
        ):
            return
        self._state.publish(await self.get_all_once())

    def close(self) -> None:
        """Complete every ``all_colors`` subscription."""
        self._state.close()

    # =========================================================================
    # Queries
    # =========================================================================

    async def _select(self, statement) -> list[ColorRecord]:  # type: ignore[no-untyped-def]
        async with self._database.session() as session:
            result = await session.execute(statement)
            return [row.to_record() for row in result.scalars().all()]

    async def get_all_once(self) -> list[ColorRecord]:
        """All colors ordered by id."""
        return await self._select(select(ColorEntity).order_by(ColorEntity.id))

    async def get_favorites(self) -> list[ColorRecord]:
        return await self._select(
            select(ColorEntity)
            .where(ColorEntity.is_favorite.is_(True))
            .order_by(ColorEntity.id)
        )

    async def get_by_id(self, color_id: int) -> ColorRecord | None:
        async with self._database.session() as session:
            row = await session.get(ColorEntity, color_id)
            return row.to_record() if row is not None else None

    async def get_by_hue_range(self, min_hue: float, max_hue: float) -> list[ColorRecord]:
        """Colors with ``min_hue <= hue < max_hue``, ordered by hue.

        An inverted range simply matches nothing.
        """
        return await self._select(
            select(ColorEntity)
            .where(ColorEntity.hue >= min_hue, ColorEntity.hue < max_hue)
            .order_by(ColorEntity.hue, ColorEntity.id)
        )

    async def get_by_hue(self, hue: float) -> list[ColorRecord]:
        return await self._select(
            select(ColorEntity).where(ColorEntity.hue == hue).order_by(ColorEntity.id)
        )

    # =========================================================================
    # Mutations
    # =========================================================================

    async def insert(self, color: ColorRecord) -> ColorRecord:
        """Insert a color, replacing any row with the same id.

        A record with id 0 gets a new id from the database.

        Returns:
            The stored record, with its assigned id
        """
        async with self._database.session() as session:
            row = await session.merge(ColorEntity.from_record(color))
            await session.flush()
            stored = row.to_record()

        logger.debug("Color inserted", color_id=stored.id, name=stored.name)
        await self._changed()
        return stored

    async def insert_all(self, colors: Sequence[ColorRecord]) -> list[ColorRecord]:
        """Insert several colors in one transaction."""
        async with self._database.session() as session:
            rows = [ColorEntity.from_record(color) for color in colors]
            session.add_all(rows)
            await session.flush()
            stored = [row.to_record() for row in rows]

        logger.info("Colors inserted", count=len(stored))
        await self._changed()
        return stored

    async def delete(self, color: ColorRecord) -> None:
        """Remove the row matching the record's id."""
        await self.delete_by_id(color.id)

    async def delete_by_id(self, color_id: int) -> None:
        async with self._database.session() as session:
            await session.execute(delete(ColorEntity).where(ColorEntity.id == color_id))

        logger.debug("Color deleted", color_id=color_id)
        await self._changed()

    async def clear_all(self) -> None:
        """Delete every row. Destructive."""
        async with self._database.session() as session:
            await session.execute(delete(ColorEntity))

        logger.info("Color catalog cleared")
        await self._changed()

    async def update_favorite(self, color_id: int, is_favorite: bool) -> None:
        async with self._database.session() as session:
            await session.execute(
                update(ColorEntity)
                .where(ColorEntity.id == color_id)
                .values({ColorEntity.is_favorite: is_favorite})
            )
        await self._changed()

    async def update_hue(self, color_id: int, hue: float) -> None:
        """Overwrite the stored hue, e.g. after re-deriving it from the color."""
        async with self._database.session() as session:
            await session.execute(
                update(ColorEntity)
                .where(ColorEntity.id == color_id)
                .values({ColorEntity.hue: hue})
            )
        await self._changed()

    async def toggle_favorite(self, color_id: int) -> bool | None:
        """Flip the favorite flag.

        Returns:
            The new flag, or None if no color has that id
        """
        async with self._database.session() as session:
            row = await session.get(ColorEntity, color_id)
            if row is None:
                return None
            row.is_favorite = not row.is_favorite
            new_value = row.is_favorite

        await self._changed()
        return new_value
