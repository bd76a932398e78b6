"""Tests for ColorRepository over a SQLite catalog."""

from contextlib import aclosing
from pathlib import Path

import pytest
import pytest_asyncio

from datastore_showcase.core.color_math import parse_hex_color
from datastore_showcase.infra.database import Database
from datastore_showcase.repositories.color_repository import ColorRepository
from datastore_showcase.schemas.color import ColorRecord


@pytest_asyncio.fixture
async def database(tmp_path: Path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await database.create_all()
    yield database
    await database.close()


@pytest.fixture
def repository(database: Database) -> ColorRepository:
    return ColorRepository(database)


def make(name: str, hex_color: str, **kwargs) -> ColorRecord:
    return ColorRecord(name=name, color=parse_hex_color(hex_color), **kwargs)


class TestColorRepositoryQueries:
    """Tests for reads."""

    @pytest.mark.asyncio
    async def test_empty_catalog(self, repository: ColorRepository):
        """Test queries on an empty catalog."""
        assert await repository.get_all_once() == []
        assert await repository.get_by_id(1) is None

    @pytest.mark.asyncio
    async def test_insert_assigns_id(self, repository: ColorRepository):
        """Test insert assigns a new id."""
        stored = await repository.insert(make("Red", "#F44336"))

        assert stored.id > 0
        assert await repository.get_by_id(stored.id) == stored

    @pytest.mark.asyncio
    async def test_get_all_is_ordered_by_id(self, repository: ColorRepository):
        """Test get all is ordered by id."""
        await repository.insert_all(
            [make("Teal", "#009688"), make("Red", "#F44336"), make("Blue", "#2196F3")]
        )

        colors = await repository.get_all_once()

        assert [c.name for c in colors] == ["Teal", "Red", "Blue"]
        assert [c.id for c in colors] == sorted(c.id for c in colors)

    @pytest.mark.asyncio
    async def test_get_by_hue_range_is_half_open_and_ordered(self, repository):
        """Test get by hue range is half open and ordered."""
        await repository.insert_all(
            [
                make("Blue", "#0000FF"),  # 240
                make("Red", "#FF0000"),  # 0
                make("Green", "#00FF00"),  # 120
                make("Yellow", "#FFFF00"),  # 60
            ]
        )

        colors = await repository.get_by_hue_range(0.0, 120.0)

        assert [c.name for c in colors] == ["Red", "Yellow"]

    @pytest.mark.asyncio
    async def test_inverted_hue_range_matches_nothing(self, repository):
        """Test inverted hue range matches nothing."""
        await repository.insert_all([make("Magenta", "#FF00FF"), make("Red", "#FF0000")])

        assert await repository.get_by_hue_range(300.0, 10.0) == []

    @pytest.mark.asyncio
    async def test_get_by_hue(self, repository):
        """Test looking up colors by exact hue."""
        red = await repository.insert(make("Red", "#FF0000"))
        await repository.insert(make("Blue", "#0000FF"))

        assert await repository.get_by_hue(red.hue) == [red]

    @pytest.mark.asyncio
    async def test_get_favorites(self, repository):
        """Test only favorites are returned."""
        await repository.insert(make("Red", "#FF0000"))
        blue = await repository.insert(make("Blue", "#0000FF", is_favorite=True))

        assert await repository.get_favorites() == [blue]


class TestColorRepositoryMutations:
    """Tests for writes."""

    @pytest.mark.asyncio
    async def test_insert_with_existing_id_replaces(self, repository):
        """Test insert with existing id replaces."""
        stored = await repository.insert(make("Red", "#FF0000"))

        await repository.insert(stored.model_copy(update={"name": "Crimson"}))

        colors = await repository.get_all_once()
        assert [(c.id, c.name) for c in colors] == [(stored.id, "Crimson")]

    @pytest.mark.asyncio
    async def test_insert_restores_deleted_record_with_its_id(self, repository):
        """Test insert restores deleted record with its id."""
        stored = await repository.insert(make("Red", "#FF0000", is_favorite=True))
        await repository.delete(stored)

        restored = await repository.insert(stored)

        assert restored == stored
        assert await repository.get_by_id(stored.id) == stored

    @pytest.mark.asyncio
    async def test_delete_and_delete_by_id(self, repository):
        """Test delete and delete by id."""
        red, blue = await repository.insert_all([make("Red", "#FF0000"), make("Blue", "#0000FF")])

        await repository.delete(red)
        await repository.delete_by_id(blue.id)

        assert await repository.get_all_once() == []

    @pytest.mark.asyncio
    async def test_clear_all(self, repository):
        """Test clear all empties the catalog."""
        await repository.insert_all([make("Red", "#FF0000"), make("Blue", "#0000FF")])

        await repository.clear_all()

        assert await repository.get_all_once() == []

    @pytest.mark.asyncio
    async def test_update_favorite(self, repository):
        """Test setting the favorite flag."""
        red = await repository.insert(make("Red", "#FF0000"))

        await repository.update_favorite(red.id, True)

        assert (await repository.get_by_id(red.id)).is_favorite is True

    @pytest.mark.asyncio
    async def test_toggle_favorite(self, repository):
        """Test toggling returns the new flag, or None for unknown ids."""
        red = await repository.insert(make("Red", "#FF0000"))

        assert await repository.toggle_favorite(red.id) is True
        assert await repository.toggle_favorite(red.id) is False
        assert await repository.toggle_favorite(999) is None

    @pytest.mark.asyncio
    async def test_update_hue(self, repository):
        """Test overwriting the stored hue."""
        red = await repository.insert(make("Red", "#FF0000"))

        await repository.update_hue(red.id, 12.5)

        assert (await repository.get_by_id(red.id)).hue == 12.5


class TestAllColorsFlow:
    """Tests for the reactive catalog list."""

    @pytest.mark.asyncio
    async def test_emits_after_each_mutation(self, repository):
        """Test emits after each mutation."""
        async with aclosing(repository.all_colors.__aiter__()) as lists:
            assert await anext(lists) == []

            red = await repository.insert(make("Red", "#FF0000"))
            assert await anext(lists) == [red]

            await repository.update_favorite(red.id, True)
            assert await anext(lists) == [red.with_favorite(True)]

            await repository.delete(red)
            assert await anext(lists) == []

    @pytest.mark.asyncio
    async def test_late_subscriber_sees_current_list(self, repository):
        """Test late subscriber sees current list."""
        await repository.insert(make("Red", "#FF0000"))
        assert len(await repository.all_colors.first()) == 1

        await repository.insert(make("Blue", "#0000FF"))

        assert [c.name for c in await repository.all_colors.first()] == ["Red", "Blue"]

    @pytest.mark.asyncio
    async def test_close_completes_flow(self, repository):
        """Test closing the repository ends the colors flow."""
        await repository.all_colors.first()
        repository.close()

        assert [colors async for colors in repository.all_colors] == []
