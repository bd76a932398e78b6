"""Tests for ColorService."""

import math
from pathlib import Path
from unittest.mock import patch

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from datastore_showcase.core.color_math import parse_hex_color
from datastore_showcase.core.palette import Palette
from datastore_showcase.infra.database import Database
from datastore_showcase.preferences import PreferenceStore
from datastore_showcase.repositories.color_repository import ColorRepository
from datastore_showcase.repositories.settings_repository import SettingsRepository
from datastore_showcase.schemas.color import ColorRecord
from datastore_showcase.schemas.settings import SettingsSnapshot, Theme
from datastore_showcase.services.color_service import ColorService, filter_colors


@pytest_asyncio.fixture
async def database(tmp_path: Path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await database.create_all()
    yield database
    await database.close()


@pytest_asyncio.fixture
async def store(tmp_path: Path):
    store = PreferenceStore(tmp_path / "settings.preferences.json")
    yield store
    await store.close()


@pytest.fixture
def service(database: Database, store: PreferenceStore) -> ColorService:
    return ColorService(ColorRepository(database), SettingsRepository(store))


def record(name: str, hex_color: str, **kwargs) -> ColorRecord:
    return ColorRecord(name=name, color=parse_hex_color(hex_color), **kwargs)


class TestFilterColors:
    """Tests for the filter applied to the catalog list."""

    @pytest.fixture
    def colors(self) -> list[ColorRecord]:
        return [
            record("Red", "#FF0000", id=1),  # 0
            record("Dark Red", "#800000", id=2, is_favorite=True),  # 0
            record("Green", "#00FF00", id=3),  # 120
            record("Blue", "#0000FF", id=4, is_favorite=True),  # 240
        ]

    def test_default_snapshot_keeps_everything(self, colors):
        """Test default snapshot keeps everything."""
        assert filter_colors(colors, SettingsSnapshot()) == colors

    def test_name_is_case_insensitive_contains(self, colors):
        """Test name filter is a case-insensitive contains."""
        result = filter_colors(colors, SettingsSnapshot(name_query="RED"))
        assert [c.id for c in result] == [1, 2]

    def test_blank_name_matches_all(self, colors):
        """Test blank name matches all."""
        assert len(filter_colors(colors, SettingsSnapshot(name_query="   "))) == 4

    def test_hue_bounds_are_inclusive(self, colors):
        """Test hue bounds are inclusive."""
        result = filter_colors(colors, SettingsSnapshot(min_hue=120.0, max_hue=240.0))
        assert [c.id for c in result] == [3, 4]

    def test_inverted_range_matches_nothing(self, colors):
        """Test inverted range matches nothing."""
        assert filter_colors(colors, SettingsSnapshot(min_hue=300.0, max_hue=10.0)) == []

    def test_favorites_only(self, colors):
        """Test favorites-only keeps favorites."""
        result = filter_colors(colors, SettingsSnapshot(show_only_favorites=True))
        assert [c.id for c in result] == [2, 4]


class TestCatalogActions:
    """Tests for add, seed and favorite toggling."""

    @pytest.mark.asyncio
    async def test_seed_if_empty(self, service: ColorService):
        """Test seeding only happens on an empty catalog."""
        assert await service.seed_if_empty(Palette.default()) == 9
        assert await service.seed_if_empty(Palette.default()) == 0
        assert len(await service.colors.get_all_once()) == 9

    @pytest.mark.asyncio
    async def test_add_color(self, service: ColorService):
        """Test adding a color from hex input."""
        stored = await service.add_color("  Amber ", "FFC107")

        assert stored is not None
        assert stored.name == "Amber"
        assert stored.color == parse_hex_color("#FFC107")

    @pytest.mark.asyncio
    async def test_add_color_blank_name(self, service: ColorService):
        """Test a blank name becomes Unnamed."""
        stored = await service.add_color("", "#FFC107")
        assert stored.name == "Unnamed"

    @pytest.mark.asyncio
    async def test_add_color_rejects_invalid_hex(self, service: ColorService):
        """Test add color rejects invalid hex."""
        assert await service.add_color("Bad", "#XYZ") is None
        assert await service.colors.get_all_once() == []

    @pytest.mark.asyncio
    async def test_toggle_favorite(self, service: ColorService):
        """Test toggling a favorite through the service."""
        stored = await service.add_color("Red", "#FF0000")
        assert await service.toggle_favorite(stored.id) is True


class TestRecoverableDelete:
    """Delete, restore and clear of catalog colors."""

    @pytest.mark.asyncio
    async def test_delete_then_restore(self, service: ColorService):
        """Test deleted colors come back on restore."""
        red = await service.add_color("Red", "#FF0000")
        blue = await service.add_color("Blue", "#0000FF")

        assert await service.delete_color(red) is True
        assert await service.delete_color(blue) is True
        assert await service.colors.get_all_once() == []
        assert await service.settings.get_deleted_once() == [red, blue]

        restored = await service.restore_deleted_colors()

        assert restored == [red, blue]
        assert await service.colors.get_all_once() == [red, blue]
        assert await service.settings.get_deleted_once() == []

    @pytest.mark.asyncio
    async def test_restore_twice_does_not_duplicate(self, service: ColorService):
        """Test restore twice does not duplicate."""
        red = await service.add_color("Red", "#FF0000")
        await service.delete_color(red)

        await service.restore_deleted_colors()
        assert await service.restore_deleted_colors() == []

        assert await service.colors.get_all_once() == [red]

    @pytest.mark.asyncio
    async def test_clear_makes_deletes_permanent(self, service: ColorService):
        """Test clear makes deletes permanent."""
        red = await service.add_color("Red", "#FF0000")
        await service.delete_color(red)

        assert await service.clear_deleted_colors() is True

        assert await service.restore_deleted_colors() == []
        assert await service.colors.get_all_once() == []

    @pytest.mark.asyncio
    async def test_failed_save_keeps_color_in_catalog(self, service, store):
        """Test failed save keeps color in catalog."""
        red = await service.add_color("Red", "#FF0000")
        await store.read_once()

        with patch.object(store._serializer, "write", side_effect=OSError("disk full")):
            assert await service.delete_color(red) is False

        assert await service.colors.get_all_once() == [red]
        assert await service.settings.get_deleted_once() == []

    @pytest.mark.asyncio
    async def test_failed_restore_returns_empty(self, service, store):
        """Test failed restore returns empty."""
        red = await service.add_color("Red", "#FF0000")
        await service.delete_color(red)

        with patch.object(store._serializer, "write", side_effect=OSError("disk full")):
            assert await service.restore_deleted_colors() == []

        assert await service.settings.get_deleted_once() == [red]

    @pytest.mark.asyncio
    async def test_failed_catalog_insert_keeps_colors_recoverable(self, service):
        """Test colors not reinserted during restore return to the deleted list."""
        red = await service.add_color("Red", "#FF0000")
        blue = await service.add_color("Blue", "#0000FF")
        await service.delete_color(red)
        await service.delete_color(blue)

        locked = OperationalError("INSERT INTO colors", {}, Exception("database is locked"))
        with patch.object(service.colors, "insert", side_effect=locked):
            assert await service.restore_deleted_colors() == []

        assert await service.colors.get_all_once() == []
        assert await service.settings.get_deleted_once() == [red, blue]

        assert await service.restore_deleted_colors() == [red, blue]
        assert await service.settings.get_deleted_once() == []

    @pytest.mark.asyncio
    async def test_partial_restore_returns_only_inserted(self, service):
        """Test a mid-restore failure requeues only the remaining colors."""
        red = await service.add_color("Red", "#FF0000")
        blue = await service.add_color("Blue", "#0000FF")
        await service.delete_color(red)
        await service.delete_color(blue)

        insert = service.colors.insert

        async def fail_on_blue(color):
            if color.id == blue.id:
                raise OperationalError("INSERT INTO colors", {}, Exception("disk I/O error"))
            return await insert(color)

        with patch.object(service.colors, "insert", side_effect=fail_on_blue):
            assert await service.restore_deleted_colors() == [red]

        assert await service.colors.get_all_once() == [red]
        assert await service.settings.get_deleted_once() == [blue]


class TestSettingsActions:
    """Tests for the persisted filter and theme actions."""

    @pytest.mark.asyncio
    async def test_inverted_hue_range_is_swapped(self, service: ColorService):
        """Test inverted hue range is swapped."""
        assert await service.set_hue_range(300.0, 10.0) is True

        snapshot = await service.settings.get_settings_once()
        assert (snapshot.min_hue, snapshot.max_hue) == (10.0, 300.0)

    @pytest.mark.asyncio
    async def test_huge_hue_bound_is_accepted(self, service: ColorService):
        """Test a bound beyond float32 range is saved instead of raising."""
        assert await service.set_hue_range(0.0, 1e39) is True

        snapshot = await service.settings.get_settings_once()
        assert snapshot.max_hue == math.inf

    @pytest.mark.asyncio
    async def test_setters_report_success(self, service: ColorService):
        """Test setters report success."""
        assert await service.set_name_query("blue") is True
        assert await service.set_show_favorites(True) is True
        assert await service.set_theme("dark") is True

        snapshot = await service.settings.get_settings_once()
        assert snapshot.name_query == "blue"
        assert snapshot.show_only_favorites is True
        assert snapshot.theme is Theme.DARK

    @pytest.mark.asyncio
    async def test_write_failure_reports_false(self, service, store):
        """Test write failure reports false."""
        await store.read_once()

        with patch.object(store._serializer, "write", side_effect=OSError("disk full")):
            assert await service.set_name_query("lost") is False

        assert (await service.settings.get_settings_once()).name_query == ""

    @pytest.mark.asyncio
    async def test_set_theme_rejects_unknown(self, service: ColorService):
        """Test set theme rejects unknown."""
        with pytest.raises(ValueError):
            await service.set_theme("sepia")

    @pytest.mark.asyncio
    async def test_visible_colors_once(self, service: ColorService):
        """Test visible colors apply the persisted filters."""
        await service.add_color("Red", "#FF0000")
        blue = await service.add_color("Blue", "#0000FF")
        await service.set_name_query("bl")

        assert await service.visible_colors_once() == [blue]
