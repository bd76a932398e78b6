"""Application wiring.

Builds the single preference store, the catalog database and the
repositories on top of them, and tears them down in reverse order.

Example:
    async with create_app() as container:
        await container.colors_service.set_theme("dark")
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncGenerator

from datastore_showcase.config import Settings, get_settings
from datastore_showcase.core.palette import load_palette
from datastore_showcase.infra.database import Database
from datastore_showcase.infra.logging import get_logger, setup_logging
from datastore_showcase.preferences import PreferenceStore
from datastore_showcase.repositories.color_repository import ColorRepository
from datastore_showcase.repositories.settings_repository import SettingsRepository
from datastore_showcase.services.color_service import ColorService

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppContainer:
    """Process-wide components, constructed once at startup."""

    settings: Settings
    database: Database
    preference_store: PreferenceStore
    color_repository: ColorRepository
    settings_repository: SettingsRepository
    colors_service: ColorService


@asynccontextmanager
async def create_app(app_settings: Settings | None = None) -> AsyncGenerator[AppContainer, None]:
    """Application lifespan.

    Startup:
    - Configure logging
    - Create the catalog schema
    - Open the preference store and migrate legacy deleted colors
    - Seed the catalog when empty

    Shutdown:
    - Close the preference store (completes all settings subscriptions)
    - Close the catalog database
    """
    cfg = app_settings or get_settings()
    setup_logging(cfg)

    logger.info("Color showcase starting", environment=cfg.environment, data_dir=cfg.data_dir)

    Path(cfg.data_dir).mkdir(parents=True, exist_ok=True)

    database = Database(cfg.database_url, echo=cfg.debug)
    await database.create_all()
    if not await database.verify_connection():
        logger.warning("Catalog database not reachable")

    store = PreferenceStore(cfg.preferences_path)
    color_repository = ColorRepository(database)
    settings_repository = SettingsRepository(store)
    colors_service = ColorService(color_repository, settings_repository)

    container = AppContainer(
        settings=cfg,
        database=database,
        preference_store=store,
        color_repository=color_repository,
        settings_repository=settings_repository,
        colors_service=colors_service,
    )

    try:
        try:
            await settings_repository.migrate_legacy_deleted_colors(color_repository.get_by_id)
        except Exception as e:
            logger.warning("Legacy deleted colors migration failed", error=str(e))

        if cfg.seed_on_startup:
            await colors_service.seed_if_empty(load_palette(cfg.seed_palette_path))

        yield container

    finally:
        logger.info("Color showcase shutting down")
        await store.close()
        color_repository.close()
        await database.close()
        logger.info("Cleanup complete")
