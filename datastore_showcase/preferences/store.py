"""Durable key-value preference store.

One ``PreferenceStore`` owns one preferences file. Construct it once at
startup, inject it wherever settings are needed, and ``close()`` it at
shutdown. Two stores over the same file in one process would each keep
their own view and overwrite one another.

Reads are served from the in-memory snapshot (loaded lazily from disk) and
never wait on writers. Writes are serialized by a lock and expressed as
transforms of the current snapshot, so concurrent edits cannot lose each
other's updates.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import TypeVar

from datastore_showcase.core.flow import Flow, SharedState
from datastore_showcase.infra.logging import get_logger
from datastore_showcase.preferences.serializer import (
    CorruptPreferencesError,
    PreferencesSerializer,
)
from datastore_showcase.preferences.snapshot import MutablePreferences, Preferences

logger = get_logger(__name__)

T = TypeVar("T")


class PreferenceStoreError(Exception):
    """Base class for preference store failures."""


class PreferenceWriteError(PreferenceStoreError):
    """Raised when an edit could not be committed to disk."""


class PreferenceStoreClosedError(PreferenceStoreError):
    """Raised when editing a store that has been closed."""


class PreferenceStore:
    """File-backed preference store with a multicast change stream."""

    def __init__(
        self,
        path: Path | str,
        serializer: PreferencesSerializer | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            path: Preferences file location (created on first write)
            serializer: File codec (defaults to PreferencesSerializer)
        """
        self.path = Path(path)
        self._serializer = serializer or PreferencesSerializer()
        self._state: SharedState[Preferences] = SharedState()
        self._load_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

        self.data: Flow[Preferences] = Flow(self._subscribe)

    @property
    def closed(self) -> bool:
        return self._state.closed

    async def _subscribe(self) -> AsyncIterator[Preferences]:
        await self._ensure_loaded()
        async for preferences in self._state.subscribe():
            yield preferences

    async def _ensure_loaded(self) -> Preferences:
        if self._state.has_value:
            return self._state.value

        async with self._load_lock:
            if self._state.has_value:
                return self._state.value

            try:
                preferences = await asyncio.to_thread(self._serializer.read, self.path)
                logger.debug(
                    "Preferences loaded",
                    path=str(self.path),
                    keys=len(preferences),
                )
            except (OSError, CorruptPreferencesError) as e:
                logger.warning(
                    "Failed to read preferences, using empty snapshot",
                    path=str(self.path),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                preferences = Preferences()

            if not self._state.closed:
                self._state.publish(preferences)
            return preferences

    async def read_once(self) -> Preferences:
        """Return the current snapshot without keeping a subscription."""
        return await self._ensure_loaded()

    async def transact(self, transform: Callable[[MutablePreferences], T]) -> T:
        """Apply a transform atomically and return its result.

        The transform receives a mutable copy of the current snapshot. It runs
        while holding the write lock, so it must not await other store
        operations. If it raises, nothing is written.

        Raises:
            PreferenceWriteError: If the new snapshot could not be persisted
            PreferenceStoreClosedError: If the store is closed
        """
        if self.closed:
            raise PreferenceStoreClosedError(f"Preference store closed: {self.path}")

        await self._ensure_loaded()

        async with self._write_lock:
            if self.closed:
                raise PreferenceStoreClosedError(f"Preference store closed: {self.path}")

            current = self._state.value
            working = current.to_mutable()
            result = transform(working)
            updated = working.freeze()

            if updated == current:
                logger.debug("Edit produced no changes", path=str(self.path))
                return result

            try:
                await asyncio.to_thread(self._serializer.write, self.path, updated)
            except OSError as e:
                logger.error(
                    "Failed to write preferences",
                    path=str(self.path),
                    error=str(e),
                )
                raise PreferenceWriteError(f"Could not write {self.path}: {e}") from e

            self._state.publish(updated)
            logger.debug("Preferences committed", path=str(self.path), keys=len(updated))
            return result

    async def edit(self, transform: Callable[[MutablePreferences], object]) -> Preferences:
        """Apply a transform atomically and return the committed snapshot.

        Raises:
            PreferenceWriteError: If the new snapshot could not be persisted
            PreferenceStoreClosedError: If the store is closed
        """

        def apply(preferences: MutablePreferences) -> Preferences:
            transform(preferences)
            return preferences.freeze()

        return await self.transact(apply)

    async def close(self) -> None:
        """Complete all subscriptions and reject further edits."""
        async with self._write_lock:
            if self._state.closed:
                return
            self._state.close()
            logger.info("Preference store closed", path=str(self.path))
