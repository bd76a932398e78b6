"""Immutable and mutable views of the preference key-value pairs."""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from datastore_showcase.preferences.keys import PreferenceKey, type_of

T = TypeVar("T")


class Preferences(Mapping[str, Any]):
    """Immutable snapshot of every stored preference.

    Indexing by a ``PreferenceKey`` returns the typed value or the key's
    default. Indexing by a plain name behaves like a regular mapping.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        data = dict(values or {})
        for name, value in data.items():
            type_of(value)  # reject unsupported values up front
        self._values: Mapping[str, Any] = MappingProxyType(data)

    def get_value(self, key: PreferenceKey[T]) -> T:
        """Typed value for a key, or its default when absent."""
        return key.read(self._values.get(key.name))

    def contains(self, key: PreferenceKey[Any]) -> bool:
        return key.name in self._values

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def to_mutable(self) -> "MutablePreferences":
        return MutablePreferences(self._values)

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, PreferenceKey):
            return self.get_value(key)
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Preferences):
            return dict(self._values) == dict(other._values)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def __repr__(self) -> str:
        return f"Preferences({dict(self._values)!r})"


class MutablePreferences(Preferences):
    """Working copy handed to edit transforms."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        super().__init__(values)
        self._data: dict[str, Any] = dict(self._values)
        self._values = self._data

    def set(self, key: PreferenceKey[T], value: T) -> None:
        self._data[key.name] = key.coerce(value)

    def __setitem__(self, key: PreferenceKey[T], value: T) -> None:
        self.set(key, value)

    def remove(self, key: PreferenceKey[Any]) -> None:
        self._data.pop(key.name, None)

    def clear(self) -> None:
        self._data.clear()

    def freeze(self) -> Preferences:
        return Preferences(self._data)

    __hash__ = None  # type: ignore[assignment]
