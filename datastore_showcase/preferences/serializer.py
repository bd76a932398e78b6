"""On-disk format of the preferences file.

The file is a versioned JSON document with type-tagged values::

    {
      "version": 1,
      "preferences": {
        "min_hue": {"type": "float", "value": 12.5},
        "theme": {"type": "string", "value": "dark"}
      }
    }

Writes go to a temporary file in the same directory which is fsynced and
renamed over the target, so readers only ever see a complete document.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from datastore_showcase.infra.logging import get_logger
from datastore_showcase.preferences.keys import PreferenceType, to_float32, type_of
from datastore_showcase.preferences.snapshot import Preferences

logger = get_logger(__name__)

FORMAT_VERSION = 1


class CorruptPreferencesError(Exception):
    """Raised when the preferences file exists but cannot be decoded."""


class PreferencesSerializer:
    """Encode and decode ``Preferences`` to and from the JSON file format."""

    def encode(self, preferences: Preferences) -> bytes:
        entries: dict[str, dict[str, Any]] = {}
        for name, value in sorted(preferences.items()):
            value_type = type_of(value)
            if value_type is PreferenceType.STRING_SET:
                value = sorted(value)
            entries[name] = {"type": value_type.value, "value": value}

        document = {"version": FORMAT_VERSION, "preferences": entries}
        return json.dumps(document, ensure_ascii=False, indent=2).encode("utf-8")

    def decode(self, payload: bytes) -> Preferences:
        """Decode a file payload.

        Raises:
            CorruptPreferencesError: If the payload is not a valid document
        """
        try:
            document = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptPreferencesError(f"Preferences file is not valid JSON: {e}") from e

        if not isinstance(document, dict) or not isinstance(document.get("preferences"), dict):
            raise CorruptPreferencesError("Preferences file has no 'preferences' object")

        version = document.get("version")
        if version != FORMAT_VERSION:
            raise CorruptPreferencesError(f"Unsupported preferences format version: {version}")

        values: dict[str, Any] = {}
        for name, entry in document["preferences"].items():
            values[name] = self._decode_entry(name, entry)
        return Preferences(values)

    def _decode_entry(self, name: str, entry: Any) -> Any:
        if not isinstance(entry, dict) or "type" not in entry or "value" not in entry:
            raise CorruptPreferencesError(f"Malformed entry for key '{name}'")

        try:
            value_type = PreferenceType(entry["type"])
        except ValueError as e:
            raise CorruptPreferencesError(
                f"Unknown type '{entry['type']}' for key '{name}'"
            ) from e

        value = entry["value"]
        if value_type is PreferenceType.FLOAT and isinstance(value, (int, float)) \
                and not isinstance(value, bool):
            return to_float32(float(value))
        if value_type is PreferenceType.STRING_SET and isinstance(value, list):
            value = frozenset(value)

        try:
            actual = type_of(value)
        except TypeError as e:
            raise CorruptPreferencesError(f"Invalid value for key '{name}'") from e
        if actual is not value_type:
            raise CorruptPreferencesError(
                f"Key '{name}' tagged {value_type.value} but holds {actual.value}"
            )
        return value

    def read(self, path: Path) -> Preferences:
        """Read the file at path; a missing file is an empty snapshot.

        Raises:
            OSError: If the file exists but cannot be read
            CorruptPreferencesError: If the file cannot be decoded
        """
        try:
            payload = path.read_bytes()
        except FileNotFoundError:
            logger.debug("Preferences file not found, starting empty", path=str(path))
            return Preferences()
        return self.decode(payload)

    def write(self, path: Path, preferences: Preferences) -> None:
        """Atomically replace the file at path.

        Raises:
            OSError: If the file cannot be written
        """
        payload = self.encode(preferences)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
