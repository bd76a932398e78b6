"""Seed palette - the colors inserted into an empty catalog.

The palette is loaded from the first of:
1. The configured ``seed_palette_path``
2. ``config/palette.yaml`` relative to the working directory or the project
3. The built-in Material palette
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from datastore_showcase.core.color_math import parse_hex_color
from datastore_showcase.infra.logging import get_logger
from datastore_showcase.schemas.color import ColorRecord

logger = get_logger(__name__)

DEFAULT_COLORS: tuple[tuple[str, str], ...] = (
    ("Red", "#F44336"),
    ("Pink", "#E91E63"),
    ("Purple", "#9C27B0"),
    ("Deep Purple", "#673AB7"),
    ("Indigo", "#3F51B5"),
    ("Blue", "#2196F3"),
    ("Light Blue", "#03A9F4"),
    ("Cyan", "#00BCD4"),
    ("Teal", "#009688"),
)


@dataclass(frozen=True)
class PaletteEntry:
    """A named seed color."""

    name: str
    color: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PaletteEntry":
        """Create from a ``{name, hex}`` mapping.

        Raises:
            ValueError: If the entry has no name or an invalid hex color
        """
        name = str(data.get("name", "")).strip()
        if not name:
            raise ValueError(f"Palette entry without a name: {data}")
        return cls(name=name, color=parse_hex_color(str(data.get("hex", ""))))

    def to_record(self) -> ColorRecord:
        return ColorRecord(name=self.name, color=self.color)


@dataclass(frozen=True)
class Palette:
    """Ordered seed colors."""

    name: str
    entries: tuple[PaletteEntry, ...]

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "Palette":
        """Parse a palette document::

            name: material
            colors:
              - {name: Red, hex: "#F44336"}

        Raises:
            ValueError: If the document is malformed
        """
        data = yaml.safe_load(yaml_content) or {}
        if not isinstance(data, dict):
            raise ValueError("Palette document must be a mapping")

        colors = data.get("colors", [])
        if not isinstance(colors, list):
            raise ValueError("Palette 'colors' must be a list")

        return cls(
            name=str(data.get("name", "custom")),
            entries=tuple(PaletteEntry.from_dict(item) for item in colors),
        )

    @classmethod
    def default(cls) -> "Palette":
        return cls(
            name="material",
            entries=tuple(
                PaletteEntry(name=name, color=parse_hex_color(hex_code))
                for name, hex_code in DEFAULT_COLORS
            ),
        )

    def to_records(self) -> list[ColorRecord]:
        return [entry.to_record() for entry in self.entries]


def load_palette(path: str | Path | None = None) -> Palette:
    """Load the seed palette from the first location that exists.

    Args:
        path: Explicit palette file (takes precedence when it exists)

    Returns:
        The loaded palette, or the built-in one if no file is found

    Raises:
        ValueError: If a palette file exists but is malformed
    """
    search_paths = [
        Path("config") / "palette.yaml",
        Path(__file__).parent.parent.parent / "config" / "palette.yaml",
    ]
    if path is not None:
        if not Path(path).exists():
            logger.warning("Configured palette file not found", path=str(path))
        search_paths.insert(0, Path(path))

    for candidate in search_paths:
        if candidate.exists():
            logger.info("Loading palette from file", path=str(candidate))
            palette = Palette.from_yaml(candidate.read_text(encoding="utf-8"))
            logger.info("Palette loaded", palette=palette.name, colors=len(palette.entries))
            return palette

    logger.debug("Palette file not found, using built-in palette", searched=str(search_paths))
    return Palette.default()
