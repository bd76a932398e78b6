"""Settings schemas exposed by the settings repository."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Theme(str, Enum):
    """UI theme preference, persisted by value."""

    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def parse(cls, value: "Theme | str") -> "Theme":
        """Convert a stored or user-supplied value.

        Raises:
            ValueError: If value is not a known theme
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown theme {value!r}, expected one of: {valid}") from None


class SettingsSnapshot(BaseModel):
    """Point-in-time view of the persisted filter and theme settings.

    Produced from a single read of the preference store, never persisted as
    a unit.
    """

    model_config = ConfigDict(frozen=True)

    name_query: str = Field(default="", description="Case-insensitive name filter")
    min_hue: float = Field(default=0.0, description="Lower hue bound in degrees")
    max_hue: float = Field(default=360.0, description="Upper hue bound in degrees")
    show_only_favorites: bool = Field(default=False, description="Favorites-only filter")
    theme: Theme = Field(default=Theme.SYSTEM, description="Theme preference")
