"""Color record schema.

The JSON shape of a record (``id``, ``name``, ``color``, ``isFavorite``,
``hue``) is the persisted format of the deleted-colors list and must not
change.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from datastore_showcase.core.color_math import hue_of, to_signed_argb


class ColorRecord(BaseModel):
    """A named color in the catalog.

    ``hue`` is derived from ``color`` when not supplied. Records decoded from
    storage keep the hue they were saved with.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: int = Field(default=0, description="Catalog id (0 = not yet assigned)")
    name: str
    color: int = Field(description="Packed ARGB color, signed 32-bit")
    is_favorite: bool = Field(default=False, alias="isFavorite")
    hue: float = Field(description="Hue in degrees [0, 360)")

    @model_validator(mode="before")
    @classmethod
    def _derive_hue(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("hue") is not None:
            return data
        color = data.get("color")
        if isinstance(color, int) and not isinstance(color, bool):
            data = dict(data)
            data["hue"] = hue_of(to_signed_argb(color))
        return data

    @field_validator("color")
    @classmethod
    def _normalize_color(cls, value: int) -> int:
        return to_signed_argb(value)

    def with_favorite(self, is_favorite: bool) -> "ColorRecord":
        """Return a copy with the favorite flag set."""
        return self.model_copy(update={"is_favorite": is_favorite})

    def with_id(self, record_id: int) -> "ColorRecord":
        """Return a copy with the catalog id assigned."""
        return self.model_copy(update={"id": record_id})

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize using the persisted field names."""
        return self.model_dump(by_alias=True)
