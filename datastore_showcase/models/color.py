"""ColorEntity model - the color catalog table."""

from sqlalchemy import Boolean, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from datastore_showcase.models.base import Base
from datastore_showcase.schemas.color import ColorRecord


class ColorEntity(Base):
    """Catalog row for a named color.

    ``hue`` is stored redundantly so range filters run in SQL.
    """

    __tablename__ = "colors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    color: Mapped[int] = mapped_column(Integer, nullable=False)
    is_favorite: Mapped[bool] = mapped_column(
        "isFavorite", Boolean, nullable=False, default=False
    )
    hue: Mapped[float] = mapped_column(Float, nullable=False, index=True)

    @classmethod
    def from_record(cls, record: ColorRecord) -> "ColorEntity":
        """Build a row from a record; id 0 leaves the id to the database."""
        return cls(
            id=record.id or None,
            name=record.name,
            color=record.color,
            is_favorite=record.is_favorite,
            hue=record.hue,
        )

    def to_record(self) -> ColorRecord:
        return ColorRecord(
            id=self.id,
            name=self.name,
            color=self.color,
            is_favorite=self.is_favorite,
            hue=self.hue,
        )

    def __repr__(self) -> str:
        return f"<ColorEntity(id={self.id}, name='{self.name}', hue={self.hue:.1f})>"
