"""Plate records: pixel tags, coordinates, work units and tile headers.

Records are frozen Pydantic models. They are created per query or per
partition and never mutated afterwards.
"""

from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PixelFormat(str, Enum):
    """Pixel layouts a plate can declare.

    Only layouts ending in an alpha channel can be reduced.
    """
    GRAY = "gray"
    GRAYA = "graya"
    RGB = "rgb"
    RGBA = "rgba"


class ChannelType(str, Enum):
    """Channel numeric types a plate can declare."""
    UINT8 = "uint8"
    INT8 = "int8"
    UINT16 = "uint16"
    INT16 = "int16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"


PIXEL_FORMAT_CHANNELS = {
    PixelFormat.GRAY: 1,
    PixelFormat.GRAYA: 2,
    PixelFormat.RGB: 3,
    PixelFormat.RGBA: 4,
}


class RecordModel(BaseModel):
    """Immutable record base."""

    model_config = ConfigDict(extra='forbid', frozen=True)


class Coordinate(RecordModel):
    """Tile address inside one pyramid level."""
    col: int = Field(ge=0)
    row: int = Field(ge=0)
    level: int = Field(ge=0)

    def __str__(self) -> str:
        return f"({self.col}, {self.row}) @ level {self.level}"


class WorkUnit(RecordModel):
    """Half-open rectangle of tiles ``[min_col, max_col) x [min_row, max_row)``."""
    min_col: int = Field(ge=0)
    min_row: int = Field(ge=0)
    max_col: int
    max_row: int

    @model_validator(mode="after")
    def check_not_empty(self):
        if self.max_col <= self.min_col or self.max_row <= self.min_row:
            raise ValueError(f"Empty work unit: {self!r}")
        return self

    @property
    def width(self) -> int:
        return self.max_col - self.min_col

    @property
    def height(self) -> int:
        return self.max_row - self.min_row

    @property
    def size(self) -> int:
        return self.width * self.height

    def contains(self, col: int, row: int) -> bool:
        return self.min_col <= col < self.max_col and self.min_row <= row < self.max_row

    def coordinates(self, level: int) -> Iterator[Coordinate]:
        """Yield every tile coordinate in the unit, row by row."""
        for row in range(self.min_row, self.max_row):
            for col in range(self.min_col, self.max_col):
                yield Coordinate(col=col, row=row, level=level)


class TileHeader(RecordModel):
    """One stored tile version, as returned by a location query.

    ``record_id`` is the store's own identifier for the version and
    ``valid`` its validity flag.
    """
    col: int
    row: int
    level: int
    transaction_id: int
    record_id: Optional[int] = None
    valid: bool = True

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(col=self.col, row=self.row, level=self.level)
