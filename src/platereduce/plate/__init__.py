"""Plate storage.

- base: Abstract plate store interface
- sqlite_store: SQLite-backed plate
- records: Pixel tags, coordinates, work units, tile headers
- tiles: Tile raster helpers
"""

from platereduce.plate.base import PlateStore
from platereduce.plate.exceptions import (
    PlateStoreError,
    PlateNotFoundError,
    TileNotFoundError,
    TileReadError,
    TileWriteError,
)
from platereduce.plate.records import (
    ChannelType,
    Coordinate,
    PixelFormat,
    TileHeader,
    WorkUnit,
)
from platereduce.plate.sqlite_store import SqlitePlateStore, open_plate
from platereduce.plate.tiles import make_tile

__all__ = [
    "PlateStore",
    "SqlitePlateStore",
    "open_plate",
    "PlateStoreError",
    "PlateNotFoundError",
    "TileNotFoundError",
    "TileReadError",
    "TileWriteError",
    "ChannelType",
    "Coordinate",
    "PixelFormat",
    "TileHeader",
    "WorkUnit",
    "make_tile",
]
