"""SQLite-backed plate store.

Stores every tile version of a plate in a single SQLite file: one row per
written tile, keyed by location and transaction id, holding the raw pixel
bytes. Writes are append-only, so rewriting a tile under an existing
transaction id adds a newer record rather than replacing the old one.
"""

import sqlite3
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

import numpy as np
import xarray as xr

from platereduce.plate.base import PlateStore
from platereduce.plate.exceptions import (
    PlateNotFoundError,
    PlateStoreError,
    TileNotFoundError,
    TileReadError,
    TileWriteError,
)
from platereduce.plate.records import (
    PIXEL_FORMAT_CHANNELS,
    ChannelType,
    PixelFormat,
    TileHeader,
)
from platereduce.plate.tiles import make_tile

__all__ = ['SqlitePlateStore', 'open_plate']

logger = logging.getLogger(__name__)

_HEADER_COLUMNS = "record_id, tile_col, tile_row, level, transaction_id, valid"


class SqlitePlateStore(PlateStore):
    """Plate stored in one SQLite database file.

    **Database Schema:**

    Table `plate_info` (key/value): `pixel_format`, `channel_type`,
    `num_levels`, `tile_size`.

    Table `tiles` (one row per written tile version):

    - record_id: Autoincrement id, increases with every write
    - tile_col, tile_row, level: Tile location
    - transaction_id: Transaction the tile was written under
    - height, width, channels, dtype: Raster layout
    - data: Raw pixel bytes (C order, y/x/channel)
    - valid: Validity flag (1 for every tile written through this class)
    - written_at: UTC timestamp (ISO format)

    **Transactions:**

    The connection runs in autocommit mode. ``write_request`` issues
    ``BEGIN IMMEDIATE`` and ``write_complete`` issues ``COMMIT``, so every
    request/complete pair is one SQLite transaction. A failed
    ``write_update`` rolls the open transaction back.

    **Typical Usage:**

        plate = SqlitePlateStore.create("earth.plate", "graya", "uint8", num_levels=4)
        plate.write_tile(tile, col=3, row=3, level=2, transaction_id=10)
        headers = plate.search_by_location(3, 3, 2, 0, 20)
        plate.close()
    """

    def __init__(self, path: Union[Path, str]):
        """Open an existing plate.

        Parameters
        ----------
        path : Path or str
            Path to a plate created with :meth:`create`.

        Raises
        ------
        PlateNotFoundError
            If the file does not exist.
        PlateStoreError
            If the file is not a plate.
        """
        self.path = Path(path)
        if not self.path.is_file():
            raise PlateNotFoundError(f"Plate not found: {self.path}")

        self._conn = sqlite3.connect(str(self.path), isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._write_open = False
        self._request_count = 0

        info = self._load_info()
        try:
            self._pixel_format = PixelFormat(info["pixel_format"])
            self._channel_type = ChannelType(info["channel_type"])
            self._num_levels = int(info["num_levels"])
            self.tile_size = int(info["tile_size"])
        except (KeyError, ValueError) as e:
            self.close()
            raise PlateStoreError(f"Plate {self.path} has invalid metadata: {e}") from e

        self._dtype = np.dtype(self._channel_type.value)
        self._channels = PIXEL_FORMAT_CHANNELS[self._pixel_format]
        logger.debug("Opened plate %s: %s/%s, %d levels, %dpx tiles",
                     self.path, self._pixel_format.value, self._channel_type.value,
                     self._num_levels, self.tile_size)

    @classmethod
    def create(cls, path: Union[Path, str], pixel_format, channel_type,
               num_levels: int, tile_size: int = 256) -> "SqlitePlateStore":
        """Create a new, empty plate and open it.

        Parameters
        ----------
        path : Path or str
            Destination file. Must not exist yet.
        pixel_format : PixelFormat or str
            Pixel layout, e.g. ``"graya"`` or ``"rgba"``.
        channel_type : ChannelType or str
            Channel type, e.g. ``"uint8"``.
        num_levels : int
            Number of pyramid levels (level L holds a 2**L x 2**L grid).
        tile_size : int, optional
            Tile edge length in pixels (default 256).

        Returns
        -------
        SqlitePlateStore
            The opened plate.
        """
        path = Path(path)
        if path.exists():
            raise PlateStoreError(f"Plate already exists: {path}")
        if num_levels < 1:
            raise ValueError(f"num_levels must be >= 1, got {num_levels}")
        if tile_size < 1:
            raise ValueError(f"tile_size must be >= 1, got {tile_size}")

        pixel_format = PixelFormat(pixel_format)
        channel_type = ChannelType(channel_type)
        path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(path))
        try:
            conn.execute("""
                CREATE TABLE plate_info (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE tiles (
                    record_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    tile_col INTEGER NOT NULL,
                    tile_row INTEGER NOT NULL,
                    level INTEGER NOT NULL,
                    transaction_id INTEGER NOT NULL,

                    height INTEGER NOT NULL,
                    width INTEGER NOT NULL,
                    channels INTEGER NOT NULL,
                    dtype TEXT NOT NULL,
                    data BLOB NOT NULL,

                    valid INTEGER NOT NULL DEFAULT 1,
                    written_at TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX idx_location ON tiles(level, tile_col, tile_row, transaction_id)"
            )
            conn.executemany(
                "INSERT INTO plate_info (key, value) VALUES (?, ?)",
                [
                    ("pixel_format", pixel_format.value),
                    ("channel_type", channel_type.value),
                    ("num_levels", str(num_levels)),
                    ("tile_size", str(tile_size)),
                ],
            )
            conn.commit()
        finally:
            conn.close()

        logger.info("Created plate %s (%s/%s, %d levels)",
                    path, pixel_format.value, channel_type.value, num_levels)
        return cls(path)

    def _load_info(self) -> Dict[str, str]:
        try:
            cursor = self._conn.execute("SELECT key, value FROM plate_info")
            return {row["key"]: row["value"] for row in cursor.fetchall()}
        except sqlite3.DatabaseError as e:
            self.close()
            raise PlateStoreError(f"Not a plate file: {self.path} ({e})") from e

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def num_levels(self) -> int:
        return self._num_levels

    def pixel_format(self) -> PixelFormat:
        return self._pixel_format

    def channel_type(self) -> ChannelType:
        return self._channel_type

    def count_tiles(self, level: Optional[int] = None,
                    transaction_id: Optional[int] = None) -> int:
        """Count stored tile records, optionally filtered by level and transaction."""
        query = "SELECT COUNT(*) FROM tiles WHERE 1 = 1"
        params = []
        if level is not None:
            query += " AND level = ?"
            params.append(level)
        if transaction_id is not None:
            query += " AND transaction_id = ?"
            params.append(transaction_id)
        return self._conn.execute(query, params).fetchone()[0]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search_by_location(self, col: int, row: int, level: int,
                           start_tid: int, end_tid: Optional[int] = None,
                           fetch_latest_in_range: bool = True) -> List[TileHeader]:
        query = f"""
            SELECT {_HEADER_COLUMNS} FROM tiles
            WHERE tile_col = ? AND tile_row = ? AND level = ? AND transaction_id >= ?
        """
        params = [col, row, level, start_tid]
        if end_tid is not None:
            query += " AND transaction_id <= ?"
            params.append(end_tid)
        query += " ORDER BY transaction_id, record_id"

        try:
            rows = self._conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise PlateStoreError(
                f"Location query failed at ({col}, {row}) level {level}: {e}"
            ) from e

        if fetch_latest_in_range:
            # Rows are ordered by record_id within a transaction, keep the last
            latest = {}
            for r in rows:
                latest[r["transaction_id"]] = r
            rows = list(latest.values())

        return [self._to_header(r) for r in rows]

    def read(self, col: int, row: int, level: int, transaction_id: int,
             exact_match: bool = True) -> xr.DataArray:
        if exact_match:
            condition = "transaction_id = ?"
            order = "record_id DESC"
        else:
            condition = "transaction_id <= ?"
            order = "transaction_id DESC, record_id DESC"

        query = f"""
            SELECT {_HEADER_COLUMNS}, height, width, channels, dtype, data FROM tiles
            WHERE tile_col = ? AND tile_row = ? AND level = ? AND {condition}
            ORDER BY {order} LIMIT 1
        """
        try:
            record = self._conn.execute(query, (col, row, level, transaction_id)).fetchone()
        except sqlite3.Error as e:
            raise TileReadError(
                f"Failed to read tile ({col}, {row}) level {level} t={transaction_id}: {e}"
            ) from e

        if record is None:
            raise TileNotFoundError(
                f"No tile at ({col}, {row}) level {level} for transaction {transaction_id}"
            )
        return self._decode(record)

    def _to_header(self, record: sqlite3.Row) -> TileHeader:
        return TileHeader(
            col=record["tile_col"],
            row=record["tile_row"],
            level=record["level"],
            transaction_id=record["transaction_id"],
            record_id=record["record_id"],
            valid=bool(record["valid"]),
        )

    def _decode(self, record: sqlite3.Row) -> xr.DataArray:
        where = (f"({record['tile_col']}, {record['tile_row']}) level {record['level']} "
                 f"t={record['transaction_id']}")
        if record["dtype"] != self._dtype.name:
            raise TileReadError(
                f"Tile {where} is stored as {record['dtype']}, plate declares {self._dtype.name}"
            )
        if record["channels"] != self._channels:
            raise TileReadError(
                f"Tile {where} has {record['channels']} channels, plate declares {self._channels}"
            )

        shape = (record["height"], record["width"], record["channels"])
        try:
            data = np.frombuffer(record["data"], dtype=self._dtype).reshape(shape)
        except ValueError as e:
            raise TileReadError(f"Tile {where} has corrupt pixel data: {e}") from e

        return make_tile(
            data.copy(),
            col=record["tile_col"],
            row=record["tile_row"],
            level=record["level"],
            transaction_id=record["transaction_id"],
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write_request(self) -> int:
        if self._write_open:
            raise TileWriteError("A write transaction is already open")
        try:
            self._conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise TileWriteError(f"Could not start write transaction on {self.path}: {e}") from e

        self._write_open = True
        self._request_count += 1
        return self._request_count

    def write_update(self, tile: xr.DataArray, col: int, row: int, level: int,
                     transaction_id: int) -> None:
        if not self._write_open:
            raise TileWriteError("write_update called without write_request")

        data = np.asarray(tile)
        try:
            self._check_writable(data, col, row, level)
            self._conn.execute("""
                INSERT INTO tiles
                (tile_col, tile_row, level, transaction_id,
                 height, width, channels, dtype, data, written_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                col,
                row,
                level,
                transaction_id,
                data.shape[0],
                data.shape[1],
                data.shape[2],
                data.dtype.name,
                np.ascontiguousarray(data).tobytes(),
                datetime.now(timezone.utc).isoformat(),
            ))
        except (TileWriteError, sqlite3.Error) as e:
            self._rollback()
            if isinstance(e, TileWriteError):
                raise
            raise TileWriteError(
                f"Failed to write tile ({col}, {row}) level {level} t={transaction_id}: {e}"
            ) from e

        logger.debug("Wrote tile (%d, %d) level %d t=%d", col, row, level, transaction_id)

    def write_complete(self) -> None:
        if not self._write_open:
            raise TileWriteError("write_complete called without write_request")
        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback()
            raise TileWriteError(f"Could not commit write transaction on {self.path}: {e}") from e
        self._write_open = False

    def write_abort(self) -> None:
        if self._write_open:
            logger.debug("Aborting write request %d on %s", self._request_count, self.path)
            self._rollback()

    def _check_writable(self, data: np.ndarray, col: int, row: int, level: int) -> None:
        if not 0 <= level < self._num_levels:
            raise TileWriteError(f"Level {level} outside plate levels [0, {self._num_levels})")
        grid = 2 ** level
        if not (0 <= col < grid and 0 <= row < grid):
            raise TileWriteError(f"Tile ({col}, {row}) outside the {grid}x{grid} grid of level {level}")

        expected_shape = (self.tile_size, self.tile_size, self._channels)
        if data.shape != expected_shape:
            raise TileWriteError(f"Tile shape {data.shape} does not match plate layout {expected_shape}")
        if data.dtype != self._dtype:
            raise TileWriteError(f"Tile dtype {data.dtype} does not match plate channel type {self._dtype}")

    def _rollback(self) -> None:
        if self._conn is not None and self._conn.in_transaction:
            self._conn.execute("ROLLBACK")
        self._write_open = False

    def close(self):
        """Close database connection.

        An unfinished write transaction is rolled back. Safe to call multiple times.
        """
        if self._conn:
            if self._write_open:
                logger.warning("Closing %s with an open write transaction; rolling back", self.path)
                self._rollback()
            self._conn.close()
            self._conn = None


def open_plate(url: str) -> SqlitePlateStore:
    """Open the plate a URL points to.

    Accepts plain filesystem paths as well as ``sqlite://`` and ``file://``
    URLs.

    Raises
    ------
    PlateNotFoundError
        If nothing exists at the location.
    """
    location = url
    for scheme in ("sqlite://", "file://"):
        if location.startswith(scheme):
            location = location[len(scheme):]
            break
    return SqlitePlateStore(Path(location).expanduser())
