"""In-memory plate store that records how it is used."""

import numpy as np

from platereduce.plate.base import PlateStore
from platereduce.plate.exceptions import TileNotFoundError, TileReadError, TileWriteError
from platereduce.plate.records import ChannelType, PixelFormat, TileHeader
from platereduce.plate.tiles import make_tile


class FakePlateStore(PlateStore):
    """Dictionary-backed plate.

    - ``searches`` lists every location query
    - ``writes`` lists committed ``(col, row, level, tid, data)``
    - ``write_requests`` counts ``write_request`` calls
    - ``write_aborts`` counts discarded open transactions
    - locations in ``broken`` raise TileReadError on read
    """

    def __init__(self, pixel_format="graya", channel_type="uint8", num_levels=4):
        self._pixel_format = PixelFormat(pixel_format)
        self._channel_type = ChannelType(channel_type)
        self._num_levels = num_levels
        self.tiles = {}
        self.searches = []
        self.reads = []
        self.writes = []
        self.write_requests = 0
        self.write_aborts = 0
        self.broken = set()
        self.closed = False
        self._pending = None
        self._next_record = 1

    def add(self, tile, col, row, level, transaction_id):
        """Seed a tile without going through the write protocol."""
        versions = self.tiles.setdefault((col, row, level), [])
        versions.append((transaction_id, self._next_record, np.asarray(tile).copy()))
        self._next_record += 1

    def num_levels(self):
        return self._num_levels

    def pixel_format(self):
        return self._pixel_format

    def channel_type(self):
        return self._channel_type

    def search_by_location(self, col, row, level, start_tid, end_tid=None,
                           fetch_latest_in_range=True):
        self.searches.append((col, row, level, start_tid, end_tid))
        versions = sorted(
            (v for v in self.tiles.get((col, row, level), [])
             if v[0] >= start_tid and (end_tid is None or v[0] <= end_tid)),
            key=lambda v: (v[0], v[1]),
        )
        if fetch_latest_in_range:
            latest = {}
            for v in versions:
                latest[v[0]] = v
            versions = list(latest.values())
        return [
            TileHeader(col=col, row=row, level=level, transaction_id=tid, record_id=rid)
            for tid, rid, _ in versions
        ]

    def read(self, col, row, level, transaction_id, exact_match=True):
        self.reads.append((col, row, level, transaction_id))
        if (col, row, level, transaction_id) in self.broken:
            raise TileReadError(f"corrupt tile ({col}, {row}) level {level} t={transaction_id}")
        candidates = [
            v for v in self.tiles.get((col, row, level), [])
            if (v[0] == transaction_id if exact_match else v[0] <= transaction_id)
        ]
        if not candidates:
            raise TileNotFoundError(f"no tile ({col}, {row}) level {level} t={transaction_id}")
        tid, _, data = max(candidates, key=lambda v: (v[0], v[1]))
        return make_tile(data.copy(), col=col, row=row, level=level, transaction_id=tid)

    def write_request(self):
        if self._pending is not None:
            raise TileWriteError("A write transaction is already open")
        self._pending = []
        self.write_requests += 1
        return self.write_requests

    def write_update(self, tile, col, row, level, transaction_id):
        if self._pending is None:
            raise TileWriteError("write_update called without write_request")
        self._pending.append((col, row, level, transaction_id, np.asarray(tile).copy()))

    def write_complete(self):
        if self._pending is None:
            raise TileWriteError("write_complete called without write_request")
        for col, row, level, tid, data in self._pending:
            self.writes.append((col, row, level, tid, data))
            self.add(data, col, row, level, tid)
        self._pending = None

    def write_abort(self):
        if self._pending is not None:
            self.write_aborts += 1
        self._pending = None

    def close(self):
        self.closed = True
