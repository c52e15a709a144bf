"""Abstract plate store interface.

A plate is a tiled, multi-resolution, transaction-versioned raster store
with one fixed pixel layout. Reduction code talks to plates only through
this interface; :class:`~platereduce.plate.sqlite_store.SqlitePlateStore`
is the bundled implementation.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import xarray as xr

from platereduce.plate.exceptions import PlateStoreError
from platereduce.plate.records import ChannelType, PixelFormat, TileHeader


class PlateStore(ABC):
    """Operations a plate must provide.

    **Queries**

    ``search_by_location`` returns every tile version at a location whose
    transaction id lies in ``[start_tid, end_tid]`` (``end_tid=None`` is
    open-ended), ordered by transaction id. Nothing found is an empty list,
    never an exception. With ``fetch_latest_in_range=True`` only the most
    recently written record of each transaction id is returned.

    **Writes**

    Writes follow a three-step protocol::

        store.write_request()
        store.write_update(tile, col, row, level, transaction_id)
        store.write_complete()

    Each request/complete pair is one atomic write transaction.
    ``write_abort`` discards an open transaction after a failed update or
    commit; nothing written under it becomes visible.
    """

    @abstractmethod
    def num_levels(self) -> int:
        """Number of pyramid levels in the plate."""

    @abstractmethod
    def pixel_format(self) -> PixelFormat:
        """Declared pixel layout."""

    @abstractmethod
    def channel_type(self) -> ChannelType:
        """Declared channel numeric type."""

    @abstractmethod
    def search_by_location(self, col: int, row: int, level: int,
                           start_tid: int, end_tid: Optional[int] = None,
                           fetch_latest_in_range: bool = True) -> List[TileHeader]:
        """Find tile versions at one location within a transaction range."""

    @abstractmethod
    def read(self, col: int, row: int, level: int, transaction_id: int,
             exact_match: bool = True) -> xr.DataArray:
        """Load the pixel data of one tile version.

        With ``exact_match=False`` the newest version at or below
        ``transaction_id`` is returned.

        Raises
        ------
        TileNotFoundError
            No matching version exists.
        TileReadError
            The version exists but could not be decoded.
        """

    @abstractmethod
    def write_request(self) -> int:
        """Open a write transaction and return its request id."""

    @abstractmethod
    def write_update(self, tile: xr.DataArray, col: int, row: int, level: int,
                     transaction_id: int) -> None:
        """Write one tile inside the open write transaction."""

    @abstractmethod
    def write_complete(self) -> None:
        """Commit the open write transaction."""

    @abstractmethod
    def write_abort(self) -> None:
        """Discard the open write transaction.

        No-op when no write transaction is open, so it is safe to call
        after a failed ``write_update`` or ``write_complete`` that already
        closed the transaction.
        """

    def write_tile(self, tile: xr.DataArray, col: int, row: int, level: int,
                   transaction_id: int) -> None:
        """Write a single tile as its own transaction."""
        self.write_request()
        try:
            self.write_update(tile, col, row, level, transaction_id)
            self.write_complete()
        except PlateStoreError:
            self.write_abort()
            raise

    def close(self) -> None:
        """Release store resources. Safe to call multiple times."""

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
