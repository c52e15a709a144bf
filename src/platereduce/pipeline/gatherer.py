"""Per-coordinate tile gathering.

Queries the plate for every version at one coordinate inside a
transaction range and loads their pixels. "Nothing there" is an empty
result; "something there but unreadable" is an error.
"""

import logging
from typing import Optional

from platereduce.plate.base import PlateStore
from platereduce.plate.exceptions import PlateStoreError, TileReadError
from platereduce.plate.records import Coordinate
from platereduce.reduce.base import ReductionInput

__all__ = ['TileGatherer']

logger = logging.getLogger(__name__)


class TileGatherer:
    """Collects the reduction input for one coordinate."""

    def __init__(self, store: PlateStore):
        self.store = store

    def gather(self, coord: Coordinate, start_tid: int,
               end_tid: Optional[int] = None) -> ReductionInput:
        """Load every tile version at ``coord`` within ``[start_tid, end_tid]``.

        Parameters
        ----------
        coord : Coordinate
            Tile location.
        start_tid : int
            First transaction id (inclusive).
        end_tid : int, optional
            Last transaction id (inclusive); None is open-ended.

        Returns
        -------
        ReductionInput
            (tile, header) pairs ordered by transaction id. Empty when the
            plate holds no version in range.

        Raises
        ------
        TileReadError
            If a version was found but could not be loaded.
        """
        headers = self.store.search_by_location(
            coord.col, coord.row, coord.level,
            start_tid, end_tid,
            fetch_latest_in_range=True,
        )
        if not headers:
            return []

        inputs = []
        for header in headers:
            try:
                tile = self.store.read(
                    coord.col, coord.row, coord.level,
                    header.transaction_id,
                    exact_match=True,
                )
            except TileReadError:
                raise
            except PlateStoreError as e:
                raise TileReadError(
                    f"Failed to load tile {coord} t={header.transaction_id}: {e}"
                ) from e
            inputs.append((tile, header))

        logger.debug("Gathered %d tiles at %s: transactions %s",
                     len(inputs), coord, [h.transaction_id for h in headers])
        return inputs
