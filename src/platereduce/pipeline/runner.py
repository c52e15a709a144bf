"""Reduction runner.

Walks a job's work units coordinate by coordinate: gather the versions in
range, reduce them, commit the result as its own write transaction.
"""

import logging
from typing import Dict, List, Optional

from platereduce.contracts import assert_reduction_input, assert_reduction_output
from platereduce.dispatch import PixelType
from platereduce.pipeline.gatherer import TileGatherer
from platereduce.plate.base import PlateStore
from platereduce.plate.exceptions import PlateStoreError
from platereduce.plate.records import Coordinate, WorkUnit
from platereduce.reduce.base import ReductionStrategy
from platereduce.schemas import JobConfig

__all__ = ['ReductionRunner', 'RunSummary']

logger = logging.getLogger(__name__)


class RunSummary:
    """Counters for one runner pass."""

    def __init__(self, work_units: int = 0):
        self.work_units = work_units
        self.work_units_done = 0
        self.coordinates_visited = 0
        self.coordinates_skipped = 0
        self.tiles_read = 0
        self.tiles_written = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "work_units": self.work_units,
            "work_units_done": self.work_units_done,
            "coordinates_visited": self.coordinates_visited,
            "coordinates_skipped": self.coordinates_skipped,
            "tiles_read": self.tiles_read,
            "tiles_written": self.tiles_written,
        }

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v}" for k, v in self.as_dict().items())
        return f"RunSummary({fields})"


class ReductionRunner:
    """Runs one job's share of a plate reduction.

    **Per coordinate** (in order):

    1. **Gather**: query the plate for versions in
       ``[start_transaction_id, end_transaction_id]`` and load them.
       No versions means the coordinate is skipped; no write is issued.

    2. **Reduce**: check the input contract, run the strategy, check the
       output contract.

    3. **Commit**: ``write_request`` / ``write_update`` at
       ``output_transaction_id`` / ``write_complete``. Every coordinate is
       its own write transaction, so coordinates committed before a later
       failure stay committed. A failed update or commit is aborted
       with ``write_abort`` before the error propagates.

    Read, write and contract errors propagate and end the run.

    Example usage (typically called by the driver)::

        runner = ReductionRunner(store, pixel_type, WeightedAverage(), config.job)
        summary = runner.run(work_units)
    """

    def __init__(self, store: PlateStore, pixel_type: PixelType,
                 strategy: ReductionStrategy, job: JobConfig,
                 gatherer: Optional[TileGatherer] = None):
        """Initialize runner.

        Parameters
        ----------
        store : PlateStore
            Plate to read from and write to.
        pixel_type : PixelType
            Typed layout resolved from the plate.
        strategy : ReductionStrategy
            Reduction to apply at each coordinate.
        job : JobConfig
            Level, transaction range and output transaction id.
        gatherer : TileGatherer, optional
            Defaults to a gatherer over ``store``.
        """
        self.store = store
        self.pixel_type = pixel_type
        self.strategy = strategy
        self.job = job
        self.gatherer = gatherer or TileGatherer(store)

    def process_coordinate(self, coord: Coordinate, summary: RunSummary) -> bool:
        """Reduce and commit one coordinate. Returns True if a tile was written."""
        summary.coordinates_visited += 1

        inputs = self.gatherer.gather(
            coord,
            self.job.start_transaction_id,
            self.job.end_transaction_id,
        )
        if not inputs:
            summary.coordinates_skipped += 1
            return False
        summary.tiles_read += len(inputs)

        assert_reduction_input(inputs, self.pixel_type)
        result = self.strategy.reduce(inputs, self.pixel_type)
        assert_reduction_output(result, inputs[0][0], self.pixel_type)

        request_id = self.store.write_request()
        try:
            self.store.write_update(result, coord.col, coord.row, coord.level,
                                    self.job.output_transaction_id)
            self.store.write_complete()
        except PlateStoreError:
            self.store.write_abort()
            raise
        summary.tiles_written += 1

        logger.debug("Committed %s from %d tiles (write request %s)",
                     coord, len(inputs), request_id)
        return True

    def run(self, work_units: List[WorkUnit]) -> RunSummary:
        """Process every coordinate of every work unit.

        Returns
        -------
        RunSummary
            Counters for the pass.
        """
        summary = RunSummary(work_units=len(work_units))
        total = len(work_units)

        for unit in work_units:
            for coord in unit.coordinates(self.job.level):
                self.process_coordinate(coord, summary)

            summary.work_units_done += 1
            logger.info("Processing: %d/%d work units (%.1f%%)",
                        summary.work_units_done, total,
                        100.0 * summary.work_units_done / total)

        return summary
