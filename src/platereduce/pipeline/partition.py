"""Job partitioning of a level's tile grid.

The ``2**level`` square grid is cut into fixed ``block_size`` square
blocks (cropped at the grid edge). Blocks are enumerated row-major and
block ``i`` goes to job ``i % num_jobs``. The assignment depends only on
``(level, num_jobs, job_id, block_size)``, so independent worker
processes agree on it without talking to each other.
"""

import logging
from typing import Iterator, List

from platereduce.errors import ConfigurationError
from platereduce.plate.records import WorkUnit

__all__ = ['DEFAULT_BLOCK_SIZE', 'JobPartitioner', 'partition']

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 4


class JobPartitioner:
    """Splits a level grid into work units and deals them out to jobs."""

    def __init__(self, block_size: int = DEFAULT_BLOCK_SIZE):
        if block_size < 1:
            raise ConfigurationError(f"block_size must be >= 1, got {block_size}")
        self.block_size = block_size

    def blocks_per_side(self, level: int) -> int:
        """Number of blocks along one edge of the level grid."""
        if level < 0:
            raise ConfigurationError(f"Level must be >= 0, got {level}")
        return -(-(2 ** level) // self.block_size)

    def unit_at(self, level: int, index: int) -> WorkUnit:
        """Work unit number ``index`` in row-major block order."""
        size = 2 ** level
        block_row, block_col = divmod(index, self.blocks_per_side(level))
        min_col = block_col * self.block_size
        min_row = block_row * self.block_size
        return WorkUnit(
            min_col=min_col,
            min_row=min_row,
            max_col=min(min_col + self.block_size, size),
            max_row=min(min_row + self.block_size, size),
        )

    def work_units(self, level: int) -> Iterator[WorkUnit]:
        """Yield all work units of a level, in row-major order."""
        n_blocks = self.blocks_per_side(level) ** 2
        for index in range(n_blocks):
            yield self.unit_at(level, index)

    def partition(self, level: int, num_jobs: int, job_id: int) -> List[WorkUnit]:
        """Work units belonging to ``job_id``.

        Only this job's blocks are built.

        Raises
        ------
        ConfigurationError
            If ``num_jobs < 1`` or ``job_id`` is outside ``[0, num_jobs)``.
        """
        if num_jobs < 1:
            raise ConfigurationError(f"num_jobs must be >= 1, got {num_jobs}")
        if not 0 <= job_id < num_jobs:
            raise ConfigurationError(f"job_id {job_id} is outside [0, {num_jobs})")

        n_blocks = self.blocks_per_side(level) ** 2
        units = [
            self.unit_at(level, index)
            for index in range(job_id, n_blocks, num_jobs)
        ]
        logger.debug("Level %d, job %d/%d: %d of %d work units (block size %d)",
                     level, job_id, num_jobs, len(units), n_blocks, self.block_size)
        return units


def partition(level: int, num_jobs: int, job_id: int,
              block_size: int = DEFAULT_BLOCK_SIZE) -> List[WorkUnit]:
    """Shortcut for ``JobPartitioner(block_size).partition(level, num_jobs, job_id)``."""
    return JobPartitioner(block_size).partition(level, num_jobs, job_id)
