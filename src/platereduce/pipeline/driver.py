"""Reduction driver.

Turns a resolved configuration into a finished reduction: opens the
plate, validates the level, resolves the pixel type and strategy, works
out this job's share of the grid and runs it.
"""

import time
import logging
from pathlib import Path
from typing import Optional

from platereduce.dispatch import resolve_pixel_type
from platereduce.errors import ConfigurationError
from platereduce.pipeline.partition import JobPartitioner
from platereduce.pipeline.runner import ReductionRunner, RunSummary
from platereduce.plate.base import PlateStore
from platereduce.plate.sqlite_store import open_plate
from platereduce.reduce import get_strategy
from platereduce.schemas import InternalConfig

__all__ = ['ReductionDriver', 'run_reduction', 'setup_logging']

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure the root logger.

    Installs a console handler on stderr and, if ``log_file`` is given, a
    file handler. Existing root handlers are replaced.

    Raises
    ------
    OSError
        If the log file cannot be opened. The root logger is left unchanged.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handlers = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logger.debug("Logging: level=%s, file=%s", level, log_file)


class ReductionDriver:
    """Runs one reduction job end to end.

    **Steps:**

    1. Resolve the reduction strategy by name (before touching the plate).
    2. Open the plate unless one was injected.
    3. Check ``0 <= level < num_levels``.
    4. Resolve the plate's pixel type; unsupported layouts stop here.
    5. Partition the level grid and keep this job's work units.
    6. Run the :class:`ReductionRunner` and log a summary.

    Configuration errors in steps 1-5 are raised before any tile is read.

    Example usage::

        config = resolve_config(ParamConfig(), CLIConfig(url="earth.plate", level=5))
        summary = ReductionDriver(config).run()
    """

    def __init__(self, config: InternalConfig):
        self.config = config
        self.partitioner = JobPartitioner(config.partition.block_size)

    def run(self, store: Optional[PlateStore] = None) -> RunSummary:
        """Run the job.

        Parameters
        ----------
        store : PlateStore, optional
            Plate to use. If None, the plate at ``config.url`` is opened
            and closed again when the run ends.

        Returns
        -------
        RunSummary
            Counters for the run.
        """
        job = self.config.job
        strategy = get_strategy(self.config.reducer.function)

        owns_store = store is None
        if owns_store:
            store = open_plate(self.config.url)

        try:
            self._check_level(store)
            pixel_type = resolve_pixel_type(store.pixel_format(), store.channel_type())
            work_units = self.partitioner.partition(job.level, job.num_jobs, job.job_id)
            logger.info("Job %d/%d has %d work units.", job.job_id, job.num_jobs, len(work_units))
            logger.info("Reducing %s level %d, transactions [%d, %s] -> %d with %s (%s)",
                        self.config.url, job.level, job.start_transaction_id,
                        "latest" if job.end_transaction_id is None else job.end_transaction_id,
                        job.output_transaction_id, strategy.name, pixel_type)

            start = time.time()
            runner = ReductionRunner(store, pixel_type, strategy, job)
            summary = runner.run(work_units)

            logger.info("=" * 60)
            logger.info("Reduction finished. Runtime: %.1f seconds", time.time() - start)
            logger.info("Statistics: coordinates=%d, written=%d, skipped=%d, tiles read=%d",
                        summary.coordinates_visited, summary.tiles_written,
                        summary.coordinates_skipped, summary.tiles_read)
            logger.info("=" * 60)
            return summary
        finally:
            if owns_store:
                store.close()

    def _check_level(self, store: PlateStore) -> None:
        level = self.config.job.level
        num_levels = store.num_levels()
        if level < 0 or level >= num_levels:
            raise ConfigurationError(
                f"Incorrect level selection, {level}. "
                f"Plate {self.config.url} has {num_levels} levels internally."
            )


def run_reduction(config: InternalConfig, store: Optional[PlateStore] = None) -> RunSummary:
    """Run one reduction job. See :class:`ReductionDriver`."""
    return ReductionDriver(config).run(store)
