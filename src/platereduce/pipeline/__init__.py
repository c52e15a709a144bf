"""Pipeline modules.

- partition: Job sharding of the level grid
- gatherer: Per-coordinate query and load
- runner: Work-unit walk, reduce, commit
- driver: End-to-end job execution
"""

from platereduce.pipeline.partition import JobPartitioner, partition
from platereduce.pipeline.gatherer import TileGatherer
from platereduce.pipeline.runner import ReductionRunner, RunSummary
from platereduce.pipeline.driver import ReductionDriver, run_reduction, setup_logging

__all__ = [
    "JobPartitioner",
    "partition",
    "TileGatherer",
    "ReductionRunner",
    "RunSummary",
    "ReductionDriver",
    "run_reduction",
    "setup_logging",
]
