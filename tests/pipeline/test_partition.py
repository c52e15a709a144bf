"""Test job partitioning of level grids."""

import time
from collections import Counter

import pytest

from platereduce.errors import ConfigurationError
from platereduce.pipeline.partition import DEFAULT_BLOCK_SIZE, JobPartitioner, partition
from platereduce.plate.records import WorkUnit

pytestmark = pytest.mark.unit


def _tiles(units, level):
    return [(c.col, c.row) for unit in units for c in unit.coordinates(level)]


class TestWorkUnits:

    @pytest.mark.parametrize("level", [0, 1, 2])
    def test_small_levels_single_unit(self, level):
        units = list(JobPartitioner().work_units(level))

        size = 2 ** level
        assert units == [WorkUnit(min_col=0, min_row=0, max_col=size, max_row=size)]

    def test_level_three_row_major(self):
        units = list(JobPartitioner().work_units(3))

        assert [(u.min_col, u.min_row) for u in units] == [(0, 0), (4, 0), (0, 4), (4, 4)]
        assert all(u.size == 16 for u in units)

    def test_edge_units_are_cropped(self):
        units = list(JobPartitioner(block_size=3).work_units(2))

        assert [(u.min_col, u.min_row, u.max_col, u.max_row) for u in units] == [
            (0, 0, 3, 3), (3, 0, 4, 3), (0, 3, 3, 4), (3, 3, 4, 4),
        ]

    def test_default_block_size(self):
        assert JobPartitioner().block_size == DEFAULT_BLOCK_SIZE == 4


class TestPartition:

    @pytest.mark.parametrize("level", range(0, 7))
    @pytest.mark.parametrize("num_jobs", [1, 2, 3, 5, 7])
    def test_jobs_cover_grid_exactly_once(self, level, num_jobs):
        counts = Counter()
        for job_id in range(num_jobs):
            counts.update(_tiles(partition(level, num_jobs, job_id), level))

        size = 2 ** level
        assert len(counts) == size * size
        assert set(counts.values()) == {1}

    def test_round_robin_assignment(self):
        all_units = list(JobPartitioner().work_units(4))

        job_1 = partition(4, num_jobs=3, job_id=1)

        assert job_1 == [all_units[i] for i in range(1, len(all_units), 3)]

    def test_deterministic(self):
        assert partition(5, 4, 2) == partition(5, 4, 2)

    def test_more_jobs_than_units(self):
        assert partition(2, num_jobs=3, job_id=0) != []
        assert partition(2, num_jobs=3, job_id=2) == []

    def test_deep_level_builds_only_own_units(self):
        """Level 14 has 4096 x 4096 blocks; one job of 4096 gets one row of them."""
        start = time.perf_counter()

        units = partition(14, num_jobs=4096, job_id=7)

        elapsed = time.perf_counter() - start
        assert len(units) == 4096
        assert units[0] == WorkUnit(min_col=28, min_row=0, max_col=32, max_row=4)
        assert units[-1] == WorkUnit(min_col=28, min_row=16380, max_col=32, max_row=16384)
        assert elapsed < 5.0

    def test_matches_full_enumeration(self):
        all_units = list(JobPartitioner(block_size=3).work_units(5))

        for job_id in range(4):
            assert partition(5, 4, job_id, block_size=3) == all_units[job_id::4]

    def test_custom_block_size(self):
        units = partition(3, 1, 0, block_size=8)

        assert units == [WorkUnit(min_col=0, min_row=0, max_col=8, max_row=8)]


class TestInvalidArguments:

    @pytest.mark.parametrize("num_jobs, job_id", [(0, 0), (2, 2), (2, -1), (1, 5)])
    def test_bad_job_indices(self, num_jobs, job_id):
        with pytest.raises(ConfigurationError):
            partition(3, num_jobs, job_id)

    def test_negative_level(self):
        with pytest.raises(ConfigurationError, match="Level"):
            partition(-1, 1, 0)

    def test_zero_block_size(self):
        with pytest.raises(ConfigurationError, match="block_size"):
            JobPartitioner(block_size=0)
