"""Test ReductionDriver end to end against SQLite plates."""

import pytest

from platereduce.errors import ConfigurationError, UnsupportedPixelTypeError
from platereduce.pipeline import driver as driver_module
from platereduce.pipeline.driver import ReductionDriver, run_reduction
from platereduce.plate import PlateNotFoundError, SqlitePlateStore
from tests.helpers.fake_plate import FakePlateStore
from tests.helpers.tiles import uniform_tile

pytestmark = pytest.mark.integration


def _output_tiles(path, level, tid=2000):
    with SqlitePlateStore(path) as plate:
        return {
            (col, row): plate.read(col, row, level, tid)
            for row in range(2 ** level)
            for col in range(2 ** level)
            if plate.search_by_location(col, row, level, tid, tid)
        }


class TestScenario:
    """Two versions at (3, 3) level 2: (10, a=100) at t=10 and (30, a=50) at t=20."""

    def test_full_range_combines_both(self, scenario_plate, make_config):
        path = scenario_plate.path
        scenario_plate.close()
        config = make_config(url=str(path), level=2, start_t=0, end_t=20)

        summary = run_reduction(config)

        outputs = _output_tiles(path, level=2)
        assert list(outputs) == [(3, 3)]
        tile = outputs[(3, 3)]
        assert (tile.values[..., 0] == 17).all()
        assert (tile.values[..., 1] == 150).all()
        assert summary.tiles_written == 1
        assert summary.tiles_read == 2

    def test_start_after_first_version(self, scenario_plate, make_config):
        path = scenario_plate.path
        scenario_plate.close()
        config = make_config(url=str(path), level=2, start_t=15, end_t=20)

        run_reduction(config)

        tile = _output_tiles(path, level=2)[(3, 3)]
        assert (tile.values[..., 0] == 30).all()
        assert (tile.values[..., 1] == 50).all()

    def test_sqlite_url(self, scenario_plate, make_config):
        path = scenario_plate.path
        scenario_plate.close()

        run_reduction(make_config(url=f"sqlite://{path}", level=2, end_t=20))

        assert (3, 3) in _output_tiles(path, level=2)

    def test_other_levels_untouched(self, scenario_plate, make_config):
        scenario_plate.write_tile(uniform_tile([5], 255), col=0, row=0, level=1, transaction_id=10)
        path = scenario_plate.path
        scenario_plate.close()

        run_reduction(make_config(url=str(path), level=1, end_t=20))

        with SqlitePlateStore(path) as plate:
            assert plate.count_tiles(level=1, transaction_id=2000) == 1
            assert plate.count_tiles(level=2, transaction_id=2000) == 0


class TestSharding:

    @pytest.mark.parametrize("num_jobs", [1, 2, 3])
    def test_jobs_write_every_tile_once(self, make_plate, make_config, num_jobs):
        plate = make_plate(tile_size=2)
        for row in range(8):
            for col in range(8):
                plate.write_tile(uniform_tile([col + row], 255, size=2),
                                 col=col, row=row, level=3, transaction_id=1)
        path = plate.path
        plate.close()

        written = 0
        for job_id in range(num_jobs):
            config = make_config(url=str(path), level=3, job_id=job_id,
                                 num_jobs=num_jobs, end_t=1)
            written += run_reduction(config).tiles_written

        assert written == 64
        with SqlitePlateStore(path) as reopened:
            assert reopened.count_tiles(level=3, transaction_id=2000) == 64
        outputs = _output_tiles(path, level=3)
        assert all(int(tile[0, 0, 0]) == col + row for (col, row), tile in outputs.items())


class TestConfigurationErrors:

    def test_default_level_is_rejected(self, make_plate, make_config):
        plate = make_plate(num_levels=4)

        with pytest.raises(ConfigurationError, match="Incorrect level selection, -1.*4 levels"):
            ReductionDriver(make_config(url=str(plate.path))).run()

    def test_level_past_last_is_rejected(self, make_config):
        store = FakePlateStore(num_levels=4)

        with pytest.raises(ConfigurationError, match="4 levels"):
            ReductionDriver(make_config(level=4)).run(store)
        assert store.searches == []

    def test_unsupported_pixel_type_before_any_read(self, make_config):
        store = FakePlateStore(pixel_format="rgba", channel_type="int16")

        with pytest.raises(UnsupportedPixelTypeError):
            ReductionDriver(make_config(level=2)).run(store)
        assert store.searches == []
        assert store.reads == []

    def test_unknown_function_before_opening_plate(self, make_config, temp_dir):
        config = make_config(url=str(temp_dir / "missing.plate"), level=2, function="Median")

        with pytest.raises(ConfigurationError, match="Unknown function"):
            run_reduction(config)

    def test_missing_plate(self, make_config, temp_dir):
        with pytest.raises(PlateNotFoundError):
            run_reduction(make_config(url=str(temp_dir / "missing.plate"), level=2))


class TestStoreOwnership:

    def test_injected_store_left_open(self, make_config):
        store = FakePlateStore()

        ReductionDriver(make_config(level=2)).run(store)

        assert not store.closed

    def test_opened_store_closed_on_error(self, make_plate, make_config, monkeypatch):
        plate = make_plate()
        path = plate.path
        plate.close()
        opened = []

        real_open = driver_module.open_plate

        def tracking_open(url):
            store = real_open(url)
            opened.append(store)
            return store

        monkeypatch.setattr(driver_module, "open_plate", tracking_open)

        with pytest.raises(ConfigurationError):
            ReductionDriver(make_config(url=str(path), level=9)).run()
        assert opened[0]._conn is None

    def test_summary_logged(self, make_config, caplog):
        with caplog.at_level("INFO", logger="platereduce.pipeline.driver"):
            ReductionDriver(make_config(level=3, num_jobs=2, job_id=1)).run(FakePlateStore())

        messages = [r.getMessage() for r in caplog.records]
        assert "Job 1/2 has 2 work units." in messages
        assert any(m.startswith("Statistics:") for m in messages)
