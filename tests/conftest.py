"""Root-level pytest fixtures for the platereduce test suite.

Provides shared configuration, plate and tile fixtures. Tests build
configs through these fixtures instead of hand-written dicts.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from platereduce.schemas import ParamConfig, CLIConfig, resolve_config
from platereduce.plate import SqlitePlateStore
from tests.helpers.tiles import uniform_tile


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def make_config(param_config):
    """Factory fixture for runtime configs with CLI-style overrides.
    
    Examples
    --------
    >>> def test_level(make_config):
    ...     config = make_config(url="x.plate", level=3)
    ...     assert config.job.level == 3
    """
    def _make(**cli_overrides):
        cli_overrides.setdefault("url", "memory://plate")
        return resolve_config(param_config, CLIConfig(**cli_overrides))
    
    return _make


# =============================================================================
# Directory and Plate Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def make_plate(temp_dir):
    """Factory for SQLite plates with 4x4-pixel tiles.
    
    Plates are closed after the test.
    """
    plates = []

    def _make(name="test.plate", pixel_format="graya", channel_type="uint8",
              num_levels=4, tile_size=4):
        plate = SqlitePlateStore.create(
            temp_dir / name,
            pixel_format=pixel_format,
            channel_type=channel_type,
            num_levels=num_levels,
            tile_size=tile_size,
        )
        plates.append(plate)
        return plate

    yield _make

    for plate in plates:
        plate.close()


@pytest.fixture
def scenario_plate(make_plate):
    """GrayA uint8 plate with two versions at (3, 3) level 2.

    - transaction 10: value 10, alpha 100
    - transaction 20: value 30, alpha 50
    """
    plate = make_plate()
    plate.write_tile(uniform_tile([10], 100), col=3, row=3, level=2, transaction_id=10)
    plate.write_tile(uniform_tile([30], 50), col=3, row=3, level=2, transaction_id=20)
    return plate
