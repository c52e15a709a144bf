"""Test CLIConfig schema and its mapping onto the internal structure."""

import pytest
from pydantic import ValidationError

from platereduce.schemas import CLIConfig

pytestmark = pytest.mark.unit


class TestCLIConfig:

    def test_empty_cli_config_has_no_overrides(self):
        assert CLIConfig().to_internal_overrides() == {}

    def test_job_flags_map_to_job_section(self):
        cli = CLIConfig(job_id=1, num_jobs=3, level=4, start_t=5, end_t=6, transaction_id=7)

        assert cli.to_internal_overrides() == {
            "job": {
                "job_id": 1,
                "num_jobs": 3,
                "level": 4,
                "start_transaction_id": 5,
                "end_transaction_id": 6,
                "output_transaction_id": 7,
            }
        }

    def test_url_function_and_logging_sections(self):
        cli = CLIConfig(url="earth.plate", function="WeightedAvg",
                        log_level="DEBUG", log_file="run.log")

        overrides = cli.to_internal_overrides()

        assert overrides["url"] == "earth.plate"
        assert overrides["reducer"] == {"function": "WeightedAvg"}
        assert overrides["logging"] == {"level": "DEBUG", "file": "run.log"}
        assert "job" not in overrides

    def test_zero_values_are_overrides(self):
        """0 is a real value, only None means 'not given'."""
        overrides = CLIConfig(start_t=0, level=0).to_internal_overrides()

        assert overrides["job"] == {"start_transaction_id": 0, "level": 0}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            CLIConfig(levels=3)

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            CLIConfig(log_level="LOUD")
