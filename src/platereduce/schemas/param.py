"""ParamConfig: Expert defaults for platereduce.

This module defines the complete default configuration. ALL run parameters
must have defaults here. No runtime code should define fallback values -
this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from platereduce.schemas.base import PlateBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class JobParamConfig(PlateBaseModel):
    """Job sharding and transaction range defaults."""
    job_id: int = Field(0, description="Index of this job in [0, num_jobs)")
    num_jobs: int = Field(1, description="Total number of independent jobs")
    level: int = Field(-1, description="Plate level to reduce; -1 means unset")
    start_transaction_id: int = Field(0, description="First input transaction id (inclusive)")
    end_transaction_id: Optional[int] = Field(None, description="Last input transaction id; None is open-ended")
    output_transaction_id: int = Field(2000, description="Transaction id results are written to")


class ReducerConfig(PlateBaseModel):
    """Reduction strategy selection."""
    function: str = "weightedavg"

    @field_validator("function", mode="before")
    @classmethod
    def normalize_function_name(cls, v):
        """Normalize function names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class PartitionConfig(PlateBaseModel):
    """Work-unit tiling of the level grid."""
    block_size: int = Field(4, ge=1, description="Work-unit edge length in tiles")


class LoggingConfig(PlateBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file: Optional[str] = None


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(PlateBaseModel):
    """Complete expert configuration with all defaults.
    
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:
    
        internal_cfg = resolve_config(param_cfg, cli_cfg)
    
    Runtime code only sees InternalConfig.
    """
    
    url: Optional[str] = None
    job: JobParamConfig = Field(default_factory=JobParamConfig)
    reducer: ReducerConfig = Field(default_factory=ReducerConfig)
    partition: PartitionConfig = Field(default_factory=PartitionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
