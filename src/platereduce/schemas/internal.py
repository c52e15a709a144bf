"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict, field_validator, model_validator
from platereduce.schemas.base import PlateBaseModel


_FROZEN = ConfigDict(
    extra='forbid',
    validate_assignment=True,
    use_enum_values=True,
    str_strip_whitespace=True,
    frozen=True,  # Immutable after construction
)


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class JobConfig(PlateBaseModel):
    """Immutable description of one reduction job.
    
    Job indices and the transaction range are validated here, so a
    malformed job never reaches the store. ``level`` is only checked
    against the plate's level count once the plate is open.
    """
    job_id: int = Field(ge=0)
    num_jobs: int = Field(ge=1)
    level: int
    start_transaction_id: int
    end_transaction_id: Optional[int]
    output_transaction_id: int

    model_config = _FROZEN

    @model_validator(mode="after")
    def check_job_and_range(self):
        """job_id must address one of num_jobs shards; ranges must be ordered."""
        if self.job_id >= self.num_jobs:
            raise ValueError(
                f"job_id {self.job_id} is outside [0, {self.num_jobs}) for num_jobs={self.num_jobs}"
            )
        if (self.end_transaction_id is not None
                and self.end_transaction_id < self.start_transaction_id):
            raise ValueError(
                f"end transaction {self.end_transaction_id} precedes "
                f"start transaction {self.start_transaction_id}"
            )
        return self


class InternalReducerConfig(PlateBaseModel):
    """Runtime reduction strategy selection."""
    function: str

    model_config = _FROZEN

    @field_validator("function", mode="before")
    @classmethod
    def normalize_function_name(cls, v):
        """Strategy names are case-insensitive."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class InternalPartitionConfig(PlateBaseModel):
    """Runtime work-unit tiling."""
    block_size: int = Field(ge=1)

    model_config = _FROZEN


class InternalLoggingConfig(PlateBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    file: Optional[str]

    model_config = _FROZEN


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(PlateBaseModel):
    """Authoritative runtime configuration.
    
    Runtime modules receive InternalConfig and access fields directly:
    
        def __init__(self, config: InternalConfig):
            self.level = config.job.level  # NOT .get()
            self.block_size = config.partition.block_size
    
    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation
    
    All of that happens during config resolution, not in runtime code.
    """
    
    url: str = Field(min_length=1)
    job: JobConfig
    reducer: InternalReducerConfig
    partition: InternalPartitionConfig
    logging: InternalLoggingConfig
    
    model_config = _FROZEN
