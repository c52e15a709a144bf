"""CLIConfig: Command-line overrides.

Mirrors the ``platereduce`` command-line flags. Every field is optional;
``None`` means "not given on the command line" and leaves the expert
default in place.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import Field
from platereduce.schemas.base import PlateBaseModel


class CLIConfig(PlateBaseModel):
    """Command-line configuration overrides.
    
    Highest priority in config resolution.
    
    Usage
    -----
        cli_cfg = CLIConfig(
            url="/data/earth.plate",
            level=5,
            job_id=2,
            num_jobs=8,
        )
        
        internal = resolve_config(param_cfg, cli_cfg)
    """
    
    url: Optional[str] = None
    job_id: Optional[int] = None
    num_jobs: Optional[int] = None
    level: Optional[int] = None
    start_t: Optional[int] = None
    end_t: Optional[int] = None
    function: Optional[str] = None
    transaction_id: Optional[int] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    log_file: Optional[str] = Field(None, description="Also write log records to this file")
    
    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.
        
        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}
        
        if self.url is not None:
            overrides["url"] = self.url
        
        job_overrides = {}
        if self.job_id is not None:
            job_overrides["job_id"] = self.job_id
        if self.num_jobs is not None:
            job_overrides["num_jobs"] = self.num_jobs
        if self.level is not None:
            job_overrides["level"] = self.level
        if self.start_t is not None:
            job_overrides["start_transaction_id"] = self.start_t
        if self.end_t is not None:
            job_overrides["end_transaction_id"] = self.end_t
        if self.transaction_id is not None:
            job_overrides["output_transaction_id"] = self.transaction_id
        
        if job_overrides:
            overrides["job"] = job_overrides
        
        if self.function is not None:
            overrides["reducer"] = {"function": self.function}
        
        logging_overrides = {}
        if self.log_level is not None:
            logging_overrides["level"] = self.log_level
        if self.log_file is not None:
            logging_overrides["file"] = self.log_file
        if logging_overrides:
            overrides["logging"] = logging_overrides
        
        return overrides
