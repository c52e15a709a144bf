"""Pydantic configuration schemas for platereduce.

This module provides strictly typed configuration models for a reduction
run. All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
JobConfig : class
    Immutable job indices and transaction range
ParamConfig : class
    Expert defaults (complete)
CLIConfig : class
    Command-line overrides
"""

from platereduce.schemas.resolve import resolve_config
from platereduce.schemas.internal import InternalConfig, JobConfig
from platereduce.schemas.param import ParamConfig
from platereduce.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'JobConfig',
    'ParamConfig',
    'CLIConfig',
]
