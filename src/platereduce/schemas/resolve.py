"""Configuration resolution and merging logic.

This module provides the single entrypoint for configuration resolution:
resolve_config(). It merges ParamConfig and CLIConfig in the correct
precedence order and returns a validated InternalConfig.

Precedence (highest to lowest):
1. CLIConfig (command-line overrides)
2. ParamConfig (expert defaults)
"""

from typing import Union, Optional
from platereduce.schemas.param import ParamConfig
from platereduce.schemas.cli import CLIConfig
from platereduce.schemas.internal import InternalConfig


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Merge config dicts; later ones win, nested sections merge key by key.

    >>> deep_merge({"job": {"level": -1, "num_jobs": 1}}, {"job": {"level": 5}})
    {'job': {'level': 5, 'num_jobs': 1}}
    """
    result = base.copy()
    
    for override in overrides:
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = deep_merge(result[key], value)
            else:
                result[key] = value
    
    return result


def resolve_config(
    param_cfg: Union[dict, ParamConfig],
    cli_cfg: Optional[Union[dict, CLIConfig]] = None,
) -> InternalConfig:
    """Resolve final runtime configuration from param and CLI configs.
    
    This is the SINGLE ENTRYPOINT for configuration resolution. It validates
    and merges configs in the correct precedence order, then returns an
    immutable InternalConfig for runtime use.
    
    Parameters
    ----------
    param_cfg : dict or ParamConfig
        Expert configuration with complete defaults. Required.
    cli_cfg : dict or CLIConfig, optional
        Command-line overrides. If None or empty, no CLI overrides applied.
    
    Returns
    -------
    InternalConfig
        Fully validated, immutable runtime configuration
    
    Raises
    ------
    ValidationError
        If the merged config fails Pydantic validation (missing plate URL,
        job_id outside [0, num_jobs), reversed transaction range, ...)
    
    Examples
    --------
    >>> from platereduce.schemas import resolve_config, ParamConfig, CLIConfig
    >>> config = resolve_config(ParamConfig(), CLIConfig(url="earth.plate", level=3))
    >>> config.job.level
    3
    >>> config.job.output_transaction_id
    2000
    """
    if not isinstance(param_cfg, ParamConfig):
        param = ParamConfig.model_validate(param_cfg)
    else:
        param = param_cfg
    
    if cli_cfg is None or (isinstance(cli_cfg, dict) and not cli_cfg):
        cli = CLIConfig()
    elif not isinstance(cli_cfg, CLIConfig):
        cli = CLIConfig.model_validate(cli_cfg)
    else:
        cli = cli_cfg
    
    param_dict = param.model_dump()
    cli_overrides = cli.to_internal_overrides()
    
    # Deep merge: param < cli
    merged = deep_merge(param_dict, cli_overrides)
    
    # Validate and freeze as InternalConfig
    return InternalConfig.model_validate(merged)
