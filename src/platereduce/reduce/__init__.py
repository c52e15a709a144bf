"""Reduction strategies.

- base: Strategy interface and name registry
- weighted_average: Alpha-weighted average ("WeightedAvg")
"""

from platereduce.reduce.base import (
    ReductionInput,
    ReductionStrategy,
    available_strategies,
    get_strategy,
    register_strategy,
)
from platereduce.reduce.weighted_average import WeightedAverage

__all__ = [
    "ReductionInput",
    "ReductionStrategy",
    "WeightedAverage",
    "available_strategies",
    "get_strategy",
    "register_strategy",
]
