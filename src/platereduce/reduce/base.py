"""Reduction strategy interface and registry.

A strategy combines every gathered version of one tile into a single
output tile. Strategies register under a name and are looked up
case-insensitively at startup::

    @register_strategy("weightedavg")
    class WeightedAverage(ReductionStrategy):
        def reduce(self, inputs, pixel_type):
            ...

    strategy = get_strategy("WeightedAvg")
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Dict, List, Tuple, Type

import xarray as xr

from platereduce.errors import ConfigurationError
from platereduce.plate.records import TileHeader

if TYPE_CHECKING:
    from platereduce.dispatch import PixelType

# Ordered (tile, header) pairs sharing one coordinate
ReductionInput = List[Tuple[xr.DataArray, TileHeader]]

_STRATEGIES: Dict[str, Type["ReductionStrategy"]] = {}


class ReductionStrategy(ABC):
    """Combines same-location tile versions into one tile."""

    name: str = ""

    @abstractmethod
    def reduce(self, inputs: ReductionInput, pixel_type: "PixelType") -> xr.DataArray:
        """Reduce a non-empty input to one tile.

        Parameters
        ----------
        inputs : ReductionInput
            At least one (tile, header) pair; all tiles share one shape,
            channel count and dtype.
        pixel_type : PixelType
            Plate layout; gives the output dtype and alpha range.

        Returns
        -------
        xr.DataArray
            Output tile with the inputs' shape and dtype.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def register_strategy(name: str) -> Callable[[Type[ReductionStrategy]], Type[ReductionStrategy]]:
    """Class decorator registering a strategy under ``name``."""
    key = name.lower().strip()

    def decorator(cls: Type[ReductionStrategy]) -> Type[ReductionStrategy]:
        if key in _STRATEGIES and _STRATEGIES[key] is not cls:
            raise ValueError(f"Reduction strategy {key!r} is already registered")
        cls.name = key
        _STRATEGIES[key] = cls
        return cls

    return decorator


def available_strategies() -> List[str]:
    return sorted(_STRATEGIES)


def get_strategy(name: str) -> ReductionStrategy:
    """Instantiate the strategy registered under ``name``.

    Raises
    ------
    ConfigurationError
        If no strategy has that name.
    """
    key = name.lower().strip()
    try:
        cls = _STRATEGIES[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown function, {name}. Available: {', '.join(available_strategies())}"
        ) from None
    return cls()
