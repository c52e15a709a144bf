"""Reduction stage contracts.

Enforces that every tile handed to a reduction strategy shares one
layout matching the plate's pixel type, and that the strategy returns a
tile with that same layout.
"""

from typing import TYPE_CHECKING, List, Tuple

import numpy as np
import xarray as xr

from platereduce.contracts.base import require
from platereduce.plate.tiles import TILE_DIMS

if TYPE_CHECKING:
    from platereduce.dispatch import PixelType
    from platereduce.plate.records import TileHeader


def assert_reduction_input(inputs: List[Tuple[xr.DataArray, "TileHeader"]],
                           pixel_type: "PixelType") -> None:
    """Enforce the reduction input contract.

    Called after gathering, before the strategy runs.

    Parameters
    ----------
    inputs : list of (DataArray, TileHeader)
        Gathered tiles for one coordinate.

    pixel_type : PixelType
        Layout declared by the plate.

    Raises
    ------
    ContractViolation
        If the input is empty or any tile deviates from the shared layout
    """
    require(
        len(inputs) > 0,
        "Reduction input contract violated: no tiles to reduce"
    )

    reference = inputs[0][0]
    for tile, header in inputs:
        where = f"t={header.transaction_id}"
        require(
            tile.dims == TILE_DIMS,
            f"Reduction input contract violated: tile {where} has dims {tile.dims}, expected {TILE_DIMS}"
        )
        require(
            tile.sizes["channel"] == pixel_type.num_channels,
            f"Reduction input contract violated: tile {where} has {tile.sizes['channel']} channels, "
            f"expected {pixel_type.num_channels}"
        )
        require(
            tile.dtype == pixel_type.numpy_dtype,
            f"Reduction input contract violated: tile {where} dtype is {tile.dtype}, "
            f"expected {pixel_type.numpy_dtype}"
        )
        require(
            tile.shape == reference.shape,
            f"Reduction input contract violated: tile {where} shape {tile.shape} "
            f"differs from {reference.shape}"
        )


def assert_reduction_output(output: xr.DataArray, reference: xr.DataArray,
                            pixel_type: "PixelType") -> None:
    """Enforce the reduction output contract.

    Called after the strategy runs, before the result is committed.

    Parameters
    ----------
    output : DataArray
        Tile returned by the strategy.

    reference : DataArray
        One of the input tiles.

    pixel_type : PixelType
        Layout declared by the plate.

    Raises
    ------
    ContractViolation
        If the output layout differs from the input or contains NaN
    """
    require(
        isinstance(output, xr.DataArray),
        f"Reduction output contract violated: output is {type(output)}, expected DataArray"
    )
    require(
        output.shape == reference.shape,
        f"Reduction output contract violated: shape {output.shape}, expected {reference.shape}"
    )
    require(
        output.dtype == pixel_type.numpy_dtype,
        f"Reduction output contract violated: dtype {output.dtype}, expected {pixel_type.numpy_dtype}"
    )
    if np.issubdtype(output.dtype, np.floating):
        require(
            not bool(np.isnan(output.values).any()),
            "Reduction output contract violated: output contains NaN"
        )
