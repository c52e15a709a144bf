"""Tile raster helpers.

A tile is an ``xarray.DataArray`` with dims ``("y", "x", "channel")``.
The last channel is always alpha.
"""

from typing import Optional

import numpy as np
import xarray as xr

TILE_DIMS = ("y", "x", "channel")


def make_tile(data: np.ndarray,
              col: Optional[int] = None,
              row: Optional[int] = None,
              level: Optional[int] = None,
              transaction_id: Optional[int] = None) -> xr.DataArray:
    """Wrap a ``(height, width, channels)`` array as a tile.

    Location attributes are attached only when given.
    """
    data = np.asarray(data)
    if data.ndim != 3:
        raise ValueError(f"Tile data must be 3-D (y, x, channel), got shape {data.shape}")

    attrs = {
        key: value
        for key, value in {
            "col": col,
            "row": row,
            "level": level,
            "transaction_id": transaction_id,
        }.items()
        if value is not None
    }
    return xr.DataArray(data, dims=TILE_DIMS, attrs=attrs)


def num_channels(tile: xr.DataArray) -> int:
    return tile.sizes["channel"]


def select_channel(tile: xr.DataArray, index: int) -> np.ndarray:
    """Return one channel plane as a 2-D numpy array."""
    return tile.isel(channel=index).values


def alpha_channel(tile: xr.DataArray) -> np.ndarray:
    return select_channel(tile, num_channels(tile) - 1)


def channel_cast(data: np.ndarray, dtype) -> np.ndarray:
    """Cast floating point planes to a channel type.

    Integer targets are rounded to nearest and saturated to the type's
    limits; floating targets are cast directly.
    """
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        return np.clip(np.rint(data), info.min, info.max).astype(dtype)
    return data.astype(dtype)
