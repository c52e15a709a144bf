"""Alpha-weighted average of overlapping tile versions.

Every non-alpha channel is averaged with each tile's own alpha as the
weight. Accumulation happens in float32 whatever the channel type, so
integer tiles neither overflow nor lose precision while summing.

The output alpha is the *total* input weight, clipped to the channel
type's range. It is not a fraction: one opaque uint8 tile already
saturates the output at 255, and several translucent tiles add up until
they do. Re-reducing a result therefore changes its alpha.
"""

import logging

import numpy as np
import xarray as xr

from platereduce.plate.tiles import channel_cast, make_tile
from platereduce.reduce.base import ReductionInput, ReductionStrategy, register_strategy

logger = logging.getLogger(__name__)


@register_strategy("weightedavg")
class WeightedAverage(ReductionStrategy):
    """Alpha-weighted average; the plate reducer's default function."""

    def reduce(self, inputs: ReductionInput, pixel_type) -> xr.DataArray:
        first, header = inputs[0]
        height, width, num_channels = first.shape

        sum_weighted_data = np.zeros((height, width, num_channels - 1), dtype=np.float32)
        summed_weights = np.zeros((height, width), dtype=np.float32)

        for tile, _ in inputs:
            data = tile.values.astype(np.float32)
            alpha = data[..., -1]
            summed_weights += alpha
            sum_weighted_data += alpha[..., np.newaxis] * data[..., :-1]

        # Pixels no tile covered fall back to 0 rather than NaN
        weights = summed_weights[..., np.newaxis]
        normalized = np.zeros_like(sum_weighted_data)
        np.divide(sum_weighted_data, weights, out=normalized, where=weights > 0)

        alpha_out = np.clip(summed_weights, pixel_type.alpha_min, pixel_type.alpha_max)

        dtype = pixel_type.numpy_dtype
        output = np.empty((height, width, num_channels), dtype=dtype)
        output[..., :-1] = channel_cast(normalized, dtype)
        output[..., -1] = channel_cast(alpha_out, dtype)

        logger.debug("Weighted average of %d tiles at (%d, %d) level %d",
                     len(inputs), header.col, header.row, header.level)
        return make_tile(output, col=header.col, row=header.row, level=header.level)
