"""Pixel type dispatch.

Maps a plate's declared (pixel format, channel type) pair to the
:class:`PixelType` that drives the typed reduction path: channel count,
numpy dtype and the legal alpha range used to clamp accumulated weight.

Supported combinations::

    graya  x  uint8, int16, float32
    rgba   x  uint8

Anything else is rejected before any tile is read.
"""

import logging
from typing import Dict, List, Tuple

import numpy as np

from platereduce.errors import UnsupportedPixelTypeError
from platereduce.plate.records import (
    PIXEL_FORMAT_CHANNELS,
    ChannelType,
    PixelFormat,
    RecordModel,
)

__all__ = ['PixelType', 'resolve_pixel_type', 'supported_pixel_types']

logger = logging.getLogger(__name__)


class PixelType(RecordModel):
    """Typed layout of every tile in a plate."""
    pixel_format: PixelFormat
    channel_type: ChannelType
    num_channels: int
    alpha_min: float
    alpha_max: float

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(self.channel_type.value)

    def __str__(self) -> str:
        return f"{self.pixel_format.value}/{self.channel_type.value}"


# Legal channel range per type; float channels are normalized to [0, 1]
_CHANNEL_RANGES = {
    ChannelType.UINT8: (0.0, float(np.iinfo(np.uint8).max)),
    ChannelType.INT16: (0.0, float(np.iinfo(np.int16).max)),
    ChannelType.FLOAT32: (0.0, 1.0),
}


def _pixel_type(pixel_format: PixelFormat, channel_type: ChannelType) -> PixelType:
    alpha_min, alpha_max = _CHANNEL_RANGES[channel_type]
    return PixelType(
        pixel_format=pixel_format,
        channel_type=channel_type,
        num_channels=PIXEL_FORMAT_CHANNELS[pixel_format],
        alpha_min=alpha_min,
        alpha_max=alpha_max,
    )


PIXEL_TYPES: Dict[Tuple[PixelFormat, ChannelType], PixelType] = {
    (fmt, ch): _pixel_type(fmt, ch)
    for fmt, ch in [
        (PixelFormat.GRAYA, ChannelType.UINT8),
        (PixelFormat.GRAYA, ChannelType.INT16),
        (PixelFormat.GRAYA, ChannelType.FLOAT32),
        (PixelFormat.RGBA, ChannelType.UINT8),
    ]
}


def supported_pixel_types() -> List[str]:
    return [str(pixel_type) for pixel_type in PIXEL_TYPES.values()]


def resolve_pixel_type(pixel_format, channel_type) -> PixelType:
    """Select the typed reduction path for a plate's pixel layout.

    Parameters
    ----------
    pixel_format : PixelFormat or str
        Format tag declared by the plate.
    channel_type : ChannelType or str
        Channel type tag declared by the plate.

    Returns
    -------
    PixelType
        The matching handler.

    Raises
    ------
    UnsupportedPixelTypeError
        If either tag is unknown or the combination has no handler.
    """
    try:
        fmt = PixelFormat(pixel_format)
    except ValueError:
        raise UnsupportedPixelTypeError(
            f"Plate contains a pixel type that is unsupported: {pixel_format!r}"
        ) from None
    try:
        ch = ChannelType(channel_type)
    except ValueError:
        raise UnsupportedPixelTypeError(
            f"Plate contains unsupported channel type: {channel_type!r}"
        ) from None

    pixel_type = PIXEL_TYPES.get((fmt, ch))
    if pixel_type is None:
        raise UnsupportedPixelTypeError(
            f"Plate pixel type {fmt.value}/{ch.value} is unsupported. "
            f"Supported: {', '.join(supported_pixel_types())}"
        )

    logger.debug("Resolved pixel type %s (%d channels, alpha range [%g, %g])",
                 pixel_type, pixel_type.num_channels, pixel_type.alpha_min, pixel_type.alpha_max)
    return pixel_type
