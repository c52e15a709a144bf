"""Small tile builders for tests."""

import numpy as np

from platereduce.plate.tiles import make_tile


def uniform_tile(values, alpha, dtype=np.uint8, size=4, **attrs):
    """Tile whose pixels all hold ``values`` followed by ``alpha``."""
    pixel = list(values) + [alpha]
    data = np.empty((size, size, len(pixel)), dtype=dtype)
    data[...] = np.asarray(pixel, dtype=dtype)
    return make_tile(data, **attrs)
