"""Plate store failures.

Absence is not an error at the query boundary: ``search_by_location``
returns an empty list. These exceptions cover a plate that cannot be
opened, a version that exists but cannot be loaded, and failed writes.
"""

from platereduce.errors import PlateReduceError


class PlateStoreError(PlateReduceError):
    """Base class for plate store failures."""
    pass


class PlateNotFoundError(PlateStoreError):
    """The plate URL does not point to an existing plate."""
    pass


class TileNotFoundError(PlateStoreError):
    """``read`` was asked for a tile version the plate does not hold."""
    pass


class TileReadError(PlateStoreError):
    """A tile version exists but its pixel data could not be loaded."""
    pass


class TileWriteError(PlateStoreError):
    """A write transaction could not be started, updated or completed."""
    pass
