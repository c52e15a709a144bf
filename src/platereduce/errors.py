"""Exception hierarchy for ``platereduce``.

Distinguishes between:
1. Configuration errors (bad input, caught before any tile is processed)
2. Store errors (the plate could not be opened, read or written)

Contract violations (pipeline bugs) live in :mod:`platereduce.contracts`.
"""


class PlateReduceError(Exception):
    """Base class for all expected ``platereduce`` failures."""
    pass


class ConfigurationError(PlateReduceError, ValueError):
    """Invalid run configuration.

    Raised for invalid levels, malformed job indices, unknown reduction
    functions and unsupported pixel types. Always fatal and always raised
    before the first coordinate is processed.
    """
    pass


class UnsupportedPixelTypeError(ConfigurationError):
    """The plate's pixel format / channel type combination has no handler."""
    pass


class UsageError(ConfigurationError):
    """Command-line arguments could not be parsed."""
    pass
