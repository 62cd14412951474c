# wiresim/core/errors.py
"""Exceptions raised while setting up or running the wire simulation."""


class ConfigurationError(ValueError):
    """Missing, unknown or malformed configuration option."""


class GeometryError(ValueError):
    """Geometry cannot support the simulation (e.g. fewer than two planes)."""


class DegenerateResponseError(ValueError):
    """A response curve could not be normalized (zero area or zero norm)."""
