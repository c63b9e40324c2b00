"""Exception types raised by sgdp4.

Validation problems with the inputs derive from ``ValueError`` as well as
``SGP4Error``. Propagation failures carry the offset (minutes since epoch)
of the call that failed; callers should treat them as "element set no longer
usable" and stop propagating it.
"""

from __future__ import annotations


class SGP4Error(Exception):
    """Base class for all sgdp4 errors."""


class ConfigurationError(SGP4Error, ValueError):
    """Element set rejected at configure time, or propagator not configured."""


class TLEFormatError(SGP4Error, ValueError):
    """Malformed two-line element text."""


class PropagationError(SGP4Error):
    """A propagation call could not produce a state.

    Args:
        message: Human readable description.
        tsince: Minutes since epoch of the failed call.
    """

    def __init__(self, message: str, tsince: float) -> None:
        super().__init__(f"{message} (tsince={tsince} min)")
        self.tsince = tsince


class NegativeMeanMotionError(PropagationError):
    """Mean motion dropped to zero or below after the deep-space secular update."""


class EccentricityOutOfBoundsError(PropagationError):
    """Propagated eccentricity left the range the model can handle."""

    def __init__(self, eccentricity: float, tsince: float) -> None:
        super().__init__(f"eccentricity {eccentricity!r} out of bounds", tsince)
        self.eccentricity = eccentricity


class InvalidGeometryError(PropagationError):
    """Semi-latus rectum became negative."""


class SubOrbitalDecayError(PropagationError):
    """Orbital radius fell below one Earth radius; the satellite has decayed."""

    def __init__(self, radius: float, tsince: float) -> None:
        super().__init__(f"satellite decayed, radius {radius!r} earth radii", tsince)
        self.radius = radius
