"""
sgdp4 is an SGP4/SDP4 analytic orbit propagator for two-line element sets.

It computes TEME position and velocity at any time offset from an element
epoch, with the near-earth (SGP4) drag model and the deep-space (SDP4)
lunar-solar and resonance model.
"""

from .config import set_dtype, get_dtype
from .epoch import Epoch

from .constants import (
    WGS72OLD,
    WGS72,
    WGS84,
    EarthGravity,
)

from .errors import (
    SGP4Error,
    ConfigurationError,
    TLEFormatError,
    PropagationError,
    NegativeMeanMotionError,
    EccentricityOutOfBoundsError,
    InvalidGeometryError,
    SubOrbitalDecayError,
)

from ._types import (
    OrbitalElements,
    DerivedConstants,
    DeepSpaceContext,
    IntegratorState,
    Resonance,
    State,
)

from ._tle import (
    compute_checksum,
    validate_tle_line,
    parse_tle,
)

from ._propagation import (
    SGP4Model,
    sgp4_init,
    sgp4_propagate,
)

from ._satellite import SGP4

__all__ = [
    # Config
    "set_dtype",
    "get_dtype",
    # Epoch
    "Epoch",
    # Gravity models
    "WGS72OLD",
    "WGS72",
    "WGS84",
    "EarthGravity",
    # Errors
    "SGP4Error",
    "ConfigurationError",
    "TLEFormatError",
    "PropagationError",
    "NegativeMeanMotionError",
    "EccentricityOutOfBoundsError",
    "InvalidGeometryError",
    "SubOrbitalDecayError",
    # Types
    "OrbitalElements",
    "DerivedConstants",
    "DeepSpaceContext",
    "IntegratorState",
    "Resonance",
    "State",
    # TLE parsing
    "compute_checksum",
    "validate_tle_line",
    "parse_tle",
    # Propagation
    "SGP4Model",
    "sgp4_init",
    "sgp4_propagate",
    "SGP4",
]
