"""
Constants for the SGP4/SDP4 propagator.

Every literal used by the near-earth and deep-space branches lives here:
Earth gravity models, the empirical atmosphere reference altitudes, the
lunar and solar perturbation constants and the geopotential resonance
coefficients. Values follow the WGS 72 based formulation of Spacetrack
Report #3.
"""

from math import pi, sqrt
from typing import NamedTuple


class EarthGravity(NamedTuple):
    """Geopotential constants an element set is propagated with.

    Element sets are fitted with one particular set of constants (WGS 72 for
    the published catalogue); propagating with another one shifts results
    by meters to kilometers.

    Attributes:
        tumin: Minutes per canonical time unit, ``1 / xke``.
        mu: Earth gravitational parameter [km^3/s^2].
        radiusearthkm: Equatorial radius, the canonical length unit [km].
        xke: ``sqrt(mu)`` in earth radii^1.5 per minute.
        j2: Second zonal harmonic.
        j3: Third zonal harmonic.
        j4: Fourth zonal harmonic.
        j3oj2: ``j3 / j2``.
    """

    tumin: float
    mu: float
    radiusearthkm: float
    xke: float
    j2: float
    j3: float
    j4: float
    j3oj2: float

    @property
    def ck2(self) -> float:
        """Half the second zonal harmonic (``J2 / 2``)."""
        return 0.5 * self.j2

    @property
    def ck4(self) -> float:
        """Scaled fourth zonal harmonic (``-3/8 J4``)."""
        return -0.375 * self.j4

    @property
    def a3ovk2(self) -> float:
        """Third zonal harmonic over ``ck2`` (``-J3 / ck2``)."""
        return -self.j3 / self.ck2

    @property
    def qoms2t(self) -> float:
        """Atmosphere density parameter ``((q0 - s0) / Re)^4``."""
        return ((Q0 - S0) / self.radiusearthkm) ** 4

    @property
    def s(self) -> float:
        """Atmosphere reference radius ``1 + s0 / Re`` [earth radii]."""
        return 1.0 + S0 / self.radiusearthkm


# Atmosphere model reference altitudes [km]
Q0 = 120.0
"""Upper altitude of the empirical density profile [km]."""

S0 = 78.0
"""Default density reference altitude [km]."""

SIMPLE_MODEL_PERIGEE = 220.0
"""Perigee altitude [km] below which the truncated drag model is used."""

LOW_PERIGEE = 156.0
"""Perigee altitude [km] below which the density reference is recomputed."""

FLOOR_PERIGEE = 98.0
"""Perigee altitude [km] below which the density reference is fixed."""

FLOOR_S4 = 20.0
"""Density reference altitude [km] used for perigees under ``FLOOR_PERIGEE``."""

DEEP_SPACE_PERIOD = 225.0
"""Orbital period [min] at or above which the deep-space branch is used."""


def _gravity_model(mu, radius, j2, j3, j4, xke=None) -> EarthGravity:
    """Assemble an ``EarthGravity``; ``xke`` defaults to ``60 / sqrt(Re^3 / mu)``."""
    if xke is None:
        xke = 60.0 / sqrt(radius**3 / mu)
    return EarthGravity(
        tumin=1.0 / xke,
        mu=mu,
        radiusearthkm=radius,
        xke=xke,
        j2=j2,
        j3=j3,
        j4=j4,
        j3oj2=j3 / j2,
    )


# The legacy set rounds xke instead of deriving it from mu
WGS72OLD = _gravity_model(398600.79964, 6378.135, 1.082616e-3, -2.53881e-6, -1.65597e-6, xke=0.0743669161)
"""WGS 72 constants as used by the Spacetrack Report #3 code."""

WGS72 = _gravity_model(398600.8, 6378.135, 1.082616e-3, -2.53881e-6, -1.65597e-6)
"""WGS 72 constants, the default for published element sets."""

WGS84 = _gravity_model(398600.5, 6378.137, 1.08262998905e-3, -2.53215306e-6, -1.61098761e-6)
"""WGS 84 constants."""

GRAVITY_MODELS = {
    "wgs72old": WGS72OLD,
    "wgs72": WGS72,
    "wgs84": WGS84,
}
"""Mapping of gravity model names to ``EarthGravity`` instances."""

TWOPI = 2.0 * pi
"""Full revolution [rad]."""

TWOTHIRD = 2.0 / 3.0

MIN_PER_DAY = 1440.0
"""Minutes per day."""

DEG2RAD = pi / 180.0
"""Radians per degree."""

THDT = 4.37526908801129966e-3
"""Earth rotation rate in the SGP4 convention [rad/min]."""

# ---------------------------------------------------------------------------
# Lunar / solar perturbations
# ---------------------------------------------------------------------------


class PerturbingBody(NamedTuple):
    """Constant bundle for one third body of the deep-space model.

    Attributes:
        zn: Mean motion of the body [rad/min].
        c1: Perturbation coupling coefficient.
        ze: Orbit eccentricity of the body.
    """

    zn: float
    c1: float
    ze: float


SUN = PerturbingBody(zn=1.19459e-5, c1=2.9864797e-6, ze=0.01675)
"""Solar constant bundle."""

MOON = PerturbingBody(zn=1.5835218e-4, c1=4.7968065e-7, ze=0.05490)
"""Lunar constant bundle."""

# Fixed solar geometry: ecliptic obliquity and solar perigee
ZCOSIS = 0.91744867
ZSINIS = 0.39785416
ZSINGS = -0.98088458
ZCOSGS = 0.1945905

SHALLOW_INCLINATION = 5.2359877e-2
"""Inclination [rad] within which of 0 or pi the node rate term is dropped."""

LYDDANE_INCLINATION = 0.2
"""Perturbed inclination [rad] below which the Lyddane form is applied."""

# ---------------------------------------------------------------------------
# Resonance
# ---------------------------------------------------------------------------

SYNCHRONOUS_MIN_MOTION = 0.0034906585
"""Lower mean motion bound [rad/min] of the 24 hour resonance band."""

SYNCHRONOUS_MAX_MOTION = 0.0052359877
"""Upper mean motion bound [rad/min] of the 24 hour resonance band."""

HALF_DAY_MIN_MOTION = 8.26e-3
"""Lower mean motion bound [rad/min] of the 12 hour resonance band."""

HALF_DAY_MAX_MOTION = 9.24e-3
"""Upper mean motion bound [rad/min] of the 12 hour resonance band."""

HALF_DAY_MIN_ECCENTRICITY = 0.5
"""Minimum eccentricity for 12 hour resonance."""

Q22 = 1.7891679e-6
Q31 = 2.1460748e-6
Q33 = 2.2123015e-7
ROOT22 = 1.7891679e-6
ROOT32 = 3.7393792e-7
ROOT44 = 7.3636953e-9
ROOT52 = 1.1428639e-7
ROOT54 = 2.1765803e-9

G22 = 5.7686396
G32 = 0.95240898
G44 = 1.8014998
G52 = 1.0508330
G54 = 4.4108898
FASX2 = 0.13130908
FASX4 = 2.8843198
FASX6 = 0.37448087

STEP = 720.0
"""Resonance integrator step [min]."""

STEP2 = 259200.0
"""Half the squared integrator step [min^2]."""

# ---------------------------------------------------------------------------
# Numerical tolerances
# ---------------------------------------------------------------------------

MAX_ECCENTRICITY = 1.0 - 1.0e-3
"""Exclusive upper bound of the eccentricity accepted at configure time."""

MIN_ECCENTRICITY = 1.0e-6
"""Floor applied to propagated eccentricity."""

ECCENTRICITY_TOLERANCE = -0.001
"""Most negative propagated eccentricity that is floored instead of rejected."""

KEPLER_TOLERANCE = 1.0e-12
KEPLER_MAX_ITERATIONS = 10
