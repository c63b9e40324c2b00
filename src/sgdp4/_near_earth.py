"""Near-earth branch (SGP4) for orbits with periods under 225 minutes."""

from __future__ import annotations

from math import cos, sin

from sgdp4._composer import compose_state
from sgdp4._types import DerivedConstants, OrbitalElements
from sgdp4.constants import ECCENTRICITY_TOLERANCE, MIN_ECCENTRICITY
from sgdp4.errors import EccentricityOutOfBoundsError


def propagate_near_earth(
    elements: OrbitalElements,
    consts: DerivedConstants,
    tsince: float,
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Propagate a near-earth element set to ``tsince``.

    Applies secular gravity and drag to the mean elements, then composes
    position and velocity with the epoch inclination geometry. Orbits with
    a perigee below 220 km skip the higher order drag terms.

    Args:
        elements: Element set.
        consts: Derived constants from ``sgdp4._initializer.initialize``.
        tsince: Minutes since epoch.

    Returns:
        ``(position, velocity)`` in km and km/s (TEME).

    Raises:
        EccentricityOutOfBoundsError: If the drag-updated eccentricity is
            ``>= 1`` or ``< -0.001``.
        InvalidGeometryError: See ``sgdp4._composer.compose_state``.
        SubOrbitalDecayError: See ``sgdp4._composer.compose_state``.
    """
    t = tsince
    bstar = elements.bstar

    xmdf = elements.mean_anomaly + consts.xmdot * t
    omgadf = elements.argp + consts.omgdot * t
    xnoddf = elements.raan + consts.xnodot * t

    tsq = t * t
    xnode = xnoddf + consts.xnodcf * tsq
    tempa = 1.0 - consts.c1 * t
    tempe = bstar * consts.c4 * t
    templ = consts.t2cof * tsq

    omega = omgadf
    xmp = xmdf

    if not consts.simple_model:
        delomg = consts.omgcof * t
        delm = consts.xmcof * ((1.0 + consts.eta * cos(xmdf)) ** 3 - consts.delmo)
        temp = delomg + delm
        xmp += temp
        omega -= temp

        tcube = tsq * t
        tfour = t * tcube
        tempa = tempa - consts.d2 * tsq - consts.d3 * tcube - consts.d4 * tfour
        tempe += bstar * consts.c5 * (sin(xmp) - consts.sinmo)
        templ += consts.t3cof * tcube + tfour * (consts.t4cof + t * consts.t5cof)

    a = consts.aodp * tempa * tempa
    e = elements.eccentricity - tempe
    xl = xmp + omega + xnode + consts.xnodp * templ

    if e >= 1.0 or e < ECCENTRICITY_TOLERANCE:
        raise EccentricityOutOfBoundsError(e, t)
    # Negative values down to the tolerance are floored as well
    if e < MIN_ECCENTRICITY:
        e = MIN_ECCENTRICITY

    return compose_state(
        t, e, a, omega, xl, xnode, elements.inclination, consts.geometry, consts.gravity
    )
