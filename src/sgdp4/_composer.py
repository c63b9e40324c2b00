"""
Final stage of SGP4/SDP4: perturbed mean elements to position and velocity.

Applies the long-period terms, solves Kepler's equation, adds the
short-period corrections and builds the TEME position/velocity vectors.
Both propagation branches end here.
"""

from __future__ import annotations

from math import atan2, cos, fabs, fmod, sin, sqrt

from sgdp4._kepler import solve_kepler
from sgdp4._types import Geometry
from sgdp4.constants import TWOPI, EarthGravity
from sgdp4.errors import InvalidGeometryError, SubOrbitalDecayError

# Guard for the 1 / (1 + cos i) singularity of retrograde equatorial orbits
_XLCOF_GUARD = 1.5e-12


def inclination_geometry(inclination: float, gravity: EarthGravity) -> Geometry:
    """Inclination-dependent coefficients for the short-period terms.

    Args:
        inclination: Inclination [rad].
        gravity: Gravity model.

    Returns:
        The ``Geometry`` coefficients for ``inclination``.
    """
    cosio = cos(inclination)
    sinio = sin(inclination)
    theta2 = cosio * cosio
    a3ovk2 = gravity.a3ovk2

    if fabs(cosio + 1.0) > _XLCOF_GUARD:
        xlcof = 0.125 * a3ovk2 * sinio * (3.0 + 5.0 * cosio) / (1.0 + cosio)
    else:
        xlcof = 0.125 * a3ovk2 * sinio * (3.0 + 5.0 * cosio) / _XLCOF_GUARD

    return Geometry(
        cosio=cosio,
        sinio=sinio,
        x3thm1=3.0 * theta2 - 1.0,
        x1mth2=1.0 - theta2,
        x7thm1=7.0 * theta2 - 1.0,
        xlcof=xlcof,
        aycof=0.25 * a3ovk2 * sinio,
    )


def compose_state(
    tsince: float,
    e: float,
    a: float,
    omega: float,
    xl: float,
    xnode: float,
    xincl: float,
    geometry: Geometry,
    gravity: EarthGravity,
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Convert perturbed mean elements to a TEME position and velocity.

    Args:
        tsince: Minutes since epoch (for error reporting).
        e: Eccentricity.
        a: Semi-major axis [earth radii].
        omega: Argument of perigee [rad].
        xl: Mean longitude ``M + omega + node`` [rad].
        xnode: Right ascension of the ascending node [rad].
        xincl: Inclination [rad].
        geometry: Coefficients for ``xincl``.
        gravity: Gravity model.

    Returns:
        ``((x, y, z), (vx, vy, vz))`` in km and km/s.

    Raises:
        InvalidGeometryError: If the semi-latus rectum is negative.
        SubOrbitalDecayError: If the radius is below one Earth radius.
    """
    xke = gravity.xke
    ck2 = gravity.ck2

    beta = sqrt(1.0 - e * e)
    xn = xke / a**1.5

    # Long period periodics
    axn = e * cos(omega)
    temp = 1.0 / (a * beta * beta)
    xll = temp * geometry.xlcof * axn
    aynl = temp * geometry.aycof
    xlt = xl + xll
    ayn = e * sin(omega) + aynl
    elsq = axn * axn + ayn * ayn

    capu = fmod(xlt - xnode, TWOPI)
    sinepw, cosepw, ecose, esine = solve_kepler(capu, axn, ayn)

    # Short period preliminary quantities
    temp = 1.0 - elsq
    pl = a * temp
    if pl < 0.0:
        raise InvalidGeometryError(f"semi-latus rectum {pl!r} is negative", tsince)

    r = a * (1.0 - ecose)
    temp1 = 1.0 / r
    rdot = xke * sqrt(a) * esine * temp1
    rfdot = xke * sqrt(pl) * temp1
    temp2 = a * temp1
    betal = sqrt(temp)
    temp3 = 1.0 / (1.0 + betal)
    cosu = temp2 * (cosepw - axn + ayn * esine * temp3)
    sinu = temp2 * (sinepw - ayn - axn * esine * temp3)
    u = atan2(sinu, cosu)
    sin2u = 2.0 * sinu * cosu
    cos2u = 2.0 * cosu * cosu - 1.0
    temp = 1.0 / pl
    temp1 = ck2 * temp
    temp2 = temp1 * temp

    # Update for short periodics
    rk = r * (1.0 - 1.5 * temp2 * betal * geometry.x3thm1) + 0.5 * temp1 * geometry.x1mth2 * cos2u
    uk = u - 0.25 * temp2 * geometry.x7thm1 * sin2u
    xnodek = xnode + 1.5 * temp2 * geometry.cosio * sin2u
    xinck = xincl + 1.5 * temp2 * geometry.cosio * geometry.sinio * cos2u
    rdotk = rdot - xn * temp1 * geometry.x1mth2 * sin2u
    rfdotk = rfdot + xn * temp1 * (geometry.x1mth2 * cos2u + 1.5 * geometry.x3thm1)

    if rk < 1.0:
        raise SubOrbitalDecayError(rk, tsince)

    # Orientation vectors
    sinuk = sin(uk)
    cosuk = cos(uk)
    sinik = sin(xinck)
    cosik = cos(xinck)
    sinnok = sin(xnodek)
    cosnok = cos(xnodek)
    xmx = -sinnok * cosik
    xmy = cosnok * cosik
    ux = xmx * sinuk + cosnok * cosuk
    uy = xmy * sinuk + sinnok * cosuk
    uz = sinik * sinuk
    vx = xmx * cosuk - cosnok * sinuk
    vy = xmy * cosuk - sinnok * sinuk
    vz = sinik * cosuk

    radius = gravity.radiusearthkm
    vkmpersec = radius / 60.0
    position = (rk * ux * radius, rk * uy * radius, rk * uz * radius)
    velocity = (
        (rdotk * ux + rfdotk * vx) * vkmpersec,
        (rdotk * uy + rfdotk * vy) * vkmpersec,
        (rdotk * uz + rfdotk * vz) * vkmpersec,
    )
    return position, velocity
