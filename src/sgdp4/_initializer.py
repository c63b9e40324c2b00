"""
One-time initialization of an SGP4/SDP4 element set.

Validates the elements, recovers the un-Kozai semi-major axis and mean
motion, classifies the orbit and derives the secular rates and drag-series
coefficients used on every propagation call. Deep-space quantities are
built separately by ``sgdp4._deep_space.deep_space_init``.
"""

from __future__ import annotations

import logging
from math import cos, pi, sin, sqrt

from sgdp4._composer import inclination_geometry
from sgdp4._types import DerivedConstants, OrbitalElements
from sgdp4.constants import (
    DEEP_SPACE_PERIOD,
    FLOOR_PERIGEE,
    FLOOR_S4,
    LOW_PERIGEE,
    MAX_ECCENTRICITY,
    Q0,
    S0,
    SIMPLE_MODEL_PERIGEE,
    TWOPI,
    TWOTHIRD,
    EarthGravity,
)
from sgdp4.errors import ConfigurationError

logger = logging.getLogger(__name__)


def validate_elements(elements: OrbitalElements) -> None:
    """Check that an element set can be initialized.

    Args:
        elements: Element set to check.

    Raises:
        ConfigurationError: If eccentricity is outside ``[0, 1 - 1e-3)``,
            inclination outside ``[0, pi]`` or mean motion not positive.
    """
    if not 0.0 <= elements.eccentricity < MAX_ECCENTRICITY:
        raise ConfigurationError(
            f"Eccentricity out of range: {elements.eccentricity!r} "
            f"(must be in [0, {MAX_ECCENTRICITY}))"
        )
    if not 0.0 <= elements.inclination <= pi:
        raise ConfigurationError(
            f"Inclination out of range: {elements.inclination!r} rad (must be in [0, pi])"
        )
    if elements.mean_motion <= 0.0:
        raise ConfigurationError(
            f"Mean motion must be positive, got {elements.mean_motion!r} rad/min"
        )


def recover_mean_motion(
    mean_motion: float,
    eccentricity: float,
    inclination: float,
    gravity: EarthGravity,
) -> tuple[float, float]:
    """Recover the un-Kozai mean motion and semi-major axis.

    A single closed-form J2 correction of the Kozai mean motion published in
    element sets.

    Args:
        mean_motion: Kozai mean motion [rad/min].
        eccentricity: Eccentricity.
        inclination: Inclination [rad].
        gravity: Gravity model.

    Returns:
        ``(xnodp, aodp)``: recovered mean motion [rad/min] and semi-major
        axis [earth radii].
    """
    a1 = (gravity.xke / mean_motion) ** TWOTHIRD
    cosio = cos(inclination)
    x3thm1 = 3.0 * cosio * cosio - 1.0
    betao2 = 1.0 - eccentricity * eccentricity
    betao = sqrt(betao2)
    temp = 1.5 * gravity.ck2 * x3thm1 / (betao * betao2)
    del1 = temp / (a1 * a1)
    a0 = a1 * (1.0 - del1 * (1.0 / 3.0 + del1 * (1.0 + del1 * 134.0 / 81.0)))
    del0 = temp / (a0 * a0)

    xnodp = mean_motion / (1.0 + del0)
    aodp = a0 / (1.0 - del0)
    return xnodp, aodp


def uses_simple_model(perigee: float) -> bool:
    """Whether a near-earth orbit with this perigee altitude [km] uses the truncated drag model."""
    return perigee < SIMPLE_MODEL_PERIGEE


def atmosphere_reference(perigee: float, gravity: EarthGravity) -> tuple[float, float]:
    """Atmosphere density reference for a perigee altitude.

    Perigees below 156 km move the reference altitude down to
    ``perigee - 78`` km, with a fixed 20 km below 98 km.

    Args:
        perigee: Perigee altitude [km].
        gravity: Gravity model.

    Returns:
        ``(s4, qoms24)``: reference radius [earth radii] and the matching
        density parameter.
    """
    if perigee >= LOW_PERIGEE:
        return gravity.s, gravity.qoms2t

    s4 = perigee - S0
    if perigee < FLOOR_PERIGEE:
        s4 = FLOOR_S4
    qoms24 = ((Q0 - s4) / gravity.radiusearthkm) ** 4
    return s4 / gravity.radiusearthkm + 1.0, qoms24


def initialize(elements: OrbitalElements, gravity: EarthGravity) -> DerivedConstants:
    """Derive the per-element-set constants of SGP4/SDP4.

    Args:
        elements: Validated element set.
        gravity: Gravity model.

    Returns:
        The derived constants. For deep-space orbits the near-earth-only
        drag coefficients are left at zero.
    """
    ck2 = gravity.ck2
    ck4 = gravity.ck4

    ecc = elements.eccentricity
    bstar = elements.bstar
    xnodp, aodp = recover_mean_motion(elements.mean_motion, ecc, elements.inclination, gravity)

    perigee = (aodp * (1.0 - ecc) - 1.0) * gravity.radiusearthkm
    period = TWOPI / xnodp

    deep_space = period >= DEEP_SPACE_PERIOD
    simple_model = not deep_space and uses_simple_model(perigee)
    s4, qoms24 = atmosphere_reference(perigee, gravity)

    geometry = inclination_geometry(elements.inclination, gravity)
    cosio = geometry.cosio
    theta2 = cosio * cosio
    x3thm1 = geometry.x3thm1
    eosq = ecc * ecc
    betao2 = 1.0 - eosq
    betao = sqrt(betao2)

    pinvsq = 1.0 / (aodp * aodp * betao2 * betao2)
    tsi = 1.0 / (aodp - s4)
    eta = aodp * ecc * tsi
    etasq = eta * eta
    eeta = ecc * eta
    psisq = abs(1.0 - etasq)
    coef = qoms24 * tsi**4
    coef1 = coef / psisq**3.5
    c2 = coef1 * xnodp * (
        aodp * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
        + 0.75 * ck2 * tsi / psisq * x3thm1 * (8.0 + 3.0 * etasq * (8.0 + etasq))
    )
    c1 = bstar * c2
    c4 = 2.0 * xnodp * coef1 * aodp * betao2 * (
        eta * (2.0 + 0.5 * etasq)
        + ecc * (0.5 + 2.0 * etasq)
        - 2.0 * ck2 * tsi / (aodp * psisq) * (
            -3.0 * x3thm1 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
            + 0.75 * geometry.x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq))
            * cos(2.0 * elements.argp)
        )
    )

    # Secular rates from J2 and J4
    theta4 = theta2 * theta2
    temp1 = 3.0 * ck2 * pinvsq * xnodp
    temp2 = temp1 * ck2 * pinvsq
    temp3 = 1.25 * ck4 * pinvsq * pinvsq * xnodp
    xmdot = (
        xnodp
        + 0.5 * temp1 * betao * x3thm1
        + 0.0625 * temp2 * betao * (13.0 - 78.0 * theta2 + 137.0 * theta4)
    )
    x1m5th = 1.0 - 5.0 * theta2
    omgdot = (
        -0.5 * temp1 * x1m5th
        + 0.0625 * temp2 * (7.0 - 114.0 * theta2 + 395.0 * theta4)
        + temp3 * (3.0 - 36.0 * theta2 + 49.0 * theta4)
    )
    xhdot1 = -temp1 * cosio
    xnodot = xhdot1 + (0.5 * temp2 * (4.0 - 19.0 * theta2) + 2.0 * temp3 * (3.0 - 7.0 * theta2)) * cosio

    common = dict(
        gravity=gravity,
        aodp=aodp,
        xnodp=xnodp,
        perigee=perigee,
        period=period,
        deep_space=deep_space,
        simple_model=simple_model,
        s4=s4,
        qoms24=qoms24,
        geometry=geometry,
        eta=eta,
        xmdot=xmdot,
        omgdot=omgdot,
        xnodot=xnodot,
        xnodcf=3.5 * betao2 * xhdot1 * c1,
        c1=c1,
        c4=c4,
        t2cof=1.5 * c1,
    )

    if deep_space:
        logger.debug(
            "Satellite %s: deep-space orbit, period %.3f min, perigee %.3f km",
            elements.satnum, period, perigee,
        )
        return DerivedConstants(**common)

    # Near-earth drag series
    c3 = 0.0
    xmcof = 0.0
    if ecc > 1.0e-4:
        c3 = coef * tsi * gravity.a3ovk2 * xnodp * geometry.sinio / ecc
        xmcof = -TWOTHIRD * coef * bstar / eeta

    near = dict(
        c5=2.0 * coef1 * aodp * betao2 * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq),
        omgcof=bstar * c3 * cos(elements.argp),
        xmcof=xmcof,
        delmo=(1.0 + eta * cos(elements.mean_anomaly)) ** 3,
        sinmo=sin(elements.mean_anomaly),
    )

    if not simple_model:
        c1sq = c1 * c1
        d2 = 4.0 * aodp * tsi * c1sq
        temp = d2 * tsi * c1 / 3.0
        d3 = (17.0 * aodp + s4) * temp
        d4 = 0.5 * temp * aodp * tsi * (221.0 * aodp + 31.0 * s4) * c1
        near.update(
            d2=d2,
            d3=d3,
            d4=d4,
            t3cof=d2 + 2.0 * c1sq,
            t4cof=0.25 * (3.0 * d3 + c1 * (12.0 * d2 + 10.0 * c1sq)),
            t5cof=0.2 * (3.0 * d4 + 12.0 * c1 * d3 + 6.0 * d2 * d2 + 15.0 * c1sq * (2.0 * d2 + c1sq)),
        )

    logger.debug(
        "Satellite %s: near-earth orbit (%s model), period %.3f min, perigee %.3f km",
        elements.satnum, "simple" if simple_model else "full", period, perigee,
    )
    return DerivedConstants(**common, **near)
