"""
Geopotential resonance terms of the deep-space model.

Orbits whose period is close to one day (synchronous) or half a day with
high eccentricity (Molniya type) resonate with the Earth's tesseral
harmonics. Their mean motion and mean longitude are integrated numerically
from epoch with a fixed 720 minute step. This module holds the
classification, the coefficient tables, the rate terms and the integrator.

The integrator state is an immutable ``IntegratorState``; ``advance``
returns a new checkpoint rather than mutating anything, so a caller may
keep checkpoints per thread or discard them freely.
"""

from __future__ import annotations

import logging
from math import cos, fabs, inf, sin
from typing import TYPE_CHECKING, NamedTuple

from sgdp4._types import GeopotentialTerms, IntegratorState, Resonance, SynchronousTerms
from sgdp4.constants import (
    FASX2,
    FASX4,
    FASX6,
    G22,
    G32,
    G44,
    G52,
    G54,
    HALF_DAY_MAX_MOTION,
    HALF_DAY_MIN_ECCENTRICITY,
    HALF_DAY_MIN_MOTION,
    Q22,
    Q31,
    Q33,
    ROOT22,
    ROOT32,
    ROOT44,
    ROOT52,
    ROOT54,
    STEP,
    STEP2,
    SYNCHRONOUS_MAX_MOTION,
    SYNCHRONOUS_MIN_MOTION,
    THDT,
)

if TYPE_CHECKING:
    from sgdp4._types import DeepSpaceContext

logger = logging.getLogger(__name__)


def classify_resonance(xnodp: float, eccentricity: float) -> Resonance:
    """Classify a deep-space orbit by recovered mean motion and eccentricity.

    Args:
        xnodp: Recovered mean motion [rad/min].
        eccentricity: Eccentricity.

    Returns:
        ``SYNCHRONOUS`` for mean motions in
        ``[0.0034906585, 0.0052359877]``, ``HALF_DAY`` for mean motions in
        ``[0.00826, 0.00924]`` with eccentricity of at least 0.5, ``NONE``
        otherwise.
    """
    if SYNCHRONOUS_MIN_MOTION <= xnodp <= SYNCHRONOUS_MAX_MOTION:
        return Resonance.SYNCHRONOUS
    if (
        xnodp < HALF_DAY_MIN_MOTION
        or xnodp > HALF_DAY_MAX_MOTION
        or eccentricity < HALF_DAY_MIN_ECCENTRICITY
    ):
        return Resonance.NONE
    return Resonance.HALF_DAY


# ---------------------------------------------------------------------------
# Eccentricity-banded polynomials of the 12 hour resonance
# ---------------------------------------------------------------------------


class EccentricityBand(NamedTuple):
    """One eccentricity range of a resonance polynomial.

    Attributes:
        upper: Upper eccentricity bound of the band.
        closed: Whether ``upper`` itself belongs to the band.
        coefficients: ``(c0, c1, c2, c3)`` of ``c0 + c1 e + c2 e^2 + c3 e^3``.
    """

    upper: float
    closed: bool
    coefficients: tuple[float, float, float, float]


# Bands are ordered by eccentricity; the last one of each entry is open-ended.
G_TABLES: dict[str, tuple[EccentricityBand, ...]] = {
    "g201": (
        EccentricityBand(inf, True, (-0.306 + 0.64 * 0.440, -0.440, 0.0, 0.0)),
    ),
    "g211": (
        EccentricityBand(0.65, True, (3.616, -13.247, 16.290, 0.0)),
        EccentricityBand(inf, True, (-72.099, 331.819, -508.738, 266.724)),
    ),
    "g310": (
        EccentricityBand(0.65, True, (-19.302, 117.390, -228.419, 156.591)),
        EccentricityBand(inf, True, (-346.844, 1582.851, -2415.925, 1246.113)),
    ),
    "g322": (
        EccentricityBand(0.65, True, (-18.9068, 109.7927, -214.6334, 146.5816)),
        EccentricityBand(inf, True, (-342.585, 1554.908, -2366.899, 1215.972)),
    ),
    "g410": (
        EccentricityBand(0.65, True, (-41.122, 242.694, -471.094, 313.953)),
        EccentricityBand(inf, True, (-1052.797, 4758.686, -7193.992, 3651.957)),
    ),
    "g422": (
        EccentricityBand(0.65, True, (-146.407, 841.880, -1629.014, 1083.435)),
        EccentricityBand(inf, True, (-3581.69, 16178.11, -24462.77, 12422.52)),
    ),
    "g520": (
        EccentricityBand(0.65, True, (-532.114, 3017.977, -5740.032, 3708.276)),
        EccentricityBand(0.715, True, (1464.74, -4664.75, 3763.64, 0.0)),
        EccentricityBand(inf, True, (-5149.66, 29936.92, -54087.36, 31324.56)),
    ),
    "g533": (
        EccentricityBand(0.7, False, (-919.2277, 4988.61, -9064.77, 5542.21)),
        EccentricityBand(inf, True, (-37995.78, 161616.52, -229838.2, 109377.94)),
    ),
    "g521": (
        EccentricityBand(0.7, False, (-822.71072, 4568.6173, -8491.4146, 5337.524)),
        EccentricityBand(inf, True, (-51752.104, 218913.95, -309468.16, 146349.42)),
    ),
    "g532": (
        EccentricityBand(0.7, False, (-853.666, 4690.25, -8624.77, 5341.4)),
        EccentricityBand(inf, True, (-40023.88, 170470.89, -242699.48, 115605.82)),
    ),
}
"""Resonance polynomials by name, as ordered eccentricity bands."""


def band_index(name: str, eccentricity: float) -> int:
    """Index of the band of polynomial ``name`` that covers ``eccentricity``.

    Raises:
        KeyError: If ``name`` is not a known polynomial.
    """
    bands = G_TABLES[name]
    for index, band in enumerate(bands):
        if eccentricity < band.upper or (band.closed and eccentricity == band.upper):
            return index
    return len(bands) - 1


def geopotential_coefficients(eccentricity: float) -> dict[str, float]:
    """Evaluate every 12 hour resonance polynomial at ``eccentricity``.

    Returns:
        Mapping from polynomial name (``"g201"`` ... ``"g532"``) to value.
    """
    eosq = eccentricity * eccentricity
    eoc = eccentricity * eosq
    values = {}
    for name, bands in G_TABLES.items():
        c0, c1, c2, c3 = bands[band_index(name, eccentricity)].coefficients
        values[name] = c0 + c1 * eccentricity + c2 * eosq + c3 * eoc
    return values


# ---------------------------------------------------------------------------
# Resonance coefficients
# ---------------------------------------------------------------------------


def synchronous_terms(
    xnodp: float, aodp: float, eccentricity: float, cosio: float, sinio: float
) -> SynchronousTerms:
    """Coefficients of the 24 hour resonance."""
    eosq = eccentricity * eccentricity
    aqnv = 1.0 / aodp

    g200 = 1.0 + eosq * (-2.5 + 0.8125 * eosq)
    g310 = 1.0 + 2.0 * eosq
    g300 = 1.0 + eosq * (-6.0 + 6.60937 * eosq)
    f220 = 0.75 * (1.0 + cosio) * (1.0 + cosio)
    f311 = 0.9375 * sinio * sinio * (1.0 + 3.0 * cosio) - 0.75 * (1.0 + cosio)
    f330 = 1.0 + cosio
    f330 = 1.875 * f330 * f330 * f330

    del1 = 3.0 * xnodp * xnodp * aqnv * aqnv
    del2 = 2.0 * del1 * f220 * g200 * Q22
    del3 = 3.0 * del1 * f330 * g300 * Q33 * aqnv
    del1 = del1 * f311 * g310 * Q31 * aqnv
    return SynchronousTerms(del1=del1, del2=del2, del3=del3)


def geopotential_terms(
    xnodp: float, aodp: float, eccentricity: float, cosio: float, sinio: float
) -> GeopotentialTerms:
    """Coefficients of the 12 hour resonance."""
    g = geopotential_coefficients(eccentricity)
    aqnv = 1.0 / aodp
    theta2 = cosio * cosio

    sini2 = sinio * sinio
    f220 = 0.75 * (1.0 + 2.0 * cosio + theta2)
    f221 = 1.5 * sini2
    f321 = 1.875 * sinio * (1.0 - 2.0 * cosio - 3.0 * theta2)
    f322 = -1.875 * sinio * (1.0 + 2.0 * cosio - 3.0 * theta2)
    f441 = 35.0 * sini2 * f220
    f442 = 39.3750 * sini2 * sini2
    f522 = 9.84375 * sinio * (
        sini2 * (1.0 - 2.0 * cosio - 5.0 * theta2)
        + 0.33333333 * (-2.0 + 4.0 * cosio + 6.0 * theta2)
    )
    f523 = sinio * (
        4.92187512 * sini2 * (-2.0 - 4.0 * cosio + 10.0 * theta2)
        + 6.56250012 * (1.0 + 2.0 * cosio - 3.0 * theta2)
    )
    f542 = 29.53125 * sinio * (2.0 - 8.0 * cosio + theta2 * (-12.0 + 8.0 * cosio + 10.0 * theta2))
    f543 = 29.53125 * sinio * (-2.0 - 8.0 * cosio + theta2 * (12.0 + 8.0 * cosio - 10.0 * theta2))

    temp1 = 3.0 * xnodp * xnodp * aqnv * aqnv
    temp = temp1 * ROOT22
    d2201 = temp * f220 * g["g201"]
    d2211 = temp * f221 * g["g211"]
    temp1 = temp1 * aqnv
    temp = temp1 * ROOT32
    d3210 = temp * f321 * g["g310"]
    d3222 = temp * f322 * g["g322"]
    temp1 = temp1 * aqnv
    temp = 2.0 * temp1 * ROOT44
    d4410 = temp * f441 * g["g410"]
    d4422 = temp * f442 * g["g422"]
    temp1 = temp1 * aqnv
    temp = temp1 * ROOT52
    d5220 = temp * f522 * g["g520"]
    d5232 = temp * f523 * g["g532"]
    temp = 2.0 * temp1 * ROOT54
    d5421 = temp * f542 * g["g521"]
    d5433 = temp * f543 * g["g533"]

    return GeopotentialTerms(
        d2201=d2201,
        d2211=d2211,
        d3210=d3210,
        d3222=d3222,
        d4410=d4410,
        d4422=d4422,
        d5220=d5220,
        d5232=d5232,
        d5421=d5421,
        d5433=d5433,
    )


# ---------------------------------------------------------------------------
# Integrator
# ---------------------------------------------------------------------------


def _rate_terms(ctx: DeepSpaceContext, atime: float, xni: float, xli: float) -> tuple[float, float, float]:
    """Mean motion and mean longitude rates at an integrator checkpoint."""
    if ctx.synchronous is not None:
        del1, del2, del3 = ctx.synchronous
        xndot = (
            del1 * sin(xli - FASX2)
            + del2 * sin(2.0 * (xli - FASX4))
            + del3 * sin(3.0 * (xli - FASX6))
        )
        xnddt = (
            del1 * cos(xli - FASX2)
            + 2.0 * del2 * cos(2.0 * (xli - FASX4))
            + 3.0 * del3 * cos(3.0 * (xli - FASX6))
        )
    else:
        d = ctx.geopotential
        xomi = ctx.argpo + ctx.omgdot * atime
        x2omi = xomi + xomi
        x2li = xli + xli
        xndot = (
            d.d2201 * sin(x2omi + xli - G22)
            + d.d2211 * sin(xli - G22)
            + d.d3210 * sin(xomi + xli - G32)
            + d.d3222 * sin(-xomi + xli - G32)
            + d.d4410 * sin(x2omi + x2li - G44)
            + d.d4422 * sin(x2li - G44)
            + d.d5220 * sin(xomi + xli - G52)
            + d.d5232 * sin(-xomi + xli - G52)
            + d.d5421 * sin(xomi + x2li - G54)
            + d.d5433 * sin(-xomi + x2li - G54)
        )
        xnddt = (
            d.d2201 * cos(x2omi + xli - G22)
            + d.d2211 * cos(xli - G22)
            + d.d3210 * cos(xomi + xli - G32)
            + d.d3222 * cos(-xomi + xli - G32)
            + d.d5220 * cos(xomi + xli - G52)
            + d.d5232 * cos(-xomi + xli - G52)
            + 2.0 * (
                d.d4410 * cos(x2omi + x2li - G44)
                + d.d4422 * cos(x2li - G44)
                + d.d5421 * cos(xomi + x2li - G54)
                + d.d5433 * cos(-xomi + x2li - G54)
            )
        )

    xldot = xni + ctx.xfact
    return xndot, xnddt * xldot, xldot


def checkpoint(ctx: DeepSpaceContext, atime: float, xni: float, xli: float) -> IntegratorState:
    """Build an integrator checkpoint with its rate terms evaluated."""
    xndot, xnddt, xldot = _rate_terms(ctx, atime, xni, xli)
    return IntegratorState(atime=atime, xni=xni, xli=xli, xndot=xndot, xnddt=xnddt, xldot=xldot)


def needs_restart(state: IntegratorState, t: float) -> bool:
    """Whether reaching ``t`` from ``state`` requires restarting from epoch.

    True when ``t`` is within one step of epoch, on the other side of epoch
    from the checkpoint, or closer to epoch than the checkpoint: the
    integrator only ever moves away from epoch.
    """
    return fabs(t) < STEP or t * state.atime <= 0.0 or fabs(t) < fabs(state.atime)


def advance(ctx: DeepSpaceContext, state: IntegratorState | None, t: float) -> IntegratorState:
    """Move the integrator to within one step of ``t``.

    Args:
        ctx: Deep-space context of a resonant orbit.
        state: Last checkpoint, or ``None`` to start from epoch.
        t: Target time [min since epoch].

    Returns:
        The checkpoint nearest to ``t`` (``|t - atime| < 720``).
    """
    if state is None or needs_restart(state, t):
        if state is not None and state.atime != 0.0:
            logger.debug("Restarting resonance integrator from epoch (atime=%s, t=%s)", state.atime, t)
        state = ctx.epoch_state

    ft = t - state.atime
    if fabs(ft) >= STEP:
        delt = STEP if ft >= 0.0 else -STEP
        while fabs(t - state.atime) >= STEP:
            xli = state.xli + state.xldot * delt + state.xndot * STEP2
            xni = state.xni + state.xndot * delt + state.xnddt * STEP2
            state = checkpoint(ctx, state.atime + delt, xni, xli)

    return state


def resonant_motion(
    ctx: DeepSpaceContext,
    state: IntegratorState,
    t: float,
    xnode: float,
    omgasm: float,
) -> tuple[float, float]:
    """Mean motion and mean anomaly of a resonant orbit at ``t``.

    Args:
        ctx: Deep-space context.
        state: Checkpoint within one step of ``t`` (see ``advance``).
        t: Time [min since epoch].
        xnode: Secularly updated node [rad].
        omgasm: Secularly updated argument of perigee [rad].

    Returns:
        ``(xn, xll)``: mean motion [rad/min] and mean anomaly [rad].
    """
    ft = t - state.atime
    xn = state.xni + state.xndot * ft + state.xnddt * ft * ft * 0.5
    xl = state.xli + state.xldot * ft + state.xndot * ft * ft * 0.5
    theta = -xnode + ctx.gsto + t * THDT

    if ctx.resonance is Resonance.SYNCHRONOUS:
        return xn, xl + theta - omgasm
    return xn, xl + theta + theta
