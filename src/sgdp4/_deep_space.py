"""
Deep-space branch (SDP4) for orbits with periods of 225 minutes or more.

``deep_space_init`` computes the lunar and solar perturbation amplitudes and
the resonance coefficients once per element set. ``propagate_deep_space``
then applies, for each requested time, the secular drift (including the
resonance integrator, see ``sgdp4._resonance``), the lunar/solar periodic
terms, and hands the perturbed elements to the composer.
"""

from __future__ import annotations

import dataclasses
import logging
from math import atan2, cos, fabs, fmod, pi, sin, sqrt
from typing import NamedTuple

from sgdp4 import _resonance
from sgdp4._composer import compose_state, inclination_geometry
from sgdp4._types import (
    DeepSpaceContext,
    DerivedConstants,
    IntegratorState,
    OrbitalElements,
    PeriodicAmplitudes,
    Resonance,
    SecularRates,
)
from sgdp4.constants import (
    ECCENTRICITY_TOLERANCE,
    LYDDANE_INCLINATION,
    MIN_ECCENTRICITY,
    MOON,
    SHALLOW_INCLINATION,
    SUN,
    THDT,
    TWOPI,
    TWOTHIRD,
    ZCOSGS,
    ZCOSIS,
    ZSINGS,
    ZSINIS,
    PerturbingBody,
)
from sgdp4.errors import EccentricityOutOfBoundsError, NegativeMeanMotionError

logger = logging.getLogger(__name__)


class BodyGeometry(NamedTuple):
    """Orientation of a perturbing body's orbit relative to the equator.

    Attributes:
        zcosg: Cosine of the body's argument of perigee.
        zsing: Sine of the body's argument of perigee.
        zcosi: Cosine of the body's inclination.
        zsini: Sine of the body's inclination.
        zcosh: Cosine of the node difference to the satellite.
        zsinh: Sine of the node difference to the satellite.
    """

    zcosg: float
    zsing: float
    zcosi: float
    zsini: float
    zcosh: float
    zsinh: float


def _fmod2p(x: float) -> float:
    """Reduce an angle to ``[0, 2 pi)``."""
    ret = fmod(x, TWOPI)
    if ret < 0.0:
        ret += TWOPI
    return ret


def solar_geometry(raan: float) -> BodyGeometry:
    """Solar orbit orientation for a satellite with node ``raan``."""
    return BodyGeometry(ZCOSGS, ZSINGS, ZCOSIS, ZSINIS, cos(raan), sin(raan))


def lunar_geometry(days_since_1900: float, raan: float) -> tuple[BodyGeometry, float]:
    """Lunar orbit orientation and mean anomaly at an epoch.

    Args:
        days_since_1900: Days since 1900 January 0.5 of the element epoch.
        raan: Satellite node at epoch [rad].

    Returns:
        ``(geometry, zmol)``: the lunar ``BodyGeometry`` and the lunar mean
        anomaly at epoch [rad].
    """
    day = days_since_1900
    sinq = sin(raan)
    cosq = cos(raan)

    xnodce = 4.5236020 - 9.2422029e-4 * day
    stem = sin(fmod(xnodce, TWOPI))
    ctem = cos(fmod(xnodce, TWOPI))
    zcosil = 0.91375164 - 0.03568096 * ctem
    zsinil = sqrt(1.0 - zcosil * zcosil)
    zsinhl = 0.089683511 * stem / zsinil
    zcoshl = sqrt(1.0 - zsinhl * zsinhl)

    c = 4.7199672 + 0.22997150 * day
    gam = 5.8351514 + 0.0019443680 * day
    zmol = _fmod2p(c - gam)

    zx = atan2(0.39785416 * stem / zsinil, zcoshl * ctem + 0.91744867 * zsinhl * stem)
    zx = fmod(gam + zx - xnodce, TWOPI)

    geometry = BodyGeometry(
        zcosg=cos(zx),
        zsing=sin(zx),
        zcosi=zcosil,
        zsini=zsinil,
        zcosh=zcoshl * cosq + zsinhl * sinq,
        zsinh=sinq * zcoshl - cosq * zsinhl,
    )
    return geometry, zmol


def body_terms(
    body: PerturbingBody,
    geometry: BodyGeometry,
    elements: OrbitalElements,
    consts: DerivedConstants,
) -> tuple[SecularRates, PeriodicAmplitudes]:
    """Secular rates and periodic amplitudes induced by one perturbing body.

    Called once with the solar constants and once with the lunar ones.

    Args:
        body: Mean motion, amplitude and eccentricity of the body.
        geometry: Orientation of the body's orbit (see ``solar_geometry``
            and ``lunar_geometry``).
        elements: Element set.
        consts: Derived constants of the element set.

    Returns:
        ``(rates, amplitudes)``. The ``sh`` slot of ``rates`` holds the
        node rate already divided by ``sin i`` (zero for inclinations within
        ``5.2359877e-2`` rad of 0 or pi).
    """
    zcosg, zsing, zcosi, zsini, zcosh, zsinh = geometry
    zn = body.zn
    ze = body.ze

    ecc = elements.eccentricity
    eosq = ecc * ecc
    betao2 = 1.0 - eosq
    betao = sqrt(betao2)
    cosio = consts.geometry.cosio
    sinio = consts.geometry.sinio
    sing = sin(elements.argp)
    cosg = cos(elements.argp)

    a1 = zcosg * zcosh + zsing * zcosi * zsinh
    a3 = -zsing * zcosh + zcosg * zcosi * zsinh
    a7 = -zcosg * zsinh + zsing * zcosi * zcosh
    a8 = zsing * zsini
    a9 = zsing * zsinh + zcosg * zcosi * zcosh
    a10 = zcosg * zsini
    a2 = cosio * a7 + sinio * a8
    a4 = cosio * a9 + sinio * a10
    a5 = -sinio * a7 + cosio * a8
    a6 = -sinio * a9 + cosio * a10

    x1 = a1 * cosg + a2 * sing
    x2 = a3 * cosg + a4 * sing
    x3 = -a1 * sing + a2 * cosg
    x4 = -a3 * sing + a4 * cosg
    x5 = a5 * sing
    x6 = a6 * sing
    x7 = a5 * cosg
    x8 = a6 * cosg

    z31 = 12.0 * x1 * x1 - 3.0 * x3 * x3
    z32 = 24.0 * x1 * x2 - 6.0 * x3 * x4
    z33 = 12.0 * x2 * x2 - 3.0 * x4 * x4
    z1 = 3.0 * (a1 * a1 + a2 * a2) + z31 * eosq
    z2 = 6.0 * (a1 * a3 + a2 * a4) + z32 * eosq
    z3 = 3.0 * (a3 * a3 + a4 * a4) + z33 * eosq
    z11 = -6.0 * a1 * a5 + eosq * (-24.0 * x1 * x7 - 6.0 * x3 * x5)
    z12 = -6.0 * (a1 * a6 + a3 * a5) + eosq * (
        -24.0 * (x2 * x7 + x1 * x8) - 6.0 * (x3 * x6 + x4 * x5)
    )
    z13 = -6.0 * a3 * a6 + eosq * (-24.0 * x2 * x8 - 6.0 * x4 * x6)
    z21 = 6.0 * a2 * a5 + eosq * (24.0 * x1 * x5 - 6.0 * x3 * x7)
    z22 = 6.0 * (a4 * a5 + a2 * a6) + eosq * (
        24.0 * (x2 * x5 + x1 * x6) - 6.0 * (x4 * x7 + x3 * x8)
    )
    z23 = 6.0 * a4 * a6 + eosq * (24.0 * x2 * x6 - 6.0 * x4 * x8)
    z1 = z1 + z1 + betao2 * z31
    z2 = z2 + z2 + betao2 * z32
    z3 = z3 + z3 + betao2 * z33

    s3 = body.c1 / consts.xnodp
    s2 = -0.5 * s3 / betao
    s4 = s3 * betao
    s1 = -15.0 * ecc * s4
    s5 = x1 * x3 + x2 * x4
    s6 = x2 * x3 + x1 * x4
    s7 = x2 * x4 - x1 * x3

    inclination = elements.inclination
    if inclination < SHALLOW_INCLINATION or inclination > pi - SHALLOW_INCLINATION:
        shdq = 0.0
    else:
        shdq = (-zn * s2 * (z21 + z23)) / sinio

    rates = SecularRates(
        se=s1 * zn * s5,
        si=s2 * zn * (z11 + z13),
        sl=-zn * s3 * (z1 + z3 - 14.0 - 6.0 * eosq),
        sgh=s4 * zn * (z31 + z33 - 6.0),
        sh=shdq,
    )
    amplitudes = PeriodicAmplitudes(
        e2=2.0 * s1 * s6,
        e3=2.0 * s1 * s7,
        i2=2.0 * s2 * z12,
        i3=2.0 * s2 * (z13 - z11),
        l2=-2.0 * s3 * z2,
        l3=-2.0 * s3 * (z3 - z1),
        l4=-2.0 * s3 * (-21.0 - 9.0 * eosq) * ze,
        gh2=2.0 * s4 * z32,
        gh3=2.0 * s4 * (z33 - z31),
        gh4=-18.0 * s4 * ze,
        h2=-2.0 * s2 * z22,
        h3=-2.0 * s2 * (z23 - z21),
    )
    return rates, amplitudes


def deep_space_init(elements: OrbitalElements, consts: DerivedConstants) -> DeepSpaceContext:
    """Build the deep-space context of an element set.

    Args:
        elements: Element set with a period of at least 225 minutes.
        consts: Constants from ``sgdp4._initializer.initialize``.

    Returns:
        The deep-space context, with the integrator's epoch checkpoint when
        the orbit is resonant.
    """
    cosio = consts.geometry.cosio
    sinio = consts.geometry.sinio
    ecc = elements.eccentricity
    xnodp = consts.xnodp

    gsto = elements.epoch.gmst()
    zmos = _fmod2p(6.2565837 + 0.017201977 * elements.epoch.days_since_1900())
    lunar_geom, zmol = lunar_geometry(elements.epoch.days_since_1900(), elements.raan)

    solar_rates, solar = body_terms(SUN, solar_geometry(elements.raan), elements, consts)
    lunar_rates, lunar = body_terms(MOON, lunar_geom, elements, consts)

    ssg = solar_rates.sgh - cosio * solar_rates.sh
    ssg += lunar_rates.sgh - cosio * lunar_rates.sh
    secular = SecularRates(
        se=solar_rates.se + lunar_rates.se,
        si=solar_rates.si + lunar_rates.si,
        sl=solar_rates.sl + lunar_rates.sl,
        sgh=ssg,
        sh=solar_rates.sh + lunar_rates.sh,
    )

    resonance = _resonance.classify_resonance(xnodp, ecc)
    ctx = DeepSpaceContext(
        resonance=resonance,
        gsto=gsto,
        zmol=zmol,
        zmos=zmos,
        secular=secular,
        solar=solar,
        lunar=lunar,
    )

    logger.debug(
        "Satellite %s: resonance %s (xnodp=%.10f rad/min, e=%.7f)",
        elements.satnum, resonance.value, xnodp, ecc,
    )

    if resonance is Resonance.NONE:
        return ctx

    raan = elements.raan
    if resonance is Resonance.SYNCHRONOUS:
        terms = _resonance.synchronous_terms(xnodp, consts.aodp, ecc, cosio, sinio)
        xlamo = elements.mean_anomaly + raan + elements.argp - gsto
        bfact = consts.xmdot + (consts.omgdot + consts.xnodot) - THDT
        bfact += secular.sl + secular.sgh + secular.sh
        ctx = dataclasses.replace(ctx, synchronous=terms)
    else:
        terms = _resonance.geopotential_terms(xnodp, consts.aodp, ecc, cosio, sinio)
        xlamo = elements.mean_anomaly + raan + raan - gsto - gsto
        bfact = consts.xmdot + consts.xnodot + consts.xnodot - THDT - THDT
        bfact = bfact + secular.sl + secular.sh + secular.sh
        ctx = dataclasses.replace(ctx, geopotential=terms)

    ctx = dataclasses.replace(
        ctx,
        xfact=bfact - xnodp,
        xlamo=xlamo,
        argpo=elements.argp,
        omgdot=consts.omgdot,
    )
    return dataclasses.replace(ctx, epoch_state=_resonance.checkpoint(ctx, 0.0, xnodp, xlamo))


def lunar_solar_terms(ctx: DeepSpaceContext, t: float) -> tuple[float, float, float, float, float]:
    """Combined lunar and solar periodic corrections at ``t``.

    Returns:
        ``(pe, pinc, pl, pgh, ph)``: corrections to eccentricity,
        inclination, mean anomaly, argument of perigee plus node, and node.
    """
    totals = [0.0, 0.0, 0.0, 0.0, 0.0]
    for body, zmo, amp in ((SUN, ctx.zmos, ctx.solar), (MOON, ctx.zmol, ctx.lunar)):
        zm = zmo + body.zn * t
        zf = zm + 2.0 * body.ze * sin(zm)
        sinzf = sin(zf)
        f2 = 0.5 * sinzf * sinzf - 0.25
        f3 = -0.5 * sinzf * cos(zf)
        totals[0] += amp.e2 * f2 + amp.e3 * f3
        totals[1] += amp.i2 * f2 + amp.i3 * f3
        totals[2] += amp.l2 * f2 + amp.l3 * f3 + amp.l4 * sinzf
        totals[3] += amp.gh2 * f2 + amp.gh3 * f3 + amp.gh4 * sinzf
        totals[4] += amp.h2 * f2 + amp.h3 * f3
    pe, pinc, pl, pgh, ph = totals
    return pe, pinc, pl, pgh, ph


def apply_periodics(
    ctx: DeepSpaceContext,
    t: float,
    em: float,
    xinc: float,
    omgasm: float,
    xnodes: float,
    xll: float,
) -> tuple[float, float, float, float, float]:
    """Add the lunar/solar periodics to the mean elements.

    Below an inclination of 0.2 rad the node and argument of perigee terms
    are applied in the Lyddane form, which stays regular at zero
    inclination. The node is then kept in the same 2 pi branch as the
    unperturbed value.

    Returns:
        ``(em, xinc, omgasm, xnodes, xll)`` after the corrections.
    """
    pe, pinc, pl, pgh, ph = lunar_solar_terms(ctx, t)

    xinc += pinc
    em += pe
    sinis = sin(xinc)
    cosis = cos(xinc)

    if xinc >= LYDDANE_INCLINATION:
        tmp_ph = ph / sinis
        omgasm += pgh - cosis * tmp_ph
        xnodes += tmp_ph
        xll += pl
        return em, xinc, omgasm, xnodes, xll

    sinok = sin(xnodes)
    cosok = cos(xnodes)
    alfdp = sinis * sinok + (ph * cosok + pinc * cosis * sinok)
    betdp = sinis * cosok + (-ph * sinok + pinc * cosis * cosok)

    xnodes = _fmod2p(xnodes)
    xls = xll + omgasm + cosis * xnodes
    xls += pl + pgh - pinc * xnodes * sinis

    oldxnodes = xnodes
    xnodes = atan2(alfdp, betdp)
    if xnodes < 0.0:
        xnodes += TWOPI
    if fabs(oldxnodes - xnodes) > pi:
        if xnodes < oldxnodes:
            xnodes += TWOPI
        else:
            xnodes -= TWOPI

    xll += pl
    omgasm = xls - xll - cosis * xnodes
    return em, xinc, omgasm, xnodes, xll


def propagate_deep_space(
    elements: OrbitalElements,
    consts: DerivedConstants,
    ctx: DeepSpaceContext,
    tsince: float,
    integrator: IntegratorState | None = None,
) -> tuple[tuple[float, float, float], tuple[float, float, float], IntegratorState | None]:
    """Propagate a deep-space element set to ``tsince``.

    Args:
        elements: Element set.
        consts: Derived constants.
        ctx: Deep-space context from ``deep_space_init``.
        tsince: Minutes since epoch.
        integrator: Last resonance checkpoint, ``None`` to start from epoch.
            Ignored for non-resonant orbits.

    Returns:
        ``(position, velocity, integrator)``: TEME position [km], velocity
        [km/s] and the checkpoint to pass to the next call (``None`` for
        non-resonant orbits).

    Raises:
        NegativeMeanMotionError: If the integrated mean motion is not
            positive.
        EccentricityOutOfBoundsError: If the eccentricity leaves its valid
            range.
        InvalidGeometryError: See ``sgdp4._composer.compose_state``.
        SubOrbitalDecayError: See ``sgdp4._composer.compose_state``.
    """
    t = tsince
    gravity = consts.gravity
    secular = ctx.secular

    xmdf = elements.mean_anomaly + consts.xmdot * t
    omgadf = elements.argp + consts.omgdot * t
    xnoddf = elements.raan + consts.xnodot * t
    tsq = t * t
    xnode = xnoddf + consts.xnodcf * tsq
    tempa = 1.0 - consts.c1 * t
    tempe = elements.bstar * consts.c4 * t
    templ = consts.t2cof * tsq

    # Secular lunar/solar and resonance effects
    xmdf += secular.sl * t
    omgadf += secular.sgh * t
    xnode += secular.sh * t
    e = elements.eccentricity + secular.se * t
    xincl = elements.inclination + secular.si * t
    xn = consts.xnodp

    if ctx.resonance is not Resonance.NONE:
        integrator = _resonance.advance(ctx, integrator, t)
        xn, xmdf = _resonance.resonant_motion(ctx, integrator, t, xnode, omgadf)
    else:
        integrator = None

    if xn <= 0.0:
        raise NegativeMeanMotionError(f"mean motion {xn!r} rad/min is not positive", t)

    a = (gravity.xke / xn) ** TWOTHIRD * tempa * tempa
    e -= tempe
    if e >= 1.0 or e < ECCENTRICITY_TOLERANCE:
        raise EccentricityOutOfBoundsError(e, t)
    if e < MIN_ECCENTRICITY:
        e = MIN_ECCENTRICITY

    xmam = xmdf + consts.xnodp * templ
    e, xincl, omgadf, xnode, xmam = apply_periodics(ctx, t, e, xincl, omgadf, xnode, xmam)

    if xincl < 0.0:
        xincl = -xincl
        xnode += pi
        omgadf -= pi

    xl = xmam + omgadf + xnode
    if e < 0.0 or e > 1.0:
        raise EccentricityOutOfBoundsError(e, t)

    geometry = inclination_geometry(xincl, gravity)
    position, velocity = compose_state(t, e, a, omgadf, xl, xnode, xincl, geometry, gravity)
    return position, velocity, integrator
