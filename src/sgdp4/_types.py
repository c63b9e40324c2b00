"""
Data types for the SGP4/SDP4 propagator.

Inputs (``OrbitalElements``), the quantities derived once at configure
time (``DerivedConstants``, ``DeepSpaceContext``), the resonance integrator
state that evolves between calls (``IntegratorState``) and the output record
(``State``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from jax import Array

from sgdp4.constants import EarthGravity
from sgdp4.epoch import Epoch


@dataclass(frozen=True)
class OrbitalElements:
    """Mean orbital elements at a reference epoch.

    Angles are in radians and mean motion in radians per minute (Kozai
    mean motion, as published in element sets).

    Attributes:
        mean_anomaly: Mean anomaly [rad].
        raan: Right ascension of the ascending node [rad].
        argp: Argument of perigee [rad].
        eccentricity: Eccentricity [dimensionless].
        inclination: Inclination [rad].
        mean_motion: Mean motion [rad/min].
        bstar: Drag term B* [1/earth radii].
        epoch: Reference epoch of the elements.
        satnum: Catalog number, informational only.
    """

    mean_anomaly: float
    raan: float
    argp: float
    eccentricity: float
    inclination: float
    mean_motion: float
    bstar: float
    epoch: Epoch
    satnum: str = ""


class Resonance(Enum):
    """Deep-space resonance classification."""

    NONE = "none"
    SYNCHRONOUS = "synchronous"
    HALF_DAY = "half-day"


class Geometry(NamedTuple):
    """Inclination-dependent coefficients used by the short-period terms.

    Attributes:
        cosio: Cosine of inclination.
        sinio: Sine of inclination.
        x3thm1: ``3 cos^2 i - 1``.
        x1mth2: ``1 - cos^2 i``.
        x7thm1: ``7 cos^2 i - 1``.
        xlcof: Long-period mean longitude coefficient.
        aycof: Long-period eccentricity vector coefficient.
    """

    cosio: float
    sinio: float
    x3thm1: float
    x1mth2: float
    x7thm1: float
    xlcof: float
    aycof: float


@dataclass(frozen=True)
class DerivedConstants:
    """Quantities computed once per element set.

    Drag-series entries that do not apply to the orbit's branch are zero.

    Attributes:
        gravity: Gravity model used for the derivation.
        aodp: Recovered (un-Kozai) semi-major axis [earth radii].
        xnodp: Recovered mean motion [rad/min].
        perigee: Perigee altitude [km].
        period: Orbital period [min].
        deep_space: True when the deep-space branch applies.
        simple_model: True when the truncated near-earth drag model applies.
        s4: Atmosphere density reference radius [earth radii].
        qoms24: Atmosphere density parameter.
        geometry: Epoch inclination coefficients.
        eta: ``a e / (a - s4)``.
        xmdot: Secular mean anomaly rate [rad/min].
        omgdot: Secular argument of perigee rate [rad/min].
        xnodot: Secular node rate [rad/min].
        xnodcf: Node drag coefficient.
        c1: First drag coefficient.
        c4: Eccentricity drag coefficient.
        t2cof: Quadratic mean longitude coefficient.
        c5: Periodic eccentricity drag coefficient (near-earth).
        omgcof: Argument of perigee drag coefficient (near-earth).
        xmcof: Mean anomaly drag coefficient (near-earth).
        delmo: ``(1 + eta cos M0)^3`` (near-earth).
        sinmo: ``sin M0`` (near-earth).
        d2: Quadratic semi-major axis drag coefficient.
        d3: Cubic semi-major axis drag coefficient.
        d4: Quartic semi-major axis drag coefficient.
        t3cof: Cubic mean longitude coefficient.
        t4cof: Quartic mean longitude coefficient.
        t5cof: Quintic mean longitude coefficient.
    """

    gravity: EarthGravity
    aodp: float
    xnodp: float
    perigee: float
    period: float
    deep_space: bool
    simple_model: bool
    s4: float
    qoms24: float
    geometry: Geometry
    eta: float
    xmdot: float
    omgdot: float
    xnodot: float
    xnodcf: float
    c1: float
    c4: float
    t2cof: float
    c5: float = 0.0
    omgcof: float = 0.0
    xmcof: float = 0.0
    delmo: float = 0.0
    sinmo: float = 0.0
    d2: float = 0.0
    d3: float = 0.0
    d4: float = 0.0
    t3cof: float = 0.0
    t4cof: float = 0.0
    t5cof: float = 0.0


class SecularRates(NamedTuple):
    """Secular element rates from one perturbing body, or their sum."""

    se: float
    si: float
    sl: float
    sgh: float
    sh: float


class PeriodicAmplitudes(NamedTuple):
    """Long-period lunar or solar amplitudes for the periodic corrections."""

    e2: float
    e3: float
    i2: float
    i3: float
    l2: float
    l3: float
    l4: float
    gh2: float
    gh3: float
    gh4: float
    h2: float
    h3: float


class SynchronousTerms(NamedTuple):
    """Resonance coefficients of 24 hour (geosynchronous) orbits."""

    del1: float
    del2: float
    del3: float


class GeopotentialTerms(NamedTuple):
    """Resonance coefficients of 12 hour orbits."""

    d2201: float
    d2211: float
    d3210: float
    d3222: float
    d4410: float
    d4422: float
    d5220: float
    d5232: float
    d5421: float
    d5433: float


class IntegratorState(NamedTuple):
    """Checkpoint of the deep-space resonance integrator.

    The rate terms are always those evaluated at ``atime``; every update
    produces a new value with them recomputed.

    Attributes:
        atime: Integrated time since epoch [min].
        xni: Mean motion integral [rad/min].
        xli: Mean longitude integral [rad].
        xndot: Mean motion rate at ``atime``.
        xnddt: Mean motion second derivative at ``atime``.
        xldot: Mean longitude rate at ``atime``.
    """

    atime: float
    xni: float
    xli: float
    xndot: float
    xnddt: float
    xldot: float


@dataclass(frozen=True)
class DeepSpaceContext:
    """Deep-space quantities computed once per element set.

    Attributes:
        resonance: Resonance classification.
        gsto: Greenwich sidereal time at epoch [rad].
        zmol: Lunar mean anomaly at epoch [rad].
        zmos: Solar mean anomaly at epoch [rad].
        secular: Combined lunar and solar secular rates.
        solar: Solar periodic amplitudes.
        lunar: Lunar periodic amplitudes.
        synchronous: 24 hour resonance coefficients, if applicable.
        geopotential: 12 hour resonance coefficients, if applicable.
        xfact: Resonance longitude rate offset.
        xlamo: Resonance longitude at epoch [rad].
        argpo: Argument of perigee at epoch [rad].
        omgdot: Secular argument of perigee rate [rad/min].
        epoch_state: Integrator checkpoint at epoch, ``None`` if not resonant.
    """

    resonance: Resonance
    gsto: float
    zmol: float
    zmos: float
    secular: SecularRates
    solar: PeriodicAmplitudes
    lunar: PeriodicAmplitudes
    synchronous: SynchronousTerms | None = None
    geopotential: GeopotentialTerms | None = None
    xfact: float = 0.0
    xlamo: float = 0.0
    argpo: float = 0.0
    omgdot: float = 0.0
    epoch_state: IntegratorState | None = None


@dataclass(frozen=True, eq=False)
class State:
    """Propagated satellite state in the TEME frame.

    Attributes:
        epoch: Absolute time of the state.
        tsince: Minutes since the element epoch.
        position: Position ``[x, y, z]`` [km].
        velocity: Velocity ``[vx, vy, vz]`` [km/s].
    """

    epoch: Epoch
    tsince: float
    position: Array
    velocity: Array
