"""
Functional SGP4/SDP4 API.

``sgp4_init`` runs the one-time initialization and returns an immutable
``SGP4Model``. ``sgp4_propagate`` evaluates the model at one time offset.
For resonant deep-space orbits the numerical integrator checkpoint is passed
in and handed back explicitly, so the functions keep no hidden state and a
model may be shared freely between threads as long as each thread threads
its own ``IntegratorState``.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp

from sgdp4._deep_space import deep_space_init, propagate_deep_space
from sgdp4._initializer import initialize, validate_elements
from sgdp4._near_earth import propagate_near_earth
from sgdp4._types import DeepSpaceContext, DerivedConstants, IntegratorState, OrbitalElements, State
from sgdp4.config import get_dtype
from sgdp4.constants import GRAVITY_MODELS, WGS72, EarthGravity


def resolve_gravity(gravity: str | EarthGravity) -> EarthGravity:
    """Look up a gravity model by name, or pass an ``EarthGravity`` through.

    Args:
        gravity: ``'wgs72'``, ``'wgs72old'``, ``'wgs84'`` (case insensitive)
            or an ``EarthGravity`` instance.

    Raises:
        ValueError: If the name is not a known model.
    """
    if isinstance(gravity, EarthGravity):
        return gravity
    try:
        return GRAVITY_MODELS[gravity.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown gravity model {gravity!r}. Must be one of: {', '.join(GRAVITY_MODELS)}"
        ) from None


@dataclass(frozen=True)
class SGP4Model:
    """An initialized element set.

    Attributes:
        elements: The element set.
        constants: Quantities derived at initialization.
        deep_space: Deep-space context, ``None`` for near-earth orbits.
    """

    elements: OrbitalElements
    constants: DerivedConstants
    deep_space: DeepSpaceContext | None = None


def sgp4_init(elements: OrbitalElements, gravity: str | EarthGravity = WGS72) -> SGP4Model:
    """Initialize an element set for propagation.

    Args:
        elements: Mean elements (radians, radians per minute).
        gravity: Gravity model name or ``EarthGravity`` instance.

    Returns:
        The initialized model.

    Raises:
        ConfigurationError: If the eccentricity, inclination or mean motion
            is out of range.
        ValueError: If the gravity model name is unknown.
    """
    gravity = resolve_gravity(gravity)
    validate_elements(elements)

    consts = initialize(elements, gravity)
    ctx = deep_space_init(elements, consts) if consts.deep_space else None
    return SGP4Model(elements=elements, constants=consts, deep_space=ctx)


def sgp4_propagate(
    model: SGP4Model,
    tsince: float,
    integrator: IntegratorState | None = None,
) -> tuple[State, IntegratorState | None]:
    """Propagate an initialized model to ``tsince`` minutes from its epoch.

    Args:
        model: Model from ``sgp4_init``.
        tsince: Minutes since the element epoch (may be negative).
        integrator: Resonance checkpoint returned by a previous call for
            the same model, or ``None`` to integrate from epoch. Results do
            not depend on which checkpoint is passed.

    Returns:
        ``(state, integrator)``: the TEME state and the checkpoint to pass to
        the next call (``None`` unless the orbit is resonant).

    Raises:
        PropagationError: If the element set cannot be propagated to
            ``tsince``; see the subclasses in ``sgdp4.errors``.
    """
    tsince = float(tsince)
    if model.deep_space is None:
        position, velocity = propagate_near_earth(model.elements, model.constants, tsince)
    else:
        position, velocity, integrator = propagate_deep_space(
            model.elements, model.constants, model.deep_space, tsince, integrator
        )

    dtype = get_dtype()
    state = State(
        epoch=model.elements.epoch.add_minutes(tsince),
        tsince=tsince,
        position=jnp.asarray(position, dtype=dtype),
        velocity=jnp.asarray(velocity, dtype=dtype),
    )
    return state, integrator
