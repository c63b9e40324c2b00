"""Stateful SGP4/SDP4 propagator object.

Provides :class:`SGP4`, a convenience wrapper around ``sgp4_init`` and
``sgp4_propagate`` that keeps the initialized model and the latest resonance
integrator checkpoint on the instance.
"""

from __future__ import annotations

from collections.abc import Iterable

import jax.numpy as jnp
from jax import Array

from sgdp4._propagation import SGP4Model, resolve_gravity, sgp4_init, sgp4_propagate
from sgdp4._tle import parse_tle
from sgdp4._types import (
    DeepSpaceContext,
    DerivedConstants,
    IntegratorState,
    OrbitalElements,
    Resonance,
    State,
)
from sgdp4.config import get_dtype
from sgdp4.constants import DEG2RAD, EarthGravity
from sgdp4.epoch import Epoch
from sgdp4.errors import ConfigurationError


class SGP4:
    """An SGP4/SDP4 propagator for one element set.

    The instance moves from unconfigured to configured on :meth:`configure`
    (or construction with elements); the near-earth/deep-space branch chosen
    there is fixed until the next ``configure``. Propagation times may be
    requested in any order.

    For resonant deep-space orbits the instance caches the integrator
    checkpoint of the last successful call, which makes ordered sequences of
    times cheap. This cache makes an instance non-reentrant: use one
    instance per thread, or the functional ``sgp4_propagate`` with
    caller-owned checkpoints. A failed call leaves the cache untouched.

    Examples:
        ```python
        from sgdp4 import SGP4

        sat = SGP4.from_tle(line1, line2)
        state = sat.propagate(90.0)      # minutes since epoch
        state.position                   # [x, y, z] km, TEME
        r, v = sat.ephemeris([0.0, 10.0, 20.0])
        ```

    Args:
        elements: Element set to configure immediately, or ``None``.
        gravity: Gravity model name or :class:`EarthGravity` instance.
    """

    def __init__(
        self,
        elements: OrbitalElements | None = None,
        gravity: str | EarthGravity = "wgs72",
    ) -> None:
        self._gravity: EarthGravity = resolve_gravity(gravity)
        self._model: SGP4Model | None = None
        self._integrator: IntegratorState | None = None
        if elements is not None:
            self.configure(elements)

    @classmethod
    def from_tle(cls, line1: str, line2: str, gravity: str | EarthGravity = "wgs72") -> SGP4:
        """Create a configured propagator from two TLE lines.

        Raises:
            TLEFormatError: If the lines cannot be parsed.
            ConfigurationError: If the parsed elements are out of range.
        """
        return cls(parse_tle(line1, line2), gravity)

    def configure(self, elements: OrbitalElements) -> None:
        """Initialize the propagator for ``elements``.

        Replaces any previous element set and discards the integrator
        cache. On failure the previous configuration is kept.

        Raises:
            ConfigurationError: If the eccentricity, inclination or mean
                motion is out of range.
        """
        self._model = sgp4_init(elements, self._gravity)
        self._integrator = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def configured(self) -> bool:
        """Whether an element set has been configured."""
        return self._model is not None

    @property
    def model(self) -> SGP4Model:
        """The initialized model, for use with ``sgp4_propagate``."""
        return self._require_model()

    @property
    def elements(self) -> OrbitalElements:
        """The configured element set."""
        return self._require_model().elements

    @property
    def epoch(self) -> Epoch:
        """Epoch of the configured element set."""
        return self._require_model().elements.epoch

    @property
    def gravity(self) -> EarthGravity:
        return self._gravity

    @property
    def constants(self) -> DerivedConstants:
        return self._require_model().constants

    @property
    def deep_space(self) -> bool:
        """True when the deep-space (SDP4) branch is used."""
        return self._require_model().constants.deep_space

    @property
    def simple_model(self) -> bool:
        """True when the truncated near-earth drag model is used."""
        return self._require_model().constants.simple_model

    @property
    def deep_space_context(self) -> DeepSpaceContext | None:
        return self._require_model().deep_space

    @property
    def resonance(self) -> Resonance:
        """Resonance class of the orbit (``NONE`` for near-earth orbits)."""
        ctx = self._require_model().deep_space
        return Resonance.NONE if ctx is None else ctx.resonance

    @property
    def period(self) -> float:
        """Orbital period [min]."""
        return self._require_model().constants.period

    @property
    def perigee(self) -> float:
        """Perigee altitude [km]."""
        return self._require_model().constants.perigee

    @property
    def integrator(self) -> IntegratorState | None:
        """Cached resonance integrator checkpoint, ``None`` if there is none."""
        return self._integrator

    # ------------------------------------------------------------------
    # Propagation
    # ------------------------------------------------------------------

    def propagate(self, t: float | Epoch) -> State:
        """Propagate to a time.

        Args:
            t: Minutes since the element epoch, or an absolute :class:`Epoch`.

        Returns:
            TEME position [km] and velocity [km/s] at ``t``.

        Raises:
            ConfigurationError: If no element set is configured.
            PropagationError: If the element set cannot be propagated to
                ``t``.
        """
        model = self._require_model()
        tsince = t.minutes_since(model.elements.epoch) if isinstance(t, Epoch) else float(t)
        state, integrator = sgp4_propagate(model, tsince, self._integrator)
        self._integrator = integrator
        return state

    def ephemeris(self, times: Iterable[float | Epoch]) -> tuple[Array, Array]:
        """Propagate to a sequence of times.

        This is a plain Python loop over :meth:`propagate`, one scalar call
        per time, with the results stacked afterwards. There is no jit or
        vmap path. Times are visited in the given order, so the resonance
        checkpoint carries over between successive calls.

        Args:
            times: Minutes since epoch or :class:`Epoch` values.

        Returns:
            ``(positions, velocities)`` arrays of shape ``(N, 3)`` [km, km/s].

        Raises:
            ConfigurationError: If no element set is configured.
            PropagationError: On the first time that cannot be reached.
        """
        states = [self.propagate(t) for t in times]
        if not states:
            empty = jnp.zeros((0, 3), dtype=get_dtype())
            return empty, empty
        return (
            jnp.stack([s.position for s in states]),
            jnp.stack([s.velocity for s in states]),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_model(self) -> SGP4Model:
        if self._model is None:
            raise ConfigurationError("SGP4 propagator is not configured with an element set")
        return self._model

    def __repr__(self) -> str:
        if self._model is None:
            return "SGP4(unconfigured)"
        elements = self._model.elements
        branch = "deep-space" if self._model.constants.deep_space else "near-earth"
        return (
            f"SGP4(satnum={elements.satnum!r}, epoch={elements.epoch}, "
            f"i={elements.inclination / DEG2RAD:.4f} deg, {branch})"
        )
