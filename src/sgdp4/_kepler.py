"""Kepler's equation in the rectangular-eccentricity form used by SGP4."""

from __future__ import annotations

from math import cos, fabs, sin, sqrt

from sgdp4.constants import KEPLER_MAX_ITERATIONS, KEPLER_TOLERANCE


def solve_kepler(capu: float, axn: float, ayn: float) -> tuple[float, float, float, float]:
    """Solve ``capu = E - axn sin E + ayn cos E`` for ``E``.

    Newton-Raphson, at most ``KEPLER_MAX_ITERATIONS`` iterations, stopping
    once the residual drops below ``KEPLER_TOLERANCE``. The first step is
    clamped to ``1.25 * sqrt(axn^2 + ayn^2)``; later steps use the
    second-order (Halley) correction ``f / (f' + esine * (f / f') / 2)``.

    The returned trigonometric terms are those of the last evaluated
    iterate, which is the converged angle unless the iteration limit is
    reached.

    Args:
        capu: Mean longitude minus node, reduced modulo 2 pi [rad].
        axn: Eccentricity vector component along the node line.
        ayn: Eccentricity vector component normal to the node line.

    Returns:
        ``(sin E, cos E, e cos E, e sin E)``.
    """
    max_step = 1.25 * fabs(sqrt(axn * axn + ayn * ayn))

    epw = capu
    sinepw = cosepw = ecose = esine = 0.0

    for i in range(KEPLER_MAX_ITERATIONS):
        sinepw = sin(epw)
        cosepw = cos(epw)
        ecose = axn * cosepw + ayn * sinepw
        esine = axn * sinepw - ayn * cosepw

        f = capu - epw + esine
        if fabs(f) < KEPLER_TOLERANCE:
            break

        fdot = 1.0 - ecose
        delta = f / fdot
        if i == 0:
            delta = min(max(delta, -max_step), max_step)
        else:
            delta = f / (fdot + 0.5 * esine * delta)
        epw += delta

    return sinepw, cosepw, ecose, esine
