"""Output precision of sgdp4.

SGP4/SDP4 is evaluated on Python floats, i.e. in double precision, whatever
is configured here. ``set_dtype`` only picks the dtype of the position and
velocity arrays that :class:`~sgdp4.State` carries, so that propagated
states can be fed straight into JAX code running at the caller's precision.

``jnp.float32`` is the default. Its arrays hold the double precision result
rounded to nearest, up to 6e-8 relative per component, so float32 states
agree with reference vectors to 1e-7 relative, not 1e-8. Selecting ``jnp.float64`` turns on JAX's
64-bit mode (``jax_enable_x64``); arrays created before that switch keep
their old dtype.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_SUPPORTED = {
    jnp.float16: "jnp.float16",
    jnp.bfloat16: "jnp.bfloat16",
    jnp.float32: "jnp.float32",
    jnp.float64: "jnp.float64",
}

_dtype = jnp.float32


def set_dtype(dtype) -> None:
    """Select the float dtype of propagated state arrays.

    Args:
        dtype: ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32`` or
            ``jnp.float64``.

    Raises:
        ValueError: For any other value.
    """
    global _dtype
    if not any(dtype is supported for supported in _SUPPORTED):
        raise ValueError(f"Unsupported dtype {dtype!r}; expected one of {', '.join(_SUPPORTED.values())}")
    if dtype is jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """The float dtype of propagated state arrays (``jnp.float32`` unless changed)."""
    return _dtype
