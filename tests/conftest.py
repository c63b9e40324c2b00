import jax.numpy as jnp
import pytest

from sgdp4.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    Reference comparisons need the full double precision of the propagator
    in the returned arrays. Tests that exercise other dtypes override this
    with their own autouse fixture (see test_config.py).
    """
    set_dtype(jnp.float64)
