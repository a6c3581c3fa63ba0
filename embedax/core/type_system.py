"""Type aliases for arrays flowing through embedax."""

from collections.abc import Sequence
from typing import Any

import jax.numpy as jnp
from jaxtyping import Array, Float

DataRange = Sequence[Any]
"""Position-addressable finite sequence of opaque data handles."""

DenseMatrix = Float[Array, "rows cols"]
"""Dense matrix, e.g. an embedding with one row per sample."""

DenseSymmetricMatrix = Float[Array, "n n"]
"""Dense symmetric matrix such as an affinity matrix."""

DenseVector = Float[Array, " n"]
"""Dense vector, e.g. eigenvalues or a mean vector."""


def empty_vector() -> DenseVector:
    """Return the empty auxiliary vector used when a method has no eigenvalues."""
    return jnp.zeros((0,), dtype=jnp.float64)


def symmetrize_upper(matrix: Float[Array, "n n"]) -> DenseSymmetricMatrix:
    """Rebuild a symmetric matrix from its upper triangle.

    Examples:
        >>> symmetrize_upper(jnp.array([[1.0, 2.0], [0.0, 3.0]]))
        Array([[1., 2.],
               [2., 3.]], dtype=float64)
    """
    upper = jnp.triu(matrix)
    return upper + jnp.triu(matrix, k=1).T
