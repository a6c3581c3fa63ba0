"""Eigen backends extracting leading or trailing eigenpairs of affinity matrices.

Two backends are provided:

- ``EigenMethod.DENSE``: full symmetric decomposition with ``jnp.linalg.eigh``.
- ``EigenMethod.ARPACK``: implicitly restarted Lanczos iterations through
  ``scipy.sparse.linalg.eigsh``. Trailing eigenpairs are found in
  shift-invert mode around ``-eigenshift``.

Generalized problems ``A v = lambda B v`` are reduced to standard ones with a
Cholesky factorization of ``B + eigenshift I`` on the dense backend.
"""

import logging

import jax.numpy as jnp
import numpy as np
from jax.scipy.linalg import cholesky, solve_triangular

from .errors import EigendecompositionError, UnsupportedMethodError
from .methods import EigenMethod, available_eigen_methods
from .timing import timed_context
from .type_system import DenseMatrix, DenseSymmetricMatrix, DenseVector
from .validation import validate_symmetric

logger = logging.getLogger(__name__)


def _check_request(method: EigenMethod, matrix: DenseSymmetricMatrix, target_dimension: int, skip: int) -> None:
    if method not in available_eigen_methods():
        raise UnsupportedMethodError(f"Eigen backend '{method.value}' is not available in this installation")
    result = validate_symmetric(matrix)
    if not result.is_valid:
        raise EigendecompositionError("; ".join(result.violations))
    order = matrix.shape[0]
    requested = target_dimension + skip
    if target_dimension < 1 or requested > order:
        raise EigendecompositionError(
            f"Cannot extract {target_dimension} eigenpairs (skipping {skip}) from a matrix of order {order}",
            requested=requested,
            order=order,
        )


def _use_dense(method: EigenMethod, requested: int, order: int) -> bool:
    if method is EigenMethod.DENSE:
        return True
    # ARPACK needs strictly fewer eigenpairs than the matrix order
    if requested >= order:
        logger.info("Requested %d eigenpairs of a %dx%d matrix, using dense solver.", requested, order, order)
        return True
    return False


def _select(values: DenseVector, vectors: DenseMatrix, target_dimension: int, largest: bool, skip: int):
    # values arrive in ascending order
    order = jnp.argsort(values)
    if largest:
        order = order[::-1]
    selected = order[skip : skip + target_dimension]
    return vectors[:, selected], values[selected]


def _finite_or_raise(vectors: DenseMatrix, values: DenseVector) -> tuple[DenseMatrix, DenseVector]:
    if not (bool(jnp.all(jnp.isfinite(values))) and bool(jnp.all(jnp.isfinite(vectors)))):
        raise EigendecompositionError("Eigendecomposition produced non-finite values")
    return vectors, values


def _arpack(
    lhs: np.ndarray,
    k: int,
    largest: bool,
    eigenshift: float,
    seed: int,
    rhs: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    from scipy.sparse.linalg import ArpackError, eigsh

    v0 = np.random.default_rng(seed).uniform(-1.0, 1.0, size=lhs.shape[0])
    try:
        if largest:
            values, vectors = eigsh(lhs, k=k, M=rhs, which="LA", v0=v0)
        else:
            values, vectors = eigsh(lhs, k=k, M=rhs, sigma=-eigenshift, which="LM", v0=v0)
    except (ArpackError, np.linalg.LinAlgError, RuntimeError) as e:
        raise EigendecompositionError(f"ARPACK eigendecomposition failed: {e}", requested=k, order=lhs.shape[0]) from e
    return values, vectors


def eigendecomposition(
    method: EigenMethod,
    matrix: DenseSymmetricMatrix,
    target_dimension: int,
    largest: bool = True,
    skip: int = 0,
    eigenshift: float = 1e-9,
    seed: int = 0,
) -> tuple[DenseMatrix, DenseVector]:
    """Extract eigenpairs of a symmetric matrix.

    Args:
        method: Eigen backend.
        matrix: Symmetric matrix.
        target_dimension: Number of eigenpairs to return.
        largest: Return the largest eigenpairs if True, the smallest otherwise.
        skip: Number of leading (or trailing) eigenpairs to discard first,
            e.g. 1 for the constant eigenvector of a Laplacian.
        eigenshift: Shift used by the iterative backend for the smallest eigenpairs.
        seed: Seed of the iterative backend's starting vector.

    Returns:
        ``(vectors, values)`` with eigenvectors as columns, ordered from the
        most to the least significant eigenvalue.

    Raises:
        UnsupportedMethodError: If the backend is not available.
        EigendecompositionError: If the eigenpairs cannot be computed.
    """
    _check_request(method, matrix, target_dimension, skip)
    requested = target_dimension + skip
    order = matrix.shape[0]

    with timed_context(f"Eigendecomposition ({method.value})"):
        if _use_dense(method, requested, order):
            values, vectors = jnp.linalg.eigh(matrix)
        else:
            values, vectors = _arpack(np.asarray(matrix), requested, largest, eigenshift, seed)
            values, vectors = jnp.asarray(values), jnp.asarray(vectors)
        vectors, values = _select(values, vectors, target_dimension, largest, skip)
        return _finite_or_raise(vectors, values)


def generalized_eigendecomposition(
    method: EigenMethod,
    lhs: DenseSymmetricMatrix,
    rhs: DenseSymmetricMatrix,
    target_dimension: int,
    largest: bool = False,
    skip: int = 0,
    eigenshift: float = 1e-9,
    seed: int = 0,
) -> tuple[DenseMatrix, DenseVector]:
    """Extract eigenpairs of the generalized problem ``lhs v = lambda rhs v``.

    Args:
        method: Eigen backend.
        lhs: Symmetric left-hand matrix.
        rhs: Symmetric positive semi-definite right-hand matrix.
        target_dimension: Number of eigenpairs to return.
        largest: Return the largest eigenpairs if True, the smallest otherwise.
        skip: Number of trivial eigenpairs to discard first.
        eigenshift: Diagonal shift added to ``rhs`` to make it positive definite.
        seed: Seed of the iterative backend's starting vector.

    Returns:
        ``(vectors, values)`` with ``rhs``-orthonormal eigenvectors as columns.

    Raises:
        UnsupportedMethodError: If the backend is not available.
        EigendecompositionError: If ``rhs`` is not positive definite or the
            eigenpairs cannot be computed.
    """
    _check_request(method, lhs, target_dimension, skip)
    requested = target_dimension + skip
    order = lhs.shape[0]
    shifted_rhs = rhs + eigenshift * jnp.eye(order, dtype=rhs.dtype)

    with timed_context(f"Generalized eigendecomposition ({method.value})"):
        if not _use_dense(method, requested, order):
            values, vectors = _arpack(np.asarray(lhs), requested, largest, eigenshift, seed, rhs=np.asarray(shifted_rhs))
            vectors, values = _select(jnp.asarray(values), jnp.asarray(vectors), target_dimension, largest, skip)
            return _finite_or_raise(vectors, values)

        factor = cholesky(shifted_rhs, lower=True)
        if not bool(jnp.all(jnp.isfinite(factor))):
            raise EigendecompositionError("Right-hand matrix of the generalized eigenproblem is not positive definite")

        # C = L^-1 A L^-T
        half = solve_triangular(factor, lhs, lower=True)
        reduced = solve_triangular(factor, half.T, lower=True)
        reduced = 0.5 * (reduced + reduced.T)

        values, vectors = jnp.linalg.eigh(reduced)
        vectors, values = _select(values, vectors, target_dimension, largest, skip)
        vectors = solve_triangular(factor.T, vectors, lower=False)
        return _finite_or_raise(vectors, values)
