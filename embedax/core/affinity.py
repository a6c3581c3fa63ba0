"""Affinity matrix builders shared by the spectral methods.

All builders are read-only over the data range and never touch the
parameters map. Callback evaluation happens on the host with numpy; the
finished matrices are handed to JAX.

Normalization convention of :func:`compute_covariance_matrix`: the result is
the unnormalized scatter matrix ``sum_i (x_i - mean)(x_i - mean)^T``. Its
trace is ``n`` times the sum of the population variances of the features,
equivalently ``n - 1`` times the sum of their sample variances.
"""

import jax.numpy as jnp
import numpy as np

from .callbacks import DistanceCallback, FeatureVectorCallback, KernelCallback
from .errors import WrongParameterValueError
from .timing import timed_context
from .type_system import DataRange, DenseMatrix, DenseSymmetricMatrix, DenseVector, symmetrize_upper


def _require_samples(data: DataRange) -> int:
    n = len(data)
    if n == 0:
        raise WrongParameterValueError("The data range is empty", parameter_name="data")
    return n


def _rank_update_upper(matrix: np.ndarray, upper: tuple[np.ndarray, np.ndarray], vector: np.ndarray, alpha: float) -> None:
    # matrix += alpha * vector vector^T, upper triangle only
    matrix[upper] += alpha * vector[upper[0]] * vector[upper[1]]


def resolve_feature_dimension(
    data: DataRange,
    feature_vector: FeatureVectorCallback,
    dimension: int | None = None,
) -> int:
    """Determine the feature dimension shared by all samples.

    The explicit ``dimension`` wins, then the dimension declared by the
    callback, then the length of the first feature vector.

    Raises:
        WrongParameterValueError: If the explicit and declared dimensions disagree.
    """
    declared = feature_vector.dimension
    if dimension is not None:
        if declared is not None and declared != dimension:
            raise WrongParameterValueError(
                f"Feature vector callback declares dimension {declared}, expected {dimension}",
                parameter_name="current_dimension",
            )
        return dimension
    if declared is not None:
        return declared
    _require_samples(data)
    return int(feature_vector(data[0]).shape[0])


def compute_covariance_matrix(
    data: DataRange,
    feature_vector: FeatureVectorCallback,
    dimension: int,
) -> DenseSymmetricMatrix:
    """Compute the scatter matrix of the feature vectors in a single pass.

    Each sample contributes a symmetric rank-1 update of the upper triangle
    and is added to a running sum; one final rank-1 update with ``-1/n``
    removes the mean without materializing it.

    Args:
        data: Data range.
        feature_vector: Feature vector callback.
        dimension: Feature dimension.

    Returns:
        Symmetric ``(dimension, dimension)`` scatter matrix.
    """
    with timed_context("Constructing PCA covariance matrix"):
        n = _require_samples(data)
        covariance = np.zeros((dimension, dimension), dtype=np.float64)
        total = np.zeros(dimension, dtype=np.float64)
        upper = np.triu_indices(dimension)

        for handle in data:
            current = feature_vector.vector(handle, dimension)
            total += current
            _rank_update_upper(covariance, upper, current, 1.0)

        _rank_update_upper(covariance, upper, total, -1.0 / n)
        return symmetrize_upper(jnp.asarray(covariance))


def compute_kernel_matrix(data: DataRange, kernel: KernelCallback) -> DenseSymmetricMatrix:
    """Evaluate the kernel once per unordered pair and mirror it."""
    n = _require_samples(data)
    matrix = np.empty((n, n), dtype=np.float64)
    for i in range(n):
        a = data[i]
        for j in range(i, n):
            value = kernel(a, data[j])
            matrix[i, j] = value
            matrix[j, i] = value
    return jnp.asarray(matrix)


def compute_distance_matrix(data: DataRange, distance: DistanceCallback) -> DenseSymmetricMatrix:
    """Evaluate the distance once per unordered pair of distinct samples and mirror it."""
    with timed_context("Distance matrix computation"):
        n = _require_samples(data)
        matrix = np.zeros((n, n), dtype=np.float64)
        for i in range(n):
            a = data[i]
            for j in range(i + 1, n):
                value = distance(a, data[j])
                matrix[i, j] = value
                matrix[j, i] = value
        return jnp.asarray(matrix)


def compute_feature_matrix(data: DataRange, feature_vector: FeatureVectorCallback, dimension: int) -> DenseMatrix:
    """Stack the feature vectors of all samples as rows."""
    n = _require_samples(data)
    matrix = np.empty((n, dimension), dtype=np.float64)
    for i, handle in enumerate(data):
        matrix[i] = feature_vector.vector(handle, dimension)
    return jnp.asarray(matrix)


def compute_mean_vector(data: DataRange, feature_vector: FeatureVectorCallback, dimension: int) -> DenseVector:
    """Mean of the feature vectors of all samples."""
    n = _require_samples(data)
    total = np.zeros(dimension, dtype=np.float64)
    for handle in data:
        total += feature_vector.vector(handle, dimension)
    return jnp.asarray(total / n)


def center_matrix(matrix: DenseMatrix) -> DenseMatrix:
    """Double-center a matrix.

    Computes ``K - 1 rowMean - colMean 1^T + grandMean`` so that every row
    and every column of the result sums to zero.
    """
    row_means = jnp.mean(matrix, axis=1, keepdims=True)
    col_means = jnp.mean(matrix, axis=0, keepdims=True)
    return matrix - row_means - col_means + jnp.mean(matrix)


def compute_centered_kernel_matrix(data: DataRange, kernel: KernelCallback) -> DenseSymmetricMatrix:
    """Compute the double-centered Gram matrix of the kernel over the data range.

    Args:
        data: Data range.
        kernel: Kernel callback.

    Returns:
        Symmetric ``(n, n)`` centered kernel matrix with zero row and column sums.
    """
    with timed_context("Constructing kPCA centered kernel matrix"):
        return center_matrix(compute_kernel_matrix(data, kernel))
