"""Local-geometry methods: kernel LLE, NPE, LTSA variants and Hessian LLE.

All of them work from the kernel callback. The full kernel matrix is
evaluated once; neighborhoods use the distance the kernel induces in its
feature space, and each neighborhood contributes a small dense block to a
global sparse-structured alignment matrix.
"""

import jax.numpy as jnp
import numpy as np

from ..api.results import ReturnResult
from ..core.affinity import compute_feature_matrix, compute_kernel_matrix, compute_mean_vector
from ..core.callbacks import Callbacks
from ..core.context import Context
from ..core.eigen import eigendecomposition, generalized_eigendecomposition
from ..core.errors import EigendecompositionError, WrongParameterValueError
from ..core.neighbors import Neighbors
from ..core.parameters import ParameterKey, ParametersMap
from ..core.timing import timed_context
from ..core.type_system import DataRange, DenseSymmetricMatrix
from .base import (
    centered_local_gram,
    eigen_method,
    eigen_options,
    feature_dimension,
    linear_result,
    local_gram,
    neighbors,
    number_of_neighbors,
    spectral_result,
    target_dimension,
)


def _kernel_neighborhoods(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, k: int | None = None
) -> tuple[np.ndarray, Neighbors]:
    kernel = callbacks.require_kernel()
    with timed_context("Kernel matrix computation"):
        kernel_matrix = np.asarray(compute_kernel_matrix(data, kernel))
    diagonal = np.diag(kernel_matrix)

    def induced_distance(i: int, j: int) -> float:
        return float(np.sqrt(max(diagonal[i] + diagonal[j] - 2.0 * kernel_matrix[i, j], 0.0)))

    return kernel_matrix, neighbors(range(len(data)), induced_distance, parameters, k)


def _reconstruction_weights(
    kernel_matrix: np.ndarray, neighbor_lists: Neighbors, parameters: ParametersMap, context: Context
) -> DenseSymmetricMatrix:
    """Null-space matrix ``(I - W)^T (I - W)`` of the locally linear reconstruction weights."""
    shift = parameters.get_positive(ParameterKey.KLLE_TRACE_SHIFT)
    n = kernel_matrix.shape[0]
    weights = np.zeros((n, n))

    with timed_context("KLLE weight computation"):
        for i, row in enumerate(neighbor_lists):
            if i % 64 == 0:
                context.check_cancelled()
                context.report_progress(0.5 * i / n)
            gram = local_gram(kernel_matrix, i, row)
            trace = np.trace(gram)
            gram[np.diag_indices_from(gram)] += shift * trace if trace > 0 else shift
            try:
                solution = np.linalg.solve(gram, np.ones(len(row)))
            except np.linalg.LinAlgError as e:
                raise EigendecompositionError(f"Local Gram matrix of sample {i} is singular: {e}") from e
            weights[i, row] = solution / np.sum(solution)

    residual = jnp.eye(n) - jnp.asarray(weights)
    null_space = residual.T @ residual
    return 0.5 * (null_space + null_space.T)


def _tangent_alignment(
    kernel_matrix: np.ndarray, neighbor_lists: Neighbors, target: int, context: Context
) -> DenseSymmetricMatrix:
    """Alignment matrix of local tangent spaces estimated from centered local Gram matrices."""
    n = kernel_matrix.shape[0]
    alignment = np.zeros((n, n))

    with timed_context("KLTSA alignment matrix computation"):
        for i, row in enumerate(neighbor_lists):
            if i % 64 == 0:
                context.check_cancelled()
                context.report_progress(0.5 * i / n)
            indices = np.concatenate(([i], row))
            size = len(indices)
            _, local_vectors = np.linalg.eigh(centered_local_gram(kernel_matrix, indices))
            basis = np.hstack([np.full((size, 1), 1.0 / np.sqrt(size)), local_vectors[:, ::-1][:, :target]])
            alignment[np.ix_(indices, indices)] += np.eye(size) - basis @ basis.T

    return jnp.asarray(0.5 * (alignment + alignment.T))


def _hessian_alignment(
    kernel_matrix: np.ndarray, neighbor_lists: Neighbors, target: int, context: Context
) -> DenseSymmetricMatrix:
    """Sum of local Hessian estimators ``H_i H_i^T``."""
    n = kernel_matrix.shape[0]
    products = target * (target + 1) // 2
    alignment = np.zeros((n, n))
    upper = np.triu_indices(target)

    with timed_context("Hessian LLE alignment matrix computation"):
        for i, row in enumerate(neighbor_lists):
            if i % 64 == 0:
                context.check_cancelled()
                context.report_progress(0.5 * i / n)
            indices = np.concatenate(([i], row))
            _, local_vectors = np.linalg.eigh(centered_local_gram(kernel_matrix, indices))
            tangent = local_vectors[:, ::-1][:, :target]
            quadratic = tangent[:, upper[0]] * tangent[:, upper[1]]
            design = np.hstack([np.ones((len(indices), 1)), tangent, quadratic])
            orthonormal, _ = np.linalg.qr(design)
            hessian = orthonormal[:, 1 + target : 1 + target + products]
            sums = hessian.sum(axis=0)
            sums[np.abs(sums) < 1e-4] = 1.0
            hessian = hessian / sums[None, :]
            alignment[np.ix_(indices, indices)] += hessian @ hessian.T

    return jnp.asarray(0.5 * (alignment + alignment.T))


def _linear_projection(
    data: DataRange,
    callbacks: Callbacks,
    parameters: ParametersMap,
    context: Context,
    alignment: DenseSymmetricMatrix,
    target: int,
    dimension: int,
) -> ReturnResult:
    """Solve ``X^T A X a = lambda X^T X a`` on centered features and keep the projection."""
    features = callbacks.require_feature_vector()
    mean = compute_mean_vector(data, features, dimension)
    centered = compute_feature_matrix(data, features, dimension) - mean[None, :]
    lhs = centered.T @ alignment @ centered
    rhs = centered.T @ centered

    context.check_cancelled()
    vectors, values = generalized_eigendecomposition(
        eigen_method(parameters),
        0.5 * (lhs + lhs.T),
        0.5 * (rhs + rhs.T),
        target,
        largest=False,
        **eigen_options(parameters),
    )
    return linear_result(data, features, dimension, vectors, mean, values)


def klle_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Kernel locally linear embedding."""
    target = target_dimension(parameters, upper=len(data) - 1)

    context.check_cancelled()
    kernel_matrix, neighbor_lists = _kernel_neighborhoods(data, callbacks, parameters)
    null_space = _reconstruction_weights(kernel_matrix, neighbor_lists, parameters, context)

    context.check_cancelled()
    vectors, values = eigendecomposition(
        eigen_method(parameters), null_space, target, largest=False, skip=1, **eigen_options(parameters)
    )
    return spectral_result(vectors, values)


def npe_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Neighborhood preserving embedding, the linear approximation of LLE."""
    features = callbacks.require_feature_vector()
    dimension = feature_dimension(data, features, parameters)
    target = target_dimension(parameters, upper=dimension, what="features")

    context.check_cancelled()
    kernel_matrix, neighbor_lists = _kernel_neighborhoods(data, callbacks, parameters)
    null_space = _reconstruction_weights(kernel_matrix, neighbor_lists, parameters, context)
    return _linear_projection(data, callbacks, parameters, context, null_space, target, dimension)


def kltsa_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Kernel local tangent space alignment."""
    target = target_dimension(parameters, upper=len(data) - 1)

    context.check_cancelled()
    kernel_matrix, neighbor_lists = _kernel_neighborhoods(data, callbacks, parameters)
    alignment = _tangent_alignment(kernel_matrix, neighbor_lists, target, context)

    context.check_cancelled()
    vectors, values = eigendecomposition(
        eigen_method(parameters), alignment, target, largest=False, skip=1, **eigen_options(parameters)
    )
    return spectral_result(vectors, values)


def lltsa_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Linear local tangent space alignment."""
    features = callbacks.require_feature_vector()
    dimension = feature_dimension(data, features, parameters)
    target = target_dimension(parameters, upper=dimension, what="features")

    context.check_cancelled()
    kernel_matrix, neighbor_lists = _kernel_neighborhoods(data, callbacks, parameters)
    alignment = _tangent_alignment(kernel_matrix, neighbor_lists, target, context)
    return _linear_projection(data, callbacks, parameters, context, alignment, target, dimension)


def hlle_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Hessian locally linear embedding.

    Needs more than ``1 + t + t(t+1)/2`` neighbors per sample to estimate
    the local Hessians.
    """
    target = target_dimension(parameters, upper=len(data) - 1)
    k = number_of_neighbors(parameters)
    required = 1 + target + target * (target + 1) // 2
    if k <= required:
        raise WrongParameterValueError(
            f"Hessian LLE with target dimension {target} needs more than {required} neighbors, got {k}",
            parameter_name=ParameterKey.NUMBER_OF_NEIGHBORS.value,
        )

    context.check_cancelled()
    kernel_matrix, neighbor_lists = _kernel_neighborhoods(data, callbacks, parameters, k)
    alignment = _hessian_alignment(kernel_matrix, neighbor_lists, target, context)

    context.check_cancelled()
    vectors, values = eigendecomposition(
        eigen_method(parameters), alignment, target, largest=False, skip=1, **eigen_options(parameters)
    )
    return spectral_result(vectors, values)
