"""Graph Laplacian based methods: Laplacian eigenmaps, LPP and diffusion maps."""

import jax.numpy as jnp
import numpy as np

from ..api.results import ReturnResult
from ..core.affinity import compute_distance_matrix, compute_feature_matrix, compute_mean_vector
from ..core.callbacks import Callbacks, DistanceCallback
from ..core.constants import DefaultParameters, NumericalConstants
from ..core.context import Context
from ..core.eigen import eigendecomposition, generalized_eigendecomposition
from ..core.parameters import ParameterKey, ParametersMap
from ..core.timing import timed_context
from ..core.type_system import DataRange, DenseSymmetricMatrix
from .base import (
    eigen_method,
    eigen_options,
    feature_dimension,
    linear_result,
    neighbors,
    spectral_result,
    target_dimension,
)


def _kernel_width(parameters: ParametersMap) -> float:
    return parameters.get_positive(ParameterKey.GAUSSIAN_KERNEL_WIDTH, default=DefaultParameters.GAUSSIAN_KERNEL_WIDTH)


def _heat_kernel_weights(
    data: DataRange, distance: DistanceCallback, parameters: ParametersMap, context: Context
) -> DenseSymmetricMatrix:
    """Symmetric heat-kernel weights ``exp(-d^2 / width)`` on the k-NN graph."""
    width = _kernel_width(parameters)
    neighbor_lists, neighbor_distances = neighbors(data, distance, parameters, return_distances=True)
    n = len(data)
    weights = np.zeros((n, n))
    with timed_context("Heat kernel weights computation"):
        for i, (row, row_distances) in enumerate(zip(neighbor_lists, neighbor_distances)):
            context.check_cancelled()
            for j, d in zip(row, row_distances):
                value = np.exp(-(d**2) / width)
                weights[i, j] = value
                weights[j, i] = value
    return jnp.asarray(weights)


def laplacian_eigenmaps_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Laplacian eigenmaps: smallest nontrivial solutions of ``L y = lambda D y``."""
    distance = callbacks.require_distance()
    target = target_dimension(parameters, upper=len(data) - 1)

    context.check_cancelled()
    weights = _heat_kernel_weights(data, distance, parameters, context)
    degree = jnp.diag(jnp.sum(weights, axis=1))
    laplacian = degree - weights
    context.report_progress(0.5)

    context.check_cancelled()
    vectors, values = generalized_eigendecomposition(
        eigen_method(parameters), laplacian, degree, target, largest=False, skip=1, **eigen_options(parameters)
    )
    return spectral_result(vectors, values)


def lpp_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Locality preserving projections: ``X^T L X a = lambda X^T D X a``."""
    distance = callbacks.require_distance()
    features = callbacks.require_feature_vector()
    dimension = feature_dimension(data, features, parameters)
    target = target_dimension(parameters, upper=dimension, what="features")

    context.check_cancelled()
    weights = _heat_kernel_weights(data, distance, parameters, context)
    degree = jnp.diag(jnp.sum(weights, axis=1))
    laplacian = degree - weights

    mean = compute_mean_vector(data, features, dimension)
    centered = compute_feature_matrix(data, features, dimension) - mean[None, :]
    lhs = centered.T @ laplacian @ centered
    rhs = centered.T @ degree @ centered
    context.report_progress(0.5)

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


def diffusion_map_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Diffusion map with anisotropic (alpha = 1) normalization.

    The embedding is made of the nontrivial right eigenvectors of the
    diffusion operator scaled by their eigenvalues raised to the number of
    timesteps.
    """
    distance = callbacks.require_distance()
    target = target_dimension(parameters, upper=len(data) - 1)
    timesteps = parameters.get_positive(
        ParameterKey.DIFFUSION_MAP_TIMESTEPS, default=DefaultParameters.DIFFUSION_MAP_TIMESTEPS
    )
    width = _kernel_width(parameters)

    context.check_cancelled()
    distances = compute_distance_matrix(data, distance)
    kernel = jnp.exp(-(distances**2) / width)

    # alpha = 1 normalization
    density = jnp.sum(kernel, axis=0)
    kernel = kernel / jnp.outer(density, density)
    degree = jnp.maximum(jnp.sum(kernel, axis=0), NumericalConstants.EPSILON)
    symmetric = kernel / jnp.sqrt(jnp.outer(degree, degree))
    symmetric = 0.5 * (symmetric + symmetric.T)
    context.report_progress(0.5)

    context.check_cancelled()
    vectors, values = eigendecomposition(
        eigen_method(parameters), symmetric, target + 1, largest=True, **eigen_options(parameters)
    )
    right = vectors / jnp.sqrt(degree)[:, None]
    right = right / right[:, :1]
    embedding = right[:, 1:] * (values[1:] ** timesteps)[None, :]
    return spectral_result(embedding, values[1:])
