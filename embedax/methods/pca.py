"""Projection methods built on feature vectors or kernel Gram matrices."""

import jax
import jax.numpy as jnp

from ..api.results import ReturnResult
from ..core.affinity import (
    compute_centered_kernel_matrix,
    compute_covariance_matrix,
    compute_feature_matrix,
    compute_mean_vector,
)
from ..core.callbacks import Callbacks
from ..core.context import Context
from ..core.eigen import eigendecomposition
from ..core.parameters import ParametersMap
from ..core.type_system import DataRange
from .base import (
    eigen_method,
    eigen_options,
    feature_dimension,
    linear_result,
    random_key,
    spectral_result,
    target_dimension,
)


def pca_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Principal component analysis.

    The projection consists of the leading eigenvectors of the scatter
    matrix; the auxiliary vector holds the corresponding eigenvalues.
    """
    features = callbacks.require_feature_vector()
    dimension = feature_dimension(data, features, parameters)
    target = target_dimension(parameters, upper=dimension, what="features")

    context.check_cancelled()
    covariance = compute_covariance_matrix(data, features, dimension)
    context.report_progress(0.5)

    context.check_cancelled()
    vectors, values = eigendecomposition(
        eigen_method(parameters), covariance, target, largest=True, **eigen_options(parameters)
    )
    mean = compute_mean_vector(data, features, dimension)
    context.report_progress(1.0)
    return linear_result(data, features, dimension, vectors, mean, values)


def kernel_pca_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Kernel principal component analysis on the centered Gram matrix."""
    kernel = callbacks.require_kernel()
    target = target_dimension(parameters, upper=len(data))

    context.check_cancelled()
    centered = compute_centered_kernel_matrix(data, kernel)
    context.report_progress(0.5)

    context.check_cancelled()
    vectors, values = eigendecomposition(
        eigen_method(parameters), centered, target, largest=True, **eigen_options(parameters)
    )
    embedding = vectors * jnp.sqrt(jnp.maximum(values, 0.0))[None, :]
    context.report_progress(1.0)
    return spectral_result(embedding, values)


def random_projection_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Projection onto a seeded Gaussian random matrix scaled by ``1/sqrt(t)``."""
    features = callbacks.require_feature_vector()
    dimension = feature_dimension(data, features, parameters)
    target = target_dimension(parameters)

    context.check_cancelled()
    projection_matrix = jax.random.normal(random_key(parameters), (dimension, target), dtype=jnp.float64)
    projection_matrix = projection_matrix / jnp.sqrt(target)
    return linear_result(data, features, dimension, projection_matrix)


def passthru_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Return the feature vectors unchanged; the target dimension is ignored."""
    features = callbacks.require_feature_vector()
    dimension = feature_dimension(data, features, parameters)

    context.check_cancelled()
    return spectral_result(compute_feature_matrix(data, features, dimension))
