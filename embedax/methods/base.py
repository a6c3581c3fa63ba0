"""Helpers shared by the method implementations.

Every implementation has the uniform signature::

    implementation(data, callbacks, parameters, context) -> ReturnResult
"""

from collections.abc import Callable
from typing import Any

import jax
import jax.numpy as jnp
import numpy as np

from ..api.projection import ProjectingFunction, project
from ..api.results import EmbeddingResult, ProjectionResult, ReturnResult
from ..core.affinity import compute_mean_vector, resolve_feature_dimension
from ..core.callbacks import Callbacks, FeatureVectorCallback
from ..core.constants import DefaultParameters
from ..core.context import Context
from ..core.errors import WrongParameterValueError
from ..core.methods import EigenMethod, NeighborsMethod
from ..core.neighbors import find_neighbors
from ..core.parameters import ParameterKey, ParametersMap
from ..core.type_system import DataRange, DenseMatrix, DenseVector

Implementation = Callable[[DataRange, Callbacks, ParametersMap, Context], ReturnResult]


def target_dimension(parameters: ParametersMap, upper: int | None = None, what: str = "samples") -> int:
    """Read the target dimension and check it against an upper bound.

    Raises:
        WrongParameterValueError: If the dimension is not positive or exceeds ``upper``.
    """
    dimension = parameters.get_positive(ParameterKey.TARGET_DIMENSION)
    if upper is not None and dimension > upper:
        raise WrongParameterValueError(
            f"Target dimension {dimension} exceeds the number of {what} ({upper})",
            parameter_name=ParameterKey.TARGET_DIMENSION.value,
        )
    return dimension


def eigen_options(parameters: ParametersMap) -> dict[str, Any]:
    """Keyword arguments shared by all eigendecomposition calls."""
    return {
        "eigenshift": parameters.get(ParameterKey.EIGENSHIFT),
        "seed": random_seed(parameters),
    }


def eigen_method(parameters: ParametersMap) -> EigenMethod:
    """Read the eigen backend."""
    return parameters.get(ParameterKey.EIGEN_METHOD)


def random_seed(parameters: ParametersMap) -> int:
    """Read the random seed."""
    return parameters.get_positive(ParameterKey.RANDOM_SEED, default=DefaultParameters.RANDOM_SEED, strict=False)


def random_key(parameters: ParametersMap) -> jax.Array:
    """PRNG key derived from the random seed."""
    return jax.random.PRNGKey(random_seed(parameters))


def number_of_neighbors(parameters: ParametersMap) -> int:
    """Read the neighborhood size."""
    return parameters.get_positive(ParameterKey.NUMBER_OF_NEIGHBORS, default=DefaultParameters.NUMBER_OF_NEIGHBORS)


def neighbors(
    data: DataRange,
    distance: Callable[[Any, Any], float],
    parameters: ParametersMap,
    k: int | None = None,
    return_distances: bool = False,
) -> Any:
    """Find neighbors with the configured backend and neighborhood size."""
    method = parameters.get(ParameterKey.NEIGHBORS_METHOD, default=NeighborsMethod.BRUTE_FORCE)
    return find_neighbors(
        method,
        data,
        distance,
        number_of_neighbors(parameters) if k is None else k,
        parameters.get(ParameterKey.CHECK_CONNECTIVITY),
        return_distances,
    )


def feature_dimension(data: DataRange, feature_vector: FeatureVectorCallback, parameters: ParametersMap) -> int:
    """Feature dimension from ``current_dimension`` or from the callback."""
    explicit = parameters.get(ParameterKey.CURRENT_DIMENSION, default=None)
    if explicit is not None and explicit < 1:
        raise WrongParameterValueError(
            f"Current dimension must be positive, got {explicit}",
            parameter_name=ParameterKey.CURRENT_DIMENSION.value,
        )
    return resolve_feature_dimension(data, feature_vector, explicit)


def local_gram(kernel_matrix: np.ndarray, center: int, indices: np.ndarray) -> np.ndarray:
    """Gram matrix of the differences ``x_j - x_center`` for ``j`` in ``indices``."""
    cross = kernel_matrix[center, indices]
    return kernel_matrix[np.ix_(indices, indices)] - cross[None, :] - cross[:, None] + kernel_matrix[center, center]


def centered_local_gram(kernel_matrix: np.ndarray, indices: np.ndarray) -> np.ndarray:
    """Double-centered Gram matrix of a neighborhood."""
    gram = kernel_matrix[np.ix_(indices, indices)]
    return gram - gram.mean(axis=0)[None, :] - gram.mean(axis=1)[:, None] + gram.mean()


def spectral_result(embedding: DenseMatrix, values: DenseVector | None = None) -> ReturnResult:
    """Result of a method without out-of-sample projection."""
    if values is None:
        return ReturnResult(EmbeddingResult(embedding))
    return ReturnResult(EmbeddingResult(embedding, values))


def linear_result(
    data: DataRange,
    feature_vector: FeatureVectorCallback,
    dimension: int,
    projection_matrix: DenseMatrix,
    mean_vector: DenseVector | None = None,
    values: DenseVector | None = None,
) -> ReturnResult:
    """Embed the training samples with a learned projection and keep it for new samples."""
    if mean_vector is None:
        mean_vector = compute_mean_vector(data, feature_vector, dimension)
    projection_result = ProjectionResult(jnp.asarray(projection_matrix), jnp.asarray(mean_vector))
    embedding_result = project(projection_result, data, feature_vector, dimension)
    if values is not None:
        embedding_result.auxiliary = values
    return ReturnResult(embedding_result, ProjectingFunction(projection_result))
