"""Out-of-sample projection with a previously learned linear map."""

from typing import Any

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array

from ..core.affinity import compute_feature_matrix, resolve_feature_dimension
from ..core.callbacks import FeatureVectorCallback
from ..core.errors import WrongParameterTypeError, WrongParameterValueError
from ..core.timing import timed_context
from ..core.type_system import DataRange, empty_vector
from .results import EmbeddingResult, ProjectionResult


def project(
    projection_result: ProjectionResult,
    data: DataRange,
    feature_vector: FeatureVectorCallback,
    dimension: int,
) -> EmbeddingResult:
    """Embed samples with a learned projection.

    Row ``i`` of the embedding is ``P^T (x_i - mean)`` where ``x_i`` is the
    feature vector of the ``i``-th sample.

    Args:
        projection_result: Projection matrix and mean vector.
        data: Data range of (possibly new) samples.
        feature_vector: Feature vector callback.
        dimension: Expected feature dimension.

    Returns:
        EmbeddingResult with an empty auxiliary vector.

    Raises:
        WrongParameterTypeError: If the callback is not a feature vector callback.
        WrongParameterValueError: If the callback's dimension differs from ``dimension``
            or from the projection matrix.
    """
    if not isinstance(feature_vector, FeatureVectorCallback):
        raise WrongParameterTypeError(
            "Projection requires a feature vector callback",
            parameter_name="feature_vector",
            expected_type=FeatureVectorCallback,
            received_value=feature_vector,
        )
    projection_matrix, mean_vector = projection_result
    if projection_matrix.shape[0] != dimension:
        raise WrongParameterValueError(
            f"Projection matrix expects dimension {projection_matrix.shape[0]}, got {dimension}",
            parameter_name="current_dimension",
        )
    resolve_feature_dimension(data, feature_vector, dimension)

    with timed_context("Data projection"):
        if len(data) == 0:
            return EmbeddingResult(jnp.zeros((0, projection_matrix.shape[1])), empty_vector())
        features = compute_feature_matrix(data, feature_vector, dimension)
        embedding = (features - mean_vector[None, :]) @ projection_matrix
    return EmbeddingResult(embedding, empty_vector())


class ProjectingFunction:
    """Callable wrapper around a :class:`ProjectionResult`.

    Calling it on a single feature vector returns its embedding; use
    :meth:`project` to embed a whole data range through a callback.

    Example:
        >>> result = embed(data, feature_vector_callback=features, method="pca")
        >>> result.projecting_function(np.array([1.0, 2.0, 3.0]))
    """

    def __init__(self, projection_result: ProjectionResult):
        """Initialize with the learned projection."""
        self.projection_result = projection_result

    @property
    def dimension(self) -> int:
        """Feature dimension the projection expects."""
        return int(self.projection_result.projection_matrix.shape[0])

    def __call__(self, vector: Array | np.ndarray) -> Array:
        projection_matrix, mean_vector = self.projection_result
        vector = jnp.asarray(vector, dtype=projection_matrix.dtype)
        if vector.shape[-1] != self.dimension:
            raise WrongParameterValueError(
                f"Feature vector has dimension {vector.shape[-1]}, expected {self.dimension}",
                parameter_name="current_dimension",
            )
        return (vector - mean_vector) @ projection_matrix

    def project(self, data: DataRange, feature_vector: FeatureVectorCallback) -> EmbeddingResult:
        """Embed a data range through a feature vector callback."""
        return project(self.projection_result, data, feature_vector, self.dimension)

    def __repr__(self) -> str:
        shape: Any = tuple(self.projection_result.projection_matrix.shape)
        return f"ProjectingFunction(projection_matrix_shape={shape})"
