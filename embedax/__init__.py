"""embedax: JAX-native dimensionality reduction engine.

A single entry point, :func:`embed`, computes dense low-dimensional embeddings
of arbitrary data reachable only through user callbacks: a kernel (similarity),
a distance (dissimilarity) and a feature vector. Nineteen methods are
available, from PCA and MDS to Isomap, locally linear embeddings, diffusion
maps, SPE and t-SNE. Linear methods also return a projecting function for
samples unseen during the embedding.

Quick start:
    >>> import numpy as np
    >>> import embedax as ex
    >>> X = np.random.default_rng(0).normal(size=(100, 5))
    >>> data, callbacks = ex.from_array(X)
    >>> result = ex.embed(
    ...     data,
    ...     callbacks.kernel,
    ...     callbacks.distance,
    ...     callbacks.feature_vector,
    ...     method="pca",
    ...     target_dimension=2,
    ... )
    >>> result.embedding.shape
    (100, 2)
    >>> result.projecting_function(X[0]).shape
    (2,)

Custom data types only need tagged callbacks:
    >>> @ex.distance
    ... def edit_distance(a, b):
    ...     return float(levenshtein(a, b))
    >>> result = ex.embed(words, distance_callback=edit_distance, method="isomap", number_of_neighbors=5)
"""

__version__ = "0.1.0"

import jax

# Eigenshifts and trace shifts are below single precision resolution.
jax.config.update("jax_enable_x64", True)

from .api import (  # noqa: E402
    CancelledError,
    EigendecompositionError,
    EmbeddingError,
    EmbeddingResult,
    EmbeddingTransformer,
    MissingParameterError,
    NotEnoughMemoryError,
    ParameterError,
    ProjectingFunction,
    ProjectionResult,
    ReturnResult,
    UnsupportedMethodError,
    WrongParameterTypeError,
    WrongParameterValueError,
    embed,
    project,
)
from .core import (  # noqa: E402
    Callbacks,
    Context,
    DistanceCallback,
    EigenMethod,
    FeatureVectorCallback,
    KernelCallback,
    Method,
    NeighborsMethod,
    ParameterKey,
    ParametersMap,
    distance,
    feature_vector,
    from_array,
    get_method_name,
    kernel,
)

__all__ = [
    "Callbacks",
    "CancelledError",
    "Context",
    "DistanceCallback",
    "EigenMethod",
    "EigendecompositionError",
    "EmbeddingError",
    "EmbeddingResult",
    "EmbeddingTransformer",
    "FeatureVectorCallback",
    "KernelCallback",
    "Method",
    "MissingParameterError",
    "NeighborsMethod",
    "NotEnoughMemoryError",
    "ParameterError",
    "ParameterKey",
    "ParametersMap",
    "ProjectingFunction",
    "ProjectionResult",
    "ReturnResult",
    "UnsupportedMethodError",
    "WrongParameterTypeError",
    "WrongParameterValueError",
    "__version__",
    "distance",
    "embed",
    "feature_vector",
    "from_array",
    "get_method_name",
    "kernel",
    "project",
]
