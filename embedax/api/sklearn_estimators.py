"""Scikit-learn estimator interface for the embedding engine.

Wraps :func:`embedax.embed` over plain arrays so that any method can be used
inside sklearn pipelines, ``GridSearchCV`` and cross-validation.
"""

from collections.abc import Mapping
from typing import Any

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array
from sklearn.base import BaseEstimator, TransformerMixin

from ..core.dense_callbacks import from_array
from ..core.errors import UnsupportedMethodError
from ..core.methods import Method
from .embed import embed
from .projection import ProjectingFunction


class EmbeddingTransformer(TransformerMixin, BaseEstimator):
    """Dimensionality reduction transformer backed by :func:`embedax.embed`.

    Rows of ``X`` are samples. The kernel callback is linear unless
    ``gaussian_kernel_width`` is given in ``parameters``. Only methods that learn
    a linear projection (PCA, random projection, factor analysis, LPP, NPE,
    LLTSA) can transform samples not seen during fitting.

    Args:
        method: Method name or :class:`Method` member.
        target_dimension: Dimension of the embedding.
        parameters: Further engine parameters, e.g. ``{"number_of_neighbors": 8}``.

    Attributes:
        embedding_: Embedding of the training samples.
        eigenvalues_: Auxiliary vector of the training embedding.
        projecting_function_: Learned projection, or None for nonlinear methods.

    Example:
        >>> transformer = EmbeddingTransformer(method="pca", target_dimension=2)
        >>> Y = transformer.fit_transform(X)
        >>> Y_new = transformer.transform(X_new)
    """

    def __init__(
        self,
        method: str | Method = "pca",
        target_dimension: int = 2,
        parameters: Mapping[str, Any] | None = None,
    ):
        """Initialize the transformer."""
        self.method = method
        self.target_dimension = target_dimension
        self.parameters = parameters

    def _embed(self, X: Array | np.ndarray):
        values = np.asarray(X, dtype=np.float64)
        if values.ndim != 2:
            raise ValueError(f"Expected a 2D array of samples, got shape {values.shape}.")
        extra = dict(self.parameters or {})
        width = extra.get("gaussian_kernel_width")
        data, callbacks = from_array(values, kernel_width=width)
        result = embed(
            data,
            callbacks.kernel,
            callbacks.distance,
            callbacks.feature_vector,
            parameters=extra,
            method=self.method,
            target_dimension=self.target_dimension,
            output_feature_vectors_are_columns=False,
        )
        self.embedding_ = result.embedding
        self.eigenvalues_ = result.eigenvalues
        self.projecting_function_: ProjectingFunction | None = result.projecting_function
        self.n_features_in_ = values.shape[1]
        return self

    def fit(self, X: Array | np.ndarray, y: Any = None) -> "EmbeddingTransformer":
        """Compute the embedding of the training samples.

        Args:
            X: Training data of shape (n_samples, n_features).
            y: Ignored, present for API consistency.

        Returns:
            Self with the fitted embedding.
        """
        return self._embed(X)

    def fit_transform(self, X: Array | np.ndarray, y: Any = None, **fit_params: Any) -> Array:
        """Fit and return the embedding of the training samples."""
        return self._embed(X).embedding_

    def transform(self, X: Array | np.ndarray) -> Array:
        """Embed new samples with the learned projection.

        Args:
            X: Data of shape (n_samples, n_features).

        Returns:
            Embedding of shape (n_samples, target_dimension).

        Raises:
            ValueError: If the transformer is not fitted.
            UnsupportedMethodError: If the method learned no projection.
        """
        if not hasattr(self, "embedding_"):
            raise ValueError("EmbeddingTransformer not fitted. Call fit() first.")
        if self.projecting_function_ is None:
            name = self.method.value if isinstance(self.method, Method) else self.method
            raise UnsupportedMethodError(f"Method '{name}' cannot embed samples unseen during fitting.")
        values = jnp.asarray(np.asarray(X, dtype=np.float64))
        return self.projecting_function_(values)
