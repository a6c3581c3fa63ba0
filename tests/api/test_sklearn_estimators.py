"""Tests for the scikit-learn transformer."""

import numpy as np
import pytest
from sklearn.base import clone
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from embedax import EmbeddingTransformer, Method, UnsupportedMethodError


class TestEmbeddingTransformer:
    """Test EmbeddingTransformer."""

    def test_get_and_set_params(self):
        """Test the BaseEstimator parameter protocol."""
        transformer = EmbeddingTransformer(method="isomap", target_dimension=3, parameters={"number_of_neighbors": 7})
        params = transformer.get_params()
        assert params == {"method": "isomap", "target_dimension": 3, "parameters": {"number_of_neighbors": 7}}
        transformer.set_params(target_dimension=1)
        assert transformer.target_dimension == 1
        assert clone(transformer).method == "isomap"

    def test_pca_fit_transform_and_transform(self, blob_data):
        """Test that transform reproduces the training embedding for a linear method."""
        transformer = EmbeddingTransformer(method="pca", target_dimension=2)
        embedding = transformer.fit_transform(blob_data)
        assert embedding.shape == (40, 2)
        assert transformer.eigenvalues_.shape == (2,)
        np.testing.assert_allclose(transformer.transform(blob_data), embedding, atol=1e-8)

    def test_pca_leading_component(self, blob_data):
        """Test that the first component captures the dominant direction."""
        transformer = EmbeddingTransformer(method=Method.PCA, target_dimension=1).fit(blob_data)
        direction = transformer.projecting_function_.projection_result.projection_matrix[:, 0]
        assert abs(float(direction[0])) > 0.9

    def test_transform_before_fit(self, blob_data):
        """Test that transform requires fitting first."""
        with pytest.raises(ValueError, match="not fitted"):
            EmbeddingTransformer().transform(blob_data)

    def test_transform_without_projection(self, blob_data):
        """Test that nonlinear methods cannot embed unseen samples."""
        transformer = EmbeddingTransformer(method="mds").fit(blob_data)
        with pytest.raises(UnsupportedMethodError):
            transformer.transform(blob_data)

    def test_rejects_non_matrix_input(self):
        """Test input shape validation."""
        with pytest.raises(ValueError):
            EmbeddingTransformer().fit(np.zeros((2, 2, 2)))

    def test_in_pipeline(self, blob_data):
        """Test use inside a scikit-learn pipeline."""
        pipeline = Pipeline([("scale", StandardScaler()), ("embed", EmbeddingTransformer(method="pca"))])
        assert pipeline.fit_transform(blob_data).shape == (40, 2)
