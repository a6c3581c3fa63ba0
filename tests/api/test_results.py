"""Tests for result containers."""

import jax.numpy as jnp

from embedax import EmbeddingResult, ProjectingFunction, ProjectionResult, ReturnResult


class TestEmbeddingResult:
    """Test EmbeddingResult."""

    def test_unpacks_as_pair(self):
        """Test tuple-style unpacking."""
        result = EmbeddingResult(jnp.ones((3, 2)), jnp.array([2.0, 1.0]))
        embedding, auxiliary = result
        assert embedding.shape == (3, 2)
        assert result.eigenvalues is auxiliary

    def test_default_auxiliary_is_empty(self):
        """Test that methods without eigenvalues report an empty vector."""
        result = EmbeddingResult(jnp.ones((3, 2)))
        assert result.auxiliary.shape == (0,)


class TestReturnResult:
    """Test ReturnResult."""

    def test_without_projection(self):
        """Test a nonlinear method's result."""
        result = ReturnResult(EmbeddingResult(jnp.zeros((4, 2))))
        embedding_result, projecting_function = result
        assert projecting_function is None
        assert not result.has_projection
        assert result.embedding is embedding_result.embedding
        assert result.metadata == {}

    def test_with_projection(self):
        """Test a linear method's result."""
        projection = ProjectionResult(jnp.eye(2), jnp.zeros(2))
        matrix, mean = projection
        assert matrix.shape == (2, 2) and mean.shape == (2,)
        result = ReturnResult(EmbeddingResult(jnp.zeros((4, 2)), jnp.array([1.0, 0.5])), ProjectingFunction(projection))
        assert result.has_projection
        assert result.eigenvalues.shape == (2,)
