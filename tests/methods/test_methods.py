"""Tests for the embedding method implementations."""

import numpy as np
import pytest

from embedax import (
    EigendecompositionError,
    Method,
    MissingParameterError,
    WrongParameterValueError,
    distance,
    embed,
    from_array,
)

SMOKE_PARAMETERS = {
    Method.KERNEL_LOCALLY_LINEAR_EMBEDDING: {},
    Method.KERNEL_LOCAL_TANGENT_SPACE_ALIGNMENT: {},
    Method.DIFFUSION_MAP: {"gaussian_kernel_width": 20.0, "diffusion_map_timesteps": 2},
    Method.MULTIDIMENSIONAL_SCALING: {},
    Method.LANDMARK_MULTIDIMENSIONAL_SCALING: {"landmark_ratio": 0.3},
    Method.ISOMAP: {"number_of_neighbors": 12},
    Method.LANDMARK_ISOMAP: {"number_of_neighbors": 12},
    Method.NEIGHBORHOOD_PRESERVING_EMBEDDING: {},
    Method.LINEAR_LOCAL_TANGENT_SPACE_ALIGNMENT: {},
    Method.HESSIAN_LOCALLY_LINEAR_EMBEDDING: {"number_of_neighbors": 12},
    Method.LAPLACIAN_EIGENMAPS: {"gaussian_kernel_width": 20.0},
    Method.LOCALITY_PRESERVING_PROJECTIONS: {"gaussian_kernel_width": 20.0},
    Method.PCA: {},
    Method.KERNEL_PCA: {},
    Method.RANDOM_PROJECTION: {},
    Method.STOCHASTIC_PROXIMITY_EMBEDDING: {"max_iteration": 200},
    Method.PASS_THRU: {},
    Method.FACTOR_ANALYSIS: {"max_iteration": 200},
    Method.T_DISTRIBUTED_STOCHASTIC_NEIGHBOR_EMBEDDING: {"max_iteration": 300, "sne_perplexity": 10.0},
}

LINEAR_METHODS = {
    Method.PCA,
    Method.RANDOM_PROJECTION,
    Method.FACTOR_ANALYSIS,
    Method.LOCALITY_PRESERVING_PROJECTIONS,
    Method.NEIGHBORHOOD_PRESERVING_EMBEDDING,
    Method.LINEAR_LOCAL_TANGENT_SPACE_ALIGNMENT,
}

EIGEN_METHODS = set(Method) - {
    Method.RANDOM_PROJECTION,
    Method.STOCHASTIC_PROXIMITY_EMBEDDING,
    Method.PASS_THRU,
    Method.FACTOR_ANALYSIS,
    Method.T_DISTRIBUTED_STOCHASTIC_NEIGHBOR_EMBEDDING,
}


def embed_array(X, **parameters):
    data, callbacks = from_array(X)
    return embed(data, callbacks.kernel, callbacks.distance, callbacks.feature_vector, **parameters)


def assert_same_up_to_sign(a, b, atol):
    a, b = np.asarray(a), np.asarray(b)
    for column in range(a.shape[1]):
        sign = np.sign(a[:, column] @ b[:, column])
        np.testing.assert_allclose(a[:, column], sign * b[:, column], atol=atol)


def assert_same_span(a, b, atol):
    qa, _ = np.linalg.qr(np.asarray(a))
    qb, _ = np.linalg.qr(np.asarray(b))
    np.testing.assert_allclose(qa @ qa.T, qb @ qb.T, atol=atol)


class TestSmoke:
    """Every method runs end to end on a swiss roll."""

    @pytest.mark.parametrize("method", list(Method))
    def test_method_runs(self, swiss_roll, method):
        """Test the shape, finiteness and projection availability of each method."""
        result = embed_array(swiss_roll, method=method, eigen_method="dense", **SMOKE_PARAMETERS[method])
        expected_columns = 3 if method is Method.PASS_THRU else 2
        assert result.embedding.shape == (60, expected_columns)
        assert np.all(np.isfinite(np.asarray(result.embedding)))
        assert result.has_projection == (method in LINEAR_METHODS)
        assert result.metadata["method"] is method

    @pytest.mark.parametrize("method", sorted(EIGEN_METHODS, key=lambda m: m.value))
    def test_iterative_backend_matches_dense(self, swiss_roll, method):
        """Test that the ARPACK backend spans the same embedding subspace as the dense one."""
        parameters = SMOKE_PARAMETERS[method]
        dense = embed_array(swiss_roll, method=method, eigen_method="dense", **parameters)
        iterative = embed_array(swiss_roll, method=method, eigen_method="arpack", **parameters)
        assert iterative.embedding.shape == dense.embedding.shape == (60, 2)
        assert_same_span(iterative.embedding, dense.embedding, atol=1e-5)


class TestProjectionMethods:
    """Test PCA and its relatives against closed-form answers."""

    def test_pca_eigenvalues_match_scatter_matrix(self, blob_data):
        """Test that auxiliary holds the leading scatter eigenvalues."""
        result = embed_array(blob_data, method="pca", target_dimension=3)
        centered = blob_data - blob_data.mean(axis=0)
        expected = np.sort(np.linalg.eigvalsh(centered.T @ centered))[::-1][:3]
        np.testing.assert_allclose(result.eigenvalues, expected, rtol=1e-8)

    def test_pca_embedding_is_centered(self, blob_data):
        """Test that the projection subtracts the mean."""
        result = embed_array(blob_data, method="pca")
        np.testing.assert_allclose(np.mean(np.asarray(result.embedding), axis=0), 0.0, atol=1e-10)

    def test_kernel_pca_with_linear_kernel_matches_pca(self, blob_data):
        """Test that linear kernel PCA reproduces PCA up to sign."""
        pca = embed_array(blob_data, method="pca", eigen_method="dense")
        kpca = embed_array(blob_data, method="kernel_pca", eigen_method="dense")
        assert_same_up_to_sign(kpca.embedding, pca.embedding, atol=1e-6)

    def test_mds_matches_pca(self, blob_data):
        """Test that classic MDS on Euclidean distances reproduces PCA up to sign."""
        pca = embed_array(blob_data, method="pca", eigen_method="dense")
        mds = embed_array(blob_data, method="mds", eigen_method="dense")
        assert_same_up_to_sign(mds.embedding, pca.embedding, atol=1e-6)

    def test_landmark_mds_with_all_landmarks_matches_mds(self, blob_data):
        """Test that landmark MDS with every sample as landmark equals classic MDS."""
        mds = embed_array(blob_data, method="mds", eigen_method="dense")
        landmark = embed_array(blob_data, method="landmark_mds", landmark_ratio=1.0, eigen_method="dense")
        assert_same_up_to_sign(landmark.embedding, mds.embedding, atol=1e-6)

    def test_passthru_returns_features(self, blob_data):
        """Test that pass-through ignores the target dimension."""
        result = embed_array(blob_data, method="passthru", target_dimension=1)
        np.testing.assert_allclose(result.embedding, blob_data)
        assert result.projecting_function is None

    def test_random_projection_is_seeded(self, blob_data):
        """Test that the same seed yields the same projection."""
        first = embed_array(blob_data, method="random_projection", random_seed=7)
        second = embed_array(blob_data, method="random_projection", random_seed=7)
        third = embed_array(blob_data, method="random_projection", random_seed=8)
        np.testing.assert_array_equal(np.asarray(first.embedding), np.asarray(second.embedding))
        assert not np.allclose(np.asarray(first.embedding), np.asarray(third.embedding))

    def test_target_dimension_above_features(self, blob_data):
        """Test that PCA cannot produce more components than features."""
        with pytest.raises(WrongParameterValueError):
            embed_array(blob_data, method="pca", target_dimension=6)


class TestCustomHandles:
    """Methods only touch data through the callbacks."""

    def test_mds_on_strings(self):
        """Test MDS over string handles with a length distance."""
        words = ["a", "to", "cat", "tree", "house", "garden", "kitchen"]

        @distance
        def length_gap(a, b):
            return abs(len(a) - len(b))

        result = embed(words, distance_callback=length_gap, method="mds", target_dimension=1)
        coordinates = np.asarray(result.embedding)[:, 0]
        lengths = np.array([len(w) for w in words], dtype=float)
        assert abs(np.corrcoef(coordinates, lengths)[0, 1]) == pytest.approx(1.0, abs=1e-8)

    @pytest.mark.parametrize("method", [Method.ISOMAP, Method.LAPLACIAN_EIGENMAPS])
    def test_distance_evaluated_once_per_pair(self, swiss_roll, method):
        """Test that graph weights reuse the distances from the neighbor search."""
        calls = []

        @distance
        def counting_euclidean(i, j):
            calls.append((i, j))
            return float(np.linalg.norm(swiss_roll[i] - swiss_roll[j]))

        n = len(swiss_roll)
        embed(
            range(n),
            distance_callback=counting_euclidean,
            method=method,
            neighbors_method="brute_force",
            eigen_method="dense",
            **SMOKE_PARAMETERS[method],
        )
        assert len(calls) == n * (n - 1) // 2

    def test_method_needing_kernel_without_one(self):
        """Test the missing callback failure for custom handles."""

        @distance
        def zero(a, b):
            return 0.0

        with pytest.raises(MissingParameterError):
            embed(["x", "y", "z"], distance_callback=zero, method="klle")


class TestMethodParameters:
    """Test method-specific parameter validation."""

    def test_isomap_on_disconnected_graph(self):
        """Test that geodesics on a disconnected neighborhood graph are rejected."""
        X = np.vstack([np.random.default_rng(0).normal(size=(10, 2)), 1000.0 + np.random.default_rng(1).normal(size=(10, 2))])
        with pytest.raises(WrongParameterValueError) as exc_info:
            embed_array(X, method="isomap", number_of_neighbors=3)
        assert exc_info.value.parameter_name == "number_of_neighbors"

    def test_hlle_needs_enough_neighbors(self, swiss_roll):
        """Test the neighborhood size requirement of Hessian LLE."""
        with pytest.raises(WrongParameterValueError):
            embed_array(swiss_roll, method="hlle", number_of_neighbors=6)

    @pytest.mark.parametrize("method", ["klle", "npe"])
    def test_zero_trace_shift_rejected(self, swiss_roll, method):
        """Test that reconstruction weights need a positive regularizer."""
        X = np.vstack([swiss_roll, swiss_roll])
        with pytest.raises(WrongParameterValueError) as exc_info:
            embed_array(X, method=method, klle_trace_shift=0.0, eigen_method="dense")
        assert exc_info.value.parameter_name == "klle_trace_shift"

    def test_singular_local_gram(self, swiss_roll, monkeypatch):
        """Test that a failed local solve surfaces as an eigendecomposition error."""

        def singular(*args, **kwargs):
            raise np.linalg.LinAlgError("Singular matrix")

        monkeypatch.setattr(np.linalg, "solve", singular)
        with pytest.raises(EigendecompositionError, match="singular"):
            embed_array(swiss_roll, method="klle", eigen_method="dense")

    def test_too_many_neighbors(self, blob_data):
        """Test that neighborhoods cannot exceed the data size."""
        with pytest.raises(WrongParameterValueError):
            embed_array(blob_data, method="klle", number_of_neighbors=40)

    @pytest.mark.parametrize("ratio", [0.0, 1.5])
    def test_landmark_ratio_range(self, blob_data, ratio):
        """Test that the landmark ratio must lie in (0, 1]."""
        with pytest.raises(WrongParameterValueError):
            embed_array(blob_data, method="landmark_mds", landmark_ratio=ratio)

    def test_perplexity_range(self, blob_data):
        """Test that the perplexity must be below n - 1."""
        with pytest.raises(WrongParameterValueError):
            embed_array(blob_data, method="tsne", sne_perplexity=50.0)

    def test_eigenproblem_too_large(self):
        """Test that requesting more eigenpairs than available fails."""
        X = np.random.default_rng(0).normal(size=(3, 2))
        with pytest.raises((EigendecompositionError, WrongParameterValueError)):
            embed_array(X, method="laplacian_eigenmaps", target_dimension=3, number_of_neighbors=2)


class TestIterativeMethods:
    """Test SPE, t-SNE and factor analysis."""

    def test_spe_local_strategy(self, swiss_roll):
        """Test the local SPE strategy."""
        result = embed_array(swiss_roll, method="spe", spe_global_strategy=False, max_iteration=100)
        assert result.embedding.shape == (60, 2)
        assert np.all(np.isfinite(np.asarray(result.embedding)))

    def test_spe_preserves_distances(self):
        """Test that global SPE of planar data keeps distance ranks."""
        X = np.random.default_rng(2).uniform(size=(30, 2))
        result = embed_array(X, method="spe", max_iteration=500, spe_num_updates=200)
        Y = np.asarray(result.embedding)
        original = np.linalg.norm(X[:, None] - X[None], axis=-1)
        embedded = np.linalg.norm(Y[:, None] - Y[None], axis=-1)
        upper = np.triu_indices(30, 1)
        assert np.corrcoef(original[upper], embedded[upper])[0, 1] > 0.9

    def test_tsne_separates_clusters(self):
        """Test that t-SNE keeps two well-separated clusters apart."""
        rng = np.random.default_rng(4)
        X = np.vstack([rng.normal(size=(20, 4)), 20.0 + rng.normal(size=(20, 4))])
        result = embed_array(X, method="tsne", sne_perplexity=5.0, max_iteration=400)
        Y = np.asarray(result.embedding)
        within = np.linalg.norm(Y[:20].mean(axis=0) - Y[:20], axis=1).mean()
        between = np.linalg.norm(Y[:20].mean(axis=0) - Y[20:].mean(axis=0))
        assert between > 2.0 * within
        assert result.eigenvalues.shape == (1,)

    def test_factor_analysis_recovers_latent_dimension(self):
        """Test factor analysis on data generated by one latent factor."""
        rng = np.random.default_rng(5)
        latent = rng.normal(size=(200, 1))
        loadings = np.array([[2.0, -1.0, 0.5, 1.5]])
        X = latent @ loadings + 0.05 * rng.normal(size=(200, 4))
        result = embed_array(X, method="factor_analysis", target_dimension=1, max_iteration=500)
        coordinates = np.asarray(result.embedding)[:, 0]
        assert abs(np.corrcoef(coordinates, latent[:, 0])[0, 1]) > 0.99
