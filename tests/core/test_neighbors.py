"""Tests for neighbor search backends."""

import logging

import numpy as np
import pytest

from embedax.core.dense_callbacks import from_array
from embedax.core.errors import WrongParameterValueError
from embedax.core.methods import NeighborsMethod
from embedax.core.neighbors import VantagePointTree, find_neighbors, is_connected, kernel_distance


@pytest.fixture(params=[NeighborsMethod.BRUTE_FORCE, NeighborsMethod.VP_TREE])
def backend(request):
    return request.param


class TestFindNeighbors:
    """Test k-nearest-neighbor search."""

    def test_points_on_a_line(self, backend):
        """Test neighbors of points on a line with increasing gaps."""
        X = (np.arange(6, dtype=float) ** 1.1).reshape(-1, 1)
        data, callbacks = from_array(X)
        neighbors = find_neighbors(backend, data, callbacks.distance, 2)
        assert len(neighbors) == 6
        assert set(neighbors[0].tolist()) == {1, 2}
        assert set(neighbors[3].tolist()) == {2, 4}
        assert all(i not in row for i, row in enumerate(neighbors))

    def test_backends_agree(self, blob_data):
        """Test that the vantage-point tree and brute force find the same neighbors."""
        data, callbacks = from_array(blob_data)
        brute = find_neighbors(NeighborsMethod.BRUTE_FORCE, data, callbacks.distance, 5)
        tree = find_neighbors(NeighborsMethod.VP_TREE, data, callbacks.distance, 5)
        for a, b in zip(brute, tree):
            assert set(a.tolist()) == set(b.tolist())

    def test_returned_distances(self, backend, blob_data):
        """Test that returned distances are sorted and match the Euclidean norm."""
        data, callbacks = from_array(blob_data)
        neighbors, distances = find_neighbors(backend, data, callbacks.distance, 4, return_distances=True)
        assert len(distances) == len(neighbors) == len(blob_data)
        for i, (row, row_distances) in enumerate(zip(neighbors, distances)):
            expected = np.linalg.norm(blob_data[row] - blob_data[i], axis=1)
            np.testing.assert_allclose(row_distances, expected, atol=1e-10)
            assert np.all(np.diff(row_distances) >= 0)

    @pytest.mark.parametrize("k", [0, 6])
    def test_invalid_neighbor_count(self, backend, k):
        """Test that k must lie in [1, n - 1]."""
        data, callbacks = from_array(np.random.default_rng(0).normal(size=(6, 2)))
        with pytest.raises(WrongParameterValueError) as exc_info:
            find_neighbors(backend, data, callbacks.distance, k)
        assert exc_info.value.parameter_name == "number_of_neighbors"

    def test_disconnected_graph_warns(self, caplog):
        """Test the connectivity warning on two far-apart clusters."""
        X = np.vstack([np.zeros((4, 2)) + np.arange(4)[:, None] * 0.1, np.full((4, 2), 100.0)])
        data, callbacks = from_array(X)
        with caplog.at_level(logging.WARNING, logger="embedax.core.neighbors"):
            find_neighbors(NeighborsMethod.BRUTE_FORCE, data, callbacks.distance, 2)
        assert "The neighborhood graph is not connected." in caplog.text

    def test_connectivity_check_can_be_disabled(self, caplog):
        """Test that no warning is logged without the connectivity check."""
        X = np.vstack([np.zeros((3, 1)), np.full((3, 1), 50.0)]) + np.arange(6)[:, None] * 0.01
        data, callbacks = from_array(X)
        with caplog.at_level(logging.WARNING, logger="embedax.core.neighbors"):
            find_neighbors(NeighborsMethod.BRUTE_FORCE, data, callbacks.distance, 1, check_connectivity=False)
        assert caplog.text == ""


class TestGraphHelpers:
    """Test connectivity and kernel-induced distances."""

    def test_is_connected(self):
        """Test connectivity of symmetrized neighbor graphs."""
        assert is_connected([np.array([1]), np.array([2]), np.array([0])])
        assert not is_connected([np.array([1]), np.array([0]), np.array([3]), np.array([2])])

    def test_kernel_distance(self):
        """Test the feature-space distance induced by a linear kernel."""
        X = np.array([[0.0, 0.0], [3.0, 4.0]])
        _, callbacks = from_array(X)
        assert kernel_distance(callbacks.kernel)(0, 1) == pytest.approx(5.0)


class TestVantagePointTree:
    """Test the vantage-point tree on non-vector handles."""

    def test_query_over_strings(self):
        """Test neighbors of words under a length metric."""
        words = ["a", "bb", "ccc", "dddd", "eeeee", "ffffff", "ggggggg"]
        tree = VantagePointTree(words, lambda a, b: abs(len(a) - len(b)), seed=3)
        assert tree.query(0, 2).tolist() == [1, 2]
        assert set(tree.query(3, 2).tolist()) == {2, 4}

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_matches_exhaustive_search(self, seed):
        """Test that pruning never drops a true neighbor."""
        X = np.random.default_rng(seed).uniform(size=(50, 3))
        data, callbacks = from_array(X)
        tree = VantagePointTree(data, callbacks.distance, seed=seed)
        distances = np.linalg.norm(X[:, None] - X[None], axis=-1)
        np.fill_diagonal(distances, np.inf)
        for i in range(50):
            expected = np.argsort(distances[i])[:4]
            np.testing.assert_array_equal(tree.query(i, 4), expected)
