"""k-nearest-neighbor search over opaque data handles.

Two backends are provided:

- ``NeighborsMethod.BRUTE_FORCE``: evaluates the distance once per unordered
  pair and sorts every row.
- ``NeighborsMethod.VP_TREE``: a vantage-point tree, which only needs the
  distance callback to be a metric and prunes subtrees with the triangle
  inequality.
"""

import heapq
import logging
from collections.abc import Callable
from typing import Any, NamedTuple

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components

from .callbacks import KernelCallback
from .errors import UnsupportedMethodError, WrongParameterValueError
from .methods import NeighborsMethod, available_neighbors_methods
from .timing import timed_context
from .type_system import DataRange

logger = logging.getLogger(__name__)

Neighbors = list[np.ndarray]
"""Neighbor positions of every sample, self excluded, nearest first."""

NeighborDistances = list[np.ndarray]
"""Distances to the neighbors, aligned with :data:`Neighbors`."""


def kernel_distance(kernel: KernelCallback) -> Callable[[Any, Any], float]:
    """Distance induced by a kernel in its feature space.

    ``d(a, b) = sqrt(max(k(a, a) + k(b, b) - 2 k(a, b), 0))``.
    """

    def distance(a: Any, b: Any) -> float:
        squared = kernel(a, a) + kernel(b, b) - 2.0 * kernel(a, b)
        return float(np.sqrt(max(squared, 0.0)))

    return distance


def _brute_force(
    data: DataRange, distance: Callable[[Any, Any], float], k: int
) -> tuple[Neighbors, NeighborDistances]:
    n = len(data)
    distances = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        a = data[i]
        for j in range(i + 1, n):
            value = distance(a, data[j])
            distances[i, j] = value
            distances[j, i] = value
    np.fill_diagonal(distances, np.inf)
    indices = [np.argsort(row, kind="stable")[:k] for row in distances]
    return indices, [row[columns] for row, columns in zip(distances, indices)]


class _Node(NamedTuple):
    position: int
    threshold: float
    inside: "_Node | None"
    outside: "_Node | None"


class VantagePointTree:
    """Vantage-point tree over the positions of a data range.

    Every node splits the remaining positions at the median distance to its
    vantage point: the inside subtree holds positions no farther than
    ``threshold``, the outside subtree positions no closer.

    Args:
        data: Data range.
        distance: Metric between two handles.
        seed: Seed of the vantage point selection.
    """

    def __init__(self, data: DataRange, distance: Callable[[Any, Any], float], seed: int = 0):
        """Build the tree over all positions of ``data``."""
        self.data = data
        self.distance = distance
        self._rng = np.random.default_rng(seed)
        self.root = self._build(list(range(len(data))))

    def _metric(self, i: int, j: int) -> float:
        return float(self.distance(self.data[i], self.data[j]))

    def _build(self, positions: list[int]) -> _Node | None:
        if not positions:
            return None
        pick = int(self._rng.integers(len(positions)))
        positions[0], positions[pick] = positions[pick], positions[0]
        vantage, rest = positions[0], positions[1:]
        if not rest:
            return _Node(vantage, 0.0, None, None)

        distances = np.array([self._metric(vantage, other) for other in rest])
        order = np.argsort(distances, kind="stable")
        median = len(rest) // 2
        threshold = float(distances[order[median]])
        return _Node(
            vantage,
            threshold,
            self._build([rest[i] for i in order[:median]]),
            self._build([rest[i] for i in order[median:]]),
        )

    def query(self, position: int, k: int, return_distances: bool = False) -> Any:
        """Return the ``k`` nearest positions to ``position``, itself excluded, nearest first.

        With ``return_distances`` the distances are returned as a second array.
        """
        # max-heap of the best candidates so far
        heap: list[tuple[float, int]] = []

        def radius() -> float:
            return -heap[0][0] if len(heap) == k else np.inf

        def search(node: _Node | None) -> None:
            if node is None:
                return
            d = self._metric(position, node.position)
            if node.position != position:
                if len(heap) < k:
                    heapq.heappush(heap, (-d, -node.position))
                elif d < radius():
                    heapq.heapreplace(heap, (-d, -node.position))

            if d < node.threshold:
                if d - radius() <= node.threshold:
                    search(node.inside)
                if d + radius() >= node.threshold:
                    search(node.outside)
            else:
                if d + radius() >= node.threshold:
                    search(node.outside)
                if d - radius() <= node.threshold:
                    search(node.inside)

        search(self.root)
        found = sorted((-negative_distance, -negative_position) for negative_distance, negative_position in heap)
        positions = np.array([found_position for _, found_position in found], dtype=np.int64)
        if return_distances:
            return positions, np.array([found_distance for found_distance, _ in found], dtype=np.float64)
        return positions


def _vp_tree(
    data: DataRange, distance: Callable[[Any, Any], float], k: int
) -> tuple[Neighbors, NeighborDistances]:
    tree = VantagePointTree(data, distance)
    results = [tree.query(i, k, return_distances=True) for i in range(len(data))]
    return [indices for indices, _ in results], [distances for _, distances in results]


def is_connected(neighbors: Neighbors) -> bool:
    """Check whether the symmetrized neighborhood graph is connected."""
    n = len(neighbors)
    if n == 0:
        return True
    rows = np.repeat(np.arange(n), [len(row) for row in neighbors])
    columns = np.concatenate([np.asarray(row, dtype=np.int64) for row in neighbors])
    graph = csr_matrix((np.ones(rows.shape[0]), (rows, columns)), shape=(n, n))
    count, _ = connected_components(graph, directed=False)
    return count == 1


def find_neighbors(
    method: NeighborsMethod,
    data: DataRange,
    distance: Callable[[Any, Any], float],
    k: int,
    check_connectivity: bool = True,
    return_distances: bool = False,
) -> Any:
    """Find the ``k`` nearest neighbors of every sample.

    Args:
        method: Neighbor-search backend.
        data: Data range.
        distance: Distance between two handles; must be a metric for the vantage-point tree.
        k: Number of neighbors per sample.
        check_connectivity: Warn if the neighborhood graph is not connected.
        return_distances: Also return the distances evaluated during the search.

    Returns:
        One array of ``k`` neighbor positions per sample, and with
        ``return_distances`` the aligned neighbor distances as a second list.

    Raises:
        WrongParameterValueError: If ``k`` is not in ``[1, n - 1]``.
        UnsupportedMethodError: If the backend is not available.
    """
    n = len(data)
    if k < 1 or k >= n:
        raise WrongParameterValueError(
            f"Number of neighbors must be in [1, {n - 1}] for {n} samples, got {k}",
            parameter_name="number_of_neighbors",
        )
    if method not in available_neighbors_methods():
        raise UnsupportedMethodError(f"Neighbors backend '{method.value}' is not available in this installation")

    with timed_context("Neighbors computation"):
        if method is NeighborsMethod.VP_TREE:
            neighbors, distances = _vp_tree(data, distance, k)
        else:
            neighbors, distances = _brute_force(data, distance, k)

    if check_connectivity and not is_connected(neighbors):
        logger.warning("The neighborhood graph is not connected.")
    if return_distances:
        return neighbors, distances
    return neighbors
