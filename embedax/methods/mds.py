"""Multidimensional scaling and its geodesic (Isomap) and landmark variants."""

import logging

import jax
import jax.numpy as jnp
import numpy as np
from scipy.sparse.csgraph import csgraph_from_dense, shortest_path

from ..api.results import ReturnResult
from ..core.affinity import center_matrix, compute_distance_matrix
from ..core.callbacks import Callbacks, DistanceCallback
from ..core.constants import DefaultParameters, NumericalConstants
from ..core.context import Context
from ..core.eigen import eigendecomposition
from ..core.errors import EigendecompositionError, WrongParameterValueError
from ..core.parameters import ParameterKey, ParametersMap
from ..core.timing import timed_context
from ..core.type_system import DataRange, DenseMatrix
from .base import eigen_method, eigen_options, neighbors, random_key, spectral_result, target_dimension

logger = logging.getLogger(__name__)


def _classic_mds(squared: DenseMatrix, target: int, parameters: ParametersMap) -> ReturnResult:
    gram = -0.5 * center_matrix(squared)
    vectors, values = eigendecomposition(eigen_method(parameters), gram, target, largest=True, **eigen_options(parameters))
    return spectral_result(vectors * jnp.sqrt(jnp.maximum(values, 0.0))[None, :], values)


def _select_landmarks(n: int, target: int, parameters: ParametersMap) -> np.ndarray:
    ratio = parameters.get_in_range(
        ParameterKey.LANDMARK_RATIO, 0.0, 1.0, default=DefaultParameters.LANDMARK_RATIO, include_lower=False
    )
    count = min(n, max(int(n * ratio), target + 1))
    permutation = jax.random.permutation(random_key(parameters), n)
    landmarks = np.sort(np.asarray(permutation[:count]))
    logger.debug("Selected %d landmarks out of %d samples.", count, n)
    return landmarks


def _landmark_triangulation(
    landmark_distances: np.ndarray, landmarks: np.ndarray, target: int, parameters: ParametersMap
) -> ReturnResult:
    # landmark_distances: (n_landmarks, n) distances from every landmark to every sample
    squared = jnp.asarray(landmark_distances) ** 2
    block = squared[:, landmarks]
    gram = -0.5 * center_matrix(block)
    vectors, values = eigendecomposition(eigen_method(parameters), gram, target, largest=True, **eigen_options(parameters))
    if not bool(jnp.all(values > NumericalConstants.EPSILON)):
        raise EigendecompositionError(
            f"Landmark distance matrix has fewer than {target} positive eigenvalues",
            requested=target,
            order=len(landmarks),
        )
    pseudo_inverse = vectors / jnp.sqrt(values)[None, :]
    mean_squared = jnp.mean(block, axis=1)
    embedding = -0.5 * (squared - mean_squared[:, None]).T @ pseudo_inverse
    return spectral_result(embedding, values)


def _neighborhood_graph(data: DataRange, distance: DistanceCallback, parameters: ParametersMap, context: Context):
    n = len(data)
    neighbor_lists, neighbor_distances = neighbors(data, distance, parameters, return_distances=True)
    graph = np.full((n, n), np.inf)
    for i, (row, row_distances) in enumerate(zip(neighbor_lists, neighbor_distances)):
        context.check_cancelled()
        for j, weight in zip(row, row_distances):
            graph[i, j] = weight
            graph[j, i] = weight
    return csgraph_from_dense(graph, null_value=np.inf)


def _geodesic_distances(graph, indices: np.ndarray | None = None) -> np.ndarray:
    with timed_context("Geodesic distances computation"):
        geodesics = shortest_path(graph, method="D", directed=False, indices=indices)
    if not np.all(np.isfinite(geodesics)):
        raise WrongParameterValueError(
            "The neighborhood graph is not connected, geodesic distances are undefined. "
            "Increase number_of_neighbors.",
            parameter_name=ParameterKey.NUMBER_OF_NEIGHBORS.value,
        )
    return geodesics


def mds_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Classic (Torgerson) multidimensional scaling."""
    distance = callbacks.require_distance()
    target = target_dimension(parameters, upper=len(data))

    context.check_cancelled()
    distances = compute_distance_matrix(data, distance)
    context.report_progress(0.5)
    context.check_cancelled()
    return _classic_mds(distances**2, target, parameters)


def landmark_mds_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Landmark MDS: classic MDS on a random landmark subset, other samples triangulated."""
    distance = callbacks.require_distance()
    n = len(data)
    target = target_dimension(parameters, upper=n)
    landmarks = _select_landmarks(n, target, parameters)

    landmark_distances = np.zeros((len(landmarks), n))
    with timed_context("Landmark distances computation"):
        for row, landmark in enumerate(landmarks):
            context.check_cancelled()
            for j in range(n):
                if j != landmark:
                    landmark_distances[row, j] = distance(data[int(landmark)], data[j])
            context.report_progress((row + 1) / len(landmarks))
    return _landmark_triangulation(landmark_distances, landmarks, target, parameters)


def isomap_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Isomap: classic MDS on shortest-path distances of the neighborhood graph."""
    distance = callbacks.require_distance()
    target = target_dimension(parameters, upper=len(data))

    context.check_cancelled()
    graph = _neighborhood_graph(data, distance, parameters, context)
    context.check_cancelled()
    geodesics = _geodesic_distances(graph)
    context.report_progress(0.5)
    context.check_cancelled()
    return _classic_mds(jnp.asarray(geodesics) ** 2, target, parameters)


def landmark_isomap_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Landmark Isomap: geodesics from landmarks only, then landmark triangulation."""
    distance = callbacks.require_distance()
    n = len(data)
    target = target_dimension(parameters, upper=n)
    landmarks = _select_landmarks(n, target, parameters)

    context.check_cancelled()
    graph = _neighborhood_graph(data, distance, parameters, context)
    context.check_cancelled()
    geodesics = _geodesic_distances(graph, indices=landmarks)
    context.report_progress(0.5)
    context.check_cancelled()
    return _landmark_triangulation(geodesics, landmarks, target, parameters)
