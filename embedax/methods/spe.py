"""Stochastic proximity embedding.

Random pairs of points are pulled together or pushed apart so that their
embedded distance approaches the normalized input distance. The learning
rate decays linearly from 1 to 0 over ``max_iteration`` iterations.

With the local strategy only neighbor pairs carry a target distance; other
pairs are pushed apart only while they are closer than the neighborhood
cutoff radius.
"""

from functools import partial

import jax
import jax.numpy as jnp
import numpy as np

from ..api.results import ReturnResult
from ..core.affinity import compute_distance_matrix
from ..core.callbacks import Callbacks
from ..core.constants import DefaultParameters, NumericalConstants
from ..core.context import Context
from ..core.errors import WrongParameterValueError
from ..core.parameters import ParameterKey, ParametersMap
from ..core.timing import timed_context
from ..core.type_system import DataRange, DenseMatrix
from .base import neighbors, random_key, spectral_result, target_dimension


def _local_targets(distances: np.ndarray, parameters: ParametersMap) -> tuple[np.ndarray, float]:
    """Target distances of neighbor pairs, ``inf`` elsewhere, and the cutoff radius."""
    n = distances.shape[0]
    neighbor_lists = neighbors(range(n), lambda i, j: float(distances[i, j]), parameters)
    targets = np.full((n, n), np.inf)
    for i, row in enumerate(neighbor_lists):
        targets[i, row] = distances[i, row]
        targets[row, i] = distances[i, row]
    np.fill_diagonal(targets, 0.0)
    return targets, float(np.max(targets[np.isfinite(targets)]))


@partial(jax.jit, static_argnames=("num_updates",))
def _spe_step(
    embedding: DenseMatrix,
    targets: DenseMatrix,
    cutoff: float,
    learning_rate: float,
    tolerance: float,
    key: jax.Array,
    num_updates: int,
) -> DenseMatrix:
    n = embedding.shape[0]
    first_key, offset_key = jax.random.split(key)
    first = jax.random.randint(first_key, (num_updates,), 0, n)
    second = (first + jax.random.randint(offset_key, (num_updates,), 1, n)) % n

    difference = embedding[first] - embedding[second]
    current = jnp.linalg.norm(difference, axis=1)
    target = targets[first, second]
    unknown = jnp.isinf(target)
    # unknown pairs only repel up to the cutoff radius
    target = jnp.where(unknown, jnp.maximum(current, cutoff), target)

    scale = 0.5 * learning_rate * (target - current) / (current + tolerance)
    delta = scale[:, None] * difference
    return embedding.at[first].add(delta).at[second].add(-delta)


def spe_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Stochastic proximity embedding with the global or local update strategy."""
    distance = callbacks.require_distance()
    n = len(data)
    target = target_dimension(parameters)
    global_strategy = parameters.get(ParameterKey.SPE_GLOBAL_STRATEGY, default=DefaultParameters.SPE_GLOBAL_STRATEGY)
    num_updates = parameters.get_positive(ParameterKey.SPE_NUM_UPDATES, default=DefaultParameters.SPE_NUM_UPDATES)
    tolerance = parameters.get_positive(ParameterKey.SPE_TOLERANCE, default=DefaultParameters.SPE_TOLERANCE)
    max_iteration = parameters.get_positive(ParameterKey.MAX_ITERATION, default=DefaultParameters.MAX_ITERATION)

    if n < 2:
        raise WrongParameterValueError(f"SPE needs at least 2 samples, got {n}")

    context.check_cancelled()
    distances = np.asarray(compute_distance_matrix(data, distance))
    distances = distances / max(float(np.max(distances)), NumericalConstants.EPSILON)

    if global_strategy:
        targets, cutoff = distances, 0.0
    else:
        targets, cutoff = _local_targets(distances, parameters)
    targets = jnp.asarray(targets)

    init_key, key = jax.random.split(random_key(parameters))
    embedding = jax.random.uniform(init_key, (n, target), dtype=jnp.float64)

    with timed_context("SPE updates"):
        for iteration in range(max_iteration):
            context.check_cancelled()
            key, step_key = jax.random.split(key)
            learning_rate = 1.0 - iteration / max_iteration
            embedding = _spe_step(embedding, targets, cutoff, learning_rate, tolerance, step_key, num_updates)
            context.report_progress((iteration + 1) / max_iteration)

    return spectral_result(embedding)
