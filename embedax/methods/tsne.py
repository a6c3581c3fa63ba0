"""Exact t-distributed stochastic neighbor embedding."""

from functools import partial

import jax
import jax.numpy as jnp
import optax

from ..api.results import ReturnResult
from ..core.affinity import compute_distance_matrix
from ..core.callbacks import Callbacks
from ..core.constants import DefaultParameters, NumericalConstants
from ..core.context import Context
from ..core.parameters import ParameterKey, ParametersMap
from ..core.timing import timed_context
from ..core.type_system import DataRange, DenseMatrix
from .base import random_key, spectral_result, target_dimension


@jax.jit
def _conditional_probabilities(squared_distances: DenseMatrix, perplexity: float) -> DenseMatrix:
    """Row-wise Gaussian affinities whose entropy matches ``log(perplexity)``.

    The precision of every row is found by bisection on its logarithm.
    """
    n = squared_distances.shape[0]
    off_diagonal = ~jnp.eye(n, dtype=bool)
    target_entropy = jnp.log(perplexity)

    def probabilities(log_beta):
        logits = jnp.where(off_diagonal, -squared_distances * jnp.exp(log_beta)[:, None], -jnp.inf)
        return jax.nn.softmax(logits, axis=1)

    def entropy(p):
        return -jnp.sum(jnp.where(p > 0, p * jnp.log(jnp.where(p > 0, p, 1.0)), 0.0), axis=1)

    def bisect(_, bounds):
        lower, upper = bounds
        middle = 0.5 * (lower + upper)
        too_flat = entropy(probabilities(middle)) > target_entropy
        return jnp.where(too_flat, middle, lower), jnp.where(too_flat, upper, middle)

    lower = jnp.full((n,), -50.0)
    upper = jnp.full((n,), 50.0)
    lower, upper = jax.lax.fori_loop(0, NumericalConstants.PERPLEXITY_SEARCH_STEPS, bisect, (lower, upper))
    return probabilities(0.5 * (lower + upper))


def _joint_probabilities(squared_distances: DenseMatrix, perplexity: float) -> DenseMatrix:
    conditional = _conditional_probabilities(squared_distances, perplexity)
    n = squared_distances.shape[0]
    joint = (conditional + conditional.T) / (2.0 * n)
    return jnp.maximum(joint, NumericalConstants.EPSILON * (1.0 - jnp.eye(n)))


def _kl_divergence(embedding: DenseMatrix, joint: DenseMatrix) -> jax.Array:
    """KL(P || Q) up to the constant entropy of ``P``, with Student-t affinities ``Q``."""
    n = embedding.shape[0]
    off_diagonal = ~jnp.eye(n, dtype=bool)
    squared = jnp.sum((embedding[:, None, :] - embedding[None, :, :]) ** 2, axis=-1)
    numerator = jnp.where(off_diagonal, 1.0 / (1.0 + squared), 0.0)
    q = numerator / jnp.sum(numerator)
    return -jnp.sum(jnp.where(off_diagonal, joint * jnp.log(jnp.where(off_diagonal, q, 1.0)), 0.0))


@partial(jax.jit, static_argnames=("optimizer",))
def _tsne_step(embedding, opt_state, joint, exaggeration, optimizer):
    loss, grads = jax.value_and_grad(_kl_divergence)(embedding, exaggeration * joint)
    updates, opt_state = optimizer.update(grads, opt_state, embedding)
    embedding = optax.apply_updates(embedding, updates)
    return embedding - jnp.mean(embedding, axis=0), opt_state, loss


def tsne_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Exact t-SNE optimized by momentum gradient descent.

    The first iterations exaggerate the input affinities and use a lower
    momentum; the auxiliary vector holds the last value of the objective.
    """
    distance = callbacks.require_distance()
    n = len(data)
    target = target_dimension(parameters)
    perplexity = parameters.get_in_range(
        ParameterKey.SNE_PERPLEXITY,
        0.0,
        n - 1,
        default=DefaultParameters.SNE_PERPLEXITY,
        include_lower=False,
        include_upper=False,
    )
    exaggeration = parameters.get_positive(
        ParameterKey.SNE_EARLY_EXAGGERATION, default=DefaultParameters.SNE_EARLY_EXAGGERATION
    )
    max_iteration = parameters.get_positive(ParameterKey.MAX_ITERATION, default=DefaultParameters.MAX_ITERATION)

    context.check_cancelled()
    distances = compute_distance_matrix(data, distance)
    with timed_context("t-SNE input affinities"):
        joint = _joint_probabilities(distances**2, float(perplexity))
    context.report_progress(0.1)

    optimizer = optax.inject_hyperparams(optax.sgd)(
        learning_rate=DefaultParameters.SNE_LEARNING_RATE, momentum=DefaultParameters.SNE_INITIAL_MOMENTUM
    )
    embedding = 1e-4 * jax.random.normal(random_key(parameters), (n, target), dtype=jnp.float64)
    opt_state = optimizer.init(embedding)

    loss = jnp.asarray(jnp.inf)
    with timed_context("t-SNE gradient descent"):
        for iteration in range(max_iteration):
            context.check_cancelled()
            if iteration == DefaultParameters.SNE_EXAGGERATION_ITERATIONS:
                momentum = opt_state.hyperparams["momentum"]
                opt_state.hyperparams["momentum"] = jnp.asarray(DefaultParameters.SNE_FINAL_MOMENTUM, dtype=momentum.dtype)
            factor = exaggeration if iteration < DefaultParameters.SNE_EXAGGERATION_ITERATIONS else 1.0
            embedding, opt_state, loss = _tsne_step(embedding, opt_state, joint, factor, optimizer)
            context.report_progress(0.1 + 0.9 * (iteration + 1) / max_iteration)

    return spectral_result(embedding, jnp.atleast_1d(loss))
