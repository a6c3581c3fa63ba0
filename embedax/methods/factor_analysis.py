"""Factor analysis fitted by expectation maximization."""

import logging

import jax
import jax.numpy as jnp

from ..api.results import ReturnResult
from ..core.affinity import compute_feature_matrix, compute_mean_vector
from ..core.callbacks import Callbacks
from ..core.constants import DefaultParameters, NumericalConstants
from ..core.context import Context
from ..core.parameters import ParameterKey, ParametersMap
from ..core.timing import timed_context
from ..core.type_system import DataRange, DenseMatrix, DenseVector
from .base import feature_dimension, linear_result, random_key, target_dimension

logger = logging.getLogger(__name__)


def _log_likelihood(loadings: DenseMatrix, noise: DenseVector, scatter: DenseMatrix, n: int) -> jax.Array:
    """Gaussian log-likelihood of the centered samples under ``N(0, W W^T + diag(psi))``."""
    d = scatter.shape[0]
    covariance = loadings @ loadings.T + jnp.diag(noise)
    _, logdet = jnp.linalg.slogdet(covariance)
    return -0.5 * n * (d * jnp.log(2.0 * jnp.pi) + logdet + jnp.trace(jnp.linalg.solve(covariance, scatter)))


@jax.jit
def _em_step(
    centered: DenseMatrix, loadings: DenseMatrix, noise: DenseVector
) -> tuple[DenseMatrix, DenseVector]:
    n = centered.shape[0]
    t = loadings.shape[1]
    weighted = loadings / noise[:, None]
    precision = jnp.eye(t) + loadings.T @ weighted
    # E-step: posterior means of the latent factors
    latent = jnp.linalg.solve(precision, (centered @ weighted).T).T
    second_moment = n * jnp.linalg.inv(precision) + latent.T @ latent
    # M-step
    new_loadings = jnp.linalg.solve(second_moment, latent.T @ centered).T
    new_noise = jnp.sum(centered * centered, axis=0) / n - jnp.sum(new_loadings * (latent.T @ centered).T, axis=1) / n
    new_noise = jnp.maximum(new_noise, NumericalConstants.EPSILON)
    return new_loadings, new_noise


def factor_analysis_implementation(
    data: DataRange, callbacks: Callbacks, parameters: ParametersMap, context: Context
) -> ReturnResult:
    """Factor analysis with ``target_dimension`` latent factors and diagonal noise.

    EM iterations stop once the log-likelihood improves by less than
    ``fa_epsilon`` or after ``max_iteration`` iterations. The projection maps a
    centered sample to the posterior mean of its factors,
    ``(M^-1 W^T Psi^-1) (x - mean)`` with ``M = I + W^T Psi^-1 W``.
    """
    features = callbacks.require_feature_vector()
    dimension = feature_dimension(data, features, parameters)
    target = target_dimension(parameters, upper=dimension, what="features")
    epsilon = parameters.get_positive(ParameterKey.FA_EPSILON, default=DefaultParameters.FA_EPSILON)
    max_iteration = parameters.get_positive(ParameterKey.MAX_ITERATION, default=DefaultParameters.MAX_ITERATION)

    context.check_cancelled()
    mean = compute_mean_vector(data, features, dimension)
    centered = compute_feature_matrix(data, features, dimension) - mean[None, :]
    n = centered.shape[0]
    scatter = centered.T @ centered / n

    loadings = jax.random.normal(random_key(parameters), (dimension, target), dtype=jnp.float64)
    noise = jnp.maximum(jnp.diag(scatter), NumericalConstants.EPSILON)
    previous = float("-inf")

    with timed_context("Factor analysis EM iterations"):
        for iteration in range(max_iteration):
            context.check_cancelled()
            loadings, noise = _em_step(centered, loadings, noise)
            likelihood = float(_log_likelihood(loadings, noise, scatter, n))
            context.report_progress((iteration + 1) / max_iteration)
            if abs(likelihood - previous) < epsilon:
                logger.debug("Factor analysis converged after %d iterations.", iteration + 1)
                break
            previous = likelihood

    weighted = loadings / noise[:, None]
    precision = jnp.eye(target) + loadings.T @ weighted
    projection_matrix = jnp.linalg.solve(precision, weighted.T).T
    return linear_result(data, features, dimension, projection_matrix, mean)
