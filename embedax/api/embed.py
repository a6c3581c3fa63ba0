"""Single entry point of the embedding engine."""

import logging
from collections.abc import Mapping
from typing import Any

from ..core.callbacks import Callbacks, DistanceCallback, FeatureVectorCallback, KernelCallback
from ..core.context import Context
from ..core.errors import NotEnoughMemoryError, UnsupportedMethodError
from ..core.methods import get_method_name
from ..core.parameters import ParameterKey, ParametersMap, apply_defaults
from ..core.type_system import DataRange
from .results import ReturnResult

logger = logging.getLogger(__name__)


def _is_out_of_memory(error: RuntimeError) -> bool:
    # XLA reports failed device allocations as RESOURCE_EXHAUSTED runtime errors
    return "RESOURCE_EXHAUSTED" in str(error)


def _as_parameters(parameters: Mapping | None, overrides: dict[str, Any]) -> ParametersMap:
    if isinstance(parameters, ParametersMap):
        merged = parameters.copy()
    else:
        merged = ParametersMap(parameters)
    for key, value in overrides.items():
        merged[key] = value
    return merged


def embed(
    data: DataRange,
    kernel_callback: KernelCallback | None = None,
    distance_callback: DistanceCallback | None = None,
    feature_vector_callback: FeatureVectorCallback | None = None,
    parameters: Mapping | None = None,
    **kwargs: Any,
) -> ReturnResult:
    """Construct a dense embedding of ``data`` with the configured method.

    Args:
        data: Random-access range of opaque sample handles.
        kernel_callback: Similarity between two handles.
        distance_callback: Dissimilarity between two handles.
        feature_vector_callback: Dense feature vector of a handle.
        parameters: Configuration; a :class:`ParametersMap` or any mapping
            keyed by :class:`ParameterKey` members or their names. It is copied,
            never modified.
        **kwargs: Further parameters merged over ``parameters``.

    Returns:
        ReturnResult pairing the embedding (one row per sample, or one column
        per sample with ``output_feature_vectors_are_columns``) with a
        projecting function for methods that learn a linear map.

    Raises:
        MissingParameterError: If no method is given or a required callback is absent.
        WrongParameterTypeError: If a parameter or callback has the wrong type.
        WrongParameterValueError: If a parameter value is invalid for the method.
        UnsupportedMethodError: If the method or a requested backend is unavailable.
        NotEnoughMemoryError: If an allocation fails during the computation.
        CancelledError: If the cancellation hook asked to stop.
        EigendecompositionError: If the eigenproblem cannot be solved.

    Example:
        >>> data, callbacks = from_array(X)
        >>> result = embed(data, callbacks.kernel, callbacks.distance, callbacks.feature_vector,
        ...                method="isomap", number_of_neighbors=8)
        >>> result.embedding.shape
        (100, 2)
    """
    # method implementations import the api result types
    from ..methods import IMPLEMENTATIONS

    parameters = _as_parameters(parameters, kwargs)
    method = parameters.get(ParameterKey.METHOD)
    apply_defaults(parameters)

    context = Context(
        progress_function=parameters.get(ParameterKey.PROGRESS_FUNCTION, default=None),
        cancel_function=parameters.get(ParameterKey.CANCEL_FUNCTION, default=None),
    )
    callbacks = Callbacks(kernel=kernel_callback, distance=distance_callback, feature_vector=feature_vector_callback)
    columns = parameters.get(ParameterKey.OUTPUT_FEATURE_VECTORS_ARE_COLUMNS)

    logger.info("Using %s method.", get_method_name(method))
    context.check_cancelled()

    implementation = IMPLEMENTATIONS.get(method)
    if implementation is None:
        raise UnsupportedMethodError(f"Method '{method.value}' is not supported by this installation")

    try:
        result = implementation(data, callbacks, parameters, context)
    except MemoryError as e:
        raise NotEnoughMemoryError("Not enough memory to compute the embedding") from e
    except RuntimeError as e:
        if _is_out_of_memory(e):
            raise NotEnoughMemoryError(f"Not enough memory to compute the embedding: {e}") from e
        raise

    context.report_progress(1.0)
    result.metadata.update({"method": method, "target_dimension": parameters.get(ParameterKey.TARGET_DIMENSION)})
    if columns:
        result.embedding_result.embedding = result.embedding_result.embedding.T
    return result
