"""embedax core: configuration, callbacks, affinity builders and numerical backends."""

from .affinity import (
    center_matrix,
    compute_centered_kernel_matrix,
    compute_covariance_matrix,
    compute_distance_matrix,
    compute_feature_matrix,
    compute_kernel_matrix,
    compute_mean_vector,
)
from .callbacks import (
    Callbacks,
    Capability,
    DistanceCallback,
    FeatureVectorCallback,
    KernelCallback,
    distance,
    feature_vector,
    kernel,
)
from .context import Context
from .dense_callbacks import from_array
from .eigen import eigendecomposition, generalized_eigendecomposition
from .methods import EigenMethod, Method, NeighborsMethod, get_method_name
from .neighbors import VantagePointTree, find_neighbors
from .parameters import ParameterKey, ParametersMap, apply_defaults
from .timing import timed_context

__all__ = [
    "Callbacks",
    "Capability",
    "Context",
    "DistanceCallback",
    "EigenMethod",
    "FeatureVectorCallback",
    "KernelCallback",
    "Method",
    "NeighborsMethod",
    "ParameterKey",
    "ParametersMap",
    "VantagePointTree",
    "apply_defaults",
    "center_matrix",
    "compute_centered_kernel_matrix",
    "compute_covariance_matrix",
    "compute_distance_matrix",
    "compute_feature_matrix",
    "compute_kernel_matrix",
    "compute_mean_vector",
    "distance",
    "eigendecomposition",
    "feature_vector",
    "find_neighbors",
    "from_array",
    "generalized_eigendecomposition",
    "get_method_name",
    "kernel",
    "timed_context",
]
