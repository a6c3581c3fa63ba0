"""Enumerations of embedding methods and computational backends."""

import importlib.util
from enum import Enum


class Method(str, Enum):
    """Dimensionality reduction methods understood by the dispatcher."""

    KERNEL_LOCALLY_LINEAR_EMBEDDING = "klle"
    KERNEL_LOCAL_TANGENT_SPACE_ALIGNMENT = "kltsa"
    DIFFUSION_MAP = "diffusion_map"
    MULTIDIMENSIONAL_SCALING = "mds"
    LANDMARK_MULTIDIMENSIONAL_SCALING = "landmark_mds"
    ISOMAP = "isomap"
    LANDMARK_ISOMAP = "landmark_isomap"
    NEIGHBORHOOD_PRESERVING_EMBEDDING = "npe"
    LINEAR_LOCAL_TANGENT_SPACE_ALIGNMENT = "lltsa"
    HESSIAN_LOCALLY_LINEAR_EMBEDDING = "hlle"
    LAPLACIAN_EIGENMAPS = "laplacian_eigenmaps"
    LOCALITY_PRESERVING_PROJECTIONS = "lpp"
    PCA = "pca"
    KERNEL_PCA = "kernel_pca"
    RANDOM_PROJECTION = "random_projection"
    STOCHASTIC_PROXIMITY_EMBEDDING = "spe"
    PASS_THRU = "passthru"
    FACTOR_ANALYSIS = "factor_analysis"
    T_DISTRIBUTED_STOCHASTIC_NEIGHBOR_EMBEDDING = "tsne"


class EigenMethod(str, Enum):
    """Eigen-solver backends."""

    DENSE = "dense"
    ARPACK = "arpack"


class NeighborsMethod(str, Enum):
    """Nearest-neighbor search backends."""

    BRUTE_FORCE = "brute_force"
    VP_TREE = "vp_tree"


_METHOD_NAMES = {
    Method.KERNEL_LOCALLY_LINEAR_EMBEDDING: "Kernel Locally Linear Embedding",
    Method.KERNEL_LOCAL_TANGENT_SPACE_ALIGNMENT: "Local Tangent Space Alignment",
    Method.DIFFUSION_MAP: "Diffusion Map",
    Method.MULTIDIMENSIONAL_SCALING: "Classic Multidimensional Scaling",
    Method.LANDMARK_MULTIDIMENSIONAL_SCALING: "Landmark Multidimensional Scaling",
    Method.ISOMAP: "Isomap",
    Method.LANDMARK_ISOMAP: "Landmark Isomap",
    Method.NEIGHBORHOOD_PRESERVING_EMBEDDING: "Neighborhood Preserving Embedding",
    Method.LINEAR_LOCAL_TANGENT_SPACE_ALIGNMENT: "Linear Local Tangent Space Alignment",
    Method.HESSIAN_LOCALLY_LINEAR_EMBEDDING: "Hessian Locally Linear Embedding",
    Method.LAPLACIAN_EIGENMAPS: "Laplacian Eigenmaps",
    Method.LOCALITY_PRESERVING_PROJECTIONS: "Locality Preserving Projections",
    Method.PCA: "Principal Component Analysis",
    Method.KERNEL_PCA: "Kernel Principal Component Analysis",
    Method.RANDOM_PROJECTION: "Random Projection",
    Method.STOCHASTIC_PROXIMITY_EMBEDDING: "Stochastic Proximity Embedding",
    Method.PASS_THRU: "passing through",
    Method.FACTOR_ANALYSIS: "Factor Analysis",
    Method.T_DISTRIBUTED_STOCHASTIC_NEIGHBOR_EMBEDDING: "t-distributed Stochastic Neighbor Embedding",
}


def get_method_name(method: Method) -> str:
    """Return the human-readable name of a method.

    Examples:
        >>> get_method_name(Method.PCA)
        'Principal Component Analysis'
    """
    return _METHOD_NAMES.get(method, "Unknown")


def _module_available(name: str) -> bool:
    return importlib.util.find_spec(name) is not None


def available_eigen_methods() -> list[EigenMethod]:
    """List eigen backends usable in this installation, preferred one first."""
    methods = [EigenMethod.DENSE]
    if _module_available("scipy"):
        methods.insert(0, EigenMethod.ARPACK)
    return methods


def available_neighbors_methods() -> list[NeighborsMethod]:
    """List neighbor-search backends usable in this installation, preferred one first."""
    return [NeighborsMethod.VP_TREE, NeighborsMethod.BRUTE_FORCE]
