"""Embedding method implementations and the registry the dispatcher uses."""

from ..core.methods import Method
from .base import Implementation
from .factor_analysis import factor_analysis_implementation
from .laplacian import diffusion_map_implementation, laplacian_eigenmaps_implementation, lpp_implementation
from .locally_linear import (
    hlle_implementation,
    klle_implementation,
    kltsa_implementation,
    lltsa_implementation,
    npe_implementation,
)
from .mds import (
    isomap_implementation,
    landmark_isomap_implementation,
    landmark_mds_implementation,
    mds_implementation,
)
from .pca import (
    kernel_pca_implementation,
    passthru_implementation,
    pca_implementation,
    random_projection_implementation,
)
from .spe import spe_implementation
from .tsne import tsne_implementation

IMPLEMENTATIONS: dict[Method, Implementation] = {
    Method.KERNEL_LOCALLY_LINEAR_EMBEDDING: klle_implementation,
    Method.KERNEL_LOCAL_TANGENT_SPACE_ALIGNMENT: kltsa_implementation,
    Method.DIFFUSION_MAP: diffusion_map_implementation,
    Method.MULTIDIMENSIONAL_SCALING: mds_implementation,
    Method.LANDMARK_MULTIDIMENSIONAL_SCALING: landmark_mds_implementation,
    Method.ISOMAP: isomap_implementation,
    Method.LANDMARK_ISOMAP: landmark_isomap_implementation,
    Method.NEIGHBORHOOD_PRESERVING_EMBEDDING: npe_implementation,
    Method.LINEAR_LOCAL_TANGENT_SPACE_ALIGNMENT: lltsa_implementation,
    Method.HESSIAN_LOCALLY_LINEAR_EMBEDDING: hlle_implementation,
    Method.LAPLACIAN_EIGENMAPS: laplacian_eigenmaps_implementation,
    Method.LOCALITY_PRESERVING_PROJECTIONS: lpp_implementation,
    Method.PCA: pca_implementation,
    Method.KERNEL_PCA: kernel_pca_implementation,
    Method.RANDOM_PROJECTION: random_projection_implementation,
    Method.STOCHASTIC_PROXIMITY_EMBEDDING: spe_implementation,
    Method.PASS_THRU: passthru_implementation,
    Method.FACTOR_ANALYSIS: factor_analysis_implementation,
    Method.T_DISTRIBUTED_STOCHASTIC_NEIGHBOR_EMBEDDING: tsne_implementation,
}

__all__ = ["IMPLEMENTATIONS", "Implementation"]
