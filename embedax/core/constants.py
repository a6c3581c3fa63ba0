"""Configuration constants for the embedax library.

This module defines numerical constants and default parameter values used
throughout the library to ensure consistent behavior and eliminate magic numbers.
"""


class NumericalConstants:
    """Numerical constants for stability and tolerance in matrix operations."""

    EIGENSHIFT: float = 1e-9
    """Diagonal shift applied to ill-conditioned matrices before eigendecomposition."""

    KLLE_TRACE_SHIFT: float = 1e-3
    """Relative regularizer for local Gram matrices of kernel LLE, scaled by their trace."""

    EPSILON: float = 1e-12
    """Threshold for detecting vanishing normalizers and eigenvalues."""

    SYMMETRY_TOLERANCE: float = 1e-8
    """Tolerance for checking matrix symmetry."""

    PERPLEXITY_SEARCH_STEPS: int = 50
    """Number of bisection steps per sample in the t-SNE perplexity search."""


class DefaultParameters:
    """Default values of method-specific parameters.

    Values here are read by the method bodies when the caller leaves the
    corresponding key out of the parameters map.
    """

    TARGET_DIMENSION: int = 2
    NUMBER_OF_NEIGHBORS: int = 10
    GAUSSIAN_KERNEL_WIDTH: float = 1.0
    DIFFUSION_MAP_TIMESTEPS: int = 1
    LANDMARK_RATIO: float = 0.5
    SPE_GLOBAL_STRATEGY: bool = True
    SPE_NUM_UPDATES: int = 100
    SPE_TOLERANCE: float = 1e-5
    MAX_ITERATION: int = 1000
    FA_EPSILON: float = 1e-5
    SNE_PERPLEXITY: float = 30.0
    SNE_EARLY_EXAGGERATION: float = 12.0
    RANDOM_SEED: int = 0

    SNE_LEARNING_RATE: float = 200.0
    """Step size of the t-SNE gradient descent."""

    SNE_EXAGGERATION_ITERATIONS: int = 250
    """Number of t-SNE iterations run with early exaggeration and low momentum."""

    SNE_INITIAL_MOMENTUM: float = 0.5
    SNE_FINAL_MOMENTUM: float = 0.8
