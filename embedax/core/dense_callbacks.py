"""Ready-made callbacks over a dense ``(n_samples, n_features)`` array.

Data handles are row positions, so the data range of an array ``X`` is
``range(len(X))``.
"""

import numpy as np
from jaxtyping import Array, Float

from .callbacks import Callbacks, DistanceCallback, FeatureVectorCallback, KernelCallback


def _as_matrix(matrix: Float[Array, "n d"] | np.ndarray) -> np.ndarray:
    values = np.asarray(matrix, dtype=np.float64)
    if values.ndim == 1:
        values = values.reshape(-1, 1)
    if values.ndim != 2:
        raise ValueError(f"Expected a 2-D array of samples, got shape {values.shape}")
    return values


class LinearKernelCallback(KernelCallback):
    """Dot product between rows of a matrix."""

    def __init__(self, matrix: Float[Array, "n d"] | np.ndarray):
        super().__init__()
        self.matrix = _as_matrix(matrix)

    def __call__(self, a: int, b: int) -> float:
        return float(self.matrix[a] @ self.matrix[b])


class GaussianKernelCallback(KernelCallback):
    """Gaussian kernel ``exp(-||x_a - x_b||^2 / width)`` between rows of a matrix."""

    def __init__(self, matrix: Float[Array, "n d"] | np.ndarray, width: float = 1.0):
        super().__init__()
        if width <= 0:
            raise ValueError(f"Kernel width must be positive, got {width}")
        self.matrix = _as_matrix(matrix)
        self.width = width

    def __call__(self, a: int, b: int) -> float:
        difference = self.matrix[a] - self.matrix[b]
        return float(np.exp(-(difference @ difference) / self.width))


class EuclideanDistanceCallback(DistanceCallback):
    """Euclidean distance between rows of a matrix."""

    def __init__(self, matrix: Float[Array, "n d"] | np.ndarray):
        super().__init__()
        self.matrix = _as_matrix(matrix)

    def __call__(self, a: int, b: int) -> float:
        return float(np.linalg.norm(self.matrix[a] - self.matrix[b]))


class RowFeatureVectorCallback(FeatureVectorCallback):
    """Rows of a matrix as feature vectors."""

    def __init__(self, matrix: Float[Array, "n d"] | np.ndarray):
        values = _as_matrix(matrix)
        super().__init__(dimension=values.shape[1])
        self.matrix = values

    def __call__(self, a: int) -> np.ndarray:
        return self.matrix[a]


def from_array(
    matrix: Float[Array, "n d"] | np.ndarray,
    kernel_width: float | None = None,
) -> tuple[range, Callbacks]:
    """Build a data range and the three callbacks for an array of samples.

    Args:
        matrix: Samples as rows.
        kernel_width: Use a Gaussian kernel of this width instead of the linear kernel.

    Returns:
        ``(range(n_samples), callbacks)``.

    Example:
        >>> data, callbacks = from_array(np.eye(3))
        >>> callbacks.distance(0, 1)
        1.4142135623730951
    """
    values = _as_matrix(matrix)
    kernel_callback = (
        LinearKernelCallback(values) if kernel_width is None else GaussianKernelCallback(values, kernel_width)
    )
    callbacks = Callbacks(
        kernel=kernel_callback,
        distance=EuclideanDistanceCallback(values),
        feature_vector=RowFeatureVectorCallback(values),
    )
    return range(values.shape[0]), callbacks
