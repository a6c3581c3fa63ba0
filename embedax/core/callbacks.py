"""Capability-restricted callbacks for accessing caller data.

The engine never inspects data handles itself. It reaches the data through
three narrow callback interfaces, each tagged with the single capability it
provides:

- :class:`KernelCallback`: ``kernel(a, b) -> float``, a symmetric Mercer kernel.
- :class:`DistanceCallback`: ``distance(a, b) -> float``.
- :class:`FeatureVectorCallback`: ``vector(a) -> array`` of a fixed dimension.

Plain functions are tagged with the :func:`kernel`, :func:`distance` and
:func:`feature_vector` decorators. :class:`Callbacks` checks the tags once at
construction, so a distance function can never be used as a kernel.
"""

import dataclasses
from collections.abc import Callable
from enum import Enum
from typing import Any, ClassVar

import numpy as np

from .errors import MissingParameterError, WrongParameterTypeError, WrongParameterValueError


class Capability(str, Enum):
    """Data access capability a callback provides."""

    KERNEL = "kernel"
    DISTANCE = "distance"
    FEATURE_VECTOR = "feature_vector"


class _TaggedCallback:
    capability: ClassVar[Capability]

    def __init__(self, function: Callable | None = None):
        self._function = function
        if function is not None:
            self.__doc__ = getattr(function, "__doc__", None)

    def __repr__(self) -> str:
        target = getattr(self._function, "__name__", type(self).__name__)
        return f"<{self.capability.value} callback {target}>"


class KernelCallback(_TaggedCallback):
    """Callback computing a symmetric kernel value between two data handles.

    Subclasses override :meth:`__call__`; plain functions are wrapped with :func:`kernel`.
    """

    capability = Capability.KERNEL

    def __call__(self, a: Any, b: Any) -> float:
        if self._function is None:
            raise NotImplementedError("Subclasses must implement the kernel function")
        return float(self._function(a, b))


class DistanceCallback(_TaggedCallback):
    """Callback computing the distance between two data handles."""

    capability = Capability.DISTANCE

    def __call__(self, a: Any, b: Any) -> float:
        if self._function is None:
            raise NotImplementedError("Subclasses must implement the distance function")
        return float(self._function(a, b))


class FeatureVectorCallback(_TaggedCallback):
    """Callback returning the dense feature vector of a data handle.

    Args:
        function: Function mapping a handle to a vector.
        dimension: Declared length of the produced vectors, if known.
    """

    capability = Capability.FEATURE_VECTOR

    def __init__(self, function: Callable | None = None, dimension: int | None = None):
        super().__init__(function)
        self.dimension = dimension

    def __call__(self, a: Any) -> np.ndarray:
        if self._function is None:
            raise NotImplementedError("Subclasses must implement the feature vector function")
        return np.asarray(self._function(a), dtype=np.float64).ravel()

    def vector(self, a: Any, dimension: int) -> np.ndarray:
        """Return the feature vector of ``a``, checking its length against ``dimension``.

        Raises:
            WrongParameterValueError: If the vector does not have ``dimension`` entries.
        """
        result = self(a)
        if result.shape[0] != dimension:
            raise WrongParameterValueError(
                f"Feature vector has dimension {result.shape[0]}, expected {dimension}",
                parameter_name="current_dimension",
            )
        return result


def kernel(function: Callable) -> KernelCallback:
    """Tag ``function`` as a kernel callback.

    Example:
        >>> @kernel
        ... def linear(a, b):
        ...     return float(np.dot(a, b))
    """
    return KernelCallback(function)


def distance(function: Callable) -> DistanceCallback:
    """Tag ``function`` as a distance callback."""
    return DistanceCallback(function)


def feature_vector(function: Callable | None = None, *, dimension: int | None = None) -> Any:
    """Tag ``function`` as a feature vector callback.

    Usable bare (``@feature_vector``) or with a declared dimension
    (``@feature_vector(dimension=3)``).
    """
    if function is None:
        return lambda f: FeatureVectorCallback(f, dimension=dimension)
    return FeatureVectorCallback(function, dimension=dimension)


def _check_capability(callback: Any, expected: type[_TaggedCallback], slot: str) -> None:
    if callback is None:
        return
    if not isinstance(callback, _TaggedCallback):
        raise WrongParameterTypeError(
            f"The {slot} callback must be tagged with the '{expected.capability.value}' capability, "
            f"got untagged {type(callback).__name__}",
            parameter_name=slot,
            expected_type=expected,
            received_value=callback,
        )
    if callback.capability is not expected.capability:
        raise WrongParameterTypeError(
            f"The {slot} callback is tagged as '{callback.capability.value}', "
            f"expected '{expected.capability.value}'",
            parameter_name=slot,
            expected_type=expected,
            received_value=callback,
        )


@dataclasses.dataclass(frozen=True)
class Callbacks:
    """The three capability slots handed to every method implementation.

    Any slot may be empty; a method that needs an empty slot raises
    :class:`MissingParameterError` when it asks for it.

    Raises:
        WrongParameterTypeError: If a callback is untagged or tagged with another capability.
    """

    kernel: KernelCallback | None = None
    distance: DistanceCallback | None = None
    feature_vector: FeatureVectorCallback | None = None

    def __post_init__(self) -> None:
        _check_capability(self.kernel, KernelCallback, "kernel")
        _check_capability(self.distance, DistanceCallback, "distance")
        _check_capability(self.feature_vector, FeatureVectorCallback, "feature_vector")

    def require_kernel(self) -> KernelCallback:
        """Return the kernel callback or fail if it was not supplied."""
        if self.kernel is None:
            raise MissingParameterError("This method requires a kernel callback", parameter_name="kernel")
        return self.kernel

    def require_distance(self) -> DistanceCallback:
        """Return the distance callback or fail if it was not supplied."""
        if self.distance is None:
            raise MissingParameterError("This method requires a distance callback", parameter_name="distance")
        return self.distance

    def require_feature_vector(self) -> FeatureVectorCallback:
        """Return the feature vector callback or fail if it was not supplied."""
        if self.feature_vector is None:
            raise MissingParameterError(
                "This method requires a feature vector callback", parameter_name="feature_vector"
            )
        return self.feature_vector
