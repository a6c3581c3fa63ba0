"""Typed parameter map consumed by the dispatcher and the method bodies.

Keys come from the closed :class:`ParameterKey` space. Values are stored as the
caller supplied them and converted to the declared type of their key on first
retrieval, so a value of the wrong type is detected where it is used rather
than where it is inserted.
"""

from collections.abc import Callable, Iterator, Mapping, MutableMapping
from enum import Enum
from typing import Any

import numpy as np

from .constants import NumericalConstants
from .errors import MissingParameterError, WrongParameterTypeError, WrongParameterValueError
from .methods import (
    EigenMethod,
    Method,
    NeighborsMethod,
    available_eigen_methods,
    available_neighbors_methods,
)
from .validation import ValidationResult, validate_in_range, validate_positive


class ParameterKey(str, Enum):
    """Identifiers of every parameter understood by embedax."""

    METHOD = "method"
    TARGET_DIMENSION = "target_dimension"
    CURRENT_DIMENSION = "current_dimension"
    OUTPUT_FEATURE_VECTORS_ARE_COLUMNS = "output_feature_vectors_are_columns"
    EIGENSHIFT = "eigenshift"
    KLLE_TRACE_SHIFT = "klle_trace_shift"
    CHECK_CONNECTIVITY = "check_connectivity"
    EIGEN_METHOD = "eigen_method"
    NEIGHBORS_METHOD = "neighbors_method"
    NUMBER_OF_NEIGHBORS = "number_of_neighbors"
    GAUSSIAN_KERNEL_WIDTH = "gaussian_kernel_width"
    DIFFUSION_MAP_TIMESTEPS = "diffusion_map_timesteps"
    LANDMARK_RATIO = "landmark_ratio"
    SPE_GLOBAL_STRATEGY = "spe_global_strategy"
    SPE_NUM_UPDATES = "spe_num_updates"
    SPE_TOLERANCE = "spe_tolerance"
    MAX_ITERATION = "max_iteration"
    FA_EPSILON = "fa_epsilon"
    SNE_PERPLEXITY = "sne_perplexity"
    SNE_EARLY_EXAGGERATION = "sne_early_exaggeration"
    RANDOM_SEED = "random_seed"
    PROGRESS_FUNCTION = "progress_function"
    CANCEL_FUNCTION = "cancel_function"


PARAMETER_TYPES: dict[ParameterKey, type] = {
    ParameterKey.METHOD: Method,
    ParameterKey.TARGET_DIMENSION: int,
    ParameterKey.CURRENT_DIMENSION: int,
    ParameterKey.OUTPUT_FEATURE_VECTORS_ARE_COLUMNS: bool,
    ParameterKey.EIGENSHIFT: float,
    ParameterKey.KLLE_TRACE_SHIFT: float,
    ParameterKey.CHECK_CONNECTIVITY: bool,
    ParameterKey.EIGEN_METHOD: EigenMethod,
    ParameterKey.NEIGHBORS_METHOD: NeighborsMethod,
    ParameterKey.NUMBER_OF_NEIGHBORS: int,
    ParameterKey.GAUSSIAN_KERNEL_WIDTH: float,
    ParameterKey.DIFFUSION_MAP_TIMESTEPS: int,
    ParameterKey.LANDMARK_RATIO: float,
    ParameterKey.SPE_GLOBAL_STRATEGY: bool,
    ParameterKey.SPE_NUM_UPDATES: int,
    ParameterKey.SPE_TOLERANCE: float,
    ParameterKey.MAX_ITERATION: int,
    ParameterKey.FA_EPSILON: float,
    ParameterKey.SNE_PERPLEXITY: float,
    ParameterKey.SNE_EARLY_EXAGGERATION: float,
    ParameterKey.RANDOM_SEED: int,
    ParameterKey.PROGRESS_FUNCTION: Callable,
    ParameterKey.CANCEL_FUNCTION: Callable,
}
"""Declared value type of every key."""


_MISSING = object()


def _as_key(key: "ParameterKey | str") -> ParameterKey:
    if isinstance(key, ParameterKey):
        return key
    if isinstance(key, str):
        try:
            return ParameterKey(key.lower())
        except ValueError:
            pass
    raise WrongParameterValueError(f"Unknown parameter '{key}'", parameter_name=str(key))


def convert_value(key: ParameterKey, value: Any, expected_type: type | None = None) -> Any:
    """Convert a stored value to the type expected for ``key``.

    Args:
        key: Parameter the value belongs to.
        value: Stored value.
        expected_type: Type requested by the consumer; defaults to the declared type.

    Returns:
        The converted value.

    Raises:
        WrongParameterTypeError: If the value is not convertible.
        WrongParameterValueError: If an enum is given as a string naming no member.
    """
    expected = expected_type or PARAMETER_TYPES[key]
    name = key.value

    def wrong_type() -> WrongParameterTypeError:
        return WrongParameterTypeError(
            f"Parameter '{name}' expects {getattr(expected, '__name__', expected)}, got {type(value).__name__}",
            parameter_name=name,
            expected_type=expected,
            received_value=value,
        )

    if isinstance(expected, type) and issubclass(expected, Enum):
        if isinstance(value, expected):
            return value
        # str-valued enums are themselves strings, so reject foreign members first
        if isinstance(value, Enum) or not isinstance(value, str):
            raise wrong_type()
        normalized = value.strip().lower()
        for member in expected:
            if normalized in (member.value, member.name.lower()):
                return member
        choices = ", ".join(member.value for member in expected)
        raise WrongParameterValueError(
            f"Parameter '{name}' has unknown value '{value}'. Available values: {choices}",
            parameter_name=name,
        )

    if expected is Callable:
        if not callable(value):
            raise wrong_type()
        return value

    if expected is bool:
        if isinstance(value, (bool, np.bool_)):
            return bool(value)
        raise wrong_type()

    if expected is int:
        if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
            raise wrong_type()
        return int(value)

    if expected is float:
        if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, float, np.integer, np.floating)):
            raise wrong_type()
        return float(value)

    if not isinstance(value, expected):
        raise wrong_type()
    return value


class ParametersMap(MutableMapping):
    """Mapping from :class:`ParameterKey` to dynamically typed values.

    String keys are accepted and normalized to their :class:`ParameterKey`.

    Example:
        >>> parameters = ParametersMap(method="pca", target_dimension=3)
        >>> parameters.get(ParameterKey.METHOD)
        <Method.PCA: 'pca'>
        >>> parameters.set_default("target_dimension", 2)
        >>> parameters.get("target_dimension")
        3
    """

    def __init__(self, values: Mapping | None = None, **kwargs: Any):
        """Initialize the map from another mapping and/or keyword arguments."""
        self._values: dict[ParameterKey, Any] = {}
        if values is not None:
            for key, value in values.items():
                self[key] = value
        for key, value in kwargs.items():
            self[key] = value

    def __getitem__(self, key: "ParameterKey | str") -> Any:
        return self._values[_as_key(key)]

    def __setitem__(self, key: "ParameterKey | str", value: Any) -> None:
        self._values[_as_key(key)] = value

    def __delitem__(self, key: "ParameterKey | str") -> None:
        del self._values[_as_key(key)]

    def __iter__(self) -> Iterator[ParameterKey]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        try:
            return _as_key(key) in self._values  # type: ignore[arg-type]
        except WrongParameterValueError:
            return False

    def __repr__(self) -> str:
        entries = ", ".join(f"{key.value}={value!r}" for key, value in self._values.items())
        return f"ParametersMap({entries})"

    def copy(self) -> "ParametersMap":
        """Return a shallow copy of the map."""
        return ParametersMap(self._values)

    def get(self, key: "ParameterKey | str", expected_type: type | None = None, default: Any = _MISSING) -> Any:  # type: ignore[override]
        """Retrieve a parameter converted to its expected type.

        Args:
            key: Parameter identifier.
            expected_type: Type required by the consumer; defaults to the declared type.
            default: Value returned when the key is absent.

        Returns:
            The converted value, or ``default`` if the key is absent.

        Raises:
            MissingParameterError: If the key is absent and no default is given.
            WrongParameterTypeError: If the stored value cannot be converted.
        """
        parameter = _as_key(key)
        if parameter not in self._values:
            if default is _MISSING:
                raise MissingParameterError(
                    f"Parameter '{parameter.value}' is required but was not specified",
                    parameter_name=parameter.value,
                )
            return default
        return convert_value(parameter, self._values[parameter], expected_type)

    def set_default(self, key: "ParameterKey | str", value: Any) -> None:
        """Insert ``value`` only if the caller did not supply the key."""
        parameter = _as_key(key)
        if parameter not in self._values:
            self._values[parameter] = value

    def _check(self, result: ValidationResult, key: ParameterKey) -> None:
        if not result.is_valid:
            raise WrongParameterValueError("; ".join(result.violations), parameter_name=key.value)

    def get_positive(self, key: "ParameterKey | str", default: Any = _MISSING, strict: bool = True) -> Any:
        """Retrieve a numeric parameter and require it to be positive.

        Raises:
            WrongParameterValueError: If the value is not positive.
        """
        parameter = _as_key(key)
        value = self.get(parameter, default=default)
        self._check(validate_positive(value, parameter.value, strict=strict), parameter)
        return value

    def get_in_range(
        self,
        key: "ParameterKey | str",
        lower: float,
        upper: float,
        default: Any = _MISSING,
        include_lower: bool = True,
        include_upper: bool = True,
    ) -> Any:
        """Retrieve a numeric parameter and require it to lie in an interval.

        Raises:
            WrongParameterValueError: If the value is out of range.
        """
        parameter = _as_key(key)
        value = self.get(parameter, default=default)
        self._check(
            validate_in_range(value, parameter.value, lower, upper, include_lower, include_upper),
            parameter,
        )
        return value


def apply_defaults(parameters: ParametersMap) -> ParametersMap:
    """Fill the engine-wide defaults without overriding caller values.

    The pass is idempotent and order-independent.

    Args:
        parameters: Map to complete in place.

    Returns:
        The same map, for chaining.
    """
    parameters.set_default(ParameterKey.OUTPUT_FEATURE_VECTORS_ARE_COLUMNS, False)
    parameters.set_default(ParameterKey.EIGENSHIFT, NumericalConstants.EIGENSHIFT)
    parameters.set_default(ParameterKey.KLLE_TRACE_SHIFT, NumericalConstants.KLLE_TRACE_SHIFT)
    parameters.set_default(ParameterKey.CHECK_CONNECTIVITY, True)
    parameters.set_default(ParameterKey.EIGEN_METHOD, available_eigen_methods()[0])
    parameters.set_default(ParameterKey.TARGET_DIMENSION, 2)
    if NeighborsMethod.VP_TREE in available_neighbors_methods():
        parameters.set_default(ParameterKey.NEIGHBORS_METHOD, NeighborsMethod.VP_TREE)
    return parameters
