"""Exception hierarchy for embedax.

Every public entry point fails with exactly one of the exceptions below; no
other exception type crosses the library boundary.
"""

from typing import Any


class EmbeddingError(Exception):
    """Base exception class for all embedax errors."""

    pass


class ParameterError(EmbeddingError):
    """Base class of errors tied to a single configuration entry."""

    def __init__(self, message: str, parameter_name: str | None = None):
        """Initialize ParameterError.

        Args:
            message: Error description.
            parameter_name: Name of the offending parameter.
        """
        super().__init__(message)
        self.parameter_name = parameter_name


class MissingParameterError(ParameterError):
    """Raised when a required parameter was not supplied and has no default."""

    pass


class WrongParameterTypeError(ParameterError):
    """Raised when a parameter value cannot be converted to the expected type."""

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        expected_type: type | None = None,
        received_value: Any = None,
    ):
        """Initialize WrongParameterTypeError.

        Args:
            message: Error description.
            parameter_name: Name of the invalid parameter.
            expected_type: Expected parameter type.
            received_value: The actual received value.
        """
        super().__init__(message, parameter_name=parameter_name)
        self.expected_type = expected_type
        self.received_value = received_value


class WrongParameterValueError(ParameterError):
    """Raised when a parameter has the right type but an invalid value.

    This includes method identifiers that name no known method.
    """

    pass


class UnsupportedMethodError(EmbeddingError):
    """Raised when a method or backend is known but unavailable in this installation."""

    pass


class NotEnoughMemoryError(EmbeddingError):
    """Raised when an allocation fails while an embedding is computed."""

    pass


class CancelledError(EmbeddingError):
    """Raised when the cancellation hook requested to abandon the computation."""

    pass


class EigendecompositionError(EmbeddingError):
    """Raised when an eigen backend cannot produce the requested eigenpairs."""

    def __init__(self, message: str, requested: int | None = None, order: int | None = None):
        """Initialize EigendecompositionError.

        Args:
            message: Error description.
            requested: Number of eigenpairs requested.
            order: Order of the decomposed matrix.
        """
        super().__init__(message)
        self.requested = requested
        self.order = order
