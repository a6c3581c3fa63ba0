"""Validation functions for embedax parameters and matrices."""

import dataclasses

import jax.numpy as jnp
from jaxtyping import Array

from .constants import NumericalConstants


@dataclasses.dataclass
class ValidationResult:
    """Result of a validation operation.

    Attributes:
        is_valid: Whether the validation passed.
        violations: List of validation violation messages.
    """

    is_valid: bool
    violations: list[str] = dataclasses.field(default_factory=list)


def validate_positive(value: float, parameter_name: str, strict: bool = True) -> ValidationResult:
    """Validate that a numeric parameter is positive.

    Args:
        value: Value to validate.
        parameter_name: Name of the parameter being validated.
        strict: Reject zero as well when True.

    Returns:
        ValidationResult indicating whether the value is positive.

    Example:
        >>> validate_positive(3, "target_dimension").is_valid
        True
        >>> validate_positive(0, "target_dimension").is_valid
        False
    """
    violations = []

    if value < 0 or (strict and value == 0):
        qualifier = "positive" if strict else "non-negative"
        violations.append(f"Parameter '{parameter_name}' must be {qualifier}, got {value}")

    return ValidationResult(is_valid=len(violations) == 0, violations=violations)


def validate_in_range(
    value: float,
    parameter_name: str,
    lower: float,
    upper: float,
    include_lower: bool = True,
    include_upper: bool = True,
) -> ValidationResult:
    """Validate that a numeric parameter lies in an interval.

    Args:
        value: Value to validate.
        parameter_name: Name of the parameter being validated.
        lower: Lower bound.
        upper: Upper bound.
        include_lower: Whether the lower bound itself is admissible.
        include_upper: Whether the upper bound itself is admissible.

    Returns:
        ValidationResult indicating whether the value is inside the interval.
    """
    violations = []

    above = value >= lower if include_lower else value > lower
    below = value <= upper if include_upper else value < upper
    if not (above and below):
        left = "[" if include_lower else "("
        right = "]" if include_upper else ")"
        violations.append(f"Parameter '{parameter_name}' must be in {left}{lower}, {upper}{right}, got {value}")

    return ValidationResult(is_valid=len(violations) == 0, violations=violations)


def validate_symmetric(matrix: Array, atol: float = NumericalConstants.SYMMETRY_TOLERANCE) -> ValidationResult:
    """Validate that a square matrix is symmetric.

    Args:
        matrix: Matrix to validate.
        atol: Absolute tolerance for validation.

    Returns:
        ValidationResult indicating whether the matrix is symmetric.
    """
    violations: list[str] = []

    m, n = matrix.shape
    if m != n:
        violations.append(f"Matrix must be square, got shape {matrix.shape}")
        return ValidationResult(is_valid=False, violations=violations)

    if not jnp.allclose(matrix, matrix.T, atol=atol):
        violations.append("Matrix must be symmetric (A = A^T)")

    return ValidationResult(is_valid=len(violations) == 0, violations=violations)

