"""High-level APIs for embedax.

This module provides the embedding entry point, result containers,
out-of-sample projection and a scikit-learn compatible transformer.
"""

from ..core.errors import (
    CancelledError,
    EigendecompositionError,
    EmbeddingError,
    MissingParameterError,
    NotEnoughMemoryError,
    ParameterError,
    UnsupportedMethodError,
    WrongParameterTypeError,
    WrongParameterValueError,
)
from .embed import embed
from .projection import ProjectingFunction, project
from .results import EmbeddingResult, ProjectionResult, ReturnResult
from .sklearn_estimators import EmbeddingTransformer

__all__ = [
    "CancelledError",
    "EigendecompositionError",
    "EmbeddingError",
    "EmbeddingResult",
    "EmbeddingTransformer",
    "MissingParameterError",
    "NotEnoughMemoryError",
    "ParameterError",
    "ProjectingFunction",
    "ProjectionResult",
    "ReturnResult",
    "UnsupportedMethodError",
    "WrongParameterTypeError",
    "WrongParameterValueError",
    "embed",
    "project",
]
