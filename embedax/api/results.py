"""Result containers returned by the embedding engine."""

import dataclasses
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from jaxtyping import Array

from ..core.type_system import empty_vector

if TYPE_CHECKING:
    from .projection import ProjectingFunction


@dataclasses.dataclass
class EmbeddingResult:
    """Embedding matrix paired with an auxiliary vector.

    Unpacks as ``embedding, auxiliary = result``.

    Attributes:
        embedding: Dense matrix with one row per sample (or one column when
            the output orientation flag was set).
        auxiliary: Eigenvalues of the underlying eigenproblem where the
            method has them, otherwise an empty vector.
    """

    embedding: Array
    auxiliary: Array = dataclasses.field(default_factory=empty_vector)

    def __iter__(self) -> Iterator[Array]:
        return iter((self.embedding, self.auxiliary))

    @property
    def eigenvalues(self) -> Array:
        """Alias for auxiliary."""
        return self.auxiliary


@dataclasses.dataclass
class ProjectionResult:
    """Linear projection learned by a method, reusable on new samples.

    Attributes:
        projection_matrix: ``(n_features, target_dimension)`` matrix ``P``.
        mean_vector: Offset subtracted from feature vectors before projecting.
    """

    projection_matrix: Array
    mean_vector: Array

    def __iter__(self) -> Iterator[Array]:
        return iter((self.projection_matrix, self.mean_vector))


@dataclasses.dataclass
class ReturnResult:
    """Embedding result paired with an optional projecting function.

    Unpacks as ``embedding_result, projecting_function = result``.
    """

    embedding_result: EmbeddingResult
    projecting_function: "ProjectingFunction | None" = None
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    def __iter__(self) -> Iterator[Any]:
        return iter((self.embedding_result, self.projecting_function))

    @property
    def embedding(self) -> Array:
        """The embedding matrix."""
        return self.embedding_result.embedding

    @property
    def eigenvalues(self) -> Array:
        """The auxiliary vector of the embedding result."""
        return self.embedding_result.auxiliary

    @property
    def has_projection(self) -> bool:
        """Whether the method produced a projection usable on new samples."""
        return self.projecting_function is not None
