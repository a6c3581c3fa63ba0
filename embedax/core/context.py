"""Execution context threaded through long-running method bodies."""

from collections.abc import Callable

from .errors import CancelledError


class Context:
    """Progress reporting and cooperative cancellation for one embedding call.

    Both hooks are optional. Without a progress hook progress reports are
    dropped; without a cancellation hook the computation is never cancelled.
    Method bodies poll :meth:`check_cancelled` at their own checkpoints, so
    cancellation latency is bounded by the distance between checkpoints.

    Args:
        progress_function: Called with a fraction in [0, 1].
        cancel_function: Polled at checkpoints; returning True abandons the work.
    """

    def __init__(
        self,
        progress_function: Callable[[float], None] | None = None,
        cancel_function: Callable[[], bool] | None = None,
    ) -> None:
        """Initialize the context with optional hooks."""
        self.progress_function = progress_function
        self.cancel_function = cancel_function

    def report_progress(self, fraction: float) -> None:
        """Report progress, clamped to [0, 1]."""
        if self.progress_function is not None:
            self.progress_function(min(max(float(fraction), 0.0), 1.0))

    def is_cancelled(self) -> bool:
        """Poll the cancellation hook."""
        if self.cancel_function is None:
            return False
        return bool(self.cancel_function())

    def check_cancelled(self) -> None:
        """Raise if the cancellation hook asks to stop.

        Raises:
            CancelledError: If the cancellation hook returned True.
        """
        if self.is_cancelled():
            raise CancelledError("Computations were cancelled")
