"""Timing of named computation stages."""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@contextmanager
def timed_context(stage_name: str) -> Generator[None, None, None]:
    """Stage time measurement context manager.

    The elapsed time is logged at DEBUG level, also when the stage raises.
    Nothing is recorded beyond the log line.

    Args:
        stage_name: Name of the stage to be measured.

    Yields:
        Measurement execution context.
    """
    start_time = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("%s took %.6f seconds.", stage_name, time.perf_counter() - start_time)
