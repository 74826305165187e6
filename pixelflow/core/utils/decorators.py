"""
Utility decorators and context managers.
"""

import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

logger = logging.getLogger(__name__)


@contextmanager
def timer(label: Optional[str] = None, log: Optional[logging.Logger] = None) -> Iterator[Dict[str, float]]:
    """
    Measure wall-clock time of a block.

    The yielded dict gets an ``ms`` entry once the block exits, so read it
    after the ``with`` statement.

    Args:
        label: Optional operation name; when given, the duration is logged
            at DEBUG level
        log: Logger to use (defaults to this module's logger)

    Example:
        >>> with timer("convolve") as t:
        ...     run()
        >>> elapsed = t["ms"]
    """
    result: Dict[str, float] = {"ms": 0.0}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["ms"] = (time.perf_counter() - start) * 1000.0
        if label:
            (log or logger).debug(f"{label} took {result['ms']:.2f} ms")
