"""
Timing Utilities.

Wall-clock timing of backend calls for latency metrics and the timings in
request log lines. Uses time.perf_counter().

Example Usage:
    with timeit("synthesis") as t:
        audio = await backend.synthesize(text, params)
    print(f"Took {t.timing.seconds:.3f}s")
"""
from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, Optional


@dataclass
class Timing:
    """
    Timing measurement result.

    Attributes:
        name: Identifier for what was timed.
        seconds: Duration in seconds.
        meta: Optional metadata dictionary for additional context.
    """
    name: str
    seconds: float
    meta: Optional[Dict[str, Any]] = None


class timeit:
    """
    Context manager for timing code blocks.

    Attributes:
        name: Identifier for this timing.
        meta: Optional metadata.
        timing: Timing result (available after context exit).
    """

    def __init__(self, name: str, meta: Optional[Dict[str, Any]] = None):
        self.name = name
        self.meta = meta
        self._t0: float | None = None
        self.timing: Timing | None = None

    def __enter__(self) -> "timeit":
        self._t0 = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.timing = Timing(name=self.name, seconds=self.elapsed(), meta=self.meta)

    def elapsed(self) -> float:
        """Seconds since the block was entered (0.0 before entry)."""
        if self._t0 is None:
            return 0.0
        return perf_counter() - self._t0
