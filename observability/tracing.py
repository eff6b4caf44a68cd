"""Simple span helper for timing provider calls."""
from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from .logger import log_event


@dataclass
class Span:
    name: str
    ms: int = 0


@contextmanager
def span(name: str, session_id: Optional[str] = None) -> Iterator[Span]:
    """Time the wrapped block; ``ms`` is filled in even when the block raises."""
    record = Span(name=name)
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield record
    except Exception:
        outcome = "error"
        raise
    finally:
        record.ms = int((time.perf_counter() - start) * 1000)
        log_event("span", session_id or "-", span=name, ms=record.ms, outcome=outcome)


__all__ = ["Span", "span"]
