"""Observability utilities for the interview session service."""
from .logger import configure_logging, log_event
from .tracing import Span, span

__all__ = ["configure_logging", "log_event", "Span", "span"]
