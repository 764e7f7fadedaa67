"""Logging helpers."""
from .logging import get_logger, log_metrics

__all__ = ["get_logger", "log_metrics"]
