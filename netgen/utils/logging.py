"""Logging for netgen: one configured "netgen" logger and per-seed metric lines.

The driver reports each seed point's SeedStats through log_metrics; policy and
driver modules log dead ends and backtracks at DEBUG under "netgen.<module>".

Invariants
- Idempotent handler installation per logger.
- Validation: values and step (if provided) must be finite floats.

Public API
- get_logger(name="netgen", level=logging.INFO) -> logging.Logger
- log_metrics(metrics: dict[str, float], step=None, logger=None) -> None
"""
from __future__ import annotations

import logging
import math
from typing import Mapping


def get_logger(name: str = "netgen", level: int = logging.INFO) -> logging.Logger:
    """
    Return a configured logger with concise formatter.

    Idempotent: installs at most one StreamHandler marked by _netgen_handler.
    Library modules log under "netgen.<module>" and propagate here.
    """
    logger = logging.getLogger(name)
    logger.setLevel(int(level))
    logger.propagate = False

    has_handler = any(getattr(h, "_netgen_handler", False) for h in logger.handlers)
    if not has_handler:
        handler = logging.StreamHandler()
        handler._netgen_handler = True  # type: ignore[attr-defined]
        handler.setLevel(int(level))
        formatter = logging.Formatter(
            fmt="%(asctime)s %(name)s %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def _ensure_finite_float(x: object, name: str) -> float:
    try:
        val = float(x)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise TypeError(f"{name} must be a real number convertible to float") from e
    if not math.isfinite(val):
        raise ValueError(f"{name} must be finite, got {val}")
    return val


def _format_float(x: float) -> str:
    return f"{x:.10g}"


def log_metrics(
    metrics: Mapping[str, float],
    step: int | None = None,
    logger: logging.Logger | None = None,
) -> None:
    """
    Log a dictionary of metrics as: "metrics k1=v1 k2=v2 ... step=step".

    Keys are sorted for deterministic ordering.
    """
    if not isinstance(metrics, Mapping) or len(metrics) == 0:
        raise ValueError("metrics must be a non-empty mapping of str->float")
    parts: list[str] = []
    for k in sorted(metrics.keys()):
        if not isinstance(k, str) or not k:
            raise ValueError("metric keys must be non-empty strings")
        v = _ensure_finite_float(metrics[k], f"value for '{k}'")
        parts.append(f"{k}={_format_float(v)}")
    s_str = ""
    if step is not None:
        s = _ensure_finite_float(step, "step")
        s_str = f" step={int(s)}"
    lg = logger if logger is not None else get_logger()
    lg.info("metrics " + " ".join(parts) + s_str)


__all__ = ["get_logger", "log_metrics"]
