"""Discrete weighted distribution over candidate indices.

Invariants
- Draws use only the Generator passed in (no hidden global state).
- Zero-weight entries are never drawn; an all-zero distribution never draws.
"""
from __future__ import annotations
from typing import Optional, Sequence
import numpy as np


class WeightedChoice:
    """Cumulative-sum sampler; immutable after construction so it can be cached."""

    __slots__ = ("_cdf", "_total")

    def __init__(self, weights: Sequence[float]) -> None:
        w = np.asarray(weights, dtype=np.float64)
        if w.ndim != 1:
            raise ValueError("WeightedChoice: weights must be one-dimensional")
        if np.any(~np.isfinite(w)) or np.any(w < 0.0):
            raise ValueError("WeightedChoice: weights must be finite and non-negative")
        self._cdf = np.cumsum(w)
        self._total = float(self._cdf[-1]) if w.size > 0 else 0.0

    @classmethod
    def uniform(cls, n: int) -> "WeightedChoice":
        return cls(np.ones(int(n), dtype=np.float64))

    def __len__(self) -> int:
        return int(self._cdf.size)

    @property
    def total(self) -> float:
        return self._total

    @property
    def degenerate(self) -> bool:
        return self._total <= 0.0

    def probabilities(self) -> np.ndarray:
        if self.degenerate:
            return np.zeros(len(self), dtype=np.float64)
        return np.diff(self._cdf, prepend=0.0) / self._total

    def draw(self, rng: np.random.Generator) -> Optional[int]:
        """Return an index drawn with probability proportional to its weight, or None."""
        if self.degenerate:
            return None
        u = rng.random() * self._total
        idx = int(np.searchsorted(self._cdf, u, side="right"))
        if idx >= self._cdf.size:
            # u rounded up to total; fall back to the last entry carrying mass
            idx = int(np.flatnonzero(self.probabilities() > 0.0)[-1])
        return idx

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeightedChoice):
            return NotImplemented
        return self._total == other._total and np.array_equal(self._cdf, other._cdf)

    def __repr__(self) -> str:
        return f"WeightedChoice(n={len(self)}, total={self._total:.6g})"


__all__ = ["WeightedChoice"]
