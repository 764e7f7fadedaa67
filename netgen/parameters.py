from __future__ import annotations
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional
import numpy as np

CONNECTOR_ORDERS = ("fifo", "lifo", "random")


@dataclass(frozen=True)
class AggregateConfig:
    max_solutions: int = 1
    max_steps: int = 10000          # per seed point
    max_depth: int = 200
    max_network_size: int = 100     # section instances per network
    close_fraction: float = 1.0     # in [0,1]
    connect_existing: Optional[bool] = None  # None = derive per frame from close_fraction
    allow_self_connections: bool = False
    max_branch_retries: int = 4     # selections tried per open connector before backtracking
    connector_order: str = "fifo"   # "fifo" | "lifo" | "random"
    rng_seed: int = 0

    def __post_init__(self) -> None:
        if int(self.max_solutions) < 1:
            raise ValueError("max_solutions must be ≥ 1")
        if int(self.max_steps) < 1:
            raise ValueError("max_steps must be ≥ 1")
        if int(self.max_depth) < 1:
            raise ValueError("max_depth must be ≥ 1")
        if int(self.max_network_size) < 1:
            raise ValueError("max_network_size must be ≥ 1")
        if not (0.0 <= float(self.close_fraction) <= 1.0):
            raise ValueError("close_fraction must be in [0,1]")
        if self.connect_existing is not None and not isinstance(self.connect_existing, bool):
            raise ValueError("connect_existing must be a bool or None")
        if int(self.max_branch_retries) < 1:
            raise ValueError("max_branch_retries must be ≥ 1")
        if self.connector_order not in CONNECTOR_ORDERS:
            raise ValueError(f"connector_order must be one of {CONNECTOR_ORDERS}")

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "AggregateConfig":
        allowed = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - allowed)
        if unknown:
            raise ValueError(f"AggregateConfig: unknown keys {unknown}")
        return cls(**dict(d))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class BasicParameters:
    """Step budget and per-frame connect-existing decision for one seed point."""

    def __init__(self, cfg: Optional[AggregateConfig] = None) -> None:
        self.cfg = cfg or AggregateConfig()
        self.steps = 0

    def reset(self) -> None:
        self.steps = 0

    @property
    def exhausted(self) -> bool:
        return self.steps >= int(self.cfg.max_steps)

    def step(self, state: Any) -> bool:
        """Count one search step; False once max_steps is used up."""
        if self.exhausted:
            return False
        self.steps += 1
        return True

    def connect_existing(self, state: Any, rng: np.random.Generator) -> bool:
        if self.cfg.connect_existing is not None:
            return bool(self.cfg.connect_existing)
        frac = float(self.cfg.close_fraction)
        if frac >= 1.0:
            return True
        if frac <= 0.0:
            return False
        return bool(rng.random() < frac)


__all__ = ["AggregateConfig", "BasicParameters", "CONNECTOR_ORDERS"]
