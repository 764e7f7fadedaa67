"""Which open connector the driver tries to close next.

An order is any callable (network, rng) -> ConnectorRef over a network with at
least one open connector. Built-ins:
- fifo: oldest open connector first (breadth-first growth)
- lifo: newest open connector first (depth-first growth)
- random: uniform over open connectors, drawn from the supplied Generator
"""
from __future__ import annotations
from typing import Callable, Dict, Union
import numpy as np

from .network import NetworkBuilder
from .types import ConnectorRef

ConnectorOrder = Callable[[NetworkBuilder, np.random.Generator], ConnectorRef]


def fifo(net: NetworkBuilder, rng: np.random.Generator) -> ConnectorRef:
    return net.open_refs()[0]


def lifo(net: NetworkBuilder, rng: np.random.Generator) -> ConnectorRef:
    return net.open_refs()[-1]


def uniform(net: NetworkBuilder, rng: np.random.Generator) -> ConnectorRef:
    refs = net.open_refs()
    return refs[int(rng.integers(0, len(refs)))]


ORDERS: Dict[str, ConnectorOrder] = {
    "fifo": fifo,
    "lifo": lifo,
    "random": uniform,
}


def get_connector_order(order: Union[str, ConnectorOrder]) -> ConnectorOrder:
    if callable(order):
        return order
    try:
        return ORDERS[str(order)]
    except KeyError:
        raise ValueError(f"connector_order must be one of {sorted(ORDERS)} or a callable") from None


__all__ = ["ConnectorOrder", "ORDERS", "fifo", "lifo", "uniform", "get_connector_order"]
