"""Partial network under construction, owned by the search driver.

Invariants
- Append-only instances and edges; undo is a truncation back to a checkpoint.
- The open set is journalled so rollback restores it exactly, including the
  placement sequence numbers that fix iteration order.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .types import ConnectorRef, Edge, Network, SectionInstance

_OPEN = 0
_CLOSE = 1


@dataclass(frozen=True)
class Checkpoint:
    instances: int
    edges: int
    journal: int


class NetworkBuilder:
    def __init__(self) -> None:
        self.instances: List[SectionInstance] = []
        self.edges: List[Edge] = []
        self._by_uid: Dict[int, SectionInstance] = {}
        self._open: Dict[ConnectorRef, int] = {}
        self._seq = 0
        self._journal: List[Tuple[int, ConnectorRef, int]] = []

    # ---- queries ----
    @property
    def size(self) -> int:
        return len(self.instances)

    @property
    def open_count(self) -> int:
        return len(self._open)

    def instance(self, uid: int) -> SectionInstance:
        return self._by_uid[uid]

    def has_instance(self, uid: int) -> bool:
        return uid in self._by_uid

    def is_open(self, ref: ConnectorRef) -> bool:
        return ref in self._open

    def open_refs(self) -> List[ConnectorRef]:
        """Open connectors in placement order."""
        return sorted(self._open, key=self._open.__getitem__)

    def open_on(self, uid: int) -> List[int]:
        return [idx for (u, idx) in self.open_refs() if u == uid]

    def kind_of(self, ref: ConnectorRef) -> str:
        uid, idx = ref
        return self._by_uid[uid].connector(idx).kind

    # ---- mutation ----
    def checkpoint(self) -> Checkpoint:
        return Checkpoint(len(self.instances), len(self.edges), len(self._journal))

    def rollback(self, cp: Checkpoint) -> None:
        while len(self._journal) > cp.journal:
            op, ref, seq = self._journal.pop()
            if op == _OPEN:
                del self._open[ref]
            else:
                self._open[ref] = seq
        for inst in self.instances[cp.instances:]:
            del self._by_uid[inst.uid]
        del self.instances[cp.instances:]
        del self.edges[cp.edges:]

    def place(self, inst: SectionInstance) -> None:
        if inst.uid in self._by_uid:
            raise ValueError(f"place: instance {inst.name} already placed")
        self.instances.append(inst)
        self._by_uid[inst.uid] = inst
        for idx in range(len(inst.template.connectors)):
            ref = (inst.uid, idx)
            self._open[ref] = self._seq
            self._journal.append((_OPEN, ref, self._seq))
            self._seq += 1

    def join(self, donor: ConnectorRef, acceptor: ConnectorRef) -> Edge:
        """Close two open connectors with an edge."""
        if donor == acceptor:
            raise ValueError("join: cannot join a connector to itself")
        for ref in (donor, acceptor):
            if ref not in self._open:
                raise ValueError(f"join: connector {ref} is not open")
        for ref in (donor, acceptor):
            seq = self._open.pop(ref)
            self._journal.append((_CLOSE, ref, seq))
        edge = Edge(
            donor=donor[0],
            donor_index=donor[1],
            donor_kind=self.kind_of(donor),
            acceptor=acceptor[0],
            acceptor_index=acceptor[1],
            acceptor_kind=self.kind_of(acceptor),
        )
        self.edges.append(edge)
        return edge

    def freeze(self, meta: Optional[Dict[str, Any]] = None) -> Network:
        return Network(
            instances=tuple(self.instances),
            edges=tuple(self.edges),
            open_connectors=tuple(self.open_refs()),
            meta=dict(meta or {}),
        )


@dataclass
class SearchState:
    """Driver-side view handed to the policy on every call."""
    network: NetworkBuilder
    seed_index: int = 0
    attempt: int = 0
    depth: int = 0
    meta: Dict[str, Any] = field(default_factory=dict)


__all__ = ["Checkpoint", "NetworkBuilder", "SearchState"]
