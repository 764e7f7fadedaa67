"""Core network-assembly types.

Invariants
- Templates, instances and edges are immutable once created.
- Edge endpoints are identified by (instance uid, connector position).
- Network snapshots serialize canonically (sorted keys, no whitespace).
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple
import json


@dataclass(frozen=True)
class Connector:
    """Typed slot on a section. Direction lives in the pole table."""
    kind: str

    def __post_init__(self) -> None:
        if not isinstance(self.kind, str) or not self.kind:
            raise ValueError("connector kind must be a non-empty string")


@dataclass(frozen=True)
class PolePair:
    """Declares that a connector of kind `a` may join one of kind `b`."""
    a: str
    b: str

    def reversed(self) -> "PolePair":
        return PolePair(self.b, self.a)


@dataclass(frozen=True)
class SectionTemplate:
    label: str
    connectors: Tuple[Connector, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.label, str) or not self.label:
            raise ValueError("section label must be a non-empty string")
        # Accept plain kind strings and lists for convenience
        cons = tuple(c if isinstance(c, Connector) else Connector(str(c)) for c in self.connectors)
        object.__setattr__(self, "connectors", cons)

    @classmethod
    def of(cls, label: str, *kinds: str) -> "SectionTemplate":
        return cls(label, tuple(Connector(k) for k in kinds))

    def kinds(self) -> Tuple[str, ...]:
        return tuple(c.kind for c in self.connectors)


@dataclass(frozen=True)
class SectionInstance:
    """One placed use of a template; uid distinguishes copies of the same template."""
    uid: int
    template: SectionTemplate

    @property
    def label(self) -> str:
        return self.template.label

    @property
    def name(self) -> str:
        return f"{self.template.label}@{self.uid}"

    def connector(self, index: int) -> Connector:
        return self.template.connectors[index]


# An open connector is addressed by the instance holding it and its position.
ConnectorRef = Tuple[int, int]


@dataclass(frozen=True)
class Edge:
    """Undirected pairing of two connectors on two (normally distinct) instances."""
    donor: int
    donor_index: int
    donor_kind: str
    acceptor: int
    acceptor_index: int
    acceptor_kind: str

    @property
    def is_self_loop(self) -> bool:
        return self.donor == self.acceptor

    def endpoints(self) -> Tuple[ConnectorRef, ConnectorRef]:
        return ((self.donor, self.donor_index), (self.acceptor, self.acceptor_index))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "donor": [self.donor, self.donor_index, self.donor_kind],
            "acceptor": [self.acceptor, self.acceptor_index, self.acceptor_kind],
        }


def canonical_encode(obj: Any) -> bytes:
    """Canonical JSON encoding (sorted keys, no whitespace)."""
    return json.dumps(obj, sort_keys=True, separators=(',', ':'), ensure_ascii=False).encode('utf-8')


@dataclass(frozen=True)
class Network:
    """Frozen snapshot of an assembled network."""
    instances: Tuple[SectionInstance, ...]
    edges: Tuple[Edge, ...]
    open_connectors: Tuple[ConnectorRef, ...] = ()
    meta: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def size(self) -> int:
        return len(self.instances)

    @property
    def is_closed(self) -> bool:
        return len(self.open_connectors) == 0

    def instance(self, uid: int) -> SectionInstance:
        for inst in self.instances:
            if inst.uid == uid:
                return inst
        raise KeyError(f"no instance with uid {uid}")

    def degree(self, uid: int) -> int:
        return sum((e.donor == uid) + (e.acceptor == uid) for e in self.edges)

    def neighbors(self, uid: int) -> List[int]:
        out: List[int] = []
        for e in self.edges:
            if e.donor == uid:
                out.append(e.acceptor)
            elif e.acceptor == uid:
                out.append(e.donor)
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": {
                "instances": [
                    {"uid": i.uid, "label": i.label, "connectors": list(i.template.kinds())}
                    for i in self.instances
                ],
                "edges": [e.as_dict() for e in self.edges],
                "open": [list(r) for r in self.open_connectors],
            }
        }

    def to_bytes(self) -> bytes:
        return canonical_encode(self.to_dict())


__all__ = [
    "Connector",
    "PolePair",
    "SectionTemplate",
    "SectionInstance",
    "ConnectorRef",
    "Edge",
    "Network",
    "canonical_encode",
]
