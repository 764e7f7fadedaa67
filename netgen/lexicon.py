"""Lexicon: weighted section templates plus the pole-compatibility table.

Invariants
- Registration order is preserved; candidates() iterates in that order.
- Duplicate templates are legal and add to the aggregate weight.
- Read-only once a search starts (callers must not register mid-search).

Annotations (arbitrary key -> value per registered template) stand in for the
external value store; the selection weight lives under `weight_key`.
"""
from __future__ import annotations
import math
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .types import PolePair, SectionTemplate

DEFAULT_WEIGHT_KEY = "weights"

_MISSING = object()


class Lexicon:
    def __init__(self, weight_key: str = DEFAULT_WEIGHT_KEY) -> None:
        if not isinstance(weight_key, str) or not weight_key:
            raise ValueError("Lexicon: weight_key must be a non-empty string")
        self.weight_key = weight_key
        self._templates: List[SectionTemplate] = []
        self._values: List[Dict[str, Any]] = []
        self._pairs: List[PolePair] = []
        self._pair_set: Set[Tuple[str, str]] = set()
        self._candidates: Dict[str, Tuple[int, ...]] = {}

    # ---- registration ----
    def register(self, template: SectionTemplate, weight: Optional[float] = 1.0) -> int:
        """
        Add a template and return its registration index.

        weight=None stores no annotation, so the template carries zero mass
        when drawn from the lexicon.
        """
        if not isinstance(template, SectionTemplate):
            raise TypeError("register: template must be a SectionTemplate")
        values: Dict[str, Any] = {}
        if weight is not None:
            w = float(weight)
            if not math.isfinite(w) or w < 0.0:
                raise ValueError(f"register: weight must be finite and non-negative, got {w}")
            values[self.weight_key] = w
        self._templates.append(template)
        self._values.append(values)
        self._candidates.clear()
        return len(self._templates) - 1

    def register_all(self, templates: Iterable[SectionTemplate], weight: Optional[float] = 1.0) -> List[int]:
        return [self.register(t, weight) for t in templates]

    def register_pole_pair(self, a: str, b: str, symmetric: bool = False) -> None:
        """Declare that kind `a` may join kind `b`; symmetric also adds (b, a)."""
        for k in (a, b):
            if not isinstance(k, str) or not k:
                raise ValueError("register_pole_pair: connector kinds must be non-empty strings")
        self._add_pair(PolePair(a, b))
        if symmetric and a != b:
            self._add_pair(PolePair(b, a))
        self._candidates.clear()

    def _add_pair(self, pair: PolePair) -> None:
        key = (pair.a, pair.b)
        if key in self._pair_set:
            return
        self._pair_set.add(key)
        self._pairs.append(pair)

    # ---- annotations ----
    def set_value(self, index: int, key: str, value: Any) -> None:
        self._values[index][key] = value

    def get_value(self, index: int, key: str, default: Any = None) -> Any:
        return self._values[index].get(key, default)

    def weight_of(self, index: int) -> float:
        """Weight annotation of a registered template; absent or unreadable resolves to 0."""
        raw = self._values[index].get(self.weight_key, _MISSING)
        if raw is _MISSING:
            return 0.0
        try:
            w = float(raw)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(w):
            return 0.0
        return max(0.0, w)

    # ---- queries ----
    @property
    def templates(self) -> Tuple[SectionTemplate, ...]:
        return tuple(self._templates)

    @property
    def pole_pairs(self) -> Tuple[PolePair, ...]:
        return tuple(self._pairs)

    def __len__(self) -> int:
        return len(self._templates)

    def templates_by_label(self, label: str) -> List[SectionTemplate]:
        return [t for t in self._templates if t.label == label]

    def index_of(self, label: str) -> int:
        for i, t in enumerate(self._templates):
            if t.label == label:
                return i
        raise KeyError(f"index_of: no template labelled {label!r}")

    def compatible(self, a: str, b: str) -> bool:
        return (a, b) in self._pair_set

    def mates(self, kind: str) -> List[str]:
        return [p.b for p in self._pairs if p.a == kind]

    def candidate_indices(self, kind: str) -> Tuple[int, ...]:
        """Registration indices of templates with a connector that `kind` may join."""
        hit = self._candidates.get(kind)
        if hit is not None:
            return hit
        mates = set(self.mates(kind))
        out = tuple(
            i for i, t in enumerate(self._templates)
            if any(c.kind in mates for c in t.connectors)
        )
        self._candidates[kind] = out
        return out

    def candidates(self, kind: str) -> List[SectionTemplate]:
        """Templates joinable from `kind`, in registration order; empty if none."""
        return [self._templates[i] for i in self.candidate_indices(kind)]

    def connector_kinds(self) -> Set[str]:
        kinds: Set[str] = set()
        for t in self._templates:
            kinds.update(t.kinds())
        return kinds

    def validate(self) -> None:
        """Raise ValueError for pole pairs naming kinds no registered template carries."""
        known = self.connector_kinds()
        bad = sorted({k for p in self._pairs for k in (p.a, p.b) if k not in known})
        if bad:
            raise ValueError(f"Lexicon.validate: pole pairs reference undeclared connector kinds {bad}")


__all__ = ["Lexicon", "DEFAULT_WEIGHT_KEY"]
