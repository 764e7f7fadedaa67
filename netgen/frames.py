"""Frame stack for branch-local selection caches.

Arena-plus-checkpoint layout: every cache write appends one entry to a single
arena; push_frame records the arena length and pop_frame truncates back to it.
Lookups only see entries written since the last checkpoint, so a freshly pushed
frame starts empty and a pop restores exactly the state before the push.

Invariants
- push/pop strictly nested (LIFO); popping an empty stack raises IndexError.
- Entries below the active checkpoint are never modified.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

# cache names
CANDIDATES = "candidates"
DISTRIBUTIONS = "distributions"


@dataclass(frozen=True)
class _Entry:
    cache: str
    key: str
    value: Any


class FrameStack:
    def __init__(self) -> None:
        self._arena: List[_Entry] = []
        self._marks: List[int] = []
        # (cache, key) -> arena position, for the active frame only
        self._index: Dict[Tuple[str, str], int] = {}

    @property
    def depth(self) -> int:
        return len(self._marks)

    @property
    def base(self) -> int:
        return self._marks[-1] if self._marks else 0

    def push_frame(self) -> None:
        self._marks.append(len(self._arena))
        self._index = {}

    def pop_frame(self) -> None:
        if not self._marks:
            raise IndexError("pop_frame: frame stack is empty")
        mark = self._marks.pop()
        del self._arena[mark:]
        self._reindex()

    def _reindex(self) -> None:
        base = self.base
        self._index = {}
        for pos in range(base, len(self._arena)):
            e = self._arena[pos]
            self._index[(e.cache, e.key)] = pos

    def get(self, cache: str, key: str, default: Any = None) -> Any:
        pos = self._index.get((cache, key))
        if pos is None:
            return default
        return self._arena[pos].value

    def contains(self, cache: str, key: str) -> bool:
        return (cache, key) in self._index

    def put(self, cache: str, key: str, value: Any) -> None:
        self._arena.append(_Entry(cache, key, value))
        self._index[(cache, key)] = len(self._arena) - 1

    def snapshot(self, cache: Optional[str] = None) -> Dict[Tuple[str, str], Any]:
        """Active frame view as {(cache, key): value}; used to verify pop restores state."""
        return {
            ck: self._arena[pos].value
            for ck, pos in sorted(self._index.items())
            if cache is None or ck[0] == cache
        }

    def clear(self) -> None:
        self._arena.clear()
        self._marks.clear()
        self._index = {}


__all__ = ["FrameStack", "CANDIDATES", "DISTRIBUTIONS"]
