"""Selection policies: what to attach to an unmet connector.

The driver depends only on the capability interface
{select, push_frame, pop_frame, step, solution}. RandomPolicy is the
weighted-random production policy; ReplayPolicy replays a scripted sequence of
picks for tests.

Invariants
- All randomness comes from the policy's own numpy Generator.
- Open-connector candidate lists and their distributions are cached in the
  active frame only; lexicon distributions are cached globally, since they do
  not depend on the frontier.
- A requesting connector is never offered to itself; a requesting instance is
  never offered to itself unless self-connections are allowed.
"""
from __future__ import annotations
import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union
import numpy as np

from .distribution import WeightedChoice
from .frames import CANDIDATES, DISTRIBUTIONS, FrameStack
from .lexicon import Lexicon
from .network import SearchState
from .parameters import AggregateConfig, BasicParameters
from .types import ConnectorRef, Network, SectionInstance, SectionTemplate

logger = logging.getLogger(__name__)


class SelectionPolicy:
    """Capability interface plus solution bookkeeping shared by all policies."""

    def __init__(self, lexicon: Lexicon, params: Optional[BasicParameters] = None) -> None:
        self.lexicon = lexicon
        self.params = params or BasicParameters()
        self.num_solutions_found = 0
        self._solutions: List[Network] = []
        self._next_uid = 0

    @property
    def cfg(self) -> AggregateConfig:
        return self.params.cfg

    @property
    def solutions(self) -> List[Network]:
        return list(self._solutions)

    def create_instance(self, template: SectionTemplate) -> SectionInstance:
        inst = SectionInstance(uid=self._next_uid, template=template)
        self._next_uid += 1
        return inst

    # ---- driver lifecycle ----
    def select(self, state: SearchState, fm_inst: SectionInstance, offset: int) -> Optional[SectionInstance]:
        raise NotImplementedError

    def push_frame(self, state: Optional[SearchState] = None) -> None:
        raise NotImplementedError

    def pop_frame(self, state: Optional[SearchState] = None) -> None:
        raise NotImplementedError

    def reset_frames(self) -> None:
        """Drop every frame; called when the driver starts a fresh attempt."""

    def step(self, state: SearchState) -> bool:
        if self.num_solutions_found >= int(self.cfg.max_solutions):
            return False
        return self.params.step(state)

    def solution(self, state: SearchState) -> None:
        if self.num_solutions_found >= int(self.cfg.max_solutions):
            logger.debug("solution cap %d reached; dropping network", self.cfg.max_solutions)
            return
        self.num_solutions_found += 1
        self._solutions.append(
            state.network.freeze(meta={"seed_index": state.seed_index, "attempt": state.attempt})
        )


class RandomPolicy(SelectionPolicy):
    def __init__(
        self,
        lexicon: Lexicon,
        params: Optional[BasicParameters] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        super().__init__(lexicon, params)
        self.rng = np.random.default_rng(int(self.cfg.rng_seed)) if rng is None else rng
        self.frames = FrameStack()
        self._lexis_dists: Dict[str, WeightedChoice] = {}

    # ---- frames ----
    def push_frame(self, state: Optional[SearchState] = None) -> None:
        self.frames.push_frame()

    def pop_frame(self, state: Optional[SearchState] = None) -> None:
        self.frames.pop_frame()

    def reset_frames(self) -> None:
        self.frames.clear()

    # ---- selection ----
    def select(self, state: SearchState, fm_inst: SectionInstance, offset: int) -> Optional[SectionInstance]:
        """Prefer an already-open connector, else draw a fresh section from the lexicon."""
        if self.params.connect_existing(state, self.rng):
            open_sect = self.select_from_open(state, fm_inst, offset)
            if open_sect is not None:
                return open_sect
        return self.select_from_lexicon(state, fm_inst, offset)

    def _excluded(self, ref: ConnectorRef, fm_ref: ConnectorRef) -> bool:
        if ref == fm_ref:
            return True
        return (not self.cfg.allow_self_connections) and ref[0] == fm_ref[0]

    def _open_candidates(self, state: SearchState, kind: str) -> Tuple[ConnectorRef, ...]:
        net = state.network
        return tuple(
            ref for ref in net.open_refs()
            if self.lexicon.compatible(kind, net.kind_of(ref))
        )

    def select_from_open(self, state: SearchState, fm_inst: SectionInstance, offset: int) -> Optional[SectionInstance]:
        kind = fm_inst.connector(offset).kind
        fm_ref = (fm_inst.uid, offset)

        to_refs = self.frames.get(CANDIDATES, kind)
        if to_refs is None:
            to_refs = self._open_candidates(state, kind)
            self.frames.put(CANDIDATES, kind, to_refs)

        if len(to_refs) == 0:
            return None

        if len(to_refs) == 1:
            if self._excluded(to_refs[0], fm_ref):
                return None
            return state.network.instance(to_refs[0][0])

        # Existence check first, so the rejection loop below terminates
        if all(self._excluded(ref, fm_ref) for ref in to_refs):
            return None

        # Reused sections carry no weight annotation; uniform over open connectors
        dist = self.frames.get(DISTRIBUTIONS, kind)
        if dist is None:
            dist = WeightedChoice.uniform(len(to_refs))
            self.frames.put(DISTRIBUTIONS, kind, dist)

        while True:
            ref = to_refs[dist.draw(self.rng)]
            if not self._excluded(ref, fm_ref):
                return state.network.instance(ref[0])

    def lexicon_distribution(self, kind: str) -> Optional[WeightedChoice]:
        idxs = self.lexicon.candidate_indices(kind)
        if not idxs:
            return None
        dist = self._lexis_dists.get(kind)
        if dist is None:
            # Absent weight annotations contribute zero mass
            dist = WeightedChoice([self.lexicon.weight_of(i) for i in idxs])
            if dist.degenerate:
                logger.debug("all candidate weights for %r are zero; kind can never be extended", kind)
            self._lexis_dists[kind] = dist
        return dist

    def select_from_lexicon(self, state: SearchState, fm_inst: SectionInstance, offset: int) -> Optional[SectionInstance]:
        kind = fm_inst.connector(offset).kind
        dist = self.lexicon_distribution(kind)
        if dist is None:
            return None
        k = dist.draw(self.rng)
        if k is None:
            return None
        idx = self.lexicon.candidate_indices(kind)[k]
        return self.create_instance(self.lexicon.templates[idx])


ReplayPick = Union[str, Tuple[str, int], None]


class ReplayPolicy(SelectionPolicy):
    """
    Replays scripted picks, one per select() call.

    Each pick is a template label (fresh section), ("open", uid) to reuse a
    placed instance, or None to force a dead end. An exhausted script yields
    None.
    """

    def __init__(
        self,
        lexicon: Lexicon,
        script: Sequence[ReplayPick],
        params: Optional[BasicParameters] = None,
    ) -> None:
        super().__init__(lexicon, params)
        self.script = list(script)
        self.cursor = 0
        self.frame_depth = 0
        self.calls: List[Tuple[int, int]] = []

    def push_frame(self, state: Optional[SearchState] = None) -> None:
        self.frame_depth += 1

    def pop_frame(self, state: Optional[SearchState] = None) -> None:
        if self.frame_depth == 0:
            raise IndexError("pop_frame: frame stack is empty")
        self.frame_depth -= 1

    def reset_frames(self) -> None:
        self.frame_depth = 0

    def select(self, state: SearchState, fm_inst: SectionInstance, offset: int) -> Optional[SectionInstance]:
        self.calls.append((fm_inst.uid, offset))
        if self.cursor >= len(self.script):
            return None
        pick = self.script[self.cursor]
        self.cursor += 1
        if pick is None:
            return None
        if isinstance(pick, str):
            return self.create_instance(self.lexicon.templates[self.lexicon.index_of(pick)])
        tag, uid = pick
        if tag != "open":
            raise ValueError(f"ReplayPolicy: unknown pick {pick!r}")
        return state.network.instance(int(uid))


__all__ = ["SelectionPolicy", "RandomPolicy", "ReplayPolicy"]
