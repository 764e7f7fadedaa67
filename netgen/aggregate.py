"""Search driver and the random_aggregate entry point.

The driver owns the partial network and its undo; the policy owns frame-local
caches and the solution list. Control flow per seed point:

    step -> pick open connector -> select -> commit edge -> push_frame -> ...
    dead end -> pop_frame + rollback -> retry or backtrack further

Invariants
- Every push_frame is matched by exactly one pop_frame, including when an
  attempt ends in a solution or a halt.
- Every committed edge joins kinds declared compatible by the pole table.
- No committed network exceeds max_network_size instances.
- Dead ends are return values, never exceptions.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
import numpy as np

from .lexicon import DEFAULT_WEIGHT_KEY, Lexicon
from .network import Checkpoint, NetworkBuilder, SearchState
from .order import ConnectorOrder, get_connector_order
from .parameters import AggregateConfig, BasicParameters
from .policy import RandomPolicy, SelectionPolicy
from .types import ConnectorRef, Network, PolePair, SectionInstance, SectionTemplate
from .utils.logging import log_metrics

logger = logging.getLogger(__name__)


class Status(Enum):
    SOLVED = "solved"
    DEAD_END = "dead_end"
    HALT = "halt"


@dataclass
class _Branch:
    fm_ref: ConnectorRef
    tries: int = 0
    cp: Optional[Checkpoint] = None


@dataclass
class SeedStats:
    seed_index: int
    attempts: int = 0
    solutions: int = 0
    dead_ends: int = 0
    backtracks: int = 0
    rejected_commits: int = 0
    steps: int = 0
    max_size: int = 0

    def as_metrics(self) -> Dict[str, float]:
        return {
            "attempts": float(self.attempts),
            "solutions": float(self.solutions),
            "dead_ends": float(self.dead_ends),
            "backtracks": float(self.backtracks),
            "rejected_commits": float(self.rejected_commits),
            "steps": float(self.steps),
            "max_size": float(self.max_size),
        }


class Aggregator:
    def __init__(
        self,
        policy: SelectionPolicy,
        order: Union[str, ConnectorOrder, None] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.policy = policy
        self.cfg = policy.cfg
        self.lexicon = policy.lexicon
        self.order = get_connector_order(order if order is not None else self.cfg.connector_order)
        if rng is None:
            rng = getattr(policy, "rng", None)
        self.rng = rng if rng is not None else np.random.default_rng(int(self.cfg.rng_seed))
        self.stats: List[SeedStats] = []

    # ---- public ----
    def aggregate(self, seeds: Sequence[SectionTemplate]) -> List[Network]:
        """Grow networks from each seed template; returns the policy's solutions."""
        self.lexicon.validate()
        for i, seed in enumerate(seeds):
            if self.policy.num_solutions_found >= int(self.cfg.max_solutions):
                break
            st = self._run_seed(i, seed)
            self.stats.append(st)
            log_metrics(st.as_metrics(), step=i, logger=logger)
        return self.policy.solutions

    # ---- per seed point ----
    def _run_seed(self, seed_index: int, seed: SectionTemplate) -> SeedStats:
        st = SeedStats(seed_index=seed_index)
        self.policy.params.reset()
        while self.policy.num_solutions_found < int(self.cfg.max_solutions):
            self.policy.reset_frames()
            net = NetworkBuilder()
            net.place(self.policy.create_instance(seed))
            state = SearchState(network=net, seed_index=seed_index, attempt=st.attempts)
            st.attempts += 1
            status = self._search(state, st)
            st.max_size = max(st.max_size, net.size)
            if status is Status.SOLVED:
                st.solutions += 1
            elif status is Status.DEAD_END:
                st.dead_ends += 1
                logger.debug("seed %d attempt %d: dead end at root", seed_index, state.attempt)
            else:
                break
        st.steps = int(self.policy.params.steps)
        return st

    def _search(self, state: SearchState, st: SeedStats) -> Status:
        net = state.network
        stack: List[_Branch] = []
        while True:
            state.depth = len(stack)
            if not self.policy.step(state):
                self._unwind(state, stack)
                return Status.HALT
            if net.open_count == 0:
                self.policy.solution(state)
                self._unwind(state, stack)
                return Status.SOLVED

            if len(stack) < int(self.cfg.max_depth):
                branch = _Branch(fm_ref=self.order(net, self.rng))
                if self._advance(state, branch, st):
                    stack.append(branch)
                    continue

            # Dead end: back up until some branch point can try another pick
            while stack:
                branch = stack.pop()
                self.policy.pop_frame(state)
                net.rollback(branch.cp)
                st.backtracks += 1
                state.depth = len(stack)
                logger.debug(
                    "seed %d attempt %d: backtrack to depth %d", state.seed_index, state.attempt, state.depth
                )
                if self._advance(state, branch, st):
                    stack.append(branch)
                    break
            else:
                return Status.DEAD_END

    def _advance(self, state: SearchState, branch: _Branch, st: SeedStats) -> bool:
        """Try to close branch.fm_ref; on success the child frame is pushed."""
        net = state.network
        fm_inst = net.instance(branch.fm_ref[0])
        retries = int(self.cfg.max_branch_retries)
        while branch.tries < retries:
            branch.tries += 1
            choice = self.policy.select(state, fm_inst, branch.fm_ref[1])
            if choice is None:
                branch.tries = retries
                return False
            cp = net.checkpoint()
            if self._commit(net, branch.fm_ref, choice):
                branch.cp = cp
                self.policy.push_frame(state)
                return True
            st.rejected_commits += 1
            net.rollback(cp)
        return False

    def _commit(self, net: NetworkBuilder, fm_ref: ConnectorRef, choice: SectionInstance) -> bool:
        fm_kind = net.kind_of(fm_ref)
        if not net.has_instance(choice.uid):
            if net.size + 1 > int(self.cfg.max_network_size):
                return False
            net.place(choice)
        to_ref = self._acceptor(net, fm_ref, fm_kind, choice)
        if to_ref is None:
            return False
        net.join(fm_ref, to_ref)
        return True

    def _acceptor(
        self, net: NetworkBuilder, fm_ref: ConnectorRef, fm_kind: str, inst: SectionInstance
    ) -> Optional[ConnectorRef]:
        if inst.uid == fm_ref[0] and not self.cfg.allow_self_connections:
            return None
        for idx in net.open_on(inst.uid):
            ref = (inst.uid, idx)
            if ref == fm_ref:
                continue
            if self.lexicon.compatible(fm_kind, inst.connector(idx).kind):
                return ref
        return None

    def _unwind(self, state: SearchState, stack: List[_Branch]) -> None:
        while stack:
            stack.pop()
            self.policy.pop_frame(state)


# ---- entry point ----
PoleSpec = Union[PolePair, Tuple[str, str], Tuple[str, str, bool]]
LexiconEntry = Union[SectionTemplate, Tuple[SectionTemplate, Optional[float]]]


def build_lexicon(
    pole_table: Iterable[PoleSpec],
    lexicon_source: Union[Lexicon, Iterable[LexiconEntry]],
    weight_key: Optional[str] = None,
) -> Lexicon:
    """
    Register pole declarations on a lexicon, building one from entries if needed.

    weight_key=None means the Lexicon's own key, or the default key for a new
    one. A prebuilt Lexicon with a different key is a configuration fault.
    """
    if isinstance(lexicon_source, Lexicon):
        lex = lexicon_source
        if weight_key is not None and weight_key != lex.weight_key:
            raise ValueError(
                f"build_lexicon: weight_key {weight_key!r} does not match lexicon key {lex.weight_key!r}"
            )
    else:
        lex = Lexicon(weight_key=weight_key if weight_key is not None else DEFAULT_WEIGHT_KEY)
        for entry in lexicon_source:
            if isinstance(entry, SectionTemplate):
                lex.register(entry)
            else:
                template, weight = entry
                lex.register(template, weight)
    for pole in pole_table:
        if isinstance(pole, PolePair):
            lex.register_pole_pair(pole.a, pole.b)
        elif len(pole) == 3:
            lex.register_pole_pair(pole[0], pole[1], symmetric=bool(pole[2]))  # type: ignore[misc]
        elif len(pole) == 2:
            lex.register_pole_pair(pole[0], pole[1])
        else:
            raise ValueError(f"build_lexicon: malformed pole declaration {pole!r}")
    return lex


def random_aggregate(
    pole_table: Iterable[PoleSpec],
    lexicon_source: Union[Lexicon, Iterable[LexiconEntry]],
    weight_key: Optional[str] = None,
    configuration: Union[AggregateConfig, Mapping[str, Any], None] = None,
    seed_points: Sequence[Union[SectionTemplate, str]] = (),
    rng: Optional[np.random.Generator] = None,
) -> List[Network]:
    """
    Build random networks from seed points and return the accepted ones.

    Seed points may be templates or labels of registered templates. The result
    is empty if no seed point reached a closed network within the limits.
    Raises ValueError for configuration faults.
    """
    if configuration is None:
        cfg = AggregateConfig()
    elif isinstance(configuration, AggregateConfig):
        cfg = configuration
    else:
        cfg = AggregateConfig.from_dict(configuration)
    lex = build_lexicon(pole_table, lexicon_source, weight_key)
    seeds: List[SectionTemplate] = []
    for sp in seed_points:
        if isinstance(sp, SectionTemplate):
            seeds.append(sp)
        else:
            found = lex.templates_by_label(str(sp))
            if not found:
                raise ValueError(f"random_aggregate: unknown seed label {sp!r}")
            seeds.append(found[0])
    policy = RandomPolicy(lex, BasicParameters(cfg), rng=rng)
    return Aggregator(policy).aggregate(seeds)


__all__ = [
    "Status",
    "SeedStats",
    "Aggregator",
    "build_lexicon",
    "random_aggregate",
]
