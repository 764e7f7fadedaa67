"""
netgen: random network assembly from connector-bearing section templates.

Exposes:
- Connector, SectionTemplate, SectionInstance, Edge, Network
- Lexicon (templates, weights, pole table)
- AggregateConfig, BasicParameters
- RandomPolicy, ReplayPolicy, Aggregator
- random_aggregate(pole_table, lexicon_source, weight_key, configuration, seed_points)

Determinism
- Pass rng_seed (or an np.random.Generator); no hidden global state.
"""
from .types import (
    Connector as Connector,
    PolePair as PolePair,
    SectionTemplate as SectionTemplate,
    SectionInstance as SectionInstance,
    Edge as Edge,
    Network as Network,
)
from .lexicon import Lexicon as Lexicon
from .distribution import WeightedChoice as WeightedChoice
from .frames import FrameStack as FrameStack
from .parameters import AggregateConfig as AggregateConfig, BasicParameters as BasicParameters
from .network import NetworkBuilder as NetworkBuilder, SearchState as SearchState
from .policy import (
    SelectionPolicy as SelectionPolicy,
    RandomPolicy as RandomPolicy,
    ReplayPolicy as ReplayPolicy,
)
from .aggregate import (
    Aggregator as Aggregator,
    Status as Status,
    build_lexicon as build_lexicon,
    random_aggregate as random_aggregate,
)
