# Put the repository root on sys.path so tests import `netgen` and `harness` without installation
import os
import sys

_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

import numpy as np
import pytest


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded stream; tests that draw must not share state across cases."""
    return np.random.default_rng(0)


@pytest.fixture
def social_doc() -> dict:
    """Lexicon document for the friend/stranger person network."""
    return {
        "poles": [
            {"pair": ["friend", "friend"], "symmetric": True},
            {"pair": ["stranger", "stranger"], "symmetric": True},
        ],
        "sections": [
            {"label": "P", "connectors": ["friend", "friend", "stranger", "stranger", "stranger"]},
        ],
        "config": {"max_solutions": 1, "max_network_size": 50, "close_fraction": 1.0},
    }
