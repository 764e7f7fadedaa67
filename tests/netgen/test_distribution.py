import numpy as np
import pytest

from netgen import WeightedChoice


def test_probabilities_sum_to_one():
    d = WeightedChoice([0.1, 0.9])
    p = d.probabilities()
    assert np.isclose(p.sum(), 1.0)
    assert p[1] > p[0]


def test_zero_weight_entries_never_drawn(rng):
    d = WeightedChoice([0.0, 1.0, 0.0, 2.0])
    draws = {d.draw(rng) for _ in range(2000)}
    assert draws == {1, 3}


def test_all_zero_weights_never_select(rng):
    d = WeightedChoice([0.0, 0.0])
    assert d.degenerate
    assert d.draw(rng) is None
    assert WeightedChoice([]).draw(rng) is None


def test_uniform_draws_cover_all_indices(rng):
    d = WeightedChoice.uniform(4)
    draws = [d.draw(rng) for _ in range(400)]
    assert set(draws) == {0, 1, 2, 3}


def test_same_seed_same_sequence():
    d = WeightedChoice([1.0, 2.0, 3.0])
    r1 = np.random.default_rng(7)
    r2 = np.random.default_rng(7)
    s1 = [d.draw(r1) for _ in range(50)]
    s2 = [d.draw(r2) for _ in range(50)]
    assert s1 == s2


def test_invalid_weights_rejected():
    with pytest.raises(ValueError):
        WeightedChoice([1.0, -1.0])
    with pytest.raises(ValueError):
        WeightedChoice([1.0, float("nan")])
    with pytest.raises(ValueError):
        WeightedChoice([[1.0, 2.0]])
