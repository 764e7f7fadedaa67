import pytest

from netgen.frames import CANDIDATES, DISTRIBUTIONS, FrameStack


def test_push_starts_empty_and_pop_restores():
    fs = FrameStack()
    fs.put(CANDIDATES, "x", ((0, 1),))
    fs.put(DISTRIBUTIONS, "x", "dist-x")
    before = fs.snapshot()

    fs.push_frame()
    assert fs.snapshot() == {}
    assert fs.get(CANDIDATES, "x") is None
    fs.put(CANDIDATES, "x", ((2, 0), (3, 0)))
    fs.put(CANDIDATES, "y", ())
    assert fs.contains(CANDIDATES, "y")

    fs.pop_frame()
    assert fs.snapshot() == before
    assert fs.get(DISTRIBUTIONS, "x") == "dist-x"
    assert not fs.contains(CANDIDATES, "y")


def test_nested_frames_are_lifo():
    fs = FrameStack()
    snaps = []
    for depth in range(5):
        fs.put(CANDIDATES, "k", depth)
        snaps.append(fs.snapshot())
        fs.push_frame()
    assert fs.depth == 5
    for depth in reversed(range(5)):
        fs.pop_frame()
        assert fs.snapshot() == snaps[depth]
        assert fs.get(CANDIDATES, "k") == depth
    assert fs.depth == 0


def test_latest_write_wins_within_frame():
    fs = FrameStack()
    fs.put(CANDIDATES, "x", 1)
    fs.put(CANDIDATES, "x", 2)
    assert fs.get(CANDIDATES, "x") == 2
    fs.push_frame()
    fs.pop_frame()
    assert fs.get(CANDIDATES, "x") == 2


def test_pop_empty_stack_raises():
    fs = FrameStack()
    with pytest.raises(IndexError):
        fs.pop_frame()


def test_snapshot_filters_by_cache():
    fs = FrameStack()
    fs.put(CANDIDATES, "x", 1)
    fs.put(DISTRIBUTIONS, "x", 2)
    assert fs.snapshot(DISTRIBUTIONS) == {(DISTRIBUTIONS, "x"): 2}


def test_clear_drops_everything():
    fs = FrameStack()
    fs.put(CANDIDATES, "x", 1)
    fs.push_frame()
    fs.clear()
    assert fs.depth == 0
    assert fs.snapshot() == {}
