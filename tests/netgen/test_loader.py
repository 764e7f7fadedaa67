import json

import pytest

from netgen import Aggregator, BasicParameters, RandomPolicy
from netgen.loader import build_from_document, load_lexicon_from_json, normalize_document


def _doc():
    return {
        "scenario_id": "loader_smoke",
        "weight_key": "w",
        "poles": [
            {"pair": ["friend", "friend"], "symmetric": True},
            {"pair": ["stranger", "stranger"], "symmetric": True},
        ],
        "sections": [
            {"label": "P", "connectors": ["friend", "friend", "stranger", "stranger", "stranger"]},
            {"label": "ghost", "connectors": ["friend"], "weight": None, "count": 2},
        ],
        "config": {"max_solutions": 2, "max_network_size": 50},
        "rng_seed": 17,
    }


def test_load_and_build_from_json(tmp_path):
    path = tmp_path / "lexicon.json"
    path.write_text(json.dumps(_doc()), encoding="utf-8")
    doc = load_lexicon_from_json(str(path))
    assert doc["seeds"] == ["P"]
    assert doc["config"]["rng_seed"] == 17

    lex, cfg, seeds = build_from_document(doc)
    assert lex.weight_key == "w"
    assert len(lex) == 3
    assert [t.label for t in lex.candidates("friend")] == ["P", "ghost", "ghost"]
    assert lex.weight_of(0) == 1.0
    assert lex.weight_of(1) == 0.0
    assert cfg.max_solutions == 2 and cfg.rng_seed == 17
    assert [s.label for s in seeds] == ["P"]

    nets = Aggregator(RandomPolicy(lex, BasicParameters(cfg))).aggregate(seeds)
    assert len(nets) == 2
    # zero-weight ghosts are never drawn
    assert all(i.label == "P" for n in nets for i in n.instances)


def test_normalize_is_idempotent():
    once = normalize_document(_doc())
    assert normalize_document(once) == once


def test_pair_shorthand_accepted():
    doc = _doc()
    doc["poles"] = [["friend", "friend"], ["stranger", "stranger"]]
    lex, _, _ = build_from_document(doc)
    assert lex.compatible("friend", "friend")


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.update(extra=1),
        lambda d: d.update(sections=[]),
        lambda d: d.update(poles=[{"pair": ["friend"]}]),
        lambda d: d["sections"][0].update(count=0),
        lambda d: d.update(seeds=["nobody"]),
        lambda d: d["config"].update(max_depth=0),
        lambda d: d["poles"].append({"pair": ["friend", "enemy"]}),
    ],
)
def test_bad_documents_rejected(mutate):
    doc = _doc()
    mutate(doc)
    with pytest.raises(ValueError):
        build_from_document(doc)


def test_social_document_closes_every_connector(social_doc):
    lex, cfg, seeds = build_from_document(social_doc)
    nets = Aggregator(RandomPolicy(lex, BasicParameters(cfg))).aggregate(seeds)
    assert len(nets) == 1
    net = nets[0]
    assert net.is_closed
    assert not any(e.is_self_loop for e in net.edges)
    assert 2 * len(net.edges) == sum(len(i.template.connectors) for i in net.instances)
