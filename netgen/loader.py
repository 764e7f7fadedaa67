from __future__ import annotations

"""
JSON lexicon loader.

Document layout:
- weight_key: optional str (default "weights")
- poles: list of {"pair": [a, b], "symmetric": bool (default False)}
- sections: list of {
    "label": str,
    "connectors": [kind, ...],
    "weight": float | null (default 1.0; null = no weight annotation),
    "count": int (default 1; registers the template that many times)
  }
- config: optional mapping of AggregateConfig keys
- seeds: optional list of section labels (default: the first section)
- rng_seed: optional int, overrides config.rng_seed

Outputs:
- load_lexicon_from_json(path) returns the normalized document.
- build_from_document(doc) returns (Lexicon, AggregateConfig, seed templates).

Determinism guarantees:
- Sections and poles are registered in document order.
"""

import json
from typing import Any, Dict, List, Mapping, Tuple

from .lexicon import DEFAULT_WEIGHT_KEY, Lexicon
from .parameters import AggregateConfig
from .types import SectionTemplate

_ALLOWED_KEYS = {"weight_key", "poles", "sections", "config", "seeds", "rng_seed", "scenario_id"}


def _normalize_pole(p: Any) -> Dict[str, Any]:
    if isinstance(p, Mapping):
        pair = p.get("pair")
        symmetric = bool(p.get("symmetric", False))
    else:
        pair, symmetric = p, False
    if not isinstance(pair, (list, tuple)) or len(pair) != 2:
        raise ValueError(f"poles: each entry needs a two-element 'pair', got {p!r}")
    return {"pair": [str(pair[0]), str(pair[1])], "symmetric": symmetric}


def _normalize_section(s: Any) -> Dict[str, Any]:
    if not isinstance(s, Mapping):
        raise ValueError("sections: each entry must be an object")
    if "label" not in s:
        raise ValueError("sections: 'label' is required")
    cons = s.get("connectors", [])
    if not isinstance(cons, list):
        raise ValueError(f"sections[{s['label']}]: 'connectors' must be a list")
    weight = s.get("weight", 1.0)
    count = int(s.get("count", 1))
    if count < 1:
        raise ValueError(f"sections[{s['label']}]: 'count' must be >= 1")
    return {
        "label": str(s["label"]),
        "connectors": [str(c) for c in cons],
        "weight": None if weight is None else float(weight),
        "count": count,
    }


def normalize_document(doc: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(doc) - _ALLOWED_KEYS)
    if unknown:
        raise ValueError(f"lexicon document: unknown keys {unknown}")
    if not doc.get("sections"):
        raise ValueError("lexicon document: 'sections' must be a non-empty list")
    out: Dict[str, Any] = {
        "weight_key": str(doc.get("weight_key", DEFAULT_WEIGHT_KEY)),
        "poles": [_normalize_pole(p) for p in doc.get("poles", []) or []],
        "sections": [_normalize_section(s) for s in doc["sections"]],
        "config": dict(doc.get("config", {}) or {}),
    }
    seeds = doc.get("seeds")
    out["seeds"] = [str(x) for x in seeds] if seeds else [out["sections"][0]["label"]]
    if "rng_seed" in doc:
        out["config"]["rng_seed"] = int(doc["rng_seed"])
    if "scenario_id" in doc:
        out["scenario_id"] = str(doc["scenario_id"])
    return out


def load_lexicon_from_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        doc = json.load(f)
    if not isinstance(doc, dict):
        raise ValueError("lexicon document must be a JSON object")
    return normalize_document(doc)


def build_from_document(doc: Mapping[str, Any]) -> Tuple[Lexicon, AggregateConfig, List[SectionTemplate]]:
    doc = normalize_document(doc)
    lex = Lexicon(weight_key=doc["weight_key"])
    for s in doc["sections"]:
        template = SectionTemplate.of(s["label"], *s["connectors"])
        for _ in range(int(s["count"])):
            lex.register(template, s["weight"])
    for p in doc["poles"]:
        a, b = p["pair"]
        lex.register_pole_pair(a, b, symmetric=bool(p["symmetric"]))
    lex.validate()
    cfg = AggregateConfig.from_dict(doc["config"])
    seeds: List[SectionTemplate] = []
    for label in doc["seeds"]:
        found = lex.templates_by_label(label)
        if not found:
            raise ValueError(f"seeds: unknown section label {label!r}")
        seeds.append(found[0])
    return lex, cfg, seeds


__all__ = ["normalize_document", "load_lexicon_from_json", "build_from_document"]
