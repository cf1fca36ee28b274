"""Deterministic network summarisation helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from ..core.types import LAYER_KINDS
from ..graph import NeuralNet


def _layer_entry(index: int, layer) -> Mapping[str, object]:
    entry: dict[str, object] = {
        "index": index,
        "name": layer.name,
        "inputs": layer.input_len(),
        "outputs": layer.output_len(),
    }
    cache = getattr(layer, "cache", None)
    if cache is not None:
        entry["cache"] = cache.capacity
        entry["t"] = cache.t
    return entry


def describe(net: NeuralNet) -> Mapping[str, object]:
    """Return a JSON-serialisable description of ``net``."""

    layers: dict[str, list[Mapping[str, object]]] = {}
    for kind in LAYER_KINDS:
        entries = [_layer_entry(i, layer) for i, layer in enumerate(net.layers(kind))]
        if entries:
            layers[kind.name.lower()] = entries

    edges = [
        {
            "src": [edge.src_kind.name.lower(), edge.src_index],
            "slice": [edge.start, edge.end],
            "dst": [edge.dst_kind.name.lower(), edge.dst_index],
        }
        for edge in net.edges
    ]

    return {
        "version": 1,
        "inputs": net.inputs,
        "generation": net.generation,
        "fitness": net.fitness,
        "comment": net.comment,
        "variables": dict(net.variables),
        "layers": layers,
        "edges": edges,
    }


def dumps_summary(net: NeuralNet) -> str:
    return json.dumps(describe(net), sort_keys=True, indent=2)


def write_summary(net: NeuralNet, out_summary_json: str | Path) -> str:
    """Write a deterministic JSON summary of ``net``."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(dumps_summary(net))
    return str(out_path)


__all__ = ["describe", "dumps_summary", "write_summary"]
