import json
from pathlib import Path

import numpy as np

from neurograph import LayerKind
from neurograph.models import build_xor
from neurograph.reporting import describe, write_summary


def test_summary_outputs_are_deterministic(tmp_path):
    net = build_xor(np.random.default_rng(0))
    net.set_variable("epochs", 3.0)

    first = write_summary(net, tmp_path / "a" / "summary.json")
    net.run([1.0, 1.0])
    second = write_summary(net.clone(), tmp_path / "b" / "summary.json")

    assert Path(first).read_bytes() == Path(second).read_bytes()


def test_summary_describes_layers_and_edges():
    net = build_xor(np.random.default_rng(0))
    net.add_gru(1, 2, 4, "memory")
    net.link_layers(LayerKind.DENSE, 1, 0, 1, LayerKind.GRU, 0)
    summary = json.loads(json.dumps(describe(net)))

    assert summary["inputs"] == 2
    assert summary["comment"] == "Two-input network performs XOR"
    assert [layer["name"] for layer in summary["layers"]["dense"]] == ["Dense-1", "Dense-2"]
    assert summary["layers"]["gru"][0] == {
        "index": 0,
        "name": "memory",
        "inputs": 1,
        "outputs": 2,
        "cache": 4,
        "t": 0,
    }
    assert summary["edges"][0] == {"src": ["input", 0], "slice": [0, 2], "dst": ["dense", 0]}
    assert len(summary["edges"]) == 3
