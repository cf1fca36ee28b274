import copy

import numpy as np
import pytest

from neurograph import GraphOrderError, LayerKind, NeuralNet

INPUT, DENSE, ACCUM = LayerKind.INPUT, LayerKind.DENSE, LayerKind.ACCUM
LSTM, GRU = LayerKind.LSTM, LayerKind.GRU


def _reverse_chain():
    net = NeuralNet(2, rng=np.random.default_rng(0))
    net.add_dense(2, 2)
    net.add_dense(2, 2)
    net.add_dense(2, 1)
    net.link_layers(DENSE, 1, 0, 2, DENSE, 2)
    net.link_layers(DENSE, 0, 0, 2, DENSE, 1)
    net.link_layers(INPUT, 0, 0, 2, DENSE, 0)
    return net


def _assert_topological(edges):
    position = {edge: i for i, edge in enumerate(edges)}
    for first in edges:
        for second in edges:
            if first.dest == second.source:
                assert position[first] < position[second]
    seen = []
    for edge in edges:
        if seen and seen[-1] == edge.dest:
            continue
        assert edge.dest not in seen, "edges into one layer must be contiguous"
        seen.append(edge.dest)


def test_sort_orders_a_chain():
    net = _reverse_chain()
    net.sort_edges()
    assert [edge.dest for edge in net.edges] == [(DENSE, 0), (DENSE, 1), (DENSE, 2)]
    assert net.run([1.0, 0.0]).shape == (1,)


def test_unsorted_edges_fail_fast():
    net = _reverse_chain()
    with pytest.raises(GraphOrderError):
        net.run([1.0, 0.0])


def test_run_rejects_split_destination_groups():
    net = NeuralNet(2, rng=np.random.default_rng(0))
    net.add_accum(4)
    net.add_accum(2)
    net.link_layers(INPUT, 0, 0, 2, ACCUM, 0)
    net.link_layers(INPUT, 0, 0, 2, ACCUM, 1)
    net.link_layers(INPUT, 0, 0, 1, ACCUM, 0)
    with pytest.raises(GraphOrderError):
        net.run([1.0, 2.0])
    net.sort_edges()
    net.run([1.0, 2.0])
    assert np.allclose(net.accum(0).output(), [1.0, 2.0, 1.0, 0.0])


def test_run_input_checks():
    net = NeuralNet(2, rng=np.random.default_rng(0))
    with pytest.raises(GraphOrderError):
        net.run([1.0, 2.0])
    net.add_accum(2)
    net.link_layers(INPUT, 0, 0, 2, ACCUM, 0)
    with pytest.raises(ValueError):
        net.run([1.0])


def test_random_dag_sorts_topologically():
    rng = np.random.default_rng(21)
    net = NeuralNet(3, rng=np.random.default_rng(0))
    for _ in range(8):
        net.add_accum(9)
    for _ in range(80):
        src = (INPUT, 0) if rng.random() < 0.25 else (ACCUM, int(rng.integers(8)))
        net.link_layers(src[0], src[1], 0, int(rng.integers(1, 4)), ACCUM, int(rng.integers(8)))
    edges = set(net.edges)

    net.sort_edges()
    assert set(net.edges) == edges
    _assert_topological(net.edges)
    net.run([1.0, 2.0, 3.0])


def test_sort_keeps_order_of_edges_into_one_layer():
    net = NeuralNet(3, rng=np.random.default_rng(0))
    net.add_accum(3)
    net.add_accum(3)
    net.add_accum(6)
    net.link_layers(INPUT, 0, 0, 3, ACCUM, 1)
    net.link_layers(ACCUM, 1, 0, 3, ACCUM, 2)
    net.link_layers(INPUT, 0, 0, 3, ACCUM, 0)
    net.link_layers(ACCUM, 0, 0, 3, ACCUM, 2)
    net.sort_edges()
    into_last = [edge.source for edge in net.edges if edge.dest == (ACCUM, 2)]
    assert into_last == [(ACCUM, 1), (ACCUM, 0)]
    _assert_topological(net.edges)


@pytest.mark.parametrize("kind", [LSTM, GRU])
def test_recurrent_source_feeds_latest_state_after_cache_wraps(kind):
    net = NeuralNet(3, rng=np.random.default_rng(4))
    add = net.add_lstm if kind is LSTM else net.add_gru
    add(3, 2, 2)
    net.add_accum(2)
    assert net.link_layers(INPUT, 0, 0, 3, kind, 0)
    assert net.link_layers(kind, 0, 0, 2, ACCUM, 0)
    net.sort_edges()

    recurrent = net.layer(kind, 0)
    standalone = copy.deepcopy(recurrent)
    rng = np.random.default_rng(5)
    for step in range(1, 7):
        x = rng.normal(size=3)
        expected = standalone.run(x)
        out = net.run(x)
        assert recurrent.t == step
        assert np.array_equal(out, expected)
        assert np.array_equal(out, recurrent.state())
        assert np.array_equal(net.accum(0).output(), out)
