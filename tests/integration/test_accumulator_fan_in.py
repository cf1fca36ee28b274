import numpy as np

from neurograph import LayerKind, NeuralNet

INPUT, DENSE, ACCUM = LayerKind.INPUT, LayerKind.DENSE, LayerKind.ACCUM


def _fan_in(first, second, width=5):
    net = NeuralNet(2, rng=np.random.default_rng(9))
    net.add_dense(2, 3)
    net.add_dense(2, 2)
    net.add_accum(width)
    net.link_layers(INPUT, 0, 0, 2, DENSE, 0)
    net.link_layers(INPUT, 0, 0, 2, DENSE, 1)
    for index in (first, second):
        size = net.dense(index).output_len()
        assert net.link_layers(DENSE, index, 0, size, ACCUM, 0)
    net.sort_edges()
    return net


def test_accumulator_concatenates_in_edge_order():
    net = _fan_in(0, 1)
    out = net.run([0.4, -0.7])
    expected = np.concatenate([net.dense(0).output(), net.dense(1).output()])
    assert np.array_equal(out, expected)
    assert np.array_equal(net.accum(0).output(), expected)


def test_reversed_edges_reverse_the_layout():
    net = _fan_in(1, 0)
    out = net.run([0.4, -0.7])
    assert np.array_equal(out[:2], net.dense(1).output())
    assert np.array_equal(out[2:], net.dense(0).output())


def test_unfilled_accumulator_slots_are_zero():
    net = _fan_in(0, 1, width=7)
    out = net.run([1.0, 1.0])
    assert out.shape == (7,)
    assert np.array_equal(out[5:], [0.0, 0.0])
