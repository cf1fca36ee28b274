import logging

import numpy as np
import pytest

from neurograph import LayerKind, LinkStatus, NeuralNet

INPUT, DENSE, ACCUM = LayerKind.INPUT, LayerKind.DENSE, LayerKind.ACCUM


def _net(inputs=4):
    return NeuralNet(inputs, rng=np.random.default_rng(0))


@pytest.mark.parametrize("start", range(0, 6))
@pytest.mark.parametrize("end", range(0, 6))
def test_shape_law_for_exact_destinations(start, end):
    net = _net(4)
    net.add_dense(3, 2)
    status = net.link_layers(INPUT, 0, start, end, DENSE, 0)
    if not 0 <= start <= end <= 4:
        assert status is LinkStatus.SELECTOR_OUT_OF_RANGE
    elif end - start != 3:
        assert status is LinkStatus.SHAPE_MISMATCH
    else:
        assert status is LinkStatus.OK
    assert len(net.edges) == (1 if status else 0)


@pytest.mark.parametrize("start", range(0, 5))
@pytest.mark.parametrize("end", range(0, 5))
def test_shape_law_for_accumulators(start, end):
    net = _net(4)
    net.add_accum(3)
    status = net.link_layers(INPUT, 0, start, end, ACCUM, 0)
    if not start <= end:
        assert status is LinkStatus.SELECTOR_OUT_OF_RANGE
    elif end - start > 3:
        assert status is LinkStatus.SHAPE_MISMATCH
    else:
        assert status is LinkStatus.OK


def test_index_checks():
    net = _net(2)
    net.add_dense(2, 2)
    assert net.link_layers(DENSE, 3, 0, 2, DENSE, 0) is LinkStatus.INDEX_OUT_OF_RANGE
    assert net.link_layers(INPUT, 1, 0, 2, DENSE, 0) is LinkStatus.INDEX_OUT_OF_RANGE
    assert net.link_layers(DENSE, 0, 0, 2, INPUT, 0) is LinkStatus.INDEX_OUT_OF_RANGE
    assert net.link_layers(42, 0, 0, 2, DENSE, 0) is LinkStatus.INDEX_OUT_OF_RANGE
    assert net.link_layers(INPUT, 0, 0, 2, LayerKind.GRU, 0) is LinkStatus.INDEX_OUT_OF_RANGE
    assert net.edges == []


def test_duplicates_and_fan_in_capacity():
    net = _net(4)
    net.add_accum(5)
    assert net.link_layers(INPUT, 0, 0, 2, ACCUM, 0)
    assert net.link_layers(INPUT, 0, 0, 2, ACCUM, 0) is LinkStatus.DUPLICATE_EDGE
    assert net.link_layers(INPUT, 0, 0, 4, ACCUM, 0) is LinkStatus.FAN_IN_OVERFLOW
    assert net.link_layers(INPUT, 0, 1, 4, ACCUM, 0)
    assert len(net.edges) == 2

    net.add_dense(4, 1)
    assert net.link_layers(INPUT, 0, 0, 4, DENSE, 0)
    net.add_accum(4)
    assert net.link_layers(ACCUM, 1, 0, 4, DENSE, 0) is LinkStatus.FAN_IN_OVERFLOW


def test_cycles_are_rejected_and_leave_edges_unchanged():
    net = _net(2)
    for _ in range(3):
        net.add_dense(2, 2)
    assert net.link_layers(DENSE, 0, 0, 2, DENSE, 1)
    assert net.link_layers(DENSE, 1, 0, 2, DENSE, 2)
    before = list(net.edges)
    assert net.link_layers(DENSE, 2, 0, 2, DENSE, 0) is LinkStatus.CYCLE
    assert net.link_layers(DENSE, 0, 0, 2, DENSE, 0) is LinkStatus.CYCLE
    assert net.edges == before


def test_converging_paths_are_not_cycles():
    net = _net(2)
    net.add_accum(2)
    net.add_accum(4)
    assert net.link_layers(INPUT, 0, 0, 2, ACCUM, 0)
    assert net.link_layers(INPUT, 0, 0, 2, ACCUM, 1)
    assert net.link_layers(ACCUM, 0, 0, 2, ACCUM, 1) is LinkStatus.OK


def test_random_linking_stays_acyclic():
    rng = np.random.default_rng(7)
    net = _net(3)
    for _ in range(6):
        net.add_accum(12)
    for _ in range(60):
        src = (INPUT, 0) if rng.random() < 0.2 else (ACCUM, int(rng.integers(6)))
        width = int(rng.integers(1, 4))
        net.link_layers(src[0], src[1], 0, width, ACCUM, int(rng.integers(6)))

    adjacency = {}
    for edge in net.edges:
        adjacency.setdefault(edge.source, set()).add(edge.dest)

    def reaches(node, target, seen):
        for nxt in adjacency.get(node, ()):
            if nxt == target or (nxt not in seen and reaches(nxt, target, seen | {nxt})):
                return True
        return False

    assert net.edges
    assert not any(reaches(node, node, {node}) for node in adjacency)


def test_link_status_truthiness_and_logging(caplog):
    assert LinkStatus.OK
    assert not any(bool(status) for status in LinkStatus if status is not LinkStatus.OK)

    net = _net(2)
    net.add_dense(3, 1)
    with caplog.at_level(logging.DEBUG, logger="neurograph.graph"):
        net.link_layers(INPUT, 0, 0, 2, DENSE, 0)
    assert "shape_mismatch" in caplog.text
