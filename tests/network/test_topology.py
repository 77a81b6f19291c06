import pytest

from qnls.network import CustomTopology, LinearTopology, QuantumNetwork, Topo, TopologyError


def make_topo(**link) -> Topo:
    return {
        "nodes": [
            {"name": "A", "capacity": 2},
            {"name": "R", "capacity": 4, "swap_prob": 0.5, "decay_rate": 0.1},
            {"name": "B"},
        ],
        "links": [
            {"node1": "A", "node2": "R", "loss_prob": 0.3, **link},
            {"node1": "R", "node2": "B", "base_fidelity": 0.9},
        ],
    }


def test_custom_topology():
    net = QuantumNetwork(CustomTopology(make_topo(), memory_args={"capacity": 3}, link_args={"attempt_interval": 0.001}))
    assert [node.name for node in net.nodes] == ["A", "R", "B"]
    assert [node.id for node in net.nodes] == [0, 1, 2]
    assert [node.capacity for node in net.nodes] == [2, 4, 3]
    assert net.get_node("R").swap_prob == 0.5
    assert net.get_node("R").decay_rate == 0.1
    assert net.get_node("B").swap_prob == 1.0

    ar = net.get_link("A", "R")
    assert ar.name == "A-R"
    assert ar.endpoints == (0, 1)
    assert ar.loss_prob == 0.3
    assert ar.attempt_interval == 0.001
    assert ar.max_attempts is None
    rb = net.get_link(2, 1)
    assert rb.base_fidelity == 0.9
    assert rb.loss_prob == 0.0
    assert rb.connects(1, 2)

    assert net.neighbors(1) == [0, 2]
    assert net.get_node(1) is net.get_node("R")
    with pytest.raises(IndexError):
        net.get_node("X")
    with pytest.raises(IndexError):
        net.get_node(3)
    with pytest.raises(IndexError):
        net.get_link("A", "B")


def test_linear_topology():
    net = QuantumNetwork(LinearTopology(4, memory_args={"capacity": 2}, link_args={"loss_prob": 0.5}, swap_prob=0.8))
    assert [node.name for node in net.nodes] == ["n1", "n2", "n3", "n4"]
    assert [link.name for link in net.links] == ["n1-n2", "n2-n3", "n3-n4"]
    assert all(link.loss_prob == 0.5 for link in net.links)
    assert all(node.swap_prob == 0.8 for node in net.nodes)

    with pytest.raises(TopologyError):
        QuantumNetwork(LinearTopology(1))


@pytest.mark.parametrize(
    ("topo", "match"),
    [
        ({"nodes": [{"name": "A"}, {"name": "A"}], "links": []}, "duplicate node"),
        ({"nodes": [{"name": "A"}], "links": [{"node1": "A", "node2": "Z"}]}, "unknown node Z"),
        ({"nodes": [{"name": "A"}], "links": [{"node1": "A", "node2": "A"}]}, "self-loop"),
        (
            {"nodes": [{"name": "A"}, {"name": "B"}], "links": [{"node1": "A", "node2": "B"}, {"node1": "B", "node2": "A"}]},
            "duplicate link",
        ),
        ({"nodes": [{"name": "A", "capacity": 0}], "links": []}, "capacity"),
        ({"nodes": [{"name": "A", "swap_prob": 1.5}], "links": []}, "swap_prob"),
        ({"nodes": [{"name": "A", "decay_rate": -1.0}], "links": []}, "decay_rate"),
        ({"nodes": [{"name": "A", "swap_prob": True}], "links": []}, "swap_prob"),
        ({"nodes": [{"name": "A", "capacity": True}], "links": []}, "capacity"),
    ],
)
def test_topology_errors(topo: Topo, match: str):
    with pytest.raises(TopologyError, match=match):
        QuantumNetwork(CustomTopology(topo))


@pytest.mark.parametrize(
    ("link", "match"),
    [
        ({"loss_prob": -0.1}, "loss_prob"),
        ({"base_fidelity": 1.1}, "base_fidelity"),
        ({"herald_delay": -1e-3}, "herald_delay"),
        ({"attempt_interval": float("inf")}, "attempt_interval"),
        ({"max_attempts": 0}, "max_attempts"),
        ({"loss_prob": False}, "loss_prob"),
    ],
)
def test_link_errors(link: dict, match: str):
    with pytest.raises(TopologyError, match=match):
        QuantumNetwork(CustomTopology(make_topo(**link)))
