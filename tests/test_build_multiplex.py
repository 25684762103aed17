import pytest
import torch
import networkx as nx

import rwrmh.core.network.build_multiplex as build_multiplex
from rwrmh.config import BuildConfig
from rwrmh.core.network.build_multiplex import create_multiplex, name_layers
from rwrmh.core.network.objects import Multiplex, is_multiplex
from rwrmh.utils.errors import InvalidInput, SchemaViolation


@pytest.fixture
def triangle_layers():
    """
    Two layers over nodes {1, 2, 3}; the second one also reaches node 4.
    """
    m1 = nx.Graph([(1, 2), (1, 3), (2, 3)])
    m2 = nx.Graph([(1, 3), (2, 3), (3, 4), (1, 4)])
    return {"m1": m1, "m2": m2}


@pytest.fixture
def isolated_node_layers():
    """
    Two triangles over {1, 2, 3}, the first one carrying an extra isolated node 4.
    """
    m1 = nx.Graph([(1, 2), (2, 3), (3, 1)])
    m1.add_node(4)
    m2 = nx.Graph([(1, 2), (2, 3), (1, 3)])
    return {"m1": m1, "m2": m2}


def test_end_to_end_isolated_node(isolated_node_layers):
    multiplex = create_multiplex(isolated_node_layers)
    assert multiplex.pool == ("1", "2", "3", "4")
    assert multiplex.node_count == 4
    assert multiplex.layer_count == 2
    for layer in multiplex.layers.values():
        assert layer.number_of_nodes() == 4
    assert multiplex["m2"].degree("4") == 0


def test_layers_are_aligned_and_tagged(triangle_layers):
    multiplex = create_multiplex(triangle_layers)
    assert is_multiplex(multiplex)
    for name, layer in multiplex.layers.items():
        assert tuple(layer.nodes) == multiplex.pool
        assert all(data["layer"] == name for _, _, data in layer.edges(data=True))
        assert all(data["name"] == node for node, data in layer.nodes(data=True))


def test_pool_does_not_depend_on_layer_order(triangle_layers):
    forward = create_multiplex(triangle_layers)
    backward = create_multiplex({"m2": triangle_layers["m2"], "m1": triangle_layers["m1"]})
    assert forward.pool == backward.pool
    assert list(forward.pool) == sorted(set(forward.pool))
    assert backward.layer_names == ("m2", "m1")


def test_rebuilding_is_deterministic(triangle_layers):
    first = create_multiplex(triangle_layers)
    second = create_multiplex(triangle_layers)
    assert first.pool == second.pool
    assert first.layer_names == second.layer_names
    for name in first:
        assert tuple(first[name].nodes) == tuple(second[name].nodes)
        assert {frozenset(e) for e in first[name].edges()} == {frozenset(e) for e in second[name].edges()}


def test_monoplex_from_single_graph():
    g = nx.Graph([("A", "C"), ("B", "E"), ("E", "D"), ("E", "C")])
    monoplex = create_multiplex(g)
    assert monoplex.layer_count == 1
    assert monoplex.layer_names == ("Layer_1",)
    assert monoplex.pool == ("A", "B", "C", "D", "E")
    assert is_multiplex(monoplex)
    same = create_multiplex({"Layer_1": g})
    assert same.pool == monoplex.pool
    assert set(same["Layer_1"].edges()) == set(monoplex["Layer_1"].edges())


def test_unnamed_layers_get_default_names(triangle_layers):
    multiplex = create_multiplex([triangle_layers["m1"], triangle_layers["m2"]])
    assert multiplex.layer_names == ("Layer_1", "Layer_2")
    prefixed = create_multiplex(list(triangle_layers.values()), config=BuildConfig(default_layer_prefix="L"))
    assert prefixed.layer_names == ("L1", "L2")


def test_duplicate_edges_and_loops_are_removed():
    g = nx.MultiGraph([(1, 2), (2, 1), (1, 2), (2, 2)])
    multiplex = create_multiplex({"dup": g})
    assert multiplex["dup"].number_of_edges() == 1
    assert not multiplex["dup"].is_multigraph()


def test_directed_layers_stay_directed():
    g = nx.DiGraph([("a", "b"), ("b", "c")])
    multiplex = create_multiplex({"signal": g, "ppi": nx.Graph([("a", "d")])})
    assert multiplex["signal"].is_directed()
    assert not multiplex["ppi"].is_directed()
    assert multiplex.is_directed()


def test_inputs_are_not_mutated(triangle_layers):
    create_multiplex(triangle_layers)
    assert list(triangle_layers["m1"].nodes) == [1, 2, 3]
    assert all("layer" not in data for _, _, data in triangle_layers["m1"].edges(data=True))


def test_layers_are_frozen(triangle_layers):
    multiplex = create_multiplex(triangle_layers)
    with pytest.raises(nx.NetworkXError):
        multiplex["m1"].add_node("99")


@pytest.mark.parametrize("executor", ["thread", "process", "sequential"])
def test_executors_give_the_same_multiplex(triangle_layers, executor):
    reference = create_multiplex(triangle_layers, config=BuildConfig(executor="sequential"))
    multiplex = create_multiplex(triangle_layers, config=BuildConfig(executor=executor, n_jobs=2))
    assert multiplex.pool == reference.pool
    assert multiplex.layer_names == reference.layer_names
    for name in reference:
        assert set(multiplex[name].edges()) == set(reference[name].edges())


def test_failing_worker_aborts_the_build(monkeypatch, triangle_layers):
    simplify = build_multiplex.simplify_layer

    def failing_simplify(graph):
        if graph.graph.get("broken"):
            raise RuntimeError("layer could not be simplified")
        return simplify(graph)

    monkeypatch.setattr(build_multiplex, "simplify_layer", failing_simplify)
    triangle_layers["m2"].graph["broken"] = True
    with pytest.raises(RuntimeError, match="could not be simplified"):
        create_multiplex(triangle_layers, config=BuildConfig(executor="thread", n_jobs=2))


def test_rejects_non_graphs():
    with pytest.raises(InvalidInput):
        create_multiplex({"m1": [(1, 2)]})
    with pytest.raises(InvalidInput):
        create_multiplex("not a graph")
    with pytest.raises(SchemaViolation):
        create_multiplex([])


def test_name_layers_rejects_repeated_names():
    g = nx.Graph([(1, 2)])
    with pytest.raises(SchemaViolation):
        name_layers({"Layer_2": g, None: g, "": g})


def test_layer_adjacency_follows_pool_index(triangle_layers):
    multiplex = create_multiplex(triangle_layers)
    adjacency = multiplex.layer_adjacency("m2").to_dense()
    assert adjacency.shape == (4, 4)
    assert torch.equal(adjacency, adjacency.T)
    i, j = multiplex.index["3"], multiplex.index["4"]
    assert adjacency[i, j].item() == 1.0
    assert adjacency.sum().item() == 2 * multiplex["m2"].number_of_edges()
    assert torch.equal(multiplex.layer_adjacency(1).to_dense(), adjacency)


def test_layer_adjacency_with_weights():
    g = nx.Graph()
    g.add_edge("a", "b", weight=0.25)
    g.add_edge("b", "c")
    multiplex = create_multiplex({"w": g})
    adjacency = multiplex.layer_adjacency("w", weight="weight").to_dense()
    assert adjacency[0, 1].item() == 0.25
    assert adjacency[1, 2].item() == 1.0


def test_edgelist_carries_layer_tags(triangle_layers):
    multiplex = create_multiplex(triangle_layers)
    edgelist = multiplex.to_edgelist()
    assert list(edgelist.columns) == ["source", "target", "layer"]
    assert (edgelist["layer"] == "m1").sum() == 3
    assert (edgelist["layer"] == "m2").sum() == 4


def test_direct_constructor_requires_aligned_layers():
    with pytest.raises(SchemaViolation):
        Multiplex({"a": nx.Graph([("2", "1")])}, ("1", "2"))
    aligned = nx.Graph()
    aligned.add_nodes_from(["1", "2"])
    multiplex = Multiplex({"a": aligned}, ("1", "2"))
    assert is_multiplex(multiplex)
    assert not is_multiplex(aligned)
