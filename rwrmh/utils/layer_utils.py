import numpy as np
import networkx as nx
from typing import Any, Dict, Iterable, Sequence, Tuple

from rwrmh.utils.errors import InvalidInput, ReferentialViolation


def to_node_id(value: Any) -> str:
    """
    Canonical string identifier of a node.

    Integral floats are written as integers (1.0 -> "1"): id columns holding a
    NaN, or read from a file, come as floats and must still match integer keys.
    """
    if isinstance(value, (float, np.floating)) and np.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return str(value)


def check_is_graph(graph: Any, what: str = "layer") -> None:
    """Raise InvalidInput unless graph is a networkx graph (simple or multi, directed or not)."""
    if not isinstance(graph, nx.Graph):
        raise InvalidInput(f"Every {what} must be a networkx graph, but got {type(graph).__name__}")


def _empty_like(graph: nx.Graph, simple: bool = False) -> nx.Graph:
    if simple:
        new_graph = nx.DiGraph() if graph.is_directed() else nx.Graph()
    else:
        new_graph = graph.__class__()
    new_graph.graph.update(graph.graph)
    return new_graph


def _copy_edges(source: nx.Graph, target: nx.Graph, mapping: Dict[Any, Any] = None) -> None:
    # Multigraph keys are dropped: nodes merged by the mapping could make them clash
    for u, v, data in source.edges(data=True):
        if mapping is not None:
            u, v = mapping[u], mapping[v]
        target.add_edge(u, v, **dict(data))


def assign_node_names(graph: nx.Graph, name_attribute: str = "name") -> nx.Graph:
    """
    Key every vertex of a layer by its canonical identifier.

    The identifier is the `name_attribute` vertex attribute when the vertex has one,
    the vertex key otherwise. Identifiers are always strings so that pools built
    from independently authored graphs compare and sort consistently. Vertices
    sharing an identifier are merged, attributes of the later ones win.

    Args:
        graph: networkx graph of any flavour
        name_attribute: vertex attribute holding an explicit name

    Returns:
        A new graph of the same class keyed by identifier, each vertex carrying
        `name_attribute` equal to its key.
    """
    check_is_graph(graph)
    mapping = {
        node: to_node_id(data[name_attribute]) if data.get(name_attribute) is not None else to_node_id(node)
        for node, data in graph.nodes(data=True)
    }
    named = _empty_like(graph)
    for node, data in graph.nodes(data=True):
        attributes = dict(data)
        attributes[name_attribute] = mapping[node]
        named.add_node(mapping[node], **attributes)
    _copy_edges(graph, named, mapping)
    return named


def simplify_layer(graph: nx.Graph) -> nx.Graph:
    """
    Remove self-loops and collapse repeated edges into one.

    Directed layers keep (u, v) and (v, u) as different edges. When an edge is
    repeated only the attributes of its first occurrence are kept, weights are
    not aggregated.

    Returns:
        A simple nx.Graph or nx.DiGraph with the same vertices, in the same order.
    """
    check_is_graph(graph)
    simple = _empty_like(graph, simple=True)
    simple.add_nodes_from((node, dict(data)) for node, data in graph.nodes(data=True))
    for u, v, data in graph.edges(data=True):
        if u == v or simple.has_edge(u, v):
            continue
        simple.add_edge(u, v, **dict(data))
    return simple


def aggregate_pool(layers: Iterable[nx.Graph]) -> Tuple[str, ...]:
    """
    Sorted union of the vertex identifiers of named layers.

    The result does not depend on the order of the layers: its order is the
    row/column index of every matrix built downstream.
    """
    nodes = set()
    for layer in layers:
        check_is_graph(layer)
        nodes.update(layer.nodes)
    return tuple(sorted(nodes))


def add_missing_nodes(graph: nx.Graph, pool: Sequence[str], name_attribute: str = "name") -> nx.Graph:
    """
    Pad a layer so that its vertex list is exactly the pool, in pool order.

    Pool vertices missing from the layer are added as isolated vertices.

    Raises:
        ReferentialViolation: if the layer holds vertices that are not in the pool
    """
    check_is_graph(graph)
    outside = set(graph.nodes) - set(pool)
    if outside:
        raise ReferentialViolation(
            f"{len(outside)} vertices of the layer are not present in the pool of nodes", missing=outside
        )
    padded = _empty_like(graph)
    for node in pool:
        attributes = dict(graph.nodes[node]) if node in graph else {}
        attributes[name_attribute] = node
        padded.add_node(node, **attributes)
    _copy_edges(graph, padded)
    return padded


def tag_layer_edges(graph: nx.Graph, layer_name: str, layer_attribute: str = "layer") -> nx.Graph:
    """Copy of the layer with every edge carrying `layer_attribute` = layer_name."""
    check_is_graph(graph)
    tagged = graph.copy()
    nx.set_edge_attributes(tagged, layer_name, layer_attribute)
    return tagged


def missing_pool_nodes(graph: nx.Graph, pool: Sequence[str]) -> Tuple[str, ...]:
    """Pool vertices that a layer lacks, in pool order."""
    return tuple(node for node in pool if node not in graph)
