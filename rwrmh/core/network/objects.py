"""
Multiplex and MultiplexHet network objects.

A Multiplex is a set of layers (networkx graphs) sharing one sorted pool of
nodes; the position of a node in the pool is its row/column index in every
matrix built from the multiplex. A MultiplexHet joins two multiplexes through
the supra-bipartite matrix relating every layer of the first one with every
layer of the second one.

Both objects are immutable: layers are frozen networkx graphs and the mappings
are read-only views.
"""

from types import MappingProxyType
from typing import Any, Iterator, Mapping, NamedTuple, Optional, Sequence, Union

import networkx as nx
import pandas as pd
import torch

from rwrmh.config import BuildConfig, DEFAULT_CONFIG
from rwrmh.utils.errors import InvalidInput, SchemaViolation
from rwrmh.utils.sparse_utils import build_adjacency_matrix


class RelationRecord(NamedTuple):
    """A bipartite relation between a node of the first and a node of the second network."""
    source: Any
    target: Any
    weight: Optional[float] = None


class Multiplex:
    """
    Layers aligned on a common, sorted pool of nodes.

    Use Multiplex.from_layers (or create_multiplex) to build one from raw graphs.
    Calling the constructor directly is reserved to layers that are already
    aligned: every layer must list exactly the pool, in pool order.
    """

    __slots__ = ("_layers", "_pool", "_index", "_config")

    def __init__(self, layers: Mapping[str, nx.Graph], pool: Sequence[str], config: Optional[BuildConfig] = None):
        config = config or DEFAULT_CONFIG
        pool = tuple(pool)
        if not layers:
            raise SchemaViolation("A multiplex network needs at least one layer")
        if list(pool) != sorted(set(pool)):
            raise SchemaViolation("The pool of nodes must be sorted and without duplicates")
        for name, layer in layers.items():
            if not isinstance(layer, nx.Graph):
                raise InvalidInput(f"Layer '{name}' is not a networkx graph")
            if tuple(layer.nodes) != pool:
                raise SchemaViolation(f"The nodes of layer '{name}' are not aligned on the pool of nodes")
        self._layers = MappingProxyType({name: nx.freeze(layer.copy()) for name, layer in layers.items()})
        self._pool = pool
        self._index = MappingProxyType({node: i for i, node in enumerate(pool)})
        self._config = config

    @classmethod
    def from_layers(cls, layers, config: Optional[BuildConfig] = None, **kwargs) -> "Multiplex":
        """Build a multiplex from raw graphs, see create_multiplex."""
        from rwrmh.core.network.build_multiplex import create_multiplex
        return create_multiplex(layers, config=config, **kwargs)

    @property
    def layers(self) -> Mapping[str, nx.Graph]:
        return self._layers

    @property
    def layer_names(self) -> tuple:
        return tuple(self._layers)

    @property
    def pool(self) -> tuple:
        return self._pool

    @property
    def index(self) -> Mapping[str, int]:
        """Node name -> row/column index."""
        return self._index

    @property
    def node_count(self) -> int:
        return len(self._pool)

    @property
    def layer_count(self) -> int:
        return len(self._layers)

    @property
    def config(self) -> BuildConfig:
        return self._config

    def __len__(self) -> int:
        return self.layer_count

    def __iter__(self) -> Iterator[str]:
        return iter(self._layers)

    def __contains__(self, name) -> bool:
        return name in self._layers

    def __getitem__(self, key: Union[str, int]) -> nx.Graph:
        if isinstance(key, int) and not isinstance(key, bool):
            return self._layers[self.layer_names[key]]
        return self._layers[key]

    def is_directed(self) -> bool:
        return any(layer.is_directed() for layer in self._layers.values())

    def layer_adjacency(self, key: Union[str, int], weight: Optional[str] = None) -> torch.Tensor:
        """
        Sparse (N, N) adjacency matrix of one layer, indexed by the pool.

        Args:
            key: layer name or position
            weight: edge attribute to use as value, every edge counts 1 when None
                or when the edge lacks it
        """
        layer = self[key]
        rows, cols, values = [], [], []
        for u, v, data in layer.edges(data=True):
            rows.append(self._index[u])
            cols.append(self._index[v])
            values.append(float(data.get(weight, 1.0)) if weight is not None else 1.0)
        return build_adjacency_matrix(rows, cols, values, self.node_count,
                                      directed=layer.is_directed(), dtype=self._config.dtype)

    def to_edgelist(self) -> pd.DataFrame:
        """
        Edges of every layer in a single table.

        Returns:
            pd.DataFrame with columns [source, target, layer], plus weight when
            some edge carries the configured weight attribute.
        """
        layer_attribute = self._config.layer_attribute
        weight_attribute = self._config.weight_attribute
        records = []
        for name, layer in self._layers.items():
            for u, v, data in layer.edges(data=True):
                records.append((u, v, data.get(layer_attribute, name), data.get(weight_attribute)))
        edgelist = pd.DataFrame(records, columns=["source", "target", "layer", "weight"])
        if edgelist["weight"].isna().all():
            edgelist = edgelist.drop(columns="weight")
        return edgelist

    def __repr__(self) -> str:
        return f"Multiplex(layers={list(self.layer_names)}, nodes={self.node_count})"


class MultiplexHet:
    """
    Two multiplex networks joined by their supra-bipartite matrix.

    Use MultiplexHet.from_multiplexes (or create_multiplex_het) to build one.
    """

    __slots__ = ("_multiplex1", "_multiplex2", "_bipartite", "_supra_bipartite")

    def __init__(self, multiplex1: Multiplex, multiplex2: Multiplex,
                 bipartite: torch.Tensor, supra_bipartite: torch.Tensor):
        expected = (multiplex1.node_count * multiplex1.layer_count, multiplex2.node_count * multiplex2.layer_count)
        if tuple(bipartite.shape) != (multiplex1.node_count, multiplex2.node_count):
            raise SchemaViolation(f"The bipartite matrix has shape {tuple(bipartite.shape)}, "
                                  f"expected {(multiplex1.node_count, multiplex2.node_count)}")
        if tuple(supra_bipartite.shape) != expected:
            raise SchemaViolation(f"The supra-bipartite matrix has shape {tuple(supra_bipartite.shape)}, "
                                  f"expected {expected}")
        self._multiplex1 = multiplex1
        self._multiplex2 = multiplex2
        self._bipartite = bipartite
        self._supra_bipartite = supra_bipartite

    @classmethod
    def from_multiplexes(cls, multiplex1: Multiplex, multiplex2: Multiplex, relations: pd.DataFrame,
                         **kwargs) -> "MultiplexHet":
        """Join two multiplexes through their bipartite relations, see create_multiplex_het."""
        from rwrmh.core.network.build_multiplex_het import create_multiplex_het
        return create_multiplex_het(multiplex1, multiplex2, relations, **kwargs)

    @property
    def multiplex1(self) -> Multiplex:
        return self._multiplex1

    @property
    def multiplex2(self) -> Multiplex:
        return self._multiplex2

    @property
    def bipartite(self) -> torch.Tensor:
        """The (N1, N2) bipartite matrix before expansion."""
        return self._bipartite

    @property
    def supra_bipartite(self) -> torch.Tensor:
        """The (N1 * L1, N2 * L2) supra-bipartite matrix."""
        return self._supra_bipartite

    def __repr__(self) -> str:
        return (f"MultiplexHet(multiplex1={self._multiplex1!r}, multiplex2={self._multiplex2!r}, "
                f"supra_bipartite={tuple(self._supra_bipartite.shape)})")


def is_multiplex(obj: Any) -> bool:
    """True when obj is a Multiplex whose layers are aligned on its pool."""
    if not isinstance(obj, Multiplex):
        return False
    return (
        obj.layer_count >= 1
        and obj.node_count == len(obj.index)
        and all(tuple(layer.nodes) == obj.pool for layer in obj.layers.values())
    )


def is_multiplex_het(obj: Any) -> bool:
    """True when obj is a MultiplexHet made of two well formed multiplexes."""
    if not isinstance(obj, MultiplexHet):
        return False
    m1, m2 = obj.multiplex1, obj.multiplex2
    return (
        is_multiplex(m1)
        and is_multiplex(m2)
        and tuple(obj.supra_bipartite.shape) == (m1.node_count * m1.layer_count, m2.node_count * m2.layer_count)
    )
