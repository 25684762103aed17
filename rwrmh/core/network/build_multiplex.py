import time
import logging
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import Any, Dict, Mapping, Optional

import networkx as nx

from rwrmh.config import BuildConfig, DEFAULT_CONFIG
from rwrmh.core.network.objects import Multiplex
from rwrmh.utils.errors import InvalidInput, SchemaViolation
from rwrmh.utils.layer_utils import (
    add_missing_nodes,
    aggregate_pool,
    assign_node_names,
    check_is_graph,
    missing_pool_nodes,
    simplify_layer,
    tag_layer_edges,
)
from rwrmh.utils.rwr_logging import resolve_logger


def name_layers(layers: Any, config: BuildConfig = DEFAULT_CONFIG) -> Dict[str, nx.Graph]:
    """
    Turn the accepted layer inputs into an ordered {layer name: graph} dict.

    Accepted inputs are a single graph (monoplex), a list/tuple of graphs or a
    mapping from layer name to graph. Unnamed layers are called
    `<default_layer_prefix><k>` with k starting from 1.
    """
    if isinstance(layers, nx.Graph):
        layers = [layers]
    if isinstance(layers, Mapping):
        items = list(layers.items())
    elif isinstance(layers, (list, tuple)):
        items = [(None, layer) for layer in layers]
    else:
        raise InvalidInput(f"The input object should be a graph, a list of graphs or a mapping of graphs, "
                           f"but got {type(layers).__name__}")
    if not items:
        raise SchemaViolation("The input object should contain at least one graph")

    named_layers = {}
    for k, (name, layer) in enumerate(items, 1):
        name = f"{config.default_layer_prefix}{k}" if name is None or name == "" else str(name)
        check_is_graph(layer, what=f"layer ('{name}')")
        if name in named_layers:
            raise SchemaViolation(f"Layer names must be unique, '{name}' is repeated")
        named_layers[name] = layer
    return named_layers


def simplify_layers(named_layers: Dict[str, nx.Graph], config: BuildConfig = DEFAULT_CONFIG,
                    logger: Optional[logging.Logger] = None) -> Dict[str, nx.Graph]:
    """
    Simplify every layer, concurrently when the configuration allows it.

    Layers are independent so the completion order does not matter: results are
    put back in the input order by layer name. The first failing worker aborts
    the whole build.
    """
    n_jobs = config.resolve_n_jobs(len(named_layers))
    if n_jobs == 1:
        return {name: simplify_layer(layer) for name, layer in named_layers.items()}

    executor_cls = ProcessPoolExecutor if config.executor == "process" else ThreadPoolExecutor
    logger.debug(f"Simplifying {len(named_layers)} layers with {n_jobs} {config.executor} workers") if logger else None
    simplified = {}
    with executor_cls(max_workers=n_jobs) as executor:
        futures = {executor.submit(simplify_layer, layer): name for name, layer in named_layers.items()}
        for future in as_completed(futures):
            name = futures[future]
            simplified[name] = future.result()
            logger.debug(f"Layer {name} simplified: {simplified[name].number_of_edges()} edges") if logger else None
    return {name: simplified[name] for name in named_layers}


def create_multiplex(layers: Any,
                     config: Optional[BuildConfig] = None,
                     logger: Optional[logging.Logger] = None,
                     verbose: bool = False) -> Multiplex:
    """
    Create a multiplex network from individual networks.

    A multiplex network is a collection of layers sharing the same nodes, in
    which the edges represent relationships of different nature. A single graph
    gives a multiplex with one layer (a monoplex network) built the very same way.

    Args:
        - layers: a networkx graph, a list of graphs or a mapping {layer name: graph}.
          Naming the layers is recommended, unnamed ones are called Layer_1, Layer_2...
        - config: BuildConfig, DEFAULT_CONFIG if omitted
        - logger: Logger object, if provided verbose is activated
        - verbose: create a module logger when no logger is given
    Returns:
        - Multiplex: layers padded to the sorted pool of nodes, every edge tagged
          with the name of its layer
    Raises:
        - InvalidInput: the input is not a graph, list or mapping of graphs
        - SchemaViolation: empty input or repeated layer names
    """
    config = config or DEFAULT_CONFIG
    logger = resolve_logger(logger, verbose, "multiplex")
    start_building_time = time.time()

    named_layers = name_layers(layers, config)
    num_layers = len(named_layers)
    logger.info(f"Creating a multiplex network with {num_layers} layers: {list(named_layers)}") if logger else None

    named_layers = {
        name: assign_node_names(layer, config.name_attribute) for name, layer in named_layers.items()
    }

    simplify_start = time.time()
    simplified = simplify_layers(named_layers, config, logger)
    logger.info(f"Layers simplified in {time.time() - simplify_start:.2f} s") if logger else None

    pool = aggregate_pool(simplified.values())
    logger.info(f"Pool of nodes computed: {len(pool)} nodes") if logger else None

    aligned = {}
    for name, layer in simplified.items():
        logger.debug(f"Layer {name}: adding {len(missing_pool_nodes(layer, pool))} missing nodes") if logger else None
        aligned[name] = add_missing_nodes(layer, pool, config.name_attribute)

    layer_names = list(aligned)
    for k in range(num_layers):
        aligned[layer_names[k]] = tag_layer_edges(aligned[layer_names[k]], layer_names[k], config.layer_attribute)

    multiplex = Multiplex(aligned, pool, config)
    logger.info(f"Multiplex network created in {time.time() - start_building_time:.2f} s") if logger else None
    return multiplex
