import time
import logging
from typing import Any, Optional

import pandas as pd

from rwrmh.config import BuildConfig
from rwrmh.core.network.objects import Multiplex, MultiplexHet, is_multiplex
from rwrmh.utils.bipartite_utils import (
    check_relations_in_pools,
    get_bipartite_matrix,
    normalize_bipartite_weights,
    relations_from_records,
)
from rwrmh.utils.errors import InvalidInput, SchemaViolation
from rwrmh.utils.rwr_logging import describe_sparse, resolve_logger
from rwrmh.utils.sparse_utils import expand_bipartite_matrix


def check_relations(relations: Any, multiplex1: Multiplex, multiplex2: Multiplex) -> None:
    """
    Validate the bipartite relations table against the two multiplexes.

    Raises:
        InvalidInput: relations is not a DataFrame
        SchemaViolation: it does not have 2 or 3 columns, or it has no rows
        ReferentialViolation: a node is missing from the pool of its multiplex
    """
    if not isinstance(relations, pd.DataFrame):
        raise InvalidInput(f"Third element should be a pandas DataFrame, but got {type(relations).__name__}")
    if relations.shape[1] not in (2, 3):
        raise SchemaViolation(f"The relations should contain two or three columns, but got {relations.shape[1]}")
    if relations.shape[0] == 0:
        raise SchemaViolation("The relations should contain at least one bipartite interaction")
    check_relations_in_pools(relations, multiplex1.pool, multiplex2.pool)


def create_multiplex_het(multiplex1: Multiplex,
                         multiplex2: Multiplex,
                         relations: pd.DataFrame,
                         config: Optional[BuildConfig] = None,
                         logger: Optional[logging.Logger] = None,
                         verbose: bool = False) -> MultiplexHet:
    """
    Create a multiplex-heterogeneous network from two multiplex networks.

    The nodes of the two multiplexes are of different nature and are linked by
    bipartite relations. The relations are normalized, mapped onto a bipartite
    matrix indexed by the two pools and expanded so that every layer of the
    first multiplex is related to every layer of the second one.

    Args:
        - multiplex1: first Multiplex, rows of the bipartite matrix
        - multiplex2: second Multiplex, columns of the bipartite matrix
        - relations: DataFrame with two or three columns: nodes of the first
          multiplex, nodes of the second multiplex and optional weights;
          a list or tuple of RelationRecord is accepted as well
        - config: BuildConfig giving the matrix dtype, the one of multiplex1 if omitted
        - logger: Logger object, if provided verbose is activated
        - verbose: create a module logger when no logger is given
    Returns:
        - MultiplexHet: the two multiplexes and their (N1 * L1, N2 * L2) supra-bipartite matrix
    """
    logger = resolve_logger(logger, verbose, "multiplexhet")
    start_building_time = time.time()

    logger.info("Checking input arguments...") if logger else None
    if not is_multiplex(multiplex1):
        raise InvalidInput("First element should be a Multiplex object")
    if not is_multiplex(multiplex2):
        raise InvalidInput("Second element should be a Multiplex object")
    if config is None:
        config = multiplex1.config
    if isinstance(relations, (list, tuple)):
        relations = relations_from_records(relations)
    check_relations(relations, multiplex1, multiplex2)

    normalized = normalize_bipartite_weights(relations, logger=logger)

    logger.info("Generating bipartite matrix...") if logger else None
    bipartite = get_bipartite_matrix(
        multiplex1.pool, multiplex2.pool, normalized,
        index_1=multiplex1.index, index_2=multiplex2.index,
        dtype=config.dtype
    )
    logger.debug(describe_sparse("Bipartite matrix", bipartite)) if logger else None

    logger.info("Expanding bipartite matrix to fit the multiplex networks...") if logger else None
    supra_bipartite = expand_bipartite_matrix(
        multiplex1.node_count, multiplex1.layer_count,
        multiplex2.node_count, multiplex2.layer_count,
        bipartite
    )
    logger.info(describe_sparse("Supra-bipartite matrix", supra_bipartite)) if logger else None

    multiplex_het = MultiplexHet(multiplex1, multiplex2, bipartite, supra_bipartite)
    logger.info(f"Multiplex-heterogeneous network created in {time.time() - start_building_time:.2f} s") if logger else None
    return multiplex_het
