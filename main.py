import networkx as nx
import pandas as pd

import rwrmh
from rwrmh.utils.rwr_logging import get_main_logger

VERBOSE = False


def main():
    logger = get_main_logger(verbose=VERBOSE)

    # Multiplex of two layers sharing nodes 1..4
    m1 = nx.Graph([(1, 2), (1, 3), (2, 3)])
    m2 = nx.Graph([(1, 3), (2, 3), (3, 4), (1, 4)])
    multiplex_1 = rwrmh.create_multiplex({"m1": m1, "m2": m2}, logger=logger)
    logger.info(f"{multiplex_1!r} with pool {list(multiplex_1.pool)}")

    # Monoplex over nodes of a different nature
    h1 = nx.Graph([("A", "C"), ("B", "E"), ("E", "D"), ("E", "C")])
    multiplex_2 = rwrmh.create_multiplex({"h1": h1}, logger=logger)

    bipartite_relations = pd.DataFrame({"m": [1, 3], "h": ["A", "E"]})
    multiplex_het = rwrmh.create_multiplex_het(multiplex_1, multiplex_2, bipartite_relations, logger=logger)
    logger.info(f"{multiplex_het!r}")
    logger.info(f"\n{multiplex_het.supra_bipartite.to_dense()}")


if __name__ == "__main__":
    main()
