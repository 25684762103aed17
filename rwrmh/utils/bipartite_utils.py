import torch
import numpy as np
import pandas as pd
import logging
from typing import Iterable, Mapping, Optional, Sequence

from rwrmh.utils.errors import InvalidInput, SchemaViolation, ReferentialViolation
from rwrmh.utils.layer_utils import to_node_id

RELATION_COLUMNS = ["source", "target", "weight"]


def relations_from_records(records: Iterable) -> pd.DataFrame:
    """
    Build a relation table from a flat list of (source, target[, weight]) records.

    Args:
        records: iterable of RelationRecord or plain tuples

    Returns:
        pd.DataFrame with columns [source, target] or [source, target, weight];
        the weight column is kept when every record carries a weight.
    """
    rows = [tuple(record) for record in records]
    if any(len(row) not in (2, 3) for row in rows):
        raise SchemaViolation("Every relation record should contain two or three fields")
    sources = [row[0] for row in rows]
    targets = [row[1] for row in rows]
    weights = [row[2] if len(row) == 3 else None for row in rows]
    if all(weight is None for weight in weights):
        return pd.DataFrame({"source": sources, "target": targets})
    if any(weight is None for weight in weights):
        raise SchemaViolation("The relation records mix weighted and unweighted records, "
                              "either every record or none should carry a weight")
    return pd.DataFrame({"source": sources, "target": targets, "weight": weights})


def normalize_bipartite_weights(relations: pd.DataFrame, logger: logging.Logger | None = None) -> pd.DataFrame:
    """
    Rescale (or default) the weights of the bipartite relations.

    - no weight column: every relation weighs 1
    - constant weights: every relation weighs 1, the column carries no information
    - otherwise weights are mapped linearly onto [min/max, 1]:
        w' = (1 - a) * (w - min) / (max - min) + a,  a = min / max
      so that the weakest relation keeps a non-zero influence.

    Args:
        relations: DataFrame whose first two columns are the node names of the
            first and second network, and optional third column the raw weights

    Returns:
        pd.DataFrame with columns [source, target, weight]; node names as str.
    """
    normalized = pd.DataFrame({
        "source": relations.iloc[:, 0].map(to_node_id).to_numpy(dtype=object),
        "target": relations.iloc[:, 1].map(to_node_id).to_numpy(dtype=object),
    })
    if relations.shape[1] < 3:
        normalized["weight"] = np.ones(len(normalized), dtype=np.float64)
        return normalized

    try:
        weights = pd.to_numeric(relations.iloc[:, 2], errors="raise").to_numpy(dtype=np.float64)
    except (ValueError, TypeError) as e:
        raise InvalidInput("The third column of the relations should contain numeric weights") from e
    if np.isnan(weights).any():
        raise SchemaViolation("The third column of the relations contains missing weights")

    w_min, w_max = weights.min(), weights.max()
    if w_min == w_max:
        logger.debug(f"All the bipartite weights are equal to {w_min}, treating the relations as unweighted") if logger else None
        normalized["weight"] = np.ones(len(normalized), dtype=np.float64)
    else:
        if w_max == 0:
            raise SchemaViolation("The largest bipartite weight is 0, the weights cannot be rescaled by min/max")
        a = w_min / w_max
        normalized["weight"] = (1 - a) * (weights - w_min) / (w_max - w_min) + a
    return normalized


def check_relations_in_pools(relations: pd.DataFrame, pool_1: Sequence[str], pool_2: Sequence[str]) -> None:
    """
    Check that every node of the first (second) column belongs to pool_1 (pool_2).

    Raises:
        ReferentialViolation: naming the network and the nodes that are missing
    """
    names_1 = set(relations.iloc[:, 0].map(to_node_id))
    names_2 = set(relations.iloc[:, 1].map(to_node_id))
    missing_1 = names_1.difference(pool_1)
    if missing_1:
        raise ReferentialViolation(
            f"Some of the nodes in the first column of the relations are not present on the first "
            f"multiplex network: {sorted(missing_1)}",
            missing=missing_1,
        )
    missing_2 = names_2.difference(pool_2)
    if missing_2:
        raise ReferentialViolation(
            f"Some of the nodes in the second column of the relations are not present on the second "
            f"multiplex network: {sorted(missing_2)}",
            missing=missing_2,
        )


def get_bipartite_matrix(pool_1: Sequence[str], pool_2: Sequence[str], relations: pd.DataFrame,
                         index_1: Optional[Mapping[str, int]] = None,
                         index_2: Optional[Mapping[str, int]] = None,
                         dtype: torch.dtype = torch.float64) -> torch.Tensor:
    """
    Map the bipartite relations onto a sparse (N1, N2) matrix.

    Row i is pool_1[i], column j is pool_2[j]. When the same pair is listed more
    than once the last listed weight is kept, weights never accumulate.

    Args:
        pool_1: sorted node pool of the first multiplex
        pool_2: sorted node pool of the second multiplex
        relations: normalized relations with columns [source, target, weight]
        index_1, index_2: name -> position tables of the pools, computed if omitted
        dtype: dtype of the matrix values

    Returns:
        torch.Tensor: coalesced sparse COO tensor of shape (len(pool_1), len(pool_2))
    """
    check_relations_in_pools(relations, pool_1, pool_2)
    if index_1 is None:
        index_1 = {node: i for i, node in enumerate(pool_1)}
    if index_2 is None:
        index_2 = {node: j for j, node in enumerate(pool_2)}

    # Last write wins
    deduplicated = relations.drop_duplicates(subset=["source", "target"], keep="last")
    rows = torch.as_tensor([index_1[to_node_id(name)] for name in deduplicated["source"]], dtype=torch.long)
    cols = torch.as_tensor([index_2[to_node_id(name)] for name in deduplicated["target"]], dtype=torch.long)
    values = torch.as_tensor(deduplicated["weight"].to_numpy(dtype=np.float64), dtype=dtype)

    bipartite = torch.sparse_coo_tensor(
        indices=torch.stack([rows, cols]),
        values=values,
        size=(len(pool_1), len(pool_2)),
        dtype=dtype
    )
    return bipartite.coalesce()
