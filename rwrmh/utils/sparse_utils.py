import torch
from typing import Sequence

from rwrmh.utils.errors import InvalidInput


def _check_positive(**counts: int) -> None:
    for name, value in counts.items():
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise InvalidInput(f"{name} must be a positive integer, but got {value!r}")


def expand_bipartite_matrix(n1: int, l1: int, n2: int, l2: int, bipartite: torch.Tensor) -> torch.Tensor:
    """
    Expand a bipartite matrix to the supra-bipartite matrix of two multiplexes.
    (N1 x N2) -> (N1 * L1 x N2 * L2)

    Block (i, j), i.e. rows [i*N1, (i+1)*N1) and columns [j*N2, (j+1)*N2), relates
    layer i of the first multiplex with layer j of the second one and is a verbatim
    copy of the bipartite matrix. This is kron(ones(L1, L2), B), computed on the
    COO indices so that no dense (N1*L1, N2*L2) matrix is ever allocated.

    Args:
        n1 (int): Number of nodes of the first multiplex.
        l1 (int): Number of layers of the first multiplex.
        n2 (int): Number of nodes of the second multiplex.
        l2 (int): Number of layers of the second multiplex.
        bipartite (torch.Tensor): Sparse (or dense) matrix of shape (N1, N2).

    Returns:
        torch.Tensor: Coalesced sparse COO tensor of shape (N1 * L1, N2 * L2) with
        nnz(bipartite) * L1 * L2 stored elements.
    """
    _check_positive(n1=n1, l1=l1, n2=n2, l2=l2)
    if not isinstance(bipartite, torch.Tensor):
        raise InvalidInput(f"The bipartite matrix must be a torch.Tensor, but got {type(bipartite).__name__}")
    if bipartite.dim() != 2 or tuple(bipartite.shape) != (n1, n2):
        raise InvalidInput(f"The bipartite matrix must be of shape ({n1}, {n2}), but got {tuple(bipartite.shape)}")
    if not bipartite.is_sparse:
        bipartite = bipartite.to_sparse()

    bipartite = bipartite.coalesce()
    indices = bipartite.indices()
    values = bipartite.values()
    nnz = values.shape[0]

    row_offsets = torch.arange(l1, dtype=torch.long) * n1
    col_offsets = torch.arange(l2, dtype=torch.long) * n2
    # Shape [L1, L2, nnz] flattened block by block
    rows = (indices[0].reshape(1, 1, nnz) + row_offsets.view(l1, 1, 1)).expand(l1, l2, nnz).reshape(-1)
    cols = (indices[1].reshape(1, 1, nnz) + col_offsets.view(1, l2, 1)).expand(l1, l2, nnz).reshape(-1)
    supra_values = values.repeat(l1 * l2)

    supra = torch.sparse_coo_tensor(
        indices=torch.stack([rows, cols]),
        values=supra_values,
        size=(n1 * l1, n2 * l2),
        dtype=bipartite.dtype
    )
    return supra.coalesce()


def get_block(supra: torch.Tensor, i: int, j: int, n1: int, n2: int) -> torch.Tensor:
    """
    Extract block (i, j) of a sparse block-structured matrix.

    Args:
        supra (torch.Tensor): Sparse matrix whose row blocks have size n1 and column blocks size n2.
        i (int): Row block index.
        j (int): Column block index.

    Returns:
        torch.Tensor: Coalesced sparse tensor of shape (n1, n2).
    """
    supra = supra.coalesce()
    if (i + 1) * n1 > supra.shape[0] or (j + 1) * n2 > supra.shape[1] or i < 0 or j < 0:
        raise IndexError(f"Block ({i}, {j}) is out of range for a matrix of shape {tuple(supra.shape)}")
    indices = supra.indices()
    values = supra.values()
    mask = (indices[0] // n1 == i) & (indices[1] // n2 == j)
    block = torch.sparse_coo_tensor(
        indices=torch.stack([indices[0, mask] - i * n1, indices[1, mask] - j * n2]),
        values=values[mask],
        size=(n1, n2),
        dtype=supra.dtype
    )
    return block.coalesce()


def build_adjacency_matrix(rows: Sequence[int], cols: Sequence[int], values: Sequence[float], n: int,
                           directed: bool, dtype: torch.dtype = torch.float64) -> torch.Tensor:
    """
    Build the sparse (N, N) adjacency matrix of a layer from pool offsets.

    Undirected layers are symmetrized, each edge is stored at (u, v) and (v, u).
    """
    rows = torch.as_tensor(rows, dtype=torch.long)
    cols = torch.as_tensor(cols, dtype=torch.long)
    values = torch.as_tensor(values, dtype=dtype)
    if not directed:
        rows, cols = torch.cat([rows, cols]), torch.cat([cols, rows])
        values = torch.cat([values, values])
    matrix = torch.sparse_coo_tensor(
        indices=torch.stack([rows, cols]),
        values=values,
        size=(n, n),
        dtype=dtype
    )
    return matrix.coalesce()
