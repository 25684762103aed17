"""
Configuration settings for the multiplex network builders.

This module centralizes the knobs shared by create_multiplex and
create_multiplex_het: worker pool, attribute names and matrix dtype.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

import torch

EXECUTORS = ("thread", "process", "sequential")


@dataclass(frozen=True)
class BuildConfig:
    """Settings used while aligning layers and building the bipartite matrices."""
    # Worker pool for the per-layer simplification
    n_jobs: Optional[int] = None
    executor: str = "thread"

    # Attribute names
    name_attribute: str = "name"
    layer_attribute: str = "layer"
    weight_attribute: str = "weight"
    default_layer_prefix: str = "Layer_"

    # Matrices
    dtype: torch.dtype = torch.float64

    def __post_init__(self):
        if self.executor not in EXECUTORS:
            raise ValueError(f"Unknown executor: {self.executor}. Supported executors are {EXECUTORS}.")
        if self.n_jobs is not None and self.n_jobs < 1:
            raise ValueError(f"n_jobs must be a positive integer, but got {self.n_jobs}")

    def resolve_n_jobs(self, num_layers: int) -> int:
        """Number of workers to use for `num_layers` independent layers."""
        if self.executor == "sequential":
            return 1
        if self.n_jobs is not None:
            return max(1, min(self.n_jobs, num_layers))
        return max(1, min(num_layers, os.cpu_count() or 1))

    def with_options(self, **kwargs) -> "BuildConfig":
        return replace(self, **kwargs)


DEFAULT_CONFIG = BuildConfig()
