"""
rwrmh - Multiplex and Multiplex-Heterogeneous networks for Random Walk with Restart
"""

from rwrmh.config import BuildConfig, DEFAULT_CONFIG
from rwrmh.core.network.objects import (
    Multiplex,
    MultiplexHet,
    RelationRecord,
    is_multiplex,
    is_multiplex_het,
)
from rwrmh.core.network.build_multiplex import create_multiplex
from rwrmh.core.network.build_multiplex_het import create_multiplex_het
from rwrmh.utils.bipartite_utils import relations_from_records
from rwrmh.utils.errors import (
    MultiplexBuildError,
    InvalidInput,
    SchemaViolation,
    ReferentialViolation,
)

__version__ = "0.1.0"
__all__ = [
    "BuildConfig",
    "DEFAULT_CONFIG",
    "Multiplex",
    "MultiplexHet",
    "RelationRecord",
    "is_multiplex",
    "is_multiplex_het",
    "create_multiplex",
    "create_multiplex_het",
    "relations_from_records",
    "MultiplexBuildError",
    "InvalidInput",
    "SchemaViolation",
    "ReferentialViolation",
]
