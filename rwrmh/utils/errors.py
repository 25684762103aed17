"""
Exceptions raised while building Multiplex and MultiplexHet networks.

Every error is detected before any matrix is built and is fatal for the
current build call.
"""


class MultiplexBuildError(Exception):
    """Base class for all the construction errors of this package."""


class InvalidInput(MultiplexBuildError, TypeError):
    """An argument has the wrong type (non-graph, non-DataFrame, non-Multiplex...)."""


class SchemaViolation(MultiplexBuildError, ValueError):
    """An argument has the right type but the wrong shape (columns, rows, names)."""


class ReferentialViolation(MultiplexBuildError, ValueError):
    """A node name is not present in the pool of the multiplex it should belong to."""

    def __init__(self, message: str, missing=None):
        super().__init__(message)
        self.missing = sorted(missing) if missing is not None else []
