"""
db/exceptions.py
----------------
Errors raised by this project. Driver errors (psycopg2.Error) are not
wrapped; they propagate to the caller after rollback and logging.
"""


class PgRowMapError(Exception):
    """Base class for all project-specific errors."""


class PoolNotInitializedError(PgRowMapError, RuntimeError):
    """Raised when a connection is requested before init_pool()."""


class InvalidFunctionNameError(PgRowMapError, ValueError):
    """Raised when a stored function name is not a plain (schema.)identifier."""


class ResultShapeError(PgRowMapError):
    """Raised when a result row does not fit the requested mapping mode."""
