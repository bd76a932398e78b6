"""Infrastructure - Database and logging."""

from datastore_showcase.infra.database import Database
from datastore_showcase.infra.logging import get_logger, setup_logging

__all__ = [
    "Database",
    "get_logger",
    "setup_logging",
]
