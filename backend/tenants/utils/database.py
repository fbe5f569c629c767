"""
Database utilities used before resolving a tenant.

Provides the store-reachability probe and the registry table-existence check
on top of the host application's SQLAlchemy engine.
"""

from typing import Callable
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
import logging

logger = logging.getLogger(__name__)


class RegistryInspector:
    """
    Checks the state of the database holding the tenant registry.

    The engine is looked up lazily on every call so the inspector can be built
    at ``init_app`` time, before any application context exists.
    """

    def __init__(self, engine_getter: Callable[[], Engine]):
        """
        Args:
            engine_getter: Zero-argument callable returning the SQLAlchemy engine
        """
        self._engine_getter = engine_getter

    @classmethod
    def from_flask_sqlalchemy(cls, db) -> 'RegistryInspector':
        """
        Build an inspector bound to a Flask-SQLAlchemy instance.

        Args:
            db: The host's ``flask_sqlalchemy.SQLAlchemy`` instance

        Returns:
            RegistryInspector using ``db.engine`` of the current app
        """
        return cls(lambda: db.engine)

    @property
    def engine(self) -> Engine:
        return self._engine_getter()

    def ping(self) -> None:
        """
        Open a connection and run a trivial query.

        Raises:
            Exception: Whatever the driver raises when the database is unreachable
        """
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def has_table(self, table_name: str) -> bool:
        """
        Check whether a table exists in the default schema.

        Args:
            table_name: Name of the table

        Returns:
            True if the table exists, False otherwise
        """
        exists = inspect(self.engine).has_table(table_name)
        logger.debug(f"Table {table_name} exists: {exists}")
        return exists
