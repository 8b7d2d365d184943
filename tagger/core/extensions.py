"""Create all standard extensions."""
import sqlite3
from typing import Any

import sqlalchemy as sa
import sqlalchemy.event
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.engine import Connection, Engine

__all__ = ("db", "setup_sqlite")

db = SQLAlchemy()


#
# Make Sqlite a bit more well-behaved.
#
@sa.event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
    if isinstance(dbapi_connection, sqlite3.Connection):  # pragma: no cover
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()


def _sqlite_disable_implicit_transactions(
    dbapi_connection: Any, connection_record: Any
) -> None:
    # pysqlite's own BEGIN/COMMIT handling breaks savepoints (a COMMIT kills
    # all savepoints made). BEGIN is emitted by `_sqlite_begin` instead.
    dbapi_connection.isolation_level = None


def _sqlite_begin(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN")


def setup_sqlite(engine: Engine) -> None:
    """Make savepoints work on `engine` if it is a SQLite engine.

    Only applied to the engines of our `db`: other SQLite engines of the
    process keep pysqlite's default behaviour.
    """
    if engine.dialect.name != "sqlite":
        return

    if not sa.event.contains(engine, "connect", _sqlite_disable_implicit_transactions):
        sa.event.listen(engine, "connect", _sqlite_disable_implicit_transactions)
    if not sa.event.contains(engine, "begin", _sqlite_begin):
        sa.event.listen(engine, "begin", _sqlite_begin)
