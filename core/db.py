"""
core/db.py -- SQLAlchemy engine construction and error translation.

Both repositories (auth/store.py, inventory/store.py) build their engines here
so SQLite-specific connection handling lives in one place. guarded() wraps a
connection so that driver errors surface as domain errors from core.errors
instead of leaking sqlalchemy exception types to callers.

No retries anywhere: a failed store call is reported to the caller at once.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.errors import StoreFailure, ValidationError

logger = logging.getLogger("stockroom.db")

# Largest value an INTEGER column can hold (signed 64-bit).
MAX_INTEGER = 2**63 - 1


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def _register_casefold(dbapi_conn, connection_record) -> None:
    """Expose str.casefold to SQL as casefold(x).

    SQLite's built-in lower() only folds ASCII letters.
    """
    dbapi_conn.create_function("casefold", 1, _casefold, deterministic=True)


def make_engine(db_url: str) -> Engine:
    """Create an Engine for db_url with SQLite thread, WAL and casefold handling applied."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        # FastAPI runs sync handlers in a thread pool, so a pooled SQLite
        # connection may be used from a thread other than its creator.
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
        event.listen(engine, "connect", _register_casefold)
    return engine


@contextmanager
def guarded(engine: Engine) -> Iterator[Connection]:
    """Yield a connection; translate sqlalchemy failures into domain errors.

    IntegrityError means a schema constraint rejected the write (negative
    quantity, duplicate key) and becomes ValidationError. Callers that need a
    more specific mapping catch IntegrityError inside the with-block first.
    Every other SQLAlchemyError becomes StoreFailure.
    """
    try:
        with engine.connect() as conn:
            yield conn
    except IntegrityError as exc:
        raise ValidationError("Record violates a data constraint.") from exc
    except SQLAlchemyError as exc:
        logger.error("Store call failed: %s", exc.__class__.__name__)
        raise StoreFailure() from exc
