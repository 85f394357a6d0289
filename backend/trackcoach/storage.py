# backend/trackcoach/storage.py

"""
Atomic write primitives the services depend on.

Two guarantees come from the database rather than from application locks:

* ``compare_and_set`` - a single conditional UPDATE whose WHERE clause
  carries the expected current state. Used for single-use tokens such as
  parent invites.
* ``upsert`` - INSERT ... ON CONFLICT DO UPDATE on a unique key. Used for
  attendance, which is one row per (student, date).
"""
import logging
from typing import Any, Dict, Iterable, Type

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def compare_and_set(
    db: Session,
    model: Type[Any],
    ident: Any,
    expected: Dict[str, Any],
    values: Dict[str, Any],
) -> bool:
    """Update the row ``ident`` only while every ``expected`` column still matches.

    Returns True when exactly this call changed the row. A False return means
    another writer moved the row out of the expected state first. The caller
    owns the transaction.
    """
    query = db.query(model).filter(model.id == ident)
    for column, value in expected.items():
        query = query.filter(getattr(model, column) == value)
    affected = query.update(values, synchronize_session=False)
    if affected > 1:
        raise RuntimeError(f"compare_and_set matched {affected} rows of {model.__tablename__}")
    return affected == 1


def upsert(
    db: Session,
    model: Type[Any],
    values: Dict[str, Any],
    conflict_columns: Iterable[str],
    update_columns: Iterable[str],
) -> None:
    """Insert ``values`` or, when the unique key already exists, overwrite ``update_columns``."""
    dialect = db.get_bind().dialect.name
    try:
        insert = _DIALECT_INSERTS[dialect]
    except KeyError:
        raise RuntimeError(f"upsert is not supported on the {dialect} dialect")

    stmt = insert(model.__table__).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={column: stmt.excluded[column] for column in update_columns},
    )
    db.execute(stmt)
