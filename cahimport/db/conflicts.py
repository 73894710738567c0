"""
Insert error classification.

Each store reports a duplicate primary key with its own native code. The
load coordinator only ever sees InsertOutcome, never the store-specific
exception shapes.
"""

import re
from collections.abc import Callable
from enum import Enum
from functools import partial

from sqlalchemy.exc import DBAPIError, IntegrityError

from cahimport.config import DbType


class InsertOutcome(Enum):
    """How a failed insert should be handled."""

    CONFLICT = "conflict"
    FATAL = "fatal"


# sqlite3 extended result codes
SQLITE_CONSTRAINT_PRIMARYKEY = 1555
SQLITE_CONSTRAINT_UNIQUE = 2067

# SQLSTATE unique_violation
PG_UNIQUE_VIOLATION = "23505"

# Violation of PRIMARY KEY constraint / duplicate key in unique index
MSSQL_DUPLICATE_KEY_PATTERN = re.compile(r"\((2627|2601)\)")

InsertErrorClassifier = Callable[[DBAPIError], InsertOutcome]


def _is_sqlite_conflict(orig: BaseException) -> bool:
    code = getattr(orig, "sqlite_errorcode", None)
    if code is not None:
        return code in (SQLITE_CONSTRAINT_PRIMARYKEY, SQLITE_CONSTRAINT_UNIQUE)
    return "UNIQUE constraint failed" in str(orig)


def _is_postgres_conflict(orig: BaseException) -> bool:
    # asyncpg errors arrive wrapped by the SQLAlchemy adapter; the native
    # exception is kept as the cause.
    for candidate in (orig, orig.__cause__):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code == PG_UNIQUE_VIOLATION:
            return True
    return False


def _is_mssql_conflict(orig: BaseException) -> bool:
    return any(MSSQL_DUPLICATE_KEY_PATTERN.search(str(arg)) for arg in getattr(orig, "args", ()))


_CONFLICT_CHECKS: dict[DbType, Callable[[BaseException], bool]] = {
    DbType.SQLITE: _is_sqlite_conflict,
    DbType.POSTGRESQL: _is_postgres_conflict,
    DbType.SQLSERVER: _is_mssql_conflict,
}


def classify_insert_error(exc: DBAPIError, db_type: DbType) -> InsertOutcome:
    """
    Decide whether a failed insert is a duplicate-key conflict.

    Args:
        exc: Error raised by SQLAlchemy for the insert
        db_type: Store the error came from

    Returns:
        CONFLICT for primary-key/uniqueness violations, FATAL for anything
        else (connectivity, foreign keys, bad values).
    """
    if not isinstance(exc, IntegrityError) or exc.orig is None:
        return InsertOutcome.FATAL

    if _CONFLICT_CHECKS[db_type](exc.orig):
        return InsertOutcome.CONFLICT
    return InsertOutcome.FATAL


def classifier_for(db_type: DbType) -> InsertErrorClassifier:
    """Bind classify_insert_error to one store."""
    return partial(classify_insert_error, db_type=db_type)
