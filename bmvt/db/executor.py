"""
Query Executor.

Runs parameterized SQL written with positional ``?`` placeholders against
the session's connection and returns rows plus metadata in one shape,
whatever the backend. Backend differences (how the generated identity of
an INSERT is obtained, row-lock syntax) are resolved once per executor from
the dialect name.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bmvt.core.errors import DatabaseError, UniqueViolationError
from bmvt.db.session import get_db

logger = logging.getLogger("bmvt.db")

# Follow-up query returning the identity generated by the last INSERT
IDENTITY_QUERIES = {
    "sqlite": "SELECT last_insert_rowid()",
    "mysql": "SELECT LAST_INSERT_ID()",
    "mariadb": "SELECT LAST_INSERT_ID()",
    "postgresql": "SELECT lastval()",
}

ROW_LOCK_DIALECTS = {"mysql", "mariadb", "postgresql"}


@dataclass
class QueryResult:
    """Rows and metadata of one executed statement."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    rows_affected: int | None = None
    insert_id: int | None = None

    def first(self) -> dict[str, Any] | None:
        return self.rows[0] if self.rows else None

    def scalar(self) -> Any:
        row = self.first()
        if row is None:
            return None
        return next(iter(row.values()), None)


def to_named_placeholders(sql: str, args: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """
    Rewrite ``?`` placeholders as ``:p0, :p1 ...`` bind parameters.

    Question marks inside quoted literals are left alone and literal colons
    are escaped so ``text()`` does not read them as binds.

    Raises:
        DatabaseError: when the placeholder count and argument count differ
    """
    out: list[str] = []
    params: dict[str, Any] = {}
    quote: str | None = None
    index = 0

    for ch in sql:
        if quote:
            if ch == quote:
                quote = None
            out.append("\\:" if ch == ":" else ch)
            continue
        if ch in ("'", '"', "`"):
            quote = ch
            out.append(ch)
        elif ch == "?":
            if index >= len(args):
                raise DatabaseError(f"Paramètre manquant pour le placeholder {index + 1}")
            name = f"p{index}"
            params[name] = args[index]
            out.append(f":{name}")
            index += 1
        elif ch == ":":
            out.append("\\:")
        else:
            out.append(ch)

    if index != len(args):
        raise DatabaseError(f"{len(args)} paramètres fournis pour {index} placeholders")

    return "".join(out), params


class QueryExecutor:
    """
    Execute ``?``-parameterized SQL on a SQLAlchemy session.

    The executor does not retry and does not commit on its own: callers
    that write call ``commit()`` or use ``transaction()``.
    """

    def __init__(self, session: Session):
        self.session = session
        self.dialect = session.get_bind().dialect.name
        self._identity_sql = IDENTITY_QUERIES.get(self.dialect)

    @property
    def lock_clause(self) -> str:
        """Row-lock suffix for SELECTs, empty where unsupported."""
        return " FOR UPDATE" if self.dialect in ROW_LOCK_DIALECTS else ""

    def execute(self, sql: str, args: Sequence[Any] | None = None) -> QueryResult:
        """
        Run one statement.

        Raises:
            UniqueViolationError: integrity constraint rejected the statement
            DatabaseError: any other driver failure
        """
        statement, params = to_named_placeholders(sql, list(args or []))
        is_insert = sql.lstrip().upper().startswith("INSERT")

        try:
            result = self.session.execute(text(statement), params)
            rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
            insert_id = self._insert_id(result, rows) if is_insert else None
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Integrity violation: {e.orig}")
            raise UniqueViolationError(str(e.orig)) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Query failed: {e}")
            raise DatabaseError(str(getattr(e, "orig", None) or e)) from e

        rows_affected = None if result.returns_rows else result.rowcount
        return QueryResult(rows=rows, rows_affected=rows_affected, insert_id=insert_id)

    def fetch_all(self, sql: str, args: Sequence[Any] | None = None) -> list[dict[str, Any]]:
        return self.execute(sql, args).rows

    def fetch_one(self, sql: str, args: Sequence[Any] | None = None) -> dict[str, Any] | None:
        return self.execute(sql, args).first()

    def _insert_id(self, result, rows: list[dict[str, Any]]) -> int | None:
        if rows and "id" in rows[0]:
            return rows[0]["id"]

        lastrowid = getattr(result, "lastrowid", None)
        if lastrowid:
            return lastrowid

        if self._identity_sql is None:
            return None
        return self.session.execute(text(self._identity_sql)).scalar()

    def commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise UniqueViolationError(str(e.orig)) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DatabaseError(str(e)) from e

    def rollback(self) -> None:
        self.session.rollback()

    @contextmanager
    def transaction(self) -> Iterator["QueryExecutor"]:
        """Commit the statements run inside the block, roll back on error."""
        try:
            yield self
        except Exception:
            self.session.rollback()
            raise
        self.commit()


def get_executor(db: Session = Depends(get_db)) -> QueryExecutor:
    """Dependency providing a Query Executor bound to the request session."""
    return QueryExecutor(db)
