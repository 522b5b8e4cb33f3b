"""
Generic one-statement runners.

Each call opens its own connection, runs exactly one statement with bound
parameters and closes the connection again, including when the statement fails.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from .db import get_conn
from .errors import ConstraintViolation, QueryError, StatementError

logger = logging.getLogger(__name__)

Params = Union[Sequence[Any], Mapping[str, Any]]


@dataclass(frozen=True)
class ExecutionResult:
    rowcount: int
    lastrowid: int | None


def run_query(sql: str, params: Params = (), db_path: str | None = None) -> list[dict[str, Any]]:
    with get_conn(db_path) as conn:
        try:
            rows = conn.execute(sql, params).fetchall()
        except (sqlite3.Error, sqlite3.Warning) as e:
            logger.error("Query failed: %s | sql=%s", e, sql.strip())
            raise QueryError(str(e), sql) from e
    return [dict(r) for r in rows]


def run_statement(sql: str, params: Params = (), db_path: str | None = None) -> ExecutionResult:
    with get_conn(db_path) as conn:
        try:
            cur = conn.execute(sql, params)
            conn.commit()
        except sqlite3.IntegrityError as e:
            logger.error("Constraint violation: %s | sql=%s", e, sql.strip())
            raise ConstraintViolation(str(e), sql) from e
        except (sqlite3.Error, sqlite3.Warning) as e:
            logger.error("Statement failed: %s | sql=%s", e, sql.strip())
            raise StatementError(str(e), sql) from e
        return ExecutionResult(rowcount=cur.rowcount, lastrowid=cur.lastrowid)
