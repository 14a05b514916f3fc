from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateKeyError, ReferencedRecordError, StoreError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` and commit on success.

    Driver errors are re-raised as ``StoreError`` so services never see
    mysql-connector types. Duplicate-key violations become ``DuplicateKeyError``
    and deletes blocked by a foreign key become ``ReferencedRecordError``.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Database connection failed: %s", exc)
        raise StoreError("Database unavailable", errno=getattr(exc, "errno", None)) from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        conn.rollback()
        if getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY:
            raise DuplicateKeyError(str(exc.msg), errno=exc.errno) from exc
        if getattr(exc, "errno", None) == errorcode.ER_ROW_IS_REFERENCED_2:
            raise ReferencedRecordError(str(exc.msg), errno=exc.errno) from exc
        raise StoreError(str(exc.msg), errno=exc.errno) from exc
    except mysql.connector.Error as exc:
        conn.rollback()
        logger.error("Database error: %s", exc)
        raise StoreError(str(getattr(exc, "msg", exc)), errno=getattr(exc, "errno", None)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def build_where(clauses: list[str]) -> str:
    return " AND ".join(clauses) if clauses else "1=1"
