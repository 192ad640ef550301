from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode, errors

from ..core.exceptions import DuplicateRecordError, StorageUnavailableError
from .connection import DatabaseConnection

# Table missing, or the server cannot be reached / went away mid-request.
_UNAVAILABLE_ERRNOS = frozenset(
    {
        errorcode.ER_NO_SUCH_TABLE,
        errorcode.ER_BAD_DB_ERROR,
        errorcode.CR_CONN_HOST_ERROR,
        errorcode.CR_UNKNOWN_HOST,
        errorcode.CR_SERVER_GONE_ERROR,
        errorcode.CR_SERVER_LOST,
    }
)


@contextmanager
def translate_errors():
    """Re-raise connector errors as the storage errors services understand."""
    try:
        yield
    except errors.IntegrityError as e:
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateRecordError(str(e)) from e
        raise
    except errors.InterfaceError as e:
        raise StorageUnavailableError(str(e)) from e
    except errors.Error as e:
        if e.errno in _UNAVAILABLE_ERRNOS:
            raise StorageUnavailableError(str(e)) from e
        raise


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on any error."""
    with translate_errors():
        conn = conn_factory.connect()
        try:
            cur = conn.cursor(dictionary=dictionary)
            try:
                yield conn, cur
                conn.commit()
            finally:
                cur.close()
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


def build_where(clauses: List[str]) -> str:
    return " AND ".join(["1=1", *clauses])
