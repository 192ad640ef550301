from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import TokenPurpose, UserType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository

_SELECT = """
    SELECT user_id, email, password_hash, user_type, is_active,
           password_token_purpose, password_token_expires
    FROM users
"""


def _to_user(row: dict) -> User:
    purpose = row.get("password_token_purpose")
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        user_type=UserType(row["user_type"]),
        is_active=bool(row.get("is_active", True)),
        token_purpose=TokenPurpose(purpose) if purpose else None,
        token_expires=row.get("password_token_expires"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_token_hash(self, token_hash: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE password_token_hash=%s", (token_hash,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def set_password_token(
        self,
        user_id: int,
        *,
        token_hash: str,
        purpose: TokenPurpose,
        expires_at: datetime,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET password_token_hash=%s, password_token_purpose=%s, password_token_expires=%s
                WHERE user_id=%s
                """,
                (token_hash, purpose.value, expires_at, int(user_id)),
            )

    def consume_password_token(
        self,
        *,
        token_hash: str,
        purpose: TokenPurpose,
        password_hash: str,
        now: datetime,
        activate: bool = False,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET password_hash=%s,
                    is_active=IF(%s, 1, is_active),
                    password_token_hash=NULL,
                    password_token_purpose=NULL,
                    password_token_expires=NULL
                WHERE password_token_hash=%s
                  AND password_token_purpose=%s
                  AND password_token_expires>%s
                """,
                (password_hash, bool(activate), token_hash, purpose.value, now),
            )
            return cur.rowcount > 0
