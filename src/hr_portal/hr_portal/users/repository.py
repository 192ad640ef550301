from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import TokenPurpose
from .model import User


class UserRepository(Protocol):
    """Repository interface for login credentials.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_token_hash(self, token_hash: str) -> Optional[User]:
        raise NotImplementedError

    def set_password_token(
        self,
        user_id: int,
        *,
        token_hash: str,
        purpose: TokenPurpose,
        expires_at: datetime,
    ) -> None:
        """Store a new one-time link for the user, replacing any earlier one."""

        raise NotImplementedError

    def consume_password_token(
        self,
        *,
        token_hash: str,
        purpose: TokenPurpose,
        password_hash: str,
        now: datetime,
        activate: bool = False,
    ) -> bool:
        """Set the password and clear the token in one statement.

        Returns False when the token is unknown, expired, meant for another
        purpose or was already used.
        """

        raise NotImplementedError
