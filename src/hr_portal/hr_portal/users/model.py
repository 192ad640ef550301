from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import TokenPurpose, UserType


@dataclass(frozen=True)
class User:
    """Login credential. An employee owns exactly one; employers have no employee row."""

    user_id: int
    email: str
    password_hash: str
    user_type: UserType
    is_active: bool = True
    # Pending one-time password link, if any. Only its SHA-256 is stored.
    token_purpose: Optional[TokenPurpose] = None
    token_expires: Optional[datetime] = None
