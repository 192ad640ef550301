from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_enum
from ..core.constants import PASSWORD_MIN_LENGTH, RESET_TOKEN_HOURS, SETUP_TOKEN_HOURS
from ..core.enums import TokenPurpose, UserType
from ..core.exceptions import AuthenticationError, ValidationError
from ..employees.repository import EmployeeRepository
from ..notifications import messages
from ..notifications.mailer import MailSender
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

_BAD_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    email: str
    user_type: UserType
    employee_id: Optional[int]


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository, employees: EmployeeRepository):
        self._users = users
        self._employees = employees

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = (email or "").strip().lower()
        user = self._users.get_by_email(email) if email else None
        if not user or not user.is_active:
            raise AuthenticationError(_BAD_CREDENTIALS)

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hash
            ok = False
        if not ok:
            raise AuthenticationError(_BAD_CREDENTIALS)

        employee_id = None
        if user.user_type == UserType.EMPLOYEE:
            employee = self._employees.get_by_user_id(user.user_id)
            if not employee:
                raise AuthenticationError("No employee profile is linked to this account")
            employee_id = employee.employee_id

        return SessionUser(
            user_id=user.user_id,
            email=user.email,
            user_type=user.user_type,
            employee_id=employee_id,
        )


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def validate_password(password: Optional[str]) -> str:
    if not password:
        raise ValidationError("password is required")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    return password


class PasswordService:
    """One-time password links: first-time setup and forgotten-password reset.

    A link carries a random token; only its SHA-256 is stored on the user row,
    together with the purpose and an expiry. Using a link sets the password and
    clears the token in a single UPDATE, so each link works once.
    """

    def __init__(
        self,
        users: UserRepository,
        mailer: MailSender,
        *,
        base_url: str = "",
        setup_hours: int = SETUP_TOKEN_HOURS,
        reset_hours: int = RESET_TOKEN_HOURS,
    ):
        self._users = users
        self._mailer = mailer
        self._base_url = base_url.rstrip("/")
        self._setup_hours = setup_hours
        self._reset_hours = reset_hours

    @property
    def setup_hours(self) -> int:
        return self._setup_hours

    def _issue(self, user_id: int, purpose: TokenPurpose, hours: int) -> str:
        token = secrets.token_urlsafe(32)
        self._users.set_password_token(
            int(user_id),
            token_hash=hash_token(token),
            purpose=purpose,
            expires_at=now_local() + timedelta(hours=hours),
        )
        return token

    def issue_setup_token(self, user_id: int) -> str:
        return self._issue(user_id, TokenPurpose.SETUP, self._setup_hours)

    def setup_url(self, token: str) -> str:
        return f"{self._base_url}/auth/setup-password?{urlencode({'token': token})}"

    def check_setup_token(self, token: Optional[str]) -> User:
        if not token:
            raise ValidationError("Token is required")
        user = self._users.get_by_token_hash(hash_token(token))
        if (
            not user
            or user.token_purpose != TokenPurpose.SETUP
            or user.token_expires is None
            or user.token_expires <= now_local()
        ):
            raise ValidationError("Invalid or expired setup token")
        return user

    def setup_password(self, token: Optional[str], password: Optional[str]) -> User:
        if not token:
            raise ValidationError("Token and password are required")
        user = self.check_setup_token(token)
        ok = self._users.consume_password_token(
            token_hash=hash_token(token),
            purpose=TokenPurpose.SETUP,
            password_hash=generate_password_hash(validate_password(password)),
            now=now_local(),
            activate=True,
        )
        if not ok:
            raise ValidationError("Invalid or expired setup token")
        logger.info("Password set up for user %s", user.user_id)
        return user

    def request_reset(self, email: Optional[str], user_type) -> None:
        """Mail a reset link when the account exists. Says nothing either way."""
        email = (email or "").strip().lower()
        if not email or not user_type:
            raise ValidationError("Email and user type are required")
        user_type = require_enum(UserType, user_type, "userType")

        user = self._users.get_by_email(email)
        if not user or user.user_type != user_type or not user.is_active:
            logger.info("Password reset requested for unknown or inactive account")
            return

        token = self._issue(user.user_id, TokenPurpose.RESET, self._reset_hours)
        portal = user_type.value.lower()
        reset_url = f"{self._base_url}/{portal}/reset-password?{urlencode({'token': token})}"
        self._mailer.send_email(
            to=user.email,
            **messages.password_reset(reset_url=reset_url, valid_hours=self._reset_hours),
        )

    def reset_password(self, token: Optional[str], password: Optional[str]) -> None:
        if not token:
            raise ValidationError("Token and password are required")
        ok = self._users.consume_password_token(
            token_hash=hash_token(token),
            purpose=TokenPurpose.RESET,
            password_hash=generate_password_hash(validate_password(password)),
            now=now_local(),
        )
        if not ok:
            raise ValidationError("Invalid or expired reset token")
