from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence, Union

from flask_mail import Mail, Message

logger = logging.getLogger(__name__)

Recipients = Union[str, Sequence[str]]


class MailSender(Protocol):
    """Outgoing mail collaborator.

    Returns False instead of raising: a failed notification must never undo
    the business operation that triggered it.
    """

    def send_email(
        self,
        *,
        to: Recipients,
        subject: str,
        html: Optional[str] = None,
        text: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError


def _as_list(to: Recipients) -> list[str]:
    if isinstance(to, str):
        return [to] if to.strip() else []
    return [t for t in to if t and t.strip()]


class FlaskMailSender(MailSender):
    def __init__(self, mail: Mail, *, default_sender: Optional[str] = None):
        self._mail = mail
        self._default_sender = default_sender

    def send_email(
        self,
        *,
        to: Recipients,
        subject: str,
        html: Optional[str] = None,
        text: Optional[str] = None,
    ) -> bool:
        recipients = _as_list(to)
        if not recipients:
            logger.warning("Email %r has no recipients, not sent", subject)
            return False

        try:
            msg = Message(
                subject=subject,
                recipients=recipients,
                body=text,
                html=html,
                sender=self._default_sender,
            )
            self._mail.send(msg)
        except Exception:
            # SMTP, socket, BadHeaderError and Flask-Mail assertions alike
            logger.exception("Failed to send email %r to %s", subject, recipients)
            return False

        logger.info("Email %r sent to %s", subject, recipients)
        return True


class DisabledMailSender(MailSender):
    """Used when no SMTP server is configured."""

    def send_email(
        self,
        *,
        to: Recipients,
        subject: str,
        html: Optional[str] = None,
        text: Optional[str] = None,
    ) -> bool:
        logger.warning("Email configuration missing: %r to %s not sent", subject, _as_list(to))
        return False
