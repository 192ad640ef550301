"""Plain notification bodies. Each builder returns the kwargs for MailSender.send_email."""
from __future__ import annotations

from datetime import date
from html import escape
from typing import Optional


def _html(*paragraphs: str) -> str:
    return "".join(f"<p>{escape(p)}</p>" for p in paragraphs)


def welcome_employee(*, name: str, login_url: str, setup_url: Optional[str] = None, valid_hours: int = 24) -> dict:
    lines = [
        f"Dear {name},",
        "Your employee account has been created.",
    ]
    if setup_url:
        lines.append(f"Set your password at {setup_url} (the link expires in {valid_hours} hours).")
    lines.append(f"Sign in at {login_url} to open the employee portal.")
    return {
        "subject": "Welcome to the employee portal",
        "text": "\n\n".join(lines),
        "html": _html(*lines),
    }


def leave_submitted(*, employee_name: str, leave_type: str, start: date, end: date, review_url: str) -> dict:
    lines = (
        f"{employee_name} requested {leave_type.lower()} leave from {start:%Y-%m-%d} to {end:%Y-%m-%d}.",
        f"Review the request at {review_url}.",
    )
    return {
        "subject": f"Leave request: {employee_name}",
        "text": "\n\n".join(lines),
        "html": _html(*lines),
    }


def leave_decided(*, name: str, status: str, start: date, end: date, notes: Optional[str] = None) -> dict:
    lines = [
        f"Dear {name},",
        f"Your leave request for {start:%Y-%m-%d} to {end:%Y-%m-%d} was {status.lower()}.",
    ]
    if notes:
        lines.append(f"Notes: {notes}")
    return {
        "subject": f"Leave request {status.lower()}",
        "text": "\n\n".join(lines),
        "html": _html(*lines),
    }


def password_reset(*, reset_url: str, valid_hours: int = 1) -> dict:
    lines = (
        "We received a request to reset your password.",
        f"Choose a new password at {reset_url}.",
        f"The link expires in {valid_hours} hour(s). If you did not ask for it, ignore this email.",
    )
    return {
        "subject": "Password reset request",
        "text": "\n\n".join(lines),
        "html": _html(*lines),
    }
