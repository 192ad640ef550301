from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask
from flask_mail import Mail

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig, DatabaseConnection
from .employees.controller import register as register_employees
from .leave.controller import register as register_leave
from .notifications.mailer import DisabledMailSender, FlaskMailSender, MailSender
from .reviews.controller import register as register_reviews
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_MAIL_KEYS = (
    "MAIL_SERVER",
    "MAIL_PORT",
    "MAIL_USE_TLS",
    "MAIL_USERNAME",
    "MAIL_PASSWORD",
    "MAIL_DEFAULT_SENDER",
    "MAIL_SUPPRESS_SEND",
)


def _build_mailer(app: Flask, settings) -> MailSender:
    for key in _MAIL_KEYS:
        if hasattr(settings, key):
            app.config[key] = getattr(settings, key)

    if not app.config.get("MAIL_SERVER") or not app.config.get("MAIL_DEFAULT_SENDER"):
        logger.warning("MAIL_SERVER or MAIL_DEFAULT_SENDER not set, outgoing email disabled")
        return DisabledMailSender()
    return FlaskMailSender(Mail(app), default_sender=app.config["MAIL_DEFAULT_SENDER"])


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    default_level = "DEBUG" if app.config["DEBUG"] else "INFO"
    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", default_level)).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "hr-portal starting: settings=%s db=%s",
        settings_module,
        DatabaseConnection(DBConfig.from_mapping(db_config)).describe(),
    )

    mailer = _build_mailer(app, settings)
    container = build_container(
        db_config=db_config,
        mailer=mailer,
        app_base_url=str(getattr(settings, "APP_BASE_URL", "")),
        hr_email=getattr(settings, "HR_NOTIFICATION_EMAIL", None),
        leave_count_weekends=bool(getattr(settings, "LEAVE_COUNT_WEEKENDS", True)),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(container.conn, schema_path=schema_path)
        logger.info("Schema ready (tables=%d)", len(list_tables(container.conn)))

    register_users(app, container)
    register_employees(app, container)
    register_leave(app, container)
    register_attendance(app, container)
    register_reviews(app, container)

    return app
