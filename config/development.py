import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_portal"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Mail (Flask-Mail). Without MAIL_SERVER and MAIL_DEFAULT_SENDER mail is only logged.
MAIL_SERVER = os.getenv("MAIL_SERVER", "")
MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
MAIL_USE_TLS = bool(int(os.getenv("MAIL_USE_TLS", "1")))
MAIL_USERNAME = os.getenv("MAIL_USERNAME")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "")
MAIL_SUPPRESS_SEND = bool(int(os.getenv("MAIL_SUPPRESS_SEND", "0")))

HR_NOTIFICATION_EMAIL = os.getenv("HR_NOTIFICATION_EMAIL")
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")

# 1: leave days are calendar days; 0: Saturdays and Sundays are not counted
LEAVE_COUNT_WEEKENDS = bool(int(os.getenv("LEAVE_COUNT_WEEKENDS", "1")))
