import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_portal_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

MAIL_SERVER = ""
MAIL_DEFAULT_SENDER = ""
MAIL_SUPPRESS_SEND = True

HR_NOTIFICATION_EMAIL = None
APP_BASE_URL = "http://localhost"

LEAVE_COUNT_WEEKENDS = True
