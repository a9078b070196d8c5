import os

class Config:
    raw_db_url = os.getenv("DATABASE_URL")

    if raw_db_url:
        if raw_db_url.startswith("postgres://"):
            raw_db_url = raw_db_url.replace("postgres://", "postgresql://", 1)
        SQLALCHEMY_DATABASE_URI = raw_db_url
    else:
        SQLALCHEMY_DATABASE_URI = "sqlite:///climbclub.db"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-dev-secret")

    # Namespaces the profile collection per deployment
    APP_ID = os.getenv("APP_ID", "default-app-id")

    # Comma-separated list of admin user ids, e.g. "uid-1,uid-2"
    ADMIN_USER_IDS = os.getenv("ADMIN_USER_IDS", "")

    # Pre-issued custom sign-in token (see issue_token.py)
    INITIAL_AUTH_TOKEN = os.getenv("INITIAL_AUTH_TOKEN") or None

    CLUB_TIMEZONE = os.getenv("CLUB_TIMEZONE", "America/New_York")
    STREAM_KEEPALIVE_SECONDS = float(os.getenv("STREAM_KEEPALIVE_SECONDS", "15"))

RESEND_API_KEY = os.getenv("RESEND_API_KEY", None)
RESEND_FROM_EMAIL = os.getenv("RESEND_FROM_EMAIL", None)
