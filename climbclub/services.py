import sys
from zoneinfo import ZoneInfo

from flask import current_app

from climbclub.auth import AuthService
from climbclub.extensions import db
from climbclub.store import DocumentStore
from climbclub.helpers.admin import is_admin, parse_admin_ids

EXTENSION_KEY = "climbclub"


class ClubServices:
    """
    Everything the views talk to, built once per app and passed in explicitly:
    the document store, the auth service and the deployment settings.
    """

    def __init__(self, store, auth, app_id, admin_user_ids=(), timezone=None, initial_auth_token=None):
        self.store = store
        self.auth = auth
        self.app_id = app_id
        self.admin_user_ids = frozenset(admin_user_ids)
        self.timezone = timezone or ZoneInfo("America/New_York")
        self.initial_auth_token = initial_auth_token

    @property
    def profiles_path(self) -> str:
        return f"artifacts/{self.app_id}/users"

    @property
    def sessions_path(self) -> str:
        return f"artifacts/{self.app_id}/public/data/sessions"

    @property
    def signups_path(self) -> str:
        return f"artifacts/{self.app_id}/public/data/signups"

    def is_admin(self, user_id) -> bool:
        return is_admin(user_id, self.admin_user_ids)


def build_services(app) -> ClubServices:
    cfg = app.config
    return ClubServices(
        store=DocumentStore(db),
        auth=AuthService(db, cfg["SECRET_KEY"]),
        app_id=cfg.get("APP_ID") or "default-app-id",
        admin_user_ids=parse_admin_ids(cfg.get("ADMIN_USER_IDS")),
        timezone=ZoneInfo(cfg.get("CLUB_TIMEZONE") or "America/New_York"),
        initial_auth_token=cfg.get("INITIAL_AUTH_TOKEN"),
    )


def get_services(app=None) -> ClubServices:
    """
    Return the app's ClubServices, constructing them on first use.
    A failed construction is not cached, so the next call tries again.
    """
    app = app or current_app._get_current_object()

    services = app.extensions.get(EXTENSION_KEY)
    if services is not None:
        return services

    try:
        services = build_services(app)
    except Exception as e:
        print(f"[SERVICES] Initialization failed, will retry on next request: {e}", file=sys.stderr)
        raise

    app.extensions[EXTENSION_KEY] = services
    return services
