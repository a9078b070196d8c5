from flask import Blueprint, current_app, redirect, render_template

from climbclub.services import get_services
from climbclub.helpers.catalog import SessionCatalog
from climbclub.helpers.profile import ProfileGate
from climbclub.helpers.session import current_identity, set_signup_status
from climbclub.helpers.stream import live_view_stream

signups_bp = Blueprint("signups", __name__)

def _catalog_action(session_id: str, action: str):
    services = get_services()
    identity = current_identity(services)
    if not identity.user_id:
        return redirect("/")

    with ProfileGate(services, identity) as gate:
        with SessionCatalog(services, identity.user_id, gate.profile) as catalog:
            if action == "signup":
                message = catalog.sign_up(session_id)
            else:
                message = catalog.cancel(session_id)

    # Shown on the button (disabled) on the next render
    set_signup_status(session_id, message)
    return redirect(f"/#session-{session_id}")

@signups_bp.route("/sessions/<session_id>/signup", methods=["POST"])
def sign_up(session_id):
    return _catalog_action(session_id, "signup")

@signups_bp.route("/sessions/<session_id>/cancel", methods=["POST"])
def cancel_sign_up(session_id):
    return _catalog_action(session_id, "cancel")

@signups_bp.route("/sessions/stream")
def sessions_stream():
    """Live session list for the signed-in member (server-sent events)."""
    services = get_services()
    identity = current_identity(services)
    user_id = identity.user_id

    def build(on_change):
        return SessionCatalog(services, user_id, None, on_change=on_change)

    def render(catalog):
        return render_template("_catalog.html", catalog=catalog)

    return live_view_stream(
        services,
        build,
        render,
        keepalive=current_app.config["STREAM_KEEPALIVE_SECONDS"],
    )
