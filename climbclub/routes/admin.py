from functools import wraps

from flask import Blueprint, abort, flash, g, redirect, render_template, request

from climbclub.services import get_services
from climbclub.helpers.admin import AdminConsole, DELETE_CONFIRMATION, SESSION_CREATED
from climbclub.helpers.session import current_identity
from climbclub.routes.index import render_home

admin_bp = Blueprint("admin", __name__)

def admin_required(view):
    """
    403 unless the signed-in user id is on the ADMIN_USER_IDS list.
    Sets g.services and g.admin_id for the view.
    """
    @wraps(view)
    def wrapped(*args, **kwargs):
        services = get_services()
        identity = current_identity(services)
        if not services.is_admin(identity.user_id):
            abort(403)
        g.services = services
        g.admin_id = identity.user_id
        return view(*args, **kwargs)
    return wrapped

def _manage_redirect(session_id=None):
    anchor = f"#session-{session_id}" if session_id else ""
    return redirect(f"/?tab=manage{anchor}")

@admin_bp.route("/admin/sessions", methods=["POST"])
@admin_required
def create_session():
    """
    Create a session. On success the form comes back empty with a status
    line and the page moves to the manage tab after a short pause.
    """
    services = g.services
    with AdminConsole(services, g.admin_id) as console:
        console.select_tab("create")
        created = console.create_session(request.form)
        status = console.status

    identity = current_identity(services)
    if created:
        return render_home(
            services,
            identity,
            tab="create",
            admin_status=SESSION_CREATED,
            switch_to_manage=True,
        )

    body = render_home(
        services,
        identity,
        tab="create",
        admin_status=status,
        admin_form=request.form,
    )
    return body, 400

@admin_bp.route("/admin/sessions/<session_id>/roster", methods=["POST"])
@admin_required
def toggle_roster(session_id):
    with AdminConsole(g.services, g.admin_id) as console:
        console.select_tab("manage")
        console.toggle_roster(session_id)
    return _manage_redirect(session_id)

@admin_bp.route("/admin/sessions/<session_id>/delete", methods=["GET", "POST"])
@admin_required
def delete_session(session_id):
    """
    GET shows the confirmation dialog; only a POST carrying confirm=yes
    deletes. Signups for the session are left in place.
    """
    with AdminConsole(g.services, g.admin_id) as console:
        session = console.get_session(session_id)
        if session is None:
            abort(404)

        if request.method == "GET":
            return render_template(
                "confirm_delete.html",
                session=session,
                message=DELETE_CONFIRMATION,
            )

        confirmed = request.form.get("confirm") == "yes"
        if confirmed and not console.delete_session(session_id, confirmed=True):
            flash(console.status, "error")

    return _manage_redirect()

@admin_bp.route("/admin/sessions/<session_id>/email-link", methods=["POST"])
@admin_required
def email_roster_link(session_id):
    with AdminConsole(g.services, g.admin_id) as console:
        message = console.email_roster_link(
            session_id,
            request.form.get("email"),
            request.url_root,
        )
    flash(message, "info")
    return _manage_redirect(session_id)
