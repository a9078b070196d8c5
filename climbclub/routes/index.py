from contextlib import ExitStack

from flask import Blueprint, render_template, request

from climbclub.services import get_services
from climbclub.helpers.admin import AdminConsole, DELETE_CONFIRMATION, SWITCH_TO_MANAGE_AFTER
from climbclub.helpers.catalog import SessionCatalog
from climbclub.helpers.profile import ProfileGate
from climbclub.helpers.roster import PublicRoster
from climbclub.helpers.session import current_identity, pop_signup_statuses

index_bp = Blueprint("index", __name__)

@index_bp.route("/")
def index():
    """
    Single page, two modes:
    - ?page=roster&session=<id> -> public live roster (no sign-in at all)
    - anything else -> the member app (profile form or sessions, plus admin panel)
    """
    page = request.args.get("page")
    services = get_services()

    if page == "roster":
        return public_roster(services, request.args.get("session"))

    identity = current_identity(services, page=page)
    return render_home(
        services,
        identity,
        tab=request.args.get("tab"),
        signup_statuses=pop_signup_statuses(),
    )

def public_roster(services, session_id):
    with PublicRoster(services, session_id) as roster:
        body = render_template("roster_public.html", roster=roster)
        return body, (404 if roster.not_found else 200)

def render_home(
    services,
    identity,
    tab=None,
    signup_statuses=None,
    profile_status="",
    profile_form=None,
    admin_status="",
    admin_form=None,
    switch_to_manage=False,
):
    """
    Mount the views this user gets, render once, unmount.
    Shared by the GET page and the form POSTs that re-render in place.
    """
    with ExitStack() as stack:
        gate = stack.enter_context(ProfileGate(services, identity))
        if not identity.is_auth_ready or gate.loading:
            return render_template("loading.html", identity=identity)

        if profile_status:
            gate.status = profile_status

        catalog = None
        if identity.user_id and gate.profile:
            catalog = stack.enter_context(
                SessionCatalog(services, identity.user_id, gate.profile)
            )
            catalog.status.update(signup_statuses or {})

        console = None
        if services.is_admin(identity.user_id):
            console = stack.enter_context(AdminConsole(services, identity.user_id))
            console.select_tab(tab)
            if admin_status:
                console.status = admin_status

        return render_template(
            "home.html",
            identity=identity,
            gate=gate,
            profile_form=profile_form or {},
            catalog=catalog,
            console=console,
            admin_form=admin_form or {},
            switch_to_manage=switch_to_manage,
            switch_after=SWITCH_TO_MANAGE_AFTER,
            delete_confirmation=DELETE_CONFIRMATION,
            base_url=request.url_root,
        )

@index_bp.route("/help")
def help_page():
    """How to use the app; admins get their own section."""
    services = get_services()
    identity = current_identity(services)
    return render_template(
        "help.html",
        identity=identity,
        is_admin=services.is_admin(identity.user_id),
    )
