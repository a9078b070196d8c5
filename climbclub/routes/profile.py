from flask import Blueprint, redirect, request

from climbclub.services import get_services
from climbclub.helpers.profile import ProfileGate
from climbclub.helpers.session import current_identity
from climbclub.routes.index import render_home

profile_bp = Blueprint("profile", __name__)

@profile_bp.route("/profile", methods=["POST"])
def create_profile():
    """
    One-time profile form. On a validation or store error, re-render the
    form in place with the user's values and a status line.
    """
    services = get_services()
    identity = current_identity(services)
    if not identity.user_id:
        return redirect("/")

    with ProfileGate(services, identity) as gate:
        created = gate.create_profile(request.form)
        status = gate.status

    if created:
        return redirect("/")

    body = render_home(
        services,
        identity,
        profile_status=status,
        profile_form=request.form,
    )
    return body, 400
