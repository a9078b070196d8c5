from flask import Blueprint, current_app, render_template, request

from climbclub.services import get_services
from climbclub.helpers.roster import PublicRoster
from climbclub.helpers.stream import live_view_stream

roster_bp = Blueprint("roster", __name__)

@roster_bp.route("/roster/stream")
def roster_stream():
    """
    Live roster updates for ?page=roster&session=<id>.
    Public: no identity is resolved for this route.
    """
    services = get_services()
    session_id = request.args.get("session")

    def build(on_change):
        return PublicRoster(services, session_id, on_change=on_change)

    def render(roster):
        return render_template("_roster_live.html", roster=roster)

    return live_view_stream(
        services,
        build,
        render,
        keepalive=current_app.config["STREAM_KEEPALIVE_SECONDS"],
    )
