from flask import Flask
from .config import Config
from .extensions import db
from climbclub.helpers.time import format_session_date
from climbclub.helpers.url import waiver_href


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    db.init_app(app)

    from climbclub.routes import register_blueprints
    register_blueprints(app)

    with app.app_context():
        db.create_all()

    app.jinja_env.globals["waiver_href"] = waiver_href

    # Footer badge: {% if is_club_admin(identity.user_id) %}
    @app.context_processor
    def inject_admin_check():
        from climbclub.services import get_services
        return {"is_club_admin": get_services().is_admin}

    # Jinja filter used by templates: {{ session.session_date|session_dt }}
    @app.template_filter("session_dt")
    def session_dt(dt) -> str:
        from climbclub.services import get_services
        return format_session_date(dt, get_services().timezone)

    return app
