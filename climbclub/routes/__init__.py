from .index import index_bp
from .profile import profile_bp
from .signups import signups_bp
from .admin import admin_bp
from .roster import roster_bp

def register_blueprints(app):
    app.register_blueprint(index_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(signups_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(roster_bp)
