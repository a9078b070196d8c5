from datetime import datetime
from climbclub.extensions import db

class Credential(db.Model):
    __tablename__ = "credential"

    id = db.Column(db.Integer, primary_key=True)

    # Opaque user id handed to the browser session
    uid = db.Column(db.String(64), nullable=False, unique=True, index=True)

    # "anonymous" or "custom"
    provider = db.Column(db.String(20), nullable=False, default="anonymous")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    last_sign_in_at = db.Column(db.DateTime, nullable=True)
