from datetime import datetime
from sqlalchemy import UniqueConstraint
from climbclub.extensions import db

class Document(db.Model):
    __tablename__ = "document"

    id = db.Column(db.Integer, primary_key=True)

    # Slash separated path, e.g. "artifacts/default-app-id/public/data/sessions"
    collection = db.Column(db.String(255), nullable=False, index=True)
    doc_id = db.Column(db.String(64), nullable=False)

    # Flat map of field -> value, datetimes encoded by DocumentStore
    data = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    __table_args__ = (
        UniqueConstraint("collection", "doc_id", name="uq_document_collection_doc"),
    )
