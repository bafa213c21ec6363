# englishpath/models.py
# One generic table backs the per-identity document store. Records are keyed by
# their full path ({namespace}/users/{identity}/{collection}/{doc_id}); the
# individual path segments are kept as indexed columns for listing/export.

from __future__ import annotations
from flask_sqlalchemy import SQLAlchemy
from datetime import datetime, timezone

db = SQLAlchemy()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(db.Model):
    __tablename__ = "documents"

    id = db.Column(db.Integer, primary_key=True)
    path = db.Column(db.String(512), unique=True, nullable=False, index=True)
    namespace = db.Column(db.String(120), nullable=False, index=True)
    identity = db.Column(db.String(128), nullable=False, index=True)
    collection = db.Column(db.String(64), nullable=False, index=True)
    doc_id = db.Column(db.String(64), nullable=False)
    data = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        db.Index("ix_documents_owner_collection", "namespace", "identity", "collection"),
    )

    def __repr__(self) -> str:
        return f"<Document {self.path}>"
