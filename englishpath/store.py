# englishpath/store.py
"""
Per-identity document store on top of SQLAlchemy.

Documents live at ``{namespace}/users/{identity}/{collection}/{doc_id}`` and
hold a JSON object. Supported operations:

- ``get``       point read (``None`` when absent)
- ``set``       point write; ``merge=True`` only updates the given fields
- ``add``       write under a freshly generated id (append)
- ``subscribe`` live feed of one document: the current value right away, then
                the new value after every committed write (last write wins)
"""
from __future__ import annotations

import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError

from .feeds import Feed, Subscription
from .models import Document

log = logging.getLogger(__name__)

# collections
PROFILE = "profile"
PROGRESS = "progress"
SPEAKING_RESULTS = "speakingResults"
DICTATION_RESULTS = "dictationResults"

# single-document ids
PROFILE_DOC = "userProfile"
PROGRESS_DOC = "lessonProgress"


class StoreError(Exception):
    """A read or write against the document store failed."""


def server_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex[:20]


class DocumentStore:
    def __init__(self, db, namespace: str):
        if not namespace:
            raise ValueError("namespace is required")
        self.db = db
        self.namespace = namespace
        self._feed = Feed("document-store")

    # ---------------------------
    # Paths
    # ---------------------------
    def path_for(self, identity: str, collection: str, doc_id: str) -> str:
        for part, label in ((identity, "identity"), (collection, "collection"), (doc_id, "doc_id")):
            if not part or "/" in part:
                raise ValueError(f"invalid {label}: {part!r}")
        return f"{self.namespace}/users/{identity}/{collection}/{doc_id}"

    # ---------------------------
    # Reads
    # ---------------------------
    def get(self, identity: str, collection: str, doc_id: str) -> dict | None:
        path = self.path_for(identity, collection, doc_id)
        try:
            row = Document.query.filter_by(path=path).first()
        except SQLAlchemyError as e:
            raise StoreError(f"read failed for {path}") from e
        return copy.deepcopy(row.data) if row else None

    def list_collection(self, identity: str, collection: str) -> list[dict]:
        try:
            rows = (Document.query
                    .filter_by(namespace=self.namespace, identity=identity, collection=collection)
                    .order_by(Document.created_at.asc())
                    .all())
        except SQLAlchemyError as e:
            raise StoreError(f"list failed for {identity}/{collection}") from e
        return [{"id": r.doc_id, **copy.deepcopy(r.data or {})} for r in rows]

    # ---------------------------
    # Writes
    # ---------------------------
    def set(self, identity: str, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> dict:
        if not isinstance(data, dict):
            raise TypeError("document data must be a dict")
        path = self.path_for(identity, collection, doc_id)
        try:
            row = Document.query.filter_by(path=path).first()
            if row is None:
                row = Document(
                    path=path,
                    namespace=self.namespace,
                    identity=identity,
                    collection=collection,
                    doc_id=doc_id,
                    data=copy.deepcopy(data),
                )
                self.db.session.add(row)
            elif merge:
                row.data = {**(row.data or {}), **copy.deepcopy(data)}
            else:
                row.data = copy.deepcopy(data)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise StoreError(f"write failed for {path}") from e

        value = copy.deepcopy(row.data)
        log.debug("wrote %s (merge=%s)", path, merge)
        self._feed.publish(path, value)
        return value

    def add(self, identity: str, collection: str, data: dict[str, Any]) -> str:
        doc_id = _new_id()
        self.set(identity, collection, doc_id, data)
        return doc_id

    # ---------------------------
    # Live subscription
    # ---------------------------
    def subscribe(self, identity: str, collection: str, doc_id: str,
                  callback: Callable[[dict | None], None]) -> Subscription:
        path = self.path_for(identity, collection, doc_id)
        # register before the first read so no write can fall in between
        sub = self._feed.listen(path, callback)
        try:
            current = self.get(identity, collection, doc_id)
        except StoreError:
            sub.cancel()
            raise
        callback(current)
        return sub

    def subscriber_count(self, identity: str, collection: str, doc_id: str) -> int:
        return self._feed.listener_count(self.path_for(identity, collection, doc_id))

    def close(self) -> None:
        self._feed.close()
