# englishpath/panel.py
from __future__ import annotations

import logging

from .store import DocumentStore, StoreError, server_timestamp

log = logging.getLogger(__name__)


class Panel:
    """
    Base for exercise panels.

    A panel owns its local flags, talks to collaborators it was handed, and
    writes results best-effort: a failed write is logged and dropped.
    ``close()`` releases anything held open; panels are context managers.
    """

    name = "panel"

    def __init__(self, store: DocumentStore, uid: str, display_name: str = ""):
        self.store = store
        self.uid = uid
        self.display_name = display_name
        self.closed = False

    def _record(self, collection: str, data: dict) -> str | None:
        payload = {"timestamp": server_timestamp(), "displayName": self.display_name, **data}
        try:
            return self.store.add(self.uid, collection, payload)
        except StoreError:
            log.exception("%s: could not save result to %s", self.name, collection)
            return None

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
