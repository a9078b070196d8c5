import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from climbclub.models import Document
from climbclub.helpers.time import as_utc, utcnow
from climbclub.helpers.url import new_document_id


class _ServerTimestamp:
    def __repr__(self):
        return "SERVER_TIMESTAMP"


# Placeholder value replaced by the store's clock at write time
SERVER_TIMESTAMP = _ServerTimestamp()

_DATE_KEY = "$date"


class StoreError(Exception):
    """A read or write against the document store failed."""


@dataclass(frozen=True)
class DocumentSnapshot:
    id: str
    data: dict = field(default_factory=dict)


class Subscription:
    """
    One live listener on a document or a query.

    Delivers the full current snapshot on subscribe and again after every
    committed write to the watched collection, until close().
    """

    def __init__(self, store, path, fetch, on_next, on_error=None):
        self._store = store
        self.path = path
        self._fetch = fetch
        self._on_next = on_next
        self._on_error = on_error
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def refresh(self):
        if not self._active:
            return

        try:
            snapshot = self._fetch()
        except StoreError as e:
            if self._on_error:
                self._on_error(e)
            else:
                print(f"[STORE] Listener on {self.path} failed: {e}", file=sys.stderr)
            return

        if self._active:
            self._on_next(snapshot)

    def close(self):
        if not self._active:
            return
        self._active = False
        self._store._unregister(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class DocumentStore:
    """
    Document database over a single SQLAlchemy table.

    Documents are flat JSON maps addressed by (collection path, doc id).
    Listeners are in-process: they see writes made through this store only.
    """

    def __init__(self, db, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self._clock = clock
        self._listeners: dict[str, list[Subscription]] = {}
        # Flask serves requests on threads; writers notify from their own thread
        self._lock = threading.Lock()

    # --- reads ---

    def get(self, path: str, doc_id: str) -> Optional[DocumentSnapshot]:
        try:
            row = self._row(path, doc_id)
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise StoreError(f"read {path}/{doc_id} failed: {e}") from e
        return self._snapshot(row) if row else None

    def query(self, path: str, **equals) -> list[DocumentSnapshot]:
        """
        One-shot query. Keyword arguments are equality filters on
        top-level string fields, e.g. query(path, sessionId="abc").
        """
        q = Document.query.filter(Document.collection == path)
        for name, value in equals.items():
            q = q.filter(Document.data[name].as_string() == value)

        try:
            rows = q.order_by(Document.id.asc()).all()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise StoreError(f"query {path} {equals} failed: {e}") from e
        return [self._snapshot(r) for r in rows]

    # --- writes ---

    def set(self, path: str, doc_id: str, data: dict) -> None:
        """Create or overwrite the document with this id."""
        payload = self._encode(data)
        try:
            row = self._row(path, doc_id)
            if row is None:
                row = Document(collection=path, doc_id=doc_id, data=payload)
                self.db.session.add(row)
            else:
                row.data = payload
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise StoreError(f"write {path}/{doc_id} failed: {e}") from e

        self._notify(path)

    def add(self, path: str, data: dict) -> str:
        """Create a document under a generated id and return the id."""
        doc_id = new_document_id()
        self.set(path, doc_id, data)
        return doc_id

    def delete(self, path: str, doc_id: str) -> None:
        try:
            row = self._row(path, doc_id)
            if row is None:
                return
            self.db.session.delete(row)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise StoreError(f"delete {path}/{doc_id} failed: {e}") from e

        self._notify(path)

    def release(self) -> None:
        """Give the pooled connection back while a long-lived caller waits."""
        self.db.session.close()

    # --- live queries ---

    def watch_document(self, path, doc_id, on_next, on_error=None) -> Subscription:
        """on_next receives a DocumentSnapshot, or None if the document is missing."""
        return self._subscribe(
            Subscription(self, path, lambda: self.get(path, doc_id), on_next, on_error)
        )

    def watch_query(self, path, on_next, on_error=None, **equals) -> Subscription:
        """on_next receives the full list of matching DocumentSnapshots."""
        return self._subscribe(
            Subscription(self, path, lambda: self.query(path, **equals), on_next, on_error)
        )

    def listener_count(self, path: Optional[str] = None) -> int:
        with self._lock:
            if path is not None:
                return len(self._listeners.get(path, []))
            return sum(len(subs) for subs in self._listeners.values())

    def _subscribe(self, sub: Subscription) -> Subscription:
        with self._lock:
            self._listeners.setdefault(sub.path, []).append(sub)
        sub.refresh()
        return sub

    def _unregister(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._listeners.get(sub.path, [])
            if sub in subs:
                subs.remove(sub)
            if not subs:
                self._listeners.pop(sub.path, None)

    def _notify(self, path: str) -> None:
        with self._lock:
            subs = list(self._listeners.get(path, []))

        for sub in subs:
            try:
                sub.refresh()
            except Exception as e:
                # A broken listener must not fail the write that triggered it
                print(f"[STORE] Listener callback on {path} raised: {e!r}", file=sys.stderr)

    # --- encoding ---

    def _row(self, path, doc_id):
        return Document.query.filter_by(collection=path, doc_id=doc_id).first()

    def _encode(self, data: dict) -> dict:
        encoded = {}
        for key, value in data.items():
            if value is SERVER_TIMESTAMP:
                value = self._clock()
            if isinstance(value, datetime):
                value = {_DATE_KEY: as_utc(value).isoformat()}
            encoded[key] = value
        return encoded

    @staticmethod
    def _decode(data: dict) -> dict:
        decoded = {}
        for key, value in (data or {}).items():
            if isinstance(value, dict) and set(value) == {_DATE_KEY}:
                value = datetime.fromisoformat(value[_DATE_KEY])
            decoded[key] = value
        return decoded

    def _snapshot(self, row: Document) -> DocumentSnapshot:
        return DocumentSnapshot(id=row.doc_id, data=self._decode(row.data))
