import sys
from datetime import datetime, timezone
from typing import Callable, Optional

from climbclub.records import ROSTER_HEADERS, RecordError, Session, Signup, read_records
from climbclub.helpers.time import as_utc

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def roster_tsv(roster) -> str:
    """
    Tab-separated roster for pasting into a spreadsheet:
    one header line plus one line per signup, fixed column order.
    """
    lines = ["\t".join(ROSTER_HEADERS)]
    lines.extend("\t".join(s.roster_row()) for s in roster)
    return "\n".join(lines)


def sort_by_signup_time(signups) -> list:
    """Oldest signup first."""
    return sorted(signups, key=lambda s: as_utc(s.signed_up_at) or _EPOCH)


class PublicRoster:
    """
    Read-only live roster for one session, addressed only by its id.
    No identity is involved: anyone holding the link can watch it.
    """

    def __init__(self, services, session_id: Optional[str], on_change: Optional[Callable] = None):
        self.services = services
        self.session_id = (session_id or "").strip()
        self._on_change = on_change

        self.session: Optional[Session] = None
        self.roster: list[Signup] = []
        self.session_loaded = False
        self.roster_loaded = False
        self._subscriptions = []

        if not self.session_id:
            self.session_loaded = self.roster_loaded = True
            return

        store = services.store
        self._subscriptions = [
            store.watch_document(
                services.sessions_path, self.session_id, self._on_session, self._on_session_error
            ),
            store.watch_query(
                services.signups_path, self._on_roster, self._on_roster_error, sessionId=self.session_id
            ),
        ]

    @property
    def loading(self) -> bool:
        return not self.session and not (self.session_loaded and self.roster_loaded)

    @property
    def not_found(self) -> bool:
        return self.session_loaded and self.session is None

    @property
    def rows(self) -> list:
        """Roster rows to display; none at all for a missing session."""
        if self.session is None:
            return []
        return self.roster

    def _on_session(self, snap):
        if snap is None:
            self.session = None
        else:
            try:
                self.session = Session.from_document(snap)
            except RecordError as e:
                print(f"[ROSTER] Session {snap.id} is unreadable: {e}", file=sys.stderr)
                self.session = None
        self.session_loaded = True
        self._changed()

    def _on_session_error(self, error):
        print(f"[ROSTER] Error fetching session details: {error}", file=sys.stderr)
        self.session_loaded = True
        self._changed()

    def _on_roster(self, snapshots):
        self.roster = sort_by_signup_time(read_records(snapshots, Signup, "signup"))
        self.roster_loaded = True
        self._changed()

    def _on_roster_error(self, error):
        print(f"[ROSTER] Error fetching live roster: {error}", file=sys.stderr)
        self.roster_loaded = True
        self._changed()

    def _changed(self):
        if self._on_change:
            self._on_change(self)

    def close(self):
        for sub in self._subscriptions:
            sub.close()
        self._subscriptions = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
