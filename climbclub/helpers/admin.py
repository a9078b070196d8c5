import sys
from dataclasses import dataclass, field
from typing import Mapping, Optional

from climbclub.records import Session, Signup, read_records
from climbclub.store import StoreError
from climbclub.helpers.email import normalize_email, send_roster_link_via_email
from climbclub.helpers.roster import roster_tsv, sort_by_signup_time
from climbclub.helpers.time import as_utc, parse_local_datetime
from climbclub.helpers.url import roster_link

NAME_AND_DATE_REQUIRED = "Please add a name and date."
CREATING_SESSION = "Creating session..."
SESSION_CREATED = "Session created successfully!"
CREATE_SESSION_FAILED = "Error creating session."
DELETE_SESSION_FAILED = "Error deleting session."
DELETE_CONFIRMATION = (
    "Are you sure you want to delete this session? "
    "This will not delete the sign-ups, but the session will be gone."
)

TABS = ("create", "manage")

# Seconds before the create tab hands over to the manage tab
SWITCH_TO_MANAGE_AFTER = 1.5

def parse_admin_ids(raw) -> frozenset:
    """
    "uid-1, uid-2" -> {"uid-1", "uid-2"}. Blank entries are dropped.
    """
    if not raw:
        return frozenset()
    if isinstance(raw, str):
        raw = raw.split(",")
    return frozenset(i.strip() for i in raw if i and i.strip())

def is_admin(user_id, admin_ids) -> bool:
    """
    Display gate only. The store does not enforce this; real protection
    has to come from the database's own access rules.
    """
    if not user_id:
        return False
    return user_id in admin_ids


@dataclass
class AdminState:
    """What an admin's console remembers between page loads."""
    active_tab: str = "create"
    expanded_session: Optional[str] = None
    # session id -> roster as fetched on the last "open"
    rosters: dict = field(default_factory=dict)


# --- In-memory per-admin console state (keyed by user id) ---
ADMIN_CONSOLE_STATE: dict = {}

def admin_state_for(user_id: str) -> AdminState:
    state = ADMIN_CONSOLE_STATE.get(user_id)
    if state is None:
        state = AdminState()
        ADMIN_CONSOLE_STATE[user_id] = state
    return state


class AdminConsole:
    """
    Create / manage sessions and pull rosters.

    Watches every session (newest first). Rosters are one-shot reads made
    when a session is opened and kept until the next time it is opened.
    """

    def __init__(self, services, user_id: str, state: Optional[AdminState] = None):
        self.services = services
        self.user_id = user_id
        self.state = state or admin_state_for(user_id)
        self.sessions: list[Session] = []
        self.loading_sessions = True
        self.status = ""

        self._subscription = services.store.watch_query(
            services.sessions_path, self._on_sessions, self._on_sessions_error
        )

    def _on_sessions(self, snapshots):
        records = read_records(snapshots, Session, "session")
        self.sessions = sorted(records, key=lambda s: as_utc(s.session_date), reverse=True)
        self.loading_sessions = False

    def _on_sessions_error(self, error):
        print(f"[ADMIN] Error fetching all sessions: {error}", file=sys.stderr)
        self.loading_sessions = False

    @property
    def active_tab(self) -> str:
        return self.state.active_tab

    def select_tab(self, tab: Optional[str]):
        if tab in TABS:
            self.state.active_tab = tab

    def get_session(self, session_id: str) -> Optional[Session]:
        for s in self.sessions:
            if s.id == session_id:
                return s
        return None

    # --- create ---

    def create_session(self, form: Mapping) -> bool:
        name = (form.get("name") or "").strip()
        session_date = parse_local_datetime(form.get("session_date"), self.services.timezone)

        if not name or not session_date:
            self.status = NAME_AND_DATE_REQUIRED
            return False

        self.status = CREATING_SESSION
        session = Session(
            id="",
            name=name,
            session_date=session_date,
            description=(form.get("description") or "").strip() or None,
            location=(form.get("location") or "").strip() or None,
            price=(form.get("price") or "").strip() or None,
            waiver_link=(form.get("waiver_link") or "").strip() or None,
            created_by=self.user_id,
        )
        try:
            new_id = self.services.store.add(self.services.sessions_path, session.to_document())
        except StoreError as e:
            print(f"[ADMIN] Error creating session: {e}", file=sys.stderr)
            self.status = CREATE_SESSION_FAILED
            return False

        print(f"[ADMIN] {self.user_id} created session {new_id} ({name})", file=sys.stderr)
        self.status = SESSION_CREATED
        return True

    # --- rosters ---

    def toggle_roster(self, session_id: str):
        """Open (and fetch) or close a session's roster panel."""
        if self.state.expanded_session == session_id:
            self.state.expanded_session = None
            return

        self.state.expanded_session = session_id
        self.fetch_roster(session_id)

    def fetch_roster(self, session_id: str):
        try:
            snapshots = self.services.store.query(self.services.signups_path, sessionId=session_id)
        except StoreError as e:
            print(f"[ADMIN] Error fetching roster for {session_id}: {e}", file=sys.stderr)
            return
        self.state.rosters[session_id] = sort_by_signup_time(read_records(snapshots, Signup, "signup"))

    def roster_for(self, session_id: str) -> Optional[list]:
        return self.state.rosters.get(session_id)

    def roster_export(self, session_id: str) -> Optional[str]:
        """Spreadsheet text for the cached roster, or None when it is empty."""
        roster = self.roster_for(session_id)
        if not roster:
            return None
        return roster_tsv(roster)

    def share_link(self, base_url: str, session_id: str) -> str:
        return roster_link(base_url, session_id)

    def email_roster_link(self, session_id: str, to_email: str, base_url: str) -> str:
        to_email = normalize_email(to_email)
        if not to_email:
            return "Please enter an email address."

        session = self.get_session(session_id)
        if not session:
            return "Session not found."

        sent = send_roster_link_via_email(to_email, session.name, roster_link(base_url, session_id))
        return "Link emailed!" if sent else "Failed."

    # --- delete ---

    def delete_session(self, session_id: str, confirmed: bool) -> bool:
        """
        Deletes only the session; its signups stay behind.
        Does nothing unless the admin confirmed.
        """
        if not confirmed:
            return False

        try:
            self.services.store.delete(self.services.sessions_path, session_id)
        except StoreError as e:
            print(f"[ADMIN] Error deleting session {session_id}: {e}", file=sys.stderr)
            self.status = DELETE_SESSION_FAILED
            return False

        if self.state.expanded_session == session_id:
            self.state.expanded_session = None
        print(f"[ADMIN] {self.user_id} deleted session {session_id}", file=sys.stderr)
        return True

    def close(self):
        if self._subscription:
            self._subscription.close()
            self._subscription = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
