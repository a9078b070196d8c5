import sys
from datetime import datetime
from typing import Callable, Optional

from climbclub.records import Profile, Session, Signup, read_records
from climbclub.store import StoreError
from climbclub.helpers.time import as_utc, utcnow

SIGNING_UP = "Signing up..."
SIGNED_UP = "Signed up!"
CANCELING = "Canceling..."
CANCELED = "Canceled."
PROFILE_MISSING = "Error: Profile missing."
SIGNUP_NOT_FOUND = "Error: Signup not found."
TRY_AGAIN = "Error. Please try again."


def upcoming_sessions(sessions, now: datetime) -> list:
    """Sessions dated now or later, soonest first."""
    now = as_utc(now)
    future = [s for s in sessions if as_utc(s.session_date) >= now]
    return sorted(future, key=lambda s: as_utc(s.session_date))


def membership_map(signups) -> dict:
    """session id -> signup document id, for the user's own signups."""
    return {s.session_id: s.id for s in signups}


class SessionCatalog:
    """
    Member-facing list of upcoming sessions plus the user's own signups.

    Two live subscriptions feed it. State only changes when a snapshot
    arrives, never optimistically, so after sign_up()/cancel() the
    membership map reflects the write only once the listener has fired.
    """

    def __init__(
        self,
        services,
        user_id: str,
        profile: Optional[Profile],
        clock: Callable[[], datetime] = utcnow,
        on_change: Optional[Callable] = None,
    ):
        self.services = services
        self.user_id = user_id
        self.profile = profile
        self._clock = clock
        self._on_change = on_change

        self.sessions: list[Session] = []
        self.signups: dict[str, str] = {}
        self.status: dict[str, str] = {}
        self.loading = True

        store = services.store
        self._subscriptions = [
            store.watch_query(services.sessions_path, self._on_sessions, self._on_sessions_error),
        ]
        if user_id:
            self._subscriptions.append(
                store.watch_query(
                    services.signups_path,
                    self._on_signups,
                    self._on_signups_error,
                    userId=user_id,
                )
            )

    # --- snapshot handlers ---

    def _on_sessions(self, snapshots):
        # "Upcoming" is judged when the snapshot arrives, not on a timer
        records = read_records(snapshots, Session, "session")
        self.sessions = upcoming_sessions(records, self._clock())
        self.loading = False
        self._changed()

    def _on_sessions_error(self, error):
        print(f"[CATALOG] Error fetching sessions: {error}", file=sys.stderr)
        self.loading = False
        self._changed()

    def _on_signups(self, snapshots):
        self.signups = membership_map(read_records(snapshots, Signup, "signup"))
        self._changed()

    def _on_signups_error(self, error):
        print(f"[CATALOG] Error fetching signups for {self.user_id}: {error}", file=sys.stderr)

    def _changed(self):
        if self._on_change:
            self._on_change(self)

    # --- queries ---

    def is_signed_up(self, session_id: str) -> bool:
        return session_id in self.signups

    def button_label(self, session_id: str) -> str:
        if session_id in self.status:
            return self.status[session_id]
        return "Cancel Sign-Up" if self.is_signed_up(session_id) else "Sign Up"

    def is_disabled(self, session_id: str) -> bool:
        return bool(self.status.get(session_id))

    # --- actions ---

    def sign_up(self, session_id: str) -> str:
        if not self.profile:
            self.status[session_id] = PROFILE_MISSING
            return self.status[session_id]

        self.status[session_id] = SIGNING_UP
        signup = Signup.for_profile(self.profile, session_id)
        try:
            self.services.store.add(self.services.signups_path, signup.to_document())
        except StoreError as e:
            print(f"[SIGNUP] Error signing up {self.user_id} for {session_id}: {e}", file=sys.stderr)
            self.status[session_id] = TRY_AGAIN
            return self.status[session_id]

        self.status[session_id] = SIGNED_UP
        return self.status[session_id]

    def cancel(self, session_id: str) -> str:
        signup_id = self.signups.get(session_id)
        if not signup_id:
            self.status[session_id] = SIGNUP_NOT_FOUND
            return self.status[session_id]

        self.status[session_id] = CANCELING
        try:
            self.services.store.delete(self.services.signups_path, signup_id)
        except StoreError as e:
            print(f"[SIGNUP] Error canceling signup {signup_id}: {e}", file=sys.stderr)
            self.status[session_id] = TRY_AGAIN
            return self.status[session_id]

        self.status[session_id] = CANCELED
        return self.status[session_id]

    def close(self):
        for sub in self._subscriptions:
            sub.close()
        self._subscriptions = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
