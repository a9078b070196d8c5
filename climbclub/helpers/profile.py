import sys
from typing import Mapping, Optional

from climbclub.records import PROFILE_TEXT_FIELDS, Profile, RecordError
from climbclub.store import StoreError

MISSING_FIELDS = "Please fill out all fields."
WAIVER_REQUIRED = (
    "You must confirm you have filled out the Movement Harlem waiver to create a profile."
)
CREATING = "Creating profile..."
CREATED = "Profile created successfully!"
CREATE_FAILED = "Error creating profile. Please try again."

PROFILE_FORM_FIELDS = tuple(attr for attr, _ in PROFILE_TEXT_FIELDS)


def _checked(value) -> bool:
    return str(value or "").strip().lower() in ("1", "on", "true", "yes")


class ProfileGate:
    """
    Watches the signed-in user's profile document and decides which screen
    they get: the one-time profile form, or the session list.
    """

    def __init__(self, services, identity):
        self.services = services
        self.user_id = identity.user_id
        self.is_auth_ready = identity.is_auth_ready
        self.profile: Optional[Profile] = None
        self.loading = True
        self.status = ""
        self._subscription = None

        if not self.is_auth_ready:
            return

        if not self.user_id:
            self.loading = False
            return

        self._subscription = services.store.watch_document(
            services.profiles_path,
            self.user_id,
            self._on_snapshot,
            self._on_error,
        )

    @property
    def needs_profile(self) -> bool:
        return bool(self.user_id) and not self.loading and self.profile is None

    def _on_snapshot(self, snap):
        if snap is None:
            self.profile = None
        else:
            try:
                self.profile = Profile.from_document(snap)
            except RecordError as e:
                print(f"[PROFILE] Stored profile {snap.id} is incomplete: {e}", file=sys.stderr)
                self.profile = None
        self.loading = False

    def _on_error(self, error):
        print(f"[PROFILE] Error fetching profile: {error}", file=sys.stderr)
        self.loading = False

    def create_profile(self, form: Mapping) -> bool:
        """
        Validate and save the profile form. The document id is the user id,
        so a repeat submission overwrites rather than duplicates.
        """
        values = {f: (form.get(f) or "").strip() for f in PROFILE_FORM_FIELDS}

        if not all(values.values()):
            self.status = MISSING_FIELDS
            return False

        if not _checked(form.get("waiver_checked")):
            self.status = WAIVER_REQUIRED
            return False

        self.status = CREATING
        profile = Profile(user_id=self.user_id, waiver_checked=True, **values)
        try:
            self.services.store.set(
                self.services.profiles_path,
                self.user_id,
                profile.to_document(),
            )
        except StoreError as e:
            print(f"[PROFILE] Error creating profile for {self.user_id}: {e}", file=sys.stderr)
            self.status = CREATE_FAILED
            return False

        self.status = CREATED
        return True

    def close(self):
        if self._subscription:
            self._subscription.close()
            self._subscription = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
