import sys
from dataclasses import dataclass
from typing import Optional

from climbclub.auth import AuthError, AuthService


@dataclass(frozen=True)
class Identity:
    user_id: Optional[str]
    is_auth_ready: bool


NOT_READY = Identity(user_id=None, is_auth_ready=False)


class IdentityResolver:
    """
    Turn whatever credential the browser carries into a user id.

    - The public roster page needs no identity and is ready immediately.
    - A credential the auth service still knows is reused.
    - A credential it no longer knows ("no user") is replaced with a fresh
      anonymous one straight away.
    - No credential: sign in with the pre-issued token if one is configured,
      otherwise anonymously.

    Sign-in failures are logged and leave the identity not ready; nothing
    retries on its own.
    """

    def __init__(self, auth: AuthService, initial_auth_token: Optional[str] = None):
        self.auth = auth
        self.initial_auth_token = initial_auth_token

    def resolve(self, page: Optional[str] = None, credential_uid: Optional[str] = None) -> Identity:
        if page == "roster":
            return Identity(user_id=None, is_auth_ready=True)

        try:
            if credential_uid:
                user = self.auth.current_user(credential_uid)
                if user:
                    return Identity(user_id=user.uid, is_auth_ready=True)

                print(f"[AUTH] Credential {credential_uid} has no user, signing in again", file=sys.stderr)
                user = self.auth.sign_in_anonymously()
            elif self.initial_auth_token:
                user = self.auth.sign_in_with_custom_token(self.initial_auth_token)
            else:
                user = self.auth.sign_in_anonymously()
        except AuthError as e:
            print(f"[AUTH] Error during automated sign-in: {e}", file=sys.stderr)
            return NOT_READY

        return Identity(user_id=user.uid, is_auth_ready=True)
