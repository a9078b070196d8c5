import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from itsdangerous import BadSignature, URLSafeSerializer
from sqlalchemy.exc import SQLAlchemyError

from climbclub.models import Credential
from climbclub.helpers.url import new_user_id

ANONYMOUS = "anonymous"
CUSTOM = "custom"


class AuthError(Exception):
    """Sign-in could not be completed."""


@dataclass(frozen=True)
class AuthUser:
    uid: str
    provider: str = ANONYMOUS


class AuthService:
    """
    Anonymous and custom-token sign-in.

    A credential is just a row keyed by an opaque uid; the browser keeps the
    uid in Flask's signed session cookie. Custom tokens are signed with the
    app's SECRET_KEY so operators can pin a known uid (see issue_token.py).
    """

    def __init__(self, db, secret_key: str):
        self.db = db
        self._tokens = URLSafeSerializer(secret_key, salt="climbclub-custom-token")

    def sign_in_anonymously(self) -> AuthUser:
        return self._record(new_user_id(), ANONYMOUS)

    def sign_in_with_custom_token(self, token: str) -> AuthUser:
        try:
            payload = self._tokens.loads(token or "")
        except BadSignature as e:
            raise AuthError("custom token rejected") from e

        uid = payload.get("uid") if isinstance(payload, dict) else None
        if not uid:
            raise AuthError("custom token carries no uid")

        return self._record(str(uid), CUSTOM)

    def issue_custom_token(self, uid: str) -> str:
        return self._tokens.dumps({"uid": uid})

    def current_user(self, uid: Optional[str]) -> Optional[AuthUser]:
        """None means "no user": the uid was never issued or has been revoked."""
        if not uid:
            return None
        try:
            cred = Credential.query.filter_by(uid=uid).first()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise AuthError(f"credential lookup failed: {e}") from e
        if not cred:
            return None
        return AuthUser(uid=cred.uid, provider=cred.provider)

    def revoke(self, uid: str) -> None:
        try:
            Credential.query.filter_by(uid=uid).delete()
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise AuthError(f"revoke failed: {e}") from e

    def _record(self, uid: str, provider: str) -> AuthUser:
        try:
            cred = Credential.query.filter_by(uid=uid).first()
            if not cred:
                cred = Credential(uid=uid, provider=provider)
                self.db.session.add(cred)
            cred.last_sign_in_at = datetime.utcnow()
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise AuthError(f"could not record credential: {e}") from e

        print(f"[AUTH] Signed in {uid} ({provider})", file=sys.stderr)
        return AuthUser(uid=cred.uid, provider=cred.provider)
