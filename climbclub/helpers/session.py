from flask import g, session

from climbclub.helpers.identity import IdentityResolver, Identity

def current_identity(services, page=None) -> Identity:
    """
    Resolve (once per request) the user behind this browser and keep the
    credential in the signed session cookie.
    """
    if "identity" in g:
        return g.identity

    resolver = IdentityResolver(services.auth, services.initial_auth_token)
    identity = resolver.resolve(page=page, credential_uid=session.get("uid"))

    if identity.user_id and identity.user_id != session.get("uid"):
        session["uid"] = identity.user_id
        session.permanent = True

    g.identity = identity
    return identity

def set_signup_status(session_id: str, message: str):
    statuses = dict(session.get("signup_status") or {})
    statuses[session_id] = message
    session["signup_status"] = statuses

def pop_signup_statuses() -> dict:
    return session.pop("signup_status", None) or {}
