import secrets
from urllib.parse import urlencode

def new_document_id() -> str:
    """20 url-safe characters, the same shape as generated store ids."""
    return secrets.token_urlsafe(15)

def new_user_id() -> str:
    return secrets.token_urlsafe(21)

def roster_link(base_url: str, session_id: str) -> str:
    """
    Shareable public roster URL: <base>?page=roster&session=<id>
    """
    base = (base_url or "").split("?", 1)[0]
    return f"{base}?{urlencode({'page': 'roster', 'session': session_id})}"

def waiver_href(link: str) -> str:
    """Waiver links are typed by admins and often lack a scheme."""
    link = (link or "").strip()
    if not link:
        return ""
    if link.startswith("http"):
        return link
    return f"https://{link}"
