import sys
from climbclub.config import RESEND_API_KEY, RESEND_FROM_EMAIL
import resend
from markupsafe import escape

def normalize_email(email: str) -> str:
    return (email or "").strip().lower()

def send_roster_link_via_email(email: str, session_name: str, roster_url: str) -> bool:
    """
    Email a gym (or anyone) the live roster link for a session.

    - If RESEND_API_KEY is not set, just log to stderr (local dev).
    Returns True if the link was handed off (or logged in dev).
    """
    # Dev / fallback path
    if not RESEND_API_KEY:
        print(f"[ROSTER LINK - DEV ONLY] {email} -> {roster_url}", file=sys.stderr)
        return True

    safe_name = escape(session_name)
    safe_url = escape(roster_url)

    html = f"""
      <div style="font-family: system-ui, -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; padding: 16px;">
        <p>Hi there,</p>
        <p>Here is the live sign-up roster for <strong>{safe_name}</strong>.
           It updates on its own as climbers sign up, so you only need this link once.</p>
        <p style="margin: 12px 0;">
          <a href="{safe_url}" style="display: inline-block; padding: 10px 14px; border-radius: 10px; background: #6b21a8; color: #fff; text-decoration: none;">
            Open live roster
          </a>
        </p>
        <p style="color:#667; font-size: 13px;">If the button doesn't work, copy/paste this link:</p>
        <p style="font-size: 12px; word-break: break-all;">{safe_url}</p>
      </div>
    """

    try:
        resend.api_key = RESEND_API_KEY
        params = {
            "from": RESEND_FROM_EMAIL,
            "to": [email],
            "subject": f"Live roster: {session_name}",
            "html": html,
        }
        resend.Emails.send(params)
        print(f"[ROSTER LINK] Sent roster link to {email}", file=sys.stderr)
        return True
    except Exception as e:
        # Don't crash the admin page if email fails; just log it.
        print(f"[ROSTER LINK] Failed to send via Resend: {e}", file=sys.stderr)
        return False
