"""
Mint a custom sign-in token for a known user id.

Put the printed value in INITIAL_AUTH_TOKEN so browsers on this deployment
sign in as that user instead of a fresh anonymous one.

    python issue_token.py <uid>
"""
import sys
from dotenv import load_dotenv

load_dotenv()

from climbclub import create_app
from climbclub.services import get_services

app = create_app()

def main(argv):
    if len(argv) != 2 or not argv[1].strip():
        print(__doc__, file=sys.stderr)
        return 2

    with app.app_context():
        token = get_services().auth.issue_custom_token(argv[1].strip())
    print(token)
    return 0

if __name__ == "__main__":
    sys.exit(main(sys.argv))
