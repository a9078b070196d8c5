# seed_sessions.py
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

from climbclub import create_app
from climbclub.records import Session
from climbclub.services import get_services
from climbclub.helpers.time import utcnow

app = create_app()

def main(num_sessions=4):
    with app.app_context():
        services = get_services()
        existing = len(services.store.query(services.sessions_path))
        print(f"Existing sessions: {existing}")

        # One a week, starting tomorrow at the same time of day
        start = utcnow().replace(second=0, microsecond=0) + timedelta(days=1)
        for i in range(num_sessions):
            s = Session(
                id="",
                name=f"Weekly Climb #{existing + i + 1}",
                session_date=start + timedelta(weeks=i),
                location="Movement Harlem",
                price="$15 (with gear)",
                description="Bouldering session. All levels welcome!",
                created_by="seed",
            )
            services.store.add(services.sessions_path, s.to_document())

        total = len(services.store.query(services.sessions_path))
        print(f"Now have {total} sessions in the DB.")

if __name__ == "__main__":
    main()
