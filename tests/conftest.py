from datetime import timedelta

import pytest

from climbclub import create_app
from climbclub.extensions import db
from climbclub.records import Profile, Session, Signup
from climbclub.services import get_services
from climbclub.helpers.admin import ADMIN_CONSOLE_STATE
from climbclub.helpers.time import utcnow

ADMIN_ID = "admin-uid"


@pytest.fixture
def app():
    """
    Fresh app on an in-memory SQLite database for every test.
    """
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "SECRET_KEY": "test-secret",
            "APP_ID": "test-app",
            "ADMIN_USER_IDS": f"{ADMIN_ID}, other-admin-uid",
            "INITIAL_AUTH_TOKEN": None,
            "CLUB_TIMEZONE": "America/New_York",
            "STREAM_KEEPALIVE_SECONDS": 0.01,
        }
    )
    ADMIN_CONSOLE_STATE.clear()

    yield app

    ADMIN_CONSOLE_STATE.clear()
    with app.app_context():
        db.drop_all()


@pytest.fixture
def services(app):
    with app.app_context():
        yield get_services(app)


@pytest.fixture
def client(app):
    return app.test_client()


def sign_in_as(client, services, uid):
    """Give this test client a known, recorded credential."""
    services.auth.sign_in_with_custom_token(services.auth.issue_custom_token(uid))
    with client.session_transaction() as sess:
        sess["uid"] = uid


def profile_for(uid, name="Sam Climber"):
    return Profile(
        user_id=uid,
        name=name,
        emplid="12345678",
        phone="(555) 123-4567",
        email="sam.climber@gmail.com",
        citymail="SClimber001@citymail.cuny.edu",
        address="123 Main St, New York, NY 10001",
        emergency_contact="Jane Climber - (555) 123-4567",
        waiver_checked=True,
    )


def save_profile(services, uid, name="Sam Climber"):
    profile = profile_for(uid, name)
    services.store.set(services.profiles_path, uid, profile.to_document())
    return profile


def add_session(services, name, days_from_now=1, **extra):
    s = Session(
        id="",
        name=name,
        session_date=utcnow() + timedelta(days=days_from_now),
        created_by=ADMIN_ID,
        **extra,
    )
    return services.store.add(services.sessions_path, s.to_document())


def add_signup(services, profile, session_id, signed_up_at=None):
    signup = Signup.for_profile(profile, session_id)
    doc = signup.to_document()
    if signed_up_at is not None:
        doc["signedUpAt"] = signed_up_at
    return services.store.add(services.signups_path, doc)


PROFILE_FORM = {
    "name": "Sam Climber",
    "emplid": "12345678",
    "phone": "(555) 123-4567",
    "email": "sam.climber@gmail.com",
    "citymail": "SClimber001@citymail.cuny.edu",
    "address": "123 Main St, New York, NY 10001",
    "emergency_contact": "Jane Climber - (555) 123-4567",
    "waiver_checked": "on",
}
