from datetime import datetime, timezone

import pytest

from climbclub.records import (
    ROSTER_HEADERS,
    Profile,
    RecordError,
    Session,
    Signup,
    read_records,
)
from climbclub.store import SERVER_TIMESTAMP, DocumentSnapshot

WHEN = datetime(2026, 10, 20, 22, 0, tzinfo=timezone.utc)


def test_session_reads_blank_optionals_as_none():
    snap = DocumentSnapshot(
        "s1",
        {"name": "Weekly Climb", "sessionDate": WHEN, "location": "", "price": "$15", "waiverLink": "  "},
    )

    s = Session.from_document(snap)

    assert s.id == "s1"
    assert s.session_date == WHEN
    assert s.location is None
    assert s.price == "$15"
    assert s.waiver_link is None
    assert s.description is None


def test_session_without_date_is_rejected():
    with pytest.raises(RecordError):
        Session.from_document(DocumentSnapshot("s1", {"name": "No date"}))


def test_new_session_document_uses_server_timestamp():
    doc = Session(id="", name="Weekly Climb", session_date=WHEN, created_by="admin").to_document()

    assert doc["createdAt"] is SERVER_TIMESTAMP
    assert doc["sessionDate"] == WHEN
    assert doc["createdBy"] == "admin"


def test_profile_requires_every_text_field():
    data = {
        "name": "Sam",
        "emplid": "1",
        "phone": "2",
        "email": "a@b.c",
        "citymail": "c@d.e",
        "address": "x",
        "waiverChecked": True,
    }
    with pytest.raises(RecordError):
        Profile.from_document(DocumentSnapshot("u1", data))

    data["emergencyContact"] = "Jane"
    profile = Profile.from_document(DocumentSnapshot("u1", data))
    assert profile.user_id == "u1"
    assert profile.emergency_contact == "Jane"
    assert profile.waiver_checked is True


def test_signup_copies_profile_fields():
    profile = Profile(
        user_id="u1",
        name="Sam",
        emplid="1",
        phone="2",
        email="a@b.c",
        citymail="c@d.e",
        address="x",
        emergency_contact="Jane",
        waiver_checked=True,
    )

    doc = Signup.for_profile(profile, "s1").to_document()

    assert doc["userId"] == "u1"
    assert doc["sessionId"] == "s1"
    assert doc["profileName"] == "Sam"
    assert doc["profileEmergencyContact"] == "Jane"
    assert doc["signedUpAt"] is SERVER_TIMESTAMP


def test_roster_row_fills_missing_values():
    signup = Signup.from_document(
        DocumentSnapshot("x", {"userId": "u1", "sessionId": "s1", "profileName": "Sam"})
    )

    row = signup.roster_row()

    assert len(row) == len(ROSTER_HEADERS) == 7
    assert row[0] == "Sam"
    assert row[1:] == ("N/A",) * 6


def test_read_records_skips_invalid_documents():
    snaps = [
        DocumentSnapshot("ok", {"name": "Good", "sessionDate": WHEN}),
        DocumentSnapshot("bad", {"name": "Broken"}),
    ]

    records = read_records(snaps, Session, "session")

    assert [r.id for r in records] == ["ok"]
