from datetime import datetime, timedelta, timezone

from climbclub.helpers.catalog import (
    CANCELED,
    PROFILE_MISSING,
    SIGNED_UP,
    SIGNUP_NOT_FOUND,
    TRY_AGAIN,
    SessionCatalog,
    membership_map,
    upcoming_sessions,
)
from climbclub.records import Session, Signup
from climbclub.helpers.time import utcnow
from climbclub.store import StoreError

from conftest import add_session, add_signup, profile_for, save_profile, sign_in_as

NOW = datetime(2026, 10, 20, 12, 0, tzinfo=timezone.utc)


def _session(sid, hours):
    return Session(id=sid, name=sid, session_date=NOW + timedelta(hours=hours))


def test_upcoming_sessions_filters_past_and_sorts_ascending():
    sessions = [_session("later", 48), _session("past", -1), _session("soon", 24), _session("now", 0)]

    result = upcoming_sessions(sessions, NOW)

    assert [s.id for s in result] == ["now", "soon", "later"]


def test_membership_map_points_at_signup_ids():
    signups = [Signup(user_id="u", session_id="s1", id="x1"), Signup(user_id="u", session_id="s2", id="x2")]

    assert membership_map(signups) == {"s1": "x1", "s2": "x2"}


class TestSessionCatalog:
    def test_lists_only_upcoming_sessions(self, services):
        add_session(services, "Two Days", days_from_now=2)
        add_session(services, "Yesterday", days_from_now=-1)
        add_session(services, "Tomorrow", days_from_now=1)
        services.store.add(services.sessions_path, {"name": "No date"})

        with SessionCatalog(services, "member-uid", None) as catalog:
            assert not catalog.loading
            assert [s.name for s in catalog.sessions] == ["Tomorrow", "Two Days"]

    def test_upcoming_is_judged_when_snapshot_arrives(self, services):
        add_session(services, "Tomorrow", days_from_now=1)
        clock = [utcnow()]

        with SessionCatalog(services, "u", None, clock=lambda: clock[0]) as catalog:
            assert len(catalog.sessions) == 1
            # Time passes, but nothing re-filters until the next snapshot
            clock[0] = clock[0] + timedelta(days=30)
            assert len(catalog.sessions) == 1

            add_session(services, "Another", days_from_now=3)
            assert catalog.sessions == []

    def test_sign_up_then_cancel(self, services):
        profile = save_profile(services, "member-uid")
        session_id = add_session(services, "Weekly Climb")

        with SessionCatalog(services, "member-uid", profile) as catalog:
            assert not catalog.is_signed_up(session_id)

            assert catalog.sign_up(session_id) == SIGNED_UP
            assert catalog.is_signed_up(session_id)
            assert catalog.is_disabled(session_id)
            assert catalog.button_label(session_id) == SIGNED_UP

            assert catalog.cancel(session_id) == CANCELED
            assert not catalog.is_signed_up(session_id)

        assert services.store.query(services.signups_path) == []

    def test_signup_copies_profile_snapshot(self, services):
        profile = save_profile(services, "member-uid", name="Alex")
        session_id = add_session(services, "Weekly Climb")

        with SessionCatalog(services, "member-uid", profile) as catalog:
            catalog.sign_up(session_id)

        (doc,) = services.store.query(services.signups_path, sessionId=session_id)
        assert doc.data["userId"] == "member-uid"
        assert doc.data["profileName"] == "Alex"
        assert doc.data["signedUpAt"] is not None

    def test_only_own_signups_count(self, services):
        session_id = add_session(services, "Weekly Climb")
        add_signup(services, profile_for("someone-else"), session_id)

        with SessionCatalog(services, "member-uid", profile_for("member-uid")) as catalog:
            assert not catalog.is_signed_up(session_id)
            assert catalog.button_label(session_id) == "Sign Up"

    def test_sign_up_without_profile(self, services):
        session_id = add_session(services, "Weekly Climb")

        with SessionCatalog(services, "member-uid", None) as catalog:
            assert catalog.sign_up(session_id) == PROFILE_MISSING

        assert services.store.query(services.signups_path) == []

    def test_cancel_without_signup(self, services):
        with SessionCatalog(services, "member-uid", profile_for("member-uid")) as catalog:
            assert catalog.cancel("not-a-session") == SIGNUP_NOT_FOUND

    def test_write_failure_reports_try_again(self, services, monkeypatch):
        session_id = add_session(services, "Weekly Climb")

        def fail(*args, **kwargs):
            raise StoreError("network")

        monkeypatch.setattr(services.store, "add", fail)

        with SessionCatalog(services, "member-uid", profile_for("member-uid")) as catalog:
            assert catalog.sign_up(session_id) == TRY_AGAIN
            assert not catalog.is_signed_up(session_id)

    def test_double_submit_is_not_deduplicated(self, services):
        profile = profile_for("member-uid")
        session_id = add_session(services, "Weekly Climb")

        with SessionCatalog(services, "member-uid", profile) as first, \
                SessionCatalog(services, "member-uid", profile) as second:
            first.sign_up(session_id)
            second.sign_up(session_id)

        assert len(services.store.query(services.signups_path, sessionId=session_id)) == 2

    def test_close_tears_down_both_listeners(self, services):
        catalog = SessionCatalog(services, "member-uid", None)
        assert services.store.listener_count() == 2

        catalog.close()

        assert services.store.listener_count() == 0


class TestSignupRoutes:
    def test_sign_up_and_cancel_buttons(self, client, services):
        sign_in_as(client, services, "member-uid")
        save_profile(services, "member-uid")
        session_id = add_session(services, "Weekly Climb", location="Movement Harlem", waiver_link="movementgyms.com/waiver")

        html = client.get("/").get_data(as_text=True)
        assert "Weekly Climb" in html
        assert "Location: Movement Harlem" in html
        assert 'href="https://movementgyms.com/waiver"' in html
        assert f'action="/sessions/{session_id}/signup"' in html

        resp = client.post(f"/sessions/{session_id}/signup")
        assert resp.status_code == 302

        html = client.get("/").get_data(as_text=True)
        assert SIGNED_UP in html
        assert f'action="/sessions/{session_id}/cancel"' in html

        client.post(f"/sessions/{session_id}/cancel")
        html = client.get("/").get_data(as_text=True)
        assert CANCELED in html
        assert f'action="/sessions/{session_id}/signup"' in html

        # Status is shown once, then the button is back to normal
        html = client.get("/").get_data(as_text=True)
        assert CANCELED not in html

    def test_empty_catalog_message(self, client, services):
        sign_in_as(client, services, "member-uid")
        save_profile(services, "member-uid")

        html = client.get("/").get_data(as_text=True)

        assert "No upcoming sessions have been posted by an admin yet" in html

    def test_stream_is_event_stream(self, client, services):
        sign_in_as(client, services, "member-uid")

        resp = client.get("/sessions/stream", buffered=False)

        assert resp.status_code == 200
        assert resp.mimetype == "text/event-stream"
        resp.close()

    def test_disconnect_releases_stream_listeners(self, client, services):
        sign_in_as(client, services, "member-uid")
        add_session(services, "Weekly Climb")

        resp = client.get("/sessions/stream", buffered=False)
        first = next(iter(resp.response))

        assert b"event: update" in first
        assert b"Weekly Climb" in first
        assert services.store.listener_count() == 2

        resp.close()

        assert services.store.listener_count() == 0
