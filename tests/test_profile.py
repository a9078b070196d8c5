from climbclub.helpers.identity import Identity
from climbclub.helpers.profile import (
    CREATE_FAILED,
    CREATED,
    MISSING_FIELDS,
    WAIVER_REQUIRED,
    ProfileGate,
)
from climbclub.store import StoreError

from conftest import PROFILE_FORM, save_profile, sign_in_as

READY = Identity(user_id="member-uid", is_auth_ready=True)


class TestProfileGate:
    def test_not_ready_keeps_loading(self, services):
        with ProfileGate(services, Identity(None, False)) as gate:
            assert gate.loading
            assert not gate.needs_profile

    def test_no_document_means_profile_form(self, services):
        with ProfileGate(services, READY) as gate:
            assert not gate.loading
            assert gate.needs_profile

    def test_existing_profile_is_loaded(self, services):
        save_profile(services, "member-uid", name="Alex")

        with ProfileGate(services, READY) as gate:
            assert not gate.needs_profile
            assert gate.profile.name == "Alex"

    def test_missing_field_is_rejected_without_writing(self, services):
        form = dict(PROFILE_FORM, phone="  ")

        with ProfileGate(services, READY) as gate:
            assert not gate.create_profile(form)
            assert gate.status == MISSING_FIELDS

        assert services.store.query(services.profiles_path) == []

    def test_unchecked_waiver_is_rejected(self, services):
        form = dict(PROFILE_FORM)
        form.pop("waiver_checked")

        with ProfileGate(services, READY) as gate:
            assert not gate.create_profile(form)
            assert gate.status == WAIVER_REQUIRED

    def test_create_flips_gate_via_listener(self, services):
        with ProfileGate(services, READY) as gate:
            assert gate.create_profile(PROFILE_FORM)

            assert gate.status == CREATED
            assert gate.profile is not None
            assert gate.profile.created_at is not None
            assert not gate.needs_profile

    def test_repeat_create_overwrites_single_record(self, services):
        with ProfileGate(services, READY) as gate:
            gate.create_profile(PROFILE_FORM)
            gate.create_profile(dict(PROFILE_FORM, name="Sam Renamed"))

        docs = services.store.query(services.profiles_path)
        assert len(docs) == 1
        assert docs[0].id == "member-uid"
        assert docs[0].data["name"] == "Sam Renamed"

    def test_store_failure_sets_error_status(self, services, monkeypatch):
        def fail(*args, **kwargs):
            raise StoreError("permission denied")

        monkeypatch.setattr(services.store, "set", fail)

        with ProfileGate(services, READY) as gate:
            assert not gate.create_profile(PROFILE_FORM)
            assert gate.status == CREATE_FAILED

    def test_close_releases_listener(self, services):
        gate = ProfileGate(services, READY)
        assert services.store.listener_count(services.profiles_path) == 1

        gate.close()

        assert services.store.listener_count(services.profiles_path) == 0


class TestProfileRoutes:
    def test_new_member_sees_profile_form(self, client):
        html = client.get("/").get_data(as_text=True)

        assert "Create Your Climber Profile" in html
        assert "Available Climbing Sessions" not in html

    def test_invalid_form_rerenders_with_values(self, client, services):
        sign_in_as(client, services, "member-uid")

        resp = client.post("/profile", data=dict(PROFILE_FORM, address=""))

        html = resp.get_data(as_text=True)
        assert resp.status_code == 400
        assert MISSING_FIELDS in html
        assert 'value="Sam Climber"' in html

    def test_valid_form_switches_to_sessions(self, client, services):
        sign_in_as(client, services, "member-uid")

        resp = client.post("/profile", data=PROFILE_FORM)
        assert resp.status_code == 302

        html = client.get("/").get_data(as_text=True)
        assert "Create Your Climber Profile" not in html
        assert "Available Climbing Sessions" in html
