"""
AccountHub Backend — Form Binding & CSRF Tests
================================================

What:  Tests for FormFactory / Form binding and CsrfTokenManager.

What we test:
    ✅ Valid payloads bind onto the entity only through get_data()
    ✅ Unknown fields are rejected
    ✅ CSRF-protected forms reject missing, forged, foreign and expired tokens
    ✅ Forms with CSRF disabled ignore tokens entirely
"""

import pytest

from accounthub.forms import CSRF_FIELD
from accounthub.models.group import Group
from accounthub.schemas.group import GroupForm
from accounthub.schemas.user import RegistrationForm


class TestCsrfTokenManager:

    def test_fresh_token_is_valid(self, csrf_manager):
        token = csrf_manager.generate_token("registration", now=1000)

        assert csrf_manager.is_token_valid("registration", token, now=1010)

    def test_token_is_bound_to_intention(self, csrf_manager):
        token = csrf_manager.generate_token("registration", now=1000)

        assert not csrf_manager.is_token_valid("profile", token, now=1010)

    def test_expired_token(self, csrf_manager):
        token = csrf_manager.generate_token("registration", now=1000)

        assert not csrf_manager.is_token_valid("registration", token, now=1000 + 3601)

    @pytest.mark.parametrize("token", [None, "", "garbage", "abc.def", "1000.deadbeef"])
    def test_malformed_or_forged(self, csrf_manager, token):
        assert not csrf_manager.is_token_valid("registration", token, now=1010)


class TestFormBinding:

    def test_valid_payload_binds_on_get_data(self, form_factory):
        group = Group(name="")
        form = form_factory.create_named(None, GroupForm, group, csrf_protection=False)

        form.handle_request({"name": " admins ", "roles": ["ROLE_ADMIN"]})

        assert form.is_submitted()
        assert form.is_valid()
        # Nothing applied yet
        assert group.name == ""

        bound = form.get_data()
        assert bound is group
        assert group.name == "admins"
        assert group.enabled is False
        assert group.roles == ["ROLE_ADMIN"]

    def test_invalid_payload_never_binds(self, form_factory):
        group = Group(name="before")
        form = form_factory.create_named(None, GroupForm, group, csrf_protection=False)

        form.handle_request({"name": "after", "extra": True})

        assert not form.is_valid()
        assert form.errors == [{"field": "extra", "message": "Extra inputs are not permitted"}]
        assert form.get_data().name == "before"

    def test_added_error_invalidates(self, form_factory):
        form = form_factory.create_named(None, GroupForm, Group(name=""), csrf_protection=False)
        form.handle_request({"name": "admins"})

        form.add_error("name", "taken")

        assert not form.is_valid()

    @pytest.mark.parametrize("payload", [[{"name": "admins"}], "admins", 42, True])
    def test_non_object_payload_is_a_form_error(self, form_factory, payload):
        group = Group(name="before")
        form = form_factory.create_named(None, GroupForm, group, csrf_protection=False)

        form.handle_request(payload)

        assert form.is_submitted()
        assert not form.is_valid()
        assert form.errors == [{"field": "form", "message": "The submitted data must be a JSON object."}]
        assert form.get_data().name == "before"

    def test_unsubmitted_form_is_not_valid(self, form_factory):
        form = form_factory.create_named(None, GroupForm, Group(name=""))

        assert not form.is_submitted()
        assert not form.is_valid()

    def test_csrf_disabled_ignores_token_field(self, form_factory):
        form = form_factory.create_named(None, GroupForm, Group(name=""), csrf_protection=False)

        form.handle_request({"name": "admins"})

        assert form.is_valid()


class TestCsrfProtectedForm:

    payload = {
        "username": "alice",
        "email": "alice@example.com",
        "plain_password": "s3cret-pass",
        "plain_password_confirmation": "s3cret-pass",
    }

    def test_missing_token_is_rejected(self, form_factory):
        form = form_factory.create_named("registration", RegistrationForm)

        form.handle_request(dict(self.payload))

        assert not form.is_valid()
        assert form.errors[0]["field"] == CSRF_FIELD

    def test_token_for_other_form_is_rejected(self, form_factory, csrf_manager):
        form = form_factory.create_named("registration", RegistrationForm)

        form.handle_request({**self.payload, CSRF_FIELD: csrf_manager.generate_token("profile")})

        assert not form.is_valid()

    def test_valid_token_is_accepted(self, form_factory, csrf_manager):
        form = form_factory.create_named("registration", RegistrationForm)

        form.handle_request({**self.payload, CSRF_FIELD: csrf_manager.generate_token("registration")})

        assert form.is_valid()

    def test_unnamed_form_uses_type_name_as_intention(self, form_factory, csrf_manager):
        form = form_factory.create_named(None, GroupForm, Group(name=""))

        form.handle_request({"name": "admins", CSRF_FIELD: csrf_manager.generate_token("GroupForm")})

        assert form.is_valid()


class TestRegistrationForm:

    def test_password_mismatch(self, form_factory):
        form = form_factory.create_named("registration", RegistrationForm, csrf_protection=False)

        form.handle_request({
            "username": "alice",
            "email": "alice@example.com",
            "plain_password": "s3cret-pass",
            "plain_password_confirmation": "other-pass",
        })

        assert not form.is_valid()
        assert form.errors[0]["field"] == "plain_password_confirmation"

    def test_invalid_email(self, form_factory):
        form = form_factory.create_named("registration", RegistrationForm, csrf_protection=False)

        form.handle_request({
            "username": "alice",
            "email": "not-an-email",
            "plain_password": "s3cret-pass",
            "plain_password_confirmation": "s3cret-pass",
        })

        assert [e["field"] for e in form.errors] == ["email"]
