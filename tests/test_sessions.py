"""
Tests for session issuance, validation, login and authorization.
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from config import settings
from services import (
    Capability,
    Namespace,
    Principal,
    issue_token,
    validate_token,
    authenticate,
    authorize,
    MissingToken,
    MalformedToken,
    InvalidSignature,
    ExpiredToken,
    InvalidCredentials,
    Forbidden,
)


def _claims(**overrides):
    now = datetime.now(timezone.utc)
    claims = {
        "sub": "p-1",
        "role": "admin",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
    }
    claims.update(overrides)
    return {k: v for k, v in claims.items() if v is not None}


class TestTokens:
    """Tests for token issue and validation."""

    def test_round_trip(self):
        principal = Principal(principal_id="p-1", role="teacher")
        issued = issue_token(principal)
        assert validate_token(issued.token) == principal

    def test_expiry_window(self):
        issued_at = datetime.now(timezone.utc)
        issued = issue_token(Principal("p-1", "admin"), issued_at=issued_at)
        assert issued.expires_at - issued_at == timedelta(hours=settings.token_ttl_hours)

    def test_expired_token(self):
        long_ago = datetime.now(timezone.utc) - timedelta(hours=settings.token_ttl_hours + 1)
        issued = issue_token(Principal("p-1", "admin"), issued_at=long_ago)
        with pytest.raises(ExpiredToken):
            validate_token(issued.token)

    def test_missing_token(self):
        with pytest.raises(MissingToken):
            validate_token(None)
        with pytest.raises(MissingToken):
            validate_token("")

    def test_malformed_token(self):
        with pytest.raises(MalformedToken):
            validate_token("not-a-token")

    def test_wrong_signature(self):
        token = jwt.encode(_claims(), "some-other-secret", algorithm="HS256")
        with pytest.raises(InvalidSignature):
            validate_token(token)

    def test_unknown_role_is_malformed(self):
        token = jwt.encode(_claims(role="student"), settings.jwt_secret, algorithm="HS256")
        with pytest.raises(MalformedToken):
            validate_token(token)

    def test_missing_subject_is_malformed(self):
        token = jwt.encode(_claims(sub=None), settings.jwt_secret, algorithm="HS256")
        with pytest.raises(MalformedToken):
            validate_token(token)


class TestAuthenticate:
    """Tests for login in both namespaces."""

    def test_teacher_login(self, db, make_teacher, password):
        teacher = make_teacher(email="karim@academy.test")
        issued = authenticate(db, "  KARIM@academy.test ", password, Namespace.TEACHER)

        assert issued.principal == Principal(teacher.id, "teacher")
        assert issued.profile["email"] == "karim@academy.test"
        assert "password_digest" not in issued.profile
        assert validate_token(issued.token) == issued.principal

    def test_staff_login(self, db, make_user, password):
        user = make_user(email="boss@academy.test", role="superadmin")
        issued = authenticate(db, "boss@academy.test", password)
        assert issued.principal == Principal(user.id, "superadmin")

    def test_wrong_password(self, db, make_user):
        make_user(email="boss@academy.test")
        with pytest.raises(InvalidCredentials):
            authenticate(db, "boss@academy.test", "wrong-password")

    def test_unknown_email_same_error(self, db, password):
        with pytest.raises(InvalidCredentials) as exc_info:
            authenticate(db, "nobody@academy.test", password)
        assert exc_info.value.message == "Invalid email or password"

    def test_unknown_email_still_verifies(self, db, password, monkeypatch):
        calls = []
        monkeypatch.setattr("services.sessions.dummy_verify", lambda: calls.append(True))

        with pytest.raises(InvalidCredentials):
            authenticate(db, "nobody@academy.test", password)
        assert calls == [True]

    def test_known_email_skips_dummy_verify(self, db, make_user, password, monkeypatch):
        make_user(email="boss@academy.test")
        calls = []
        monkeypatch.setattr("services.sessions.dummy_verify", lambda: calls.append(True))

        authenticate(db, "boss@academy.test", password)
        assert calls == []

    def test_namespaces_are_separate(self, db, make_teacher, password):
        make_teacher(email="karim@academy.test")
        with pytest.raises(InvalidCredentials):
            authenticate(db, "karim@academy.test", password, Namespace.STAFF)

    def test_empty_credentials(self, db):
        with pytest.raises(InvalidCredentials):
            authenticate(db, "", "")


class TestAuthorize:
    """Tests for the capability gate."""

    def _token(self, role):
        return issue_token(Principal(f"{role}-1", role)).token

    def test_public_capability_needs_no_token(self):
        assert authorize(None, Capability.LIST_GROUPS) is None

    def test_public_capability_ignores_bad_token(self):
        assert authorize("garbage", Capability.SUBMIT_REGISTRATION) is None

    def test_gated_capability_without_token(self):
        with pytest.raises(MissingToken):
            authorize(None, Capability.MANAGE_GRADES)

    def test_admin_allowed(self):
        principal = authorize(self._token("admin"), Capability.MANAGE_GRADES)
        assert principal.role == "admin"

    def test_superadmin_inherits_admin(self):
        principal = authorize(self._token("superadmin"), Capability.MANAGE_STUDENTS)
        assert principal.role == "superadmin"

    def test_admin_forbidden_from_admin_management(self):
        with pytest.raises(Forbidden) as exc_info:
            authorize(self._token("admin"), Capability.MANAGE_ADMINS)
        assert exc_info.value.kind == "Forbidden"
        assert exc_info.value.principal_id == "admin-1"

    def test_teacher_forbidden_from_admin_actions(self):
        with pytest.raises(Forbidden):
            authorize(self._token("teacher"), Capability.MANAGE_GROUPS)
