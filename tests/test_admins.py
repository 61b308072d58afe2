"""
Tests for superadmin bootstrap and admin management.
"""
import pytest

from database import User
from services import (
    register_superadmin,
    register_admin,
    list_admins,
    update_admin,
    delete_admin,
    authenticate,
    Forbidden,
    EmailTaken,
    WeakPassword,
    MissingField,
    InvalidEmailFormat,
    InvalidCredentials,
    NotFound,
)


class TestRegistration:
    """Tests for registering administrative principals."""

    def test_first_superadmin(self, db):
        result = register_superadmin(db, "Head Office", " Boss@Academy.test ", "secret123")
        assert result["user"]["role"] == "superadmin"
        assert result["user"]["email"] == "boss@academy.test"
        assert "password_digest" not in result["user"]

    def test_second_superadmin_refused(self, db):
        register_superadmin(db, "Head Office", "boss@academy.test", "secret123")
        with pytest.raises(Forbidden):
            register_superadmin(db, "Other", "other@academy.test", "secret123")
        assert db.query(User).count() == 1

    def test_register_admin(self, db):
        result = register_admin(db, "Front Desk", "desk@academy.test", "secret123")
        assert result["user"]["role"] == "admin"
        assert [a["email"] for a in list_admins(db)] == ["desk@academy.test"]

    def test_email_taken(self, db, make_user):
        make_user(email="desk@academy.test")
        with pytest.raises(EmailTaken):
            register_admin(db, "Front Desk", "DESK@academy.test", "secret123")

    def test_weak_password(self, db):
        with pytest.raises(WeakPassword):
            register_admin(db, "Front Desk", "desk@academy.test", "12345")

    def test_missing_and_malformed_email(self, db):
        with pytest.raises(MissingField):
            register_admin(db, "Front Desk", None, "secret123")
        with pytest.raises(InvalidEmailFormat):
            register_admin(db, "Front Desk", "desk@", "secret123")


class TestAdminManagement:

    def test_list_excludes_superadmins(self, db, make_user):
        make_user(email="boss@academy.test", role="superadmin")
        make_user(email="desk@academy.test", role="admin")
        assert [a["email"] for a in list_admins(db)] == ["desk@academy.test"]

    def test_update_name_and_password(self, db, make_user, password):
        admin = make_user(email="desk@academy.test")
        result = update_admin(db, admin.id, full_name="Reception", password="new-secret")

        assert result["user"]["full_name"] == "Reception"
        with pytest.raises(InvalidCredentials):
            authenticate(db, "desk@academy.test", password)
        assert authenticate(db, "desk@academy.test", "new-secret").principal.role == "admin"

    def test_update_weak_password(self, db, make_user):
        admin = make_user()
        with pytest.raises(WeakPassword):
            update_admin(db, admin.id, password="123")

    def test_superadmin_is_not_an_admin_record(self, db, make_user):
        boss = make_user(email="boss@academy.test", role="superadmin")
        with pytest.raises(NotFound):
            update_admin(db, boss.id, full_name="Renamed")
        with pytest.raises(NotFound):
            delete_admin(db, boss.id)

    def test_delete(self, db, make_user):
        admin = make_user()
        admin_id = admin.id
        delete_admin(db, admin_id)
        assert list_admins(db) == []
        with pytest.raises(NotFound):
            delete_admin(db, admin_id)
