"""
Tests for the role policy table.
"""
import pytest

from services import Capability, CAPABILITIES, Tier, is_allowed, is_public

ROLES = ["superadmin", "admin", "teacher"]


class TestCapabilityTable:
    """Every capability is gated on exactly one tier."""

    def test_every_capability_has_a_tier(self):
        assert set(CAPABILITIES) == set(Capability)

    @pytest.mark.parametrize("capability", [
        Capability.LIST_GRADES,
        Capability.LIST_GROUPS,
        Capability.LIST_TEACHERS,
        Capability.LIST_PROGRAMS,
        Capability.SUBMIT_REGISTRATION,
        Capability.REGISTER_SUPERADMIN,
    ])
    def test_public_capabilities(self, capability):
        assert is_public(capability)
        assert is_allowed(None, capability)

    def test_manage_admins_is_superadmin_only(self):
        assert is_allowed("superadmin", Capability.MANAGE_ADMINS)
        assert not is_allowed("admin", Capability.MANAGE_ADMINS)
        assert not is_allowed("teacher", Capability.MANAGE_ADMINS)

    def test_teacher_cannot_manage_records(self):
        for capability in (
            Capability.MANAGE_GRADES,
            Capability.MANAGE_GROUPS,
            Capability.MANAGE_STUDENTS,
            Capability.REVIEW_REGISTRATIONS,
        ):
            assert not is_allowed("teacher", capability)

    def test_own_profile_is_teacher_only(self):
        assert is_allowed("teacher", Capability.MANAGE_OWN_PROFILE)
        assert not is_allowed("admin", Capability.MANAGE_OWN_PROFILE)
        assert not is_allowed(None, Capability.MANAGE_OWN_PROFILE)

    def test_any_principal_views_group_students(self):
        for role in ROLES:
            assert is_allowed(role, Capability.VIEW_GROUP_STUDENTS)
        assert not is_allowed(None, Capability.VIEW_GROUP_STUDENTS)


class TestRoleMonotonicity:

    @pytest.mark.parametrize("capability", list(Capability))
    def test_superadmin_can_do_what_admin_can(self, capability):
        if is_allowed("admin", capability):
            assert is_allowed("superadmin", capability)

    @pytest.mark.parametrize("capability", list(Capability))
    def test_anonymous_cannot_do_gated_teacher_actions(self, capability):
        if CAPABILITIES[capability] is not Tier.PUBLIC and is_allowed("teacher", capability):
            assert not is_allowed(None, capability)
