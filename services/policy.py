"""
Role policy for the Academy backend.

A single capability table maps every privileged action to the tier that may
perform it. ``is_allowed`` is the only place the role hierarchy is encoded:

- superadmin satisfies superadmin- and admin-gated actions
- admin satisfies admin-gated actions
- teacher satisfies teacher-gated actions
- any principal satisfies authenticated actions
- everyone, including anonymous callers, satisfies public actions
"""
from enum import Enum
from typing import Optional, Dict, FrozenSet


class Tier(str, Enum):
    """Access tiers a capability can be gated on."""
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    TEACHER = "teacher"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class Capability(str, Enum):
    """Named actions exposed by the services layer."""
    # Principals
    REGISTER_SUPERADMIN = "register_superadmin"
    MANAGE_ADMINS = "manage_admins"
    # Grades
    LIST_GRADES = "list_grades"
    MANAGE_GRADES = "manage_grades"
    VIEW_GRADE_STUDENTS = "view_grade_students"
    VIEW_GRADE_GROUPS = "view_grade_groups"
    # Groups
    LIST_GROUPS = "list_groups"
    MANAGE_GROUPS = "manage_groups"
    VIEW_GROUP_STUDENTS = "view_group_students"
    # Teachers
    LIST_TEACHERS = "list_teachers"
    VIEW_TEACHER_GROUPS = "view_teacher_groups"
    MANAGE_TEACHERS = "manage_teachers"
    MANAGE_OWN_PROFILE = "manage_own_profile"
    # Students
    MANAGE_STUDENTS = "manage_students"
    # Registrations
    SUBMIT_REGISTRATION = "submit_registration"
    REVIEW_REGISTRATIONS = "review_registrations"
    # Programs
    LIST_PROGRAMS = "list_programs"
    MANAGE_PROGRAMS = "manage_programs"


CAPABILITIES: Dict[Capability, Tier] = {
    Capability.REGISTER_SUPERADMIN: Tier.PUBLIC,
    Capability.MANAGE_ADMINS: Tier.SUPERADMIN,
    Capability.LIST_GRADES: Tier.PUBLIC,
    Capability.MANAGE_GRADES: Tier.ADMIN,
    Capability.VIEW_GRADE_STUDENTS: Tier.ADMIN,
    Capability.VIEW_GRADE_GROUPS: Tier.PUBLIC,
    Capability.LIST_GROUPS: Tier.PUBLIC,
    Capability.MANAGE_GROUPS: Tier.ADMIN,
    Capability.VIEW_GROUP_STUDENTS: Tier.AUTHENTICATED,
    Capability.LIST_TEACHERS: Tier.PUBLIC,
    Capability.VIEW_TEACHER_GROUPS: Tier.PUBLIC,
    Capability.MANAGE_TEACHERS: Tier.ADMIN,
    Capability.MANAGE_OWN_PROFILE: Tier.TEACHER,
    Capability.MANAGE_STUDENTS: Tier.ADMIN,
    Capability.SUBMIT_REGISTRATION: Tier.PUBLIC,
    Capability.REVIEW_REGISTRATIONS: Tier.ADMIN,
    Capability.LIST_PROGRAMS: Tier.PUBLIC,
    Capability.MANAGE_PROGRAMS: Tier.ADMIN,
}

# Roles that satisfy each gated tier
_TIER_ROLES: Dict[Tier, FrozenSet[str]] = {
    Tier.AUTHENTICATED: frozenset({"superadmin", "admin", "teacher"}),
    Tier.TEACHER: frozenset({"teacher"}),
    Tier.ADMIN: frozenset({"superadmin", "admin"}),
    Tier.SUPERADMIN: frozenset({"superadmin"}),
}


def tier_for(capability: Capability) -> Tier:
    """Return the tier a capability is gated on."""
    return CAPABILITIES[Capability(capability)]


def is_public(capability: Capability) -> bool:
    """Check if a capability needs no principal at all."""
    return tier_for(capability) is Tier.PUBLIC


def is_allowed(role: Optional[str], capability: Capability) -> bool:
    """
    Decide whether a role may perform a capability.

    Args:
        role: Principal role, or None for an anonymous caller
        capability: The action being attempted

    Returns:
        True if allowed, False otherwise
    """
    tier = tier_for(capability)
    if tier is Tier.PUBLIC:
        return True
    if role is None:
        return False
    return role in _TIER_ROLES[tier]
