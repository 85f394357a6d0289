# backend/trackcoach/permissions.py

"""
Role based authorization.

Each role maps to a fixed permission set. Routes declare the permission
they need with ``require_permission``; ownership of a specific row is then
checked with ``ensure_owner``.
"""
from enum import Enum
from typing import Dict, FrozenSet

from fastapi import Depends
from sqlalchemy.orm import Session

from trackcoach import models
from trackcoach.auth import get_current_user
from trackcoach.exceptions import ForbiddenError
from trackcoach.models import Role


class Permission(str, Enum):
    VIEW_ROSTER = "view_roster"
    MUTATE_ROSTER = "mutate_roster"
    MANAGE_EVENTS = "manage_events"
    RECORD_PERFORMANCE = "record_performance"
    MARK_ATTENDANCE = "mark_attendance"
    MANAGE_INVITES = "manage_invites"
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_LINKED_STUDENTS = "view_linked_students"


_COACH_PERMISSIONS = frozenset({
    Permission.VIEW_ROSTER,
    Permission.MUTATE_ROSTER,
    Permission.MANAGE_EVENTS,
    Permission.RECORD_PERFORMANCE,
    Permission.MARK_ATTENDANCE,
    Permission.MANAGE_INVITES,
    Permission.VIEW_DASHBOARD,
})

ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.COACH: _COACH_PERMISSIONS,
    Role.ADMIN: _COACH_PERMISSIONS,
    Role.PARENT: frozenset({Permission.VIEW_LINKED_STUDENTS}),
}


def role_of(user: models.AppUser) -> Role:
    try:
        return Role(user.role)
    except ValueError:
        raise ForbiddenError(f"Unknown role: {user.role}")


def has_permission(role: Role, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def require_permission(permission: Permission):
    """FastAPI dependency returning the current user if their role grants ``permission``."""
    def wrapper(current_user: models.AppUser = Depends(get_current_user)):
        if not has_permission(role_of(current_user), permission):
            raise ForbiddenError("Forbidden: Insufficient role")
        return current_user
    return wrapper


def ensure_owner(resource, user: models.AppUser, detail: str = "Access denied") -> None:
    """Reject unless ``resource.coach_id`` is the acting user."""
    if resource.coach_id != user.id:
        raise ForbiddenError(detail)


def ensure_can_view_student(db: Session, user: models.AppUser, student: models.Student) -> None:
    """Coaches see their own students; parents see students linked by a claimed invite."""
    role = role_of(user)
    if has_permission(role, Permission.VIEW_ROSTER):
        ensure_owner(student, user)
        return
    if has_permission(role, Permission.VIEW_LINKED_STUDENTS):
        linked = db.query(models.ParentInvite.id).filter(
            models.ParentInvite.student_id == student.id,
            models.ParentInvite.parent_user_id == user.id,
            models.ParentInvite.claimed.is_(True),
        ).first()
        if linked:
            return
    raise ForbiddenError()
