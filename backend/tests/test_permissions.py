import pytest

from trackcoach import models
from trackcoach.exceptions import ForbiddenError
from trackcoach.models import Role
from trackcoach.permissions import (
    ROLE_PERMISSIONS,
    Permission,
    ensure_can_view_student,
    ensure_owner,
    has_permission,
    require_permission,
    role_of,
)


def test_coach_and_admin_share_coach_permissions():
    assert ROLE_PERMISSIONS[Role.COACH] == ROLE_PERMISSIONS[Role.ADMIN]
    assert has_permission(Role.COACH, Permission.RECORD_PERFORMANCE)
    assert not has_permission(Role.COACH, Permission.VIEW_LINKED_STUDENTS)


def test_parent_only_views_linked_students():
    assert ROLE_PERMISSIONS[Role.PARENT] == frozenset({Permission.VIEW_LINKED_STUDENTS})
    assert not has_permission(Role.PARENT, Permission.VIEW_ROSTER)


def test_unknown_role_is_forbidden():
    with pytest.raises(ForbiddenError):
        role_of(models.AppUser(role="athlete"))


def test_require_permission_rejects_parent(parent, coach):
    check = require_permission(Permission.MANAGE_EVENTS)
    assert check(current_user=coach) is coach
    with pytest.raises(ForbiddenError):
        check(current_user=parent)


def test_ensure_owner(coach, other_coach, make_student):
    student = make_student(coach)
    ensure_owner(student, coach)
    with pytest.raises(ForbiddenError):
        ensure_owner(student, other_coach)


def test_parent_sees_student_only_after_claim(db_session, coach, parent, make_student):
    student = make_student(coach)
    invite = models.ParentInvite(
        coach_id=coach.id,
        student_id=student.id,
        invite_code="COACH-TEST-ABC123",
        parent_name="Parent",
        parent_email="parent@example.com",
        student_name=student.name,
        parent_user_id=parent.id,
        claimed=False,
    )
    db_session.add(invite)
    db_session.commit()

    with pytest.raises(ForbiddenError):
        ensure_can_view_student(db_session, parent, student)

    invite.claimed = True
    db_session.commit()
    ensure_can_view_student(db_session, parent, student)


def test_other_coach_cannot_view_student(db_session, coach, other_coach, make_student):
    student = make_student(coach)
    ensure_can_view_student(db_session, coach, student)
    with pytest.raises(ForbiddenError):
        ensure_can_view_student(db_session, other_coach, student)
