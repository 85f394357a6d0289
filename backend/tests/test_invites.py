from datetime import datetime, timedelta, timezone

import pytest

from trackcoach import models, schemas
from trackcoach.config import settings
from trackcoach.exceptions import ConflictError, ForbiddenError, InviteUnavailableError
from trackcoach.models import Role
from trackcoach.services import invites


@pytest.fixture
def invite(db_session, coach, make_student):
    student = make_student(coach)
    payload = schemas.ParentInviteCreate(
        student_id=student.id,
        parent_name="Priya Runner",
        parent_email="Priya@Example.com",
    )
    return invites.create_invite(db_session, coach, payload)


def test_invite_code_format(coach):
    code = invites.generate_invite_code(coach.id)
    prefix, coach_part, token = code.split("-")

    assert prefix == settings.INVITE_CODE_PREFIX
    assert coach_part == str(coach.id)[:8].upper()
    assert len(token) == 6
    assert token.isalnum() and token.upper() == token


def test_create_invite_copies_student_and_lowercases_email(invite):
    assert invite.student_name == "Asha Runner"
    assert invite.parent_email == "priya@example.com"
    assert invite.claimed is False


def test_create_invite_for_foreign_student_is_forbidden(db_session, coach, other_coach, make_student):
    theirs = make_student(other_coach)
    payload = schemas.ParentInviteCreate(
        student_id=theirs.id, parent_name="P", parent_email="p@example.com"
    )
    with pytest.raises(ForbiddenError):
        invites.create_invite(db_session, coach, payload)


def test_validate_returns_invite_owner(db_session, invite):
    validation = invites.validate_invite_code(db_session, invite.invite_code)
    assert validation.invite_id == invite.id
    assert validation.coach_id == invite.coach_id
    assert validation.student_id == invite.student_id


def test_validate_unknown_code(db_session):
    with pytest.raises(InviteUnavailableError):
        invites.validate_invite_code(db_session, "COACH-NOPE-000000")


def test_validate_expired_code(db_session, invite):
    invite.expires_at = datetime.now(timezone.utc) - timedelta(days=1)
    db_session.commit()
    with pytest.raises(InviteUnavailableError):
        invites.validate_invite_code(db_session, invite.invite_code)


def test_complete_registration_claims_and_promotes(db_session, invite, make_user):
    user = make_user(Role.COACH)

    validation, claimed = invites.complete_parent_registration(db_session, user, invite.invite_code)

    assert validation.student_id == invite.student_id
    assert claimed.claimed is True
    assert claimed.parent_user_id == user.id
    assert claimed.claimed_at is not None
    db_session.refresh(user)
    assert user.role == Role.PARENT.value
    assert [s.id for s in invites.students_for_parent(db_session, user.id)] == [invite.student_id]


def test_claimed_code_cannot_be_used_again(db_session, invite, make_user):
    invites.complete_parent_registration(db_session, make_user(), invite.invite_code)
    second = make_user()

    with pytest.raises(InviteUnavailableError):
        invites.complete_parent_registration(db_session, second, invite.invite_code)
    db_session.refresh(second)
    assert second.role == Role.COACH.value


def test_racing_claims_have_one_winner(db_session, invite, make_user):
    first, second = make_user(), make_user()
    # both validated before either claimed
    validation = invites.validate_invite_code(db_session, invite.invite_code)
    invites.validate_invite_code(db_session, invite.invite_code)

    invites.claim_invite(db_session, validation.invite_id, first.id)
    db_session.commit()
    with pytest.raises(ConflictError) as excinfo:
        invites.claim_invite(db_session, validation.invite_id, second.id)
    db_session.rollback()

    assert excinfo.value.error_code == "INVITE_ALREADY_CLAIMED"
    stored = db_session.query(models.ParentInvite).filter(models.ParentInvite.id == invite.id).one()
    db_session.refresh(stored)
    assert stored.parent_user_id == first.id


def test_coach_invite_code_prefers_latest_invite(db_session, coach, invite):
    assert invites.coach_invite_code(db_session, coach) == invite.invite_code


def test_coach_invite_code_previews_when_none_exist(db_session, coach):
    code = invites.coach_invite_code(db_session, coach)
    assert code.startswith(f"{settings.INVITE_CODE_PREFIX}-{str(coach.id)[:8].upper()}-")
    assert db_session.query(models.ParentInvite).count() == 0


def test_losing_registration_race_changes_nothing(db_session, invite, make_user, monkeypatch):
    winner, loser = make_user(), make_user()
    # the loser validated before the winner's claim landed
    stale = invites.validate_invite_code(db_session, invite.invite_code)
    invites.complete_parent_registration(db_session, winner, invite.invite_code)
    monkeypatch.setattr(invites, "validate_invite_code", lambda db, code: stale)

    with pytest.raises(ConflictError) as excinfo:
        invites.complete_parent_registration(db_session, loser, invite.invite_code)

    assert excinfo.value.error_code == "INVITE_ALREADY_CLAIMED"
    db_session.expire_all()
    assert db_session.get(models.AppUser, loser.id).role == Role.COACH.value
    stored = db_session.get(models.ParentInvite, invite.id)
    assert stored.parent_user_id == winner.id
    assert invites.students_for_parent(db_session, loser.id) == []
