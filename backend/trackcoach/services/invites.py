"""
Parent invite service.

An invite binds one parent account to one student of one coach. Each code is
single use: it moves from unclaimed to claimed exactly once, through a
compare-and-set on the ``claimed`` column, so two racing claims cannot both
succeed.
"""
import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from trackcoach import models, schemas, storage
from trackcoach.config import settings
from trackcoach.exceptions import ConflictError, InviteUnavailableError, NotFoundError
from trackcoach.models import Role
from trackcoach.permissions import ensure_owner

logger = logging.getLogger(__name__)

_CODE_ALPHABET = string.ascii_uppercase + string.digits
_CODE_TOKEN_LENGTH = 6


@dataclass(frozen=True)
class InviteValidation:
    invite_id: UUID
    coach_id: UUID
    student_id: UUID


def generate_invite_code(coach_id: UUID) -> str:
    token = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(_CODE_TOKEN_LENGTH))
    return f"{settings.INVITE_CODE_PREFIX}-{str(coach_id)[:8].upper()}-{token}"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(invite: models.ParentInvite, now: Optional[datetime] = None) -> bool:
    if invite.expires_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now > _as_utc(invite.expires_at)


def create_invite(
    db: Session,
    coach: models.AppUser,
    payload: schemas.ParentInviteCreate,
) -> models.ParentInvite:
    student = db.query(models.Student).filter(models.Student.id == payload.student_id).first()
    if not student:
        raise NotFoundError("Student", payload.student_id)
    ensure_owner(student, coach, "Access denied - you can only create invites for your own students")

    expires_in_days = payload.expires_in_days or settings.INVITE_EXPIRY_DAYS
    expires_at = None
    if expires_in_days:
        expires_at = datetime.now(timezone.utc) + timedelta(days=expires_in_days)

    invite = models.ParentInvite(
        coach_id=coach.id,
        student_id=student.id,
        invite_code=generate_invite_code(coach.id),
        parent_name=payload.parent_name,
        parent_email=payload.parent_email.lower(),
        student_name=student.name,
        phone_number=payload.phone_number,
        expires_at=expires_at,
    )
    db.add(invite)
    db.commit()
    db.refresh(invite)
    logger.info("Invite %s created for student %s", invite.id, student.id)
    return invite


def list_invites(db: Session, coach_id: UUID) -> List[models.ParentInvite]:
    return db.query(models.ParentInvite).filter(
        models.ParentInvite.coach_id == coach_id
    ).order_by(models.ParentInvite.created_at.desc()).all()


def coach_invite_code(db: Session, coach: models.AppUser) -> str:
    """The coach's most recent invite code, or a fresh one to show before any invite exists."""
    latest = db.query(models.ParentInvite.invite_code).filter(
        models.ParentInvite.coach_id == coach.id
    ).order_by(models.ParentInvite.created_at.desc()).first()
    if latest:
        return latest[0]
    return generate_invite_code(coach.id)


def validate_invite_code(db: Session, code: str) -> InviteValidation:
    """Look up an invite that can still be claimed. Read-only."""
    invite = db.query(models.ParentInvite).filter(
        models.ParentInvite.invite_code == (code or "").strip()
    ).first()
    if invite is None or invite.claimed or is_expired(invite):
        raise InviteUnavailableError()
    return InviteValidation(invite_id=invite.id, coach_id=invite.coach_id, student_id=invite.student_id)


def claim_invite(db: Session, invite_id: UUID, parent_user_id: UUID) -> None:
    """Mark the invite claimed by ``parent_user_id`` if nobody claimed it first.

    Does not commit; the caller decides the transaction boundary.
    """
    claimed = storage.compare_and_set(
        db,
        models.ParentInvite,
        invite_id,
        expected={"claimed": False},
        values={
            "claimed": True,
            "claimed_at": datetime.now(timezone.utc),
            "parent_user_id": parent_user_id,
        },
    )
    if not claimed:
        logger.warning("Invite %s claim lost to another user", invite_id)
        raise ConflictError("Invite has already been claimed by another user", error_code="INVITE_ALREADY_CLAIMED")


def complete_parent_registration(
    db: Session,
    user: models.AppUser,
    code: str,
) -> Tuple[InviteValidation, models.ParentInvite]:
    """Claim ``code`` for ``user`` and promote the account to parent, atomically."""
    validation = validate_invite_code(db, code)
    try:
        claim_invite(db, validation.invite_id, user.id)
        user.role = Role.PARENT.value
        db.commit()
    except Exception:
        db.rollback()
        raise

    invite = db.query(models.ParentInvite).filter(models.ParentInvite.id == validation.invite_id).one()
    logger.info(
        "Invite %s claimed",
        invite.id,
        extra={"extra_fields": {"invite_id": str(invite.id), "parent_user_id": str(user.id)}},
    )
    return validation, invite


def students_for_parent(db: Session, parent_user_id: UUID) -> List[models.Student]:
    return db.query(models.Student).join(
        models.ParentInvite, models.ParentInvite.student_id == models.Student.id
    ).filter(
        models.ParentInvite.parent_user_id == parent_user_id,
        models.ParentInvite.claimed.is_(True),
    ).distinct().all()
