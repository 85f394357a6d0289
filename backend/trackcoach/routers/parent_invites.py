# backend/trackcoach/routers/parent_invites.py

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from trackcoach import models, schemas
from trackcoach.auth import get_current_user
from trackcoach.db import get_db
from trackcoach.permissions import Permission, require_permission
from trackcoach.services import invites

router = APIRouter(prefix="/api/parent-invites", tags=["Parent Invites"])

# Registration is completed under /api/auth as well
registration_router = APIRouter(prefix="/api/auth", tags=["Auth"])

manage_invites = require_permission(Permission.MANAGE_INVITES)


# --- List the coach's invites ---
@router.get("", response_model=List[schemas.ParentInviteOut])
def list_invites(
    current_user: models.AppUser = Depends(manage_invites),
    db: Session = Depends(get_db)
):
    return invites.list_invites(db, current_user.id)


# --- Create an invite for one of the coach's students ---
@router.post("", response_model=schemas.ParentInviteOut, status_code=status.HTTP_201_CREATED)
def create_invite(
    payload: schemas.ParentInviteCreate,
    current_user: models.AppUser = Depends(manage_invites),
    db: Session = Depends(get_db)
):
    return invites.create_invite(db, current_user, payload)


# --- Coach's current invite code ---
@router.get("/code", response_model=schemas.InviteCodeOut)
def invite_code(
    current_user: models.AppUser = Depends(manage_invites),
    db: Session = Depends(get_db)
):
    return {"invite_code": invites.coach_invite_code(db, current_user)}


# --- Check a code before signing up (no auth) ---
@router.get("/validate/{code}", response_model=schemas.InviteValidationOut)
def validate_invite(code: str, db: Session = Depends(get_db)):
    validation = invites.validate_invite_code(db, code)
    return {"valid": True, "coach_id": validation.coach_id, "student_id": validation.student_id}


# --- Claim a code and become a parent ---
@router.post("/complete", response_model=schemas.CompleteRegistrationOut)
@registration_router.post("/complete-parent-registration", response_model=schemas.CompleteRegistrationOut)
def complete_registration(
    payload: schemas.CompleteRegistrationRequest,
    current_user: models.AppUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    validation, invite = invites.complete_parent_registration(db, current_user, payload.invite_code)
    return {
        "message": "Parent registration completed",
        "student_id": validation.student_id,
        "coach_id": validation.coach_id,
        "parent_invite": invite,
    }
