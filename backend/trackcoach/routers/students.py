# backend/trackcoach/routers/students.py

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from trackcoach import models, schemas
from trackcoach.db import get_db
from trackcoach.exceptions import NotFoundError, ValidationError
from trackcoach.permissions import (
    Permission,
    ensure_can_view_student,
    ensure_owner,
    has_permission,
    require_permission,
    role_of,
)
from trackcoach.auth import get_current_user
from trackcoach.services.invites import students_for_parent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/students", tags=["Students"])

# NOT NULL columns; an update may leave them out but not clear them
REQUIRED_FIELDS = ("name", "gender", "date_of_birth", "joining_date")


def get_student_or_404(db: Session, student_id: UUID) -> models.Student:
    student = db.query(models.Student).filter(models.Student.id == student_id).first()
    if not student:
        raise NotFoundError("Student", student_id)
    return student


# --- List students (coach: own roster, parent: linked children) ---
@router.get("", response_model=List[schemas.StudentOut])
def list_students(
    current_user: models.AppUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0)
):
    role = role_of(current_user)
    if has_permission(role, Permission.VIEW_ROSTER):
        return db.query(models.Student).filter(
            models.Student.coach_id == current_user.id
        ).order_by(models.Student.name).offset(offset).limit(limit).all()
    if has_permission(role, Permission.VIEW_LINKED_STUDENTS):
        return students_for_parent(db, current_user.id)
    return []


# --- Create student (coach only) ---
@router.post("", response_model=schemas.StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: schemas.StudentCreate,
    current_user: models.AppUser = Depends(require_permission(Permission.MUTATE_ROSTER)),
    db: Session = Depends(get_db)
):
    student = models.Student(coach_id=current_user.id, **payload.model_dump())
    db.add(student)
    db.commit()
    db.refresh(student)
    logger.info("Student %s created", student.id)
    return student


# --- Get single student ---
@router.get("/{student_id}", response_model=schemas.StudentOut)
def get_student(
    student_id: UUID,
    current_user: models.AppUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    student = get_student_or_404(db, student_id)
    ensure_can_view_student(db, current_user, student)
    return student


# --- Update student (owning coach only) ---
@router.put("/{student_id}", response_model=schemas.StudentOut)
def update_student(
    student_id: UUID,
    payload: schemas.StudentUpdate,
    current_user: models.AppUser = Depends(require_permission(Permission.MUTATE_ROSTER)),
    db: Session = Depends(get_db)
):
    student = get_student_or_404(db, student_id)
    ensure_owner(student, current_user)

    changes = payload.model_dump(exclude_unset=True)
    for field in REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null", field=field)

    for field, value in changes.items():
        setattr(student, field, value)
    db.commit()
    db.refresh(student)
    return student


# --- Delete student (owning coach only) ---
@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: UUID,
    current_user: models.AppUser = Depends(require_permission(Permission.MUTATE_ROSTER)),
    db: Session = Depends(get_db)
):
    student = get_student_or_404(db, student_id)
    ensure_owner(student, current_user)
    # attendance, performances and invites go with it
    db.delete(student)
    db.commit()
    logger.info("Student %s deleted", student_id)
