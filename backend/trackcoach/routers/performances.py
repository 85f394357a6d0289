# backend/trackcoach/routers/performances.py

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from trackcoach import models, schemas
from trackcoach.auth import get_current_user
from trackcoach.db import get_db
from trackcoach.exceptions import NotFoundError, ValidationError
from trackcoach.permissions import (
    Permission,
    ensure_can_view_student,
    ensure_owner,
    require_permission,
)
from trackcoach.services.lifecycle import ensure_recording_open
from trackcoach.services.measurements import MeasurementError, parse_measurement
from trackcoach.services.personal_best import is_personal_best

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/performances", tags=["Performances"])


# --- Record a performance (event must be in progress) ---
@router.post("", response_model=schemas.PerformanceOut, status_code=status.HTTP_201_CREATED)
def record_performance(
    payload: schemas.PerformanceCreate,
    current_user: models.AppUser = Depends(require_permission(Permission.RECORD_PERFORMANCE)),
    db: Session = Depends(get_db)
):
    student = db.query(models.Student).filter(models.Student.id == payload.student_id).first()
    if not student:
        raise NotFoundError("Student", payload.student_id)
    ensure_owner(student, current_user, "Access denied - you can only record performances for your own students")

    event = db.query(models.Event).filter(models.Event.id == payload.event_id).first()
    if not event:
        raise NotFoundError("Event", payload.event_id)
    ensure_owner(event, current_user)
    ensure_recording_open(event)

    if payload.round > event.rounds:
        raise ValidationError(f"Round must be between 1 and {event.rounds}", field="round")

    try:
        measurement = parse_measurement(payload.measurement, event.type)
    except MeasurementError as exc:
        raise ValidationError(str(exc), field="measurement")

    # decided against history before this row exists
    personal_best = is_personal_best(db, student.id, event.type, measurement.raw)

    performance = models.Performance(
        student_id=student.id,
        event_id=event.id,
        measurement=measurement.raw,
        round=payload.round,
        personal_best=personal_best,
    )
    db.add(performance)
    db.commit()
    db.refresh(performance)
    logger.info(
        "Performance %s recorded",
        performance.id,
        extra={"extra_fields": {"event_id": str(event.id), "personal_best": personal_best}},
    )
    return performance


# --- Performances of one student (coach or linked parent) ---
@router.get("/student/{student_id}", response_model=List[schemas.PerformanceOut])
def student_performances(
    student_id: UUID,
    current_user: models.AppUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    student = db.query(models.Student).filter(models.Student.id == student_id).first()
    if not student:
        raise NotFoundError("Student", student_id)
    ensure_can_view_student(db, current_user, student)
    return db.query(models.Performance).filter(
        models.Performance.student_id == student.id
    ).order_by(models.Performance.created_at.desc()).all()


# --- Performances recorded in one event ---
@router.get("/event/{event_id}", response_model=List[schemas.PerformanceOut])
def event_performances(
    event_id: UUID,
    current_user: models.AppUser = Depends(require_permission(Permission.MANAGE_EVENTS)),
    db: Session = Depends(get_db)
):
    event = db.query(models.Event).filter(models.Event.id == event_id).first()
    if not event:
        raise NotFoundError("Event", event_id)
    ensure_owner(event, current_user)
    return db.query(models.Performance).filter(
        models.Performance.event_id == event.id
    ).order_by(models.Performance.created_at, models.Performance.round).all()
