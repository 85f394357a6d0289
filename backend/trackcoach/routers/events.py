# backend/trackcoach/routers/events.py

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from trackcoach import models, schemas
from trackcoach.db import get_db
from trackcoach.exceptions import NotFoundError
from trackcoach.models import EventStatus
from trackcoach.permissions import Permission, ensure_owner, require_permission
from trackcoach.services import lifecycle
from trackcoach.services.ranking import rank_performances, ranking_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["Events"])

manage_events = require_permission(Permission.MANAGE_EVENTS)


def get_owned_event(db: Session, event_id: UUID, user: models.AppUser) -> models.Event:
    event = db.query(models.Event).filter(models.Event.id == event_id).first()
    if not event:
        raise NotFoundError("Event", event_id)
    ensure_owner(event, user)
    return event


def _participant_ids(participants) -> list:
    return [str(student_id) for student_id in participants]


# --- List events ---
@router.get("", response_model=List[schemas.EventOut])
def list_events(
    current_user: models.AppUser = Depends(manage_events),
    db: Session = Depends(get_db),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0)
):
    return db.query(models.Event).filter(
        models.Event.coach_id == current_user.id
    ).order_by(models.Event.date.desc()).offset(offset).limit(limit).all()


# --- Create event (starts out planned) ---
@router.post("", response_model=schemas.EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: schemas.EventCreate,
    current_user: models.AppUser = Depends(manage_events),
    db: Session = Depends(get_db)
):
    event = models.Event(
        coach_id=current_user.id,
        name=payload.name,
        type=payload.type.value,
        date=payload.date,
        distance=payload.distance,
        rounds=payload.rounds,
        participants=_participant_ids(payload.participants),
        status=EventStatus.PLANNED.value,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event %s created", event.id)
    return event


# --- Get single event ---
@router.get("/{event_id}", response_model=schemas.EventOut)
def get_event(
    event_id: UUID,
    current_user: models.AppUser = Depends(manage_events),
    db: Session = Depends(get_db)
):
    return get_owned_event(db, event_id, current_user)


# --- Update event metadata; a status change goes through the lifecycle ---
@router.put("/{event_id}", response_model=schemas.EventOut)
def update_event(
    event_id: UUID,
    payload: schemas.EventUpdate,
    current_user: models.AppUser = Depends(manage_events),
    db: Session = Depends(get_db)
):
    event = get_owned_event(db, event_id, current_user)
    lifecycle.ensure_editable(event)

    changes = payload.model_dump(exclude_unset=True, exclude={"status"})
    if "type" in changes and changes["type"] is not None:
        changes["type"] = changes["type"].value
        lifecycle.ensure_type_changeable(db, event, changes["type"])
    if "participants" in changes and changes["participants"] is not None:
        changes["participants"] = _participant_ids(changes["participants"])
    for field, value in changes.items():
        if value is not None:
            setattr(event, field, value)

    if payload.status is not None:
        # the transition commits the metadata changes with the new status
        return lifecycle.transition(db, event, payload.status)

    db.commit()
    db.refresh(event)
    return event


# --- Delete event (any state) ---
@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: UUID,
    current_user: models.AppUser = Depends(manage_events),
    db: Session = Depends(get_db)
):
    event = get_owned_event(db, event_id, current_user)
    lifecycle.delete_event(db, event)


# --- Lifecycle transitions ---
@router.post("/{event_id}/start", response_model=schemas.EventOut)
def start_event(
    event_id: UUID,
    current_user: models.AppUser = Depends(manage_events),
    db: Session = Depends(get_db)
):
    event = get_owned_event(db, event_id, current_user)
    return lifecycle.start_event(db, event)


@router.post("/{event_id}/finish", response_model=schemas.EventOut)
def finish_event(
    event_id: UUID,
    current_user: models.AppUser = Depends(manage_events),
    db: Session = Depends(get_db)
):
    event = get_owned_event(db, event_id, current_user)
    return lifecycle.finish_event(db, event)


# --- Live ranking over the current performances ---
@router.get("/{event_id}/ranking", response_model=List[schemas.RankingEntryOut])
def event_ranking(
    event_id: UUID,
    current_user: models.AppUser = Depends(manage_events),
    db: Session = Depends(get_db)
):
    event = get_owned_event(db, event_id, current_user)
    performances = db.query(models.Performance).filter(
        models.Performance.event_id == event.id
    ).order_by(models.Performance.created_at, models.Performance.round).all()
    students = {
        student.id: student
        for student in db.query(models.Student).filter(
            models.Student.id.in_(list({p.student_id for p in performances}))
        )
    }
    return ranking_payload(rank_performances(event, performances, students))
