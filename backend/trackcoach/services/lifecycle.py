"""
Event lifecycle.

planned -> in_progress -> completed. Completed is terminal and no state can
be skipped. The controller also decides which operations an event accepts in
each state.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, FrozenSet

from sqlalchemy.orm import Session

from trackcoach import models
from trackcoach.exceptions import ValidationError
from trackcoach.models import EventStatus
from trackcoach.services.ranking import rank_performances, ranking_payload

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[EventStatus, FrozenSet[EventStatus]] = {
    EventStatus.PLANNED: frozenset({EventStatus.IN_PROGRESS}),
    EventStatus.IN_PROGRESS: frozenset({EventStatus.COMPLETED}),
    EventStatus.COMPLETED: frozenset(),
}

EDITABLE_STATES = frozenset({EventStatus.PLANNED, EventStatus.IN_PROGRESS})


def can_transition(current: EventStatus, target: EventStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_editable(event: models.Event) -> None:
    if EventStatus(event.status) not in EDITABLE_STATES:
        raise ValidationError("Completed events cannot be edited", field="status")


def ensure_recording_open(event: models.Event) -> None:
    if EventStatus(event.status) is not EventStatus.IN_PROGRESS:
        raise ValidationError(
            "Performances can only be recorded while the event is in progress",
            field="status",
        )


def ensure_type_changeable(db: Session, event: models.Event, new_type: str) -> None:
    """The type fixes ranking direction; it is frozen once the event starts or has results."""
    if new_type == event.type:
        return
    recorded = db.query(models.Performance.id).filter(
        models.Performance.event_id == event.id
    ).first()
    if EventStatus(event.status) is not EventStatus.PLANNED or recorded:
        raise ValidationError(
            "Event type can only be changed while the event is planned and has no performances",
            field="type",
        )


def _ensure_transition(event: models.Event, target: EventStatus) -> None:
    current = EventStatus(event.status)
    if not can_transition(current, target):
        raise ValidationError(
            f"Cannot move event from {current.value} to {target.value}",
            field="status",
        )


def start_event(db: Session, event: models.Event) -> models.Event:
    _ensure_transition(event, EventStatus.IN_PROGRESS)
    event.status = EventStatus.IN_PROGRESS.value
    db.commit()
    db.refresh(event)
    logger.info("Event %s started", event.id)
    return event


def finish_event(db: Session, event: models.Event) -> models.Event:
    """Complete an event, writing final ranks to performances and results to the event."""
    _ensure_transition(event, EventStatus.COMPLETED)

    performances = db.query(models.Performance).filter(
        models.Performance.event_id == event.id
    ).order_by(models.Performance.created_at, models.Performance.round).all()
    if not performances:
        raise ValidationError("Cannot finish an event with no recorded performances", field="status")

    student_ids = {p.student_id for p in performances}
    students = {
        s.id: s for s in db.query(models.Student).filter(models.Student.id.in_(list(student_ids))).all()
    }
    ranking = rank_performances(event, performances, students)

    for performance in performances:
        performance.rank = None
    for entry in ranking:
        entry.performance.rank = entry.rank

    event.results = {
        "rankings": ranking_payload(ranking),
        "computed_at": datetime.now(timezone.utc).isoformat(),
    }
    event.status = EventStatus.COMPLETED.value
    db.commit()
    db.refresh(event)
    logger.info(
        "Event %s completed",
        event.id,
        extra={"extra_fields": {"event_id": str(event.id), "ranked": len(ranking)}},
    )
    return event


def transition(db: Session, event: models.Event, target: EventStatus) -> models.Event:
    """Move ``event`` to ``target`` along the single legal edge, or raise."""
    handlers = {
        EventStatus.IN_PROGRESS: start_event,
        EventStatus.COMPLETED: finish_event,
    }
    if target not in handlers:
        raise ValidationError(
            f"Cannot move event from {event.status} to {target.value}",
            field="status",
        )
    return handlers[target](db, event)


def delete_event(db: Session, event: models.Event) -> None:
    """Delete an event in any state, removing its performances first."""
    removed = db.query(models.Performance).filter(
        models.Performance.event_id == event.id
    ).delete(synchronize_session=False)
    db.delete(event)
    db.commit()
    logger.info("Event %s deleted with %d performances", event.id, removed)
