"""
Personal best detection.

A new performance is a personal best when it beats every earlier non-blank
performance the student recorded in events of the same type (not just the
same event). The flag is decided once, when the row is written; later rows
never clear it.
"""
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from trackcoach import models
from trackcoach.services.measurements import is_better, is_blank, normalize_measurement


def improves_on_history(value: float, history: Iterable[float], event_type: str) -> bool:
    """True when ``value`` strictly beats every value in ``history`` (or history is empty)."""
    return all(is_better(value, previous, event_type) for previous in history)


def history_values(
    db: Session,
    student_id: UUID,
    event_type: str,
    exclude_id: Optional[UUID] = None,
) -> list:
    """Normalised values of the student's earlier performances for this event type."""
    query = db.query(models.Performance.measurement).join(models.Event).filter(
        models.Performance.student_id == student_id,
        models.Event.type == event_type,
    )
    if exclude_id is not None:
        query = query.filter(models.Performance.id != exclude_id)

    return [
        normalize_measurement(measurement, event_type)
        for (measurement,) in query.all()
        if not is_blank(measurement)
    ]


def is_personal_best(
    db: Session,
    student_id: UUID,
    event_type: str,
    measurement: str,
    exclude_id: Optional[UUID] = None,
) -> bool:
    value = normalize_measurement(measurement, event_type)
    return improves_on_history(value, history_values(db, student_id, event_type, exclude_id), event_type)
