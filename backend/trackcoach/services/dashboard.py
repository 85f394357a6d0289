"""Headline numbers for the coach dashboard."""

from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple

from sqlalchemy.orm import Session

from trackcoach import models
from trackcoach.services.attendance import attendance_percentage


@dataclass(frozen=True)
class DashboardStats:
    total_students: int
    events_this_week: int
    total_events: int
    average_attendance: int
    personal_bests: int

    def as_dict(self) -> dict:
        return asdict(self)


def week_bounds(today: date) -> Tuple[datetime, datetime]:
    """Start and end (exclusive) of the Sunday-start week containing ``today``."""
    # weekday(): Monday is 0, Sunday is 6
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    start_at = datetime.combine(start, time.min, tzinfo=timezone.utc)
    return start_at, start_at + timedelta(days=7)


def dashboard_stats(db: Session, coach: models.AppUser, today: date) -> DashboardStats:
    total_students = db.query(models.Student).filter(models.Student.coach_id == coach.id).count()

    events = db.query(models.Event).filter(models.Event.coach_id == coach.id)
    week_start, week_end = week_bounds(today)
    events_this_week = events.filter(
        models.Event.date >= week_start,
        models.Event.date < week_end,
    ).count()

    month_rows = db.query(models.Attendance.present).filter(
        models.Attendance.coach_id == coach.id,
        models.Attendance.date >= today.replace(day=1),
        models.Attendance.date <= today,
    ).all()
    present = sum(1 for (is_present,) in month_rows if is_present)

    personal_bests = db.query(models.Performance).join(models.Student).filter(
        models.Student.coach_id == coach.id,
        models.Performance.personal_best.is_(True),
    ).count()

    return DashboardStats(
        total_students=total_students,
        events_this_week=events_this_week,
        total_events=events.count(),
        average_attendance=attendance_percentage(present, len(month_rows)),
        personal_bests=personal_bests,
    )
