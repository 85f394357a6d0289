"""Attendance writes and daily/monthly statistics."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from trackcoach import models, schemas, storage
from trackcoach.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailySummary:
    day: date
    present_count: int
    absent_count: int
    late_count: int
    total_count: int
    percentage: int


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    monthly_percentage: int
    training_days: int
    total_records: int
    present_records: int


def attendance_percentage(present: int, total: int) -> int:
    """Whole-number percentage, rounded half up; 0 when there is nothing to count."""

    if total <= 0:
        return 0
    ratio = Decimal(present) * 100 / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def daily_summary(records: Iterable[models.Attendance], day: date) -> DailySummary:
    rows = [record for record in records if record.date == day]
    present = sum(1 for record in rows if record.present)
    late = sum(1 for record in rows if record.late)
    return DailySummary(
        day=day,
        present_count=present,
        absent_count=len(rows) - present,
        late_count=late,
        total_count=len(rows),
        percentage=attendance_percentage(present, len(rows)),
    )


def monthly_summary(records: Iterable[models.Attendance], year: int, month: int) -> MonthlySummary:
    rows = [
        record for record in records
        if record.date.year == year and record.date.month == month
    ]
    present = sum(1 for record in rows if record.present)
    return MonthlySummary(
        year=year,
        month=month,
        monthly_percentage=attendance_percentage(present, len(rows)),
        training_days=len({record.date for record in rows}),
        total_records=len(rows),
        present_records=present,
    )


def list_attendance(
    db: Session,
    coach_id,
    on: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[models.Attendance]:
    query = db.query(models.Attendance).filter(models.Attendance.coach_id == coach_id)
    if start is not None and end is not None:
        query = query.filter(models.Attendance.date >= start, models.Attendance.date <= end)
    elif on is not None:
        query = query.filter(models.Attendance.date == on)
    return query.order_by(models.Attendance.date.desc()).all()


def mark_attendance(
    db: Session,
    coach: models.AppUser,
    items: Sequence[schemas.AttendanceMark],
) -> List[models.Attendance]:
    """Write one row per (student, date), overwriting earlier marks for the same pair.

    Every student must belong to ``coach``; the check runs before any write.
    """

    student_ids = {item.student_id for item in items}
    owned = {
        student_id
        for (student_id,) in db.query(models.Student.id).filter(
            models.Student.id.in_(list(student_ids)),
            models.Student.coach_id == coach.id,
        )
    }
    if owned != student_ids:
        raise ForbiddenError("Access denied - you can only mark attendance for your own students")

    for item in items:
        storage.upsert(
            db,
            models.Attendance,
            values={
                "student_id": item.student_id,
                "date": item.date,
                "present": item.present,
                "late": item.late,
                "coach_id": coach.id,
            },
            conflict_columns=("student_id", "date"),
            update_columns=("present", "late", "coach_id"),
        )
    db.commit()
    logger.info("Marked attendance for %d students", len(items))

    keys = {(item.student_id, item.date) for item in items}
    rows = db.query(models.Attendance).filter(
        models.Attendance.student_id.in_(list(student_ids)),
        models.Attendance.date.in_([day for _, day in keys]),
    ).all()
    return [row for row in rows if (row.student_id, row.date) in keys]
