# backend/trackcoach/routers/attendance.py

from dataclasses import asdict
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from trackcoach import models, schemas
from trackcoach.db import get_db
from trackcoach.exceptions import ValidationError
from trackcoach.permissions import Permission, require_permission
from trackcoach.services import attendance as attendance_service

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])

mark_attendance_permission = require_permission(Permission.MARK_ATTENDANCE)


# --- List attendance by date or date range ---
@router.get("", response_model=List[schemas.AttendanceOut])
def list_attendance(
    on: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: models.AppUser = Depends(mark_attendance_permission),
    db: Session = Depends(get_db)
):
    if (start_date is None) != (end_date is None):
        raise ValidationError("startDate and endDate must be given together", field="date")
    if start_date and end_date and start_date > end_date:
        raise ValidationError("startDate must not be after endDate", field="date")
    return attendance_service.list_attendance(
        db, current_user.id, on=on, start=start_date, end=end_date
    )


# --- Mark attendance for a batch of students ---
@router.post("", response_model=List[schemas.AttendanceOut])
def mark_attendance(
    payload: List[schemas.AttendanceMark],
    current_user: models.AppUser = Depends(mark_attendance_permission),
    db: Session = Depends(get_db)
):
    if not payload:
        raise ValidationError("At least one attendance record is required")
    return attendance_service.mark_attendance(db, current_user, payload)


# --- Daily and month-to-date statistics ---
@router.get("/stats", response_model=schemas.AttendanceStatsOut)
def attendance_stats(
    on: Optional[date] = Query(None, alias="date"),
    current_user: models.AppUser = Depends(mark_attendance_permission),
    db: Session = Depends(get_db)
):
    day = on or date.today()
    # month-to-date, so days after ``day`` never count
    records = attendance_service.list_attendance(
        db, current_user.id, start=day.replace(day=1), end=day
    )
    daily = attendance_service.daily_summary(records, day)
    monthly = attendance_service.monthly_summary(records, day.year, day.month)
    return {"daily": asdict(daily), "monthly": asdict(monthly)}
