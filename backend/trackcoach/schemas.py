from datetime import date, datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from trackcoach.models import EventStatus, EventType, Gender, Role


# -------------------------------
# Auth Schemas
# -------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserOut(BaseModel):
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Role

    class Config:
        from_attributes = True


# -------------------------------
# Student Schemas
# -------------------------------
class StudentBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: Optional[str] = None
    gender: Gender
    date_of_birth: date
    joining_date: date
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    school: Optional[str] = None
    grade_studying: Optional[str] = None
    attended_coaching_before: bool = False
    previous_coach_club: Optional[str] = None
    injury_health_issues: Optional[str] = None
    medical_conditions: Optional[str] = None

    class Config:
        use_enum_values = True


class StudentCreate(StudentBase):
    pass


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = None
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    joining_date: Optional[date] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    school: Optional[str] = None
    grade_studying: Optional[str] = None
    attended_coaching_before: Optional[bool] = None
    previous_coach_club: Optional[str] = None
    injury_health_issues: Optional[str] = None
    medical_conditions: Optional[str] = None

    class Config:
        use_enum_values = True


class StudentOut(StudentBase):
    id: UUID
    coach_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# -------------------------------
# Event Schemas
# -------------------------------
class EventBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: EventType
    date: datetime
    distance: Optional[str] = None
    rounds: int = Field(default=1, ge=1)
    participants: List[UUID] = []


class EventCreate(EventBase):
    pass


class EventUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type: Optional[EventType] = None
    date: Optional[datetime] = None
    distance: Optional[str] = None
    rounds: Optional[int] = Field(default=None, ge=1)
    participants: Optional[List[UUID]] = None
    status: Optional[EventStatus] = None


class EventOut(EventBase):
    id: UUID
    coach_id: UUID
    status: EventStatus
    results: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RankingEntryOut(BaseModel):
    rank: int
    student_id: UUID
    student_name: Optional[str] = None
    performance_id: UUID
    measurement: str
    round: int


# -------------------------------
# Attendance Schemas
# -------------------------------
class AttendanceMark(BaseModel):
    student_id: UUID
    date: date
    present: bool
    late: bool = False


class AttendanceOut(AttendanceMark):
    id: UUID
    coach_id: UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DailySummaryOut(BaseModel):
    day: date
    present_count: int
    absent_count: int
    late_count: int
    total_count: int
    percentage: int


class MonthlySummaryOut(BaseModel):
    year: int
    month: int
    monthly_percentage: int
    training_days: int
    total_records: int
    present_records: int


class AttendanceStatsOut(BaseModel):
    daily: DailySummaryOut
    monthly: MonthlySummaryOut


# -------------------------------
# Performance Schemas
# -------------------------------
class PerformanceCreate(BaseModel):
    student_id: UUID
    event_id: UUID
    measurement: str
    round: int = Field(default=1, ge=1)


class PerformanceOut(PerformanceCreate):
    id: UUID
    rank: Optional[int] = None
    personal_best: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# -------------------------------
# Parent Invite Schemas
# -------------------------------
class ParentInviteCreate(BaseModel):
    student_id: UUID
    parent_name: str = Field(min_length=1, max_length=255)
    parent_email: EmailStr
    phone_number: Optional[str] = None
    expires_in_days: Optional[int] = Field(default=None, ge=1)


class ParentInviteOut(BaseModel):
    id: UUID
    coach_id: UUID
    student_id: UUID
    invite_code: str
    parent_name: str
    parent_email: str
    student_name: str
    phone_number: Optional[str] = None
    claimed: bool
    claimed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    parent_user_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InviteCodeOut(BaseModel):
    invite_code: str


class InviteValidationOut(BaseModel):
    valid: bool = True
    coach_id: UUID
    student_id: UUID


class CompleteRegistrationRequest(BaseModel):
    invite_code: str = Field(min_length=1)


class CompleteRegistrationOut(BaseModel):
    message: str
    student_id: UUID
    coach_id: UUID
    parent_invite: ParentInviteOut


# -------------------------------
# Dashboard Schemas
# -------------------------------
class DashboardStatsOut(BaseModel):
    total_students: int
    events_this_week: int
    total_events: int
    average_attendance: int
    personal_bests: int
