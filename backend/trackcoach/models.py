# backend/trackcoach/models.py

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from trackcoach.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


# -------------------------------
# Enumerations
# -------------------------------
class Role(str, enum.Enum):
    COACH = "coach"
    PARENT = "parent"
    ADMIN = "admin"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class EventType(str, enum.Enum):
    RUNNING = "running"
    LONG_JUMP = "long_jump"
    HIGH_JUMP = "high_jump"
    SHOT_PUT = "shot_put"
    JAVELIN = "javelin"
    DISCUS = "discus"


class EventStatus(str, enum.Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# -------------------------------
# Users
# -------------------------------
class AppUser(Base):
    __tablename__ = "app_user"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False)
    first_name = Column(String)
    last_name = Column(String)
    password_hash = Column(String)
    role = Column(String(16), nullable=False, default=Role.COACH.value)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    students = relationship("Student", back_populates="coach")
    events = relationship("Event", back_populates="coach")


# -------------------------------
# Students
# -------------------------------
class Student(Base):
    __tablename__ = "student"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    coach_id = Column(UUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    gender = Column(String(16), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    father_name = Column(String(255))
    mother_name = Column(String(255))
    phone_number = Column(String(50))
    address = Column(Text)
    school = Column(String(255))
    grade_studying = Column(String(100))
    attended_coaching_before = Column(Boolean, default=False)
    previous_coach_club = Column(String(255))
    injury_health_issues = Column(Text)
    joining_date = Column(Date, nullable=False)
    medical_conditions = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    coach = relationship("AppUser", back_populates="students")
    attendance_records = relationship("Attendance", back_populates="student", cascade="all, delete-orphan")
    performances = relationship("Performance", back_populates="student", cascade="all, delete-orphan")
    invites = relationship("ParentInvite", back_populates="student", cascade="all, delete-orphan")


# -------------------------------
# Events
# -------------------------------
class Event(Base):
    __tablename__ = "event"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    coach_id = Column(UUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(32), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    distance = Column(String(100))  # e.g. "100m", "5km"
    rounds = Column(Integer, nullable=False, default=1)
    participants = Column(JSON, default=list)  # list of student ids
    status = Column(String(16), nullable=False, default=EventStatus.PLANNED.value)
    results = Column(JSON)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    coach = relationship("AppUser", back_populates="events")
    performances = relationship("Performance", back_populates="event")


# -------------------------------
# Attendance
# -------------------------------
class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("student_id", "date", name="attendance_student_date_unique"),
    )
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("student.id"), nullable=False)
    coach_id = Column(UUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    present = Column(Boolean, nullable=False)
    late = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    student = relationship("Student", back_populates="attendance_records")


# -------------------------------
# Performances
# -------------------------------
class Performance(Base):
    __tablename__ = "performance"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("student.id"), nullable=False, index=True)
    event_id = Column(UUID(as_uuid=True), ForeignKey("event.id"), nullable=False, index=True)
    measurement = Column(String(64))  # e.g. "12.5s", "5.2m"
    round = Column(Integer, nullable=False, default=1)
    rank = Column(Integer)
    personal_best = Column(Boolean, nullable=False, default=False)
    # set client side: ranking ties fall back to insertion order
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    student = relationship("Student", back_populates="performances")
    event = relationship("Event", back_populates="performances")


# -------------------------------
# Parent invites
# -------------------------------
class ParentInvite(Base):
    __tablename__ = "parent_invite"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    coach_id = Column(UUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False, index=True)
    student_id = Column(UUID(as_uuid=True), ForeignKey("student.id"), nullable=False)
    invite_code = Column(String(50), unique=True, nullable=False)
    parent_name = Column(String(255), nullable=False)
    parent_email = Column(String(255), nullable=False)
    student_name = Column(String(255), nullable=False)
    phone_number = Column(String(50))
    claimed = Column(Boolean, nullable=False, default=False)
    claimed_at = Column(DateTime(timezone=True))
    expires_at = Column(DateTime(timezone=True))
    parent_user_id = Column(UUID(as_uuid=True), ForeignKey("app_user.id"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    student = relationship("Student", back_populates="invites")
