"""SQLModel data models.

This module defines one table per resource type. Every row belongs to a
single owner (`userId`) and carries server-assigned timestamps. Embedded
collections of a subject (notes with their images, exercises and
flashcards, and materials) live in JSON columns of the subject row, so
they share its lifecycle.

Attribute names follow the JSON wire format used by the frontend.
"""

from typing import Any, List, Optional
from datetime import datetime, timezone
from sqlalchemy import BigInteger, Column, JSON
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OwnedDocument(SQLModel):
    """Columns shared by every owned resource.

    `doc_id` is the store identity, exposed to clients as `_id`.
    """
    doc_id: Optional[int] = Field(default=None, primary_key=True)
    userId: str = Field(index=True, nullable=False)
    createdAt: datetime = Field(default_factory=utcnow)
    updatedAt: datetime = Field(default_factory=utcnow)


class Subject(OwnedDocument, table=True):
    """A subject of study with its embedded notes and materials."""
    __tablename__ = "subject"

    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    color: Optional[str] = "#3b82f6"
    summary: Optional[str] = None
    notes: List[Any] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    materials: List[Any] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))


class ScheduleEntry(OwnedDocument, table=True):
    """A planned study slot."""
    __tablename__ = "schedule"

    date: Optional[str] = None
    timeSlot: Optional[str] = None
    subjectId: Optional[int] = Field(default=None, sa_type=BigInteger)
    topic: Optional[str] = None
    type: Optional[str] = None
    duration: Optional[float] = None
    priority: Optional[str] = None
    completed: Optional[bool] = None
    notes: Optional[str] = None
    id: Optional[int] = Field(default=None, sa_type=BigInteger)


class Goal(OwnedDocument, table=True):
    __tablename__ = "goal"

    title: Optional[str] = None
    deadline: Optional[str] = None
    priority: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None


class Grade(OwnedDocument, table=True):
    """A mark obtained in a subject, weighted by `coefficient`."""
    __tablename__ = "grade"

    subjectId: Optional[int] = Field(default=None, sa_type=BigInteger)
    name: Optional[str] = None
    grade: Optional[float] = None
    coefficient: Optional[float] = None
    type: Optional[str] = None
    date: Optional[str] = None


class Document(OwnedDocument, table=True):
    """An uploaded file kept inline as a data URL."""
    __tablename__ = "document"

    name: Optional[str] = None
    type: Optional[str] = None
    size: Optional[float] = None
    dataUrl: Optional[str] = None
    uploadDate: Optional[str] = None
    category: Optional[str] = None


class UserSettings(OwnedDocument, table=True):
    """Preferences of one user. At most one row per owner."""
    __tablename__ = "settings"

    userId: str = Field(index=True, unique=True, nullable=False)
    notifications: Optional[bool] = None
    darkMode: Optional[bool] = None
    autoBackup: Optional[bool] = None
    studyReminders: Optional[bool] = None
    weeklyGoal: Optional[float] = None
    dailyGoal: Optional[float] = None
    pomodoroLength: Optional[float] = None
    breakLength: Optional[float] = None
    longBreakLength: Optional[float] = None


class UserStats(OwnedDocument, table=True):
    """Study counters of one user, as reported by the client. At most one row per owner."""
    __tablename__ = "stats"

    userId: str = Field(index=True, unique=True, nullable=False)
    totalHours: Optional[float] = None
    weeklyGoal: Optional[float] = None
    streak: Optional[float] = None
    dailyGoal: Optional[float] = None
    completionRate: Optional[float] = None
    averageSession: Optional[float] = None
