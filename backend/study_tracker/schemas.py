"""Pydantic request schemas used by the repositories.

Schemas coerce client JSON into the stored field types and reject
documents missing required fields. Unknown keys are ignored so they are
never persisted. Numbers are accepted where strings are expected, the
way the frontend sends numeric client ids.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Any, List, Optional
from datetime import datetime, timezone


# ids the clients generate (millisecond timestamps), stored as signed 64-bit integers
INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1
BigId = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StoreSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class ExerciseIn(StoreSchema):
    id: Optional[int] = None
    problem: Optional[str] = None
    solution: Optional[str] = None
    date: datetime = Field(default_factory=_now)


class FlashcardIn(StoreSchema):
    id: Optional[int] = None
    front: Optional[str] = None
    back: Optional[str] = None


class ImageIn(StoreSchema):
    """An image attached to a note, stored inline as a data URL."""
    id: Optional[int] = None
    name: Optional[str] = None
    type: Optional[str] = None
    dataUrl: Optional[str] = None
    date: datetime = Field(default_factory=_now)


class NoteIn(StoreSchema):
    """A note of a subject.

    The free-text fields (`summary`, `keyConcepts`, `simpleExplanation`,
    `questions`, `quiz`, `mindMap`) hold AI-derived material produced by
    the client; `mindMapData` is an arbitrary JSON structure.
    """
    id: Optional[int] = None
    title: Optional[str] = None
    content: Optional[str] = None
    date: datetime = Field(default_factory=_now)
    tags: List[str] = Field(default_factory=list)
    images: List[ImageIn] = Field(default_factory=list)
    questions: Optional[str] = None
    summary: Optional[str] = None
    exercises: List[ExerciseIn] = Field(default_factory=list)
    keyConcepts: Optional[str] = None
    flashcards: List[FlashcardIn] = Field(default_factory=list)
    simpleExplanation: Optional[str] = None
    mindMap: Optional[str] = None
    mindMapData: Any = None
    quiz: Optional[str] = None


class MaterialIn(StoreSchema):
    id: Optional[int] = None
    name: Optional[str] = None
    type: Optional[str] = None
    content: Optional[str] = None
    url: Optional[str] = None
    date: datetime = Field(default_factory=_now)


class SubjectIn(StoreSchema):
    """Full subject document; `name` is required."""
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    color: Optional[str] = "#3b82f6"
    summary: Optional[str] = None
    notes: List[NoteIn] = Field(default_factory=list)
    materials: List[MaterialIn] = Field(default_factory=list)


class ScheduleUpdate(StoreSchema):
    """Fields of a schedule entry; all optional when updating."""
    date: Optional[str] = None
    timeSlot: Optional[str] = None
    subjectId: Optional[BigId] = None
    topic: Optional[str] = None
    type: Optional[str] = None
    duration: Optional[float] = None
    priority: Optional[str] = None
    completed: Optional[bool] = None
    notes: Optional[str] = None
    id: Optional[BigId] = None


class ScheduleIn(ScheduleUpdate):
    date: str
    timeSlot: str


class GoalIn(StoreSchema):
    title: Optional[str] = None
    deadline: Optional[str] = None
    priority: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None


class GradeIn(StoreSchema):
    subjectId: Optional[BigId] = None
    name: Optional[str] = None
    grade: Optional[float] = None
    coefficient: Optional[float] = None
    type: Optional[str] = None
    date: Optional[str] = None


class DocumentIn(StoreSchema):
    name: Optional[str] = None
    type: Optional[str] = None
    size: Optional[float] = None
    dataUrl: Optional[str] = None
    uploadDate: Optional[str] = None
    category: Optional[str] = None


class SettingsIn(StoreSchema):
    notifications: Optional[bool] = None
    darkMode: Optional[bool] = None
    autoBackup: Optional[bool] = None
    studyReminders: Optional[bool] = None
    weeklyGoal: Optional[float] = None
    dailyGoal: Optional[float] = None
    pomodoroLength: Optional[float] = None
    breakLength: Optional[float] = None
    longBreakLength: Optional[float] = None


class StatsIn(StoreSchema):
    totalHours: Optional[float] = None
    weeklyGoal: Optional[float] = None
    streak: Optional[float] = None
    dailyGoal: Optional[float] = None
    completionRate: Optional[float] = None
    averageSession: Optional[float] = None
