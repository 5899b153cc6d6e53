"""
Wellness API routes: assessments, journal, goals, habits, mood and analytics
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from bloom.core.auth import get_current_user_required
from bloom.core.database import get_db
from bloom.core.logging_config import LoggingConfig
from bloom.models.user import User, UserRole
from bloom.services.wellness_service import WellnessService

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["wellness"])

Mood = Literal["very-happy", "happy", "neutral", "sad", "very-sad"]


# Request/Response models
class HealthAssessmentCreate(BaseModel):
    assessment_type: Literal["mental", "physical", "cognitive"]
    score: int = Field(..., ge=0)
    responses: Dict[str, Any]


class HealthAssessmentResponse(BaseModel):
    id: int
    user_id: int
    assessment_type: str
    score: int
    responses: Dict[str, Any]
    completed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JournalEntryCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    content: str = Field(..., min_length=1)
    mood: Optional[Mood] = None
    prompt: Optional[str] = None


class JournalEntryResponse(BaseModel):
    id: int
    user_id: int
    title: Optional[str] = None
    content: str
    mood: Optional[str] = None
    prompt: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GoalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=50)
    target_value: Optional[int] = None
    current_value: int = 0
    target_date: Optional[datetime] = None
    completed: bool = False


class GoalUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    target_value: Optional[int] = None
    current_value: Optional[int] = None
    target_date: Optional[datetime] = None
    completed: Optional[bool] = None


class GoalResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    category: str
    target_value: Optional[int] = None
    current_value: int
    target_date: Optional[datetime] = None
    completed: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HabitCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    frequency: Literal["daily", "weekly"]
    streak: int = Field(0, ge=0)
    last_completed: Optional[datetime] = None


class HabitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    frequency: Optional[Literal["daily", "weekly"]] = None
    streak: Optional[int] = Field(None, ge=0)
    last_completed: Optional[datetime] = None


class HabitResponse(BaseModel):
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    frequency: str
    streak: int
    last_completed: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MoodEntryCreate(BaseModel):
    mood: str = Field(..., min_length=1, max_length=50)
    notes: Optional[str] = None


class MoodEntryResponse(BaseModel):
    id: int
    user_id: int
    mood: str
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def _server_error(message: str, e: Exception) -> HTTPException:
    logger.error(f"{message}: {e}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


def _not_found(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# Health assessments

@router.get("/health-assessments", response_model=List[HealthAssessmentResponse])
async def list_my_assessments(
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).list_assessments(user.id)
    except Exception as e:
        raise _server_error("Failed to fetch health assessments", e)


@router.get("/health-assessments/{user_id}", response_model=List[HealthAssessmentResponse])
async def list_user_assessments(
    user_id: int,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    if user.id != user_id and user.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    try:
        return WellnessService(db).list_assessments(user_id)
    except Exception as e:
        raise _server_error("Failed to fetch health assessments", e)


@router.post("/health-assessments", response_model=HealthAssessmentResponse,
             status_code=status.HTTP_201_CREATED)
async def create_assessment(
    request: HealthAssessmentCreate,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).create_assessment(user.id, request.model_dump())
    except Exception as e:
        raise _server_error("Failed to create health assessment", e)


# Journal

@router.get("/journal-entries", response_model=List[JournalEntryResponse])
async def list_journal_entries(
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).list_journal_entries(user.id)
    except Exception as e:
        raise _server_error("Failed to fetch journal entries", e)


@router.post("/journal-entries", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_journal_entry(
    request: JournalEntryCreate,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).create_journal_entry(user.id, request.model_dump())
    except Exception as e:
        raise _server_error("Failed to create journal entry", e)


@router.delete("/journal-entries/{entry_id}")
async def delete_journal_entry(
    entry_id: int,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        WellnessService(db).delete_journal_entry(user.id, entry_id)
    except ValueError as e:
        raise _not_found(e)
    except Exception as e:
        raise _server_error("Failed to delete journal entry", e)
    return {"message": "Journal entry deleted successfully"}


# Goals

@router.get("/goals", response_model=List[GoalResponse])
async def list_goals(
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).list_goals(user.id)
    except Exception as e:
        raise _server_error("Failed to fetch goals", e)


@router.post("/goals", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    request: GoalCreate,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).create_goal(user.id, request.model_dump())
    except Exception as e:
        raise _server_error("Failed to create goal", e)


@router.put("/goals/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: int,
    request: GoalUpdate,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).update_goal(user.id, goal_id, request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise _not_found(e)
    except Exception as e:
        raise _server_error("Failed to update goal", e)


@router.delete("/goals/{goal_id}")
async def delete_goal(
    goal_id: int,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        WellnessService(db).delete_goal(user.id, goal_id)
    except ValueError as e:
        raise _not_found(e)
    except Exception as e:
        raise _server_error("Failed to delete goal", e)
    return {"message": "Goal deleted successfully"}


# Habits

@router.get("/habits", response_model=List[HabitResponse])
async def list_habits(
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).list_habits(user.id)
    except Exception as e:
        raise _server_error("Failed to fetch habits", e)


@router.post("/habits", response_model=HabitResponse, status_code=status.HTTP_201_CREATED)
async def create_habit(
    request: HabitCreate,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).create_habit(user.id, request.model_dump())
    except Exception as e:
        raise _server_error("Failed to create habit", e)


@router.put("/habits/{habit_id}", response_model=HabitResponse)
async def update_habit(
    habit_id: int,
    request: HabitUpdate,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).update_habit(user.id, habit_id, request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise _not_found(e)
    except Exception as e:
        raise _server_error("Failed to update habit", e)


@router.delete("/habits/{habit_id}")
async def delete_habit(
    habit_id: int,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        WellnessService(db).delete_habit(user.id, habit_id)
    except ValueError as e:
        raise _not_found(e)
    except Exception as e:
        raise _server_error("Failed to delete habit", e)
    return {"message": "Habit deleted successfully"}


# Mood

@router.get("/mood-entries", response_model=List[MoodEntryResponse])
async def list_mood_entries(
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).list_mood_entries(user.id)
    except Exception as e:
        raise _server_error("Failed to fetch mood entries", e)


@router.post("/mood-entries", response_model=MoodEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_mood_entry(
    request: MoodEntryCreate,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).create_mood_entry(user.id, request.model_dump())
    except Exception as e:
        raise _server_error("Failed to create mood entry", e)


# Analytics

@router.get("/analytics")
async def analytics(
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return WellnessService(db).analytics(user.id)
    except Exception as e:
        raise _server_error("Failed to fetch analytics", e)
