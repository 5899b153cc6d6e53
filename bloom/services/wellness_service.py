"""
Wellness storage: assessments, journal entries, goals, habits and mood entries
"""
from collections import Counter
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.orm import Session

from bloom.core.database import Base
from bloom.core.logging_config import LoggingConfig
from bloom.models.wellness import (AssessmentType, Goal, Habit,
                                   HealthAssessment, JournalEntry, MoodEntry)

logger = LoggingConfig.get_logger(__name__)


class WellnessService:
    """Per-user CRUD over the wellness tables"""

    def __init__(self, db: Session):
        self.db = db

    def _create(self, model: Type[Base], user_id: int, data: Dict[str, Any]):
        row = model(user_id=user_id, **data)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.debug(f"Created {model.__tablename__} row {row.id} for user {user_id}")
        return row

    def _owned(self, model: Type[Base], row_id: int, user_id: int):
        row = self.db.query(model).filter(model.id == row_id, model.user_id == user_id).first()
        if not row:
            raise ValueError(f"{model.__name__} {row_id} not found")
        return row

    def _update(self, model: Type[Base], row_id: int, user_id: int, updates: Dict[str, Any]):
        row = self._owned(model, row_id, user_id)
        for field, value in updates.items():
            setattr(row, field, value)
        self.db.commit()
        self.db.refresh(row)
        return row

    def _delete(self, model: Type[Base], row_id: int, user_id: int):
        row = self._owned(model, row_id, user_id)
        self.db.delete(row)
        self.db.commit()

    # Health assessments

    def list_assessments(self, user_id: int) -> List[HealthAssessment]:
        return self.db.query(HealthAssessment).filter(
            HealthAssessment.user_id == user_id
        ).order_by(HealthAssessment.completed_at.desc()).all()

    def create_assessment(self, user_id: int, data: Dict[str, Any]) -> HealthAssessment:
        return self._create(HealthAssessment, user_id, data)

    def latest_assessment(self, user_id: int, assessment_type: str) -> Optional[HealthAssessment]:
        return self.db.query(HealthAssessment).filter(
            HealthAssessment.user_id == user_id,
            HealthAssessment.assessment_type == assessment_type,
        ).order_by(HealthAssessment.completed_at.desc()).first()

    # Journal

    def list_journal_entries(self, user_id: int) -> List[JournalEntry]:
        return self.db.query(JournalEntry).filter(
            JournalEntry.user_id == user_id
        ).order_by(JournalEntry.created_at.desc()).all()

    def create_journal_entry(self, user_id: int, data: Dict[str, Any]) -> JournalEntry:
        return self._create(JournalEntry, user_id, data)

    def delete_journal_entry(self, user_id: int, entry_id: int):
        self._delete(JournalEntry, entry_id, user_id)

    # Goals

    def list_goals(self, user_id: int) -> List[Goal]:
        return self.db.query(Goal).filter(Goal.user_id == user_id).order_by(Goal.created_at.desc()).all()

    def create_goal(self, user_id: int, data: Dict[str, Any]) -> Goal:
        return self._create(Goal, user_id, data)

    def update_goal(self, user_id: int, goal_id: int, updates: Dict[str, Any]) -> Goal:
        return self._update(Goal, goal_id, user_id, updates)

    def delete_goal(self, user_id: int, goal_id: int):
        self._delete(Goal, goal_id, user_id)

    # Habits

    def list_habits(self, user_id: int) -> List[Habit]:
        return self.db.query(Habit).filter(Habit.user_id == user_id).order_by(Habit.created_at.desc()).all()

    def create_habit(self, user_id: int, data: Dict[str, Any]) -> Habit:
        return self._create(Habit, user_id, data)

    def update_habit(self, user_id: int, habit_id: int, updates: Dict[str, Any]) -> Habit:
        return self._update(Habit, habit_id, user_id, updates)

    def delete_habit(self, user_id: int, habit_id: int):
        self._delete(Habit, habit_id, user_id)

    # Mood

    def list_mood_entries(self, user_id: int) -> List[MoodEntry]:
        return self.db.query(MoodEntry).filter(
            MoodEntry.user_id == user_id
        ).order_by(MoodEntry.created_at.desc()).all()

    def create_mood_entry(self, user_id: int, data: Dict[str, Any]) -> MoodEntry:
        return self._create(MoodEntry, user_id, data)

    # Analytics

    def analytics(self, user_id: int) -> Dict[str, Any]:
        """Totals, per-type average assessment scores and mood distribution"""
        assessments = self.list_assessments(user_id)
        goals = self.list_goals(user_id)
        habits = self.list_habits(user_id)
        moods = self.list_mood_entries(user_id)

        averages = {}
        for assessment_type in AssessmentType:
            scores = [a.score for a in assessments if a.assessment_type == assessment_type.value]
            averages[assessment_type.value] = round(sum(scores) / len(scores)) if scores else 0

        return {
            "totalAssessments": len(assessments),
            "totalJournalEntries": len(self.list_journal_entries(user_id)),
            "totalMoodEntries": len(moods),
            "totalGoals": len(goals),
            "completedGoals": sum(1 for g in goals if g.completed),
            "totalHabits": len(habits),
            "activeHabits": sum(1 for h in habits if (h.streak or 0) > 0),
            "averageHealthScores": averages,
            "moodDistribution": dict(Counter(m.mood for m in moods)),
        }
