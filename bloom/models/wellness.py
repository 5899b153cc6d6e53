"""
SQLAlchemy models for member wellness data: assessments, journal, goals, habits, mood
"""
from enum import Enum

from sqlalchemy import (Boolean, CheckConstraint, Column, DateTime, ForeignKey,
                        Integer, String, Text)

from bloom.core.clock import utcnow
from bloom.core.database import Base, JSONType


class AssessmentType(str, Enum):
    MENTAL = "mental"
    PHYSICAL = "physical"
    COGNITIVE = "cognitive"


class HabitFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class HealthAssessment(Base):
    __tablename__ = "health_assessments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assessment_type = Column(
        String(20),
        CheckConstraint("assessment_type IN ('mental', 'physical', 'cognitive')"),
        nullable=False,
    )
    score = Column(Integer, nullable=False)
    responses = Column(JSONType, nullable=False)
    completed_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<HealthAssessment(id={self.id}, type={self.assessment_type}, score={self.score})>"


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    mood = Column(String(20), nullable=True)  # very-happy, happy, neutral, sad, very-sad
    prompt = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)  # sleep, mindfulness, exercise, self-care
    target_value = Column(Integer, nullable=True)
    current_value = Column(Integer, default=0, nullable=False)
    target_date = Column(DateTime, nullable=True)
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    frequency = Column(
        String(20),
        CheckConstraint("frequency IN ('daily', 'weekly')"),
        nullable=False,
    )
    streak = Column(Integer, default=0, nullable=False)
    last_completed = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class MoodEntry(Base):
    __tablename__ = "mood_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mood = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
