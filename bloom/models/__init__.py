"""
SQLAlchemy models
"""
from bloom.core.database import Base  # noqa: F401
from bloom.models.coaching import CoachingProgress  # noqa: F401
from bloom.models.marketing import (BehaviorEvent,  # noqa: F401
                                    ConversionEvent, EmailSegment,
                                    EmailSegmentMember, EmailSend, Lead,
                                    LeadStatus, ScheduledEmail,
                                    ScheduledEmailStatus)
from bloom.models.user import Session, User, UserRole  # noqa: F401
from bloom.models.wellness import (AssessmentType, Goal,  # noqa: F401
                                   Habit, HabitFrequency, HealthAssessment,
                                   JournalEntry, MoodEntry)
