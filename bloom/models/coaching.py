"""
SQLAlchemy model for per-exercise coaching progress
"""
from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Index, Integer,
                        String, UniqueConstraint)

from bloom.core.database import Base, JSONType


class CoachingProgress(Base):
    """
    One row per (user, module, component). Holds the latest saved responses so
    an exercise can be resumed, and the completion flag once it is finished.
    """
    __tablename__ = "coaching_progress"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    week_number = Column(Integer, nullable=False)
    module_id = Column(String(50), nullable=False)
    component_id = Column(String(100), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    progress = Column(Integer, default=0, nullable=False)  # 0-100
    response_data = Column(JSONType, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "module_id", "component_id", name="uq_coaching_progress_component"),
        Index("idx_coaching_progress_user_week", "user_id", "week_number"),
    )

    def __repr__(self):
        return (
            f"<CoachingProgress(id={self.id}, user_id={self.user_id}, "
            f"component={self.module_id}/{self.component_id}, completed={self.completed})>"
        )
