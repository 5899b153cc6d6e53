"""
Coaching progress store: saved responses and completion records
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bloom.coaching.registry import get_module
from bloom.core.clock import Clock
from bloom.core.logging_config import LoggingConfig
from bloom.core.metrics import coaching_completions_total
from bloom.models.coaching import CoachingProgress

logger = LoggingConfig.get_logger(__name__)


def week_number_for(module_id: str) -> int:
    """week6 shares week5's table but keeps its own week number"""
    if module_id.startswith("week") and module_id[4:].isdigit():
        return int(module_id[4:])
    module = get_module(module_id)
    return module.week_number if module else 0


class ProgressService:
    """Service for coaching progress rows"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or Clock()

    def list_for_user(self, user_id: int) -> List[CoachingProgress]:
        return self.db.query(CoachingProgress).filter(
            CoachingProgress.user_id == user_id
        ).order_by(CoachingProgress.week_number, CoachingProgress.id).all()

    def get(self, progress_id: int) -> Optional[CoachingProgress]:
        return self.db.query(CoachingProgress).filter(CoachingProgress.id == progress_id).first()

    def find(self, user_id: int, module_id: str, component_id: str) -> Optional[CoachingProgress]:
        return self.db.query(CoachingProgress).filter(
            CoachingProgress.user_id == user_id,
            CoachingProgress.module_id == module_id,
            CoachingProgress.component_id == component_id,
        ).first()

    def create(self, user_id: int, data: Dict[str, Any]) -> CoachingProgress:
        """
        Raises:
            ValueError: If a row for the same component already exists
        """
        progress = CoachingProgress(
            user_id=user_id,
            week_number=data.get("week_number") or week_number_for(data["module_id"]),
            module_id=data["module_id"],
            component_id=data["component_id"],
            completed=data.get("completed", False),
            completed_at=data.get("completed_at"),
            progress=data.get("progress", 0),
            response_data=data.get("response_data"),
        )
        self.db.add(progress)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValueError(
                f"Progress for {data['module_id']}/{data['component_id']} already exists"
            )
        self.db.refresh(progress)
        return progress

    def update(self, progress_id: int, updates: Dict[str, Any]) -> CoachingProgress:
        progress = self.get(progress_id)
        if not progress:
            raise ValueError(f"Coaching progress {progress_id} not found")
        for field in ("completed", "completed_at", "progress", "response_data"):
            if field in updates:
                setattr(progress, field, updates[field])
        self.db.commit()
        self.db.refresh(progress)
        return progress

    def record_completion(
        self,
        user_id: int,
        module_id: str,
        component_id: str,
        data: Dict[str, Any],
    ) -> CoachingProgress:
        """Persist a finished exercise's payload, creating the row if needed"""
        now = self.clock.now()
        progress = self.find(user_id, module_id, component_id)
        if progress is None:
            progress = CoachingProgress(
                user_id=user_id,
                week_number=week_number_for(module_id),
                module_id=module_id,
                component_id=component_id,
            )
            self.db.add(progress)

        progress.completed = True
        progress.completed_at = now
        progress.progress = 100
        progress.response_data = dict(data)
        self.db.commit()
        self.db.refresh(progress)

        coaching_completions_total.labels(module_id=module_id, component_id=component_id).inc()
        logger.info(
            "Exercise completed",
            extra={"user_id": user_id, "module_id": module_id, "component_id": component_id},
        )
        return progress

    def save_draft(
        self,
        user_id: int,
        module_id: str,
        component_id: str,
        data: Dict[str, Any],
    ) -> CoachingProgress:
        """Store in-progress responses without marking the exercise complete"""
        progress = self.find(user_id, module_id, component_id)
        if progress is None:
            progress = CoachingProgress(
                user_id=user_id,
                week_number=week_number_for(module_id),
                module_id=module_id,
                component_id=component_id,
            )
            self.db.add(progress)
        if not progress.completed:
            progress.response_data = dict(data)
        self.db.commit()
        self.db.refresh(progress)
        return progress

    def saved_response(self, user_id: int, component_id: str) -> Optional[Dict[str, Any]]:
        """Latest saved responses for a component, used to resume an exercise"""
        progress = self.db.query(CoachingProgress).filter(
            CoachingProgress.user_id == user_id,
            CoachingProgress.component_id == component_id,
        ).order_by(CoachingProgress.id.desc()).first()
        if progress is None or not isinstance(progress.response_data, dict):
            return None
        return progress.response_data
