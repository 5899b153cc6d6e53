"""
Live coaching sessions: an exercise resolved for a member and driven over the API
"""
import uuid
from datetime import timedelta
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from bloom.coaching.descriptors import ComponentView
from bloom.coaching.exercises import Exercise
from bloom.coaching.loader import ComponentLoader
from bloom.core.clock import Clock
from bloom.core.logging_config import LoggingConfig
from bloom.services.progress_service import ProgressService

logger = LoggingConfig.get_logger(__name__)

SESSION_TTL = timedelta(hours=24)


class CoachingSession:
    """One member working through one exercise"""

    def __init__(self, session_id: str, user_id: int, module_id: str, loader: ComponentLoader, created_at):
        self.id = session_id
        self.user_id = user_id
        self.module_id = module_id
        self.loader = loader
        self.created_at = created_at
        self.closed = False
        # Rebound per request so completions land in that request's database session
        self.sink: Optional[Callable[[str, Dict[str, Any]], None]] = None

    @property
    def exercise(self) -> Exercise:
        return self.loader.resolve()

    def on_complete(self, component_id: str, data: Dict[str, Any]):
        if self.sink is None:
            raise RuntimeError(f"Coaching session {self.id} has no progress sink bound")
        self.sink(component_id, data)

    def on_close(self):
        self.closed = True

    def view(self) -> Dict[str, Any]:
        data = self.loader.view().to_dict()
        data["session_id"] = self.id
        data["module_id"] = self.module_id
        return data


class CoachingSessionStore:
    """In-process registry of live sessions"""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or Clock()
        self._sessions: Dict[str, CoachingSession] = {}

    def add(self, session: CoachingSession):
        self._purge()
        self._sessions[session.id] = session

    def get(self, session_id: str) -> Optional[CoachingSession]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str):
        self._sessions.pop(session_id, None)

    def _purge(self):
        cutoff = self.clock.now() - SESSION_TTL
        for session_id in [s.id for s in self._sessions.values() if s.created_at < cutoff]:
            del self._sessions[session_id]

    def __len__(self):
        return len(self._sessions)


_store: Optional[CoachingSessionStore] = None


def get_session_store() -> CoachingSessionStore:
    global _store
    if _store is None:
        _store = CoachingSessionStore()
    return _store


class CoachingSessionService:
    """Starts sessions and forwards exercise actions for one member"""

    def __init__(
        self,
        db: Session,
        user_id: int,
        store: Optional[CoachingSessionStore] = None,
        clock: Optional[Clock] = None,
    ):
        self.db = db
        self.user_id = user_id
        self.store = store or get_session_store()
        self.clock = clock or Clock()
        self.progress = ProgressService(db, clock=self.clock)

    async def start(
        self,
        module_id: str,
        component: Any,
        loading_delay_ms: Optional[int] = None,
    ) -> Tuple[Optional[CoachingSession], ComponentView]:
        """
        Resolve a component for the member.

        Returns the live session when an exercise resolved, otherwise None
        together with the fallback view.
        """
        session_id = str(uuid.uuid4())
        holder: Dict[str, CoachingSession] = {}

        def on_complete(component_id: str, data: Dict[str, Any]):
            holder["session"].on_complete(component_id, data)

        def on_close():
            holder["session"].on_close()
            self.store.remove(session_id)

        component_id = component.get("id") if isinstance(component, dict) else None
        saved = None
        if isinstance(component_id, str) and component_id:
            saved = self.progress.saved_response(self.user_id, component_id)

        loader = ComponentLoader(
            component,
            module_id,
            on_complete,
            on_close,
            saved=saved,
            clock=self.clock,
            loading_delay_ms=loading_delay_ms,
        )
        resolution = await loader.load()
        if not isinstance(resolution, Exercise):
            return None, resolution

        session = CoachingSession(session_id, self.user_id, module_id, loader, self.clock.now())
        holder["session"] = session
        self.store.add(session)
        logger.info(
            "Coaching session started",
            extra={"session_id": session_id, "user_id": self.user_id,
                   "module_id": module_id, "component_id": resolution.component_id},
        )
        return session, loader.view()

    def get(self, session_id: str) -> CoachingSession:
        """
        Raises:
            ValueError: If the session does not exist or belongs to someone else
        """
        session = self.store.get(session_id)
        if session is None or session.user_id != self.user_id:
            raise ValueError(f"Coaching session {session_id} not found")
        session.sink = self._sink_for(session)
        return session

    def _sink_for(self, session: CoachingSession):
        def sink(component_id: str, data: Dict[str, Any]):
            self.progress.record_completion(self.user_id, session.module_id, component_id, data)
        return sink

    def update(self, session_id: str, fields: Dict[str, Any]) -> CoachingSession:
        session = self.get(session_id)
        session.exercise.update(**fields)
        self.progress.save_draft(self.user_id, session.module_id, session.exercise.component_id,
                                 session.exercise.fields)
        return session

    def advance(self, session_id: str) -> CoachingSession:
        session = self.get(session_id)
        session.exercise.advance()
        return session

    def complete(self, session_id: str) -> Tuple[CoachingSession, Dict[str, Any]]:
        session = self.get(session_id)
        payload = session.exercise.complete()
        return session, payload

    def close(self, session_id: str) -> CoachingSession:
        session = self.get(session_id)
        session.exercise.close()
        return session
