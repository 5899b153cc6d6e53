"""
Coaching API routes: component catalogue, resolution and live exercise sessions
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from bloom.coaching.descriptors import components_for
from bloom.coaching.exercises import (InvalidFieldValue, PhaseBlocked,
                                      UnknownField)
from bloom.coaching.loader import ComponentLoader
from bloom.core.auth import get_current_user_required
from bloom.core.database import get_db
from bloom.core.logging_config import LoggingConfig
from bloom.models.user import User
from bloom.services.coaching_session_service import (CoachingSessionService,
                                                     CoachingSessionStore,
                                                     get_session_store)

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/coaching", tags=["coaching"])


class StartSessionRequest(BaseModel):
    module_id: str = Field(..., min_length=1, max_length=50)
    component: Optional[Dict[str, Any]] = None
    component_id: Optional[str] = None

    def component_ref(self) -> Any:
        if self.component is not None:
            return self.component
        if self.component_id:
            return {"id": self.component_id}
        return None


class UpdateSessionRequest(BaseModel):
    fields: Dict[str, Any]


class CompleteSessionResponse(BaseModel):
    view: Dict[str, Any]
    payload: Dict[str, Any]


def _ignore_completion(component_id: str, data: Dict[str, Any]):
    logger.debug(f"Preview completion of {component_id} ignored")


def _ignore_close():
    pass


def _session_service(
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
    store: CoachingSessionStore = Depends(get_session_store),
) -> CoachingSessionService:
    return CoachingSessionService(db, user.id, store=store)


def _raise_for_exercise_error(e: Exception):
    if isinstance(e, PhaseBlocked):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, (UnknownField, InvalidFieldValue)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, ValueError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    logger.error(f"Error in coaching session: {e}", exc_info=True)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Failed to update coaching session"
    )


@router.get("/components")
async def list_components(module_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Catalogue entries, optionally for one module"""
    return [d.to_dict() for d in components_for(module_id)]


@router.get("/modules/{module_id}/components/{component_id}")
async def preview_component(module_id: str, component_id: str):
    """Resolve a component without starting a session"""
    loader = ComponentLoader(
        {"id": component_id},
        module_id,
        _ignore_completion,
        _ignore_close,
        loading_delay_ms=0,
    )
    await loader.load()
    return loader.view().to_dict()


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def start_session(
    request: StartSessionRequest,
    service: CoachingSessionService = Depends(_session_service),
):
    """
    Start an exercise for the current member.

    Unknown modules and components still answer 201 with the fallback view
    and no session id, so clients can render it.
    """
    try:
        session, view = await service.start(request.module_id, request.component_ref())
    except Exception as e:
        logger.error(f"Error starting coaching session: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to start coaching session"
        )
    if session is None:
        data = view.to_dict()
        data["session_id"] = None
        data["module_id"] = request.module_id
        return data
    return session.view()


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    service: CoachingSessionService = Depends(_session_service),
):
    try:
        return service.get(session_id).view()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/sessions/{session_id}/update")
async def update_session(
    session_id: str,
    request: UpdateSessionRequest,
    service: CoachingSessionService = Depends(_session_service),
):
    try:
        return service.update(session_id, request.fields).view()
    except Exception as e:
        _raise_for_exercise_error(e)


@router.post("/sessions/{session_id}/advance")
async def advance_session(
    session_id: str,
    service: CoachingSessionService = Depends(_session_service),
):
    try:
        return service.advance(session_id).view()
    except Exception as e:
        _raise_for_exercise_error(e)


@router.post("/sessions/{session_id}/complete", response_model=CompleteSessionResponse)
async def complete_session(
    session_id: str,
    service: CoachingSessionService = Depends(_session_service),
):
    try:
        session, payload = service.complete(session_id)
        return CompleteSessionResponse(view=session.view(), payload=payload)
    except Exception as e:
        _raise_for_exercise_error(e)


@router.post("/sessions/{session_id}/close", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    service: CoachingSessionService = Depends(_session_service),
):
    try:
        service.close(session_id)
    except Exception as e:
        _raise_for_exercise_error(e)
    return None
