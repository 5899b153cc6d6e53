"""
Coaching progress API routes
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from bloom.core.auth import get_current_user_required
from bloom.core.database import get_db
from bloom.core.logging_config import LoggingConfig
from bloom.models.user import User
from bloom.services.progress_service import ProgressService

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/coaching-progress", tags=["coaching"])


class ProgressCreate(BaseModel):
    module_id: str = Field(..., min_length=1, max_length=50)
    component_id: str = Field(..., min_length=1, max_length=100)
    week_number: Optional[int] = Field(None, ge=1, le=6)
    completed: bool = False
    completed_at: Optional[datetime] = None
    progress: int = Field(0, ge=0, le=100)
    response_data: Optional[Dict[str, Any]] = None


class ProgressUpdate(BaseModel):
    completed: Optional[bool] = None
    completed_at: Optional[datetime] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    response_data: Optional[Dict[str, Any]] = None


class ProgressResponse(BaseModel):
    id: int
    user_id: int
    week_number: int
    module_id: str
    component_id: str
    completed: bool
    completed_at: Optional[datetime] = None
    progress: int
    response_data: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(from_attributes=True)


@router.get("", response_model=List[ProgressResponse])
async def list_progress(
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return ProgressService(db).list_for_user(user.id)
    except Exception as e:
        logger.error(f"Error fetching coaching progress: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch coaching progress"
        )


@router.post("", response_model=ProgressResponse, status_code=status.HTTP_201_CREATED)
async def create_progress(
    request: ProgressCreate,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    try:
        return ProgressService(db).create(user.id, request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating coaching progress: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create coaching progress"
        )


@router.put("/{progress_id}", response_model=ProgressResponse)
async def update_progress(
    progress_id: int,
    request: ProgressUpdate,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
):
    service = ProgressService(db)
    existing = service.get(progress_id)
    if existing is None or existing.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Coaching progress not found")
    try:
        return service.update(progress_id, request.model_dump(exclude_unset=True))
    except Exception as e:
        logger.error(f"Error updating coaching progress: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update coaching progress"
        )
