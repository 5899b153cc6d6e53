"""
Lead funnel API routes
"""
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.orm import Session

from bloom.core.auth import require_admin
from bloom.core.database import get_db
from bloom.core.logging_config import LoggingConfig
from bloom.models.user import User
from bloom.services.email_sender import EmailSender, get_email_sender
from bloom.services.marketing_funnel import MarketingFunnel
from bloom.services.nurture_scheduler import NurtureScheduler

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/leads", tags=["leads"])
funnel_router = APIRouter(prefix="/api/funnel", tags=["leads"])


class LeadCaptureRequest(BaseModel):
    email: EmailStr
    source: str = Field(..., min_length=1, max_length=100)
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    lead_magnet: Optional[str] = Field(None, max_length=100)
    utm_source: Optional[str] = Field(None, max_length=100)
    utm_medium: Optional[str] = Field(None, max_length=100)
    utm_campaign: Optional[str] = Field(None, max_length=100)


class LeadResponse(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    source: str
    lead_magnet: Optional[str] = None
    lead_score: int
    status: str
    last_engaged: datetime
    converted_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversionRequest(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=100)
    event_data: Optional[Dict[str, Any]] = None
    value: Optional[float] = Field(None, ge=0)


class ConversionResponse(BaseModel):
    id: int
    lead_id: int
    event_type: str
    event_data: Optional[Dict[str, Any]] = None
    value: Optional[float] = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class BehaviorRequest(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=100)
    event_data: Optional[Dict[str, Any]] = None
    session_id: Optional[str] = Field(None, max_length=100)


def get_funnel(
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
) -> MarketingFunnel:
    return MarketingFunnel(db, scheduler=NurtureScheduler(db, sender=sender))


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def capture_lead(
    request: LeadCaptureRequest,
    funnel: MarketingFunnel = Depends(get_funnel),
):
    """Capture a lead; a repeat email refreshes the existing lead"""
    try:
        return funnel.capture_lead(request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error capturing lead: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to capture lead"
        )


@router.post("/{lead_id}/conversions", response_model=ConversionResponse, status_code=status.HTTP_201_CREATED)
async def track_conversion(
    lead_id: int,
    request: ConversionRequest,
    funnel: MarketingFunnel = Depends(get_funnel),
):
    try:
        return funnel.track_conversion(lead_id, request.event_type, request.event_data, request.value)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(f"Error tracking conversion: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to track conversion"
        )


@router.post("/{lead_id}/behavior", response_model=LeadResponse)
async def track_behavior(
    lead_id: int,
    request: BehaviorRequest,
    funnel: MarketingFunnel = Depends(get_funnel),
):
    try:
        return funnel.track_behavior(
            lead_id, request.event_type, request.event_data, session_id=request.session_id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(f"Error tracking behavior: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to track behavior"
        )


@router.post("/{lead_id}/unsubscribe", response_model=LeadResponse)
async def unsubscribe(
    lead_id: int,
    funnel: MarketingFunnel = Depends(get_funnel),
):
    try:
        return funnel.unsubscribe(lead_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(f"Error unsubscribing lead: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to unsubscribe lead"
        )


@funnel_router.get("/analytics")
async def funnel_analytics(
    admin: User = Depends(require_admin),
    funnel: MarketingFunnel = Depends(get_funnel),
):
    return funnel.get_funnel_analytics()


@funnel_router.post("/dispatch")
async def dispatch_due_emails(
    limit: Optional[int] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
) -> Dict[str, int]:
    """Deliver due nurture emails now instead of waiting for the dispatcher"""
    try:
        return await NurtureScheduler(db, sender=sender).dispatch_due(limit=limit)
    except Exception as e:
        logger.error(f"Error dispatching nurture emails: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to dispatch nurture emails"
        )


@funnel_router.get("/leads/{lead_id}/segments")
async def lead_segments(
    lead_id: int,
    admin: User = Depends(require_admin),
    funnel: MarketingFunnel = Depends(get_funnel),
) -> Dict[str, Any]:
    if not funnel.get_lead(lead_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Lead {lead_id} not found")
    return {"lead_id": lead_id, "segments": funnel.segments_of(lead_id)}
