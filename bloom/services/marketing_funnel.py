"""
Lead capture, scoring and conversion tracking
"""
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bloom.core.clock import Clock
from bloom.core.logging_config import LoggingConfig
from bloom.core.metrics import conversion_events_total, leads_captured_total
from bloom.models.marketing import (BehaviorEvent, ConversionEvent,
                                    EmailSegment, EmailSegmentMember, Lead,
                                    LeadStatus)
from bloom.services.nurture_scheduler import NurtureScheduler

logger = LoggingConfig.get_logger(__name__)


@dataclass(frozen=True)
class SequenceStep:
    subject: str
    delay_days: int
    template: str


WELCOME_SEQUENCE: List[SequenceStep] = [
    SequenceStep("Welcome! Your Free Hormone Reset Guide is Here", 0, "leadMagnetDelivery"),
    SequenceStep("Did you take the assessment yet? Your results are waiting", 2, "assessmentReminder"),
    SequenceStep("3 Signs Your Hormones Need Attention (Most Women Miss #2)", 5, "educationalContent1"),
    SequenceStep("The #1 Mistake Women Make During Perimenopause", 8, "educationalContent2"),
    SequenceStep("Ready to transform your midlife experience?", 12, "softPitch"),
]

PURCHASE_EVENT = "coaching_purchased"
HIGH_SCORE_THRESHOLD = 50
WARM_SCORE_THRESHOLD = 25
RECENT_WINDOW_DAYS = 30

# Fields a repeat capture may overwrite when newly provided
_REFRESHABLE_FIELDS = ("first_name", "last_name", "utm_source", "utm_medium", "utm_campaign")

_BEHAVIOR_SCORES = {
    "email_opened": 5,
    "email_clicked": 10,
    "assessment_started": 15,
    "assessment_completed": 25,
    "download_completed": 12,
    "social_share": 8,
}


def initial_lead_score(lead_data: Dict[str, Any]) -> int:
    score = 0
    if lead_data.get("source") == "landing_page":
        score += 10
    if lead_data.get("lead_magnet") == "free_assessment":
        score += 15
    if lead_data.get("utm_source") == "facebook":
        score += 5
    if lead_data.get("utm_source") == "google":
        score += 8
    return score


def behavior_score(event_type: str, event_data: Optional[Dict[str, Any]] = None) -> int:
    """Points a behavioural event adds to a lead's score"""
    event_data = event_data or {}
    if event_type == "page_view":
        page_url = event_data.get("pageUrl") or ""
        if "/coaching" in page_url:
            return 8
        if "/checkout" in page_url:
            return 20
        return 2
    if event_type == "video_watched":
        watched = event_data.get("watchPercentage") or 0
        return int(watched // 25) * 5
    return _BEHAVIOR_SCORES.get(event_type, 1)


def segments_for_lead(lead: Lead) -> List[str]:
    """Auto-generated segments a lead qualifies for"""
    score = lead.lead_score or 0
    segments = []
    if score >= HIGH_SCORE_THRESHOLD:
        segments.append("high_intent")
    if score >= WARM_SCORE_THRESHOLD:
        segments.append("warm_leads")
    if lead.source == "facebook":
        segments.append("facebook_traffic")
    if lead.source == "google":
        segments.append("google_traffic")
    if lead.lead_magnet == "free_assessment":
        segments.append("assessment_interested")
    return segments


def empty_funnel_analytics() -> Dict[str, Any]:
    return {
        "totalLeads": 0,
        "convertedLeads": 0,
        "conversionRate": "0",
        "recentLeads": 0,
        "highScoreLeads": 0,
        "averageLeadScore": "0",
    }


class MarketingFunnel:
    """Service for the lead funnel; wraps a NurtureScheduler for the drip sequence"""

    def __init__(
        self,
        db: Session,
        scheduler: Optional[NurtureScheduler] = None,
        clock: Optional[Clock] = None,
    ):
        self.db = db
        self.clock = clock or Clock()
        self.scheduler = scheduler or NurtureScheduler(db, clock=self.clock)

    def get_lead(self, lead_id: int) -> Optional[Lead]:
        return self.db.query(Lead).filter(Lead.id == lead_id).first()

    def get_lead_by_email(self, email: str) -> Optional[Lead]:
        return self.db.query(Lead).filter(Lead.email == email).first()

    def capture_lead(self, lead_data: Dict[str, Any]) -> Lead:
        """
        Record a lead, or refresh an existing one with the same email.

        Only new leads get the welcome sequence. Both paths log a
        ``lead_captured`` behaviour event and conversion event, then refresh
        the lead's segments.
        """
        email = lead_data.get("email")
        source = lead_data.get("source")
        if not email or not source:
            raise ValueError("Lead email and source are required")

        lead = self.get_lead_by_email(email)
        if lead:
            self._refresh_lead(lead, lead_data)
            outcome = "updated"
        else:
            try:
                lead = self._create_lead(lead_data)
                outcome = "created"
            except IntegrityError:
                # Concurrent capture of the same email won the insert
                self.db.rollback()
                lead = self.get_lead_by_email(email)
                if lead is None:
                    raise
                self._refresh_lead(lead, lead_data)
                outcome = "updated"
            else:
                self.trigger_welcome_sequence(lead.id)

        leads_captured_total.labels(source=source, outcome=outcome).inc()
        logger.info(
            f"Lead {outcome}",
            extra={"lead_id": lead.id, "source": source, "outcome": outcome},
        )

        self.log_behavior_event(lead.id, "lead_captured", {
            "source": source,
            "leadMagnet": lead_data.get("lead_magnet"),
            "utm": {
                "source": lead_data.get("utm_source"),
                "medium": lead_data.get("utm_medium"),
                "campaign": lead_data.get("utm_campaign"),
            },
        })
        self.db.commit()
        self.track_conversion(lead.id, "lead_captured", {"source": source})
        self.update_lead_segments(lead.id)
        self.db.refresh(lead)
        return lead

    def _create_lead(self, lead_data: Dict[str, Any]) -> Lead:
        now = self.clock.now()
        lead = Lead(
            email=lead_data["email"],
            first_name=lead_data.get("first_name"),
            last_name=lead_data.get("last_name"),
            source=lead_data["source"],
            lead_magnet=lead_data.get("lead_magnet"),
            utm_source=lead_data.get("utm_source"),
            utm_medium=lead_data.get("utm_medium"),
            utm_campaign=lead_data.get("utm_campaign"),
            lead_score=initial_lead_score(lead_data),
            status=LeadStatus.ACTIVE.value,
            last_engaged=now,
            created_at=now,
        )
        self.db.add(lead)
        self.db.commit()
        self.db.refresh(lead)
        return lead

    def _refresh_lead(self, lead: Lead, lead_data: Dict[str, Any]):
        lead.last_engaged = self.clock.now()
        for field in _REFRESHABLE_FIELDS:
            value = lead_data.get(field)
            if value:
                setattr(lead, field, value)
        self.db.commit()

    def trigger_welcome_sequence(self, lead_id: int):
        """Schedule the five welcome emails in order"""
        return [
            self.scheduler.schedule_email(lead_id, step.subject, step.template, step.delay_days)
            for step in WELCOME_SEQUENCE
        ]

    def schedule_email(self, lead_id: int, subject: str, template_type: str, delay_days: float):
        return self.scheduler.schedule_email(lead_id, subject, template_type, delay_days)

    async def send_scheduled_email(self, lead_id: int, subject: str, template_type: str):
        return await self.scheduler.send_scheduled_email(lead_id, subject, template_type)

    def track_conversion(
        self,
        lead_id: int,
        event_type: str,
        event_data: Optional[Dict[str, Any]] = None,
        value: Optional[float] = None,
    ) -> ConversionEvent:
        """
        Append a conversion event. A purchase also converts the lead.

        Raises:
            ValueError: If the lead does not exist
        """
        lead = self.get_lead(lead_id)
        if not lead:
            raise ValueError(f"Lead {lead_id} not found")

        now = self.clock.now()
        event = ConversionEvent(
            lead_id=lead_id,
            event_type=event_type,
            event_data=event_data,
            value=Decimal(str(value)) if value is not None else None,
            timestamp=now,
        )
        self.db.add(event)

        if event_type == PURCHASE_EVENT:
            lead.status = LeadStatus.CONVERTED.value
            lead.converted_at = now

        self.db.commit()
        self.db.refresh(event)

        conversion_events_total.labels(event_type=event_type).inc()
        if event_type == PURCHASE_EVENT:
            logger.info(f"Lead {lead_id} converted", extra={"lead_id": lead_id, "value": value})
        return event

    def log_behavior_event(
        self,
        lead_id: int,
        event_type: str,
        event_data: Optional[Dict[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> BehaviorEvent:
        """Add a behaviour event to the session; the caller commits"""
        now = self.clock.now()
        event = BehaviorEvent(
            lead_id=lead_id,
            session_id=session_id or f"session_{int(now.timestamp() * 1000)}",
            event_type=event_type,
            event_data=event_data,
            page_url=(event_data or {}).get("pageUrl"),
            timestamp=now,
        )
        self.db.add(event)
        return event

    def track_behavior(
        self,
        lead_id: int,
        event_type: str,
        event_data: Optional[Dict[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> Lead:
        """Log an engagement event, raise the lead score and refresh last_engaged and segments"""
        lead = self.get_lead(lead_id)
        if not lead:
            raise ValueError(f"Lead {lead_id} not found")

        self.log_behavior_event(lead_id, event_type, event_data, session_id=session_id)
        increase = behavior_score(event_type, event_data)
        self.db.query(Lead).filter(Lead.id == lead_id).update(
            {"lead_score": Lead.lead_score + increase, "last_engaged": self.clock.now()},
            synchronize_session=False,
        )
        self.db.commit()
        self.db.refresh(lead)

        logger.debug(
            f"Lead score +{increase} for {event_type}",
            extra={"lead_id": lead_id, "event_type": event_type, "lead_score": lead.lead_score},
        )
        self.update_lead_segments(lead_id)
        return lead

    def behavior_events(self, lead_id: int) -> List[BehaviorEvent]:
        return self.db.query(BehaviorEvent).filter(
            BehaviorEvent.lead_id == lead_id
        ).order_by(BehaviorEvent.timestamp, BehaviorEvent.id).all()

    def update_lead_segments(self, lead_id: int) -> List[str]:
        """
        Add the lead to every auto-generated segment it now qualifies for.

        Membership is only ever added; returns the names of the segments
        the lead joined on this call.
        """
        lead = self.get_lead(lead_id)
        if not lead:
            return []
        return [name for name in segments_for_lead(lead) if self.add_to_segment(lead_id, name)]

    def add_to_segment(self, lead_id: int, segment_name: str) -> bool:
        """Add a lead to a segment, creating the segment on first use; False if already a member"""
        segment = self.db.query(EmailSegment).filter(EmailSegment.name == segment_name).first()
        if segment is None:
            segment = EmailSegment(
                name=segment_name,
                description=f"Auto-generated segment: {segment_name}",
                conditions={"autoGenerated": True},
                is_active=True,
                lead_count=0,
                created_at=self.clock.now(),
            )
            self.db.add(segment)
            self.db.flush()

        existing = self.db.query(EmailSegmentMember).filter(
            EmailSegmentMember.segment_id == segment.id,
            EmailSegmentMember.lead_id == lead_id,
        ).first()
        if existing:
            self.db.commit()
            return False

        self.db.add(EmailSegmentMember(segment_id=segment.id, lead_id=lead_id, added_at=self.clock.now()))
        self.db.query(EmailSegment).filter(EmailSegment.id == segment.id).update(
            {"lead_count": EmailSegment.lead_count + 1},
            synchronize_session=False,
        )
        self.db.commit()
        logger.info(
            f"Lead {lead_id} added to segment {segment_name}",
            extra={"lead_id": lead_id, "segment": segment_name},
        )
        return True

    def segments_of(self, lead_id: int) -> List[str]:
        return [
            name for (name,) in self.db.query(EmailSegment.name).join(
                EmailSegmentMember, EmailSegmentMember.segment_id == EmailSegment.id
            ).filter(EmailSegmentMember.lead_id == lead_id).order_by(EmailSegment.name).all()
        ]

    def unsubscribe(self, lead_id: int) -> Lead:
        """Stop nurturing a lead and cancel whatever is still pending"""
        lead = self.get_lead(lead_id)
        if not lead:
            raise ValueError(f"Lead {lead_id} not found")

        lead.status = LeadStatus.UNSUBSCRIBED.value
        self.db.commit()
        cancelled = self.scheduler.cancel_pending(lead_id)
        self.db.refresh(lead)

        logger.info(f"Lead {lead_id} unsubscribed", extra={"lead_id": lead_id, "cancelled": cancelled})
        return lead

    def get_funnel_analytics(self) -> Dict[str, Any]:
        try:
            total = self.db.query(func.count(Lead.id)).scalar() or 0
            if total == 0:
                analytics = empty_funnel_analytics()
                analytics["averageLeadScore"] = "0.0"
                return analytics

            converted = self.db.query(func.count(Lead.id)).filter(
                Lead.status == LeadStatus.CONVERTED.value
            ).scalar() or 0
            recent = self.db.query(func.count(Lead.id)).filter(
                Lead.created_at >= self.clock.now() - timedelta(days=RECENT_WINDOW_DAYS)
            ).scalar() or 0
            high_score = self.db.query(func.count(Lead.id)).filter(
                Lead.lead_score >= HIGH_SCORE_THRESHOLD
            ).scalar() or 0
            score_sum = self.db.query(func.coalesce(func.sum(Lead.lead_score), 0)).scalar() or 0

            return {
                "totalLeads": total,
                "convertedLeads": converted,
                "conversionRate": f"{converted / total * 100:.2f}",
                "recentLeads": recent,
                "highScoreLeads": high_score,
                "averageLeadScore": f"{score_sum / total:.1f}",
            }
        except SQLAlchemyError as e:
            logger.error(f"Error fetching funnel analytics: {e}", exc_info=True)
            self.db.rollback()
            return empty_funnel_analytics()
