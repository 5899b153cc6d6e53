"""
SQLAlchemy models for the lead nurture funnel
"""
from enum import Enum

from sqlalchemy import (Boolean, CheckConstraint, Column, DateTime, ForeignKey,
                        Index, Integer, Numeric, String, Text,
                        UniqueConstraint)
from sqlalchemy.orm import relationship

from bloom.core.clock import utcnow
from bloom.core.database import Base, JSONType


class LeadStatus(str, Enum):
    ACTIVE = "active"
    CONVERTED = "converted"
    UNSUBSCRIBED = "unsubscribed"


class ScheduledEmailStatus(str, Enum):
    PENDING = "pending"
    SENDING = "sending"  # claimed by a dispatch pass, send in flight
    SENT = "sent"
    SKIPPED = "skipped"  # lead no longer active when the email came due
    FAILED = "failed"  # provider rejected the send; kept as a dead-letter record
    CANCELLED = "cancelled"


class Lead(Base):
    """Prospective member captured before any purchase"""
    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    source = Column(String(100), nullable=False)
    lead_magnet = Column(String(100), nullable=True)
    utm_source = Column(String(100), nullable=True)
    utm_medium = Column(String(100), nullable=True)
    utm_campaign = Column(String(100), nullable=True)
    lead_score = Column(Integer, default=0, nullable=False)
    status = Column(
        String(20),
        CheckConstraint("status IN ('active', 'converted', 'unsubscribed')"),
        nullable=False,
        default=LeadStatus.ACTIVE.value,
        index=True,
    )
    last_engaged = Column(DateTime, default=utcnow, nullable=False)
    converted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    conversion_events = relationship("ConversionEvent", back_populates="lead", cascade="all, delete-orphan")
    scheduled_emails = relationship("ScheduledEmail", back_populates="lead", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Lead(id={self.id}, email={self.email}, status={self.status})>"


class ConversionEvent(Base):
    """Append-only funnel analytics log"""
    __tablename__ = "conversion_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(String(100), nullable=False, index=True)
    event_data = Column(JSONType, nullable=True)
    value = Column(Numeric(10, 2), nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

    lead = relationship("Lead", back_populates="conversion_events")


class ScheduledEmail(Base):
    """
    A drip email waiting for its fire time. Persisted so pending sends survive
    restarts; one row per (lead, template) so a sequence cannot be doubled.
    """
    __tablename__ = "scheduled_emails"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String(255), nullable=False)
    template_type = Column(String(100), nullable=False)
    fire_at = Column(DateTime, nullable=False)
    status = Column(
        String(20),
        CheckConstraint("status IN ('pending', 'sending', 'sent', 'skipped', 'failed', 'cancelled')"),
        nullable=False,
        default=ScheduledEmailStatus.PENDING.value,
    )
    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    processed_at = Column(DateTime, nullable=True)

    lead = relationship("Lead", back_populates="scheduled_emails")

    __table_args__ = (
        UniqueConstraint("lead_id", "template_type", name="uq_scheduled_emails_lead_template"),
        Index("idx_scheduled_emails_due", "status", "fire_at"),
    )

    def __repr__(self):
        return (
            f"<ScheduledEmail(id={self.id}, lead_id={self.lead_id}, "
            f"template={self.template_type}, status={self.status}, fire_at={self.fire_at})>"
        )


class EmailSend(Base):
    """Record of an email the provider accepted"""
    __tablename__ = "email_sends"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_email_id = Column(Integer, ForeignKey("scheduled_emails.id", ondelete="SET NULL"), nullable=True)
    template_type = Column(String(100), nullable=True)
    subject = Column(String(255), nullable=True)
    opened = Column(Boolean, default=False, nullable=False)
    clicked = Column(Boolean, default=False, nullable=False)
    sent_at = Column(DateTime, default=utcnow, nullable=False)


class BehaviorEvent(Base):
    """Raw engagement log behind lead scoring"""
    __tablename__ = "behavior_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String(100), nullable=False)
    event_type = Column(String(100), nullable=False, index=True)
    event_data = Column(JSONType, nullable=True)
    page_url = Column(String(500), nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<BehaviorEvent(id={self.id}, lead_id={self.lead_id}, event_type={self.event_type})>"


class EmailSegment(Base):
    """Named group of leads; auto-generated segments are created on first use"""
    __tablename__ = "email_segments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    conditions = Column(JSONType, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    lead_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    members = relationship("EmailSegmentMember", back_populates="segment", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<EmailSegment(name={self.name}, lead_count={self.lead_count})>"


class EmailSegmentMember(Base):
    __tablename__ = "email_segment_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    segment_id = Column(Integer, ForeignKey("email_segments.id", ondelete="CASCADE"), nullable=False, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    added_at = Column(DateTime, default=utcnow, nullable=False)

    segment = relationship("EmailSegment", back_populates="members")

    __table_args__ = (
        UniqueConstraint("segment_id", "lead_id", name="uq_email_segment_members_segment_lead"),
    )
