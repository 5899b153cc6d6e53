"""
Durable drip-email scheduling for the lead nurture funnel
"""
import asyncio
from datetime import timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bloom.core.clock import Clock
from bloom.core.config import get_settings
from bloom.core.database import get_session_local
from bloom.core.logging_config import LoggingConfig
from bloom.core.metrics import (nurture_emails_processed_total,
                                nurture_emails_scheduled_total)
from bloom.models.marketing import (EmailSend, Lead, LeadStatus,
                                    ScheduledEmail, ScheduledEmailStatus)
from bloom.services.email_sender import EmailSender, get_email_sender
from bloom.services.email_templates import render_nurture_template

logger = LoggingConfig.get_logger(__name__)

SECONDS_PER_DAY = 86400


class NurtureScheduler:
    """Persists scheduled emails and delivers them once they come due"""

    def __init__(
        self,
        db: Session,
        sender: Optional[EmailSender] = None,
        clock: Optional[Clock] = None,
        from_address: Optional[str] = None,
    ):
        self.db = db
        self.sender = sender or get_email_sender()
        self.clock = clock or Clock()
        self.from_address = from_address or get_settings().email_from_address

    def schedule_email(
        self,
        lead_id: int,
        subject: str,
        template_type: str,
        delay_days: float,
    ) -> ScheduledEmail:
        """
        Persist an email to fire ``delay_days`` from now.

        Scheduling the same template twice for a lead returns the existing row.
        """
        existing = self._find(lead_id, template_type)
        if existing:
            logger.debug(
                "Email already scheduled",
                extra={"lead_id": lead_id, "template_type": template_type, "scheduled_email_id": existing.id},
            )
            return existing

        scheduled = ScheduledEmail(
            lead_id=lead_id,
            subject=subject,
            template_type=template_type,
            fire_at=self.clock.now() + timedelta(seconds=delay_days * SECONDS_PER_DAY),
            status=ScheduledEmailStatus.PENDING.value,
            attempts=0,
            created_at=self.clock.now(),
        )
        self.db.add(scheduled)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with another scheduler for the same (lead, template)
            self.db.rollback()
            existing = self._find(lead_id, template_type)
            if existing is None:
                raise
            return existing

        self.db.refresh(scheduled)
        nurture_emails_scheduled_total.labels(template_type=template_type).inc()
        logger.info(
            f"Scheduled {template_type} for lead {lead_id}",
            extra={"lead_id": lead_id, "template_type": template_type, "fire_at": scheduled.fire_at.isoformat()},
        )
        return scheduled

    def _find(self, lead_id: int, template_type: str) -> Optional[ScheduledEmail]:
        return self.db.query(ScheduledEmail).filter(
            ScheduledEmail.lead_id == lead_id,
            ScheduledEmail.template_type == template_type,
        ).first()

    async def send_scheduled_email(
        self,
        lead_id: int,
        subject: str,
        template_type: str,
        scheduled_email_id: Optional[int] = None,
    ) -> ScheduledEmailStatus:
        """
        Deliver one nurture email.

        Leads that are gone or no longer active are skipped without calling the
        sender. A failed send is logged and not retried; no email_sends row is
        written for it.
        """
        lead = self.db.query(Lead).filter(Lead.id == lead_id).first()
        if not lead or lead.status != LeadStatus.ACTIVE.value:
            logger.info(
                "Skipping nurture email for inactive lead",
                extra={"lead_id": lead_id, "template_type": template_type},
            )
            return ScheduledEmailStatus.SKIPPED

        content = render_nurture_template(template_type, lead)
        try:
            success = await self.sender.send(
                to=lead.email,
                from_=self.from_address,
                subject=subject,
                text=content["text"],
                html=content["html"],
            )
        except Exception as e:
            logger.error(
                f"Error sending scheduled email: {e}",
                exc_info=True,
                extra={"lead_id": lead_id, "template_type": template_type},
            )
            success = False

        if not success:
            logger.warning(
                "Nurture email not delivered",
                extra={"lead_id": lead_id, "template_type": template_type},
            )
            return ScheduledEmailStatus.FAILED

        self.db.add(EmailSend(
            lead_id=lead.id,
            scheduled_email_id=scheduled_email_id,
            template_type=template_type,
            subject=subject,
            opened=False,
            clicked=False,
            sent_at=self.clock.now(),
        ))
        self.db.commit()
        return ScheduledEmailStatus.SENT

    def due(self, limit: Optional[int] = None) -> List[ScheduledEmail]:
        query = self.db.query(ScheduledEmail).filter(
            ScheduledEmail.status == ScheduledEmailStatus.PENDING.value,
            ScheduledEmail.fire_at <= self.clock.now(),
        ).order_by(ScheduledEmail.fire_at, ScheduledEmail.id)
        if limit:
            query = query.limit(limit)
        return query.all()

    def _claim(self, scheduled: ScheduledEmail) -> bool:
        """
        Move a pending row to sending. Only one dispatch pass can win the
        conditional update, so a row is sent at most once.
        """
        claimed = self.db.query(ScheduledEmail).filter(
            ScheduledEmail.id == scheduled.id,
            ScheduledEmail.status == ScheduledEmailStatus.PENDING.value,
        ).update(
            {
                "status": ScheduledEmailStatus.SENDING.value,
                "attempts": ScheduledEmail.attempts + 1,
            },
            synchronize_session=False,
        )
        self.db.commit()
        if not claimed:
            logger.debug(
                "Scheduled email already claimed",
                extra={"scheduled_email_id": scheduled.id},
            )
            return False
        self.db.refresh(scheduled)
        return True

    async def dispatch_due(self, limit: Optional[int] = None) -> Dict[str, int]:
        """
        Deliver every pending email whose fire time has passed, oldest first.

        Each row is claimed (pending -> sending) before the send and ends up
        sent, skipped or failed. Rows claimed by an overlapping pass are left
        to that pass.
        """
        counts = {status.value: 0 for status in (
            ScheduledEmailStatus.SENT, ScheduledEmailStatus.SKIPPED, ScheduledEmailStatus.FAILED,
        )}
        for scheduled in self.due(limit):
            if not self._claim(scheduled):
                continue

            outcome = await self.send_scheduled_email(
                scheduled.lead_id,
                scheduled.subject,
                scheduled.template_type,
                scheduled_email_id=scheduled.id,
            )
            scheduled.status = outcome.value
            scheduled.processed_at = self.clock.now()
            if outcome == ScheduledEmailStatus.FAILED:
                scheduled.last_error = "email provider rejected the message"
            self.db.commit()

            counts[outcome.value] += 1
            nurture_emails_processed_total.labels(
                template_type=scheduled.template_type, status=outcome.value
            ).inc()

        if any(counts.values()):
            logger.info("Nurture dispatch finished", extra=counts)
        return counts

    def cancel_pending(self, lead_id: int) -> int:
        """Cancel every pending email for a lead; returns how many were cancelled"""
        count = self.db.query(ScheduledEmail).filter(
            ScheduledEmail.lead_id == lead_id,
            ScheduledEmail.status == ScheduledEmailStatus.PENDING.value,
        ).update(
            {"status": ScheduledEmailStatus.CANCELLED.value, "processed_at": self.clock.now()},
            synchronize_session=False,
        )
        self.db.commit()
        if count:
            logger.info(f"Cancelled {count} pending emails for lead {lead_id}")
        return count

    def scheduled_for(self, lead_id: int) -> List[ScheduledEmail]:
        return self.db.query(ScheduledEmail).filter(
            ScheduledEmail.lead_id == lead_id
        ).order_by(ScheduledEmail.fire_at, ScheduledEmail.id).all()


class NurtureDispatcher:
    """Background loop that periodically delivers due nurture emails"""

    def __init__(
        self,
        poll_interval_seconds: Optional[int] = None,
        batch_size: Optional[int] = None,
        sender: Optional[EmailSender] = None,
        clock: Optional[Clock] = None,
    ):
        settings = get_settings()
        self.poll_interval_seconds = poll_interval_seconds or settings.nurture_poll_interval_seconds
        self.batch_size = batch_size or settings.nurture_dispatch_batch_size
        self.sender = sender
        self.clock = clock
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self):
        """Start the dispatcher"""
        if self.running:
            logger.warning("Nurture dispatcher is already running")
            return

        self.running = True
        logger.info("Starting nurture dispatcher...")
        self._task = asyncio.create_task(self._dispatch_loop())

    async def stop(self):
        """Stop the dispatcher"""
        self.running = False
        logger.info("Stopping nurture dispatcher...")
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def run_once(self) -> Dict[str, int]:
        """One dispatch pass with its own database session"""
        db = get_session_local()()
        try:
            scheduler = NurtureScheduler(db, sender=self.sender, clock=self.clock)
            return await scheduler.dispatch_due(limit=self.batch_size)
        finally:
            db.close()

    async def _dispatch_loop(self):
        while self.running:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Error in nurture dispatcher loop: {e}", exc_info=True)
            await asyncio.sleep(self.poll_interval_seconds)


_nurture_dispatcher: Optional[NurtureDispatcher] = None


def get_nurture_dispatcher() -> NurtureDispatcher:
    """Get or create the process-wide dispatcher"""
    global _nurture_dispatcher
    if _nurture_dispatcher is None:
        _nurture_dispatcher = NurtureDispatcher()
    return _nurture_dispatcher
