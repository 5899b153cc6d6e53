"""
Tests for NurtureScheduler and NurtureDispatcher
"""
import asyncio

import pytest

from bloom.core.database import get_session_local
from bloom.models.marketing import (EmailSend, Lead, LeadStatus,
                                    ScheduledEmail, ScheduledEmailStatus)
from bloom.services.email_sender import EmailSender
from bloom.services.nurture_scheduler import (NurtureDispatcher,
                                              NurtureScheduler)


def _lead(db, clock, email="mia@example.com", status=LeadStatus.ACTIVE.value, first_name="Mia"):
    lead = Lead(email=email, first_name=first_name, source="landing_page", status=status,
                last_engaged=clock.now(), created_at=clock.now())
    db.add(lead)
    db.commit()
    db.refresh(lead)
    return lead


@pytest.fixture
def scheduler(db, sender, clock):
    return NurtureScheduler(db, sender=sender, clock=clock, from_address="coaching@thrivemidlife.com")


def test_schedule_is_deduplicated(scheduler, db, clock):
    lead = _lead(db, clock)

    first = scheduler.schedule_email(lead.id, "Hello", "softPitch", 12)
    second = scheduler.schedule_email(lead.id, "Hello again", "softPitch", 1)

    assert first.id == second.id
    assert db.query(ScheduledEmail).count() == 1
    assert second.subject == "Hello"


async def test_send_to_active_lead(scheduler, sender, db, clock):
    lead = _lead(db, clock)

    outcome = await scheduler.send_scheduled_email(lead.id, "Your guide", "leadMagnetDelivery")

    assert outcome == ScheduledEmailStatus.SENT
    assert len(sender.sent) == 1
    message = sender.sent[0]
    assert message["to"] == "mia@example.com"
    assert message["from"] == "coaching@thrivemidlife.com"
    assert "Mia" in message["html"]
    send = db.query(EmailSend).one()
    assert send.template_type == "leadMagnetDelivery"
    assert send.sent_at == clock.now()


async def test_send_uses_fallback_name(scheduler, sender, db, clock):
    lead = _lead(db, clock, first_name=None)

    await scheduler.send_scheduled_email(lead.id, "Your guide", "leadMagnetDelivery")

    assert "Beautiful" in sender.sent[0]["text"]


@pytest.mark.parametrize("status", [LeadStatus.CONVERTED.value, LeadStatus.UNSUBSCRIBED.value])
async def test_inactive_lead_is_skipped(scheduler, sender, db, clock, status):
    lead = _lead(db, clock, status=status)

    outcome = await scheduler.send_scheduled_email(lead.id, "Nudge", "softPitch")

    assert outcome == ScheduledEmailStatus.SKIPPED
    assert sender.sent == []
    assert db.query(EmailSend).count() == 0


async def test_missing_lead_is_skipped(scheduler, sender):
    assert await scheduler.send_scheduled_email(404, "Nudge", "softPitch") == ScheduledEmailStatus.SKIPPED
    assert sender.sent == []


async def test_rejected_send_writes_no_record(db, clock, make_sender):
    sender = make_sender(succeed=False)
    scheduler = NurtureScheduler(db, sender=sender, clock=clock, from_address="a@b.co")
    lead = _lead(db, clock)

    outcome = await scheduler.send_scheduled_email(lead.id, "Nudge", "softPitch")

    assert outcome == ScheduledEmailStatus.FAILED
    assert db.query(EmailSend).count() == 0


async def test_sender_exception_is_contained(db, clock, make_sender):
    sender = make_sender(error=RuntimeError("provider down"))
    scheduler = NurtureScheduler(db, sender=sender, clock=clock, from_address="a@b.co")
    lead = _lead(db, clock)

    assert await scheduler.send_scheduled_email(lead.id, "Nudge", "softPitch") == ScheduledEmailStatus.FAILED


async def test_dispatch_only_sends_due_rows(scheduler, sender, db, clock):
    lead = _lead(db, clock)
    scheduler.schedule_email(lead.id, "Now", "leadMagnetDelivery", 0)
    scheduler.schedule_email(lead.id, "Later", "assessmentReminder", 2)

    counts = await scheduler.dispatch_due()

    assert counts == {"sent": 1, "skipped": 0, "failed": 0}
    assert [m["subject"] for m in sender.sent] == ["Now"]

    clock.advance(days=2)
    counts = await scheduler.dispatch_due()

    assert counts["sent"] == 1
    assert [m["subject"] for m in sender.sent] == ["Now", "Later"]


async def test_dispatched_rows_are_not_sent_twice(scheduler, sender, db, clock):
    lead = _lead(db, clock)
    scheduler.schedule_email(lead.id, "Now", "leadMagnetDelivery", 0)

    await scheduler.dispatch_due()
    await scheduler.dispatch_due()

    assert len(sender.sent) == 1
    row = db.query(ScheduledEmail).one()
    assert row.status == ScheduledEmailStatus.SENT.value
    assert row.attempts == 1
    assert row.processed_at == clock.now()


async def test_dispatch_records_skips_and_failures(db, clock, make_sender):
    sender = make_sender(succeed=False)
    scheduler = NurtureScheduler(db, sender=sender, clock=clock, from_address="a@b.co")
    active = _lead(db, clock, email="active@example.com")
    converted = _lead(db, clock, email="buyer@example.com", status=LeadStatus.CONVERTED.value)
    scheduler.schedule_email(active.id, "Hi", "softPitch", 0)
    scheduler.schedule_email(converted.id, "Hi", "softPitch", 0)

    counts = await scheduler.dispatch_due()

    assert counts == {"sent": 0, "skipped": 1, "failed": 1}
    failed = db.query(ScheduledEmail).filter(ScheduledEmail.lead_id == active.id).one()
    assert failed.status == ScheduledEmailStatus.FAILED.value
    assert failed.last_error


class SlowSender(EmailSender):
    """Holds every send open long enough for another dispatch pass to start"""

    def __init__(self, delay: float = 0.05):
        self.delay = delay
        self.sent = []

    async def send(self, to, from_, subject, text=None, html=None) -> bool:
        await asyncio.sleep(self.delay)
        self.sent.append(subject)
        return True


async def test_claimed_row_is_marked_sending(scheduler, db, clock):
    lead = _lead(db, clock)
    row = scheduler.schedule_email(lead.id, "Now", "leadMagnetDelivery", 0)

    assert scheduler._claim(row) is True
    assert row.status == ScheduledEmailStatus.SENDING.value
    assert row.attempts == 1
    assert scheduler.due() == []
    assert scheduler._claim(row) is False


async def test_overlapping_dispatch_passes_send_once(engine, db, clock):
    lead = _lead(db, clock)
    sender = SlowSender()
    NurtureScheduler(db, sender=sender, clock=clock, from_address="a@b.co").schedule_email(
        lead.id, "Now", "leadMagnetDelivery", 0
    )

    first_db = get_session_local()()
    second_db = get_session_local()()
    try:
        first = NurtureScheduler(first_db, sender=sender, clock=clock, from_address="a@b.co")
        second = NurtureScheduler(second_db, sender=sender, clock=clock, from_address="a@b.co")

        async def late_pass():
            await asyncio.sleep(0.01)
            return await second.dispatch_due()

        first_counts, second_counts = await asyncio.gather(first.dispatch_due(), late_pass())
    finally:
        first_db.close()
        second_db.close()

    assert sender.sent == ["Now"]
    assert first_counts["sent"] + second_counts["sent"] == 1
    db.expire_all()
    row = db.query(ScheduledEmail).one()
    assert row.status == ScheduledEmailStatus.SENT.value
    assert row.attempts == 1
    assert db.query(EmailSend).count() == 1


async def test_cancel_pending(scheduler, db, clock):
    lead = _lead(db, clock)
    scheduler.schedule_email(lead.id, "A", "leadMagnetDelivery", 0)
    scheduler.schedule_email(lead.id, "B", "softPitch", 12)

    assert scheduler.cancel_pending(lead.id) == 2
    assert await scheduler.dispatch_due() == {"sent": 0, "skipped": 0, "failed": 0}


async def test_dispatcher_run_once_uses_its_own_session(db, sender, clock):
    lead = _lead(db, clock)
    NurtureScheduler(db, sender=sender, clock=clock, from_address="a@b.co").schedule_email(
        lead.id, "Now", "leadMagnetDelivery", 0
    )

    dispatcher = NurtureDispatcher(poll_interval_seconds=1, batch_size=10, sender=sender, clock=clock)
    counts = await dispatcher.run_once()

    assert counts["sent"] == 1
    assert len(sender.sent) == 1


async def test_dispatcher_start_stop(sender, clock, engine):
    dispatcher = NurtureDispatcher(poll_interval_seconds=1, batch_size=10, sender=sender, clock=clock)

    await dispatcher.start()
    assert dispatcher.running is True

    await dispatcher.stop()
    assert dispatcher.running is False
