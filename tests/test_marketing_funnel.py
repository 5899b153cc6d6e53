"""
Tests for lead capture, scoring and conversion tracking
"""
from datetime import timedelta

import pytest

from bloom.models.marketing import (BehaviorEvent, ConversionEvent,
                                    EmailSegment, EmailSegmentMember, Lead,
                                    LeadStatus, ScheduledEmail,
                                    ScheduledEmailStatus)
from bloom.services.marketing_funnel import (WELCOME_SEQUENCE,
                                             MarketingFunnel, behavior_score,
                                             initial_lead_score,
                                             segments_for_lead)
from bloom.services.nurture_scheduler import NurtureScheduler


@pytest.fixture
def funnel(db, sender, clock):
    scheduler = NurtureScheduler(db, sender=sender, clock=clock, from_address="coaching@thrivemidlife.com")
    return MarketingFunnel(db, scheduler=scheduler, clock=clock)


def _capture(funnel, email="ana@example.com", **extra):
    data = {"email": email, "source": "landing_page", "first_name": "Ana"}
    data.update(extra)
    return funnel.capture_lead(data)


def test_capture_requires_email_and_source(funnel):
    with pytest.raises(ValueError):
        funnel.capture_lead({"email": "ana@example.com"})
    with pytest.raises(ValueError):
        funnel.capture_lead({"source": "landing_page"})


def test_initial_score():
    assert initial_lead_score({"source": "landing_page"}) == 10
    assert initial_lead_score({
        "source": "landing_page", "lead_magnet": "free_assessment", "utm_source": "google",
    }) == 33
    assert initial_lead_score({"source": "quiz", "utm_source": "facebook"}) == 5


def test_new_lead_is_active_with_score(funnel):
    lead = _capture(funnel, lead_magnet="free_assessment")

    assert lead.status == LeadStatus.ACTIVE.value
    assert lead.lead_score == 25
    assert lead.converted_at is None


def test_recapture_updates_the_same_lead(funnel, db, clock):
    first = _capture(funnel)
    first_engaged = first.last_engaged
    clock.advance(seconds=5)

    second = _capture(funnel, first_name="Anna", utm_campaign="spring")

    assert second.id == first.id
    assert db.query(Lead).count() == 1
    assert second.last_engaged > first_engaged
    assert second.status == LeadStatus.ACTIVE.value
    assert second.first_name == "Anna"
    assert second.utm_campaign == "spring"


def test_recapture_does_not_reschedule_welcome_sequence(funnel, db, clock):
    lead = _capture(funnel)
    clock.advance(days=1)
    _capture(funnel)

    assert db.query(ScheduledEmail).filter(ScheduledEmail.lead_id == lead.id).count() == len(WELCOME_SEQUENCE)


def test_both_capture_paths_log_lead_captured(funnel, db):
    lead = _capture(funnel)
    _capture(funnel)

    events = db.query(ConversionEvent).filter(
        ConversionEvent.lead_id == lead.id, ConversionEvent.event_type == "lead_captured"
    ).all()
    assert len(events) == 2
    assert events[0].event_data == {"source": "landing_page"}


def test_welcome_sequence_schedule(funnel, clock):
    start = clock.now()
    lead = _capture(funnel)

    rows = funnel.scheduler.scheduled_for(lead.id)

    assert [r.template_type for r in rows] == [
        "leadMagnetDelivery", "assessmentReminder", "educationalContent1",
        "educationalContent2", "softPitch",
    ]
    assert [r.fire_at - start for r in rows] == [timedelta(days=d) for d in (0, 2, 5, 8, 12)]
    assert [r.subject for r in rows] == [step.subject for step in WELCOME_SEQUENCE]
    assert all(r.status == ScheduledEmailStatus.PENDING.value for r in rows)


def test_purchase_converts_lead(funnel, clock):
    lead = _capture(funnel)
    clock.advance(days=3)

    event = funnel.track_conversion(lead.id, "coaching_purchased", {"plan": "6-week"}, 297)

    assert float(event.value) == 297.0
    refreshed = funnel.get_lead(lead.id)
    assert refreshed.status == LeadStatus.CONVERTED.value
    assert refreshed.converted_at == clock.now()


def test_page_view_leaves_status_alone(funnel):
    lead = _capture(funnel)

    funnel.track_conversion(lead.id, "page_view", {"pageUrl": "/about"})

    assert funnel.get_lead(lead.id).status == LeadStatus.ACTIVE.value


def test_conversion_for_missing_lead_raises(funnel):
    with pytest.raises(ValueError):
        funnel.track_conversion(999, "page_view")


@pytest.mark.parametrize("event_type,event_data,expected", [
    ("email_opened", None, 5),
    ("email_clicked", None, 10),
    ("assessment_completed", None, 25),
    ("page_view", {"pageUrl": "/coaching/plans"}, 8),
    ("page_view", {"pageUrl": "/checkout"}, 20),
    ("page_view", {"pageUrl": "/blog"}, 2),
    ("video_watched", {"watchPercentage": 80}, 15),
    ("something_else", None, 1),
])
def test_behavior_scores(event_type, event_data, expected):
    assert behavior_score(event_type, event_data) == expected


def test_track_behavior_adds_to_score(funnel, clock):
    lead = _capture(funnel)
    clock.advance(hours=1)

    updated = funnel.track_behavior(lead.id, "assessment_completed")

    assert updated.lead_score == 35
    assert updated.last_engaged == clock.now()


def test_unsubscribe_cancels_pending_emails(funnel, db):
    lead = _capture(funnel)

    funnel.unsubscribe(lead.id)

    assert funnel.get_lead(lead.id).status == LeadStatus.UNSUBSCRIBED.value
    statuses = {r.status for r in funnel.scheduler.scheduled_for(lead.id)}
    assert statuses == {ScheduledEmailStatus.CANCELLED.value}


def test_analytics_with_no_leads(funnel):
    analytics = funnel.get_funnel_analytics()

    assert analytics["totalLeads"] == 0
    assert analytics["conversionRate"] == "0"
    assert analytics["averageLeadScore"] == "0.0"


def test_analytics_counts(funnel, clock):
    old = _capture(funnel, email="old@example.com")
    clock.advance(days=40)
    converted = _capture(funnel, email="buyer@example.com", lead_magnet="free_assessment", utm_source="google")
    _capture(funnel, email="third@example.com")
    funnel.track_behavior(converted.id, "video_watched", {"watchPercentage": 100})
    funnel.track_conversion(converted.id, "coaching_purchased", value=297)

    analytics = funnel.get_funnel_analytics()

    assert old.id != converted.id
    assert analytics["totalLeads"] == 3
    assert analytics["convertedLeads"] == 1
    assert analytics["conversionRate"] == "33.33"
    assert analytics["recentLeads"] == 2
    assert analytics["highScoreLeads"] == 1
    # (10 + 53 + 10) / 3
    assert analytics["averageLeadScore"] == "24.3"


def test_every_capture_logs_a_behavior_event(funnel, db):
    lead = _capture(funnel, lead_magnet="free_assessment", utm_source="facebook", utm_campaign="spring")
    _capture(funnel)

    events = funnel.behavior_events(lead.id)

    assert [e.event_type for e in events] == ["lead_captured", "lead_captured"]
    assert events[0].event_data["leadMagnet"] == "free_assessment"
    assert events[0].event_data["utm"] == {"source": "facebook", "medium": None, "campaign": "spring"}
    # logging the capture does not change the initial score
    assert funnel.get_lead(lead.id).lead_score == 30


def test_track_behavior_logs_the_event(funnel, clock):
    lead = _capture(funnel)

    funnel.track_behavior(lead.id, "page_view", {"pageUrl": "/checkout"}, session_id="abc123")

    event = funnel.behavior_events(lead.id)[-1]
    assert event.event_type == "page_view"
    assert event.page_url == "/checkout"
    assert event.session_id == "abc123"
    assert event.timestamp == clock.now()


def test_track_behavior_generates_a_session_id(funnel):
    lead = _capture(funnel)

    funnel.track_behavior(lead.id, "email_opened")

    assert funnel.behavior_events(lead.id)[-1].session_id.startswith("session_")


def test_track_behavior_for_missing_lead_writes_nothing(funnel, db):
    with pytest.raises(ValueError):
        funnel.track_behavior(999, "email_opened")

    assert db.query(BehaviorEvent).count() == 0


@pytest.mark.parametrize("attrs,expected", [
    ({"lead_score": 10, "source": "landing_page"}, []),
    ({"lead_score": 25, "source": "landing_page"}, ["warm_leads"]),
    ({"lead_score": 60, "source": "facebook"}, ["high_intent", "warm_leads", "facebook_traffic"]),
    ({"lead_score": 0, "source": "google", "lead_magnet": "free_assessment"},
     ["google_traffic", "assessment_interested"]),
])
def test_segments_for_lead(attrs, expected):
    assert segments_for_lead(Lead(**attrs)) == expected


def test_capture_assigns_segments(funnel):
    lead = _capture(funnel, source="google", lead_magnet="free_assessment")

    assert funnel.segments_of(lead.id) == ["assessment_interested", "google_traffic"]


def test_behavior_moves_lead_into_score_segments(funnel, db):
    lead = _capture(funnel)
    assert funnel.segments_of(lead.id) == []

    funnel.track_behavior(lead.id, "assessment_completed")
    assert funnel.segments_of(lead.id) == ["warm_leads"]

    funnel.track_behavior(lead.id, "page_view", {"pageUrl": "/checkout"})
    assert funnel.segments_of(lead.id) == ["high_intent", "warm_leads"]

    warm = db.query(EmailSegment).filter(EmailSegment.name == "warm_leads").one()
    assert warm.lead_count == 1
    assert warm.conditions == {"autoGenerated": True}
    assert warm.description == "Auto-generated segment: warm_leads"


def test_segment_membership_is_not_duplicated(funnel, db):
    first = _capture(funnel, email="a@example.com", source="facebook")
    second = _capture(funnel, email="b@example.com", source="facebook")
    _capture(funnel, email="a@example.com", source="facebook")

    assert funnel.add_to_segment(first.id, "facebook_traffic") is False
    segment = db.query(EmailSegment).filter(EmailSegment.name == "facebook_traffic").one()
    assert segment.lead_count == 2
    members = {m.lead_id for m in db.query(EmailSegmentMember).filter(EmailSegmentMember.segment_id == segment.id)}
    assert members == {first.id, second.id}


def test_update_segments_for_missing_lead(funnel):
    assert funnel.update_lead_segments(999) == []
