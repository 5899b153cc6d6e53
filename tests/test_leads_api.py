"""
Integration tests for the lead funnel endpoints
"""
import pytest

from bloom.models.marketing import (BehaviorEvent, ScheduledEmail,
                                    ScheduledEmailStatus)

pytestmark = pytest.mark.integration


def _capture(client, email="lead@example.com", **extra):
    body = {"email": email, "source": "landing_page", "first_name": "Rosa"}
    body.update(extra)
    return client.post("/api/leads", json=body)


def test_capture_schedules_welcome_sequence(client, db, sender):
    response = _capture(client, lead_magnet="free_assessment")

    assert response.status_code == 201
    lead = response.json()
    assert lead["status"] == "active"
    assert lead["lead_score"] == 25
    assert db.query(ScheduledEmail).filter(ScheduledEmail.lead_id == lead["id"]).count() == 5
    # Nothing goes out until the dispatcher runs
    assert sender.sent == []


def test_capture_same_email_twice_keeps_one_lead(client):
    first = _capture(client).json()
    second = _capture(client).json()

    assert first["id"] == second["id"]
    assert second["last_engaged"] >= first["last_engaged"]


def test_capture_validation(client):
    response = _capture(client, email="nope")

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid lead data"}


def test_conversion_and_behavior(client):
    lead_id = _capture(client).json()["id"]

    behavior = client.post(f"/api/leads/{lead_id}/behavior", json={"event_type": "email_clicked"})
    purchase = client.post(f"/api/leads/{lead_id}/conversions", json={
        "event_type": "coaching_purchased", "value": 297,
    })

    assert behavior.json()["lead_score"] == 20
    assert purchase.status_code == 201
    assert purchase.json()["value"] == 297.0


def test_conversion_for_unknown_lead(client):
    response = client.post("/api/leads/4040/conversions", json={"event_type": "page_view"})

    assert response.status_code == 404


def test_unsubscribe(client, db):
    lead_id = _capture(client).json()["id"]

    response = client.post(f"/api/leads/{lead_id}/unsubscribe")

    assert response.json()["status"] == "unsubscribed"
    pending = db.query(ScheduledEmail).filter(
        ScheduledEmail.lead_id == lead_id,
        ScheduledEmail.status == ScheduledEmailStatus.PENDING.value,
    ).count()
    assert pending == 0


def test_funnel_analytics_is_admin_only(client, auth_headers, admin_headers):
    _capture(client)

    assert client.get("/api/funnel/analytics", headers=auth_headers).status_code == 403
    analytics = client.get("/api/funnel/analytics", headers=admin_headers).json()
    assert analytics["totalLeads"] == 1
    assert analytics["averageLeadScore"] == "10.0"


def test_dispatch_sends_due_emails(client, admin_headers, sender):
    _capture(client)

    counts = client.post("/api/funnel/dispatch", headers=admin_headers).json()

    assert counts == {"sent": 1, "skipped": 0, "failed": 0}
    assert sender.sent[0]["to"] == "lead@example.com"
    assert "Rosa" in sender.sent[0]["html"]


def test_behavior_is_logged_and_segments_are_visible_to_admins(client, db, auth_headers, admin_headers):
    lead_id = _capture(client, source="facebook").json()["id"]

    client.post(f"/api/leads/{lead_id}/behavior", json={
        "event_type": "assessment_completed", "session_id": "visit-1",
    })

    events = db.query(BehaviorEvent).filter(BehaviorEvent.lead_id == lead_id).all()
    assert [e.event_type for e in events] == ["lead_captured", "assessment_completed"]
    assert events[-1].session_id == "visit-1"

    assert client.get(f"/api/funnel/leads/{lead_id}/segments", headers=auth_headers).status_code == 403
    segments = client.get(f"/api/funnel/leads/{lead_id}/segments", headers=admin_headers)
    assert segments.json() == {"lead_id": lead_id, "segments": ["facebook_traffic", "warm_leads"]}
    assert client.get("/api/funnel/leads/4040/segments", headers=admin_headers).status_code == 404


def test_lead_response_reads_orm_rows(db):
    import warnings

    from bloom.api.routes.leads import LeadResponse
    from bloom.services.marketing_funnel import MarketingFunnel

    lead = MarketingFunnel(db).capture_lead({"email": "orm@example.com", "source": "quiz"})

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        response = LeadResponse.model_validate(lead)

    assert LeadResponse.model_config["from_attributes"] is True
    assert response.email == "orm@example.com"
