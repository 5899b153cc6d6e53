"""
Integration tests for coaching components, sessions and progress
"""
import pytest

from bloom.coaching.descriptors import CATALOG
from bloom.models.coaching import CoachingProgress

pytestmark = pytest.mark.integration


def _start(client, headers, module_id="week1", component_id="morning-ritual"):
    return client.post("/api/coaching/sessions", headers=headers, json={
        "module_id": module_id,
        "component": {"id": component_id},
    })


def test_list_components(client):
    everything = client.get("/api/coaching/components").json()
    week2 = client.get("/api/coaching/components", params={"module_id": "week2"}).json()

    assert len(everything) == len(CATALOG)
    assert {c["module_id"] for c in week2} == {"week2"}
    assert len(week2) == 9


def test_preview_unknown_module_is_coming_soon(client):
    view = client.get("/api/coaching/modules/week8/components/morning-ritual").json()

    assert view["kind"] == "coming_soon"
    assert view["actions"] == ["close"]


def test_preview_unknown_component(client):
    view = client.get("/api/coaching/modules/week6/components/nope").json()

    assert view["kind"] == "not_found"
    assert view["title"] == "Component Not Found (Week 5-6)"


def test_preview_known_component(client):
    view = client.get("/api/coaching/modules/week1/components/cortisol-breathwork").json()

    assert view["kind"] == "exercise"
    assert view["title"] == "Cortisol Reset Breathing System"
    assert view["exercise"]["phase"] == "assessment"


def test_start_session_requires_login(client):
    assert _start(client, {}).status_code == 401


def test_start_unknown_component_returns_fallback_without_session(client, auth_headers):
    response = _start(client, auth_headers, component_id="missing")

    assert response.status_code == 201
    assert response.json()["kind"] == "not_found"
    assert response.json()["session_id"] is None


def test_session_lifecycle_records_completion_once(client, auth_headers, db, user):
    started = _start(client, auth_headers)
    assert started.status_code == 201
    session_id = started.json()["session_id"]
    assert started.json()["kind"] == "exercise"

    blocked = client.post(f"/api/coaching/sessions/{session_id}/complete", headers=auth_headers)
    assert blocked.status_code == 409

    updated = client.post(f"/api/coaching/sessions/{session_id}/update", headers=auth_headers, json={
        "fields": {"selectedPractices": ["gratitude"], "customRitual": "tea on the porch"},
    })
    assert updated.status_code == 200
    assert updated.json()["exercise"]["fields"]["selectedPractices"] == ["gratitude"]

    first = client.post(f"/api/coaching/sessions/{session_id}/complete", headers=auth_headers)
    second = client.post(f"/api/coaching/sessions/{session_id}/complete", headers=auth_headers)

    assert first.status_code == 200
    assert first.json()["payload"] == second.json()["payload"]
    rows = db.query(CoachingProgress).filter(CoachingProgress.user_id == user.id).all()
    assert len(rows) == 1
    assert rows[0].completed is True
    assert rows[0].progress == 100
    assert rows[0].week_number == 1
    assert rows[0].response_data["customRitual"] == "tea on the porch"


def test_unknown_field_is_rejected(client, auth_headers):
    session_id = _start(client, auth_headers).json()["session_id"]

    response = client.post(f"/api/coaching/sessions/{session_id}/update", headers=auth_headers, json={
        "fields": {"bogus": 1},
    })

    assert response.status_code == 400


def test_advance_past_last_phase_conflicts(client, auth_headers):
    session_id = _start(client, auth_headers).json()["session_id"]

    response = client.post(f"/api/coaching/sessions/{session_id}/advance", headers=auth_headers)

    assert response.status_code == 409


def test_multi_phase_session(client, auth_headers):
    session_id = _start(client, auth_headers, component_id="focus-memory-rituals").json()["session_id"]
    client.post(f"/api/coaching/sessions/{session_id}/update", headers=auth_headers, json={
        "fields": {"selectedRituals": ["walk"]},
    })

    advanced = client.post(f"/api/coaching/sessions/{session_id}/advance", headers=auth_headers)

    assert advanced.json()["exercise"]["phase"] == "practice"


def test_close_ends_session(client, auth_headers):
    session_id = _start(client, auth_headers).json()["session_id"]

    assert client.post(f"/api/coaching/sessions/{session_id}/close", headers=auth_headers).status_code == 204
    assert client.get(f"/api/coaching/sessions/{session_id}", headers=auth_headers).status_code == 404


def test_sessions_are_private(client, auth_headers, admin_headers):
    session_id = _start(client, auth_headers).json()["session_id"]

    assert client.get(f"/api/coaching/sessions/{session_id}", headers=admin_headers).status_code == 404
    assert client.get(f"/api/coaching/sessions/{session_id}", headers=auth_headers).status_code == 200


def test_new_session_resumes_saved_draft(client, auth_headers):
    first = _start(client, auth_headers).json()["session_id"]
    client.post(f"/api/coaching/sessions/{first}/update", headers=auth_headers, json={
        "fields": {"selectedPractices": ["stretching"]},
    })
    client.post(f"/api/coaching/sessions/{first}/close", headers=auth_headers)

    resumed = _start(client, auth_headers).json()

    assert resumed["exercise"]["fields"]["selectedPractices"] == ["stretching"]


def test_progress_endpoints(client, auth_headers):
    created = client.post("/api/coaching-progress", headers=auth_headers, json={
        "module_id": "week3", "component_id": "hormonal-symphony", "progress": 40,
    })
    progress_id = created.json()["id"]

    assert created.status_code == 201
    assert created.json()["week_number"] == 3
    assert client.post("/api/coaching-progress", headers=auth_headers, json={
        "module_id": "week3", "component_id": "hormonal-symphony",
    }).status_code == 409

    updated = client.put(f"/api/coaching-progress/{progress_id}", headers=auth_headers, json={
        "progress": 100, "completed": True,
    })
    assert updated.json()["completed"] is True
    assert len(client.get("/api/coaching-progress", headers=auth_headers).json()) == 1


def test_progress_validation_message(client, auth_headers):
    response = client.post("/api/coaching-progress", headers=auth_headers, json={"module_id": "week1"})

    assert response.json() == {"message": "Invalid coaching progress data"}


def test_wrongly_typed_field_is_rejected(client, auth_headers):
    session_id = _start(client, auth_headers, component_id="cortisol-breathwork").json()["session_id"]

    response = client.post(f"/api/coaching/sessions/{session_id}/update", headers=auth_headers, json={
        "fields": {"preStressLevel": "7"},
    })

    assert response.status_code == 400
    assert "preStressLevel" in response.json()["message"]

    client.post(f"/api/coaching/sessions/{session_id}/update", headers=auth_headers, json={
        "fields": {"preStressLevel": 7, "postStressLevel": 3},
    })
    for _ in range(3):
        assert client.post(f"/api/coaching/sessions/{session_id}/advance", headers=auth_headers).status_code == 200
    completed = client.post(f"/api/coaching/sessions/{session_id}/complete", headers=auth_headers)

    assert completed.status_code == 200
    assert completed.json()["payload"]["improvementScore"] == 4


def test_completion_is_saved_on_retry_after_a_storage_error(client, auth_headers, db, user, monkeypatch):
    from bloom.services.progress_service import ProgressService

    record_completion = ProgressService.record_completion
    failures = []

    def fail_once(self, *args, **kwargs):
        if not failures:
            failures.append(1)
            raise RuntimeError("database unavailable")
        return record_completion(self, *args, **kwargs)

    monkeypatch.setattr(ProgressService, "record_completion", fail_once)
    session_id = _start(client, auth_headers).json()["session_id"]
    client.post(f"/api/coaching/sessions/{session_id}/update", headers=auth_headers, json={
        "fields": {"selectedPractices": ["gratitude"]},
    })

    failed = client.post(f"/api/coaching/sessions/{session_id}/complete", headers=auth_headers)
    retried = client.post(f"/api/coaching/sessions/{session_id}/complete", headers=auth_headers)

    assert failed.status_code == 500
    assert retried.status_code == 200
    row = db.query(CoachingProgress).filter(
        CoachingProgress.user_id == user.id,
        CoachingProgress.component_id == "morning-ritual",
    ).one()
    assert row.completed is True
