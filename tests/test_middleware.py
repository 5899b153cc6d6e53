"""
Tests for the request logging middleware
"""
import uuid

import pytest

from bloom.core.middleware import route_context


@pytest.mark.parametrize("path,expected", [
    ("/api/leads/42/behavior", {"api_area": "leads", "lead_id": 42}),
    ("/api/funnel/leads/7/segments", {"api_area": "funnel", "lead_id": 7}),
    ("/api/coaching/modules/week1/components/morning-ritual",
     {"api_area": "coaching", "module_id": "week1", "component_id": "morning-ritual"}),
    ("/api/goals/3", {"api_area": "goals"}),
    ("/health", {}),
])
def test_route_context(path, expected):
    assert route_context(path) == expected


def test_route_context_picks_up_coaching_session():
    session_id = str(uuid.uuid4())

    context = route_context(f"/api/coaching/sessions/{session_id}/advance")

    assert context == {"api_area": "coaching", "coaching_session_id": session_id}


@pytest.mark.integration
def test_request_id_is_generated_when_missing(client):
    response = client.get("/api")

    request_id = response.headers["X-Request-ID"]
    assert uuid.UUID(request_id)
