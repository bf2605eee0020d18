"""
Tests for the transition engine.

Covers the CREATE / UPDATE / NONE state machine, the payloads it builds,
and how successful dispatches are written back into the tracker.
"""

from datetime import timedelta

import pytest

from statuspage_sync.engine import TransitionEngine
from statuspage_sync.models import Action, IncidentState

from conftest import NOW, make_incident, make_report


# ─── Decisions ────────────────────────────────────────────────


class TestHealthy:
    def test_error_creates_critical_incident(self, engine):
        decision = engine.decide(make_report("error"))
        assert decision.action is Action.CREATE
        payload = decision.payload
        assert payload.impact == "critical"
        assert payload.deliver_notifications is True
        assert payload.status == "in_progress"
        assert payload.severity == 3

    def test_ok_is_noop(self, engine):
        decision = engine.decide(make_report("ok"))
        assert decision.action is Action.NONE
        assert decision.payload is None

    @pytest.mark.parametrize("status", ["low_performance", "warning", "paused"])
    def test_non_critical_creates_without_notifications(self, engine, status):
        decision = engine.decide(make_report(status))
        assert decision.action is Action.CREATE
        assert decision.payload.deliver_notifications is False


class TestIncidentOpen:
    def test_unchanged_severity_is_noop(self, engine, tracker):
        tracker.put("api", make_incident(2))
        decision = engine.decide(make_report("warning"))
        assert decision.action is Action.NONE
        assert decision.reason == "unchanged"

    def test_recovery_updates_to_completed(self, engine, tracker):
        tracker.put("api", make_incident(3))
        decision = engine.decide(make_report("ok"))
        assert decision.action is Action.UPDATE
        assert decision.payload.status == "completed"
        assert decision.narrative.lifecycle_status == "completed"
        assert "back to normal" in decision.payload.body
        assert decision.payload.incident_id == "inc_1"

    def test_escalation_from_warning(self, engine, tracker):
        tracker.put("api", make_incident(2))
        decision = engine.decide(make_report("error"))
        assert decision.action is Action.UPDATE
        assert decision.payload.status == "verifying"
        assert decision.payload.impact == "critical"

    def test_gap_without_narrative_is_noop(self, engine, tracker):
        # low_performance -> warning has no narrative; nothing is sent
        tracker.put("api", make_incident(1))
        decision = engine.decide(make_report("warning"))
        assert decision.action is Action.NONE
        assert decision.payload is None
        assert decision.reason == "no narrative for 1 -> 2"
        assert decision.narrative is None
        assert tracker.get("api").severity == 1


class TestResolved:
    def test_resolved_entry_is_compared_like_open(self, engine, tracker):
        resolved = make_incident(0, status="completed")
        resolved.state = IncidentState.RESOLVED
        tracker.put("api", resolved)

        # 0 -> 3: narrative requires previous > 1, so nothing is sent
        assert engine.decide(make_report("error")).action is Action.NONE
        # 0 -> 4 is covered and updates the stale incident
        decision = engine.decide(make_report("paused"))
        assert decision.action is Action.UPDATE
        assert decision.payload.incident_id == "inc_1"

    def test_reopen_resolved_creates(self, tracker, page_config):
        engine = TransitionEngine(tracker, page_config, clock=lambda: NOW, reopen_resolved=True)
        resolved = make_incident(0, status="completed")
        resolved.state = IncidentState.RESOLVED
        tracker.put("api", resolved)

        decision = engine.decide(make_report("error"))
        assert decision.action is Action.CREATE
        assert decision.payload.incident_id is None

    def test_reopen_resolved_still_noop_when_healthy(self, tracker, page_config):
        engine = TransitionEngine(tracker, page_config, clock=lambda: NOW, reopen_resolved=True)
        resolved = make_incident(0, status="completed")
        resolved.state = IncidentState.RESOLVED
        tracker.put("api", resolved)
        assert engine.decide(make_report("ok")).action is Action.NONE


# ─── Payloads ─────────────────────────────────────────────────


class TestPayloads:
    def test_creation_payload(self, engine):
        payload = engine.decide(make_report("error", error="timeout")).payload
        assert payload.name == "API incident, timeout"
        assert payload.components == {"cmp_api": "major_outage"}
        assert payload.component_ids == ["cmp_api"]
        assert payload.body.endswith("<b>error</b><br/>footer")
        assert payload.auto_transition_to_maintenance_state is False
        assert payload.auto_transition_to_operational_state is False

    def test_update_payload_omits_component_ids(self, engine, tracker):
        tracker.put("api", make_incident(3))
        payload = engine.decide(make_report("low_performance", error="slow")).payload
        assert payload.component_ids is None
        assert payload.name == "API incident, slow"
        assert payload.components == {"cmp_api": "degraded_performance"}
        body = payload.to_request_body()["incident"]
        assert "component_ids" not in body
        assert body["impact_override"] == "minor"

    def test_unmapped_service_has_no_components(self, engine):
        payload = engine.decide(make_report("error", name="cache")).payload
        assert payload.components == {}
        assert payload.component_ids == []

    @pytest.mark.parametrize("tracked", [None, 3])
    def test_scheduled_window_is_four_days(self, engine, tracker, tracked):
        if tracked is not None:
            tracker.put("api", make_incident(tracked))
        payload = engine.decide(make_report("ok" if tracked else "error")).payload
        assert payload.scheduled_for == NOW
        assert payload.scheduled_until - payload.scheduled_for == timedelta(days=4)

    def test_request_body_serializes_timestamps(self, engine):
        body = engine.decide(make_report("error")).payload.to_request_body()["incident"]
        assert body["scheduled_for"] == "2026-03-01T12:00:00+00:00"
        assert body["scheduled_until"] == "2026-03-05T12:00:00+00:00"


# ─── Apply ────────────────────────────────────────────────────


class TestApply:
    def test_create_stores_server_id(self, engine, tracker):
        decision = engine.decide(make_report("error"))
        incident = engine.apply(decision, {"id": "srv_9", "status": "investigating"})
        assert incident.id == "srv_9"
        assert tracker.get("api") is incident
        assert incident.severity == 3
        assert incident.state is IncidentState.OPEN

    def test_recovery_marks_resolved(self, engine, tracker):
        tracker.put("api", make_incident(3))
        incident = engine.apply(engine.decide(make_report("ok")), {"id": "inc_1"})
        assert incident.is_resolved
        assert tracker.get("api").status == "completed"

    def test_loaded_id_survives_update(self, engine, tracker):
        stored = make_incident(3, incident_id="inc_persisted")
        tracker.load_active([{"name": "api", "data": stored.to_json()}])

        decision = engine.decide(make_report("warning"))
        assert decision.payload.incident_id == "inc_persisted"

        # server answers without repeating the id
        incident = engine.apply(decision, {})
        assert incident.id == "inc_persisted"
        assert engine.decide(make_report("ok")).payload.incident_id == "inc_persisted"

    def test_apply_needs_payload(self, engine):
        with pytest.raises(ValueError):
            engine.apply(engine.decide(make_report("ok")), {"id": "x"})
