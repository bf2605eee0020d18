"""
Tests for the incident narratives.
"""

import pytest

from statuspage_sync.narrative import build_creation_narrative, build_transition_narrative


class TestTransitionNarrative:
    def test_back_to_normal(self):
        narrative = build_transition_narrative(3, 0, "API")
        assert narrative.body == 'The service "API" is now back to normal.'
        assert narrative.lifecycle_status == "completed"

    def test_recovering(self):
        narrative = build_transition_narrative(3, 1, "API")
        assert "recovering" in narrative.body
        assert narrative.lifecycle_status == "verifying"

    def test_warning_reads_minor(self):
        narrative = build_transition_narrative(3, 2, "API")
        assert narrative.body == 'The service "API" is now experiencing minor issues.'
        assert narrative.lifecycle_status == "verifying"

    def test_escalation_to_error(self):
        narrative = build_transition_narrative(2, 3, "API")
        assert "major issues" in narrative.body
        assert narrative.lifecycle_status == "verifying"

    def test_maintenance(self):
        narrative = build_transition_narrative(1, 4, "API")
        assert narrative.body == 'The service "API" is now under maintenance.'
        assert narrative.lifecycle_status == "in_progress"

    @pytest.mark.parametrize(
        "previous,current",
        [(1, 2), (1, 3), (0, 1), (0, 2), (4, 4), (0, 0)],
    )
    def test_uncovered_pairs(self, previous, current):
        assert build_transition_narrative(previous, current, "API") is None


class TestCreationNarrative:
    def test_template(self):
        body = build_creation_narrative("API", "error", "timeout", "<br/>See status.example.com")
        assert body == (
            'The service "API" is currently experiencing issues.\n'
            "The error reported is: <b>timeout</b> and the status of the service "
            "is now <b>error</b><br/>See status.example.com"
        )

    def test_missing_error_and_footer(self):
        body = build_creation_narrative("API", "warning", None)
        assert "<b>unknown error</b>" in body
        assert body.endswith("<b>warning</b>")
