import json

import pytest

from deck_monitor.api.endpoints import ApiEndpoints
from deck_monitor.detection.session import MonitoringSession
from deck_monitor.providers.json_document import DictDocumentProvider

from deck_factory import MutableDeck, three_slide_deck


class TestApiEndpoints:
    @pytest.fixture
    def setup(self):
        deck = MutableDeck(three_slide_deck())
        session = MonitoringSession(DictDocumentProvider(deck))
        api = ApiEndpoints(session)
        return api, session, deck

    def test_initialize(self, setup):
        api, _, _ = setup
        result = api.initialize()

        assert result["success"] is True
        assert result["presentationId"] == "deck-1"
        assert result["initialSnapshot"]["slides"][0]["slideId"] == "s1"
        assert "timestamp" in result
        json.dumps(result)

    def test_detect_changes_shape(self, setup):
        api, _, deck = setup
        api.initialize()
        deck.element(0, "e1")["content"] = "Hello World"

        result = api.detect_changes()

        assert result["success"] is True
        assert result["changeCount"] == 1
        change = result["changes"][0]
        assert change["changeType"] == "text_content_changed"
        assert change["elementId"] == "e1"
        assert change["slideIndex"] == 0
        assert change["metadata"]["changeScope"] == "ELEMENT"
        assert change["metadata"]["changeSeverity"] == "HIGH"
        assert change["metadata"]["detectionMethod"] == "POLLING"
        assert change["details"]["content"]["newValue"] == "Hello World"
        assert result["currentState"]["slideCount"] == 3
        assert result["previousState"]["totalElements"] == 4
        comparison = result["stateComparison"]
        assert comparison["slideCountChanged"] is False
        assert comparison["changesDetected"] == 1
        assert comparison["timeDifference"] >= 0
        json.dumps(result)

    def test_change_log_clear_and_stop(self, setup):
        api, _, deck = setup
        api.initialize()
        deck.element(0, "e1")["content"] = "x"
        api.detect_changes()

        log = api.get_change_log()
        assert log["totalChanges"] == 1
        assert len(log["changes"]) == 1

        stopped = api.stop()
        assert stopped["success"] is True
        assert stopped["message"] == "Change tracking stopped"

        cleared = api.clear_log()
        assert cleared["success"] is True
        assert api.get_change_log()["totalChanges"] == 0

    def test_failure_shape(self, setup):
        api, _, _ = setup
        result = api.detect_changes()

        assert result["success"] is False
        assert result["code"] == "session.not_initialized"
        assert result["error"]
        assert "timestamp" in result

    def test_get_current_state(self, setup):
        api, _, _ = setup
        result = api.get_current_state()
        assert result["success"] is True
        assert result["state"]["slideCount"] == 3
        assert result["state"]["state"] == "uninitialized"

    @pytest.mark.parametrize(
        "action", ["detectChanges", "detect_changes", "DetectChanges"]
    )
    def test_dispatch_accepts_both_naming_styles(self, setup, action):
        api, _, _ = setup
        api.dispatch("initialize")
        result = api.dispatch(action)
        assert result["success"] is True
        assert result["changeCount"] == 0

    def test_dispatch_unknown_action(self, setup):
        api, _, _ = setup
        result = api.dispatch("explode")

        assert result["success"] is False
        assert result["error"] == "Invalid action"
        assert result["availableActions"] == [
            "initialize",
            "detectChanges",
            "getChangeLog",
            "clearLog",
            "stop",
            "getCurrentState",
        ]

    def test_dispatch_does_not_reach_private_attributes(self, setup):
        api, _, _ = setup
        assert api.dispatch("_session")["error"] == "Invalid action"
        assert api.dispatch("")["error"] == "Invalid action"
