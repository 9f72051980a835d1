"""Boundary endpoints for a monitoring session.

Each handler returns a JSON-serializable dict with camelCase keys, ready to
be sent to a calling layer. Failures are returned as
`{"success": False, "error": ..., "code": ..., "timestamp": ...}`.
"""

import re
from typing import Any, Callable

from deck_monitor.detection.session import MonitoringSession
from deck_monitor.models.results import ErrorResult


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class ApiEndpoints:
    """Handlers for the session operations."""

    ACTIONS = (
        "initialize",
        "detect_changes",
        "get_change_log",
        "clear_log",
        "stop",
        "get_current_state",
    )

    def __init__(self, session: MonitoringSession):
        """Initialize with the monitoring session."""
        self.session = session

    def initialize(self) -> dict[str, Any]:
        """Starts change tracking and returns the baseline snapshot."""
        return self.session.initialize().to_json_dict()

    def detect_changes(self) -> dict[str, Any]:
        """Reports the changes since the previous poll.

        Returns:
            A dict with `changes`, `changeCount`, `currentState`,
            `previousState`, `stateComparison` and `timestamp`.
        """
        return self.session.detect_changes().to_json_dict()

    def get_change_log(self) -> dict[str, Any]:
        return self.session.get_change_log().to_json_dict()

    def clear_log(self) -> dict[str, Any]:
        return self.session.clear_log().to_json_dict()

    def stop(self) -> dict[str, Any]:
        return self.session.stop().to_json_dict()

    def get_current_state(self) -> dict[str, Any]:
        """Returns a flat slide/element summary of the live document."""
        return self.session.get_current_state().to_json_dict()

    def available_actions(self) -> list[str]:
        """Returns the action names in the camelCase form used by callers."""
        return [_camel_case(name) for name in self.ACTIONS]

    def dispatch(self, action: str) -> dict[str, Any]:
        """Runs an operation by name.

        Args:
            action: Operation name, either camelCase ('detectChanges') or
                snake_case ('detect_changes').

        Returns:
            The operation's response, or an 'Invalid action' error listing the
            available actions.
        """
        name = _snake_case(action or "")
        if name not in self.ACTIONS:
            response = ErrorResult(
                error="Invalid action", code="api.invalid_action"
            ).to_json_dict()
            response["availableActions"] = self.available_actions()
            return response
        handler: Callable[[], dict[str, Any]] = getattr(self, name)
        return handler()
