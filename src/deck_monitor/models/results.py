"""Data models for reporting session operation outcomes.

Every session operation returns one of these records. Failures are reported as
an `ErrorResult` with `success=False` rather than raised to the caller.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import Field

from deck_monitor.models.base import ModelBase
from deck_monitor.models.change import Change
from deck_monitor.models.snapshot import PresentationSnapshot, StateSummary


def _now() -> datetime:
    return datetime.now(timezone.utc)


class OperationResult(ModelBase):
    """Common envelope shared by all session results.

    Attributes:
        success: Whether the operation completed.
        timestamp: When the result was produced.
    """

    success: bool = Field(default=True, description="Whether the operation completed.")
    timestamp: datetime = Field(
        default_factory=_now, description="When the result was produced."
    )


class ErrorResult(OperationResult):
    """Details regarding a failed operation.

    Attributes:
        error: Human-readable explanation of the failure.
        code: Machine-readable error code (e.g., 'session.not_initialized').
    """

    success: bool = False
    error: str = Field(..., description="Human-readable explanation of the failure.")
    code: str = Field(
        default="error",
        description="Machine-readable error code (e.g., 'session.not_initialized').",
    )


class InitializeResult(OperationResult):
    presentation_id: str
    initial_snapshot: PresentationSnapshot
    message: str = "Change tracking initialized"


class StateComparison(ModelBase):
    """Before/after counters for one detection call.

    Attributes:
        before: Summary of the previous snapshot, None on bootstrap.
        after: Summary of the current snapshot.
        slide_count_changed: Whether the slide count differs.
        element_count_changed: Whether the total element count differs.
        time_difference: Milliseconds between the two captures.
        changes_detected: Number of change records produced.
    """

    before: Optional[StateSummary] = None
    after: StateSummary
    slide_count_changed: bool = False
    element_count_changed: bool = False
    time_difference: Optional[float] = None
    changes_detected: int = 0


class DetectChangesResult(OperationResult):
    changes: list[Change] = Field(default_factory=list)
    change_count: int = 0
    current_state: StateSummary
    previous_state: Optional[StateSummary] = None
    state_comparison: StateComparison
    message: Optional[str] = None


class ChangeLogResult(OperationResult):
    changes: list[Change] = Field(default_factory=list)
    total_changes: int = 0


class SessionActionResult(OperationResult):
    message: str


class CurrentStateResult(OperationResult):
    state: dict[str, Any] = Field(default_factory=dict)


SessionResult = Union[
    InitializeResult,
    DetectChangesResult,
    ChangeLogResult,
    SessionActionResult,
    CurrentStateResult,
    ErrorResult,
]

