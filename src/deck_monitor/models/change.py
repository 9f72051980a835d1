"""Data models for detected differences and classified change records.

A `RawDifference` is what the diff engine emits for one detected difference
between two snapshots. The change classifier turns each one into a `Change`,
the loggable unit returned to callers.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from deck_monitor.models.base import ChangeId, FrozenModel
from deck_monitor.models.enums import (
    ChangeScope,
    ChangeSeverity,
    ChangeType,
    DetectionMethod,
    DifferenceKind,
    FieldChangeOp,
)


class FieldChange(FrozenModel):
    """Represents a single changed key inside a style or property mapping.

    Attributes:
        path: Dot-separated path to the changed key (e.g., 'border.color').
        op: The operation (add, remove, replace).
        old_value: The value before the change, if any.
        new_value: The value after the change, if any.
    """

    path: str = Field(
        ...,
        description="Dot-separated path to the changed key (e.g., 'border.color').",
    )
    op: FieldChangeOp = Field(
        ..., description="The operation performed (add, remove, replace)."
    )
    old_value: Optional[Any] = Field(
        default=None, description="The value before the change, if any."
    )
    new_value: Optional[Any] = Field(
        default=None, description="The value after the change, if any."
    )


class RawDifference(FrozenModel):
    """One unclassified difference between two snapshots.

    `previous` and `current` hold whatever the kind compares: element
    snapshots, slide snapshots, positions, mappings or strings.
    """

    kind: DifferenceKind
    slide_index: int
    slide_id: Optional[str] = None
    element_id: Optional[str] = None
    element_type: Optional[str] = None
    previous: Optional[Any] = None
    current: Optional[Any] = None
    previous_index: Optional[int] = None


class ChangeMetadata(FrozenModel):
    """Classification metadata attached to every change record.

    Attributes:
        change_scope: Granularity of the change.
        change_severity: Significance of the change.
        detection_method: How it was observed (always POLLING here).
        confidence: Certainty of the detection in [0, 1].
        processing_time: Time spent producing the diff, in milliseconds.
    """

    change_scope: ChangeScope = Field(
        ..., description="Granularity of the change."
    )
    change_severity: ChangeSeverity = Field(
        ..., description="Significance of the change."
    )
    detection_method: DetectionMethod = Field(
        default=DetectionMethod.POLLING,
        description="How the change was observed.",
    )
    confidence: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Certainty of the detection in [0, 1].",
    )
    processing_time: float = Field(
        default=0.0,
        ge=0.0,
        description="Time spent producing the diff, in milliseconds.",
    )


class Change(FrozenModel):
    """A classified change record, as stored in the change log.

    Attributes:
        id: Unique identifier synthesized from kind, subject and time.
        timestamp: When the change was detected.
        slide_index: Slide position the change applies to.
        change_type: The classified type.
        element_id: Element id, or slide id for slide-scope changes.
        element_type: Element type, or 'SLIDE' for slide-scope changes.
        details: Old/new values; the shape depends on change_type.
        metadata: Scope, severity and detection metadata.
    """

    id: ChangeId = Field(..., description="Unique change identifier.")
    timestamp: datetime = Field(
        ..., description="When the change was detected."
    )
    slide_index: int = Field(
        ..., description="Slide position the change applies to."
    )
    change_type: ChangeType = Field(..., description="The classified type.")
    element_id: Optional[str] = Field(
        default=None,
        description="Element id, or slide id for slide-scope changes.",
    )
    element_type: Optional[str] = Field(
        default=None,
        description="Element type, or 'SLIDE' for slide-scope changes.",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Old/new values; the shape depends on change_type.",
    )
    metadata: ChangeMetadata = Field(
        ..., description="Scope, severity and detection metadata."
    )
