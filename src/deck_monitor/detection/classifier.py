"""Turns raw differences into classified, loggable change records."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from deck_monitor.models.change import Change, ChangeMetadata, RawDifference
from deck_monitor.models.enums import (
    ChangeScope,
    ChangeSeverity,
    ChangeType,
    DetectionMethod,
    DifferenceKind,
)
from deck_monitor.utils import compute_field_changes, epoch_millis

SLIDE_ELEMENT_TYPE = "SLIDE"


@dataclass(frozen=True)
class ChangeRule:
    change_type: ChangeType
    scope: ChangeScope
    severity: ChangeSeverity
    id_prefix: str


CHANGE_RULES: dict[DifferenceKind, ChangeRule] = {
    DifferenceKind.SLIDE_ADDED: ChangeRule(
        ChangeType.SLIDE_ADDED, ChangeScope.SLIDE, ChangeSeverity.HIGH, "slide_add"
    ),
    DifferenceKind.SLIDE_REMOVED: ChangeRule(
        ChangeType.SLIDE_REMOVED,
        ChangeScope.SLIDE,
        ChangeSeverity.HIGH,
        "slide_remove",
    ),
    DifferenceKind.SLIDE_REORDERED: ChangeRule(
        ChangeType.SLIDE_REORDERED,
        ChangeScope.SLIDE,
        ChangeSeverity.MEDIUM,
        "slide_reorder",
    ),
    DifferenceKind.BACKGROUND_CHANGED: ChangeRule(
        ChangeType.BACKGROUND_CHANGED,
        ChangeScope.SLIDE,
        ChangeSeverity.MEDIUM,
        "background",
    ),
    DifferenceKind.LAYOUT_CHANGED: ChangeRule(
        ChangeType.LAYOUT_CHANGED, ChangeScope.SLIDE, ChangeSeverity.HIGH, "layout"
    ),
    DifferenceKind.ELEMENT_ADDED: ChangeRule(
        ChangeType.ELEMENT_ADDED, ChangeScope.ELEMENT, ChangeSeverity.HIGH, "add"
    ),
    DifferenceKind.ELEMENT_REMOVED: ChangeRule(
        ChangeType.ELEMENT_REMOVED,
        ChangeScope.ELEMENT,
        ChangeSeverity.HIGH,
        "remove",
    ),
    DifferenceKind.CONTENT_CHANGED: ChangeRule(
        ChangeType.TEXT_CONTENT_CHANGED,
        ChangeScope.ELEMENT,
        ChangeSeverity.HIGH,
        "content",
    ),
    DifferenceKind.POSITION_CHANGED: ChangeRule(
        ChangeType.ELEMENT_MOVED, ChangeScope.ELEMENT, ChangeSeverity.MEDIUM, "pos"
    ),
    DifferenceKind.STYLE_CHANGED: ChangeRule(
        ChangeType.FORMATTING_CHANGED,
        ChangeScope.ELEMENT,
        ChangeSeverity.MEDIUM,
        "style",
    ),
    DifferenceKind.PROPERTIES_CHANGED: ChangeRule(
        ChangeType.PROPERTIES_CHANGED,
        ChangeScope.ELEMENT,
        ChangeSeverity.LOW,
        "props",
    ),
}


def _dump(value: Any) -> Any:
    if hasattr(value, "to_json_dict"):
        return value.to_json_dict()
    return value


def _changed_fields(old: Any, new: Any) -> list[dict[str, Any]]:
    return [
        change.to_json_dict()
        for change in compute_field_changes(old or {}, new or {})
    ]


def _slide_details(slide: Any) -> dict[str, Any]:
    return {
        "slide": {"slideId": slide.slide_id, "elementCount": len(slide.elements)}
    }


_DETAIL_BUILDERS: dict[DifferenceKind, Callable[[RawDifference], dict[str, Any]]] = {
    DifferenceKind.SLIDE_ADDED: lambda d: _slide_details(d.current),
    DifferenceKind.SLIDE_REMOVED: lambda d: _slide_details(d.previous),
    DifferenceKind.SLIDE_REORDERED: lambda d: {
        "order": {"oldIndex": d.previous, "newIndex": d.current}
    },
    DifferenceKind.BACKGROUND_CHANGED: lambda d: {
        "background": {"oldBackground": d.previous, "newBackground": d.current}
    },
    DifferenceKind.LAYOUT_CHANGED: lambda d: {
        "layout": {"oldLayout": d.previous, "newLayout": d.current}
    },
    DifferenceKind.ELEMENT_ADDED: lambda d: {"element": _dump(d.current)},
    DifferenceKind.ELEMENT_REMOVED: lambda d: {"element": _dump(d.previous)},
    DifferenceKind.CONTENT_CHANGED: lambda d: {
        "content": {
            "oldValue": d.previous,
            "newValue": d.current,
            "textRange": {"startIndex": 0, "endIndex": len(d.current or "")},
        }
    },
    DifferenceKind.POSITION_CHANGED: lambda d: {
        "position": {
            "oldPosition": _dump(d.previous),
            "newPosition": _dump(d.current),
        }
    },
    DifferenceKind.STYLE_CHANGED: lambda d: {
        "style": {
            "oldStyle": d.previous,
            "newStyle": d.current,
            "changedFields": _changed_fields(d.previous, d.current),
        }
    },
    DifferenceKind.PROPERTIES_CHANGED: lambda d: {
        "properties": {
            "oldProperties": d.previous,
            "newProperties": d.current,
            "changedFields": _changed_fields(d.previous, d.current),
        }
    },
}


class ChangeClassifier:
    """Maps each raw difference to a `Change` with fixed severity and scope."""

    def classify(
        self,
        difference: RawDifference,
        *,
        detected_at: Optional[datetime] = None,
        processing_time: float = 0.0,
    ) -> Change:
        """Classifies one difference.

        Args:
            difference: The raw difference from the diff engine.
            detected_at: Detection time; defaults to now.
            processing_time: Duration of the diff pass in milliseconds.

        Returns:
            The change record.
        """
        detected_at = detected_at or datetime.now(timezone.utc)
        rule = CHANGE_RULES[difference.kind]
        slide_scope = rule.scope == ChangeScope.SLIDE

        if slide_scope:
            subject = str(difference.slide_index)
            element_id = difference.slide_id
            element_type = SLIDE_ELEMENT_TYPE
        else:
            subject = str(difference.element_id)
            element_id = difference.element_id
            element_type = difference.element_type

        change_id = (
            f"{rule.id_prefix}_{subject}_{epoch_millis(detected_at)}"
            f"_{uuid.uuid4().hex[:8]}"
        )
        return Change(
            id=change_id,
            timestamp=detected_at,
            slide_index=difference.slide_index,
            change_type=rule.change_type,
            element_id=element_id,
            element_type=element_type,
            details=_DETAIL_BUILDERS[difference.kind](difference),
            metadata=ChangeMetadata(
                change_scope=rule.scope,
                change_severity=rule.severity,
                detection_method=DetectionMethod.POLLING,
                confidence=1.0,
                processing_time=processing_time,
            ),
        )

    def classify_all(
        self,
        differences: list[RawDifference],
        *,
        detected_at: Optional[datetime] = None,
        processing_time: float = 0.0,
    ) -> list[Change]:
        """Classifies a diff pass, sharing one detection time across it."""
        detected_at = detected_at or datetime.now(timezone.utc)
        return [
            self.classify(
                difference,
                detected_at=detected_at,
                processing_time=processing_time,
            )
            for difference in differences
        ]
