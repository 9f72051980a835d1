import re
from datetime import datetime, timezone

import pytest

from deck_monitor.detection.builder import SnapshotBuilder
from deck_monitor.detection.classifier import CHANGE_RULES, ChangeClassifier
from deck_monitor.models.change import RawDifference
from deck_monitor.models.enums import (
    ChangeScope,
    ChangeSeverity,
    ChangeType,
    DetectionMethod,
    DifferenceKind,
)
from deck_monitor.models.snapshot import ElementSnapshot, Position
from deck_monitor.providers.json_document import DictDocumentProvider

from deck_factory import document, element, slide

DETECTED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestChangeRules:
    @pytest.mark.parametrize(
        "kind, change_type, scope, severity",
        [
            (DifferenceKind.SLIDE_ADDED, ChangeType.SLIDE_ADDED, ChangeScope.SLIDE, ChangeSeverity.HIGH),
            (DifferenceKind.SLIDE_REMOVED, ChangeType.SLIDE_REMOVED, ChangeScope.SLIDE, ChangeSeverity.HIGH),
            (DifferenceKind.SLIDE_REORDERED, ChangeType.SLIDE_REORDERED, ChangeScope.SLIDE, ChangeSeverity.MEDIUM),
            (DifferenceKind.BACKGROUND_CHANGED, ChangeType.BACKGROUND_CHANGED, ChangeScope.SLIDE, ChangeSeverity.MEDIUM),
            (DifferenceKind.LAYOUT_CHANGED, ChangeType.LAYOUT_CHANGED, ChangeScope.SLIDE, ChangeSeverity.HIGH),
            (DifferenceKind.ELEMENT_ADDED, ChangeType.ELEMENT_ADDED, ChangeScope.ELEMENT, ChangeSeverity.HIGH),
            (DifferenceKind.ELEMENT_REMOVED, ChangeType.ELEMENT_REMOVED, ChangeScope.ELEMENT, ChangeSeverity.HIGH),
            (DifferenceKind.CONTENT_CHANGED, ChangeType.TEXT_CONTENT_CHANGED, ChangeScope.ELEMENT, ChangeSeverity.HIGH),
            (DifferenceKind.POSITION_CHANGED, ChangeType.ELEMENT_MOVED, ChangeScope.ELEMENT, ChangeSeverity.MEDIUM),
            (DifferenceKind.STYLE_CHANGED, ChangeType.FORMATTING_CHANGED, ChangeScope.ELEMENT, ChangeSeverity.MEDIUM),
            (DifferenceKind.PROPERTIES_CHANGED, ChangeType.PROPERTIES_CHANGED, ChangeScope.ELEMENT, ChangeSeverity.LOW),
        ],
    )
    def test_rule_table(self, kind, change_type, scope, severity):
        rule = CHANGE_RULES[kind]
        assert rule.change_type == change_type
        assert rule.scope == scope
        assert rule.severity == severity

    def test_every_kind_has_a_rule(self):
        assert set(CHANGE_RULES) == set(DifferenceKind)


class TestChangeClassifier:
    @pytest.fixture
    def classifier(self):
        return ChangeClassifier()

    def test_content_change(self, classifier):
        diff = RawDifference(
            kind=DifferenceKind.CONTENT_CHANGED,
            slide_index=0,
            slide_id="s1",
            element_id="e1",
            element_type="SHAPE",
            previous="Hello",
            current="Hello World",
        )
        change = classifier.classify(
            diff, detected_at=DETECTED_AT, processing_time=1.5
        )

        assert change.change_type == ChangeType.TEXT_CONTENT_CHANGED
        assert change.element_id == "e1"
        assert change.element_type == "SHAPE"
        assert change.timestamp == DETECTED_AT
        assert change.details == {
            "content": {
                "oldValue": "Hello",
                "newValue": "Hello World",
                "textRange": {"startIndex": 0, "endIndex": 11},
            }
        }
        assert change.metadata.confidence == 1.0
        assert change.metadata.detection_method == DetectionMethod.POLLING
        assert change.metadata.processing_time == 1.5
        assert re.fullmatch(r"content_e1_\d+_[0-9a-f]{8}", change.id)
        assert str(int(DETECTED_AT.timestamp() * 1000)) in change.id

    def test_ids_are_unique_within_a_pass(self, classifier):
        diff = RawDifference(
            kind=DifferenceKind.CONTENT_CHANGED,
            slide_index=0,
            element_id="e1",
            previous="a",
            current="b",
        )
        changes = classifier.classify_all([diff, diff], detected_at=DETECTED_AT)
        assert changes[0].id != changes[1].id
        assert changes[0].timestamp == changes[1].timestamp

    def test_position_details(self, classifier):
        diff = RawDifference(
            kind=DifferenceKind.POSITION_CHANGED,
            slide_index=0,
            element_id="e1",
            element_type="IMAGE",
            previous=Position(x=1),
            current=Position(x=2),
        )
        details = classifier.classify(diff).details["position"]
        assert details["oldPosition"]["x"] == 1
        assert details["newPosition"]["x"] == 2
        assert details["newPosition"]["scaleX"] == 1.0

    def test_style_details_list_changed_fields(self, classifier):
        diff = RawDifference(
            kind=DifferenceKind.STYLE_CHANGED,
            slide_index=0,
            element_id="e1",
            previous={"fontSize": 12, "fill": {"color": "#fff"}},
            current={"fontSize": 12, "fill": {"color": "#000"}},
        )
        change = classifier.classify(diff)
        assert change.change_type == ChangeType.FORMATTING_CHANGED
        assert change.details["style"]["changedFields"] == [
            {
                "path": "fill.color",
                "op": "replace",
                "oldValue": "#fff",
                "newValue": "#000",
            }
        ]

    def test_properties_details(self, classifier):
        diff = RawDifference(
            kind=DifferenceKind.PROPERTIES_CHANGED,
            slide_index=2,
            element_id="e1",
            previous={},
            current={"name": "Logo"},
        )
        change = classifier.classify(diff)
        assert change.metadata.change_severity == ChangeSeverity.LOW
        props = change.details["properties"]
        assert props["newProperties"] == {"name": "Logo"}
        assert props["changedFields"][0]["op"] == "add"

    def test_slide_removed_details(self, classifier):
        snap = SnapshotBuilder().build(
            DictDocumentProvider(
                document(slide("s9", element("a"), element("b")))
            )
        )
        diff = RawDifference(
            kind=DifferenceKind.SLIDE_REMOVED,
            slide_index=0,
            slide_id="s9",
            previous=snap.slides[0],
        )
        change = classifier.classify(diff, detected_at=DETECTED_AT)

        assert change.element_id == "s9"
        assert change.element_type == "SLIDE"
        assert change.metadata.change_scope == ChangeScope.SLIDE
        assert change.details == {"slide": {"slideId": "s9", "elementCount": 2}}
        assert change.id.startswith("slide_remove_0_")

    def test_element_added_details_hold_the_element(self, classifier):
        added = ElementSnapshot(id="e5", type="TABLE", content="a\tb")
        diff = RawDifference(
            kind=DifferenceKind.ELEMENT_ADDED,
            slide_index=1,
            element_id="e5",
            element_type="TABLE",
            current=added,
        )
        details = classifier.classify(diff).details
        assert details["element"]["id"] == "e5"
        assert details["element"]["type"] == "TABLE"
        assert details["element"]["content"] == "a\tb"

    def test_reorder_background_and_layout_details(self, classifier):
        reorder = classifier.classify(
            RawDifference(
                kind=DifferenceKind.SLIDE_REORDERED,
                slide_index=0,
                slide_id="s2",
                previous=3,
                current=0,
                previous_index=3,
            )
        )
        assert reorder.details == {"order": {"oldIndex": 3, "newIndex": 0}}

        background = classifier.classify(
            RawDifference(
                kind=DifferenceKind.BACKGROUND_CHANGED,
                slide_index=0,
                slide_id="s2",
                previous={"color": "#fff"},
                current={"color": "#000"},
            )
        )
        assert background.details["background"]["newBackground"] == {
            "color": "#000"
        }

        layout = classifier.classify(
            RawDifference(
                kind=DifferenceKind.LAYOUT_CHANGED,
                slide_index=0,
                slide_id="s2",
                previous={"name": "TITLE"},
                current={"name": "BLANK"},
            )
        )
        assert layout.details["layout"] == {
            "oldLayout": {"name": "TITLE"},
            "newLayout": {"name": "BLANK"},
        }
