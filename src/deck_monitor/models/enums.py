"""Enumeration definitions for deck-monitor.

This module contains the standard Enum classes shared by the snapshot model,
the diff engine, the change classifier and the session controller.
"""

from enum import Enum


class ElementType(str, Enum):
    """Kind of page element reported by a snapshot provider.

    Attributes:
        SHAPE: A shape or text box.
        TABLE: A table of cells.
        IMAGE: A picture.
        LINE: A line or connector.
        GROUP: A group of elements.
        VIDEO: An embedded video.
        WORD_ART: A word-art element.
        SHEETS_CHART: An embedded chart.
        UNSUPPORTED: Anything the provider cannot classify.
    """

    SHAPE = "SHAPE"
    TABLE = "TABLE"
    IMAGE = "IMAGE"
    LINE = "LINE"
    GROUP = "GROUP"
    VIDEO = "VIDEO"
    WORD_ART = "WORD_ART"
    SHEETS_CHART = "SHEETS_CHART"
    UNSUPPORTED = "UNSUPPORTED"

    @classmethod
    def parse(cls, value) -> "ElementType":
        """Maps a provider type name to a member, UNSUPPORTED when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNSUPPORTED


class ElementCapability(str, Enum):
    """Optional attributes a provider may be able to supply for an element.

    Attributes:
        CONTENT: Textual content (shape text, table cells).
        STYLE: Visual style (fonts, colors, fill, border).
        PROPERTIES: Structural properties (shape type, row count, source).
    """

    CONTENT = "content"
    STYLE = "style"
    PROPERTIES = "properties"


class DifferenceKind(str, Enum):
    """Kind of raw difference produced by the diff engine."""

    SLIDE_ADDED = "slide_added"
    SLIDE_REMOVED = "slide_removed"
    SLIDE_REORDERED = "slide_reordered"
    BACKGROUND_CHANGED = "background_changed"
    LAYOUT_CHANGED = "layout_changed"
    ELEMENT_ADDED = "element_added"
    ELEMENT_REMOVED = "element_removed"
    POSITION_CHANGED = "position_changed"
    STYLE_CHANGED = "style_changed"
    CONTENT_CHANGED = "content_changed"
    PROPERTIES_CHANGED = "properties_changed"


class ChangeType(str, Enum):
    """Type of a classified change record."""

    SLIDE_ADDED = "slide_added"
    SLIDE_REMOVED = "slide_removed"
    SLIDE_REORDERED = "slide_reordered"
    BACKGROUND_CHANGED = "background_changed"
    LAYOUT_CHANGED = "layout_changed"
    ELEMENT_ADDED = "element_added"
    ELEMENT_REMOVED = "element_removed"
    ELEMENT_MOVED = "element_moved"
    FORMATTING_CHANGED = "formatting_changed"
    TEXT_CONTENT_CHANGED = "text_content_changed"
    PROPERTIES_CHANGED = "properties_changed"


class ChangeScope(str, Enum):
    """Granularity a change applies to.

    Attributes:
        SLIDE: A whole slide was added, removed, moved or restyled.
        ELEMENT: A single element changed.
        TEXT_RANGE: A range of text inside an element changed.
    """

    SLIDE = "SLIDE"
    ELEMENT = "ELEMENT"
    TEXT_RANGE = "TEXT_RANGE"


class ChangeSeverity(str, Enum):
    """How significant a change is for the reader of the deck."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class DetectionMethod(str, Enum):
    """How a change was observed.

    Attributes:
        POLLING: Snapshot comparison on a caller-driven poll.
        EVENT: Pushed by the editing surface.
        MANUAL: Recorded by hand.
    """

    POLLING = "POLLING"
    EVENT = "EVENT"
    MANUAL = "MANUAL"


class FieldChangeOp(str, Enum):
    """Defines the type of operation in a field change entry.

    Attributes:
        ADD: A new key was added.
        REMOVE: An existing key was removed.
        REPLACE: An existing value was changed.
    """

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"


class SessionState(str, Enum):
    """Lifecycle state of a monitoring session.

    Attributes:
        UNINITIALIZED: No baseline snapshot; detection is not possible.
        MONITORING: A baseline exists and detection calls are accepted.
        STOPPED: Detection is paused; history is kept until cleared.
    """

    UNINITIALIZED = "uninitialized"
    MONITORING = "monitoring"
    STOPPED = "stopped"


class SlideMatching(str, Enum):
    """Strategy used to pair slides of two snapshots.

    Attributes:
        POSITIONAL: Pair slides by deck position; a reorder shows up as
            element-level changes or a remove/add pair.
        IDENTITY: Pair slides by slide id and report moves as reorders.
    """

    POSITIONAL = "positional"
    IDENTITY = "identity"
