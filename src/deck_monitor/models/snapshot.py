"""Data model for presentation snapshots.

This module defines the schema for capturing the structure of a slide deck at
a specific point in time: slides, their elements, geometry, style, content and
properties. Snapshots are immutable once built.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import Field, field_validator

from deck_monitor.models.base import ElementId, FrozenModel, SlideId
from deck_monitor.models.enums import ElementType


class Position(FrozenModel):
    """Geometry of a page element in layout units.

    Attributes:
        x: Left edge.
        y: Top edge.
        width: Element width.
        height: Element height.
        rotation: Clockwise rotation in degrees.
        scale_x: Horizontal scale factor.
        scale_y: Vertical scale factor.
    """

    x: float = Field(default=0.0, description="Left edge.")
    y: float = Field(default=0.0, description="Top edge.")
    width: float = Field(default=0.0, description="Element width.")
    height: float = Field(default=0.0, description="Element height.")
    rotation: float = Field(
        default=0.0, description="Clockwise rotation in degrees."
    )
    scale_x: float = Field(default=1.0, description="Horizontal scale factor.")
    scale_y: float = Field(default=1.0, description="Vertical scale factor.")


class ElementSnapshot(FrozenModel):
    """Captured state of a single page element.

    Attributes:
        id: Stable external identifier, unique within the slide.
        type: The element kind.
        position: Element geometry.
        style: Free-form style mapping (fonts, colors, fill, border).
        content: Textual content; empty when the element has none.
        properties: Free-form structural properties.
        errors: Per-field extraction failures, keyed by field name.
        unavailable: Capabilities the provider does not supply for this type.
    """

    id: ElementId = Field(
        ..., description="Stable external identifier, unique within the slide."
    )
    type: ElementType = Field(
        default=ElementType.UNSUPPORTED, description="The element kind."
    )
    position: Position = Field(
        default_factory=Position, description="Element geometry."
    )
    style: dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form style mapping (fonts, colors, fill, border).",
    )
    content: str = Field(
        default="",
        description="Textual content; empty when the element has none.",
    )
    properties: dict[str, Any] = Field(
        default_factory=dict, description="Free-form structural properties."
    )
    errors: dict[str, str] = Field(
        default_factory=dict,
        description="Per-field extraction failures, keyed by field name.",
    )
    unavailable: list[str] = Field(
        default_factory=list,
        description="Capabilities the provider does not supply for this type.",
    )

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        return ElementType.parse(value)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class SlideSnapshot(FrozenModel):
    """Captured state of a single slide.

    Attributes:
        slide_index: Position of the slide in the deck at capture time.
        slide_id: Stable external identifier of the slide.
        elements: Elements in provider order.
        background_info: Free-form background description.
        layout_info: Free-form layout description.
        errors: Slide-level extraction failures, keyed by field name.
    """

    slide_index: int = Field(
        ..., ge=0, description="Position of the slide in the deck."
    )
    slide_id: SlideId = Field(
        ..., description="Stable external identifier of the slide."
    )
    elements: list[ElementSnapshot] = Field(
        default_factory=list, description="Elements in provider order."
    )
    background_info: dict[str, Any] = Field(
        default_factory=dict, description="Free-form background description."
    )
    layout_info: dict[str, Any] = Field(
        default_factory=dict, description="Free-form layout description."
    )
    errors: dict[str, str] = Field(
        default_factory=dict,
        description="Slide-level extraction failures, keyed by field name.",
    )

    def element_map(self) -> dict[ElementId, ElementSnapshot]:
        return {element.id: element for element in self.elements}


class StateSummary(FrozenModel):
    """Counters describing a snapshot, used for before/after comparison."""

    slide_count: int
    total_elements: int
    timestamp: datetime
    presentation_id: str


class PresentationSnapshot(FrozenModel):
    """Represents a snapshot of the whole presentation.

    Attributes:
        presentation_id: External identifier of the deck.
        presentation_name: Human-readable deck name.
        captured_at: When the snapshot was taken.
        slides: Slides in deck order.
        checksum: SHA-256 of the canonical slide data.
    """

    presentation_id: str = Field(
        ..., description="External identifier of the deck."
    )
    presentation_name: str = Field(
        default="", description="Human-readable deck name."
    )
    captured_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the snapshot was taken.",
    )
    slides: list[SlideSnapshot] = Field(
        default_factory=list, description="Slides in deck order."
    )
    checksum: Optional[str] = Field(
        default=None,
        description="SHA-256 of the canonical slide data for fast comparison.",
    )

    @property
    def slide_count(self) -> int:
        return len(self.slides)

    @property
    def total_elements(self) -> int:
        return sum(len(slide.elements) for slide in self.slides)

    def summary(self) -> StateSummary:
        return StateSummary(
            slide_count=self.slide_count,
            total_elements=self.total_elements,
            timestamp=self.captured_at,
            presentation_id=self.presentation_id,
        )
