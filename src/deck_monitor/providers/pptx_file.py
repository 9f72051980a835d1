"""Provider that reads a .pptx file with python-pptx.

The file is re-opened on every snapshot so that edits saved by another
application are picked up on the next poll. Geometry is reported in points.
"""

from pathlib import Path
from typing import Any, Optional, Union

from pptx import Presentation
from pptx.enum.dml import MSO_COLOR_TYPE, MSO_FILL
from pptx.enum.shapes import MSO_SHAPE_TYPE

from deck_monitor.errors import ProviderError
from deck_monitor.models.enums import ElementCapability, ElementType
from deck_monitor.observability.logging import fields, get_logger
from deck_monitor.providers.base import (
    ALL_CAPABILITIES,
    BACKGROUND,
    DEFAULT_CAPABILITIES,
    LAYOUT,
    POSITION,
    RawDocument,
    RawElement,
    RawSlide,
    SnapshotProvider,
)

logger = get_logger(__name__)

EMU_PER_POINT = 12700

_SHAPE_TYPES = {
    MSO_SHAPE_TYPE.PICTURE: ElementType.IMAGE,
    MSO_SHAPE_TYPE.LINKED_PICTURE: ElementType.IMAGE,
    MSO_SHAPE_TYPE.TABLE: ElementType.TABLE,
    MSO_SHAPE_TYPE.GROUP: ElementType.GROUP,
    MSO_SHAPE_TYPE.LINE: ElementType.LINE,
    MSO_SHAPE_TYPE.MEDIA: ElementType.VIDEO,
    MSO_SHAPE_TYPE.CHART: ElementType.SHEETS_CHART,
    MSO_SHAPE_TYPE.TEXT_EFFECT: ElementType.WORD_ART,
}

PPTX_CAPABILITIES = {
    **DEFAULT_CAPABILITIES,
    ElementType.GROUP: frozenset({ElementCapability.PROPERTIES}),
    ElementType.WORD_ART: ALL_CAPABILITIES,
}


def _points(length: Optional[int]) -> float:
    if length is None:
        return 0.0
    return round(int(length) / EMU_PER_POINT, 2)


def _enum_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "name", str(value))


def _color(color: Any) -> Optional[str]:
    if color.type is None:
        return None
    if color.type == MSO_COLOR_TYPE.RGB:
        return f"#{color.rgb}"
    if color.type == MSO_COLOR_TYPE.SCHEME:
        return _enum_name(color.theme_color)
    return _enum_name(color.type)


def _fill(fill: Any) -> dict[str, Any]:
    info: dict[str, Any] = {"fillType": _enum_name(fill.type)}
    if fill.type == MSO_FILL.SOLID:
        info["color"] = _color(fill.fore_color)
    return info


def _element_type(shape: Any) -> ElementType:
    if getattr(shape, "has_table", False) and shape.has_table:
        return ElementType.TABLE
    if getattr(shape, "has_chart", False) and shape.has_chart:
        return ElementType.SHEETS_CHART
    try:
        shape_type = shape.shape_type
    except NotImplementedError:
        return ElementType.UNSUPPORTED
    if shape_type in _SHAPE_TYPES:
        return _SHAPE_TYPES[shape_type]
    if shape_type == MSO_SHAPE_TYPE.PLACEHOLDER and hasattr(shape, "image"):
        return ElementType.IMAGE
    return ElementType.SHAPE


class _ShapeReaders:
    """Per-field readers over one python-pptx shape."""

    def __init__(self, shape: Any, element_type: ElementType):
        self.shape = shape
        self.element_type = element_type

    def position(self) -> dict[str, float]:
        shape = self.shape
        return {
            "x": _points(shape.left),
            "y": _points(shape.top),
            "width": _points(shape.width),
            "height": _points(shape.height),
            "rotation": float(getattr(shape, "rotation", 0.0) or 0.0),
            "scaleX": 1.0,
            "scaleY": 1.0,
        }

    def content(self) -> Any:
        if self.element_type == ElementType.TABLE:
            table = self.shape.table
            return [[cell.text for cell in row.cells] for row in table.rows]
        if self.shape.has_text_frame:
            return self.shape.text_frame.text
        return ""

    def _first_run_font(self) -> Any:
        if self.element_type == ElementType.TABLE:
            frame = self.shape.table.cell(0, 0).text_frame
        else:
            frame = self.shape.text_frame
        for paragraph in frame.paragraphs:
            if paragraph.runs:
                return paragraph.runs[0].font
        return frame.paragraphs[0].font

    def style(self) -> dict[str, Any]:
        shape = self.shape
        style: dict[str, Any] = {}

        if self.element_type == ElementType.TABLE or shape.has_text_frame:
            font = self._first_run_font()
            style["fontSize"] = font.size.pt if font.size is not None else None
            style["fontFamily"] = font.name
            style["fontWeight"] = "BOLD" if font.bold else "NORMAL"
            style["fontStyle"] = "ITALIC" if font.italic else "NORMAL"
            style["textColor"] = _color(font.color)

        if self.element_type in (ElementType.SHAPE, ElementType.WORD_ART):
            style["fill"] = _fill(shape.fill)

        if self.element_type != ElementType.TABLE:
            line = shape.line
            style["border"] = {
                "width": _points(line.width),
                "dashStyle": _enum_name(line.dash_style),
            }
        return style

    def properties(self) -> dict[str, Any]:
        shape = self.shape
        properties: dict[str, Any] = {"name": shape.name}
        try:
            properties["shapeType"] = _enum_name(shape.shape_type)
        except NotImplementedError:
            properties["shapeType"] = None

        if self.element_type == ElementType.TABLE:
            table = shape.table
            properties["rowCount"] = len(table.rows)
            properties["columnCount"] = len(table.columns)
        elif self.element_type == ElementType.IMAGE:
            image = shape.image
            properties["imageName"] = image.filename
            properties["contentType"] = image.content_type
            properties["sha1"] = image.sha1
        elif self.element_type == ElementType.GROUP:
            properties["childCount"] = len(shape.shapes)
        elif shape.has_text_frame:
            paragraph = shape.text_frame.paragraphs[0]
            properties["textAlignment"] = _enum_name(paragraph.alignment)
            properties["verticalAlignment"] = _enum_name(
                shape.text_frame.vertical_anchor
            )
            properties["lineSpacing"] = paragraph.line_spacing
        if getattr(shape, "is_placeholder", False):
            properties["placeholder"] = _enum_name(shape.placeholder_format.type)
        return properties


class PptxFileProvider(SnapshotProvider):
    """Reads the deck from a .pptx file on every snapshot."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get_document_snapshot(self) -> RawDocument:
        if not self.path.exists():
            raise ProviderError(f"Document not found: {self.path}")
        try:
            prs = Presentation(str(self.path))
        except Exception as e:
            raise ProviderError(f"Failed to open {self.path}: {e}") from e

        core = prs.core_properties
        document = RawDocument(
            presentation_id=core.identifier or self.path.stem,
            presentation_name=core.title or self.path.name,
        )
        for slide in prs.slides:
            document.slides.append(self._slide(slide))
        logger.debug(
            "Read pptx document",
            extra=fields(
                path=str(self.path), slide_count=len(document.slides)
            ),
        )
        return document

    def _slide(self, slide: Any) -> RawSlide:
        raw = RawSlide(
            object_id=str(slide.slide_id),
            readers={
                BACKGROUND: lambda: _fill(slide.background.fill),
                LAYOUT: lambda: {"layoutName": slide.slide_layout.name},
            },
        )
        for shape in slide.shapes:
            element_type = _element_type(shape)
            readers = _ShapeReaders(shape, element_type)
            raw.elements.append(
                RawElement(
                    object_id=str(shape.shape_id),
                    element_type=element_type,
                    readers={
                        POSITION: readers.position,
                        ElementCapability.CONTENT.value: readers.content,
                        ElementCapability.STYLE.value: readers.style,
                        ElementCapability.PROPERTIES.value: readers.properties,
                    },
                )
            )
        return raw

    def capabilities(
        self, element_type: ElementType
    ) -> frozenset[ElementCapability]:
        return PPTX_CAPABILITIES.get(element_type, frozenset())
