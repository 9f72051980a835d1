"""Builds immutable presentation snapshots from provider output.

Every optional field of an element is read through its own reader so that one
failing attribute never costs the element or the snapshot. Failures are kept
on the element as `errors[field]`; attributes the provider does not declare
for the element type are listed in `unavailable`.
"""

import copy
from typing import Any, Callable, Optional

from deck_monitor.errors import MonitorError, ProviderError
from deck_monitor.models.enums import ElementCapability, ElementType
from deck_monitor.models.snapshot import (
    ElementSnapshot,
    Position,
    PresentationSnapshot,
    SlideSnapshot,
)
from deck_monitor.observability.logging import fields, get_logger
from deck_monitor.providers.base import (
    BACKGROUND,
    LAYOUT,
    POSITION,
    RawElement,
    RawSlide,
    SnapshotProvider,
    read_field,
)
from deck_monitor.utils import compute_checksum, flatten_table_content

logger = get_logger(__name__)

CAPABILITIES = "capabilities"


def _empty_for(field_name: str) -> Any:
    if field_name == POSITION:
        return Position()
    if field_name == ElementCapability.CONTENT.value:
        return ""
    return {}


def _as_position(value: Any) -> Position:
    if isinstance(value, Position):
        return value
    return Position.model_validate(value or {})


def _as_content(value: Any) -> str:
    return flatten_table_content(value)


def _as_mapping(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"expected a mapping, got {type(value).__name__}")
    return copy.deepcopy(dict(value))


_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    POSITION: _as_position,
    ElementCapability.CONTENT.value: _as_content,
    ElementCapability.STYLE.value: _as_mapping,
    ElementCapability.PROPERTIES.value: _as_mapping,
}


class SnapshotBuilder:
    """Turns a provider's raw document into a `PresentationSnapshot`."""

    def build(self, provider: SnapshotProvider) -> PresentationSnapshot:
        """Captures the current document.

        Args:
            provider: The source of the raw document.

        Returns:
            The immutable snapshot, with its checksum set.

        Raises:
            ProviderError: If the provider cannot return the document at all,
                or returns one that does not form a valid snapshot.
        """
        try:
            document = provider.get_document_snapshot()
        except MonitorError:
            raise
        except Exception as e:
            raise ProviderError(f"Failed to read document: {e}") from e

        try:
            slides = [
                self._build_slide(provider, index, raw_slide)
                for index, raw_slide in enumerate(document.slides)
            ]
            checksum = compute_checksum(
                [slide.model_dump(mode="json") for slide in slides]
            )
            return PresentationSnapshot(
                presentation_id=document.presentation_id,
                presentation_name=document.presentation_name,
                slides=slides,
                checksum=checksum,
            )
        except MonitorError:
            raise
        except Exception as e:
            raise ProviderError(f"Failed to build snapshot: {e}") from e

    def _build_slide(
        self, provider: SnapshotProvider, index: int, raw: RawSlide
    ) -> SlideSnapshot:
        errors: dict[str, str] = {}
        background = self._read_slide_field(raw, BACKGROUND, errors)
        layout = self._read_slide_field(raw, LAYOUT, errors)

        elements: list[ElementSnapshot] = []
        seen: dict[str, int] = {}
        for raw_element in raw.elements:
            element = self._build_element(provider, raw.object_id, raw_element)
            count = seen.get(element.id, 0)
            seen[element.id] = count + 1
            if count:
                unique_id = f"{element.id}~{count}"
                while unique_id in seen:
                    count += 1
                    unique_id = f"{element.id}~{count}"
                seen[unique_id] = 1
                logger.warning(
                    "Duplicate element id",
                    extra=fields(slide_id=raw.object_id, element_id=element.id),
                )
                element = element.model_copy(
                    update={
                        "id": unique_id,
                        "errors": {
                            **element.errors,
                            "id": f"duplicate element id {element.id!r}",
                        },
                    }
                )
            elements.append(element)

        return SlideSnapshot(
            slide_index=index,
            slide_id=raw.object_id,
            elements=elements,
            background_info=background,
            layout_info=layout,
            errors=errors,
        )

    def _read_slide_field(
        self, raw: RawSlide, name: str, errors: dict[str, str]
    ) -> dict[str, Any]:
        if name not in raw.readers:
            return {}
        try:
            return _as_mapping(read_field(raw.readers[name]))
        except Exception as e:
            errors[name] = str(e) or type(e).__name__
            logger.warning(
                "Slide field extraction failed",
                extra=fields(slide_id=raw.object_id, field=name, error=str(e)),
            )
            return {}

    def _build_element(
        self, provider: SnapshotProvider, slide_id: str, raw: RawElement
    ) -> ElementSnapshot:
        element_type = ElementType.parse(raw.element_type)
        values: dict[str, Any] = {}
        errors: dict[str, str] = {}
        unavailable: list[str] = []

        try:
            declared = provider.capabilities(element_type)
        except Exception as e:
            declared = frozenset()
            errors[CAPABILITIES] = str(e) or type(e).__name__
            logger.warning(
                "Capability lookup failed",
                extra=fields(
                    slide_id=slide_id,
                    element_id=raw.object_id,
                    element_type=element_type.value,
                    error=str(e),
                ),
            )

        values[POSITION] = self._read_element_field(
            slide_id, raw, POSITION, errors
        )
        for capability in ElementCapability:
            name = capability.value
            if capability not in declared or name not in raw.readers:
                unavailable.append(name)
                values[name] = _empty_for(name)
                continue
            values[name] = self._read_element_field(slide_id, raw, name, errors)

        return ElementSnapshot(
            id=raw.object_id,
            type=element_type,
            position=values[POSITION],
            content=values[ElementCapability.CONTENT.value],
            style=values[ElementCapability.STYLE.value],
            properties=values[ElementCapability.PROPERTIES.value],
            errors=errors,
            unavailable=unavailable,
        )

    def _read_element_field(
        self,
        slide_id: str,
        raw: RawElement,
        name: str,
        errors: dict[str, str],
    ) -> Any:
        reader: Optional[Any] = raw.readers.get(name)
        if reader is None:
            return _empty_for(name)
        try:
            return _CONVERTERS[name](read_field(reader))
        except Exception as e:
            errors[name] = str(e) or type(e).__name__
            logger.warning(
                "Element field extraction failed",
                extra=fields(
                    slide_id=slide_id,
                    element_id=raw.object_id,
                    field=name,
                    error=str(e),
                ),
            )
            return _empty_for(name)
