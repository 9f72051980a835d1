"""Snapshot provider interface.

A provider exposes the monitored document as a raw tree of slides and
elements. Field values are read lazily through per-field readers so that the
snapshot builder can isolate a failure to the one field that raised.

Providers also declare, per element type, which optional attributes they can
supply. The builder only reads declared capabilities.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from deck_monitor.models.enums import ElementCapability, ElementType


Reader = Callable[[], Any]
ReaderOrValue = Union[Reader, Any]

# Reader keys understood by the builder.
POSITION = "position"
BACKGROUND = "background"
LAYOUT = "layout"

ALL_CAPABILITIES = frozenset(ElementCapability)

DEFAULT_CAPABILITIES: Mapping[ElementType, frozenset[ElementCapability]] = {
    ElementType.SHAPE: ALL_CAPABILITIES,
    ElementType.TABLE: ALL_CAPABILITIES,
    ElementType.WORD_ART: ALL_CAPABILITIES,
    ElementType.IMAGE: frozenset(
        {ElementCapability.STYLE, ElementCapability.PROPERTIES}
    ),
    ElementType.LINE: frozenset(
        {ElementCapability.STYLE, ElementCapability.PROPERTIES}
    ),
    ElementType.VIDEO: frozenset({ElementCapability.PROPERTIES}),
    ElementType.SHEETS_CHART: frozenset({ElementCapability.PROPERTIES}),
    ElementType.GROUP: frozenset({ElementCapability.PROPERTIES}),
    ElementType.UNSUPPORTED: frozenset(),
}


@dataclass
class RawElement:
    """A page element as exposed by a provider.

    Attributes:
        object_id: Stable identifier of the element.
        element_type: Provider type name; unknown names become UNSUPPORTED.
        readers: Field readers keyed by "position" or a capability value.
            Each entry is either a zero-argument callable or a plain value.
    """

    object_id: str
    element_type: Union[ElementType, str]
    readers: dict[str, ReaderOrValue] = field(default_factory=dict)


@dataclass
class RawSlide:
    """A slide as exposed by a provider."""

    object_id: str
    elements: list[RawElement] = field(default_factory=list)
    readers: dict[str, ReaderOrValue] = field(default_factory=dict)


@dataclass
class RawDocument:
    """The whole document as returned by a single provider call."""

    presentation_id: str
    presentation_name: str = ""
    slides: list[RawSlide] = field(default_factory=list)


class SnapshotProvider(ABC):
    """Abstract read-only source of document snapshots."""

    @abstractmethod
    def get_document_snapshot(self) -> RawDocument:
        """Reads the current document.

        Returns:
            The raw document tree.

        Raises:
            ProviderError: If the document cannot be read as a whole.
        """
        pass  # pragma: no cover

    def capabilities(
        self, element_type: ElementType
    ) -> frozenset[ElementCapability]:
        """Returns the optional attributes supplied for an element type."""
        return DEFAULT_CAPABILITIES.get(element_type, frozenset())


def read_field(reader: ReaderOrValue) -> Any:
    """Resolves a reader entry to its value."""
    if callable(reader):
        return reader()
    return reader
