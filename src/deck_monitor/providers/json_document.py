"""Providers backed by the JSON document format.

The JSON document format is the plain-data export of a deck::

    {
      "presentationId": "deck-1",
      "presentationName": "Quarterly review",
      "slides": [
        {
          "slideId": "s1",
          "background": {"fillType": "SOLID", "color": "#ffffff"},
          "layout": {"layoutType": "TITLE"},
          "elements": [
            {
              "id": "e1",
              "type": "SHAPE",
              "position": {"x": 0, "y": 0, "width": 100, "height": 50},
              "content": "Hello",
              "style": {"fontSize": 18},
              "properties": {"shapeType": "TEXT_BOX"}
            }
          ]
        }
      ]
    }

Documents are validated with jsonschema on every read.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Optional, Union

import jsonschema

from deck_monitor.errors import ProviderError
from deck_monitor.models.enums import ElementCapability, ElementType
from deck_monitor.providers.base import (
    ALL_CAPABILITIES,
    BACKGROUND,
    LAYOUT,
    POSITION,
    RawDocument,
    RawElement,
    RawSlide,
    SnapshotProvider,
)


_NUMBER = {"type": "number"}

DOCUMENT_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Presentation document",
    "type": "object",
    "required": ["presentationId", "slides"],
    "properties": {
        "presentationId": {"type": "string", "minLength": 1},
        "presentationName": {"type": "string"},
        "slides": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["slideId"],
                "properties": {
                    "slideId": {"type": "string", "minLength": 1},
                    "background": {"type": ["object", "null"]},
                    "layout": {"type": ["object", "null"]},
                    "elements": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["id"],
                            "properties": {
                                "id": {"type": "string", "minLength": 1},
                                "type": {"type": "string"},
                                "position": {
                                    "type": "object",
                                    "properties": {
                                        "x": _NUMBER,
                                        "y": _NUMBER,
                                        "width": _NUMBER,
                                        "height": _NUMBER,
                                        "rotation": _NUMBER,
                                        "scaleX": _NUMBER,
                                        "scaleY": _NUMBER,
                                    },
                                    "additionalProperties": False,
                                },
                                "content": {
                                    "anyOf": [
                                        {"type": "string"},
                                        {
                                            "type": "array",
                                            "items": {"type": "array"},
                                        },
                                        {"type": "null"},
                                    ]
                                },
                                "style": {"type": "object"},
                                "properties": {"type": "object"},
                            },
                        },
                    },
                },
            },
        },
    },
}


def validate_document(document: Any) -> None:
    """Validates a document against the JSON document schema.

    Raises:
        ProviderError: With code 'provider.invalid_document' on failure.
    """
    try:
        jsonschema.validate(instance=document, schema=DOCUMENT_SCHEMA)
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ProviderError(
            f"Invalid document at {location}: {e.message}",
            code="provider.invalid_document",
        ) from e


def _element_from_dict(data: Mapping[str, Any]) -> RawElement:
    readers: dict[str, Any] = {}
    if "position" in data:
        readers[POSITION] = data["position"]
    for capability in ElementCapability:
        if data.get(capability.value) is not None:
            readers[capability.value] = data[capability.value]
    return RawElement(
        object_id=data["id"],
        element_type=data.get("type", ElementType.UNSUPPORTED.value),
        readers=readers,
    )


def _slide_from_dict(data: Mapping[str, Any]) -> RawSlide:
    readers: dict[str, Any] = {}
    if data.get("background") is not None:
        readers[BACKGROUND] = data["background"]
    if data.get("layout") is not None:
        readers[LAYOUT] = data["layout"]
    return RawSlide(
        object_id=data["slideId"],
        elements=[_element_from_dict(e) for e in data.get("elements", [])],
        readers=readers,
    )


def document_from_dict(document: Mapping[str, Any]) -> RawDocument:
    """Converts a validated JSON document into the raw provider tree."""
    return RawDocument(
        presentation_id=document["presentationId"],
        presentation_name=document.get("presentationName", ""),
        slides=[_slide_from_dict(s) for s in document.get("slides", [])],
    )


DocumentSource = Union[Mapping[str, Any], Callable[[], Mapping[str, Any]]]


class DictDocumentProvider(SnapshotProvider):
    """Provider over an in-process JSON document.

    The source is either the document itself or a callable returning the
    current document, which is invoked once per snapshot.
    """

    def __init__(
        self,
        source: DocumentSource,
        capabilities: Optional[
            Mapping[ElementType, frozenset[ElementCapability]]
        ] = None,
    ):
        self._source = source
        self._capabilities = capabilities

    def _load(self) -> Mapping[str, Any]:
        if callable(self._source):
            return self._source()
        return self._source

    def get_document_snapshot(self) -> RawDocument:
        try:
            document = self._load()
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Failed to read document: {e}") from e
        validate_document(document)
        return document_from_dict(document)

    def capabilities(
        self, element_type: ElementType
    ) -> frozenset[ElementCapability]:
        if self._capabilities is None:
            return ALL_CAPABILITIES
        return self._capabilities.get(element_type, frozenset())


class JsonFileProvider(DictDocumentProvider):
    """Provider that re-reads a JSON document export from disk on each call."""

    def __init__(
        self,
        path: Union[str, Path],
        capabilities: Optional[
            Mapping[ElementType, frozenset[ElementCapability]]
        ] = None,
    ):
        self.path = Path(path)
        super().__init__(self._read_file, capabilities=capabilities)

    def _read_file(self) -> Mapping[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise ProviderError(f"Document not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise ProviderError(
                f"Document is not valid JSON: {self.path}: {e}",
                code="provider.invalid_document",
            ) from e
