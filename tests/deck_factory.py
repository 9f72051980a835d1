"""Builders for JSON document exports used across the test suite."""

import copy
from typing import Any, Optional


def element(
    element_id: str,
    content: Optional[Any] = "",
    element_type: str = "SHAPE",
    x: float = 0,
    y: float = 0,
    width: float = 100,
    height: float = 50,
    style: Optional[dict] = None,
    properties: Optional[dict] = None,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": element_id,
        "type": element_type,
        "position": {"x": x, "y": y, "width": width, "height": height},
        "style": style if style is not None else {"fontSize": 12},
        "properties": properties if properties is not None else {},
    }
    if content is not None:
        data["content"] = content
    return data


def slide(
    slide_id: str,
    *elements: dict[str, Any],
    background: Optional[dict] = None,
    layout: Optional[dict] = None,
) -> dict[str, Any]:
    data: dict[str, Any] = {"slideId": slide_id, "elements": list(elements)}
    if background is not None:
        data["background"] = background
    if layout is not None:
        data["layout"] = layout
    return data


def document(
    *slides: dict[str, Any],
    presentation_id: str = "deck-1",
    name: str = "Test deck",
) -> dict[str, Any]:
    return {
        "presentationId": presentation_id,
        "presentationName": name,
        "slides": list(slides),
    }


def three_slide_deck() -> dict[str, Any]:
    return document(
        slide("s1", element("e1", "Hello"), element("e2", "Subtitle")),
        slide("s2", element("e3", "Body")),
        slide("s3", element("e4", "Closing")),
    )


class MutableDeck:
    """A document that tests edit between polls, used as a provider source."""

    def __init__(self, data: dict[str, Any]):
        self.data = copy.deepcopy(data)
        self.fail_with: Optional[Exception] = None

    def __call__(self) -> dict[str, Any]:
        if self.fail_with is not None:
            raise self.fail_with
        return copy.deepcopy(self.data)

    def element(self, slide_index: int, element_id: str) -> dict[str, Any]:
        for item in self.data["slides"][slide_index]["elements"]:
            if item["id"] == element_id:
                return item
        raise KeyError(element_id)
