from collections.abc import Iterable
from typing import Any

from deck_monitor.models.change import Change
from deck_monitor.models.enums import ChangeType


def _short(value: Any, limit: int = 60) -> str:
    text = str(value).replace("\n", " / ")
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def _summary(change: Change) -> str:
    details = change.details
    kind = change.change_type
    if kind == ChangeType.TEXT_CONTENT_CHANGED:
        content = details["content"]
        return f"`{_short(content['oldValue'])}` -> `{_short(content['newValue'])}`"
    if kind == ChangeType.ELEMENT_MOVED:
        old = details["position"]["oldPosition"]
        new = details["position"]["newPosition"]
        return f"({old['x']}, {old['y']}) -> ({new['x']}, {new['y']})"
    if kind in (ChangeType.FORMATTING_CHANGED, ChangeType.PROPERTIES_CHANGED):
        key = "style" if kind == ChangeType.FORMATTING_CHANGED else "properties"
        section = details[key]
        paths = [f["path"] for f in section["changedFields"]]
        return "fields: " + ", ".join(f"`{p}`" for p in paths)
    if kind == ChangeType.SLIDE_REORDERED:
        order = details["order"]
        return f"moved from {order['oldIndex']} to {order['newIndex']}"
    if kind in (ChangeType.SLIDE_ADDED, ChangeType.SLIDE_REMOVED):
        return f"{details['slide']['elementCount']} element(s)"
    return ""


def format_changes_markdown(changes: Iterable[Change]) -> str:
    changes = list(changes)
    if not changes:
        return "No changes detected."

    lines: list[str] = ["### Changes"]
    for c in changes:
        severity = c.metadata.change_severity.value
        subject = f"`{c.element_id}` ({c.element_type})" if c.element_id else ""
        line = (
            f"- **{c.change_type.value}** [{severity}] slide {c.slide_index} "
            f"{subject}"
        ).rstrip()
        summary = _summary(c)
        if summary:
            line += f": {summary}"
        lines.append(line)
    return "\n".join(lines)
