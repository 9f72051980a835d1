"""Utility functions for deck-monitor.

This module provides shared helpers used across the package: canonical
structural equality, checksums and field-level diffs of free-form mappings.
"""

import hashlib
import json
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from deck_monitor.models.change import FieldChange
from deck_monitor.models.enums import FieldChangeOp


def canonicalize(value: Any) -> Any:
    """Reduces a value to a hashable form that ignores mapping key order.

    Mappings become key-sorted tuples, sequences keep their order, booleans are
    tagged so that ``True`` never equals ``1``, and enums and pydantic models
    are reduced to their plain values first.

    Args:
        value: Any JSON-like value.

    Returns:
        A nested tuple structure suitable for ``==`` comparison.
    """
    if isinstance(value, BaseModel):
        return canonicalize(value.model_dump())
    if isinstance(value, Enum):
        return canonicalize(value.value)
    if isinstance(value, Mapping):
        items = [(str(k), canonicalize(v)) for k, v in value.items()]
        return ("map", tuple(sorted(items, key=lambda kv: kv[0])))
    if isinstance(value, (list, tuple)):
        return ("seq", tuple(canonicalize(v) for v in value))
    if isinstance(value, bool):
        return ("bool", value)
    if value is None:
        return ("null",)
    return ("scalar", value)


def structurally_equal(left: Any, right: Any) -> bool:
    """Compares two values by canonical structure rather than serialization."""
    return canonicalize(left) == canonicalize(right)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def compute_checksum(data: Any) -> str:
    """Computes a deterministic SHA-256 hash of JSON-like data.

    Args:
        data: The data to hash.

    Returns:
        A hex string representing the checksum.
    """
    # Use sort_keys=True for determinism
    dump = json.dumps(data, sort_keys=True, default=_json_default)
    return hashlib.sha256(dump.encode("utf-8")).hexdigest()


def compute_field_changes(
    old: Mapping[str, Any], new: Mapping[str, Any], path_prefix: str = ""
) -> list[FieldChange]:
    """Computes the changed keys between two mappings.

    Nested mappings on both sides are compared recursively and reported with
    dotted paths; everything else is compared as a whole value.

    Args:
        old: The mapping before the change.
        new: The mapping after the change.
        path_prefix: Internal recursion helper to build dotted paths.

    Returns:
        A list of FieldChange entries sorted by path.
    """
    changes: list[FieldChange] = []

    for key in sorted(set(old.keys()) | set(new.keys()), key=str):
        path = f"{path_prefix}.{key}" if path_prefix else str(key)

        if key not in old:
            changes.append(
                FieldChange(path=path, op=FieldChangeOp.ADD, new_value=new[key])
            )
        elif key not in new:
            changes.append(
                FieldChange(
                    path=path, op=FieldChangeOp.REMOVE, old_value=old[key]
                )
            )
        elif not structurally_equal(old[key], new[key]):
            if isinstance(old[key], Mapping) and isinstance(new[key], Mapping):
                changes.extend(compute_field_changes(old[key], new[key], path))
            else:
                changes.append(
                    FieldChange(
                        path=path,
                        op=FieldChangeOp.REPLACE,
                        old_value=old[key],
                        new_value=new[key],
                    )
                )

    return changes


def flatten_table_content(rows: Any) -> str:
    """Flattens table cell text into one string.

    Cells are joined by tabs and rows by newlines. Strings pass through.
    """
    if rows is None:
        return ""
    if isinstance(rows, str):
        return rows
    lines = []
    for row in rows:
        if isinstance(row, (list, tuple)):
            lines.append("\t".join("" if c is None else str(c) for c in row))
        else:
            lines.append(str(row))
    return "\n".join(lines)


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)
