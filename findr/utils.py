"""Utility functions for the application."""

from __future__ import annotations

from typing import Any

from .errors import ValidationError


def parse_change_event(payload: Any) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split a document-change payload into its before and after snapshots.

    Raises:
        ValidationError: If the payload is not a JSON object whose ``before``
            and ``after`` keys hold objects (or null for a missing side).
    """
    if not isinstance(payload, dict):
        raise ValidationError("Event body must be a JSON object.")

    snapshots = []
    for key in ("before", "after"):
        value = payload.get(key)
        if value is None:
            value = {}
        if not isinstance(value, dict):
            raise ValidationError(f"Event field '{key}' must be an object.")
        snapshots.append(value)
    return snapshots[0], snapshots[1]


def as_count(value: Any) -> int:
    """Read a numeric counter field, treating missing or bad values as 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    return 0
