"""Helpers for reading nested FHIR structures that may be missing."""

from typing import Any


def reference_id(reference: Any) -> str | None:
    """
    Return the id segment of a relative reference.

    ``"Organization/F1"`` gives ``"F1"``; a reference without a ``/``
    gives None.
    """
    if reference is None:
        return None
    parts = str(reference).split("/")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def reference_of(node: Any) -> str | None:
    """Return the id referenced by a ``{"reference": ...}`` node."""
    if not isinstance(node, dict):
        return None
    return reference_id(node.get("reference"))


def first_item(items: Any) -> dict[str, Any]:
    """First element of a list of objects, or an empty dict."""
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


def as_list(items: Any) -> list[dict[str, Any]]:
    """Objects of a list, skipping anything that is not an object."""
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]
