"""
Observation value resolution.

An Observation carries its value in one of several ``value[x]`` fields.
https://hl7.org/fhir/R4/observation-definitions.html#Observation.value_x_
"""

from typing import Any

# Checked in this order; the first present value wins.
FALLBACK_VALUE_FIELDS = (
    "valueString",
    "valueBoolean",
    "valueInteger",
    "valueTime",
    "valueDateTime",
)


def is_present(value: Any, falsy_as_absent: bool = False) -> bool:
    """
    Decide whether a resolved value counts as present.

    With ``falsy_as_absent`` the legacy truthiness test is used, which drops
    legitimate ``False`` and ``0`` values.
    """
    if falsy_as_absent:
        return bool(value)
    return value is not None


def resolve_value(resource: dict[str, Any], falsy_as_absent: bool = False) -> Any:
    """
    Resolve the scalar value of an Observation.

    ``valueQuantity.value`` overrides the fallback fields, and
    ``valueCodeableConcept`` (its first coding's display) overrides both.

    Args:
        resource: Observation resource
        falsy_as_absent: Use the legacy truthiness test for the fallback fields

    Returns:
        The resolved value, or None
    """
    value = None
    for field in FALLBACK_VALUE_FIELDS:
        candidate = resource.get(field)
        if is_present(candidate, falsy_as_absent):
            value = candidate
            break

    quantity = resource.get("valueQuantity")
    if isinstance(quantity, dict):
        value = quantity.get("value")

    concept = resource.get("valueCodeableConcept")
    if isinstance(concept, dict):
        value = _first_coding_display(concept)

    return value


def _first_coding_display(concept: dict[str, Any]) -> Any:
    codings = concept.get("coding")
    if not isinstance(codings, list) or not codings:
        return None
    first = codings[0]
    return first.get("display") if isinstance(first, dict) else None
