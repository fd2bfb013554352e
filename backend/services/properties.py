"""Case-insensitive access to shapefile attribute maps.

DBF attribute names arrive as ``Type``, ``TYPE``, ``type`` ... depending
on the tool that produced the archive, so nothing downstream indexes a
property map directly.
"""

from typing import Any, Mapping, Optional


def lookup(properties: Optional[Mapping[str, Any]], key: str) -> Optional[Any]:
    """Return the value of the first key matching *key* ignoring case, else None."""
    if not properties:
        return None
    lowered = key.lower()
    for name, value in properties.items():
        if name and str(name).lower() == lowered:
            return value
    return None


def first_of(properties: Optional[Mapping[str, Any]], *keys: str) -> Optional[Any]:
    """
    Walk *keys* in order and return the first truthy lookup.

    Empty strings and ``None`` fall through to the next key.
    """
    for key in keys:
        value = lookup(properties, key)
        if value:
            return value
    return None


def as_text(value: Any) -> str:
    """Attribute value as a string; integral floats from numeric DBF columns drop the '.0'."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)
