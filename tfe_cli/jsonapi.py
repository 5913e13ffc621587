"""Minimal JSON:API document encoding and decoding.

Only the parts of the format the API uses for plain attribute resources are
handled: a primary ``data`` member holding one resource object or a list of
them, each with ``type``, ``id`` and ``attributes``. Relationships and
included resources are ignored.
"""

from typing import Any, Dict, List, Optional, Tuple

from .errors import DecodeError


def marshal_resource(
    type_name: str,
    attributes: Dict[str, Any],
    resource_id: str = ""
) -> Dict[str, Any]:
    """Build a single-resource request document.

    Args:
        type_name: Resource type tag, e.g. ``organizations``.
        attributes: Wire attributes, keys already hyphenated.
        resource_id: Resource id; omitted from the document when empty.

    Returns:
        Document ready to be serialized as the request body.
    """
    data: Dict[str, Any] = {"type": type_name, "attributes": dict(attributes)}
    if resource_id:
        data["id"] = resource_id
    return {"data": data}


def _unmarshal_data(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a resource object, got {type(data).__name__}")

    attributes = data.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise DecodeError("Resource attributes must be an object")

    resource = dict(attributes)
    resource["id"] = data.get("id", "")
    resource["type"] = data.get("type", "")
    return resource


def unmarshal_resource(payload: Any) -> Dict[str, Any]:
    """Decode a single-resource document into a flat attribute dict.

    The returned dict holds the resource attributes plus its ``id`` and
    ``type``.

    Raises:
        DecodeError: If the document has no single resource as ``data``.
    """
    if not isinstance(payload, dict) or "data" not in payload:
        raise DecodeError("Response is not a JSON:API document")
    return _unmarshal_data(payload["data"])


def unmarshal_collection(payload: Any) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """Decode a collection document.

    Returns:
        A tuple of the resources, in document order, and the ``meta`` member.

    Raises:
        DecodeError: If ``data`` is missing or not a list.
    """
    if not isinstance(payload, dict) or "data" not in payload:
        raise DecodeError("Response is not a JSON:API document")

    data = payload["data"]
    if not isinstance(data, list):
        raise DecodeError("Expected a resource collection")

    meta = payload.get("meta") or {}
    return [_unmarshal_data(item) for item in data], meta


def pagination_from_meta(meta: Dict[str, Any]) -> Optional[Dict[str, Optional[int]]]:
    """Extract pagination details from a collection's ``meta`` member."""
    raw = meta.get("pagination")
    if not isinstance(raw, dict):
        return None

    return {
        "current_page": raw.get("current-page"),
        "previous_page": raw.get("prev-page"),
        "next_page": raw.get("next-page"),
        "total_pages": raw.get("total-pages"),
        "total_count": raw.get("total-count"),
    }
