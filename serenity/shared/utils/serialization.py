"""JSON shaping for stored documents."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _to_json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json_value(v) for v in value]
    return value


def serialize_document(data: Optional[Dict[str, Any]], doc_id: Optional[str] = None) -> Dict[str, Any]:
    """Convert a stored document into a JSON-safe dict.

    Store timestamps come back as datetime subclasses; they are rendered
    as ISO-8601 strings. The document id is added as "id" when given.
    """
    result: Dict[str, Any] = {}
    if doc_id is not None:
        result["id"] = doc_id
    for key, value in (data or {}).items():
        result[key] = _to_json_value(value)
    return result
