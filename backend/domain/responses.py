"""
Response envelope helpers shared by every router.

- Success:  { "success": true, "data": <payload>, "meta": {...} }
- Error:    { "success": false, "error": { "code", "message", "details" } }
            (built by the exception handlers in main.py)
"""
from typing import Any


def success_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Wrap a payload in the success envelope.

    Args:
        data: The response payload
        meta: Optional metadata (pagination, gate state, ...)
    """
    response = {"success": True, "data": data}
    if meta:
        response["meta"] = meta
    return response


def paginated_response(
    items: list[Any],
    limit: int,
    offset: int = 0,
    total: int | None = None,
) -> dict[str, Any]:
    """
    Wrap one page of items; meta carries limit, offset, total and hasMore.
    """
    if total is None:
        total = len(items)

    meta = {
        "limit": limit,
        "offset": offset,
        "total": total,
        "hasMore": (offset + limit) < total,
    }
    return success_response(data=items, meta=meta)


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
    }
