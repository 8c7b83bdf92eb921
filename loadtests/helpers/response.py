"""Response error extraction for load test observability.

Parses MedTrack API error responses into human-readable messages.
Handles three response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- HTTP errors raised by routes (401/403/422): {"detail": "msg"}
- Domain errors (400/402/403/404/409/502): {"error": "InsufficientStock", "messages": {"field": ["msg"]}}
  or protean's own {"error": {"field": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def _flatten(messages) -> str:
    if isinstance(messages, dict):
        return " | ".join(
            f"{field}: {'; '.join(map(str, errors)) if isinstance(errors, list) else errors}"
            for field, errors in messages.items()
        )
    return str(messages)


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    if "detail" in body:
        detail = body["detail"]
        if isinstance(detail, list):
            parts = []
            for err in detail:
                loc = ".".join(str(p) for p in err.get("loc", []))
                msg = err.get("msg", str(err))
                parts.append(f"{loc}: {msg}" if loc else msg)
            return " | ".join(parts)
        return str(detail)

    if "error" in body:
        error = body["error"]
        if "messages" in body:
            return f"{error}: {_flatten(body['messages'])}"
        return _flatten(error)

    return str(body)[:300]
