"""Response error extraction for load test observability.

Parses storefront API error responses into human-readable messages.
Every failure body has the same envelope:

    {"success": false, "message": "...",
     "missing_fields": [...], "errors": {"field": ["msg"]}, "products": [...]}

Only ``message`` is guaranteed; the other keys appear when relevant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    Gracefully handles unparseable bodies and missing fields.
    """
    try:
        body = response.json()
    except Exception:
        # Not JSON, return raw text truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict) or "message" not in body:
        return str(body)[:300]

    parts = [str(body["message"])]
    if body.get("missing_fields"):
        parts.append("missing: " + ", ".join(body["missing_fields"]))
    if isinstance(body.get("errors"), dict):
        parts.extend(f"{k}: {', '.join(map(str, v))}" for k, v in body["errors"].items())
    if body.get("products"):
        parts.append(f"products: {body['products']}")
    return " | ".join(parts)


def is_stock_rejection(response: Response) -> bool:
    """True for a 400 naming per-product shortfalls, the expected loss in a stock race."""
    if response.status_code != 400:
        return False
    try:
        products = response.json().get("products") or []
    except Exception:
        return False
    return any(isinstance(p, dict) and "available" in p for p in products)
