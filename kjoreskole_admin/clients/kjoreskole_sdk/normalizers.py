from __future__ import annotations

from typing import Any


def normalize_rows(payload: Any) -> list[dict[str, Any]]:
    """Extract the record list from a collection response.

    Collection routes answer with a bare JSON array; wrapped shapes
    (``items``/``data``/``rows``) are accepted as well.
    """
    rows: Any = []
    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict):
        for key in ("items", "data", "rows"):
            if isinstance(payload.get(key), list):
                rows = payload[key]
                break
    return [row for row in rows if isinstance(row, dict)]


def normalize_record(payload: Any) -> dict[str, Any]:
    if isinstance(payload, dict):
        nested = payload.get("data")
        if isinstance(nested, dict):
            return nested
        return payload
    return {}
