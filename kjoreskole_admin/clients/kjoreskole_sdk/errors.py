from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

# the backend answers failures with {"error": "<norsk tekst>"} and no code
STATUS_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "PERMISSION_DENIED",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
}


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: dict[str, Any] | list[Any] | str | None = None
    trace_id: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    @classmethod
    def from_http_response(cls, response: httpx.Response) -> "ApiError":
        body = _read_body(response)
        fields = body if isinstance(body, dict) else {}
        message = fields.get("error") or fields.get("message") or (body if isinstance(body, str) else None)
        return cls(
            code=str(fields.get("code") or code_for_status(response.status_code)),
            message=str(message or f"HTTP {response.status_code}"),
            details=fields.get("details", body if isinstance(body, list) else None),
            trace_id=fields.get("trace_id") or response.headers.get("X-Trace-ID") or response.headers.get("X-Request-ID"),
            status_code=response.status_code,
        )


def code_for_status(status_code: int) -> str:
    if status_code >= 500:
        return "INTERNAL_ERROR"
    return STATUS_CODES.get(status_code, "HTTP_ERROR")


def _read_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text.strip() or None
