from __future__ import annotations

from typing import Any

from kjoreskole_admin.clients.kjoreskole_sdk.http_client import HttpClient
from kjoreskole_admin.clients.kjoreskole_sdk.idempotency import build_idempotency_headers
from kjoreskole_admin.clients.kjoreskole_sdk.normalizers import normalize_record, normalize_rows


class ResourceClient:
    def __init__(self, http_client: HttpClient, path: str) -> None:
        self.http_client = http_client
        self.path = "/" + path.strip("/")

    def list(self) -> list[dict[str, Any]]:
        payload = self.http_client.request("GET", self.path)
        return normalize_rows(payload)

    def create(self, payload: dict[str, Any], idempotency_key: str | None = None) -> dict[str, Any]:
        headers = build_idempotency_headers(idempotency_key) if idempotency_key else None
        response = self.http_client.request("POST", self.path, json_body=payload, headers=headers)
        return normalize_record(response)

    def update(self, record_id: int | str, payload: dict[str, Any]) -> dict[str, Any]:
        response = self.http_client.request("PUT", f"{self.path}/{record_id}", json_body=payload)
        return normalize_record(response)

    def delete(self, record_id: int | str) -> None:
        self.http_client.request("DELETE", f"{self.path}/{record_id}")
