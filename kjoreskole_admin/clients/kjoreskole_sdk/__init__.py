from kjoreskole_admin.clients.kjoreskole_sdk.errors import ApiError
from kjoreskole_admin.clients.kjoreskole_sdk.http_client import HttpClient
from kjoreskole_admin.clients.kjoreskole_sdk.idempotency import build_idempotency_headers, generate_idempotency_key
from kjoreskole_admin.clients.kjoreskole_sdk.normalizers import normalize_record, normalize_rows
from kjoreskole_admin.clients.kjoreskole_sdk.resources_client import ResourceClient

__all__ = [
    "ApiError",
    "HttpClient",
    "ResourceClient",
    "generate_idempotency_key",
    "build_idempotency_headers",
    "normalize_rows",
    "normalize_record",
]
