from __future__ import annotations

import secrets
from datetime import datetime, timezone


def generate_idempotency_key(prefix: str) -> str:
    normalized = prefix.strip().lower().replace(" ", "-").replace("_", "-")
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    nonce = secrets.token_hex(6)
    return f"{normalized}-{ts}-{nonce}"


def build_idempotency_headers(idempotency_key: str) -> dict[str, str]:
    return {
        "Idempotency-Key": idempotency_key,
        "X-Idempotency-Key": idempotency_key,
    }
