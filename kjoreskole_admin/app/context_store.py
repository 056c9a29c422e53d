from __future__ import annotations

import json
from pathlib import Path
from typing import Any

DEFAULT_CONTEXT_FILE = Path.home() / ".kjoreskole_admin_listing_context.json"


def _context_path(path: str | Path | None) -> Path:
    return Path(path) if path else DEFAULT_CONTEXT_FILE


def load_context(path: str | Path | None = None) -> dict[str, Any]:
    context_path = _context_path(path)
    if not context_path.exists():
        return {}
    try:
        payload = json.loads(context_path.read_text(encoding="utf-8"))
        return payload if isinstance(payload, dict) else {}
    except (ValueError, OSError):
        return {}


def save_module_context(module: str, snapshot: dict[str, Any], path: str | Path | None = None) -> None:
    payload = load_context(path)
    modules = payload.get("modules") if isinstance(payload.get("modules"), dict) else {}
    modules[module] = snapshot
    payload["modules"] = modules
    context_path = _context_path(path)
    context_path.parent.mkdir(parents=True, exist_ok=True)
    context_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2, default=str), encoding="utf-8")


def load_module_context(module: str, path: str | Path | None = None) -> dict[str, Any]:
    modules = load_context(path).get("modules")
    if not isinstance(modules, dict):
        return {}
    snapshot = modules.get(module)
    return snapshot if isinstance(snapshot, dict) else {}


def clear_context(path: str | Path | None = None) -> None:
    context_path = _context_path(path)
    if context_path.exists():
        context_path.unlink()
