from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Sequence


def export_records(
    *,
    module: str,
    records: Sequence[Mapping[str, Any]],
    output_dir: str = "out/exports",
    now: datetime | None = None,
) -> Path:
    """Write ``records`` verbatim as a pretty-printed JSON array."""
    destination = Path(output_dir)
    destination.mkdir(parents=True, exist_ok=True)

    moment = now or datetime.now().astimezone()
    stem = f"{module}_{moment.strftime('%Y-%m-%d_%H%M%S')}"
    path = destination / f"{stem}.json"
    suffix = 2
    while path.exists():
        path = destination / f"{stem}_{suffix}.json"
        suffix += 1
    path.write_text(json.dumps(list(records), ensure_ascii=False, indent=2, default=str), encoding="utf-8")
    return path
