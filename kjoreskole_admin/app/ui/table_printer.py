from __future__ import annotations

from typing import Any, Sequence

from kjoreskole_admin.app.config import ELLIPSIS
from kjoreskole_admin.app.ui.listing_view import ColumnDef, normalize_value
from kjoreskole_admin.app.ui.view_model import ViewModel

_MARKERS = {"none": "[ ]", "some": "[-]", "all": "[x]"}


def cell_value(record: dict[str, Any], column: ColumnDef) -> str:
    value = column.accessor(record) if column.accessor else record.get(column.key)
    return normalize_value(value)


def render_table(title: str, view: ViewModel, columns: Sequence[ColumnDef]) -> str:
    lines = [f"\n{title}"]
    if view.empty_state == "no_data":
        lines.append("(ingen data)")
        return "\n".join(lines)
    if view.empty_state == "no_matches":
        lines.append("(ingen treff – fjern filtrene for å se alle)")
        return "\n".join(lines)

    headers = [_MARKERS[view.page_selection]] + [column.label for column in columns]
    body = [
        ["[x]" if row.selected else "[ ]"] + [cell_value(dict(row.record), column) for column in columns]
        for row in view.rows
    ]
    widths = [max(len(line[idx]) for line in [headers, *body]) for idx in range(len(headers))]

    lines.append(" | ".join(header.ljust(widths[idx]) for idx, header in enumerate(headers)))
    lines.append("-+-".join("-" * width for width in widths))
    for line in body:
        lines.append(" | ".join(cell.ljust(widths[idx]) for idx, cell in enumerate(line)))

    lines.append(footer_line(view))
    return "\n".join(lines)


def footer_line(view: ViewModel) -> str:
    pages = " ".join("…" if number == ELLIPSIS else (f"[{number}]" if number == view.page else str(number)) for number in view.page_window)
    summary = f"Viser {view.start_index}–{view.end_index} av {view.total_items}"
    if view.total_items != view.raw_total:
        summary += f" (filtrert fra {view.raw_total})"
    if view.selected_count:
        summary += f" • {view.selected_count} valgt"
    return f"{summary}  Side: {pages}"


def print_table(title: str, view: ViewModel, columns: Sequence[ColumnDef]) -> None:
    print(render_table(title, view, columns))
