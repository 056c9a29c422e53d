from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Any, Literal, Mapping, Sequence, TypeVar

from kjoreskole_admin.app.ui.filters import Accessor, collation_key

T = TypeVar("T")

EMPTY_VALUE = "—"
NO_SORT = "none"

SortKind = Literal["text", "number", "date"]
SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class ColumnDef:
    key: str
    label: str
    accessor: Accessor | None = None


@dataclass(frozen=True)
class SortField:
    accessor: Accessor
    kind: SortKind = "text"


@dataclass(frozen=True)
class SortState:
    field: str | None = None
    direction: SortDirection = "asc"

    @property
    def is_active(self) -> bool:
        return bool(self.field) and self.field != NO_SORT


@dataclass
class ListingViewState:
    visible_columns: list[str]
    sort_by: str | None = None
    sort_dir: str = "asc"


def default_view_state(columns: list[ColumnDef], sort: SortState | None = None) -> ListingViewState:
    sort = sort or SortState()
    return ListingViewState(
        visible_columns=[column.key for column in columns],
        sort_by=sort.field if sort.is_active else None,
        sort_dir=sort.direction,
    )


def hydrate_view_state(
    payload: dict[str, Any] | None,
    columns: list[ColumnDef],
    sortable: Sequence[str] = (),
) -> ListingViewState:
    default = default_view_state(columns)
    allowed = {column.key for column in columns}
    if not isinstance(payload, dict):
        return default

    selected = payload.get("visible_columns")
    visible = [str(key) for key in selected if str(key) in allowed] if isinstance(selected, list) else default.visible_columns
    if not visible:
        visible = default.visible_columns

    sort_by = payload.get("sort_by")
    resolved_sort = str(sort_by) if sort_by in allowed or sort_by in sortable else None
    sort_dir = "desc" if str(payload.get("sort_dir", "asc")).lower() == "desc" else "asc"
    return ListingViewState(visible_columns=visible, sort_by=resolved_sort, sort_dir=sort_dir)


def serialize_view_state(view: ListingViewState) -> dict[str, Any]:
    return {"visible_columns": list(view.visible_columns), "sort_by": view.sort_by, "sort_dir": view.sort_dir}


def toggle_sort(sort: SortState, field: str) -> SortState:
    if sort.field == field:
        return replace(sort, direction="desc" if sort.direction == "asc" else "asc")
    return SortState(field=field, direction="asc")


def sort_rows(rows: Sequence[T], sort: SortState, fields: Mapping[str, SortField]) -> list[T]:
    """Return ``rows`` ordered by ``sort``; the input is never mutated.

    Missing or uncoercible values are placed after every present value in
    ascending order (and before them in descending order). Ties keep their
    input order.
    """
    if not sort.is_active or sort.field not in fields:
        return list(rows)

    definition = fields[sort.field]

    def _sort_key(row: T) -> tuple[int, Any]:
        value = _comparable(definition.accessor(row), definition.kind)
        if value is None:
            return (1, 0)
        return (0, value)

    return sorted(rows, key=_sort_key, reverse=sort.direction == "desc")


def _comparable(value: Any, kind: SortKind) -> Any:
    if value is None:
        return None
    if kind == "number":
        if isinstance(value, bool):
            return int(value)
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
    if kind == "date":
        return to_epoch_ms(value)
    text = str(value).strip()
    return collation_key(text) if text else None


def to_epoch_ms(value: Any) -> int | None:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    else:
        raw = str(value).strip() if value is not None else ""
        if not raw:
            return None
        try:
            moment = datetime.fromisoformat(raw)
        except ValueError:
            return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def normalize_value(value: Any) -> str:
    if value is None:
        return EMPTY_VALUE
    if isinstance(value, str):
        clean = value.strip()
        return clean or EMPTY_VALUE
    if isinstance(value, bool):
        return "Ja" if value else "Nei"
    if isinstance(value, datetime):
        return value.astimezone().strftime("%d.%m.%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d.%m.%Y")
    if isinstance(value, (list, tuple)):
        return ", ".join(normalize_value(item) for item in value) or EMPTY_VALUE
    return str(value)
