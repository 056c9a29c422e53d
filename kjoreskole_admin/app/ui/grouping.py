from __future__ import annotations

from datetime import date
from typing import Any, Hashable, Iterable, Sequence, TypeVar

from kjoreskole_admin.app.ui.filters import Accessor, to_date

T = TypeVar("T")

CLOSED_STATUSES = frozenset({"FERDIG", "AVBRUTT"})


def group_rows(rows: Iterable[T], accessor: Accessor, order: Sequence[Hashable] = ()) -> dict[Any, list[T]]:
    """Bucket rows into board columns.

    Columns listed in ``order`` are always present (possibly empty) and come
    first; values outside ``order`` get their own column after them, in
    first-seen order. Row order inside a column follows the input.
    """
    groups: dict[Any, list[T]] = {key: [] for key in order}
    for row in rows:
        groups.setdefault(accessor(row), []).append(row)
    return groups


def group_by_date(rows: Iterable[T], accessor: Accessor) -> dict[date, list[T]]:
    groups: dict[date, list[T]] = {}
    for row in rows:
        day = to_date(accessor(row))
        if day is None:
            continue
        groups.setdefault(day, []).append(row)
    return dict(sorted(groups.items()))


def is_overdue(record: Any, due_accessor: Accessor, today: date, status_accessor: Accessor | None = None) -> bool:
    due = to_date(due_accessor(record))
    if due is None or due >= today:
        return False
    if status_accessor is not None and status_accessor(record) in CLOSED_STATUSES:
        return False
    return True
