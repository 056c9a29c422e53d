from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping, Sequence

from kjoreskole_admin.app.resources import ResourceDefinition
from kjoreskole_admin.app.ui.filters import apply_filters, clean_filters
from kjoreskole_admin.app.ui.listing_view import SortState, sort_rows
from kjoreskole_admin.app.ui.pagination import page_window, paginate
from kjoreskole_admin.app.ui.selection import PageSelection, SelectionState, page_selection_status

EmptyState = Literal["no_data", "no_matches"]


@dataclass(frozen=True)
class RowView:
    record: Mapping[str, Any]
    record_id: Any
    selected: bool


@dataclass(frozen=True)
class ViewModel:
    rows: list[RowView]
    total_items: int
    raw_total: int
    page: int
    page_size: int
    total_pages: int
    start_index: int
    end_index: int
    page_window: list[int]
    page_selection: PageSelection
    selected_count: int
    empty_state: EmptyState | None
    has_active_filters: bool

    @property
    def page_ids(self) -> list[Any]:
        return [row.record_id for row in self.rows]


def filter_and_sort(
    raw: Sequence[Mapping[str, Any]],
    filters: Mapping[str, Any],
    sort: SortState,
    resource: ResourceDefinition,
) -> list[Mapping[str, Any]]:
    # filter before sort so totals and page boundaries follow the filtered set
    filtered = apply_filters(raw, filters, resource.filters)
    return sort_rows(filtered, sort, resource.sort_fields)


def assemble(
    projected: Sequence[Mapping[str, Any]],
    raw_total: int,
    filters: Mapping[str, Any],
    page: int,
    limit: int,
    selection: SelectionState,
    resource: ResourceDefinition,
) -> ViewModel:
    window = paginate(projected, page, limit)
    current_page = min(max(1, page), window.total_pages)
    rows = [
        RowView(record=record, record_id=resource.record_id(record), selected=resource.record_id(record) in selection)
        for record in window.page_items
    ]
    has_active_filters = bool(clean_filters({key: value for key, value in filters.items() if key in resource.filters}))

    empty_state: EmptyState | None = None
    if raw_total == 0:
        empty_state = "no_data"
    elif not projected:
        empty_state = "no_matches"

    return ViewModel(
        rows=rows,
        total_items=len(projected),
        raw_total=raw_total,
        page=current_page,
        page_size=limit,
        total_pages=window.total_pages,
        start_index=window.start_index,
        end_index=window.end_index,
        page_window=page_window(current_page, window.total_pages),
        page_selection=page_selection_status(selection, [row.record_id for row in rows]),
        selected_count=len(selection),
        empty_state=empty_state,
        has_active_filters=has_active_filters,
    )


def build_view_model(
    raw: Sequence[Mapping[str, Any]],
    filters: Mapping[str, Any],
    sort: SortState,
    page: int,
    limit: int,
    selection: SelectionState,
    resource: ResourceDefinition,
) -> ViewModel:
    projected = filter_and_sort(raw, filters, sort, resource)
    return assemble(projected, len(raw), filters, page, limit, selection, resource)


class ViewModelAssembler:
    """Memoizing front for :func:`build_view_model`.

    The filtered and sorted projection is recomputed only when the raw
    collection, the filters or the sort change. Pagination and selection
    annotation are cheap and run on every call.
    """

    def __init__(self, resource: ResourceDefinition) -> None:
        self.resource = resource
        self._key: tuple[int, int, dict[str, Any], SortState] | None = None
        self._projected: list[Mapping[str, Any]] = []
        self.recomputations = 0

    def build(
        self,
        raw: Sequence[Mapping[str, Any]],
        filters: Mapping[str, Any],
        sort: SortState,
        page: int,
        limit: int,
        selection: SelectionState,
        raw_version: int = 0,
    ) -> ViewModel:
        key = (id(raw), raw_version, dict(filters), sort)
        if self._key != key:
            self._projected = filter_and_sort(raw, filters, sort, self.resource)
            self._key = key
            self.recomputations += 1
        return assemble(self._projected, len(raw), filters, page, limit, selection, self.resource)

    def invalidate(self) -> None:
        self._key = None

