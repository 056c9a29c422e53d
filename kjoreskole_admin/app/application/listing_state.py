from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Hashable, Iterable, Mapping

from kjoreskole_admin.app.ui import pagination, selection
from kjoreskole_admin.app.ui.listing_view import SortState, toggle_sort
from kjoreskole_admin.app.ui.pagination import PaginationState
from kjoreskole_admin.app.ui.selection import SelectionState


@dataclass(frozen=True)
class ListingState:
    filters: Mapping[str, Any] = field(default_factory=dict)
    sort: SortState = SortState()
    pagination: PaginationState = PaginationState()
    selection: SelectionState = SelectionState()


def set_filter(state: ListingState, key: str, value: Any) -> ListingState:
    if state.filters.get(key) == value:
        return state
    filters = dict(state.filters)
    filters[key] = value
    return replace(state, filters=filters, pagination=pagination.reset_page(state.pagination))


def set_filters(state: ListingState, values: Mapping[str, Any]) -> ListingState:
    for key, value in values.items():
        state = set_filter(state, key, value)
    return state


def clear_filters(state: ListingState, default_sort: SortState) -> ListingState:
    if not state.filters and state.sort == default_sort:
        return state
    return replace(state, filters={}, sort=default_sort, pagination=pagination.reset_page(state.pagination))


def sort_by(state: ListingState, field_name: str) -> ListingState:
    return replace(state, sort=toggle_sort(state.sort, field_name), pagination=pagination.reset_page(state.pagination))


def set_sort(state: ListingState, sort: SortState) -> ListingState:
    if state.sort == sort:
        return state
    return replace(state, sort=sort, pagination=pagination.reset_page(state.pagination))


def set_page(state: ListingState, page: int) -> ListingState:
    updated = pagination.set_page(state.pagination, page)
    return state if updated is state.pagination else replace(state, pagination=updated)


def set_page_size(state: ListingState, page_size: int) -> ListingState:
    updated = pagination.set_page_size(state.pagination, page_size)
    return state if updated is state.pagination else replace(state, pagination=updated)


def set_total(state: ListingState, total: int) -> ListingState:
    if state.pagination.total == total:
        return state
    return replace(state, pagination=pagination.set_total(state.pagination, total))


def toggle_row(state: ListingState, record_id: Hashable) -> ListingState:
    return replace(state, selection=selection.toggle(state.selection, record_id))


def toggle_page(state: ListingState, page_ids: Iterable[Hashable]) -> ListingState:
    return replace(state, selection=selection.toggle_all_on_current_page(state.selection, page_ids))


def clear_selection(state: ListingState) -> ListingState:
    updated = selection.clear(state.selection)
    return state if updated is state.selection else replace(state, selection=updated)


def prune_selection(state: ListingState, removed_ids: Iterable[Hashable]) -> ListingState:
    updated = selection.prune(state.selection, removed_ids)
    return state if updated is state.selection else replace(state, selection=updated)


def retain_selection(state: ListingState, known_ids: Iterable[Hashable]) -> ListingState:
    updated = selection.retain_known(state.selection, known_ids)
    return state if updated is state.selection else replace(state, selection=updated)
