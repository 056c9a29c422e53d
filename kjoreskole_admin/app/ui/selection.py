from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Iterable, Literal

RecordId = Hashable
PageSelection = Literal["none", "some", "all"]


@dataclass(frozen=True)
class SelectionState:
    ids: frozenset = field(default_factory=frozenset)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)


def toggle(state: SelectionState, record_id: RecordId) -> SelectionState:
    if record_id in state.ids:
        return SelectionState(state.ids - {record_id})
    return SelectionState(state.ids | {record_id})


def toggle_all_on_current_page(state: SelectionState, page_ids: Iterable[RecordId]) -> SelectionState:
    page = frozenset(page_ids)
    if not page:
        return state
    if page <= state.ids:
        return SelectionState(state.ids - page)
    return SelectionState(state.ids | page)


def page_selection_status(state: SelectionState, page_ids: Iterable[RecordId]) -> PageSelection:
    page = frozenset(page_ids)
    selected = len(page & state.ids)
    if not page or selected == 0:
        return "none"
    return "all" if selected == len(page) else "some"


def prune(state: SelectionState, removed_ids: Iterable[RecordId]) -> SelectionState:
    removed = frozenset(removed_ids)
    if not removed & state.ids:
        return state
    return SelectionState(state.ids - removed)


def retain_known(state: SelectionState, known_ids: Iterable[RecordId]) -> SelectionState:
    known = frozenset(known_ids)
    if state.ids <= known:
        return state
    return SelectionState(state.ids & known)


def clear(state: SelectionState) -> SelectionState:
    return state if not state.ids else SelectionState()
