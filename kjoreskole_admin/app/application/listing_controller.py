from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Hashable, Mapping, Sequence

from kjoreskole_admin.app.application import listing_state
from kjoreskole_admin.app.application.bulk_actions import (
    BULK_KINDS,
    BulkActionRequest,
    BulkItemResult,
    BulkKind,
    BulkResult,
    PendingBulkAction,
    execute_bulk,
)
from kjoreskole_admin.app.application.listing_state import ListingState
from kjoreskole_admin.app.application.mutation_attempts import begin_mutation, end_mutation
from kjoreskole_admin.app.context_store import load_module_context, save_module_context
from kjoreskole_admin.app.infrastructure.errors.error_mapper import ErrorMapper
from kjoreskole_admin.app.infrastructure.logging.logger import get_logger, log_action
from kjoreskole_admin.app.resources import ResourceDefinition
from kjoreskole_admin.app.ui.filters import facet_options
from kjoreskole_admin.app.ui.listing_view import (
    ListingViewState,
    SortState,
    default_view_state,
    hydrate_view_state,
    serialize_view_state,
)
from kjoreskole_admin.app.ui.view_model import ViewModel, ViewModelAssembler
from kjoreskole_admin.clients.kjoreskole_sdk.errors import ApiError
from kjoreskole_admin.clients.kjoreskole_sdk.idempotency import generate_idempotency_key
from kjoreskole_admin.clients.kjoreskole_sdk.resources_client import ResourceClient

_BULK_OPERATION = "bulk"
_PERSISTABLE = (str, int, float, bool, list)


class ListingController:
    """Page-level store for one managed collection.

    Owns the fetched records and the listing state. Every transition goes
    through a reducer in :mod:`listing_state`; the controller only adds the
    side effects (fetching, bulk calls, logging, persistence).
    """

    def __init__(
        self,
        resource: ResourceDefinition,
        client: ResourceClient,
        *,
        export_dir: str = "out/exports",
        context_path: str | Path | None = None,
        stop_on_error: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        self.resource = resource
        self.client = client
        self.export_dir = export_dir
        self.context_path = context_path
        self.stop_on_error = stop_on_error
        self.logger = logger or get_logger("kjoreskole_admin.listing")

        self.records: list[dict[str, Any]] = []
        self.raw_version = 0
        self.state = ListingState(sort=resource.default_sort)
        self.view_state: ListingViewState = default_view_state(list(resource.columns), resource.default_sort)
        self.loading = False
        self.load_error: dict[str, Any] | None = None
        self.last_bulk_result: BulkResult | None = None
        self.row_error: dict[str, Any] | None = None

        self._generation = 0
        self._bulk_in_flight: set[str] = set()
        self._row_in_flight: set[str] = set()
        self._assembler = ViewModelAssembler(resource)

    # -- fetching -------------------------------------------------------------

    def begin_load(self) -> int:
        self._generation += 1
        self.loading = True
        return self._generation

    def complete_load(self, token: int, rows: Sequence[Mapping[str, Any]]) -> bool:
        if token != self._generation:
            log_action(self.logger, self.resource.name, "load", "stale_discarded", token=token, current=self._generation)
            return False
        self.loading = False
        self.load_error = None
        self._replace_records([dict(row) for row in rows])
        self.state = listing_state.retain_selection(self.state, self._record_ids())
        log_action(self.logger, self.resource.name, "load", "success", count=len(self.records))
        return True

    def fail_load(self, token: int, error: Exception) -> bool:
        if token != self._generation:
            return False
        self.loading = False
        self.load_error = ErrorMapper.to_payload(error)
        self._replace_records([])
        log_action(
            self.logger,
            self.resource.name,
            "load",
            "error",
            level=logging.ERROR,
            code=self.load_error["code"],
            trace_id=self.load_error["trace_id"],
        )
        return True

    def load(self) -> bool:
        token = self.begin_load()
        try:
            rows = self.client.list()
        except ApiError as error:
            self.fail_load(token, error)
            return False
        return self.complete_load(token, rows)

    def retry(self) -> bool:
        return self.load()

    # -- listing state ----------------------------------------------------------

    def set_filter(self, key: str, value: Any) -> None:
        self._apply(listing_state.set_filter(self.state, key, value))

    def set_filters(self, values: Mapping[str, Any]) -> None:
        self._apply(listing_state.set_filters(self.state, values))

    def clear_filters(self) -> None:
        self._apply(listing_state.clear_filters(self.state, self.resource.default_sort))

    def sort_by(self, field_name: str) -> None:
        if field_name not in self.resource.sort_fields:
            return
        self._apply(listing_state.sort_by(self.state, field_name))

    def set_sort(self, sort: SortState) -> None:
        self._apply(listing_state.set_sort(self.state, sort))

    def set_page(self, page: int) -> None:
        self._apply(listing_state.set_page(self.state, page))

    def set_page_size(self, page_size: int) -> None:
        self._apply(listing_state.set_page_size(self.state, page_size))

    def toggle(self, record_id: Hashable) -> None:
        if record_id not in self._record_ids():
            return
        self.state = listing_state.toggle_row(self.state, record_id)

    def toggle_page(self) -> None:
        self.state = listing_state.toggle_page(self.state, self.view_model().page_ids)

    def clear_selection(self) -> None:
        self.state = listing_state.clear_selection(self.state)

    def set_visible_columns(self, keys: Sequence[str]) -> None:
        payload = serialize_view_state(self.view_state)
        payload["visible_columns"] = list(keys)
        self.view_state = hydrate_view_state(payload, list(self.resource.columns))

    # -- projection -------------------------------------------------------------

    def view_model(self) -> ViewModel:
        return self._assembler.build(
            self.records,
            self.state.filters,
            self.state.sort,
            self.state.pagination.page,
            self.state.pagination.page_size,
            self.state.selection,
            raw_version=self.raw_version,
        )

    def filter_options(self) -> dict[str, list[Any]]:
        return {key: facet_options(self.records, accessor) for key, accessor in self.resource.facets.items()}

    # -- bulk actions -----------------------------------------------------------

    def request_bulk(self, kind: BulkKind) -> PendingBulkAction | None:
        if kind not in BULK_KINDS:
            raise ValueError(f"Ukjent massehandling: {kind}")
        if not self.state.selection.ids or _BULK_OPERATION in self._bulk_in_flight:
            return None
        request = BulkActionRequest(kind=kind, target_ids=self.state.selection.ids)
        return PendingBulkAction(request, self._run_bulk)

    def _run_bulk(self, request: BulkActionRequest) -> BulkResult:
        if not begin_mutation(self._bulk_in_flight, _BULK_OPERATION):
            return BulkResult(
                kind=request.kind,
                items=[BulkItemResult(record_id=record_id, result="skipped", code="IN_PROGRESS") for record_id in request.target_ids],
                aborted=True,
            )
        try:
            result = execute_bulk(
                request,
                self.records,
                self.client,
                self.resource,
                stop_on_error=self.stop_on_error,
                export_dir=self.export_dir,
                logger=self.logger,
            )
        finally:
            end_mutation(self._bulk_in_flight, _BULK_OPERATION)

        self._apply_bulk_result(result)
        self.last_bulk_result = result
        if result.reload_needed:
            self.load()
        return result

    def _apply_bulk_result(self, result: BulkResult) -> None:
        succeeded = set(result.succeeded_ids)
        if result.kind == "delete" and succeeded:
            self._replace_records([record for record in self.records if self.resource.record_id(record) not in succeeded])
        elif result.kind == "copy" and result.created_records:
            self._replace_records(result.created_records + self.records)

        if result.ok:
            state = listing_state.clear_selection(self.state)
        else:
            state = listing_state.prune_selection(self.state, succeeded)
        self._apply(listing_state.retain_selection(state, self._record_ids()))

    # -- row actions ------------------------------------------------------------

    def delete_record(self, record_id: Hashable) -> bool:
        """Delete one row (the per-row trash button); confirmation is the caller's job."""
        if self._find(record_id) is None:
            return False
        done, _ = self._run_row("delete", record_id, lambda: self.client.delete(record_id))
        if not done:
            return False
        self._replace_records([record for record in self.records if self.resource.record_id(record) != record_id])
        self._apply(listing_state.prune_selection(self.state, [record_id]))
        return True

    def copy_record(self, record_id: Hashable) -> bool:
        record = self._find(record_id)
        if record is None:
            return False
        payload = self.resource.build_copy_payload(record)
        idempotency_key = generate_idempotency_key(f"{self.resource.name}-copy-{record_id}")
        done, created = self._run_row("copy", record_id, lambda: self.client.create(payload, idempotency_key=idempotency_key))
        if not done:
            return False
        if created and self.resource.record_id(created) is not None:
            self._replace_records([created] + self.records)
        else:
            self.load()
        return True

    def update_record(self, record_id: Hashable, changes: Mapping[str, Any]) -> bool:
        record = self._find(record_id)
        if record is None:
            return False
        done, updated = self._run_row("update", record_id, lambda: self.client.update(record_id, dict(changes)))
        if not done:
            return False
        merged = {**record, **changes, **(updated or {}), self.resource.id_field: record_id}
        self._replace_records([merged if self.resource.record_id(row) == record_id else row for row in self.records])
        return True

    def _run_row(self, action: str, record_id: Hashable, call: Callable[[], Any]) -> tuple[bool, Any]:
        operation = f"row-{action}-{record_id}"
        if not begin_mutation(self._row_in_flight, operation):
            return False, None
        try:
            response = call()
        except ApiError as error:
            self.row_error = ErrorMapper.to_payload(error)
            log_action(
                self.logger,
                self.resource.name,
                action,
                "error",
                level=logging.ERROR,
                record_id=record_id,
                code=self.row_error["code"],
                trace_id=self.row_error["trace_id"],
            )
            return False, None
        finally:
            end_mutation(self._row_in_flight, operation)
        self.row_error = None
        log_action(self.logger, self.resource.name, action, "success", record_id=record_id)
        return True, response

    # -- persistence ------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        view = replace(
            self.view_state,
            sort_by=self.state.sort.field if self.state.sort.is_active else None,
            sort_dir=self.state.sort.direction,
        )
        return {
            "filters": {key: value for key, value in self.state.filters.items() if isinstance(value, _PERSISTABLE)},
            "page_size": self.state.pagination.page_size,
            "view": serialize_view_state(view),
        }

    def restore(self, snapshot: Mapping[str, Any]) -> None:
        if not snapshot:
            return
        self.view_state = hydrate_view_state(
            snapshot.get("view"),
            list(self.resource.columns),
            sortable=list(self.resource.sort_fields),
        )
        state = ListingState(
            sort=SortState(field=self.view_state.sort_by, direction=self.view_state.sort_dir)
            if self.view_state.sort_by
            else self.resource.default_sort,
        )
        filters = snapshot.get("filters")
        if isinstance(filters, dict):
            state = listing_state.set_filters(state, {key: value for key, value in filters.items() if key in self.resource.filters})
        page_size = snapshot.get("page_size")
        if isinstance(page_size, int):
            state = listing_state.set_page_size(state, page_size)
        self._apply(state)

    def save_context(self) -> None:
        save_module_context(self.resource.name, self.snapshot(), self.context_path)

    def restore_context(self) -> None:
        self.restore(load_module_context(self.resource.name, self.context_path))

    # -- internals --------------------------------------------------------------

    def _apply(self, state: ListingState) -> None:
        self.state = state
        total = self.view_model().total_items
        self.state = listing_state.set_total(self.state, total)

    def _replace_records(self, records: list[dict[str, Any]]) -> None:
        self.records = records
        self.raw_version += 1
        self._apply(self.state)

    def _record_ids(self) -> set[Any]:
        return {self.resource.record_id(record) for record in self.records}

    def _find(self, record_id: Hashable) -> dict[str, Any] | None:
        return next((record for record in self.records if self.resource.record_id(record) == record_id), None)
