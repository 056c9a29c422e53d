from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Literal, Mapping, Sequence

from kjoreskole_admin.app.export.json_exporter import export_records
from kjoreskole_admin.app.infrastructure.logging.logger import get_logger, log_action
from kjoreskole_admin.app.resources import ResourceDefinition
from kjoreskole_admin.clients.kjoreskole_sdk.errors import ApiError
from kjoreskole_admin.clients.kjoreskole_sdk.idempotency import generate_idempotency_key
from kjoreskole_admin.clients.kjoreskole_sdk.resources_client import ResourceClient

BulkKind = Literal["delete", "export", "copy"]
ItemOutcome = Literal["success", "error", "skipped"]

BULK_KINDS: tuple[BulkKind, ...] = ("delete", "export", "copy")

_LOGGER = get_logger("kjoreskole_admin.bulk")


@dataclass(frozen=True)
class BulkActionRequest:
    kind: BulkKind
    target_ids: frozenset

    def __post_init__(self) -> None:
        if self.kind not in BULK_KINDS:
            raise ValueError(f"Ukjent massehandling: {self.kind}")


@dataclass(frozen=True)
class BulkItemResult:
    record_id: Any
    result: ItemOutcome
    code: str | None = None
    message: str | None = None
    trace_id: str | None = None
    created: dict[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record_id,
            "result": self.result,
            "code": self.code,
            "message": self.message,
            "trace_id": self.trace_id,
        }


@dataclass
class BulkResult:
    kind: BulkKind
    items: list[BulkItemResult] = field(default_factory=list)
    aborted: bool = False
    artifact_path: Path | None = None
    reload_needed: bool = False

    @property
    def succeeded_ids(self) -> list[Any]:
        return [item.record_id for item in self.items if item.result == "success"]

    @property
    def failed_ids(self) -> list[Any]:
        return [item.record_id for item in self.items if item.result == "error"]

    @property
    def skipped_ids(self) -> list[Any]:
        return [item.record_id for item in self.items if item.result == "skipped"]

    @property
    def created_records(self) -> list[dict[str, Any]]:
        return [item.created for item in self.items if item.created is not None]

    @property
    def ok(self) -> bool:
        return not self.failed_ids and not self.skipped_ids

    def summary(self) -> dict[str, int]:
        return summarize_bulk_results([item.as_dict() for item in self.items])


def summarize_bulk_results(results: Iterable[Mapping[str, Any]]) -> dict[str, int]:
    results = list(results)
    success = sum(1 for item in results if item.get("result") == "success")
    skipped = sum(1 for item in results if item.get("result") == "skipped")
    return {
        "total": len(results),
        "success": success,
        "failed": len(results) - success - skipped,
        "skipped": skipped,
    }


def execute_bulk(
    request: BulkActionRequest,
    records: Sequence[Mapping[str, Any]],
    client: ResourceClient,
    resource: ResourceDefinition,
    *,
    stop_on_error: bool = True,
    export_dir: str = "out/exports",
    logger: logging.Logger | None = None,
) -> BulkResult:
    """Run one confirmed bulk action.

    Targets are processed one at a time in collection order. With
    ``stop_on_error`` the first failure ends the run and every remaining
    target is reported as ``skipped``; without it every target is attempted.
    Nothing is rolled back: the result lists exactly which ids succeeded.
    """
    logger = logger or _LOGGER
    targets = [record for record in records if resource.record_id(record) in request.target_ids]
    known_ids = {resource.record_id(record) for record in targets}
    result = BulkResult(kind=request.kind)

    for missing_id in sorted(request.target_ids - known_ids, key=str):
        result.items.append(
            BulkItemResult(record_id=missing_id, result="skipped", code="NOT_IN_COLLECTION", message="Finnes ikke i listen.")
        )

    if request.kind == "export":
        result.artifact_path = export_records(module=resource.name, records=targets, output_dir=export_dir)
        result.items.extend(BulkItemResult(record_id=resource.record_id(record), result="success") for record in targets)
        _log_bulk(logger, resource, result)
        return result

    operation = _OPERATIONS[request.kind]
    for index, record in enumerate(targets):
        record_id = resource.record_id(record)
        try:
            created = operation(client, resource, record)
        except ApiError as error:
            result.items.append(
                BulkItemResult(
                    record_id=record_id,
                    result="error",
                    code=error.code,
                    message=error.message,
                    trace_id=error.trace_id,
                )
            )
            if stop_on_error:
                result.aborted = True
                result.items.extend(
                    BulkItemResult(record_id=resource.record_id(rest), result="skipped", code="ABORTED")
                    for rest in targets[index + 1 :]
                )
                break
            continue
        if request.kind == "copy" and created is None:
            result.reload_needed = True
        result.items.append(BulkItemResult(record_id=record_id, result="success", created=created))

    _log_bulk(logger, resource, result)
    return result


def _delete(client: ResourceClient, resource: ResourceDefinition, record: Mapping[str, Any]) -> None:
    client.delete(resource.record_id(record))
    return None


def _copy(client: ResourceClient, resource: ResourceDefinition, record: Mapping[str, Any]) -> dict[str, Any]:
    payload = resource.build_copy_payload(record)
    idempotency_key = generate_idempotency_key(f"{resource.name}-copy-{resource.record_id(record)}")
    created = client.create(payload, idempotency_key=idempotency_key)
    # 201/204 without a body gives nothing to insert locally
    return created if created and resource.record_id(created) is not None else None


_OPERATIONS: dict[str, Callable[[ResourceClient, ResourceDefinition, Mapping[str, Any]], dict[str, Any] | None]] = {
    "delete": _delete,
    "copy": _copy,
}


def _log_bulk(logger: logging.Logger, resource: ResourceDefinition, result: BulkResult) -> None:
    summary = result.summary()
    log_action(
        logger,
        module=resource.name,
        action=f"bulk_{result.kind}",
        outcome="success" if result.ok else ("aborted" if result.aborted else "partial"),
        level=logging.INFO if result.ok else logging.WARNING,
        **summary,
        failed_ids=result.failed_ids,
    )


class PendingBulkAction:
    """A bulk action waiting for the user's confirmation."""

    def __init__(self, request: BulkActionRequest, execute: Callable[[BulkActionRequest], BulkResult]) -> None:
        self.request = request
        self._execute = execute
        self.status: Literal["pending", "confirmed", "cancelled"] = "pending"
        self.result: BulkResult | None = None

    @property
    def target_count(self) -> int:
        return len(self.request.target_ids)

    def confirm(self) -> BulkResult:
        if self.status == "cancelled":
            raise RuntimeError("Massehandlingen er avbrutt")
        if self.result is None:
            self.status = "confirmed"
            self.result = self._execute(self.request)
        return self.result

    def cancel(self) -> None:
        if self.status == "pending":
            self.status = "cancelled"
