import json

import pytest

from kjoreskole_admin.app.application.bulk_actions import (
    BulkActionRequest,
    PendingBulkAction,
    execute_bulk,
    summarize_bulk_results,
)
from kjoreskole_admin.app.resources import SIKKERHETSKONTROLL, SJEKKPUNKT
from kjoreskole_admin.clients.kjoreskole_sdk.errors import ApiError


class FakeClient:
    def __init__(self, failing_ids=()):
        self.failing_ids = set(failing_ids)
        self.deleted = []
        self.created = []
        self.keys = []

    def delete(self, record_id):
        if record_id in self.failing_ids:
            raise ApiError(code="CONFLICT", message="i bruk", trace_id=f"trace-{record_id}", status_code=409)
        self.deleted.append(record_id)

    def create(self, payload, idempotency_key=None):
        if payload.get("tittel", "").startswith("Feil"):
            raise ApiError(code="VALIDATION_ERROR", message="ugyldig", status_code=422)
        self.created.append(payload)
        self.keys.append(idempotency_key)
        return {"id": 100 + len(self.created), **payload}


def _records():
    return [
        {"id": 1, "tittel": "Dekk", "opprettet": "2024-01-01"},
        {"id": 2, "tittel": "Olje", "opprettet": "2024-01-02"},
        {"id": 3, "tittel": "Lys", "opprettet": "2024-01-03"},
    ]


def test_delete_stops_at_first_failure_and_skips_the_rest() -> None:
    client = FakeClient(failing_ids={2})
    request = BulkActionRequest(kind="delete", target_ids=frozenset({1, 2, 3}))

    result = execute_bulk(request, _records(), client, SJEKKPUNKT)

    assert client.deleted == [1]
    assert result.succeeded_ids == [1]
    assert result.failed_ids == [2]
    assert result.skipped_ids == [3]
    assert result.aborted is True
    assert result.ok is False
    failed = result.items[1]
    assert (failed.code, failed.trace_id) == ("CONFLICT", "trace-2")


def test_best_effort_delete_attempts_every_target() -> None:
    client = FakeClient(failing_ids={2})
    request = BulkActionRequest(kind="delete", target_ids=frozenset({1, 2, 3}))

    result = execute_bulk(request, _records(), client, SJEKKPUNKT, stop_on_error=False)

    assert client.deleted == [1, 3]
    assert result.summary() == {"total": 3, "success": 2, "failed": 1, "skipped": 0}
    assert result.aborted is False


def test_targets_follow_collection_order_and_unknown_ids_are_skipped() -> None:
    client = FakeClient()
    request = BulkActionRequest(kind="delete", target_ids=frozenset({3, 1, 99}))

    result = execute_bulk(request, _records(), client, SJEKKPUNKT)

    assert client.deleted == [1, 3]
    assert result.skipped_ids == [99]
    assert result.items[0].code == "NOT_IN_COLLECTION"


def test_copy_suffixes_name_and_strips_server_fields() -> None:
    client = FakeClient()
    request = BulkActionRequest(kind="copy", target_ids=frozenset({1}))

    result = execute_bulk(request, _records(), client, SJEKKPUNKT)

    assert client.created == [{"tittel": "Dekk (kopi)"}]
    assert client.keys[0].startswith("sjekkpunkt-copy-1-")
    assert result.created_records == [{"id": 101, "tittel": "Dekk (kopi)"}]


def test_copy_of_control_drops_owner_and_company() -> None:
    record = {"id": 7, "navn": "Vårsjekk", "bedrift": {"navn": "X"}, "opprettetAv": {"fornavn": "Kari"}, "punkter": [{"id": 1}]}

    payload = SIKKERHETSKONTROLL.build_copy_payload(record)

    assert payload == {"navn": "Vårsjekk (kopi)", "punkter": [{"id": 1}]}


def test_export_writes_selected_records_without_calling_the_api(tmp_path) -> None:
    client = FakeClient()
    request = BulkActionRequest(kind="export", target_ids=frozenset({2, 3}))

    result = execute_bulk(request, _records(), client, SJEKKPUNKT, export_dir=str(tmp_path))

    assert result.ok is True
    assert client.deleted == [] and client.created == []
    assert result.artifact_path.parent == tmp_path
    assert result.artifact_path.name.startswith("sjekkpunkt_")
    exported = json.loads(result.artifact_path.read_text(encoding="utf-8"))
    assert [row["id"] for row in exported] == [2, 3]


def test_unknown_bulk_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        BulkActionRequest(kind="archive", target_ids=frozenset({1}))


def test_pending_action_runs_once_and_cannot_run_after_cancel() -> None:
    calls = []

    def _execute(request):
        calls.append(request)
        return execute_bulk(request, _records(), FakeClient(), SJEKKPUNKT)

    request = BulkActionRequest(kind="delete", target_ids=frozenset({1}))
    pending = PendingBulkAction(request, _execute)
    first = pending.confirm()

    assert pending.confirm() is first
    assert len(calls) == 1
    assert pending.target_count == 1

    cancelled = PendingBulkAction(request, _execute)
    cancelled.cancel()
    with pytest.raises(RuntimeError):
        cancelled.confirm()
    assert len(calls) == 1


def test_summarize_counts_non_success_non_skipped_as_failed() -> None:
    summary = summarize_bulk_results([{"result": "success"}, {"result": "error"}, {"result": "skipped"}, {}])

    assert summary == {"total": 4, "success": 1, "failed": 2, "skipped": 1}
