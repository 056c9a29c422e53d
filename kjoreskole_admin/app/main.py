from __future__ import annotations

import argparse
from datetime import date
from typing import Any, Callable, Sequence

from kjoreskole_admin.app.application.bulk_actions import BULK_KINDS
from kjoreskole_admin.app.application.listing_controller import ListingController
from kjoreskole_admin.app.config import APP_VERSION, PAGE_SIZE_OPTIONS, Settings, load_settings
from kjoreskole_admin.app.infrastructure.errors.error_mapper import ErrorMapper
from kjoreskole_admin.app.infrastructure.logging.logger import configure_logging
from kjoreskole_admin.app.resources import RESOURCES, SEARCH_KEY, ResourceDefinition, get_resource
from kjoreskole_admin.app.ui.filters import AnyOf, DateRange, NumericRange, Period, Range, TriState, parse_tri_state
from kjoreskole_admin.app.ui.listing_view import SortState
from kjoreskole_admin.app.ui.table_printer import print_table
from kjoreskole_admin.clients.kjoreskole_sdk.http_client import HttpClient
from kjoreskole_admin.clients.kjoreskole_sdk.resources_client import ResourceClient

_CONFIRM_ANSWERS = {"j", "ja", "y", "yes"}
ROW_ACTIONS = ("delete", "copy")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kjoreskole-admin", description="Listevisning og massehandlinger mot kjøreskole-API-et")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("--env-file", default=".env")
    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="Vis en filtrert, sortert side")
    list_cmd.add_argument("resource", choices=sorted(RESOURCES))
    list_cmd.add_argument("--search", default="")
    list_cmd.add_argument("--filter", action="append", default=[], metavar="KEY=VALUE")
    list_cmd.add_argument("--sort")
    list_cmd.add_argument("--desc", action="store_true")
    list_cmd.add_argument("--page", type=int, default=1)
    list_cmd.add_argument("--limit", type=int, choices=PAGE_SIZE_OPTIONS)
    list_cmd.add_argument("--save-context", action="store_true")

    bulk_cmd = commands.add_parser("bulk", help="Slett, kopier eller eksporter valgte elementer")
    bulk_cmd.add_argument("resource", choices=sorted(RESOURCES))
    bulk_cmd.add_argument("action", choices=BULK_KINDS)
    bulk_cmd.add_argument("--ids", required=True, help="Kommaseparerte id-er")
    bulk_cmd.add_argument("--yes", action="store_true", help="Hopp over bekreftelse")
    bulk_cmd.add_argument("--best-effort", action="store_true", help="Fortsett etter feil")
    row_cmd = commands.add_parser("row", help="Slett eller kopier ett element")
    row_cmd.add_argument("resource", choices=sorted(RESOURCES))
    row_cmd.add_argument("action", choices=ROW_ACTIONS)
    row_cmd.add_argument("id")
    row_cmd.add_argument("--yes", action="store_true", help="Hopp over bekreftelse")
    return parser


def parse_filter_args(resource: ResourceDefinition, raw_filters: Sequence[str]) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    for raw in raw_filters:
        if "=" not in raw:
            raise ValueError(f"Ugyldig filter (forventet KEY=VALUE): {raw}")
        key, value = (part.strip() for part in raw.split("=", 1))
        definition = resource.filters.get(key)
        if definition is None:
            raise ValueError(f"Ukjent filter for {resource.name}: {key}")
        filters[key] = _coerce_filter_value(definition, value)
    return filters


def _coerce_filter_value(definition: Any, value: str) -> Any:
    if isinstance(definition, TriState):
        return parse_tri_state(value)
    if isinstance(definition, AnyOf):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(definition, DateRange):
        start, _, end = value.partition("..")
        return Period(
            start=date.fromisoformat(start) if start else None,
            end=date.fromisoformat(end) if end else None,
        )
    if isinstance(definition, NumericRange):
        low, _, high = value.partition("..")
        return Range(min=float(low) if low else None, max=float(high) if high else None)
    return value


def build_controller(resource: ResourceDefinition, settings: Settings, http_client: HttpClient | None = None, stop_on_error: bool = True) -> ListingController:
    http_client = http_client or HttpClient(
        settings.API_BASE_URL,
        timeout_seconds=settings.TIMEOUT_SECONDS,
        verify_ssl=settings.VERIFY_SSL,
        retry_max_attempts=settings.RETRY_MAX_ATTEMPTS,
        retry_backoff_ms=settings.RETRY_BACKOFF_MS,
        token=settings.API_TOKEN,
    )
    return ListingController(
        resource,
        ResourceClient(http_client, resource.path),
        export_dir=settings.EXPORT_DIR,
        context_path=settings.CONTEXT_PATH,
        stop_on_error=stop_on_error,
    )


def run_list(args: argparse.Namespace, controller: ListingController) -> int:
    controller.restore_context()
    if not controller.load():
        print(ErrorMapper.format_payload(controller.load_error or {}))
        return 1

    filters = parse_filter_args(controller.resource, args.filter)
    if args.search:
        filters[SEARCH_KEY] = args.search
    if filters:
        controller.set_filters(filters)
    if args.sort:
        controller.set_sort(SortState(field=args.sort, direction="desc" if args.desc else "asc"))
    if args.limit:
        controller.set_page_size(args.limit)
    controller.set_page(args.page)

    columns = [column for column in controller.resource.columns if column.key in controller.view_state.visible_columns]
    print_table(controller.resource.label, controller.view_model(), columns)
    if args.save_context:
        controller.save_context()
    return 0


def run_bulk(args: argparse.Namespace, controller: ListingController, input_fn: Callable[[str], str] = input) -> int:
    if not controller.load():
        print(ErrorMapper.format_payload(controller.load_error or {}))
        return 1

    wanted = {item.strip() for item in args.ids.split(",") if item.strip()}
    for record in controller.records:
        record_id = controller.resource.record_id(record)
        if str(record_id) in wanted:
            controller.toggle(record_id)

    pending = controller.request_bulk(args.action)
    if pending is None:
        print("Ingen av de oppgitte id-ene finnes i listen.")
        return 1

    if not args.yes:
        answer = input_fn(f"Bekreft {args.action} av {pending.target_count} elementer? [j/N]: ").strip().lower()
        if answer not in _CONFIRM_ANSWERS:
            pending.cancel()
            print("Avbrutt – ingen endringer.")
            return 0

    result = pending.confirm()
    summary = result.summary()
    print(f"[{result.kind}] totalt={summary['total']} ok={summary['success']} feilet={summary['failed']} hoppet over={summary['skipped']}")
    for item in result.items:
        if item.result != "success":
            print(f"  id={item.record_id} {item.result} code={item.code} melding={item.message} trace_id={item.trace_id}")
    if result.artifact_path is not None:
        print(f"Eksportert til {result.artifact_path}")
    return 0 if result.ok else 2


def run_row(args: argparse.Namespace, controller: ListingController, input_fn: Callable[[str], str] = input) -> int:
    if not controller.load():
        print(ErrorMapper.format_payload(controller.load_error or {}))
        return 1

    record_id = next(
        (controller.resource.record_id(record) for record in controller.records if str(controller.resource.record_id(record)) == args.id),
        None,
    )
    if record_id is None:
        print(f"Fant ikke id={args.id} i listen.")
        return 1

    if args.action == "delete" and not args.yes:
        answer = input_fn(f"Slette id={record_id}? [j/N]: ").strip().lower()
        if answer not in _CONFIRM_ANSWERS:
            print("Avbrutt – ingen endringer.")
            return 0

    done = controller.delete_record(record_id) if args.action == "delete" else controller.copy_record(record_id)
    if not done:
        print(ErrorMapper.format_payload(controller.row_error or {}))
        return 1
    print("Slettet." if args.action == "delete" else "Kopiert.")
    return 0


def main(argv: Sequence[str] | None = None, http_client: HttpClient | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.env_file)
    configure_logging(settings.LOG_LEVEL)
    resource = get_resource(args.resource)

    if args.command == "list":
        controller = build_controller(resource, settings, http_client)
        try:
            return run_list(args, controller)
        except ValueError as error:
            print(f"Feil: {error}")
            return 1
    if args.command == "row":
        return run_row(args, build_controller(resource, settings, http_client))
    controller = build_controller(resource, settings, http_client, stop_on_error=not args.best_effort)
    return run_bulk(args, controller)


if __name__ == "__main__":
    raise SystemExit(main())
