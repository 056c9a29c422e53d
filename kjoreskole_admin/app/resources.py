from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Mapping

from kjoreskole_admin.app.ui.filters import (
    AnyOf,
    Contains,
    DateRange,
    Exact,
    FilterDef,
    TextSearch,
    TriState,
    any_true,
    count,
    field,
    joined,
    ranked,
)
from kjoreskole_admin.app.ui.listing_view import ColumnDef, SortField, SortState

SEARCH_KEY = "search"

TASK_STATUSES = ("IKKE_PAABEGYNT", "PAABEGYNT", "I_PROGRESJON", "FERDIG", "AVBRUTT")
TASK_PRIORITIES = ("LAV", "MEDIUM", "HOY", "KRITISK")


@dataclass(frozen=True)
class ResourceDefinition:
    """Static description of one managed collection.

    Everything the listing needs to know about a record type is resolved
    here once: which fields the free-text search covers, which filters and
    sort keys exist, and how a record is copied.
    """

    name: str
    path: str
    label: str
    filters: Mapping[str, FilterDef]
    sort_fields: Mapping[str, SortField]
    columns: tuple[ColumnDef, ...]
    name_field: str
    default_sort: SortState = SortState()
    id_field: str = "id"
    copy_exclude: frozenset[str] = frozenset({"id", "opprettet", "oppdatert", "createdAt", "updatedAt"})
    facets: Mapping[str, Any] = dataclass_field(default_factory=dict)

    def record_id(self, record: Mapping[str, Any]) -> Any:
        return record.get(self.id_field)

    def build_copy_payload(self, record: Mapping[str, Any], suffix: str = " (kopi)") -> dict[str, Any]:
        payload = {key: value for key, value in record.items() if key not in self.copy_exclude}
        payload[self.name_field] = f"{record.get(self.name_field) or ''}{suffix}"
        return payload


SJEKKPUNKT = ResourceDefinition(
    name="sjekkpunkt",
    path="/sjekkpunkt",
    label="Sjekkpunkter",
    filters={
        SEARCH_KEY: TextSearch((field("tittel"), field("beskrivelse"), field("system"), field("id"))),
        "system": Exact(field("system")),
        "typeKontroll": Exact(field("typeKontroll")),
        "forerkortklass": Contains(field("forerkortklass")),
        "harIntervallKm": TriState(field("intervallKm")),
        "harIntervallTid": TriState(field("intervallTid")),
        "erKjoretoySpesifikk": TriState(any_true("unikForType", "unikForMerke", "unikForRegnr")),
    },
    sort_fields={
        "tittel": SortField(field("tittel")),
        "system": SortField(field("system")),
        "typeKontroll": SortField(field("typeKontroll")),
        "opprettet": SortField(field("opprettet"), kind="date"),
    },
    columns=(
        ColumnDef("id", "ID"),
        ColumnDef("tittel", "Tittel"),
        ColumnDef("system", "System"),
        ColumnDef("typeKontroll", "Type"),
        ColumnDef("forerkortklass", "Førerkortklasse"),
        ColumnDef("opprettet", "Opprettet"),
    ),
    name_field="tittel",
    facets={
        "system": field("system"),
        "typeKontroll": field("typeKontroll"),
        "forerkortklass": field("forerkortklass"),
    },
)

SIKKERHETSKONTROLL = ResourceDefinition(
    name="sikkerhetskontroll",
    path="/sikkerhetskontroll",
    label="Sikkerhetskontroller",
    filters={
        SEARCH_KEY: TextSearch(
            (
                field("navn"),
                field("beskrivelse"),
                field("bedrift.navn"),
                joined("opprettetAv.fornavn", "opprettetAv.etternavn"),
                field("id"),
            )
        ),
        "bedrift": Exact(field("bedrift.navn")),
        "opprettetAv": Exact(joined("opprettetAv.fornavn", "opprettetAv.etternavn")),
        "antallSjekkpunkter": Exact(count("punkter")),
    },
    sort_fields={
        "navn": SortField(field("navn")),
        "bedrift": SortField(field("bedrift.navn")),
        "opprettet": SortField(field("opprettet"), kind="date"),
        "antallSjekkpunkter": SortField(count("punkter"), kind="number"),
    },
    columns=(
        ColumnDef("id", "ID"),
        ColumnDef("navn", "Navn"),
        ColumnDef("bedrift", "Bedrift", field("bedrift.navn")),
        ColumnDef("opprettetAv", "Opprettet av", joined("opprettetAv.fornavn", "opprettetAv.etternavn")),
        ColumnDef("antallSjekkpunkter", "Sjekkpunkter", count("punkter")),
        ColumnDef("opprettet", "Opprettet"),
    ),
    name_field="navn",
    default_sort=SortState(field="opprettet", direction="desc"),
    copy_exclude=frozenset({"id", "opprettet", "oppdatert", "opprettetAv", "bedrift"}),
    facets={
        "bedrift": field("bedrift.navn"),
        "opprettetAv": joined("opprettetAv.fornavn", "opprettetAv.etternavn"),
        "antallSjekkpunkter": count("punkter"),
    },
)

OPPGAVER = ResourceDefinition(
    name="oppgaver",
    path="/oppgaver",
    label="Oppgaver",
    filters={
        SEARCH_KEY: TextSearch((field("tittel"), field("beskrivelse"), field("kategori"))),
        "status": AnyOf(field("status")),
        "prioritet": AnyOf(field("prioritet")),
        "kategori": AnyOf(field("kategori")),
        "forfallsdato": DateRange(field("forfallsdato")),
    },
    sort_fields={
        "tittel": SortField(field("tittel")),
        "status": SortField(ranked("status", TASK_STATUSES), kind="number"),
        "prioritet": SortField(ranked("prioritet", TASK_PRIORITIES), kind="number"),
        "forfallsdato": SortField(field("forfallsdato"), kind="date"),
        "opprettet": SortField(field("opprettet"), kind="date"),
    },
    columns=(
        ColumnDef("id", "ID"),
        ColumnDef("tittel", "Tittel"),
        ColumnDef("status", "Status"),
        ColumnDef("prioritet", "Prioritet"),
        ColumnDef("kategori", "Kategori"),
        ColumnDef("forfallsdato", "Forfall"),
    ),
    name_field="tittel",
    default_sort=SortState(field="opprettet", direction="desc"),
    facets={"kategori": field("kategori")},
)

RESOURCES: dict[str, ResourceDefinition] = {
    definition.name: definition for definition in (SJEKKPUNKT, SIKKERHETSKONTROLL, OPPGAVER)
}


def get_resource(name: str) -> ResourceDefinition:
    try:
        return RESOURCES[name]
    except KeyError:
        raise KeyError(f"Ukjent ressurs: {name}") from None
