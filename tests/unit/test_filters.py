from datetime import date

from kjoreskole_admin.app.resources import OPPGAVER, SEARCH_KEY, SIKKERHETSKONTROLL, SJEKKPUNKT
from kjoreskole_admin.app.ui.filters import (
    Exact,
    NumericRange,
    Period,
    Range,
    apply_filters,
    clean_filters,
    collation_key,
    count,
    facet_options,
    field,
    joined,
    parse_tri_state,
)


def _controls():
    return [
        {
            "id": 1,
            "navn": "Vårsjekk",
            "beskrivelse": "Før sesongen",
            "bedrift": {"navn": "Trygg Kontroll AS"},
            "opprettetAv": {"fornavn": "Kari", "etternavn": "Nordmann"},
            "punkter": [{"id": 1}, {"id": 2}],
        },
        {
            "id": 2,
            "navn": "Bremser",
            "beskrivelse": "Bremseskiver og klosser",
            "bedrift": {"navn": "Bilverksted Nord"},
            "opprettetAv": {"fornavn": "Ola", "etternavn": "Hansen"},
            "punkter": [],
        },
        {
            "id": 3,
            "navn": "Lys",
            "beskrivelse": None,
            "bedrift": None,
            "opprettetAv": None,
            "punkter": [{"id": 1}, {"id": 2}, {"id": 3}, {"id": 4}, {"id": 5}],
        },
    ]


def _checkpoints():
    return [
        {"id": 10, "tittel": "Dekk", "system": "Hjul", "forerkortklass": ["B", "BE"], "intervallKm": 10000, "intervallTid": None, "unikForType": False},
        {"id": 11, "tittel": "Olje", "system": "Motor", "forerkortklass": ["C"], "intervallKm": None, "intervallTid": 12, "unikForMerke": True},
        {"id": 12, "tittel": "Vindusvisker", "system": "Karosseri", "forerkortklass": [], "intervallKm": None, "intervallTid": None},
    ]


def test_empty_filter_set_returns_every_record_in_order() -> None:
    rows = _controls()

    assert apply_filters(rows, {}, SIKKERHETSKONTROLL.filters) == rows
    assert apply_filters(rows, {SEARCH_KEY: "  ", "bedrift": None}, SIKKERHETSKONTROLL.filters) == rows


def test_search_matches_when_only_company_name_contains_the_term() -> None:
    matched = apply_filters(_controls(), {SEARCH_KEY: "kontroll"}, SIKKERHETSKONTROLL.filters)

    assert [row["id"] for row in matched] == [1]


def test_search_is_case_insensitive_and_covers_creator_name() -> None:
    matched = apply_filters(_controls(), {SEARCH_KEY: "OLA HANSEN"}, SIKKERHETSKONTROLL.filters)

    assert [row["id"] for row in matched] == [2]


def test_filter_keys_combine_with_and() -> None:
    filters = {SEARCH_KEY: "e", "bedrift": "Bilverksted Nord"}

    matched = apply_filters(_controls(), filters, SIKKERHETSKONTROLL.filters)

    assert [row["id"] for row in matched] == [2]


def test_unknown_filter_keys_are_ignored() -> None:
    rows = _controls()

    assert apply_filters(rows, {"finnesIkke": "x"}, SIKKERHETSKONTROLL.filters) == rows


def test_derived_count_filter_accepts_text_numbers() -> None:
    schema = SIKKERHETSKONTROLL.filters

    assert [row["id"] for row in apply_filters(_controls(), {"antallSjekkpunkter": "5"}, schema)] == [3]
    assert [row["id"] for row in apply_filters(_controls(), {"antallSjekkpunkter": 0}, schema)] == [2]
    assert len(apply_filters(_controls(), {"antallSjekkpunkter": "mange"}, schema)) == 3


def test_tri_state_distinguishes_any_from_false() -> None:
    schema = SJEKKPUNKT.filters

    assert [row["id"] for row in apply_filters(_checkpoints(), {"harIntervallKm": True}, schema)] == [10]
    assert [row["id"] for row in apply_filters(_checkpoints(), {"harIntervallKm": "nei"}, schema)] == [11, 12]
    assert len(apply_filters(_checkpoints(), {"harIntervallKm": "alle"}, schema)) == 3


def test_vehicle_specific_tri_state_checks_any_flag() -> None:
    matched = apply_filters(_checkpoints(), {"erKjoretoySpesifikk": True}, SJEKKPUNKT.filters)

    assert [row["id"] for row in matched] == [11]


def test_licence_class_filter_checks_list_membership() -> None:
    matched = apply_filters(_checkpoints(), {"forerkortklass": "BE"}, SJEKKPUNKT.filters)

    assert [row["id"] for row in matched] == [10]


def test_any_of_and_date_range_on_tasks() -> None:
    tasks = [
        {"id": 1, "status": "PAABEGYNT", "forfallsdato": "2024-03-01"},
        {"id": 2, "status": "FERDIG", "forfallsdato": "2024-03-15T10:00:00"},
        {"id": 3, "status": "IKKE_PAABEGYNT", "forfallsdato": None},
        {"id": 4, "status": "PAABEGYNT", "forfallsdato": "2024-04-02"},
    ]
    schema = OPPGAVER.filters

    by_status = apply_filters(tasks, {"status": ["PAABEGYNT", "FERDIG"]}, schema)
    in_march = apply_filters(tasks, {"forfallsdato": Period(start=date(2024, 3, 1), end=date(2024, 3, 31))}, schema)

    assert [row["id"] for row in by_status] == [1, 2, 4]
    assert [row["id"] for row in in_march] == [1, 2]
    assert len(apply_filters(tasks, {"forfallsdato": Period()}, schema)) == 4


def test_numeric_range_bounds_are_inclusive() -> None:
    schema = {"punkter": NumericRange(count("punkter"))}

    matched = apply_filters(_controls(), {"punkter": Range(min=2, max=5)}, schema)

    assert [row["id"] for row in matched] == [1, 3]


def test_exact_on_dotted_path_skips_missing_parent() -> None:
    schema = {"bedrift": Exact(field("bedrift.navn"))}

    matched = apply_filters(_controls(), {"bedrift": "Trygg Kontroll AS"}, schema)

    assert [row["id"] for row in matched] == [1]


def test_joined_accessor_skips_empty_parts() -> None:
    accessor = joined("fornavn", "etternavn")

    assert accessor({"fornavn": "Kari", "etternavn": None}) == "Kari"
    assert accessor({}) == ""


def test_facet_options_are_unique_and_sorted() -> None:
    assert facet_options(_controls(), field("bedrift.navn")) == ["Bilverksted Nord", "Trygg Kontroll AS"]
    assert facet_options(_controls(), count("punkter")) == [0, 2, 5]
    assert facet_options(_checkpoints(), field("forerkortklass")) == ["B", "BE", "C"]


def test_norwegian_letters_sort_after_z() -> None:
    words = ["Ålesund", "Ørsta", "Zeta", "Ærø", "alta"]

    assert sorted(words, key=collation_key) == ["alta", "Zeta", "Ærø", "Ørsta", "Ålesund"]


def test_parse_tri_state_and_clean_filters() -> None:
    assert parse_tri_state("ja") is True
    assert parse_tri_state("Nei") is False
    assert parse_tri_state("") is None
    assert clean_filters({"a": "", "b": [], "c": 0, "d": False, "e": Range()}) == {"c": 0, "d": False}
